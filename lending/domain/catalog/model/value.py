from typing import NewType

BookId = NewType("BookId", int)

MIN_STARS = 1
MAX_STARS = 5

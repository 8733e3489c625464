"""Book aggregate for the catalog domain."""

from typing import Self

from pydantic import Field, model_validator

from lending.domain.catalog.model.value import MAX_STARS, MIN_STARS, BookId
from lending.domain.shared.error import ValidationError
from lending.domain.shared.model.aggregate import Aggregate


class Book(Aggregate):
    """A title held by the library, with its copy counts and rating aggregate.

    Invariants:
    - `0 <= available_copies <= total_copies`
    - `avg_rating` is the mean of all `total_ratings` submitted stars
    - `id` is None only until the ledger stores the book for the first time
    """

    id: BookId | None = None
    title: str
    author: str
    total_copies: int = Field(ge=1)
    available_copies: int = Field(ge=0)
    avg_rating: float = 0.0
    total_ratings: int = 0

    @model_validator(mode="after")
    def _available_within_total(self) -> Self:
        if self.available_copies > self.total_copies:
            raise ValueError("available_copies cannot exceed total_copies")
        return self

    @classmethod
    def create(cls, title: str, author: str, total_copies: int) -> "Book":
        if total_copies <= 0:
            raise ValidationError(
                f"Total copies must be positive, got {total_copies}",
                field="total_copies",
            )
        return cls(
            title=title,
            author=author,
            total_copies=total_copies,
            available_copies=total_copies,
        )

    def adjust_availability(self, delta: int) -> None:
        """Shift available copies by `delta`, clamped into [0, total]."""
        self.available_copies = max(0, min(self.total_copies, self.available_copies + delta))

    def record_rating(self, stars: int) -> None:
        if not MIN_STARS <= stars <= MAX_STARS:
            raise ValidationError(
                f"Rating must be between {MIN_STARS} and {MAX_STARS}, got {stars}",
                field="rating",
            )
        self.avg_rating = (self.avg_rating * self.total_ratings + stars) / (self.total_ratings + 1)
        self.total_ratings += 1

    def describe(self) -> str:
        return (
            f"ID: {self.id} | Title: {self.title} | Author: {self.author} "
            f"| Total: {self.total_copies} | Available: {self.available_copies} "
            f"| Rating: {self.avg_rating:.1f}"
        )

"""User aggregate for the membership domain."""

from lending.domain.membership.model.value import UserId
from lending.domain.shared.model.aggregate import Aggregate
from lending.domain.shared.model.value import Timestamp, format_date


class User(Aggregate):
    """A registered borrower.

    `penalty_end` only means something while `is_defaulter` is set. The flag
    is never cleared when the penalty lapses; `is_defaulter_at` is the only
    way to observe the current standing.
    """

    id: UserId
    name: str
    is_defaulter: bool = False
    penalty_end: Timestamp = 0

    def is_defaulter_at(self, now: Timestamp) -> bool:
        return self.is_defaulter and now < self.penalty_end

    def penalize(self, penalty_end: Timestamp) -> None:
        self.is_defaulter = True
        self.penalty_end = penalty_end

    def describe(self) -> str:
        text = f"ID: {self.id} | Name: {self.name}"
        if self.is_defaulter and self.penalty_end > 0:
            text += f" | Defaulter until: {format_date(self.penalty_end)}"
        return text

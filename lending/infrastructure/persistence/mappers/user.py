from typing import Any, Dict

from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId


def row_to_user(row: Dict[str, Any]) -> User:
    """Convert database row to User aggregate."""
    return User(
        id=UserId(row["user_id"]),
        name=row["name"],
        is_defaulter=bool(row.get("is_defaulter")),
        penalty_end=row.get("penalty_end") or 0,
    )


def user_to_dict(user: User) -> Dict[str, Any]:
    """Convert User aggregate to database dict."""
    return {
        "user_id": int(user.id),
        "name": user.name,
        "is_defaulter": user.is_defaulter,
        "penalty_end": user.penalty_end,
    }

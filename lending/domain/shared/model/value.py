from datetime import datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict

Timestamp = int
"""Absolute epoch seconds."""


class ValueObject(BaseModel):
    model_config = ConfigDict(frozen=True)


@runtime_checkable
class Describable(Protocol):
    """Anything that can summarise itself on one line."""

    def describe(self) -> str: ...


def format_date(ts: Timestamp) -> str:
    """Render an epoch timestamp as a local date, or '-' when unset."""
    if ts == 0:
        return "-"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d")

from enum import StrEnum
from typing import NewType

IssueId = NewType("IssueId", int)


class HistoryStatus(StrEnum):
    ISSUED = "issued"
    RETURNED = "returned"
    DEFAULTER = "defaulter"


class AccountStatus(StrEnum):
    """Informational label; issuing is gated by request_issue, not by this."""

    ACTIVE = "active"
    DISABLED = "disabled"


class Standing(StrEnum):
    """Per-user label for roster listings. A held loan takes precedence."""

    ACTIVE = "active"
    DEFAULTER = "defaulter"
    ISSUED = "issued"

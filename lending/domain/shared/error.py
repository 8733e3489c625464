"""Error hierarchy for the lending ledger.

Error layers:
- LendingError: Base class for all lending errors
- DomainError: Business rule violations, validation failures
- InfrastructureError: System-level failures like storage issues

Domain errors never leave partial state behind; callers treat them as no-ops.
The CLI maps them to exit codes in lending.cli.util.runtime.
"""


class LendingError(Exception):
    """Base class for all lending errors."""

    def __init__(self, message: str, code: str | None = None) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(message)


# =============================================================================
# Domain Errors (business rule violations)
# =============================================================================


class DomainError(LendingError):
    """Base class for domain/business errors."""


class ValidationError(DomainError):
    """Input validation failed (bad copy count, out-of-range rating)."""

    def __init__(self, message: str, field: str | None = None) -> None:
        super().__init__(message, code="INVALID_ARGUMENT")
        self.field = field


class NotFoundError(DomainError):
    """Book or user not found."""


class ConflictError(DomainError):
    """Duplicate id, removal blocked by an active loan, or double issue."""


class ForbiddenError(DomainError):
    """Defaulter attempting a checkout while the penalty window is open."""

    def __init__(self, message: str, penalty_end: int) -> None:
        super().__init__(message)
        self.penalty_end = penalty_end


class ExhaustedError(DomainError):
    """No available copies left."""


class NoActiveIssueError(DomainError):
    """Return requested by a user holding no loan."""


# =============================================================================
# Infrastructure Errors (system-level failures)
# =============================================================================


class InfrastructureError(LendingError):
    """Base class for infrastructure/system errors."""


class StorageFailureError(InfrastructureError):
    """Ledger store is unavailable or rejected a write."""


class ConfigurationError(InfrastructureError):
    """System misconfiguration detected."""

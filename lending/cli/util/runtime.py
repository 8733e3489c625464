"""Glue between synchronous CLI commands and the async library."""

import asyncio
import sys
import time
from collections.abc import Awaitable, Callable
from enum import Enum
from typing import TypeVar

from lending.application.di import Library, open_library
from lending.cli.console import get_console
from lending.config import configure_logging, load_config
from lending.domain.shared.error import DomainError, ForbiddenError, InfrastructureError
from lending.domain.shared.model.value import Timestamp, format_date

T = TypeVar("T")


class Role(Enum):
    """Who is driving the CLI. The core itself has no notion of privilege."""

    MEMBER = "member"
    ADMIN = "admin"


def require_admin(role: Role) -> None:
    if role is not Role.ADMIN:
        get_console().error(
            "This command is restricted to administrators",
            hint="Pass --role admin",
        )
        sys.exit(1)


def now() -> Timestamp:
    return int(time.time())


def run(action: Callable[[Library], Awaitable[T]]) -> T:
    """Open the library, run `action` against it and map errors to exit codes."""
    console = get_console()

    async def _main() -> T:
        config = load_config()
        configure_logging(config.logging)
        async with open_library(config) as library:
            return await action(library)

    try:
        return asyncio.run(_main())
    except ForbiddenError as e:
        console.error(e.message, hint=f"Penalty ends {format_date(e.penalty_end)}")
        sys.exit(1)
    except DomainError as e:
        console.error(e.message)
        sys.exit(1)
    except InfrastructureError as e:
        console.error(e.message, hint="Check the ledger configuration and the log output")
        sys.exit(2)

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from dishka import AsyncContainer, make_async_container

from lending.config import Config, load_config
from lending.domain.catalog.service.catalog import Catalog
from lending.domain.circulation.service.circulation import CirculationEngine
from lending.domain.circulation.util.di import LendingProvider
from lending.domain.membership.service.membership import Membership
from lending.infrastructure.persistence.di import PersistenceProvider


def create_container(config: Config | None = None) -> AsyncContainer:
    config = config or load_config()

    return make_async_container(
        PersistenceProvider(),
        LendingProvider(),
        context={Config: config},
    )


@dataclass(frozen=True)
class Library:
    """The services a caller drives."""

    catalog: Catalog
    membership: Membership
    circulation: CirculationEngine


@asynccontextmanager
async def open_library(config: Config | None = None) -> AsyncIterator[Library]:
    """Build the container and load the ledger.

    A clean exit flushes a full snapshot before the container closes.
    """
    container = create_container(config)
    try:
        library = Library(
            catalog=await container.get(Catalog),
            membership=await container.get(Membership),
            circulation=await container.get(CirculationEngine),
        )
        yield library
        await library.circulation.save_all()
    finally:
        await container.close()

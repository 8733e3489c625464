import logging
from typing import AsyncIterable

from dishka import Provider, Scope, from_context, provide
from sqlalchemy.ext.asyncio import AsyncEngine

from lending.config import Config
from lending.domain.shared.port.ledger import LedgerStore
from lending.infrastructure.persistence.database import create_db_engine, create_schema
from lending.infrastructure.persistence.ledger import SqlLedgerStore

logger = logging.getLogger(__name__)


class PersistenceProvider(Provider):
    config = from_context(provides=Config, scope=Scope.APP)

    @provide(scope=Scope.APP)
    async def get_engine(self, config: Config) -> AsyncEngine:
        engine = create_db_engine(config.database)
        if config.database.auto_create:
            await create_schema(engine)
        return engine

    @provide(scope=Scope.APP)
    async def get_ledger(self, engine: AsyncEngine) -> AsyncIterable[LedgerStore]:
        ledger = SqlLedgerStore(engine)
        yield ledger
        await ledger.close()
        logger.debug("Ledger store closed")

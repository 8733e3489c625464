import asyncio

from dishka import Provider, Scope, provide

from lending.config import Config
from lending.domain.catalog.service.catalog import Catalog
from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.circulation.service.circulation import CirculationEngine
from lending.domain.membership.service.membership import Membership
from lending.domain.shared.port.ledger import LedgerStore


class LendingProvider(Provider):
    """In-memory views and the circulation engine, loaded once per container."""

    @provide(scope=Scope.APP)
    def get_lock(self) -> asyncio.Lock:
        return asyncio.Lock()

    @provide(scope=Scope.APP)
    async def get_active_issues(self, ledger: LedgerStore) -> ActiveIssues:
        return ActiveIssues(await ledger.load_active_issues())

    @provide(scope=Scope.APP)
    async def get_catalog(
        self, ledger: LedgerStore, issues: ActiveIssues, lock: asyncio.Lock
    ) -> Catalog:
        catalog = Catalog(lock=lock, ledger=ledger, issues=issues)
        await catalog.load()
        return catalog

    @provide(scope=Scope.APP)
    async def get_membership(
        self, ledger: LedgerStore, issues: ActiveIssues, lock: asyncio.Lock
    ) -> Membership:
        membership = Membership(lock=lock, ledger=ledger, issues=issues)
        await membership.load()
        return membership

    @provide(scope=Scope.APP)
    def get_circulation(
        self,
        catalog: Catalog,
        membership: Membership,
        issues: ActiveIssues,
        ledger: LedgerStore,
        lock: asyncio.Lock,
        config: Config,
    ) -> CirculationEngine:
        return CirculationEngine(
            lock=lock,
            catalog=catalog,
            membership=membership,
            issues=issues,
            ledger=ledger,
            loan_period=config.lending.loan_period,
            penalty_period=config.lending.penalty_period,
        )

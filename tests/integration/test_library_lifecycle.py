"""End-to-end: the dishka container over a file-backed SQLite ledger."""

import asyncio

import pytest

from lending.application.di import open_library
from lending.config import Config, DatabaseConfig, LendingRules
from lending.domain.circulation.model.value import HistoryStatus, Standing
from lending.domain.membership.model.value import UserId
from lending.domain.shared.error import ExhaustedError, ForbiddenError

DAY = 24 * 60 * 60
T0 = 1_700_000_000


@pytest.fixture
def config(tmp_path) -> Config:
    return Config(
        database=DatabaseConfig(url=f"sqlite+aiosqlite:///{tmp_path / 'lending.db'}"),
        lending=LendingRules(loan_days=15, penalty_days=7),
    )


@pytest.mark.asyncio
async def test_lending_cycle_persists_across_restarts(config: Config):
    async with open_library(config) as library:
        book = await library.catalog.add_book("Dune", "Frank Herbert", 1)
        await library.membership.add_user(UserId(1), "Ada")
        await library.membership.add_user(UserId(2), "Grace")
        await library.circulation.request_issue(UserId(1), book.id, T0)

        with pytest.raises(ExhaustedError):
            await library.circulation.request_issue(UserId(2), book.id, T0 + 1)

    async with open_library(config) as library:
        assert library.catalog.require(book.id).available_copies == 0
        status = library.circulation.status_of(UserId(1), T0 + DAY)
        assert status.standing == Standing.ISSUED

        outcome = await library.circulation.request_return(UserId(1), T0 + 16 * DAY, rating=4)
        assert outcome.status == HistoryStatus.DEFAULTER
        assert outcome.penalty_end == T0 + 23 * DAY

    async with open_library(config) as library:
        book = library.catalog.require(book.id)
        assert book.available_copies == 1
        assert book.avg_rating == 4.0

        with pytest.raises(ForbiddenError):
            await library.circulation.request_issue(UserId(1), book.id, T0 + 17 * DAY)

        defaulters = library.circulation.list_defaulters(T0 + 17 * DAY)
        assert [d.user.id for d in defaulters] == [UserId(1)]

        (entry,) = await library.circulation.recent_history(5)
        assert entry.status == HistoryStatus.DEFAULTER
        assert entry.returned_at == T0 + 16 * DAY


@pytest.mark.asyncio
async def test_history_read_during_issue_keeps_store_consistent(config: Config):
    async with open_library(config) as library:
        book = await library.catalog.add_book("Emma", "Jane Austen", 2)
        await library.membership.add_user(UserId(1), "Ada")

        issue, entries = await asyncio.gather(
            library.circulation.request_issue(UserId(1), book.id, T0),
            library.circulation.recent_history(5),
        )
        assert [e.issue_id for e in entries] == [issue.id]

        # Read the store itself, before the exit snapshot could paper over a gap
        ledger = library.circulation.ledger
        (stored,) = await ledger.load_books()
        assert stored.available_copies == library.catalog.require(book.id).available_copies == 1
        assert [i.id for i in await ledger.load_active_issues()] == [issue.id]
        assert len(await ledger.recent_history(5)) == 1

from abc import ABC, abstractmethod
from types import TracebackType
from typing import Any, Callable, Optional, Type


class UoW(ABC):
    """One atomic ledger transaction.

    Used as an async context manager: commits on a clean exit, rolls back
    when the block raises. Callbacks registered with ``on_commit`` run only
    after the commit succeeded, which is how in-memory views are kept in
    step with the store.
    """

    def __init__(self) -> None:
        self._on_commit: list[Callable[[], None]] = []
        # Entities changed in this unit, keyed by (kind, id); not yet in memory.
        self.staged: dict[tuple[str, Any], Any] = {}

    @abstractmethod
    async def commit(self) -> None: ...

    @abstractmethod
    async def rollback(self) -> None: ...

    def on_commit(self, callback: Callable[[], None]) -> None:
        self._on_commit.append(callback)

    async def __aenter__(self) -> "UoW":
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]] = None,
        exc: Optional[BaseException] = None,
        tb: Optional[TracebackType] = None,
    ) -> None:
        if exc is not None:
            await self.rollback()
            return
        await self.commit()
        callbacks, self._on_commit = self._on_commit, []
        for callback in callbacks:
            callback()

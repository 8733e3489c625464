import logging
from dataclasses import field

from lending.domain.circulation.model.registry import ActiveIssues
from lending.domain.membership.model.aggregate import User
from lending.domain.membership.model.value import UserId
from lending.domain.shared.error import ConflictError, NotFoundError
from lending.domain.shared.model.value import Timestamp
from lending.domain.shared.port.ledger import LedgerStore, LedgerUnitOfWork
from lending.domain.shared.service import LedgerService

logger = logging.getLogger(__name__)


class Membership(LedgerService):
    """Authoritative in-memory view of the users, written through to the ledger."""

    ledger: LedgerStore
    issues: ActiveIssues
    _users: dict[UserId, User] = field(default_factory=dict, init=False, repr=False)

    async def load(self) -> None:
        users = await self.ledger.load_users()
        self._users = {u.id: u for u in users}
        logger.info("Loaded %d users", len(self._users))

    def get(self, user_id: UserId) -> User | None:
        return self._users.get(user_id)

    def require(self, user_id: UserId) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    def is_defaulter(self, user_id: UserId, now: Timestamp) -> bool:
        """Lazy check: the stored flag counts only until its penalty end."""
        return self.require(user_id).is_defaulter_at(now)

    async def add_user(self, user_id: UserId, name: str) -> User:
        async with self.lock:
            async with self.ledger.begin() as uow:
                user = await self.register(uow, user_id, name)
        logger.info("User added: id=%s name=%r", user.id, user.name)
        return user

    async def remove_user(self, user_id: UserId) -> None:
        async with self.lock:
            self.require(user_id)
            if self.issues.has_user(user_id):
                raise ConflictError(f"User {user_id} holds an active issue and cannot be removed")
            async with self.ledger.begin() as uow:
                await uow.delete_user(user_id)
                uow.on_commit(lambda: self._users.pop(user_id, None))
        logger.info("User removed: id=%s", user_id)

    # -------------------------------------------------------------------------
    # Unit-of-work mutations. Callers hold the lock.
    # -------------------------------------------------------------------------

    async def register(self, uow: LedgerUnitOfWork, user_id: UserId, name: str) -> User:
        if user_id in self._users or ("user", user_id) in uow.staged:
            raise ConflictError(f"User already exists: {user_id}")
        user = User(id=user_id, name=name)
        uow.staged[("user", user_id)] = user
        await self._write(uow, user)
        return user

    async def set_defaulter(
        self, uow: LedgerUnitOfWork, user_id: UserId, penalty_end: Timestamp
    ) -> User:
        key = ("user", user_id)
        if key not in uow.staged:
            uow.staged[key] = self.require(user_id).model_copy()
        staged: User = uow.staged[key]
        staged.penalize(penalty_end)
        await self._write(uow, staged)
        return staged

    async def _write(self, uow: LedgerUnitOfWork, user: User) -> None:
        await uow.upsert_user(user)
        uow.on_commit(lambda: self._users.__setitem__(user.id, user))

    def list(self) -> list[User]:
        """All users, in id order."""
        return [self._users[k] for k in sorted(self._users)]

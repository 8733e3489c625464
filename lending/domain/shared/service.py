import asyncio
from dataclasses import dataclass
from typing import dataclass_transform


@dataclass_transform(kw_only_default=True)
class _ServiceMeta(type):
    """Metaclass that turns subclasses into keyword-only dataclasses."""

    def __new__(mcs, name: str, bases: tuple, namespace: dict):
        cls = super().__new__(mcs, name, bases, namespace)
        if any(isinstance(b, mcs) for b in bases):
            return dataclass(cls, kw_only=True)
        return cls


class Service(metaclass=_ServiceMeta):
    """Base class for domain services. Subclasses are automatically dataclasses."""


class LedgerService(Service):
    """Service whose mutations go through the ledger.

    Catalog, Membership and the circulation engine of one library share a
    single ``lock``; every mutating operation holds it for its whole
    read-validate-write sequence.
    """

    lock: asyncio.Lock

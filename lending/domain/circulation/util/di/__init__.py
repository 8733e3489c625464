from .provider import LendingProvider

__all__ = ["LendingProvider"]

from abc import ABC, abstractmethod
from typing import Optional

class CacheStore(ABC):
    """Opaque key/value store with per-entry TTL. Both methods may raise on outage."""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored text, or None when absent or expired."""
        pass

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store ``value`` under ``key`` for ``ttl_seconds``."""
        pass

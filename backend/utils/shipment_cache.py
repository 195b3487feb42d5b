import time
from typing import Callable, Dict, Hashable, Optional, Tuple


class ShipmentRecordCache:
    """
    Carrier records with a TTL per entry. Callers pick the key; the
    shipment service scopes it to the customer.

    One instance per application, handed to consumers explicitly.
    """

    def __init__(self, ttl_seconds: float, *, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        # key -> (expires_at, record)
        self._entries: Dict[Hashable, Tuple[float, dict]] = {}

    def get(self, key: Hashable) -> Optional[dict]:
        entry = self._entries.get(key)
        if entry is None:
            return None

        expires_at, record = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return record

    def set(self, key: Hashable, record: dict, ttl_seconds: float | None = None) -> None:
        ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
        self._entries[key] = (self._clock() + ttl, record)

    def invalidate(self, key: Hashable | None = None) -> None:
        if key is None:
            self._entries.clear()
        else:
            self._entries.pop(key, None)

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def __contains__(self, key: Hashable) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        return len(self._entries)

"""
In-memory ledger (for tests and dry runs).
Nothing survives the process.
"""
from .ledger_base import LedgerBase


class InMemoryLedger(LedgerBase):
    def __init__(self, keys=None):
        self._keys: set[str] = set(keys or ())

    def contains(self, key: str) -> bool:
        return key in self._keys

    def add(self, key: str) -> None:
        self._keys.add(key)

    def keys(self) -> set[str]:
        """All recorded keys (copy)"""
        return set(self._keys)

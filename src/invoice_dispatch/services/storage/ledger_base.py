"""
Abstract base class for persistent key sets.

The pipeline keeps three of them: processed file names, known supplier
names and completed invoices. All are append-only existence checks, so any
backend that can answer "have I seen this key" works.
"""

from abc import ABC, abstractmethod


class LedgerBase(ABC):
    """
    Append-only set of string keys.

    Implementations:
    - In-memory (tests, dry runs)
    - Newline-separated text file (processed files)
    - SQLite table (suppliers, invoices)
    """

    @abstractmethod
    def contains(self, key: str) -> bool:
        """
        Check whether a key was recorded.

        Args:
            key: Ledger key

        Returns:
            True if the key is present
        """
        pass

    @abstractmethod
    def add(self, key: str) -> None:
        """
        Record a key. Adding a key that is already present is a no-op.

        Args:
            key: Ledger key
        """
        pass

    @abstractmethod
    def keys(self) -> set[str]:
        """
        Snapshot of every recorded key.

        Returns:
            Set of keys
        """
        pass

    def __contains__(self, key: str) -> bool:
        return self.contains(key)

"""
Newline-separated text file ledger.

Used for processed file names: the file is read once into a set on first
use and every new key is appended as its own line.
"""

from pathlib import Path

from loguru import logger

from .ledger_base import LedgerBase


class FileLedger(LedgerBase):
    def __init__(self, path: str | Path):
        """
        Args:
            path: Ledger file; a missing file is an empty ledger
        """
        self.path = Path(path)
        self._keys: set[str] | None = None

    def _load(self) -> set[str]:
        if self._keys is None:
            try:
                text = self.path.read_text(encoding="utf-8")
            except FileNotFoundError:
                logger.info("No ledger file found, starting empty", path=str(self.path))
                text = ""
            self._keys = {line.strip() for line in text.splitlines() if line.strip()}
        return self._keys

    def contains(self, key: str) -> bool:
        return key in self._load()

    def add(self, key: str) -> None:
        keys = self._load()
        if key in keys:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as fh:
            fh.write(key + "\n")
        keys.add(key)

    def keys(self) -> set[str]:
        return set(self._load())

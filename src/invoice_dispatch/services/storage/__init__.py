from .ledger_base import LedgerBase
from .ledger_file import FileLedger
from .ledger_memory import InMemoryLedger
from .ledger_sqlite import SQLiteLedger

__all__ = ["LedgerBase", "FileLedger", "InMemoryLedger", "SQLiteLedger"]

"""
Exception hierarchy for the dispatch pipeline.

Row-level data defects never raise; they are replaced with defaults where
the row is read. Everything below aborts either a single invoice group
(API failures) or a single file (read failures).
"""


class DispatchError(Exception):
    """Base class for pipeline errors"""


class FileReadError(DispatchError):
    """A source file could not be fetched or parsed; the file stays unprocessed"""

    def __init__(self, file_name: str, reason: str):
        super().__init__(f"Could not read {file_name}: {reason}")
        self.file_name = file_name
        self.reason = reason


class InventoryAPIError(DispatchError):
    """Transport or HTTP failure talking to the inventory API"""

    def __init__(self, message: str, status_code: int | None = None, payload=None):
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class BusinessRejectionError(InventoryAPIError):
    """The API answered 2xx but the body reports an ERROR status"""


class SupplierCacheError(InventoryAPIError):
    """The supplier list could not be loaded from the inventory API"""


class FileSourceError(DispatchError):
    """The file source could not be listed"""

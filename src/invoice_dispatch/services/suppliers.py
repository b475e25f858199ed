from loguru import logger

from ..core.errors import InventoryAPIError, SupplierCacheError
from .inventory_api import InventoryAPI
from .storage import LedgerBase


class SupplierCache:
    """
    Supplier names known upstream, loaded once per run.

    Owned by the run and handed to the registrar; it starts empty and is
    hydrated from the inventory API the first time a supplier is checked.
    """

    def __init__(self):
        self._names: set[str] = set()
        self.hydrated = False

    async def hydrate(self, api: InventoryAPI) -> None:
        try:
            names = await api.list_suppliers()
        except InventoryAPIError as e:
            raise SupplierCacheError(f"Could not load supplier list: {e}") from e
        self._names.update(names)
        self.hydrated = True

    def __contains__(self, name: str) -> bool:
        return name in self._names

    def add(self, name: str) -> None:
        self._names.add(name)

    def __len__(self) -> int:
        return len(self._names)


class SupplierRegistrar:
    """
    Makes sure a supplier exists upstream, creating it at most once.

    Lookup order: run cache, then the persistent supplier ledger, then an
    upsert call. A failed upsert leaves cache and ledger untouched.
    """

    def __init__(self, api: InventoryAPI, ledger: LedgerBase, cache: SupplierCache):
        self.api = api
        self.ledger = ledger
        self.cache = cache

    async def ensure(self, name: str) -> bool:
        """
        Ensure the supplier exists.

        Returns:
            True if the supplier exists or was created, False if creation failed

        Raises:
            SupplierCacheError: If the supplier list could not be loaded
        """
        if not self.cache.hydrated:
            await self.cache.hydrate(self.api)

        if name in self.cache:
            logger.debug("Supplier already in cache", supplier=name)
            return True

        if self.ledger.contains(name):
            logger.debug("Supplier already created", supplier=name)
            self.cache.add(name)
            return True

        try:
            created = await self.api.upsert_supplier(name)
        except InventoryAPIError as e:
            logger.error("Error creating supplier {supplier}: {error}", supplier=name, error=str(e))
            return False

        if not created:
            logger.error("Failed to create supplier {supplier}", supplier=name)
            return False

        self.cache.add(name)
        self.ledger.add(name)
        logger.info("Supplier created", supplier=name)
        return True

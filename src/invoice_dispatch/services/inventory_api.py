"""
Client for the upstream retail inventory API.

Only the calls the dispatch pipeline needs are implemented: supplier
listing and upsert, receipt (dispatch notification) creation, and item
posting under a receipt.
"""

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote

import httpx
from loguru import logger

from ..core.errors import BusinessRejectionError, InventoryAPIError
from ..models.invoice import LineItem, Receipt, Supplier


def check_business_status(data: Any) -> None:
    """
    Raise if a successful HTTP response carries an error result.

    Write endpoints answer with a list of per-record results; an ERROR
    status on the first one means the request was rejected.
    """
    if isinstance(data, list) and data and isinstance(data[0], dict):
        if str(data[0].get("status", "")).upper() == "ERROR":
            raise BusinessRejectionError("Inventory API rejected the request", payload=data)


def _result_id(data: Any) -> str | None:
    if isinstance(data, list) and data and isinstance(data[0], dict):
        data = data[0]
    if isinstance(data, dict) and data.get("id"):
        return str(data["id"])
    return None


class InventoryAPI(ABC):
    """Upstream calls used by the dispatch coordinator"""

    @abstractmethod
    async def list_suppliers(self) -> list[str]:
        """Names of every supplier known upstream"""
        pass

    @abstractmethod
    async def upsert_supplier(self, name: str) -> bool:
        """Create or replace a supplier by name; True on success"""
        pass

    @abstractmethod
    async def create_receipt(self, receipt: Receipt) -> str:
        """Create a dispatch notification and return its identifier"""
        pass

    @abstractmethod
    async def post_items(self, receipt_id: str, items: list[LineItem]) -> list[dict]:
        """Add line items to a dispatch notification; returns per-item results"""
        pass


class KoronaInventoryClient(InventoryAPI):
    """
    httpx-based client for a KORONA-style back office API.

    Usage:
        async with KoronaInventoryClient(base_url, username, password) as api:
            receipt_id = await api.create_receipt(receipt)
    """

    def __init__(
        self,
        base_url: str,
        username: str | None,
        password: str | None,
        timeout: float = 30.0,
        assign_existing_product: bool = True,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.assign_existing_product = assign_existing_product
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url,
            auth=httpx.BasicAuth(username or "", password or ""),
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "KoronaInventoryClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            response = await self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise InventoryAPIError(
                f"{method} {path} failed with HTTP {e.response.status_code}",
                status_code=e.response.status_code,
                payload=e.response.text,
            ) from e
        except httpx.HTTPError as e:
            raise InventoryAPIError(f"{method} {path} failed: {e}") from e
        except ValueError as e:
            # Request body could not be encoded, e.g. a non-finite float
            raise InventoryAPIError(f"{method} {path} request body rejected: {e}") from e

        if not response.content:
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise InventoryAPIError(
                f"{method} {path} returned a non-JSON body",
                status_code=response.status_code,
                payload=response.text,
            ) from e

        check_business_status(data)
        return data

    async def list_suppliers(self) -> list[str]:
        names: list[str] = []
        page = 1
        while True:
            data = await self._request("GET", "/suppliers", params={"page": page})
            if not isinstance(data, dict) or "results" not in data:
                logger.warning("Supplier listing returned no results", page=page)
                break

            names.extend(Supplier.model_validate(s).name for s in data["results"] if s.get("name"))
            if page >= int(data.get("pagesTotal") or 1):
                break
            page += 1

        logger.info(f"Loaded {len(names)} suppliers from inventory API")
        return names

    async def upsert_supplier(self, name: str) -> bool:
        await self._request(
            "POST",
            "/suppliers",
            params={"writeMode": "ADD_OR_REPLACE"},
            json=Supplier(name=name).model_dump(),
        )
        return True

    async def create_receipt(self, receipt: Receipt) -> str:
        data = await self._request("POST", "/dispatchNotifications", json=receipt.to_payload())
        receipt_id = _result_id(data)
        if receipt_id is None:
            logger.debug("Receipt response carried no id, addressing it by number", number=receipt.number)
            return receipt.number
        return receipt_id

    async def post_items(self, receipt_id: str, items: list[LineItem]) -> list[dict]:
        data = await self._request(
            "POST",
            f"/dispatchNotifications/{quote(receipt_id, safe='')}/items",
            params={
                "assignExistingProduct": str(self.assign_existing_product).lower(),
                "writeMode": "ADD_OR_UPDATE",
            },
            json=[item.to_payload() for item in items],
        )
        return data if isinstance(data, list) else []

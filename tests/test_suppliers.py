"""
Tests for supplier registration: cache, ledger and upsert ordering.
"""

import asyncio

import pytest

from invoice_dispatch.core.errors import InventoryAPIError, SupplierCacheError
from invoice_dispatch.services.storage import InMemoryLedger
from invoice_dispatch.services.suppliers import SupplierCache, SupplierRegistrar
from fakes import FakeInventoryAPI


def make_registrar(api, ledger=None):
    return SupplierRegistrar(api, ledger if ledger is not None else InMemoryLedger(), SupplierCache())


def test_cache_hit_skips_upsert():
    api = FakeInventoryAPI(suppliers=["Acme"])
    registrar = make_registrar(api)

    assert asyncio.run(registrar.ensure("Acme")) is True
    assert api.count("upsert_supplier") == 0


def test_cache_is_hydrated_once():
    api = FakeInventoryAPI(suppliers=["Acme"])
    registrar = make_registrar(api)

    async def scenario():
        await registrar.ensure("Acme")
        await registrar.ensure("Other")
        await registrar.ensure("Acme")

    asyncio.run(scenario())

    assert api.count("list_suppliers") == 1


def test_ledger_hit_skips_upsert():
    api = FakeInventoryAPI()
    registrar = make_registrar(api, InMemoryLedger({"Acme"}))

    assert asyncio.run(registrar.ensure("Acme")) is True
    assert api.count("upsert_supplier") == 0
    assert "Acme" in registrar.cache


def test_miss_creates_supplier_once():
    api = FakeInventoryAPI()
    ledger = InMemoryLedger()
    registrar = make_registrar(api, ledger)

    async def scenario():
        return [await registrar.ensure("Acme") for _ in range(3)]

    assert asyncio.run(scenario()) == [True, True, True]
    assert api.calls_to("upsert_supplier") == ["Acme"]
    assert ledger.contains("Acme")
    assert "Acme" in registrar.cache


def test_failed_upsert_leaves_cache_and_ledger_untouched():
    api = FakeInventoryAPI(fail_suppliers={"Acme"})
    ledger = InMemoryLedger()
    registrar = make_registrar(api, ledger)

    assert asyncio.run(registrar.ensure("Acme")) is False
    assert not ledger.contains("Acme")
    assert "Acme" not in registrar.cache


def test_hydration_failure_propagates():
    api = FakeInventoryAPI(list_error=InventoryAPIError("network down"))
    registrar = make_registrar(api)

    with pytest.raises(SupplierCacheError):
        asyncio.run(registrar.ensure("Acme"))

    assert registrar.cache.hydrated is False
    assert api.count("upsert_supplier") == 0

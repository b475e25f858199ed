"""
Pytest configuration and shared fixtures.

Tests marked ``integration`` talk to a real inventory account. They run
only with --run-integration and only when credentials are configured; the
``inventory_settings`` fixture skips them otherwise.
"""

import pytest

from invoice_dispatch.core.config import ColumnKeys, Settings
from fakes import FakeInventoryAPI


def pytest_addoption(parser):
    parser.addoption(
        "--run-integration",
        action="store_true",
        default=False,
        help="Dispatch against the inventory account configured in .env",
    )


def pytest_configure(config):
    config.addinivalue_line("markers", "integration: needs a live inventory account and --run-integration")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--run-integration"):
        return
    skip_live = pytest.mark.skip(reason="live inventory tests are off; pass --run-integration")
    for item in items:
        if item.get_closest_marker("integration") is not None:
            item.add_marker(skip_live)


@pytest.fixture
def inventory_settings():
    """Settings for a live account, skipping the test when credentials are missing"""
    config = Settings()
    missing = [
        name
        for name, value in (
            ("INVENTORY_ACCOUNT_ID or INVENTORY_API_BASE_URL", config.inventory_account_id or config.inventory_api_base_url),
            ("INVENTORY_USERNAME", config.inventory_username),
            ("INVENTORY_PASSWORD", config.inventory_password),
        )
        if not value
    ]
    if missing:
        pytest.skip(f"Inventory API not configured (set {', '.join(missing)})")
    return config


@pytest.fixture
def columns():
    return ColumnKeys()


@pytest.fixture
def api():
    return FakeInventoryAPI()

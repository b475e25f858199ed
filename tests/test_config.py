from invoice_dispatch.core.config import ColumnKeys, Settings


def test_column_defaults_match_column_keys():
    assert Settings(_env_file=None).columns == ColumnKeys()


def test_column_key_from_environment(monkeypatch):
    monkeypatch.setenv("VENDOR_NAME_KEY", "Supplier")
    monkeypatch.setenv("PRODUCT_NUMBER_KEY2", "Alt Code")

    columns = Settings(_env_file=None).columns

    assert columns.vendor_name == "Supplier"
    assert columns.product_number2 == "Alt Code"
    assert columns.invoice_number == ColumnKeys().invoice_number


def test_api_base_url():
    config = Settings(_env_file=None, inventory_cluster="42", inventory_account_id="acc-1")
    assert config.api_base_url == "https://42.koronacloud.com/web/api/v3/accounts/acc-1"

    override = Settings(_env_file=None, inventory_api_base_url="https://api.example.com/accounts/x/")
    assert override.api_base_url == "https://api.example.com/accounts/x"

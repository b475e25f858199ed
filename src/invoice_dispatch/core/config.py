from typing import Literal

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings


class ColumnKeys(BaseModel):
    """CSV header names for each logical invoice field"""
    vendor_name: str = "Vendor Name"
    product_description: str = "Product Description"
    unit_cost: str = "Unit Cost"
    packs_per_case: str = "Packs Per Case"
    quantity: str = "Quantity"
    product_number: str = "Pack UPC"
    product_number2: str | None = None
    case_upc: str = "Case UPC"
    gl_code: str = "GL Code"
    supplier_item_number: str = "Product Number"
    retailer_name: str = "Retailer Name"
    units_per_pack: str = "Units Per Pack"
    store_id: str = "Retailer Store Number"
    unit_of_measure: str = "Unit Of Measure"
    discount_adjustment_total: str = "Discount Adjustment Total"
    invoice_number: str = "Invoice Number"
    invoice_date: str = "Invoice Date"


# Column defaults live on ColumnKeys only; Settings reads them from here
_DEFAULT_COLUMNS = ColumnKeys()


class Settings(BaseSettings):
    app_name: str = Field("invoice-dispatch", alias="APP_NAME")
    app_env: str = Field("dev", alias="APP_ENV")

    # Logging
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    # Inventory API (KORONA-style back office)
    inventory_cluster: str = Field("167", alias="INVENTORY_CLUSTER")
    inventory_account_id: str | None = Field(default=None, alias="INVENTORY_ACCOUNT_ID")
    inventory_username: str | None = Field(default=None, alias="INVENTORY_USERNAME")
    inventory_password: str | None = Field(default=None, alias="INVENTORY_PASSWORD")
    inventory_api_base_url: str | None = Field(default=None, alias="INVENTORY_API_BASE_URL")
    http_timeout_seconds: float = Field(30.0, alias="HTTP_TIMEOUT_SECONDS")

    # Fixed pause before each receipt/items call
    request_delay_seconds: float = Field(0.5, alias="REQUEST_DELAY_SECONDS")

    # Dispatch behaviour
    org_unit_to_match: str | None = Field(default=None, alias="ORG_UNIT_TO_MATCH")
    receipt_number_scheme: Literal["invoice", "file_vendor"] = Field("invoice", alias="RECEIPT_NUMBER_SCHEME")
    unit_ruleset: Literal["standard", "legacy"] = Field("standard", alias="UNIT_RULESET")
    mark_failed_files_processed: bool = Field(True, alias="MARK_FAILED_FILES_PROCESSED")

    # File source
    ftp_host: str | None = Field(default=None, alias="FTP_HOST")
    ftp_user: str | None = Field(default=None, alias="FTP_USER")
    ftp_password: str | None = Field(default=None, alias="FTP_PASSWORD")
    ftp_remote_dir: str = Field("/OUT", alias="FTP_REMOTE_DIR")
    download_dir: str = Field(".", alias="DOWNLOAD_DIR")

    # Ledgers
    processed_files_path: str = Field("uploaded.txt", alias="PROCESSED_FILES_PATH")
    supplier_db_path: str = Field("suppliers.db", alias="SUPPLIER_DB_PATH")

    # CSV column keys
    vendor_name_key: str = Field(_DEFAULT_COLUMNS.vendor_name, alias="VENDOR_NAME_KEY")
    product_description_key: str = Field(_DEFAULT_COLUMNS.product_description, alias="PRODUCT_DESCRIPTION_KEY")
    unit_cost_key: str = Field(_DEFAULT_COLUMNS.unit_cost, alias="UNIT_COST_KEY")
    packs_per_case_key: str = Field(_DEFAULT_COLUMNS.packs_per_case, alias="PACKS_PER_CASE_KEY")
    quantity_key: str = Field(_DEFAULT_COLUMNS.quantity, alias="QUANTITY_KEY")
    product_number_key: str = Field(_DEFAULT_COLUMNS.product_number, alias="PRODUCT_NUMBER_KEY")
    product_number_key2: str | None = Field(_DEFAULT_COLUMNS.product_number2, alias="PRODUCT_NUMBER_KEY2")
    case_upc_key: str = Field(_DEFAULT_COLUMNS.case_upc, alias="CASE_UPC_KEY")
    gl_code_key: str = Field(_DEFAULT_COLUMNS.gl_code, alias="GL_CODE_KEY")
    supplier_item_number_key: str = Field(_DEFAULT_COLUMNS.supplier_item_number, alias="SUPPLIER_ITEM_NUMBER")
    retailer_name_key: str = Field(_DEFAULT_COLUMNS.retailer_name, alias="RETAILER_NAME")
    units_per_pack_key: str = Field(_DEFAULT_COLUMNS.units_per_pack, alias="UNITS_PER_PACK")
    store_number_key: str = Field(_DEFAULT_COLUMNS.store_id, alias="STORE_NUMBER_KEY")
    unit_of_measure_key: str = Field(_DEFAULT_COLUMNS.unit_of_measure, alias="UNIT_OF_MEASURE")
    discount_adjustment_total_key: str = Field(_DEFAULT_COLUMNS.discount_adjustment_total, alias="DISCOUNT_ADJUSTMENT_TOTAL")
    invoice_number_key: str = Field(_DEFAULT_COLUMNS.invoice_number, alias="INVOICE_NUMBER_KEY")
    invoice_date_key: str = Field(_DEFAULT_COLUMNS.invoice_date, alias="INVOICE_DATE_KEY")

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "populate_by_name": True, "extra": "ignore"}

    @property
    def api_base_url(self) -> str:
        if self.inventory_api_base_url:
            return self.inventory_api_base_url.rstrip("/")
        return (
            f"https://{self.inventory_cluster}.koronacloud.com"
            f"/web/api/v3/accounts/{self.inventory_account_id}"
        )

    @property
    def columns(self) -> ColumnKeys:
        return ColumnKeys(
            vendor_name=self.vendor_name_key,
            product_description=self.product_description_key,
            unit_cost=self.unit_cost_key,
            packs_per_case=self.packs_per_case_key,
            quantity=self.quantity_key,
            product_number=self.product_number_key,
            product_number2=self.product_number_key2,
            case_upc=self.case_upc_key,
            gl_code=self.gl_code_key,
            supplier_item_number=self.supplier_item_number_key,
            retailer_name=self.retailer_name_key,
            units_per_pack=self.units_per_pack_key,
            store_id=self.store_number_key,
            unit_of_measure=self.unit_of_measure_key,
            discount_adjustment_total=self.discount_adjustment_total_key,
            invoice_number=self.invoice_number_key,
            invoice_date=self.invoice_date_key,
        )

settings = Settings()

from typing import Mapping

from pydantic import BaseModel, Field

Row = Mapping[str, str]

# vendor -> invoice -> rows, insertion ordered
VendorGroups = dict[str, dict[str, list[Row]]]

UNKNOWN_VENDOR = "Unknown"
UNKNOWN_INVOICE = "UnknownInvoiceNumber"


class Supplier(BaseModel):
    name: str


class Receipt(BaseModel):
    """Receipt header (dispatch notification) for one invoice group"""
    number: str
    supplier_name: str
    description: str
    organizational_unit: str
    comment: str
    invoice_number: str = UNKNOWN_INVOICE
    cashier_number: str = "1"

    def to_payload(self) -> dict:
        return {
            "number": self.number,
            "cashier": {"number": self.cashier_number},
            "description": self.description,
            "itemsCount": 0,
            "organizationalUnit": {"number": self.organizational_unit},
            "supplier": {"name": self.supplier_name},
            "comment": self.comment,
        }


class LineItem(BaseModel):
    """One product line posted under a receipt"""
    name: str
    unit_type: str = ""
    ordered_amount: int = 0
    delivered_amount: int = 0
    product_code: str
    supplier_price: float = 1.0
    container_size: int = 1
    buyer: str = "Unknown"
    supplier_code: str = "1001"
    order_code: str = ""
    commodity_group: str = "API"
    supplier_name: str = "UNASSIGNED"
    shelf_life: str | None = Field(default=None)

    def to_payload(self) -> dict:
        return {
            "unitType": self.unit_type,
            "name": self.name,
            "shelfLife": self.shelf_life,
            "amount": {
                "ordered": self.ordered_amount,
                "delivered": self.delivered_amount,
            },
            "identification": {
                "buyer": self.buyer,
                "productCode": self.product_code,
                "supplier": self.supplier_code,
            },
            "container": {"quantity": 1},
            "importData": {
                "assortment": {"number": "1"},
                "commodityGroup": {"name": self.commodity_group},
                "name": self.name,
                "codes": [{"productCode": self.product_code, "containerSize": 1}],
                "sector": {"number": "1"},
                "supplierPrices": [
                    {
                        "supplier": {"name": self.supplier_name},
                        "orderCode": self.order_code,
                        "value": self.supplier_price,
                        "containerSize": self.container_size,
                    }
                ],
            },
        }

from typing import Dict, Optional

from sqlalchemy.orm import Session

from stockledger.core.exceptions import ReferenceNotFoundException
from stockledger.repositories.reference_repository import ReferenceRepository

# request field -> (reference kind, display name)
REFERENCE_FIELDS: Dict[str, tuple] = {
    "product_code": ("product", "Product"),
    "warehouse_code": ("warehouse", "Warehouse"),
    "supplier_code": ("supplier", "Supplier"),
    "customer_code": ("customer", "Customer"),
    "contract_code": ("contract", "Contract"),
    "bill_code": ("bill", "Bill"),
    "responsible_code": ("account", "Account"),
}


class ReferenceValidator:
    def __init__(self, db: Session):
        self._repo = ReferenceRepository(db)

    def ensure(self, values: Dict[str, Optional[str]]) -> None:
        """Raise for the first provided reference that does not exist."""
        for field_name, code in values.items():
            if field_name not in REFERENCE_FIELDS or not code:
                continue
            kind, label = REFERENCE_FIELDS[field_name]
            if not self._repo.exists(kind, code):
                raise ReferenceNotFoundException(label, code, field=field_name)

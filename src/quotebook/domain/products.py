from dataclasses import dataclass, field
from datetime import UTC, datetime
from decimal import Decimal
from uuid import UUID, uuid4

from quotebook.domain.value_objects import ZERO


def _utc_now() -> datetime:
    return datetime.now(UTC)


@dataclass
class Product:
    name: str
    unit_price: Decimal = ZERO
    item_type: str = "Product"
    description: str = ""
    has_quantity_column: bool = False
    is_active: bool = True
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=_utc_now)
    updated_at: datetime = field(default_factory=_utc_now)

    def touch(self) -> None:
        self.updated_at = _utc_now()

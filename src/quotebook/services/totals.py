"""Document totals engine.

Pure functions that recompute line-item amounts and the monetary aggregates
of a quote or invoice. Nothing here touches storage: callers pass an
in-memory snapshot of the items plus the document's tax, discount and
payment inputs, and get back a new item list together with freshly computed
totals to persist.

Every operation that changes the item collection also recomputes the
aggregates, so a caller can never end up with totals that are stale relative
to its items.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, replace
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from quotebook.domain.documents import DocumentItem, DocumentTotals
from quotebook.domain.value_objects import (
    HUNDRED,
    ZERO,
    DiscountType,
    parse_decimal,
    parse_flag,
)
from quotebook.exceptions import InvalidItemFieldError

if TYPE_CHECKING:
    from quotebook.domain.documents import Document
    from quotebook.domain.products import Product

Number = Decimal | int | float | str

NUMERIC_ITEM_FIELDS = frozenset({"quantity", "unit_price", "amount"})
TEXT_ITEM_FIELDS = frozenset({"description", "item_type"})
EDITABLE_ITEM_FIELDS = NUMERIC_ITEM_FIELDS | TEXT_ITEM_FIELDS | {"has_quantity_column"}


@dataclass(frozen=True)
class TotalsInputs:
    """Document-level inputs to the aggregate computation."""

    tax_rate: Number = ZERO
    discount: Number = ZERO
    amount_paid: Number = ZERO
    discount_type: DiscountType = DiscountType.FIXED

    @classmethod
    def from_document(cls, document: Document) -> TotalsInputs:
        return cls(
            tax_rate=document.tax_rate,
            discount=document.discount,
            amount_paid=document.amount_paid,
            discount_type=document.discount_type,
        )


@dataclass(frozen=True)
class ItemsUpdate:
    """Result of an item edit: the new collection and its totals."""

    items: list[DocumentItem]
    totals: DocumentTotals


def compute_item_amount(quantity: Number, unit_price: Number) -> Decimal:
    """Return ``quantity * unit_price``.

    Raises:
        InvalidAmountError: If either input is not a non-negative finite number.
    """
    qty = parse_decimal(quantity, "quantity")
    price = parse_decimal(unit_price, "unit_price")
    return qty * price


def compute_discount_amount(
    subtotal: Decimal, discount: Number, discount_type: DiscountType
) -> Decimal:
    value = parse_decimal(discount, "discount")
    if discount_type == DiscountType.PERCENTAGE:
        return subtotal * (value / HUNDRED)
    return value


def compute_document_totals(
    items: Iterable[DocumentItem],
    tax_rate: Number,
    discount: Number,
    amount_paid: Number = ZERO,
    discount_type: DiscountType = DiscountType.FIXED,
) -> DocumentTotals:
    """Recompute subtotal, tax, discount, total and amount due.

    The subtotal is the sum of item amounts taken in collection order; tax is
    a percentage of the subtotal; the discount is subtracted after tax. No
    rounding is applied and negative totals are returned as-is.

    Raises:
        InvalidAmountError: If any amount or input is malformed.
    """
    subtotal = ZERO
    for item in items:
        subtotal += parse_decimal(item.amount, "amount")

    rate = parse_decimal(tax_rate, "tax_rate")
    tax_amount = subtotal * (rate / HUNDRED)
    discount_amount = compute_discount_amount(subtotal, discount, discount_type)
    total = subtotal + tax_amount - discount_amount
    amount_due = total - parse_decimal(amount_paid, "amount_paid")

    return DocumentTotals(
        subtotal=subtotal,
        tax_amount=tax_amount,
        discount_amount=discount_amount,
        total=total,
        amount_due=amount_due,
    )


def totals_for(items: Iterable[DocumentItem], inputs: TotalsInputs) -> DocumentTotals:
    return compute_document_totals(
        items,
        tax_rate=inputs.tax_rate,
        discount=inputs.discount,
        amount_paid=inputs.amount_paid,
        discount_type=inputs.discount_type,
    )


def _coerce_field(field: str, value: Any) -> Any:
    if field in NUMERIC_ITEM_FIELDS:
        return parse_decimal(value, field)
    if field == "has_quantity_column":
        return parse_flag(value, field)
    return "" if value is None else str(value)


def _apply_field(item: DocumentItem, field: str, value: Any) -> DocumentItem:
    if field == "quantity" and not item.has_quantity_column:
        raise InvalidItemFieldError(field, "quantity column is disabled")
    if field == "amount" and item.has_quantity_column:
        raise InvalidItemFieldError(field, "amount follows quantity and unit price")

    if field == "has_quantity_column":
        if value:
            changed = replace(item, has_quantity_column=True)
        else:
            changed = replace(item, has_quantity_column=False, quantity=Decimal("1"))
    elif field == "amount":
        # Direct price entry: quantity stays 1, so the unit price is the amount.
        changed = replace(item, amount=value, unit_price=value)
    else:
        changed = replace(item, **{field: value})

    if field in ("quantity", "unit_price", "has_quantity_column"):
        changed.amount = compute_item_amount(changed.quantity, changed.unit_price)
    return changed


def update_item(
    items: Sequence[DocumentItem],
    item_id: UUID,
    field: str,
    value: Any,
    inputs: TotalsInputs,
) -> ItemsUpdate:
    """Set one field on one item and recompute.

    Editing ``quantity`` or ``unit_price`` recomputes that item's amount from
    the new value and the other stored factor. Items without a quantity
    column keep a quantity of 1, so their amount always equals the unit
    price and may be entered directly. An unknown ``item_id`` leaves the
    collection unchanged.

    Raises:
        InvalidItemFieldError: If ``field`` is not an editable item field, or
            ``quantity`` or ``amount`` is edited where the item's quantity
            column setting does not allow it.
        InvalidAmountError: If a numeric field receives a malformed value.
        ValidationError: If ``has_quantity_column`` is not a boolean.
    """
    if field not in EDITABLE_ITEM_FIELDS:
        raise InvalidItemFieldError(field)

    coerced = _coerce_field(field, value)
    updated: list[DocumentItem] = []
    for item in items:
        if item.id != item_id:
            updated.append(item)
            continue
        updated.append(_apply_field(item, field, coerced))

    return ItemsUpdate(items=updated, totals=totals_for(updated, inputs))


def new_item(
    item_type: str = "Product",
    description: str = "",
    order: int = 0,
) -> DocumentItem:
    return DocumentItem(
        description=description,
        item_type=item_type,
        quantity=Decimal("1"),
        unit_price=ZERO,
        amount=ZERO,
        has_quantity_column=False,
        order=order,
    )


def item_from_product(product: Product, order: int = 0) -> DocumentItem:
    """Build a line item pre-filled from a catalog product."""
    description = product.name
    if product.description:
        description = f"{product.name}\n{product.description}"
    return DocumentItem(
        description=description,
        item_type=product.item_type,
        quantity=Decimal("1"),
        unit_price=product.unit_price,
        amount=product.unit_price,
        has_quantity_column=product.has_quantity_column,
        order=order,
        source_product_id=product.id,
    )


def add_item(
    items: Sequence[DocumentItem],
    inputs: TotalsInputs,
    item: DocumentItem | None = None,
) -> ItemsUpdate:
    """Append an item at the end of the collection and recompute totals.

    Without ``item`` a blank product line is added. The appended item's
    ``order`` is always set to the current number of items.
    """
    base = item if item is not None else new_item()
    appended = replace(
        base,
        quantity=parse_decimal(base.quantity, "quantity"),
        unit_price=parse_decimal(base.unit_price, "unit_price"),
        amount=parse_decimal(base.amount, "amount"),
        order=len(items),
    )
    updated = [*items, appended]
    return ItemsUpdate(items=updated, totals=totals_for(updated, inputs))


def _renumber(items: Iterable[DocumentItem]) -> list[DocumentItem]:
    return [
        item if item.order == index else replace(item, order=index)
        for index, item in enumerate(items)
    ]


def remove_item(
    items: Sequence[DocumentItem],
    item_id: UUID,
    inputs: TotalsInputs,
) -> ItemsUpdate:
    """Drop the matching item and recompute; unknown ids are a no-op."""
    remaining = [item for item in items if item.id != item_id]
    if len(remaining) == len(items):
        return ItemsUpdate(items=list(items), totals=totals_for(items, inputs))
    updated = _renumber(remaining)
    return ItemsUpdate(items=updated, totals=totals_for(updated, inputs))


def duplicate_item(
    items: Sequence[DocumentItem],
    item_id: UUID,
    inputs: TotalsInputs,
) -> ItemsUpdate:
    """Insert a copy of an item directly after it; unknown ids are a no-op."""
    updated: list[DocumentItem] = []
    for item in items:
        updated.append(item)
        if item.id == item_id:
            updated.append(replace(item, id=uuid4()))
    updated = _renumber(updated)
    return ItemsUpdate(items=updated, totals=totals_for(updated, inputs))


def reorder_items(
    items: Sequence[DocumentItem], ordered_ids: Sequence[UUID]
) -> list[DocumentItem]:
    """Arrange items in the given id order.

    Ids that do not match an item are ignored; items missing from
    ``ordered_ids`` keep their relative order after the listed ones.
    """
    by_id = {item.id: item for item in items}
    seen: set[UUID] = set()
    arranged: list[DocumentItem] = []
    for item_id in ordered_ids:
        item = by_id.get(item_id)
        if item is not None and item_id not in seen:
            arranged.append(item)
            seen.add(item_id)
    arranged.extend(item for item in items if item.id not in seen)
    return _renumber(arranged)


__all__ = [
    "EDITABLE_ITEM_FIELDS",
    "ItemsUpdate",
    "TotalsInputs",
    "add_item",
    "compute_discount_amount",
    "compute_document_totals",
    "compute_item_amount",
    "duplicate_item",
    "item_from_product",
    "new_item",
    "remove_item",
    "reorder_items",
    "totals_for",
    "update_item",
]

"""Tests for the document totals engine."""

from decimal import Decimal
from uuid import uuid4

import pytest

from quotebook.domain.documents import Document, DocumentItem
from quotebook.domain.products import Product
from quotebook.domain.value_objects import DiscountType, DocumentType
from quotebook.exceptions import InvalidAmountError, InvalidItemFieldError, ValidationError
from quotebook.services.totals import (
    TotalsInputs,
    add_item,
    compute_discount_amount,
    compute_document_totals,
    compute_item_amount,
    duplicate_item,
    item_from_product,
    new_item,
    remove_item,
    reorder_items,
    totals_for,
    update_item,
)

TEN_PERCENT = TotalsInputs(tax_rate=Decimal("10"), discount=Decimal("5.00"))


class TestComputeItemAmount:
    def test_multiplies_quantity_by_unit_price(self):
        assert compute_item_amount(Decimal("2"), Decimal("50.00")) == Decimal("100.00")

    def test_accepts_strings_and_ints(self):
        assert compute_item_amount("3", 10) == Decimal("30")

    def test_floats_do_not_leak_binary_error(self):
        assert compute_item_amount(0.1, 3) == Decimal("0.3")

    def test_zero_quantity_gives_zero(self):
        assert compute_item_amount("0", "99.99") == Decimal("0")

    @pytest.mark.parametrize("bad", ["abc", "", "NaN", "Infinity", None])
    def test_malformed_quantity_raises(self, bad):
        with pytest.raises(InvalidAmountError):
            compute_item_amount(bad, "10")

    def test_negative_unit_price_raises(self):
        with pytest.raises(InvalidAmountError, match="negative"):
            compute_item_amount("1", "-5")


class TestComputeDocumentTotals:
    def test_reference_scenario(self, sample_items: list[DocumentItem]):
        totals = compute_document_totals(
            sample_items, tax_rate="10", discount="5.00", amount_paid="0"
        )

        assert totals.subtotal == Decimal("125.50")
        assert totals.tax_amount == Decimal("12.55")
        assert totals.discount_amount == Decimal("5.00")
        assert totals.total == Decimal("133.05")
        assert totals.amount_due == Decimal("133.05")

    def test_empty_items_give_zero_totals(self):
        totals = compute_document_totals([], tax_rate="8.5", discount="0", amount_paid="0")

        assert totals.subtotal == 0
        assert totals.tax_amount == 0
        assert totals.total == 0
        assert totals.amount_due == 0

    def test_subtotal_is_order_independent(self, sample_items: list[DocumentItem]):
        forward = compute_document_totals(sample_items, "10", "0")
        backward = compute_document_totals(list(reversed(sample_items)), "10", "0")

        assert forward == backward

    def test_zero_tax_rate_gives_zero_tax(self, sample_items: list[DocumentItem]):
        totals = compute_document_totals(sample_items, "0", "0")

        assert totals.tax_amount == 0
        assert totals.total == totals.subtotal

    def test_amount_due_subtracts_payments(self, sample_items: list[DocumentItem]):
        totals = compute_document_totals(sample_items, "10", "5.00", amount_paid="33.05")

        assert totals.amount_due == Decimal("100.00")

    def test_discount_larger_than_total_gives_negative_total(
        self, sample_items: list[DocumentItem]
    ):
        totals = compute_document_totals(sample_items, "0", "200")

        assert totals.total == Decimal("-74.50")
        assert totals.amount_due == Decimal("-74.50")

    def test_percentage_discount_is_share_of_subtotal(
        self, sample_items: list[DocumentItem]
    ):
        totals = compute_document_totals(
            sample_items, "0", "10", discount_type=DiscountType.PERCENTAGE
        )

        assert totals.discount_amount == Decimal("12.55")
        assert totals.total == Decimal("112.95")

    def test_recomputing_is_idempotent(self, sample_items: list[DocumentItem]):
        first = compute_document_totals(sample_items, "10", "5.00")
        second = compute_document_totals(sample_items, "10", "5.00")

        assert first == second

    def test_no_rounding_is_applied(self):
        items = [DocumentItem(amount=Decimal("10.005"))]

        totals = compute_document_totals(items, "0", "0")

        assert totals.total == Decimal("10.005")

    @pytest.mark.parametrize("field", ["tax_rate", "discount", "amount_paid"])
    def test_malformed_inputs_raise(self, field):
        kwargs = {"tax_rate": "0", "discount": "0", "amount_paid": "0"}
        kwargs[field] = "not-a-number"

        with pytest.raises(InvalidAmountError) as exc_info:
            compute_document_totals([], **kwargs)

        assert exc_info.value.context["field"] == field

    def test_malformed_item_amount_raises(self):
        items = [DocumentItem(amount="oops")]  # type: ignore[arg-type]

        with pytest.raises(InvalidAmountError):
            compute_document_totals(items, "0", "0")

    def test_compute_discount_amount_fixed(self):
        assert compute_discount_amount(Decimal("80"), "15", DiscountType.FIXED) == Decimal("15")


class TestUpdateItem:
    def test_quantity_edit_recomputes_amount_and_totals(
        self, sample_items: list[DocumentItem]
    ):
        target = sample_items[0]

        result = update_item(sample_items, target.id, "quantity", "3", TEN_PERCENT)

        edited = result.items[0]
        assert edited.quantity == Decimal("3")
        assert edited.amount == Decimal("150.00")
        assert result.totals.subtotal == Decimal("175.50")
        assert result.totals.tax_amount == Decimal("17.55")
        assert result.totals.total == Decimal("188.05")

    def test_unit_price_edit_uses_stored_quantity(self, sample_items: list[DocumentItem]):
        target = sample_items[0]

        result = update_item(sample_items, target.id, "unit_price", "60", TEN_PERCENT)

        assert result.items[0].amount == Decimal("120")
        assert result.totals.subtotal == Decimal("145.50")

    def test_description_edit_keeps_amount(self, sample_items: list[DocumentItem]):
        target = sample_items[1]

        result = update_item(sample_items, target.id, "description", "Cloud hosting", TEN_PERCENT)

        assert result.items[1].description == "Cloud hosting"
        assert result.items[1].amount == Decimal("25.50")
        assert result.totals.subtotal == Decimal("125.50")

    def test_amount_can_be_overridden_directly(self, sample_items: list[DocumentItem]):
        target = sample_items[1]

        result = update_item(sample_items, target.id, "amount", "30", TEN_PERCENT)

        assert result.items[1].amount == Decimal("30")
        assert result.totals.subtotal == Decimal("130.00")

    def test_input_collection_is_not_mutated(self, sample_items: list[DocumentItem]):
        target = sample_items[0]

        update_item(sample_items, target.id, "quantity", "5", TEN_PERCENT)

        assert sample_items[0].quantity == Decimal("2")
        assert sample_items[0].amount == Decimal("100.00")

    def test_unknown_item_id_is_a_no_op(self, sample_items: list[DocumentItem]):
        result = update_item(sample_items, uuid4(), "quantity", "9", TEN_PERCENT)

        assert result.items == sample_items
        assert result.totals.total == Decimal("133.05")

    def test_unknown_field_raises(self, sample_items: list[DocumentItem]):
        with pytest.raises(InvalidItemFieldError):
            update_item(sample_items, sample_items[0].id, "colour", "red", TEN_PERCENT)

    def test_non_numeric_quantity_raises(self, sample_items: list[DocumentItem]):
        with pytest.raises(InvalidAmountError):
            update_item(sample_items, sample_items[0].id, "quantity", "two", TEN_PERCENT)

    def test_quantity_column_flag_accepts_booleans(
        self, sample_items: list[DocumentItem]
    ):
        result = update_item(
            sample_items, sample_items[1].id, "has_quantity_column", True, TEN_PERCENT
        )

        assert result.items[1].has_quantity_column is True
        assert result.items[1].amount == Decimal("25.50")

    @pytest.mark.parametrize("value", ["false", "true", 1, 0, None])
    def test_quantity_column_flag_rejects_non_booleans(
        self, sample_items: list[DocumentItem], value
    ):
        with pytest.raises(ValidationError, match="true or false"):
            update_item(
                sample_items, sample_items[0].id, "has_quantity_column", value, TEN_PERCENT
            )


class TestQuantityColumn:
    def test_amount_edit_rejected_when_quantity_column_on(
        self, sample_items: list[DocumentItem]
    ):
        with pytest.raises(InvalidItemFieldError) as exc_info:
            update_item(sample_items, sample_items[0].id, "amount", "30", TEN_PERCENT)

        assert exc_info.value.context == {
            "field": "amount",
            "reason": "amount follows quantity and unit price",
        }

    def test_quantity_edit_rejected_when_quantity_column_off(
        self, sample_items: list[DocumentItem]
    ):
        with pytest.raises(InvalidItemFieldError):
            update_item(sample_items, sample_items[1].id, "quantity", "4", TEN_PERCENT)

    def test_direct_amount_keeps_unit_price_in_step(
        self, sample_items: list[DocumentItem]
    ):
        result = update_item(sample_items, sample_items[1].id, "amount", "30", TEN_PERCENT)

        edited = result.items[1]
        assert edited.quantity == Decimal("1")
        assert edited.unit_price == Decimal("30")
        assert edited.amount == edited.quantity * edited.unit_price

    def test_disabling_quantity_column_resets_quantity(self):
        item = DocumentItem(
            quantity=Decimal("3"),
            unit_price=Decimal("10"),
            amount=Decimal("30"),
            has_quantity_column=True,
        )

        off = update_item([item], item.id, "has_quantity_column", False, TotalsInputs())
        assert off.items[0].quantity == Decimal("1")
        assert off.items[0].amount == Decimal("10")
        assert off.totals.subtotal == Decimal("10")

        priced = update_item(off.items, item.id, "unit_price", "20", TotalsInputs())
        assert priced.items[0].amount == Decimal("20")

    def test_enabling_quantity_column_recomputes_amount(self):
        item = new_item()
        steps = [
            ("amount", "40"),
            ("has_quantity_column", True),
            ("quantity", "3"),
        ]
        items = [item]
        for field, value in steps:
            items = update_item(items, item.id, field, value, TotalsInputs()).items

        assert items[0].unit_price == Decimal("40")
        assert items[0].amount == Decimal("120")

    def test_invariant_holds_across_edit_sequence(self, sample_items: list[DocumentItem]):
        edits = [
            (0, "quantity", "4"),
            (0, "unit_price", "12.50"),
            (1, "amount", "80"),
            (0, "has_quantity_column", False),
            (0, "unit_price", "7"),
            (1, "has_quantity_column", True),
            (1, "quantity", "2"),
        ]
        items = sample_items
        for index, field, value in edits:
            items = update_item(items, items[index].id, field, value, TEN_PERCENT).items

            for item in items:
                assert item.amount == item.quantity * item.unit_price
                if not item.has_quantity_column:
                    assert item.quantity == Decimal("1")

        assert [item.amount for item in items] == [Decimal("7"), Decimal("160")]


class TestAddItem:
    def test_appends_blank_item_with_next_order(self, sample_items: list[DocumentItem]):
        result = add_item(sample_items, TEN_PERCENT)

        added = result.items[-1]
        assert len(result.items) == 3
        assert added.order == 2
        assert added.quantity == Decimal("1")
        assert added.unit_price == Decimal("0")
        assert added.amount == Decimal("0")
        assert result.totals.total == Decimal("133.05")

    def test_order_follows_collection_length(self, sample_items: list[DocumentItem]):
        result = add_item(sample_items, TEN_PERCENT, new_item(order=99))

        assert result.items[-1].order == 2

    def test_add_to_empty_collection(self):
        result = add_item([], TotalsInputs(tax_rate="8.5"))

        assert len(result.items) == 1
        assert result.items[0].order == 0
        assert result.totals.total == 0

    def test_product_item_contributes_to_totals(self, sample_items: list[DocumentItem]):
        product = Product(name="Support plan", unit_price=Decimal("40"), description="Monthly")

        result = add_item(sample_items, TotalsInputs(), item_from_product(product))

        added = result.items[-1]
        assert added.description == "Support plan\nMonthly"
        assert added.amount == Decimal("40")
        assert added.source_product_id == product.id
        assert result.totals.subtotal == Decimal("165.50")


class TestItemFromProduct:
    def test_name_only_when_no_description(self):
        product = Product(
            name="Logo", unit_price=Decimal("300"), item_type="Service", has_quantity_column=True
        )

        item = item_from_product(product)

        assert item.description == "Logo"
        assert item.item_type == "Service"
        assert item.quantity == Decimal("1")
        assert item.unit_price == Decimal("300")
        assert item.has_quantity_column is True


class TestRemoveItem:
    def test_removes_item_and_recomputes(self, sample_items: list[DocumentItem]):
        removed = sample_items[0]

        result = remove_item(sample_items, removed.id, TEN_PERCENT)

        assert len(result.items) == 1
        assert all(item.id != removed.id for item in result.items)
        assert result.totals.subtotal == Decimal("25.50")

    def test_remaining_items_are_renumbered(self, sample_items: list[DocumentItem]):
        result = remove_item(sample_items, sample_items[0].id, TEN_PERCENT)

        assert [item.order for item in result.items] == [0]

    def test_unknown_id_is_a_no_op(self, sample_items: list[DocumentItem]):
        result = remove_item(sample_items, uuid4(), TEN_PERCENT)

        assert result.items == sample_items
        assert result.totals.subtotal == Decimal("125.50")

    def test_removing_last_item_gives_zero_subtotal(self):
        item = DocumentItem(amount=Decimal("10"))

        result = remove_item([item], item.id, TotalsInputs(tax_rate="20"))

        assert result.items == []
        assert result.totals.subtotal == 0
        assert result.totals.tax_amount == 0


class TestDuplicateAndReorder:
    def test_duplicate_is_placed_after_source(self, sample_items: list[DocumentItem]):
        source = sample_items[0]

        result = duplicate_item(sample_items, source.id, TEN_PERCENT)

        assert len(result.items) == 3
        copy = result.items[1]
        assert copy.id != source.id
        assert copy.description == source.description
        assert [item.order for item in result.items] == [0, 1, 2]
        assert result.totals.subtotal == Decimal("225.50")

    def test_reorder_applies_id_order(self, sample_items: list[DocumentItem]):
        first, second = sample_items

        arranged = reorder_items(sample_items, [second.id, first.id])

        assert [item.id for item in arranged] == [second.id, first.id]
        assert [item.order for item in arranged] == [0, 1]

    def test_reorder_keeps_unlisted_items_at_end(self, sample_items: list[DocumentItem]):
        first, second = sample_items

        arranged = reorder_items(sample_items, [second.id, uuid4()])

        assert [item.id for item in arranged] == [second.id, first.id]


class TestTotalsInputs:
    def test_from_document(self):
        document = Document(
            document_type=DocumentType.INVOICE,
            client_id=uuid4(),
            tax_rate=Decimal("7"),
            discount=Decimal("3"),
            amount_paid=Decimal("10"),
            discount_type=DiscountType.PERCENTAGE,
        )

        inputs = TotalsInputs.from_document(document)

        assert inputs == TotalsInputs(
            tax_rate=Decimal("7"),
            discount=Decimal("3"),
            amount_paid=Decimal("10"),
            discount_type=DiscountType.PERCENTAGE,
        )

    def test_totals_for_matches_compute(self, sample_items: list[DocumentItem]):
        assert totals_for(sample_items, TEN_PERCENT) == compute_document_totals(
            sample_items, "10", "5.00"
        )

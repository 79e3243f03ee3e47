"""ProductService implementation for the saved products and services catalog."""

from __future__ import annotations

from decimal import Decimal
from uuid import UUID

from quotebook.domain.products import Product
from quotebook.domain.value_objects import parse_decimal
from quotebook.exceptions import ProductNotFoundError, ValidationError
from quotebook.logging_config import get_logger
from quotebook.repositories.interfaces import ProductRepository
from quotebook.services.interfaces import ProductService

logger = get_logger(__name__)


class ProductServiceImpl(ProductService):
    def __init__(self, product_repo: ProductRepository) -> None:
        self._product_repo = product_repo

    def list_products(self) -> list[Product]:
        return list(self._product_repo.list_active())

    def get_product(self, product_id: UUID) -> Product:
        product = self._product_repo.get(product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    def save_product(
        self,
        name: str,
        unit_price: Decimal | str,
        item_type: str = "Product",
        description: str = "",
        has_quantity_column: bool = False,
        product_id: UUID | None = None,
    ) -> Product:
        """Create or update a catalog entry.

        An explicit ``product_id`` updates that product. Otherwise an existing
        product with the same name and type is updated in place, and only when
        none matches is a new product created.
        """
        name = name.strip()
        if not name:
            raise ValidationError("Product name is required", context={"field": "name"})
        price = parse_decimal(unit_price, "unit_price")
        item_type = item_type.strip() or "Product"

        existing: Product | None
        if product_id is not None:
            existing = self.get_product(product_id)
        else:
            existing = self._product_repo.get_by_name_and_type(name, item_type)

        if existing is None:
            product = Product(
                name=name,
                unit_price=price,
                item_type=item_type,
                description=description,
                has_quantity_column=has_quantity_column,
            )
            self._product_repo.add(product)
            logger.info("product_created", product_id=str(product.id), name=name)
            return product

        existing.name = name
        existing.unit_price = price
        existing.item_type = item_type
        existing.description = description
        existing.has_quantity_column = has_quantity_column
        existing.is_active = True
        existing.touch()
        self._product_repo.update(existing)
        logger.info("product_updated", product_id=str(existing.id), name=name)
        return existing

    def delete_product(self, product_id: UUID) -> None:
        self.get_product(product_id)
        self._product_repo.delete(product_id)
        logger.info("product_deleted", product_id=str(product_id))

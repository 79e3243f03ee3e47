from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any
from uuid import UUID

from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.documents import Document
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import (
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)


@dataclass
class ClientBalance:
    client: Client
    outstanding: Decimal
    open_invoices: int


@dataclass
class ClientSummary:
    client: Client
    contacts: list[Contact] = field(default_factory=list)
    projects: list[Project] = field(default_factory=list)
    quote_count: int = 0
    invoice_count: int = 0
    total_invoiced: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    outstanding: Decimal = Decimal("0")


class DocumentService(ABC):
    @abstractmethod
    def create_document(
        self,
        document_type: DocumentType,
        client_id: UUID,
        contact_id: UUID | None = None,
        project_id: UUID | None = None,
        issue_date: date | None = None,
    ) -> Document:
        pass

    @abstractmethod
    def get_document(self, document_id: UUID) -> Document:
        pass

    @abstractmethod
    def list_quotes(self) -> list[Document]:
        pass

    @abstractmethod
    def list_invoices(self) -> list[Document]:
        pass

    @abstractmethod
    def list_for_client(self, client_id: UUID) -> list[Document]:
        pass

    @abstractmethod
    def update_details(self, document_id: UUID, changes: Mapping[str, Any]) -> Document:
        pass

    @abstractmethod
    def delete_document(self, document_id: UUID) -> None:
        pass

    @abstractmethod
    def delete_documents(self, document_ids: Iterable[UUID]) -> int:
        pass

    @abstractmethod
    def update_item(
        self, document_id: UUID, item_id: UUID, field: str, value: Any
    ) -> Document:
        pass

    @abstractmethod
    def add_item(
        self, document_id: UUID, item_type: str = "Product", description: str = ""
    ) -> Document:
        pass

    @abstractmethod
    def add_product_item(self, document_id: UUID, product_id: UUID) -> Document:
        pass

    @abstractmethod
    def duplicate_item(self, document_id: UUID, item_id: UUID) -> Document:
        pass

    @abstractmethod
    def remove_item(self, document_id: UUID, item_id: UUID) -> Document:
        pass

    @abstractmethod
    def reorder_items(self, document_id: UUID, ordered_ids: Sequence[UUID]) -> Document:
        pass

    @abstractmethod
    def set_tax_rate(self, document_id: UUID, tax_rate: Decimal | str) -> Document:
        pass

    @abstractmethod
    def set_discount(
        self,
        document_id: UUID,
        discount: Decimal | str,
        discount_type: DiscountType | None = None,
    ) -> Document:
        pass

    @abstractmethod
    def duplicate_document(self, document_id: UUID) -> Document:
        pass

    @abstractmethod
    def convert_to_invoice(self, document_id: UUID) -> Document:
        pass

    @abstractmethod
    def change_status(self, document_id: UUID, status: DocumentStatus) -> Document:
        pass

    @abstractmethod
    def record_payment(
        self,
        document_id: UUID,
        amount: Decimal | str,
        payment_date: date | None = None,
        method: PaymentMethod = PaymentMethod.BANK_TRANSFER,
        reference: str = "",
        notes: str = "",
    ) -> Document:
        pass

    @abstractmethod
    def mark_overdue(self, as_of: date | None = None) -> list[Document]:
        pass

    @abstractmethod
    def render(self, document_id: UUID, template_id: str | None = None) -> bytes:
        pass


class ClientService(ABC):
    @abstractmethod
    def create_client(
        self,
        name: str,
        details: Mapping[str, Any] | None = None,
        primary_contact: Mapping[str, Any] | None = None,
    ) -> Client:
        pass

    @abstractmethod
    def get_client(self, client_id: UUID) -> Client:
        pass

    @abstractmethod
    def update_client(self, client_id: UUID, changes: Mapping[str, Any]) -> Client:
        pass

    @abstractmethod
    def delete_client(self, client_id: UUID) -> None:
        pass

    @abstractmethod
    def list_clients(self) -> list[ClientBalance]:
        pass

    @abstractmethod
    def get_summary(self, client_id: UUID) -> ClientSummary:
        pass

    @abstractmethod
    def list_contacts(self, client_id: UUID) -> list[Contact]:
        pass

    @abstractmethod
    def add_contact(
        self,
        client_id: UUID,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        position: str | None = None,
        is_primary: bool = False,
    ) -> Contact:
        pass

    @abstractmethod
    def update_contact(self, contact_id: UUID, changes: Mapping[str, Any]) -> Contact:
        pass

    @abstractmethod
    def set_primary_contact(self, contact_id: UUID) -> Contact:
        pass

    @abstractmethod
    def delete_contact(self, contact_id: UUID) -> None:
        pass

    @abstractmethod
    def create_project(
        self, client_id: UUID, title: str, description: str | None = None
    ) -> Project:
        pass

    @abstractmethod
    def update_project(self, project_id: UUID, changes: Mapping[str, Any]) -> Project:
        pass

    @abstractmethod
    def archive_project(self, project_id: UUID) -> Project:
        pass

    @abstractmethod
    def unarchive_project(self, project_id: UUID) -> Project:
        pass

    @abstractmethod
    def delete_project(self, project_id: UUID) -> None:
        pass

    @abstractmethod
    def list_projects(
        self, client_id: UUID, include_archived: bool = False
    ) -> list[Project]:
        pass


class ProductService(ABC):
    @abstractmethod
    def list_products(self) -> list[Product]:
        pass

    @abstractmethod
    def get_product(self, product_id: UUID) -> Product:
        pass

    @abstractmethod
    def save_product(
        self,
        name: str,
        unit_price: Decimal | str,
        item_type: str = "Product",
        description: str = "",
        has_quantity_column: bool = False,
        product_id: UUID | None = None,
    ) -> Product:
        pass

    @abstractmethod
    def delete_product(self, product_id: UUID) -> None:
        pass


class SettingsService(ABC):
    @abstractmethod
    def get_settings(self) -> UserSettings:
        pass

    @abstractmethod
    def get_profile(self) -> BusinessProfile:
        pass

    @abstractmethod
    def save_business_profile(self, data: Mapping[str, Any]) -> BusinessProfile:
        pass

    @abstractmethod
    def save_brand_color(self, color: str | None) -> BusinessProfile:
        pass

    @abstractmethod
    def save_financial_settings(self, data: Mapping[str, Any]) -> UserSettings:
        pass

    @abstractmethod
    def save_quote_settings(self, data: Mapping[str, Any]) -> UserSettings:
        pass

    @abstractmethod
    def save_invoice_settings(self, data: Mapping[str, Any]) -> UserSettings:
        pass

    @abstractmethod
    def select_template(self, template_id: str) -> UserSettings:
        pass

    @abstractmethod
    def save_default_visibility(self, data: Mapping[str, Any]) -> UserSettings:
        pass

    @abstractmethod
    def preview_next_number(self, document_type: DocumentType) -> str:
        pass

    @abstractmethod
    def take_next_number(self, document_type: DocumentType) -> str:
        pass

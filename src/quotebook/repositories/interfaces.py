from abc import ABC, abstractmethod
from collections.abc import Iterable
from uuid import UUID

from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.documents import Document
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import DocumentStatus, DocumentType


class ClientRepository(ABC):
    @abstractmethod
    def add(self, client: Client) -> None:
        pass

    @abstractmethod
    def get(self, client_id: UUID) -> Client | None:
        pass

    @abstractmethod
    def list_all(self) -> Iterable[Client]:
        pass

    @abstractmethod
    def update(self, client: Client) -> None:
        pass

    @abstractmethod
    def delete(self, client_id: UUID) -> None:
        pass


class ContactRepository(ABC):
    @abstractmethod
    def add(self, contact: Contact) -> None:
        pass

    @abstractmethod
    def get(self, contact_id: UUID) -> Contact | None:
        pass

    @abstractmethod
    def list_by_client(self, client_id: UUID) -> Iterable[Contact]:
        pass

    @abstractmethod
    def update(self, contact: Contact) -> None:
        pass

    @abstractmethod
    def delete(self, contact_id: UUID) -> None:
        pass


class ProjectRepository(ABC):
    @abstractmethod
    def add(self, project: Project) -> None:
        pass

    @abstractmethod
    def get(self, project_id: UUID) -> Project | None:
        pass

    @abstractmethod
    def list_by_client(
        self, client_id: UUID, include_archived: bool = False
    ) -> Iterable[Project]:
        pass

    @abstractmethod
    def update(self, project: Project) -> None:
        pass

    @abstractmethod
    def delete(self, project_id: UUID) -> None:
        pass


class ProductRepository(ABC):
    @abstractmethod
    def add(self, product: Product) -> None:
        pass

    @abstractmethod
    def get(self, product_id: UUID) -> Product | None:
        pass

    @abstractmethod
    def get_by_name_and_type(self, name: str, item_type: str) -> Product | None:
        pass

    @abstractmethod
    def list_active(self) -> Iterable[Product]:
        pass

    @abstractmethod
    def update(self, product: Product) -> None:
        pass

    @abstractmethod
    def delete(self, product_id: UUID) -> None:
        pass


class DocumentRepository(ABC):
    """Stores documents together with their items and payments."""

    @abstractmethod
    def add(self, document: Document) -> None:
        pass

    @abstractmethod
    def get(self, document_id: UUID) -> Document | None:
        pass

    @abstractmethod
    def list_by_type(
        self,
        document_type: DocumentType,
        exclude_statuses: Iterable[DocumentStatus] = (),
    ) -> Iterable[Document]:
        pass

    @abstractmethod
    def list_by_client(self, client_id: UUID) -> Iterable[Document]:
        pass

    @abstractmethod
    def list_by_project(self, project_id: UUID) -> Iterable[Document]:
        pass

    @abstractmethod
    def update(self, document: Document) -> None:
        """Persist the full snapshot: header, totals, items and payments."""
        pass

    @abstractmethod
    def delete(self, document_id: UUID) -> None:
        pass


class SettingsRepository(ABC):
    """Single-row storage for the business profile and user settings."""

    @abstractmethod
    def get_profile(self) -> BusinessProfile | None:
        pass

    @abstractmethod
    def save_profile(self, profile: BusinessProfile) -> None:
        pass

    @abstractmethod
    def get_settings(self) -> UserSettings | None:
        pass

    @abstractmethod
    def save_settings(self, settings: UserSettings) -> None:
        pass

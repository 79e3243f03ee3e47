"""ClientService implementation: clients, their contacts and projects."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any
from uuid import UUID

from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.value_objects import (
    OUTSTANDING_STATUSES,
    ZERO,
    DocumentStatus,
)
from quotebook.exceptions import (
    ClientNotFoundError,
    ContactNotFoundError,
    ProjectNotFoundError,
    ValidationError,
)
from quotebook.logging_config import get_logger
from quotebook.repositories.interfaces import (
    ClientRepository,
    ContactRepository,
    DocumentRepository,
    ProjectRepository,
)
from quotebook.services.interfaces import ClientBalance, ClientService, ClientSummary

logger = get_logger(__name__)

CLIENT_FIELDS = frozenset(
    {
        "name",
        "email",
        "phone",
        "address",
        "city",
        "state",
        "zip_code",
        "country",
        "currency",
        "notes",
    }
)
CONTACT_FIELDS = frozenset({"name", "email", "phone", "position"})
PROJECT_FIELDS = frozenset({"title", "description"})

# Invoices in these states never count towards what the client was billed.
_UNBILLED_STATUSES = frozenset({DocumentStatus.DRAFT, DocumentStatus.CANCELLED})


def _apply_changes(
    target: Any, changes: Mapping[str, Any], allowed: frozenset[str]
) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationError(
            f"Unknown fields: {', '.join(unknown)}",
            context={"fields": unknown},
        )
    for key, value in changes.items():
        setattr(target, key, value)


def _require_name(value: str | None, field: str) -> str:
    name = (value or "").strip()
    if not name:
        raise ValidationError(f"{field} is required", context={"field": field})
    return name


class ClientServiceImpl(ClientService):
    """Manages clients and keeps each client's primary contact in sync.

    A client has at most one primary contact; the primary contact's email
    and phone are mirrored onto the client record.
    """

    def __init__(
        self,
        client_repo: ClientRepository,
        contact_repo: ContactRepository,
        project_repo: ProjectRepository,
        document_repo: DocumentRepository,
        default_currency: str = "USD",
    ) -> None:
        self._client_repo = client_repo
        self._contact_repo = contact_repo
        self._project_repo = project_repo
        self._document_repo = document_repo
        self._default_currency = default_currency

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def create_client(
        self,
        name: str,
        details: Mapping[str, Any] | None = None,
        primary_contact: Mapping[str, Any] | None = None,
    ) -> Client:
        client = Client(
            name=_require_name(name, "name"),
            currency=self._default_currency,
        )
        if details:
            _apply_changes(client, details, CLIENT_FIELDS - {"name"})
        client.currency = client.currency.upper()
        self._client_repo.add(client)
        logger.info("client_created", client_id=str(client.id), name=client.name)

        if primary_contact:
            contact_values = dict(primary_contact)
            self.add_contact(
                client.id,
                name=contact_values.pop("name", None) or client.name,
                email=contact_values.pop("email", None) or client.email,
                phone=contact_values.pop("phone", None) or client.phone,
                position=contact_values.pop("position", None),
                is_primary=True,
            )
            return self.get_client(client.id)
        return client

    def get_client(self, client_id: UUID) -> Client:
        client = self._client_repo.get(client_id)
        if client is None:
            raise ClientNotFoundError(client_id)
        return client

    def update_client(self, client_id: UUID, changes: Mapping[str, Any]) -> Client:
        client = self.get_client(client_id)
        _apply_changes(client, changes, CLIENT_FIELDS)
        client.name = _require_name(client.name, "name")
        client.currency = client.currency.upper()
        client.touch()
        self._client_repo.update(client)
        logger.info("client_updated", client_id=str(client_id), fields=sorted(changes))
        return client

    def delete_client(self, client_id: UUID) -> None:
        self.get_client(client_id)
        self._client_repo.delete(client_id)
        logger.info("client_deleted", client_id=str(client_id))

    def list_clients(self) -> list[ClientBalance]:
        balances = []
        for client in self._client_repo.list_all():
            open_invoices = [
                doc
                for doc in self._document_repo.list_by_client(client.id)
                if doc.is_invoice and doc.status in OUTSTANDING_STATUSES
            ]
            outstanding = sum((doc.amount_due for doc in open_invoices), ZERO)
            balances.append(
                ClientBalance(
                    client=client,
                    outstanding=outstanding,
                    open_invoices=len(open_invoices),
                )
            )
        return balances

    def get_summary(self, client_id: UUID) -> ClientSummary:
        client = self.get_client(client_id)
        documents = list(self._document_repo.list_by_client(client_id))
        invoices = [doc for doc in documents if doc.is_invoice]
        billed = [doc for doc in invoices if doc.status not in _UNBILLED_STATUSES]

        total_invoiced = sum((doc.total for doc in billed), ZERO)
        total_paid = sum((doc.amount_paid for doc in invoices), ZERO)
        outstanding = sum(
            (doc.amount_due for doc in invoices if doc.status in OUTSTANDING_STATUSES),
            ZERO,
        )
        return ClientSummary(
            client=client,
            contacts=self.list_contacts(client_id),
            projects=self.list_projects(client_id, include_archived=True),
            quote_count=len(documents) - len(invoices),
            invoice_count=len(invoices),
            total_invoiced=total_invoiced,
            total_paid=total_paid,
            outstanding=outstanding,
        )

    # ------------------------------------------------------------------
    # Contacts
    # ------------------------------------------------------------------

    def list_contacts(self, client_id: UUID) -> list[Contact]:
        return list(self._contact_repo.list_by_client(client_id))

    def _get_contact(self, contact_id: UUID) -> Contact:
        contact = self._contact_repo.get(contact_id)
        if contact is None:
            raise ContactNotFoundError(contact_id)
        return contact

    def _make_primary(self, contact: Contact) -> None:
        for other in self._contact_repo.list_by_client(contact.client_id):
            if other.id != contact.id and other.is_primary:
                other.is_primary = False
                other.touch()
                self._contact_repo.update(other)
        contact.is_primary = True
        self._sync_client(contact)

    def _sync_client(self, primary: Contact) -> None:
        self._set_client_contact_info(primary.client_id, primary.email, primary.phone)

    def _set_client_contact_info(
        self, client_id: UUID, email: str | None, phone: str | None
    ) -> None:
        client = self.get_client(client_id)
        client.email = email
        client.phone = phone
        client.touch()
        self._client_repo.update(client)

    def add_contact(
        self,
        client_id: UUID,
        name: str,
        email: str | None = None,
        phone: str | None = None,
        position: str | None = None,
        is_primary: bool = False,
    ) -> Contact:
        self.get_client(client_id)
        existing = self.list_contacts(client_id)
        contact = Contact(
            client_id=client_id,
            name=_require_name(name, "name"),
            email=email or None,
            phone=phone or None,
            position=position or None,
        )
        # The first contact of a client is always its primary contact
        make_primary = is_primary or not existing
        self._contact_repo.add(contact)
        if make_primary:
            self._make_primary(contact)
            self._contact_repo.update(contact)
        logger.info(
            "contact_added",
            client_id=str(client_id),
            contact_id=str(contact.id),
            is_primary=contact.is_primary,
        )
        return contact

    def update_contact(self, contact_id: UUID, changes: Mapping[str, Any]) -> Contact:
        contact = self._get_contact(contact_id)
        values = dict(changes)
        set_primary = bool(values.pop("is_primary", False))
        _apply_changes(contact, values, CONTACT_FIELDS)
        contact.name = _require_name(contact.name, "name")
        contact.touch()
        if set_primary and not contact.is_primary:
            self._make_primary(contact)
        elif contact.is_primary:
            self._sync_client(contact)
        self._contact_repo.update(contact)
        logger.info("contact_updated", contact_id=str(contact_id))
        return contact

    def set_primary_contact(self, contact_id: UUID) -> Contact:
        contact = self._get_contact(contact_id)
        self._make_primary(contact)
        contact.touch()
        self._contact_repo.update(contact)
        logger.info(
            "primary_contact_changed",
            client_id=str(contact.client_id),
            contact_id=str(contact_id),
        )
        return contact

    def delete_contact(self, contact_id: UUID) -> None:
        contact = self._get_contact(contact_id)
        self._contact_repo.delete(contact_id)
        if contact.is_primary:
            remaining = sorted(
                self._contact_repo.list_by_client(contact.client_id),
                key=lambda c: c.created_at,
            )
            if remaining:
                successor = remaining[0]
                self._make_primary(successor)
                successor.touch()
                self._contact_repo.update(successor)
            else:
                self._set_client_contact_info(contact.client_id, None, None)
        logger.info("contact_deleted", contact_id=str(contact_id))

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    def _get_project(self, project_id: UUID) -> Project:
        project = self._project_repo.get(project_id)
        if project is None:
            raise ProjectNotFoundError(project_id)
        return project

    def create_project(
        self, client_id: UUID, title: str, description: str | None = None
    ) -> Project:
        self.get_client(client_id)
        project = Project(
            client_id=client_id,
            title=_require_name(title, "title"),
            description=description or None,
        )
        self._project_repo.add(project)
        logger.info("project_created", client_id=str(client_id), project_id=str(project.id))
        return project

    def update_project(self, project_id: UUID, changes: Mapping[str, Any]) -> Project:
        project = self._get_project(project_id)
        _apply_changes(project, changes, PROJECT_FIELDS)
        project.title = _require_name(project.title, "title")
        project.touch()
        self._project_repo.update(project)
        return project

    def archive_project(self, project_id: UUID) -> Project:
        project = self._get_project(project_id)
        project.archive()
        self._project_repo.update(project)
        logger.info("project_archived", project_id=str(project_id))
        return project

    def unarchive_project(self, project_id: UUID) -> Project:
        project = self._get_project(project_id)
        project.unarchive()
        self._project_repo.update(project)
        logger.info("project_unarchived", project_id=str(project_id))
        return project

    def delete_project(self, project_id: UUID) -> None:
        self._get_project(project_id)
        self._project_repo.delete(project_id)
        logger.info("project_deleted", project_id=str(project_id))

    def list_projects(
        self, client_id: UUID, include_archived: bool = False
    ) -> list[Project]:
        return list(self._project_repo.list_by_client(client_id, include_archived))

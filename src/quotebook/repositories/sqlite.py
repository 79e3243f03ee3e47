"""SQLite implementations of repository interfaces."""

from __future__ import annotations

import json
import sqlite3
from collections.abc import Iterable
from dataclasses import asdict
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from typing import Any
from uuid import UUID

from quotebook.domain.clients import Client, Contact, Project
from quotebook.domain.documents import (
    BusinessInfoVisibility,
    ClientInfoVisibility,
    Document,
    DocumentItem,
    Payment,
)
from quotebook.domain.products import Product
from quotebook.domain.settings import BusinessProfile, UserSettings
from quotebook.domain.value_objects import (
    CurrencyDisplayFormat,
    DiscountType,
    DocumentStatus,
    DocumentType,
    PaymentMethod,
)
from quotebook.repositories.interfaces import (
    ClientRepository,
    ContactRepository,
    DocumentRepository,
    ProductRepository,
    ProjectRepository,
    SettingsRepository,
)


class SQLiteDatabase:
    """SQLite database connection manager."""

    def __init__(
        self, path: str | Path = ":memory:", check_same_thread: bool = True
    ) -> None:
        self._path = str(path)
        self._check_same_thread = check_same_thread
        self._connection: sqlite3.Connection | None = None

    @property
    def path(self) -> str:
        return self._path

    def get_connection(self) -> sqlite3.Connection:
        """Get or create the database connection."""
        if self._connection is None:
            self._connection = sqlite3.connect(
                self._path, check_same_thread=self._check_same_thread
            )
            self._connection.row_factory = sqlite3.Row
            self._connection.execute("PRAGMA foreign_keys = ON")
        return self._connection

    def initialize(self) -> None:
        """Create all database tables."""
        conn = self.get_connection()
        conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS clients (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                email TEXT,
                phone TEXT,
                address TEXT,
                city TEXT,
                state TEXT,
                zip_code TEXT,
                country TEXT,
                currency TEXT NOT NULL DEFAULT 'USD',
                notes TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS contacts (
                id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
                name TEXT NOT NULL,
                email TEXT,
                phone TEXT,
                position TEXT,
                is_primary INTEGER NOT NULL DEFAULT 0,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS projects (
                id TEXT PRIMARY KEY,
                client_id TEXT NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
                title TEXT NOT NULL,
                description TEXT,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS products (
                id TEXT PRIMARY KEY,
                name TEXT NOT NULL,
                description TEXT NOT NULL DEFAULT '',
                unit_price TEXT NOT NULL,
                item_type TEXT NOT NULL DEFAULT 'Product',
                has_quantity_column INTEGER NOT NULL DEFAULT 0,
                is_active INTEGER NOT NULL DEFAULT 1,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS documents (
                id TEXT PRIMARY KEY,
                document_type TEXT NOT NULL,
                document_number TEXT NOT NULL,
                status TEXT NOT NULL,
                client_id TEXT NOT NULL REFERENCES clients(id) ON DELETE CASCADE,
                contact_id TEXT REFERENCES contacts(id) ON DELETE SET NULL,
                project_id TEXT REFERENCES projects(id) ON DELETE SET NULL,
                issue_date TEXT NOT NULL,
                due_date TEXT,
                valid_until TEXT,
                currency TEXT NOT NULL,
                tax_rate TEXT NOT NULL,
                discount TEXT NOT NULL,
                discount_type TEXT NOT NULL,
                subtotal TEXT NOT NULL,
                tax_amount TEXT NOT NULL,
                discount_amount TEXT NOT NULL,
                total TEXT NOT NULL,
                amount_paid TEXT NOT NULL,
                amount_due TEXT NOT NULL,
                notes TEXT,
                terms TEXT,
                internal_notes TEXT,
                show_discount INTEGER NOT NULL DEFAULT 0,
                show_tax INTEGER NOT NULL DEFAULT 1,
                show_notes INTEGER NOT NULL DEFAULT 1,
                show_terms INTEGER NOT NULL DEFAULT 1,
                business_fields TEXT,
                client_fields TEXT,
                created_at TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS document_items (
                id TEXT PRIMARY KEY,
                document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
                description TEXT NOT NULL DEFAULT '',
                item_type TEXT NOT NULL DEFAULT 'Product',
                quantity TEXT NOT NULL,
                unit_price TEXT NOT NULL,
                amount TEXT NOT NULL,
                has_quantity_column INTEGER NOT NULL DEFAULT 0,
                sort_order INTEGER NOT NULL DEFAULT 0,
                source_product_id TEXT
            );

            CREATE TABLE IF NOT EXISTS payments (
                id TEXT PRIMARY KEY,
                document_id TEXT NOT NULL REFERENCES documents(id) ON DELETE CASCADE,
                amount TEXT NOT NULL,
                payment_date TEXT NOT NULL,
                method TEXT NOT NULL,
                reference TEXT NOT NULL DEFAULT '',
                notes TEXT NOT NULL DEFAULT '',
                created_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS business_profile (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                business_name TEXT NOT NULL,
                personal_name TEXT,
                email TEXT,
                phone TEXT,
                website TEXT,
                address TEXT,
                city TEXT,
                state TEXT,
                zip_code TEXT,
                country TEXT,
                tax_id TEXT,
                registration_number TEXT,
                logo_url TEXT,
                brand_color TEXT NOT NULL DEFAULT '#000000',
                updated_at TEXT NOT NULL
            );

            CREATE TABLE IF NOT EXISTS user_settings (
                id INTEGER PRIMARY KEY CHECK (id = 1),
                default_currency TEXT NOT NULL,
                currency_display_format TEXT NOT NULL,
                fiscal_year_start_month INTEGER NOT NULL,
                fiscal_year_start_day INTEGER NOT NULL,
                show_tax_settings INTEGER NOT NULL,
                tax_name TEXT NOT NULL,
                default_tax_rate TEXT NOT NULL,
                quote_title TEXT NOT NULL,
                quote_prefix TEXT NOT NULL,
                quote_next_number INTEGER NOT NULL,
                quote_validity_days INTEGER NOT NULL,
                quote_default_notes TEXT,
                quote_default_terms TEXT,
                invoice_title TEXT NOT NULL,
                invoice_prefix TEXT NOT NULL,
                invoice_next_number INTEGER NOT NULL,
                invoice_default_due_days INTEGER NOT NULL,
                invoice_default_notes TEXT,
                invoice_default_terms TEXT,
                show_bank_details INTEGER NOT NULL,
                bank_name TEXT,
                account_name TEXT,
                account_number TEXT,
                routing_number TEXT,
                iban TEXT,
                swift_code TEXT,
                selected_template_id TEXT NOT NULL,
                default_business_fields TEXT NOT NULL,
                default_client_fields TEXT NOT NULL,
                updated_at TEXT NOT NULL
            );

            CREATE INDEX IF NOT EXISTS idx_contacts_client_id ON contacts(client_id);
            CREATE INDEX IF NOT EXISTS idx_projects_client_id ON projects(client_id);
            CREATE INDEX IF NOT EXISTS idx_documents_client_id ON documents(client_id);
            CREATE INDEX IF NOT EXISTS idx_documents_type ON documents(document_type);
            CREATE INDEX IF NOT EXISTS idx_items_document_id ON document_items(document_id);
            CREATE INDEX IF NOT EXISTS idx_payments_document_id ON payments(document_id);
            """
        )
        conn.commit()

    def close(self) -> None:
        """Close the database connection."""
        if self._connection is not None:
            self._connection.close()
            self._connection = None


def _opt_uuid(value: str | None) -> UUID | None:
    return UUID(value) if value else None


def _opt_date(value: str | None) -> date | None:
    return date.fromisoformat(value) if value else None


class SQLiteClientRepository(ClientRepository):
    """SQLite implementation of ClientRepository."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, client: Client) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO clients (id, name, email, phone, address, city, state, zip_code,
                                 country, currency, notes, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(client.id),
                client.name,
                client.email,
                client.phone,
                client.address,
                client.city,
                client.state,
                client.zip_code,
                client.country,
                client.currency,
                client.notes,
                client.created_at.isoformat(),
                client.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get(self, client_id: UUID) -> Client | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM clients WHERE id = ?", (str(client_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_client(row)

    def list_all(self) -> Iterable[Client]:
        conn = self._db.get_connection()
        rows = conn.execute("SELECT * FROM clients ORDER BY name").fetchall()
        return [self._row_to_client(row) for row in rows]

    def update(self, client: Client) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE clients SET
                name = ?,
                email = ?,
                phone = ?,
                address = ?,
                city = ?,
                state = ?,
                zip_code = ?,
                country = ?,
                currency = ?,
                notes = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                client.name,
                client.email,
                client.phone,
                client.address,
                client.city,
                client.state,
                client.zip_code,
                client.country,
                client.currency,
                client.notes,
                client.updated_at.isoformat(),
                str(client.id),
            ),
        )
        conn.commit()

    def delete(self, client_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM clients WHERE id = ?", (str(client_id),))
        conn.commit()

    def _row_to_client(self, row: sqlite3.Row) -> Client:
        return Client(
            id=UUID(row["id"]),
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            address=row["address"],
            city=row["city"],
            state=row["state"],
            zip_code=row["zip_code"],
            country=row["country"],
            currency=row["currency"],
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteContactRepository(ContactRepository):
    """SQLite implementation of ContactRepository."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, contact: Contact) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO contacts (id, client_id, name, email, phone, position, is_primary,
                                  created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(contact.id),
                str(contact.client_id),
                contact.name,
                contact.email,
                contact.phone,
                contact.position,
                1 if contact.is_primary else 0,
                contact.created_at.isoformat(),
                contact.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get(self, contact_id: UUID) -> Contact | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM contacts WHERE id = ?", (str(contact_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_contact(row)

    def list_by_client(self, client_id: UUID) -> Iterable[Contact]:
        conn = self._db.get_connection()
        rows = conn.execute(
            """
            SELECT * FROM contacts WHERE client_id = ?
            ORDER BY is_primary DESC, created_at
            """,
            (str(client_id),),
        ).fetchall()
        return [self._row_to_contact(row) for row in rows]

    def update(self, contact: Contact) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE contacts SET
                name = ?,
                email = ?,
                phone = ?,
                position = ?,
                is_primary = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                contact.name,
                contact.email,
                contact.phone,
                contact.position,
                1 if contact.is_primary else 0,
                contact.updated_at.isoformat(),
                str(contact.id),
            ),
        )
        conn.commit()

    def delete(self, contact_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM contacts WHERE id = ?", (str(contact_id),))
        conn.commit()

    def _row_to_contact(self, row: sqlite3.Row) -> Contact:
        return Contact(
            id=UUID(row["id"]),
            client_id=UUID(row["client_id"]),
            name=row["name"],
            email=row["email"],
            phone=row["phone"],
            position=row["position"],
            is_primary=bool(row["is_primary"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteProjectRepository(ProjectRepository):
    """SQLite implementation of ProjectRepository."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, project: Project) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO projects (id, client_id, title, description, is_active,
                                  created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(project.id),
                str(project.client_id),
                project.title,
                project.description,
                1 if project.is_active else 0,
                project.created_at.isoformat(),
                project.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get(self, project_id: UUID) -> Project | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM projects WHERE id = ?", (str(project_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_project(row)

    def list_by_client(
        self, client_id: UUID, include_archived: bool = False
    ) -> Iterable[Project]:
        conn = self._db.get_connection()
        query = "SELECT * FROM projects WHERE client_id = ?"
        if not include_archived:
            query += " AND is_active = 1"
        query += " ORDER BY created_at"
        rows = conn.execute(query, (str(client_id),)).fetchall()
        return [self._row_to_project(row) for row in rows]

    def update(self, project: Project) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE projects SET
                title = ?,
                description = ?,
                is_active = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                project.title,
                project.description,
                1 if project.is_active else 0,
                project.updated_at.isoformat(),
                str(project.id),
            ),
        )
        conn.commit()

    def delete(self, project_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM projects WHERE id = ?", (str(project_id),))
        conn.commit()

    def _row_to_project(self, row: sqlite3.Row) -> Project:
        return Project(
            id=UUID(row["id"]),
            client_id=UUID(row["client_id"]),
            title=row["title"],
            description=row["description"],
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteProductRepository(ProductRepository):
    """SQLite implementation of ProductRepository."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, product: Product) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO products (id, name, description, unit_price, item_type,
                                  has_quantity_column, is_active, created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(product.id),
                product.name,
                product.description,
                str(product.unit_price),
                product.item_type,
                1 if product.has_quantity_column else 0,
                1 if product.is_active else 0,
                product.created_at.isoformat(),
                product.updated_at.isoformat(),
            ),
        )
        conn.commit()

    def get(self, product_id: UUID) -> Product | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM products WHERE id = ?", (str(product_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_product(row)

    def get_by_name_and_type(self, name: str, item_type: str) -> Product | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM products WHERE name = ? AND item_type = ?",
            (name, item_type),
        ).fetchone()
        if row is None:
            return None
        return self._row_to_product(row)

    def list_active(self) -> Iterable[Product]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM products WHERE is_active = 1 ORDER BY name"
        ).fetchall()
        return [self._row_to_product(row) for row in rows]

    def update(self, product: Product) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE products SET
                name = ?,
                description = ?,
                unit_price = ?,
                item_type = ?,
                has_quantity_column = ?,
                is_active = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                product.name,
                product.description,
                str(product.unit_price),
                product.item_type,
                1 if product.has_quantity_column else 0,
                1 if product.is_active else 0,
                product.updated_at.isoformat(),
                str(product.id),
            ),
        )
        conn.commit()

    def delete(self, product_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM products WHERE id = ?", (str(product_id),))
        conn.commit()

    def _row_to_product(self, row: sqlite3.Row) -> Product:
        return Product(
            id=UUID(row["id"]),
            name=row["name"],
            description=row["description"],
            unit_price=Decimal(row["unit_price"]),
            item_type=row["item_type"],
            has_quantity_column=bool(row["has_quantity_column"]),
            is_active=bool(row["is_active"]),
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )


class SQLiteDocumentRepository(DocumentRepository):
    """SQLite implementation of DocumentRepository.

    Items and payments live in child tables and are rewritten in full on
    every update, so the stored document always matches the snapshot that
    was last saved.
    """

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def add(self, document: Document) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            INSERT INTO documents (id, document_type, document_number, status, client_id,
                                   contact_id, project_id, issue_date, due_date, valid_until,
                                   currency, tax_rate, discount, discount_type, subtotal,
                                   tax_amount, discount_amount, total, amount_paid, amount_due,
                                   notes, terms, internal_notes, show_discount, show_tax,
                                   show_notes, show_terms, business_fields, client_fields,
                                   created_at, updated_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?,
                    ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                str(document.id),
                document.document_type.value,
                document.document_number,
                document.status.value,
                str(document.client_id),
                str(document.contact_id) if document.contact_id else None,
                str(document.project_id) if document.project_id else None,
                document.issue_date.isoformat(),
                document.due_date.isoformat() if document.due_date else None,
                document.valid_until.isoformat() if document.valid_until else None,
                document.currency,
                str(document.tax_rate),
                str(document.discount),
                document.discount_type.value,
                str(document.subtotal),
                str(document.tax_amount),
                str(document.discount_amount),
                str(document.total),
                str(document.amount_paid),
                str(document.amount_due),
                document.notes,
                document.terms,
                document.internal_notes,
                1 if document.show_discount else 0,
                1 if document.show_tax else 0,
                1 if document.show_notes else 0,
                1 if document.show_terms else 0,
                json.dumps(asdict(document.business_fields)),
                json.dumps(asdict(document.client_fields)),
                document.created_at.isoformat(),
                document.updated_at.isoformat(),
            ),
        )
        self._insert_children(conn, document)
        conn.commit()

    def get(self, document_id: UUID) -> Document | None:
        conn = self._db.get_connection()
        row = conn.execute(
            "SELECT * FROM documents WHERE id = ?", (str(document_id),)
        ).fetchone()
        if row is None:
            return None
        return self._row_to_document(row)

    def list_by_type(
        self,
        document_type: DocumentType,
        exclude_statuses: Iterable[DocumentStatus] = (),
    ) -> Iterable[Document]:
        conn = self._db.get_connection()
        query = "SELECT * FROM documents WHERE document_type = ?"
        params: list[str] = [document_type.value]
        excluded = [status.value for status in exclude_statuses]
        if excluded:
            placeholders = ", ".join("?" for _ in excluded)
            query += f" AND status NOT IN ({placeholders})"
            params.extend(excluded)
        query += " ORDER BY created_at DESC"
        rows = conn.execute(query, params).fetchall()
        return [self._row_to_document(row) for row in rows]

    def list_by_client(self, client_id: UUID) -> Iterable[Document]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM documents WHERE client_id = ? ORDER BY created_at DESC",
            (str(client_id),),
        ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def list_by_project(self, project_id: UUID) -> Iterable[Document]:
        conn = self._db.get_connection()
        rows = conn.execute(
            "SELECT * FROM documents WHERE project_id = ? ORDER BY created_at DESC",
            (str(project_id),),
        ).fetchall()
        return [self._row_to_document(row) for row in rows]

    def update(self, document: Document) -> None:
        conn = self._db.get_connection()
        conn.execute(
            """
            UPDATE documents SET
                document_type = ?,
                document_number = ?,
                status = ?,
                contact_id = ?,
                project_id = ?,
                issue_date = ?,
                due_date = ?,
                valid_until = ?,
                currency = ?,
                tax_rate = ?,
                discount = ?,
                discount_type = ?,
                subtotal = ?,
                tax_amount = ?,
                discount_amount = ?,
                total = ?,
                amount_paid = ?,
                amount_due = ?,
                notes = ?,
                terms = ?,
                internal_notes = ?,
                show_discount = ?,
                show_tax = ?,
                show_notes = ?,
                show_terms = ?,
                business_fields = ?,
                client_fields = ?,
                updated_at = ?
            WHERE id = ?
            """,
            (
                document.document_type.value,
                document.document_number,
                document.status.value,
                str(document.contact_id) if document.contact_id else None,
                str(document.project_id) if document.project_id else None,
                document.issue_date.isoformat(),
                document.due_date.isoformat() if document.due_date else None,
                document.valid_until.isoformat() if document.valid_until else None,
                document.currency,
                str(document.tax_rate),
                str(document.discount),
                document.discount_type.value,
                str(document.subtotal),
                str(document.tax_amount),
                str(document.discount_amount),
                str(document.total),
                str(document.amount_paid),
                str(document.amount_due),
                document.notes,
                document.terms,
                document.internal_notes,
                1 if document.show_discount else 0,
                1 if document.show_tax else 0,
                1 if document.show_notes else 0,
                1 if document.show_terms else 0,
                json.dumps(asdict(document.business_fields)),
                json.dumps(asdict(document.client_fields)),
                document.updated_at.isoformat(),
                str(document.id),
            ),
        )
        conn.execute(
            "DELETE FROM document_items WHERE document_id = ?", (str(document.id),)
        )
        conn.execute("DELETE FROM payments WHERE document_id = ?", (str(document.id),))
        self._insert_children(conn, document)
        conn.commit()

    def delete(self, document_id: UUID) -> None:
        conn = self._db.get_connection()
        conn.execute("DELETE FROM documents WHERE id = ?", (str(document_id),))
        conn.commit()

    def _insert_children(self, conn: sqlite3.Connection, document: Document) -> None:
        for item in document.items:
            conn.execute(
                """
                INSERT INTO document_items (id, document_id, description, item_type, quantity,
                                            unit_price, amount, has_quantity_column,
                                            sort_order, source_product_id)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(item.id),
                    str(document.id),
                    item.description,
                    item.item_type,
                    str(item.quantity),
                    str(item.unit_price),
                    str(item.amount),
                    1 if item.has_quantity_column else 0,
                    item.order,
                    str(item.source_product_id) if item.source_product_id else None,
                ),
            )
        for payment in document.payments:
            conn.execute(
                """
                INSERT INTO payments (id, document_id, amount, payment_date, method,
                                      reference, notes, created_at)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (
                    str(payment.id),
                    str(document.id),
                    str(payment.amount),
                    payment.payment_date.isoformat(),
                    payment.method.value,
                    payment.reference,
                    payment.notes,
                    payment.created_at.isoformat(),
                ),
            )

    def _row_to_document(self, row: sqlite3.Row) -> Document:
        conn = self._db.get_connection()
        item_rows = conn.execute(
            "SELECT * FROM document_items WHERE document_id = ? ORDER BY sort_order",
            (row["id"],),
        ).fetchall()
        payment_rows = conn.execute(
            "SELECT * FROM payments WHERE document_id = ? ORDER BY payment_date, created_at",
            (row["id"],),
        ).fetchall()

        business_json = row["business_fields"]
        client_json = row["client_fields"]

        return Document(
            id=UUID(row["id"]),
            document_type=DocumentType(row["document_type"]),
            document_number=row["document_number"],
            status=DocumentStatus(row["status"]),
            client_id=UUID(row["client_id"]),
            contact_id=_opt_uuid(row["contact_id"]),
            project_id=_opt_uuid(row["project_id"]),
            issue_date=date.fromisoformat(row["issue_date"]),
            due_date=_opt_date(row["due_date"]),
            valid_until=_opt_date(row["valid_until"]),
            currency=row["currency"],
            tax_rate=Decimal(row["tax_rate"]),
            discount=Decimal(row["discount"]),
            discount_type=DiscountType(row["discount_type"]),
            subtotal=Decimal(row["subtotal"]),
            tax_amount=Decimal(row["tax_amount"]),
            discount_amount=Decimal(row["discount_amount"]),
            total=Decimal(row["total"]),
            amount_paid=Decimal(row["amount_paid"]),
            amount_due=Decimal(row["amount_due"]),
            notes=row["notes"],
            terms=row["terms"],
            internal_notes=row["internal_notes"],
            show_discount=bool(row["show_discount"]),
            show_tax=bool(row["show_tax"]),
            show_notes=bool(row["show_notes"]),
            show_terms=bool(row["show_terms"]),
            business_fields=BusinessInfoVisibility(**json.loads(business_json))
            if business_json
            else BusinessInfoVisibility(),
            client_fields=ClientInfoVisibility(**json.loads(client_json))
            if client_json
            else ClientInfoVisibility(),
            items=[self._row_to_item(item_row) for item_row in item_rows],
            payments=[self._row_to_payment(p_row) for p_row in payment_rows],
            created_at=datetime.fromisoformat(row["created_at"]),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

    def _row_to_item(self, row: sqlite3.Row) -> DocumentItem:
        return DocumentItem(
            id=UUID(row["id"]),
            description=row["description"],
            item_type=row["item_type"],
            quantity=Decimal(row["quantity"]),
            unit_price=Decimal(row["unit_price"]),
            amount=Decimal(row["amount"]),
            has_quantity_column=bool(row["has_quantity_column"]),
            order=row["sort_order"],
            source_product_id=_opt_uuid(row["source_product_id"]),
        )

    def _row_to_payment(self, row: sqlite3.Row) -> Payment:
        return Payment(
            id=UUID(row["id"]),
            amount=Decimal(row["amount"]),
            payment_date=date.fromisoformat(row["payment_date"]),
            method=PaymentMethod(row["method"]),
            reference=row["reference"],
            notes=row["notes"],
            created_at=datetime.fromisoformat(row["created_at"]),
        )


_PROFILE_COLUMNS = (
    "business_name",
    "personal_name",
    "email",
    "phone",
    "website",
    "address",
    "city",
    "state",
    "zip_code",
    "country",
    "tax_id",
    "registration_number",
    "logo_url",
    "brand_color",
)

_SETTINGS_TEXT_COLUMNS = (
    "default_currency",
    "tax_name",
    "quote_title",
    "quote_prefix",
    "quote_default_notes",
    "quote_default_terms",
    "invoice_title",
    "invoice_prefix",
    "invoice_default_notes",
    "invoice_default_terms",
    "bank_name",
    "account_name",
    "account_number",
    "routing_number",
    "iban",
    "swift_code",
    "selected_template_id",
)

_SETTINGS_INT_COLUMNS = (
    "fiscal_year_start_month",
    "fiscal_year_start_day",
    "quote_next_number",
    "quote_validity_days",
    "invoice_next_number",
    "invoice_default_due_days",
)

_SETTINGS_BOOL_COLUMNS = ("show_tax_settings", "show_bank_details")


class SQLiteSettingsRepository(SettingsRepository):
    """SQLite implementation of SettingsRepository (single row per table)."""

    def __init__(self, database: SQLiteDatabase) -> None:
        self._db = database

    def get_profile(self) -> BusinessProfile | None:
        conn = self._db.get_connection()
        row = conn.execute("SELECT * FROM business_profile WHERE id = 1").fetchone()
        if row is None:
            return None
        values = {column: row[column] for column in _PROFILE_COLUMNS}
        return BusinessProfile(
            **values, updated_at=datetime.fromisoformat(row["updated_at"])
        )

    def save_profile(self, profile: BusinessProfile) -> None:
        columns = (*_PROFILE_COLUMNS, "updated_at")
        params = [getattr(profile, column) for column in _PROFILE_COLUMNS]
        params.append(profile.updated_at.isoformat())
        self._upsert("business_profile", columns, params)

    def get_settings(self) -> UserSettings | None:
        conn = self._db.get_connection()
        row = conn.execute("SELECT * FROM user_settings WHERE id = 1").fetchone()
        if row is None:
            return None
        return self._row_to_settings(row)

    def save_settings(self, settings: UserSettings) -> None:
        values: dict[str, Any] = {}
        for column in _SETTINGS_TEXT_COLUMNS + _SETTINGS_INT_COLUMNS:
            values[column] = getattr(settings, column)
        for column in _SETTINGS_BOOL_COLUMNS:
            values[column] = 1 if getattr(settings, column) else 0
        values["currency_display_format"] = settings.currency_display_format.value
        values["default_tax_rate"] = str(settings.default_tax_rate)
        values["default_business_fields"] = json.dumps(
            asdict(settings.default_business_fields)
        )
        values["default_client_fields"] = json.dumps(
            asdict(settings.default_client_fields)
        )
        values["updated_at"] = settings.updated_at.isoformat()
        self._upsert("user_settings", tuple(values), list(values.values()))

    def _upsert(self, table: str, columns: tuple[str, ...], params: list[Any]) -> None:
        conn = self._db.get_connection()
        column_list = ", ".join(("id", *columns))
        placeholders = ", ".join("?" for _ in range(len(columns) + 1))
        conn.execute(
            f"INSERT OR REPLACE INTO {table} ({column_list}) VALUES ({placeholders})",
            [1, *params],
        )
        conn.commit()

    def _row_to_settings(self, row: sqlite3.Row) -> UserSettings:
        values: dict[str, Any] = {}
        for column in _SETTINGS_TEXT_COLUMNS + _SETTINGS_INT_COLUMNS:
            values[column] = row[column]
        for column in _SETTINGS_BOOL_COLUMNS:
            values[column] = bool(row[column])
        return UserSettings(
            **values,
            currency_display_format=CurrencyDisplayFormat(
                row["currency_display_format"]
            ),
            default_tax_rate=Decimal(row["default_tax_rate"]),
            default_business_fields=BusinessInfoVisibility(
                **json.loads(row["default_business_fields"])
            ),
            default_client_fields=ClientInfoVisibility(
                **json.loads(row["default_client_fields"])
            ),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )

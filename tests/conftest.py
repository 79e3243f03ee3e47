from datetime import date
from decimal import Decimal

import pytest

from quotebook.container import Container
from quotebook.domain.clients import Client
from quotebook.domain.documents import DocumentItem
from quotebook.repositories.sqlite import SQLiteDatabase
from quotebook.services.clients import ClientServiceImpl
from quotebook.services.documents import DocumentServiceImpl
from quotebook.services.products import ProductServiceImpl
from quotebook.services.settings import SettingsServiceImpl


@pytest.fixture
def db() -> SQLiteDatabase:
    """Create an in-memory test database with thread-safety disabled for testing."""
    database = SQLiteDatabase(":memory:", check_same_thread=False)
    database.initialize()
    return database


@pytest.fixture
def container(db: SQLiteDatabase) -> Container:
    return Container(database=db)


@pytest.fixture
def settings_service(container: Container) -> SettingsServiceImpl:
    return container.settings_service


@pytest.fixture
def product_service(container: Container) -> ProductServiceImpl:
    return container.product_service


@pytest.fixture
def client_service(container: Container) -> ClientServiceImpl:
    return container.client_service


@pytest.fixture
def document_service(container: Container) -> DocumentServiceImpl:
    return container.document_service


@pytest.fixture
def sample_client(client_service: ClientServiceImpl) -> Client:
    return client_service.create_client(
        "Acme Corp",
        details={"address": "1 Main St", "city": "Springfield", "country": "US"},
        primary_contact={"name": "Jane Doe", "email": "jane@acme.test", "phone": "555-0100"},
    )


@pytest.fixture
def sample_items() -> list[DocumentItem]:
    return [
        DocumentItem(
            description="Design work",
            quantity=Decimal("2"),
            unit_price=Decimal("50.00"),
            amount=Decimal("100.00"),
            has_quantity_column=True,
            order=0,
        ),
        DocumentItem(
            description="Hosting",
            quantity=Decimal("1"),
            unit_price=Decimal("25.50"),
            amount=Decimal("25.50"),
            order=1,
        ),
    ]


@pytest.fixture
def issue_date() -> date:
    return date(2025, 3, 1)

"""Dependency injection container for Quotebook.

Provides centralized dependency management using a simple container pattern.
Repositories and services are created lazily on first access and cached for
the lifetime of the container.

Usage:
    from quotebook.container import Container, get_container

    # Get container singleton
    container = get_container()

    # Access services
    documents = container.document_service
    quote = documents.create_document(DocumentType.QUOTE, client_id)
"""

from functools import cached_property, lru_cache
from typing import TYPE_CHECKING

from quotebook.config import Settings, get_settings
from quotebook.logging_config import get_logger

if TYPE_CHECKING:
    from quotebook.repositories.sqlite import (
        SQLiteClientRepository,
        SQLiteContactRepository,
        SQLiteDatabase,
        SQLiteDocumentRepository,
        SQLiteProductRepository,
        SQLiteProjectRepository,
        SQLiteSettingsRepository,
    )
    from quotebook.services.clients import ClientServiceImpl
    from quotebook.services.documents import DocumentServiceImpl
    from quotebook.services.products import ProductServiceImpl
    from quotebook.services.settings import SettingsServiceImpl

logger = get_logger(__name__)


class Container:
    """Dependency injection container.

    The container can be configured with custom settings or an already
    initialized database for testing:

        db = SQLiteDatabase(":memory:")
        db.initialize()
        container = Container(database=db)
    """

    def __init__(
        self,
        settings: Settings | None = None,
        database: "SQLiteDatabase | None" = None,
    ) -> None:
        """Initialize the container.

        Args:
            settings: Application settings. If None, loads from environment.
            database: Pre-built database. If None, one is opened from settings.
        """
        self._settings = settings or get_settings()
        if database is not None:
            self.__dict__["database"] = database
        logger.debug(
            "container_created",
            environment=self._settings.environment.value,
            external_database=database is not None,
        )

    @property
    def settings(self) -> Settings:
        """Get application settings."""
        return self._settings

    @cached_property
    def database(self) -> "SQLiteDatabase":
        """Get the SQLite database, creating the schema on first access."""
        from quotebook.repositories.sqlite import SQLiteDatabase

        db_path = str(self._settings.sqlite_path)
        logger.info("initializing_sqlite_database", path=db_path)

        # FastAPI runs sync endpoints in a worker thread pool
        db = SQLiteDatabase(db_path, check_same_thread=False)
        db.initialize()
        return db

    @cached_property
    def client_repository(self) -> "SQLiteClientRepository":
        from quotebook.repositories.sqlite import SQLiteClientRepository

        return SQLiteClientRepository(self.database)

    @cached_property
    def contact_repository(self) -> "SQLiteContactRepository":
        from quotebook.repositories.sqlite import SQLiteContactRepository

        return SQLiteContactRepository(self.database)

    @cached_property
    def project_repository(self) -> "SQLiteProjectRepository":
        from quotebook.repositories.sqlite import SQLiteProjectRepository

        return SQLiteProjectRepository(self.database)

    @cached_property
    def product_repository(self) -> "SQLiteProductRepository":
        from quotebook.repositories.sqlite import SQLiteProductRepository

        return SQLiteProductRepository(self.database)

    @cached_property
    def document_repository(self) -> "SQLiteDocumentRepository":
        from quotebook.repositories.sqlite import SQLiteDocumentRepository

        return SQLiteDocumentRepository(self.database)

    @cached_property
    def settings_repository(self) -> "SQLiteSettingsRepository":
        from quotebook.repositories.sqlite import SQLiteSettingsRepository

        return SQLiteSettingsRepository(self.database)

    @cached_property
    def settings_service(self) -> "SettingsServiceImpl":
        """Get the settings service for the business profile and defaults."""
        from quotebook.services.settings import SettingsServiceImpl

        return SettingsServiceImpl(
            self.settings_repository,
            default_currency=self._settings.default_currency,
            default_template_id=self._settings.default_template_id,
        )

    @cached_property
    def product_service(self) -> "ProductServiceImpl":
        """Get the product catalog service."""
        from quotebook.services.products import ProductServiceImpl

        return ProductServiceImpl(self.product_repository)

    @cached_property
    def client_service(self) -> "ClientServiceImpl":
        """Get the client service for clients, contacts and projects."""
        from quotebook.services.clients import ClientServiceImpl

        return ClientServiceImpl(
            self.client_repository,
            self.contact_repository,
            self.project_repository,
            self.document_repository,
            default_currency=self._settings.default_currency,
        )

    @cached_property
    def document_service(self) -> "DocumentServiceImpl":
        """Get the document service for the quote and invoice workflow."""
        from quotebook.services.documents import DocumentServiceImpl

        return DocumentServiceImpl(
            self.document_repository,
            self.contact_repository,
            self.project_repository,
            self.client_service,
            self.product_service,
            self.settings_service,
        )

    def close(self) -> None:
        """Close the database connection if one was opened."""
        database = self.__dict__.get("database")
        if database is not None:
            logger.info("closing_database_connection")
            database.close()

    def __enter__(self) -> "Container":
        """Enter context manager."""
        return self

    def __exit__(self, *args: object) -> None:
        """Exit context manager, closing resources."""
        self.close()


# Module-level container instance
_container: Container | None = None


@lru_cache
def get_container() -> Container:
    """Get the global container singleton.

    The container is created lazily on first access using default settings.
    For testing, create a Container directly instead of using this function.
    """
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset the global container, closing its database."""
    global _container
    if _container is not None:
        _container.close()
        _container = None
    get_container.cache_clear()


# FastAPI dependency functions
def get_database() -> "SQLiteDatabase":
    """FastAPI dependency for database access.

    Override it in tests with ``app.dependency_overrides[get_database]``.
    """
    return get_container().database

from quotebook.repositories.interfaces import (
    ClientRepository,
    ContactRepository,
    DocumentRepository,
    ProductRepository,
    ProjectRepository,
    SettingsRepository,
)
from quotebook.repositories.sqlite import (
    SQLiteClientRepository,
    SQLiteContactRepository,
    SQLiteDatabase,
    SQLiteDocumentRepository,
    SQLiteProductRepository,
    SQLiteProjectRepository,
    SQLiteSettingsRepository,
)

__all__ = [
    "ClientRepository",
    "ContactRepository",
    "DocumentRepository",
    "ProductRepository",
    "ProjectRepository",
    "SettingsRepository",
    "SQLiteClientRepository",
    "SQLiteContactRepository",
    "SQLiteDatabase",
    "SQLiteDocumentRepository",
    "SQLiteProductRepository",
    "SQLiteProjectRepository",
    "SQLiteSettingsRepository",
]

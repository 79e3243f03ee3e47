from quotebook.services.totals import (
    ItemsUpdate,
    TotalsInputs,
    add_item,
    compute_document_totals,
    compute_item_amount,
    remove_item,
    update_item,
)
from quotebook.services.interfaces import (
    ClientBalance,
    ClientService,
    ClientSummary,
    DocumentService,
    ProductService,
    SettingsService,
)
from quotebook.services.settings import SettingsServiceImpl
from quotebook.services.products import ProductServiceImpl
from quotebook.services.clients import ClientServiceImpl
from quotebook.services.documents import DocumentServiceImpl

__all__ = [
    "ClientBalance",
    "ClientService",
    "ClientServiceImpl",
    "ClientSummary",
    "DocumentService",
    "DocumentServiceImpl",
    "ItemsUpdate",
    "ProductService",
    "ProductServiceImpl",
    "SettingsService",
    "SettingsServiceImpl",
    "TotalsInputs",
    "add_item",
    "compute_document_totals",
    "compute_item_amount",
    "remove_item",
    "update_item",
]

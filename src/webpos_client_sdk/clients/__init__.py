from .catalog_client import CatalogClient
from .transactions_client import TransactionsClient

__all__ = [
    "CatalogClient",
    "TransactionsClient",
]

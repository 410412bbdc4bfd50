"""
Persistence adapters for the CatalogRepository port.

- SqliteCatalogRepository: snapshot stored in SQLite tables
- JsonCatalogRepository: snapshot stored in one JSON document
"""

from .json_catalog_repository import JsonCatalogRepository
from .sqlite_catalog_repository import SqliteCatalogRepository

__all__ = ["JsonCatalogRepository", "SqliteCatalogRepository"]

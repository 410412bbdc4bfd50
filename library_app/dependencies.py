"""
Configuration and wiring of adapters and services.

This module provides singleton instances of the repository and services,
configured from the environment:

- LIBRARY_STORAGE: "sqlite" (default) or "json"
- LIBRARY_DB_PATH: SQLite database file (default data/catalog.db)
- LIBRARY_JSON_PATH: JSON snapshot file (default data/catalog.json)
- LIBRARY_AUTOSAVE: "1"/"true" to persist after every successful mutation

Only adapters and stateless services live here. The current Catalog value
is owned by whichever driver loads it and is never cached in this module.
"""

import os
from pathlib import Path
from typing import Optional

from library_app.domain.ports import CatalogRepository
from library_app.domain.services import AnalyticsService, CirculationService
from library_app.infrastructure.persistence import JsonCatalogRepository, SqliteCatalogRepository

STORAGE_BACKENDS = ("sqlite", "json")

# Configuration from environment
STORAGE = os.getenv("LIBRARY_STORAGE", "sqlite").lower()
DB_PATH = Path(os.getenv("LIBRARY_DB_PATH", "data/catalog.db"))
JSON_PATH = Path(os.getenv("LIBRARY_JSON_PATH", "data/catalog.json"))
AUTOSAVE = os.getenv("LIBRARY_AUTOSAVE", "0").lower() in ("1", "true", "yes")

# Module-level singletons (initialized lazily)
_catalog_repository: Optional[CatalogRepository] = None
_circulation_service: Optional[CirculationService] = None
_analytics_service: Optional[AnalyticsService] = None


def build_repository(storage: str, path: Optional[Path] = None) -> CatalogRepository:
    """
    Create a repository for the given backend.

    Args:
        storage: "sqlite" or "json"
        path: Storage location; defaults to the configured path for the backend

    Raises:
        ValueError: If the backend is unknown
    """
    storage = storage.lower()
    if storage == "sqlite":
        return SqliteCatalogRepository(path or DB_PATH)
    if storage == "json":
        return JsonCatalogRepository(path or JSON_PATH)
    raise ValueError(
        f"Unknown storage backend '{storage}', expected one of {STORAGE_BACKENDS}"
    )


def get_catalog_repository() -> CatalogRepository:
    """Provide a singleton instance of the configured catalog repository."""
    global _catalog_repository
    if _catalog_repository is None:
        _catalog_repository = build_repository(STORAGE)
    return _catalog_repository


def get_circulation_service() -> CirculationService:
    """Provide the circulation service wired to the configured repository."""
    global _circulation_service
    if _circulation_service is None:
        _circulation_service = CirculationService(
            repository=get_catalog_repository(),
            autosave=AUTOSAVE,
        )
    return _circulation_service


def get_analytics_service() -> AnalyticsService:
    """Provide a singleton instance of the analytics service."""
    global _analytics_service
    if _analytics_service is None:
        _analytics_service = AnalyticsService()
    return _analytics_service


def reset_dependencies() -> None:
    """
    Reset all singletons. Useful for testing.

    This allows tests to change the configuration between test cases.
    """
    global _catalog_repository, _circulation_service, _analytics_service

    _catalog_repository = None
    _circulation_service = None
    _analytics_service = None

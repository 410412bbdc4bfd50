"""
Tests for configuration and dependency wiring.
"""

import pytest

from library_app import dependencies
from library_app.infrastructure.persistence import JsonCatalogRepository, SqliteCatalogRepository


@pytest.fixture(autouse=True)
def fresh_dependencies():
    """Each test starts and ends without cached singletons."""
    dependencies.reset_dependencies()
    yield
    dependencies.reset_dependencies()


class TestBuildRepository:
    """Tests for build_repository()."""

    def test_sqlite_backend(self, tmp_path):
        repo = dependencies.build_repository("sqlite", tmp_path / "catalog.db")

        assert isinstance(repo, SqliteCatalogRepository)

    def test_json_backend_is_case_insensitive(self, tmp_path):
        repo = dependencies.build_repository("JSON", tmp_path / "catalog.json")

        assert isinstance(repo, JsonCatalogRepository)
        assert repo.path == tmp_path / "catalog.json"

    def test_unknown_backend(self, tmp_path):
        with pytest.raises(ValueError, match="Unknown storage backend"):
            dependencies.build_repository("postgres", tmp_path / "x")


class TestSingletons:
    """Tests for the lazily created singletons."""

    def test_repository_follows_configuration(self, tmp_path, monkeypatch):
        monkeypatch.setattr(dependencies, "STORAGE", "json")
        monkeypatch.setattr(dependencies, "JSON_PATH", tmp_path / "catalog.json")

        repo = dependencies.get_catalog_repository()

        assert isinstance(repo, JsonCatalogRepository)
        assert dependencies.get_catalog_repository() is repo

    def test_circulation_service_uses_repository(self, tmp_path, monkeypatch):
        monkeypatch.setattr(dependencies, "DB_PATH", tmp_path / "catalog.db")
        monkeypatch.setattr(dependencies, "STORAGE", "sqlite")
        monkeypatch.setattr(dependencies, "AUTOSAVE", True)

        service = dependencies.get_circulation_service()

        assert service is dependencies.get_circulation_service()
        assert service._repository is dependencies.get_catalog_repository()
        assert service._autosave is True

    def test_reset_creates_new_instances(self):
        first = dependencies.get_analytics_service()

        dependencies.reset_dependencies()

        assert dependencies.get_analytics_service() is not first

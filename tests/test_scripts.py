"""
Tests for the seeding and reporting scripts.

The scripts are exercised through their main() functions against temporary
storage, the same way `python -m scripts.<name>` runs them.
"""

from datetime import datetime, UTC

from library_app.domain import queries
from library_app.domain.entities import UserType
from library_app.domain.session import login
from library_app.infrastructure.persistence import JsonCatalogRepository, SqliteCatalogRepository
from scripts import library_report, seed_catalog

NOW = datetime(2024, 6, 1, 12, 0, tzinfo=UTC)


class TestDemoCatalog:
    """Tests for build_demo_catalog()."""

    def test_contents(self):
        catalog = seed_catalog.build_demo_catalog(NOW)

        assert len(catalog.books) == len(seed_catalog.DEMO_BOOKS)
        assert sorted(user.user_type for user in catalog.users.values()) == sorted(UserType)
        catalog.check_invariants()

    def test_has_loans_and_an_overdue_one(self):
        catalog = seed_catalog.build_demo_catalog(NOW)

        assert len(queries.outstanding_loans(catalog)) == 3
        overdue = queries.overdue_loans(catalog, NOW)
        assert [loan.book.title for loan in overdue] == ["Effective Java"]

    def test_demo_users_can_log_in(self):
        catalog = seed_catalog.build_demo_catalog(NOW)

        assert login(catalog, "Bob", "admin123").ok
        assert login(catalog, "Alice", "student123").ok


class TestSeedMain:
    """Tests for seed_catalog.main()."""

    def test_seeds_sqlite(self, tmp_path):
        path = tmp_path / "catalog.db"

        seeded = seed_catalog.main("sqlite", path)

        assert SqliteCatalogRepository(path).load() == seeded

    def test_seeds_json(self, tmp_path):
        path = tmp_path / "catalog.json"

        seeded = seed_catalog.main("json", path)

        assert JsonCatalogRepository(path).load() == seeded

    def test_keeps_existing_without_force(self, tmp_path):
        path = tmp_path / "catalog.json"
        first = seed_catalog.main("json", path)

        second = seed_catalog.main("json", path)

        assert second == first

    def test_force_overwrites(self, tmp_path):
        path = tmp_path / "catalog.json"
        first = seed_catalog.main("json", path)

        second = seed_catalog.main("json", path, force=True)

        assert second != first


class TestReport:
    """Tests for library_report.format_report()."""

    def test_report_sections(self):
        catalog = seed_catalog.build_demo_catalog()

        lines = library_report.format_report(catalog, search_text="java", recommend_for="Alice")

        assert "=== Library Statistics ===" in lines
        assert "Books: 6 (3 available, 3 on loan)" in lines
        assert any(line.startswith("  1. Effective Java") for line in lines)
        assert "=== Recommendations for Alice ===" in lines

    def test_unknown_user_recommendation(self):
        lines = library_report.format_report(seed_catalog.build_demo_catalog(), recommend_for="Zed")

        assert "  Unknown user" in lines

    def test_main_prints_report(self, tmp_path, capsys):
        path = tmp_path / "catalog.db"
        seed_catalog.main("sqlite", path)

        library_report.main("sqlite", path)

        assert "=== Most Popular Books ===" in capsys.readouterr().out

"""
JSON file implementation of the CatalogRepository port.

The whole catalog is written as one JSON document. Writes go to a
temporary file in the same directory which then replaces the target with
os.replace, so readers see either the old or the new snapshot, never a
partial one.
"""

import logging
import os
import tempfile
from pathlib import Path

from library_app.domain.catalog import Catalog
from library_app.domain.ports import CatalogRepository
from library_app.infrastructure.serialization import converters

logger = logging.getLogger(__name__)


class JsonCatalogRepository(CatalogRepository):
    """Stores the catalog snapshot in a single JSON file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def save(self, catalog: Catalog) -> None:
        """Atomically replace the JSON file with the given catalog."""
        document = converters.catalog_to_json(catalog)

        tmp_name = None
        try:
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(document)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self._path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise RuntimeError(f"Failed to save catalog to {self._path}: {e}") from e

        logger.info("Saved catalog to %s: %r", self._path, catalog)

    def load(self) -> Catalog:
        """
        Read the catalog back.

        A missing file yields an empty catalog.
        """
        if not self.exists():
            logger.info("No catalog file at %s, starting with an empty catalog", self._path)
            return Catalog.empty()

        try:
            document = self._path.read_text(encoding="utf-8")
        except OSError as e:
            raise RuntimeError(f"Failed to read catalog from {self._path}: {e}") from e

        catalog = converters.catalog_from_json(document)
        logger.info("Loaded catalog from %s: %r", self._path, catalog)
        return catalog

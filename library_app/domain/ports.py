"""
Port interfaces (protocols) for the domain layer.

Ports define the contracts between the domain and infrastructure layers.
They are implemented by adapters in the infrastructure layer, allowing
the domain to remain independent of technical details.

Following Hexagonal Architecture principles, the domain layer depends only
on these abstract protocols, never on concrete implementations.
"""

from typing import List, Protocol

from .catalog import Catalog
from .entities import Book, SearchResult


class CatalogRepository(Protocol):
    """
    Port for persisting and restoring the whole catalog.

    The catalog is stored as a single snapshot. Implementations must write
    all-or-nothing: after a failed save the previous snapshot is still the
    one that load() returns.
    """

    def save(self, catalog: Catalog) -> None:
        """
        Persist the complete catalog, replacing any previous snapshot.

        Args:
            catalog: The catalog state to store

        Raises:
            RuntimeError: If the storage backend fails
        """
        ...

    def load(self) -> Catalog:
        """
        Restore the stored catalog.

        Returns:
            The stored catalog, or an empty catalog if nothing was saved yet

        Raises:
            CatalogIntegrityError: If the stored data violates catalog invariants
            ValueError: If the stored data cannot be parsed
            RuntimeError: If the storage backend fails
        """
        ...

    def exists(self) -> bool:
        """
        Check whether a snapshot has been saved.

        Returns:
            True if load() would return stored data
        """
        ...


class BookSearchIndex(Protocol):
    """
    Port for relevance-ranked keyword search over books.

    The index is derived from the catalog and must be rebuilt when the
    catalog's books change.
    """

    def build_index(self, books: List[Book]) -> None:
        """
        Build or rebuild the index from a list of books.

        Args:
            books: Books to index

        Raises:
            RuntimeError: If index building fails
        """
        ...

    def search(
        self,
        query_text: str,
        max_results: int = 10,
        available_only: bool = False,
    ) -> List[SearchResult]:
        """
        Rank indexed books against a keyword query.

        Args:
            query_text: Free-text query
            max_results: Maximum number of results to return
            available_only: Drop books that are currently on loan

        Returns:
            Results ordered by descending score, rank starting at 1

        Raises:
            ValueError: If query_text is empty
        """
        ...

    def is_ready(self) -> bool:
        """
        Check if the index has been built with at least one book.

        Returns:
            True if the index is ready for search operations
        """
        ...

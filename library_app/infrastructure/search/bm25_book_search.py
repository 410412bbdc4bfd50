"""
BM25-based implementation of the BookSearchIndex port.

BM25 (Best Match 25) is a probabilistic ranking function that scores documents
based on query term frequency, inverse document frequency, and document length
normalization. The plain catalog search in domain.queries answers "which
books match"; this index answers "which books match best".
"""

import logging
from typing import List, Optional

from rank_bm25 import BM25Okapi

from library_app.domain.entities import Book, SearchResult
from library_app.domain.ports import BookSearchIndex

logger = logging.getLogger(__name__)


class BM25BookSearch(BookSearchIndex):
    """
    BM25 index over each book's title, authors and genre.

    This implementation:
    - Builds an in-memory BM25 index from Book.get_searchable_text()
    - Returns SearchResult with complete Book entities
    - Drops zero-score books so unrelated titles never show up
    """

    def __init__(self) -> None:
        self._index: Optional[BM25Okapi] = None
        self._books: List[Book] = []

    def build_index(self, books: List[Book]) -> None:
        """
        Build or rebuild the BM25 index from a list of books.

        Args:
            books: List of books to index

        Raises:
            RuntimeError: If index building fails
        """
        if not books:
            # Empty index is valid
            self._index = None
            self._books = []
            return

        try:
            self._books = list(books)
            tokenized_corpus = [self._tokenize(book.get_searchable_text()) for book in self._books]
            self._index = BM25Okapi(tokenized_corpus)
        except Exception as e:
            raise RuntimeError(f"Failed to build BM25 index: {e}") from e

        logger.info("Built BM25 index over %s books", len(self._books))

    def search(
        self,
        query_text: str,
        max_results: int = 10,
        available_only: bool = False,
    ) -> List[SearchResult]:
        """
        Rank indexed books against a keyword query.

        Args:
            query_text: The search query string
            max_results: Maximum number of results to return
            available_only: Skip books that are on loan

        Returns:
            SearchResults ranked by BM25 score (descending), rank from 1

        Raises:
            ValueError: If query_text is empty or max_results < 1
        """
        if not query_text or not query_text.strip():
            raise ValueError("query_text cannot be empty")
        if max_results < 1:
            raise ValueError(f"max_results must be >= 1, got {max_results}")

        if self._index is None or not self._books:
            return []

        scores = self._index.get_scores(self._tokenize(query_text))

        book_scores = [
            (book, float(score))
            for book, score in zip(self._books, scores)
            if score > 0 and (not available_only or book.is_available)
        ]
        # Stable sort keeps catalog order among equal scores
        book_scores.sort(key=lambda pair: pair[1], reverse=True)

        return [
            SearchResult(book=book, score=score, rank=rank)
            for rank, (book, score) in enumerate(book_scores[:max_results], start=1)
        ]

    def is_ready(self) -> bool:
        """True if the index is built and searchable."""
        return self._index is not None and len(self._books) > 0

    @staticmethod
    def _tokenize(text: str) -> List[str]:
        """Simple whitespace + lowercase tokenizer."""
        return text.lower().split()

"""
Search infrastructure adapters.

This package contains:
- BM25BookSearch: relevance-ranked keyword search using BM25
"""

from .bm25_book_search import BM25BookSearch

__all__ = ["BM25BookSearch"]

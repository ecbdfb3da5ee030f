"""Parsed document storage."""

from .document_cache import CachedDocument, DocumentCache, get_default_cache

__all__ = ["CachedDocument", "DocumentCache", "get_default_cache"]

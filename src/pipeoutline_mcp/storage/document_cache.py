"""In-memory cache of parsed pipeline documents."""

import hashlib
import logging
from collections import OrderedDict
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from .. import config
from ..parser.ast import YAMLDocument
from ..parser.document import TextDocument
from ..parser.yaml_parser import parse_yaml

logger = logging.getLogger(__name__)


class FileTooLargeError(ValueError):
    """Raised when a file exceeds the configured size limit."""


@dataclass
class CachedDocument:
    """A document's text together with its parse result."""
    uri: str
    content_hash: str
    text_document: TextDocument
    yaml_document: YAMLDocument

    def meta(self) -> dict:
        return {
            "uri": self.uri,
            "content_hash": self.content_hash,
            "document_count": len(self.yaml_document.documents),
            "parse_errors": list(self.yaml_document.errors),
        }


def compute_content_hash(data: bytes) -> str:
    """SHA256 of raw file content."""
    return hashlib.sha256(data).hexdigest()


class DocumentCache:
    """LRU of parsed documents keyed by uri; entries are reused while the content hash matches."""

    def __init__(self, max_entries: Optional[int] = None):
        self.max_entries = max_entries if max_entries is not None else config.cache_size()
        self._entries: "OrderedDict[str, CachedDocument]" = OrderedDict()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, uri: str) -> bool:
        return uri in self._entries

    def get_text(self, uri: str, text: str) -> CachedDocument:
        """Return the parsed form of text, parsing only if uri's content changed."""
        return self._get(uri, text.encode("utf-8"), text)

    def get_file(self, path: Path) -> CachedDocument:
        """
        Read and parse a file through the cache.

        Raises:
            FileTooLargeError: file exceeds PIPEOUTLINE_MAX_FILE_SIZE
            UnicodeDecodeError: file is not UTF-8
            OSError: file cannot be read
        """
        limit = config.max_file_size()
        size = path.stat().st_size
        if size > limit:
            raise FileTooLargeError(f"File is {size} bytes, limit is {limit}: {path}")
        data = path.read_bytes()
        return self._get(str(path), data, None)

    def invalidate(self, uri: str) -> bool:
        return self._entries.pop(uri, None) is not None

    def clear(self) -> None:
        self._entries.clear()

    def _get(self, uri: str, data: bytes, text: Optional[str]) -> CachedDocument:
        content_hash = compute_content_hash(data)
        entry = self._entries.get(uri)
        if entry is not None and entry.content_hash == content_hash:
            logger.debug("Document cache hit: %s", uri)
            self._entries.move_to_end(uri)
            return entry

        if text is None:
            text = data.decode("utf-8-sig")
        entry = CachedDocument(
            uri=uri,
            content_hash=content_hash,
            text_document=TextDocument(text, uri=uri),
            yaml_document=parse_yaml(text),
        )
        self._entries[uri] = entry
        self._entries.move_to_end(uri)
        while len(self._entries) > self.max_entries:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Evicted %s from document cache", evicted)
        return entry


_default_cache: Optional[DocumentCache] = None


def get_default_cache() -> DocumentCache:
    """Process-wide cache shared by the tools."""
    global _default_cache
    if _default_cache is None:
        _default_cache = DocumentCache()
    return _default_cache

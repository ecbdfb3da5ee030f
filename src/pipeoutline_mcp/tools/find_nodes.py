"""Tool to find every occurrence of a key in a pipeline file."""

from typing import Optional

from ..parser.traversal import find_occurrences
from ..storage.document_cache import DocumentCache
from .get_outline import load_pipeline


def find_nodes(
    path: str,
    key: str,
    workspace: Optional[str] = None,
    cache: Optional[DocumentCache] = None,
) -> dict:
    """
    Find all properties named `key`, in document order.

    Each result spans the object that holds the property.
    """
    cached, err = load_pipeline(path, workspace, cache)
    if err:
        return err

    nodes = find_occurrences(cached.text_document, cached.yaml_document, key)
    return {
        "file": cached.uri,
        "key": key,
        "count": len(nodes),
        "nodes": [node.to_dict() for node in nodes],
        "_meta": cached.meta(),
    }

"""Tool to get the outline of a pipeline file."""

import logging
from typing import Optional

from ..parser.hierarchy import OutlineNode, build_outline, flatten_tree
from ..security import resolve_pipeline_path
from ..storage.document_cache import CachedDocument, DocumentCache, FileTooLargeError, get_default_cache

logger = logging.getLogger(__name__)


def load_pipeline(
    path: str,
    workspace: Optional[str] = None,
    cache: Optional[DocumentCache] = None,
) -> tuple[Optional[CachedDocument], Optional[dict]]:
    """Resolve, read and parse a local pipeline file. Returns (document, error_dict)."""
    resolved, error = resolve_pipeline_path(path, workspace)
    if error:
        return None, {"error": error}

    cache = cache if cache is not None else get_default_cache()
    try:
        return cache.get_file(resolved), None
    except FileTooLargeError as e:
        return None, {"error": str(e)}
    except UnicodeDecodeError:
        return None, {"error": f"File is not valid UTF-8: {path}"}
    except OSError as e:
        logger.warning("Could not read %s: %s", resolved, e)
        return None, {"error": f"Could not read file: {path}"}


def outline_payload(cached: CachedDocument, flat: bool = False) -> dict:
    """Outline a parsed document into the JSON shape the tools return."""
    root = build_outline(cached.text_document, cached.yaml_document)
    nodes = flatten_tree(root.children)

    result = {
        "node_count": len(nodes),
        "_meta": cached.meta(),
    }
    if flat:
        result["outline"] = [_flat_entry(node, depth) for node, depth in nodes]
    else:
        result["outline"] = root.to_dict()
    return result


def _flat_entry(node: OutlineNode, depth: int) -> dict:
    entry = node.to_dict()
    del entry["children"]
    entry["depth"] = depth
    return entry


def get_outline(
    path: str,
    workspace: Optional[str] = None,
    flat: bool = False,
    cache: Optional[DocumentCache] = None,
) -> dict:
    """
    Get the outline of a pipeline file.

    Args:
        path: Path to the pipeline YAML file
        workspace: Optional root the path must stay within
        flat: Return a pre-order list with depths instead of a nested tree
        cache: Document cache (defaults to the process-wide cache)

    Returns:
        Dict with the outline tree (or flat list) and parse metadata
    """
    cached, err = load_pipeline(path, workspace, cache)
    if err:
        return err

    result = {"file": cached.uri}
    result.update(outline_payload(cached, flat))
    return result

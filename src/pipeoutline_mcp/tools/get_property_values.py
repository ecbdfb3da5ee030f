"""Tool to read the values nested under a property at a cursor position."""

from typing import Optional

from ..parser.document import Position
from ..parser.traversal import read_property_scope
from ..storage.document_cache import DocumentCache
from .get_outline import load_pipeline


def get_property_values(
    path: str,
    line: int,
    character: int,
    property_name: str,
    workspace: Optional[str] = None,
    cache: Optional[DocumentCache] = None,
) -> dict:
    """
    Get the sub-values of `property_name` in the object enclosing a position.

    Args:
        path: Path to the pipeline YAML file
        line: Zero-based line of the cursor
        character: Zero-based character of the cursor
        property_name: Property to read, e.g. "inputs"
        workspace: Optional root the path must stay within
        cache: Document cache (defaults to the process-wide cache)

    Returns:
        Dict whose "values" is a name -> value mapping, or None when the
        enclosing object has no single property of that name
    """
    if line < 0 or character < 0:
        return {"error": f"Invalid position: line={line}, character={character}"}

    cached, err = load_pipeline(path, workspace, cache)
    if err:
        return err

    position = Position(line=line, character=character)
    values = read_property_scope(cached.text_document, cached.yaml_document, position, property_name)
    return {
        "file": cached.uri,
        "property": property_name,
        "position": position.to_dict(),
        "values": values,
        "_meta": cached.meta(),
    }

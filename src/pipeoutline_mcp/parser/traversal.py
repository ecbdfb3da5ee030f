"""Key lookups over a parsed YAML document."""

from dataclasses import dataclass
from typing import Optional

from .ast import ObjectNode, PropertyNode, YAMLDocument, stringify_value
from .document import Position, TextDocument


@dataclass
class NodeInfo:
    """One occurrence of a key, spanning the object that holds it."""
    start_position: Position
    end_position: Position
    key: str
    value: str

    def to_dict(self) -> dict:
        return {
            "key": self.key,
            "value": self.value,
            "range": {
                "start": self.start_position.to_dict(),
                "end": self.end_position.to_dict(),
            },
        }


def find_occurrences(
    document: Optional[TextDocument],
    yaml_document: YAMLDocument,
    key: str,
) -> list[NodeInfo]:
    """Collect every property named key, in document order."""
    if document is None:
        return []

    parsed = yaml_document.first
    if parsed is None:
        return []

    nodes: list[NodeInfo] = []
    for node in parsed.walk():
        if not isinstance(node, PropertyNode) or node.key_name != key:
            continue
        holder = node.parent if node.parent is not None else node
        nodes.append(NodeInfo(
            start_position=document.position_at(holder.start),
            end_position=document.position_at(holder.end),
            key=node.key_name,
            value=stringify_value(node.get_value()),
        ))
    return nodes


def read_property_scope(
    document: Optional[TextDocument],
    yaml_document: YAMLDocument,
    position: Position,
    property_name: str,
) -> Optional[dict[str, str]]:
    """
    Read the sub-values of property_name in the object around position.

    Walks up from the node under the cursor to the nearest object. That object
    must have exactly one property named property_name, otherwise there is no
    answer and None is returned. If the property holds an object, its keys map
    to their stringified values; any other value gives an empty dict.
    """
    if document is None:
        return None

    parsed = yaml_document.first
    if parsed is None:
        return None

    offset = document.offset_at(position)
    node = parsed.get_node_from_offset(offset)
    while node is not None and not isinstance(node, ObjectNode):
        node = node.parent
    if node is None:
        return None

    matches = [p for p in node.properties if p.key_name == property_name]
    if len(matches) != 1:
        return None

    values: dict[str, str] = {}
    scope = matches[0].value
    if isinstance(scope, ObjectNode):
        for prop in scope.properties:
            values[prop.key_name] = stringify_value(prop.get_value())
    return values

"""Pipeline YAML parsing and outline utilities."""

from .document import Position, TextDocument
from .hierarchy import OutlineNode, build_outline
from .traversal import NodeInfo, find_occurrences, read_property_scope
from .yaml_parser import parse_yaml

__all__ = [
    "Position",
    "TextDocument",
    "OutlineNode",
    "build_outline",
    "NodeInfo",
    "find_occurrences",
    "read_property_scope",
    "parse_yaml",
]

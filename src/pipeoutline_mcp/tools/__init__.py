"""MCP tool implementations."""

from .get_outline import get_outline
from .find_nodes import find_nodes
from .get_property_values import get_property_values
from .list_pipeline_files import list_pipeline_files
from .get_remote_outline import get_remote_outline

__all__ = [
    "get_outline",
    "find_nodes",
    "get_property_values",
    "list_pipeline_files",
    "get_remote_outline",
]

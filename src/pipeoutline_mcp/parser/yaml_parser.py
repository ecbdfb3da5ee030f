"""YAML parsing into the pipeline syntax tree."""

import logging
from typing import Optional

import yaml

from .. import config
from .ast import (
    ASTNode,
    ArrayNode,
    BooleanNode,
    Location,
    NullNode,
    NumberNode,
    ObjectNode,
    ParsedDocument,
    PropertyNode,
    StringNode,
    YAMLDocument,
)

logger = logging.getLogger(__name__)


class NodeBudgetExceeded(Exception):
    """Raised when alias expansion would build more AST nodes than allowed."""


class _NodeConverter:
    """Convert a composed PyYAML node graph into AST nodes."""

    def __init__(self, max_nodes: int):
        self._constructor = yaml.SafeLoader("")
        self.max_nodes = max_nodes
        self._remaining = max_nodes
        # Nodes currently being converted; a repeat means a recursive alias.
        self._active: set[int] = set()

    def close(self) -> None:
        self._constructor.dispose()

    def _spend(self, count: int = 1) -> None:
        self._remaining -= count
        if self._remaining < 0:
            raise NodeBudgetExceeded(
                f"Document expands to more than {self.max_nodes} nodes "
                "(alias expansion); parsing stopped"
            )

    def convert(
        self,
        node: yaml.Node,
        parent: Optional[ASTNode] = None,
        location: Location = None,
    ) -> ASTNode:
        start, end = node.start_mark.index, node.end_mark.index
        self._spend()
        if id(node) in self._active:
            return NullNode(start=start, end=end, parent=parent, location=location)

        self._active.add(id(node))
        try:
            if isinstance(node, yaml.MappingNode):
                return self._convert_mapping(node, parent, location)
            if isinstance(node, yaml.SequenceNode):
                array = ArrayNode(start=start, end=end, parent=parent, location=location)
                for index, item in enumerate(node.value):
                    array.items.append(self.convert(item, array, index))
                return array
            return self._convert_scalar(node, parent, location)
        finally:
            self._active.discard(id(node))

    def _convert_mapping(
        self,
        node: yaml.MappingNode,
        parent: Optional[ASTNode],
        location: Location,
    ) -> ObjectNode:
        obj = ObjectNode(
            start=node.start_mark.index,
            end=node.end_mark.index,
            parent=parent,
            location=location,
        )
        for key_node, value_node in node.value:
            self._spend(2)
            prop = PropertyNode(
                start=key_node.start_mark.index,
                end=value_node.end_mark.index,
                parent=obj,
            )
            key_text = key_node.value if isinstance(key_node, yaml.ScalarNode) else ""
            prop.key = StringNode(
                start=key_node.start_mark.index,
                end=key_node.end_mark.index,
                parent=prop,
                value=key_text,
            )
            prop.value = self.convert(value_node, prop, key_text)
            obj.properties.append(prop)
        return obj

    def _convert_scalar(
        self,
        node: yaml.ScalarNode,
        parent: Optional[ASTNode],
        location: Location,
    ) -> ASTNode:
        span = dict(start=node.start_mark.index, end=node.end_mark.index, parent=parent, location=location)
        try:
            value = self._constructor.construct_object(node)
        except (yaml.YAMLError, ValueError):
            value = node.value

        if value is None:
            return NullNode(**span)
        if isinstance(value, bool):
            return BooleanNode(value=value, **span)
        if isinstance(value, (int, float)):
            return NumberNode(value=value, **span)
        if isinstance(value, str):
            return StringNode(value=value, **span)
        # Timestamps, binary and other tagged scalars keep their source text
        return StringNode(value=str(node.value), **span)


def parse_yaml(text: str, max_nodes: Optional[int] = None) -> YAMLDocument:
    """
    Parse a YAML stream into a YAMLDocument.

    Every document in the stream becomes a ParsedDocument. A syntax error
    stops parsing; documents composed before the error are kept and the
    error message is recorded on the result. The same happens when aliases
    expand past ``max_nodes`` AST nodes or nesting exceeds the recursion limit.
    """
    if max_nodes is None:
        max_nodes = config.max_ast_nodes()
    result = YAMLDocument()
    converter = _NodeConverter(max_nodes)
    try:
        for node in yaml.compose_all(text, Loader=yaml.SafeLoader):
            root = converter.convert(node) if node is not None else None
            result.documents.append(ParsedDocument(root=root))
    except (yaml.YAMLError, NodeBudgetExceeded) as e:
        logger.warning("YAML parse error after %d document(s): %s", len(result.documents), e)
        result.errors.append(str(e))
    except RecursionError:
        logger.warning("YAML nesting too deep after %d document(s)", len(result.documents))
        result.errors.append("Document is nested too deeply to parse")
    finally:
        converter.close()
    return result

"""Read-only syntax tree for parsed pipeline documents."""

import json
from dataclasses import dataclass, field
from typing import Any, Iterator, Optional, Union

Location = Union[str, int, None]


@dataclass(eq=False)
class ASTNode:
    """Base node. Offsets are character indices into the document text."""
    start: int
    end: int
    parent: Optional["ASTNode"] = field(default=None, repr=False)
    location: Location = None

    kind = "value"

    @property
    def children(self) -> list["ASTNode"]:
        return []

    def contains(self, offset: int, include_right_bound: bool = False) -> bool:
        return self.start <= offset < self.end or (include_right_bound and offset == self.end)

    def get_value(self) -> Any:
        return None

    def walk(self) -> Iterator["ASTNode"]:
        """Yield this node and every descendant in pre-order."""
        stack: list[ASTNode] = [self]
        while stack:
            node = stack.pop()
            yield node
            stack.extend(reversed(node.children))

    def get_node_from_offset(self, offset: int, include_right_bound: bool = False) -> Optional["ASTNode"]:
        """Return the innermost node covering offset, or None."""
        if not self.contains(offset, include_right_bound):
            return None
        node: ASTNode = self
        while True:
            for child in node.children:
                if child.contains(offset, include_right_bound):
                    node = child
                    break
            else:
                return node


@dataclass(eq=False)
class NullNode(ASTNode):
    kind = "null"


@dataclass(eq=False)
class BooleanNode(ASTNode):
    value: bool = False

    kind = "boolean"

    def get_value(self) -> bool:
        return self.value


@dataclass(eq=False)
class NumberNode(ASTNode):
    value: Union[int, float] = 0

    kind = "number"

    def get_value(self) -> Union[int, float]:
        return self.value


@dataclass(eq=False)
class StringNode(ASTNode):
    value: str = ""

    kind = "string"

    def get_value(self) -> str:
        return self.value


@dataclass(eq=False)
class PropertyNode(ASTNode):
    """A key/value pair inside an object."""
    key: Optional[StringNode] = None
    value: Optional[ASTNode] = None

    kind = "property"

    @property
    def key_name(self) -> str:
        return self.key.value if self.key is not None else ""

    @property
    def children(self) -> list[ASTNode]:
        return [n for n in (self.key, self.value) if n is not None]

    def get_value(self) -> Any:
        return self.value.get_value() if self.value is not None else None


@dataclass(eq=False)
class ObjectNode(ASTNode):
    properties: list[PropertyNode] = field(default_factory=list)

    kind = "object"

    @property
    def children(self) -> list[ASTNode]:
        return list(self.properties)

    def get_value(self) -> dict:
        return {p.key_name: p.get_value() for p in self.properties}


@dataclass(eq=False)
class ArrayNode(ASTNode):
    """A sequence. `location` names the field the array populates."""
    items: list[ASTNode] = field(default_factory=list)

    kind = "array"

    @property
    def children(self) -> list[ASTNode]:
        return list(self.items)

    def get_value(self) -> list:
        return [item.get_value() for item in self.items]


@dataclass(eq=False)
class ParsedDocument:
    """One top-level document of a YAML stream."""
    root: Optional[ASTNode]

    def walk(self) -> Iterator[ASTNode]:
        if self.root is not None:
            yield from self.root.walk()

    def get_node_from_offset(self, offset: int) -> Optional[ASTNode]:
        if self.root is None:
            return None
        return self.root.get_node_from_offset(offset)


@dataclass
class YAMLDocument:
    """Result of parsing a YAML stream: zero or more documents."""
    documents: list[ParsedDocument] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    @property
    def first(self) -> Optional[ParsedDocument]:
        return self.documents[0] if self.documents else None


def stringify_value(value: Any) -> str:
    """Render a get_value() read-out as display text."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value, separators=(",", ":"), default=str)
    return str(value)

"""Build the pipeline outline tree from a parsed YAML document."""

from dataclasses import dataclass, field
from typing import Optional

from .ast import ArrayNode, ASTNode, ObjectNode, PropertyNode, YAMLDocument, stringify_value
from .document import Position, TextDocument

OUTLINE_KEYS = frozenset({"stage", "task", "script", "job", "deployment"})
OUTLINE_ARRAYS = frozenset({"stages", "steps", "jobs"})

ROOT_KEY = "root"


@dataclass
class OutlineNode:
    """A node in the outline tree."""
    key: str
    value: Optional[str]
    start_position: Position
    end_position: Position
    children: list["OutlineNode"] = field(default_factory=list)
    is_array: bool = False

    def to_dict(self) -> dict:
        result = {
            "key": self.key,
            "value": self.value,
            "range": {
                "start": self.start_position.to_dict(),
                "end": self.end_position.to_dict(),
            },
            "children": [child.to_dict() for child in self.children],
        }
        if self.is_array:
            result["is_array"] = True
        return result


def _nearest_outlined(node: ASTNode, node_map: dict[int, OutlineNode]) -> Optional[OutlineNode]:
    """Walk up from node's parent to the closest ancestor that produced an outline node."""
    ancestor = node.parent
    while ancestor is not None and id(ancestor) not in node_map:
        ancestor = ancestor.parent
    return node_map[id(ancestor)] if ancestor is not None else None


def _enclosing_object(node: ASTNode) -> ASTNode:
    ancestor = node.parent
    while ancestor is not None and not isinstance(ancestor, ObjectNode):
        ancestor = ancestor.parent
    return ancestor if ancestor is not None else node


def build_outline(document: TextDocument, yaml_document: YAMLDocument) -> OutlineNode:
    """
    Build the outline tree of the first document in yaml_document.

    Only properties keyed by OUTLINE_KEYS and arrays located at OUTLINE_ARRAYS
    produce nodes. Each node hangs off its closest outlined ancestor; anything
    below a task is left out. Array wrappers are collapsed by flatten_arrays()
    before the tree is returned.

    Returns an empty root when there is no document to outline.
    """
    parsed = yaml_document.first
    if parsed is None or parsed.root is None:
        origin = Position(0, 0)
        return OutlineNode(key=ROOT_KEY, value=ROOT_KEY, start_position=origin, end_position=origin)

    root = OutlineNode(
        key=ROOT_KEY,
        value=ROOT_KEY,
        start_position=document.position_at(parsed.root.start),
        end_position=document.position_at(parsed.root.end),
    )
    # Keyed by id() of the AST node; lives only for this call.
    node_map: dict[int, OutlineNode] = {}

    for node in parsed.walk():
        if isinstance(node, PropertyNode):
            if node.key_name not in OUTLINE_KEYS:
                continue
            parent = _nearest_outlined(node, node_map)
            if parent is not None and parent.key == "task":
                continue
            span_node = _enclosing_object(node)
            outline_node = OutlineNode(
                key=node.key_name,
                value=stringify_value(node.get_value()),
                start_position=document.position_at(span_node.start),
                end_position=document.position_at(span_node.end),
            )
        elif isinstance(node, ArrayNode):
            if node.location not in OUTLINE_ARRAYS:
                continue
            parent = _nearest_outlined(node, node_map)
            if parent is not None and parent.key == "task":
                continue
            outline_node = OutlineNode(
                key=node.location,
                value=None,
                start_position=document.position_at(node.start),
                end_position=document.position_at(node.end),
                is_array=True,
            )
        else:
            continue

        node_map[id(node)] = outline_node
        (parent or root).children.append(outline_node)

    flatten_arrays(root)
    return root


def flatten_arrays(node: OutlineNode) -> None:
    """
    Collapse array wrapper nodes in place, children first.

    A lone wrapper child is replaced by its children. Otherwise every wrapper
    after the first position hands its children to the previous kept sibling
    and disappears. A wrapper in the first position is kept as is.
    """
    for child in node.children:
        flatten_arrays(child)

    if len(node.children) == 1 and node.children[0].is_array:
        node.children = node.children[0].children
        return

    new_children: list[OutlineNode] = []
    for i, child in enumerate(node.children):
        if child.is_array and i != 0:
            new_children[-1].children.extend(child.children)
        else:
            new_children.append(child)
    node.children = new_children


def flatten_tree(nodes: list[OutlineNode], depth: int = 0) -> list[tuple[OutlineNode, int]]:
    """
    Flatten tree to a pre-order list with indent depth.

    Returns list of (node, indent_depth) tuples.
    """
    result: list[tuple[OutlineNode, int]] = []
    for node in nodes:
        result.append((node, depth))
        result.extend(flatten_tree(node.children, depth + 1))
    return result

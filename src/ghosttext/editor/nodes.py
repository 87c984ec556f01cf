"""Document tree, selection and mark types for the in-memory host editor."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import re
from typing import Iterator


ROOT_KEY = "root"

FORMAT_BOLD = 1
FORMAT_ITALIC = 1 << 1
FORMAT_STRIKETHROUGH = 1 << 2
FORMAT_UNDERLINE = 1 << 3
FORMAT_CODE = 1 << 4

_STYLE_DECLARATION_RE = re.compile(r"\s*([A-Za-z-]+)\s*:\s*([^;]+?)\s*(?:;|$)")


@dataclass(slots=True)
class RootNode:
    key: str
    children: list[str] = field(default_factory=list)
    parent: str | None = None


@dataclass(slots=True)
class ParagraphNode:
    key: str
    children: list[str] = field(default_factory=list)
    parent: str | None = None


@dataclass(slots=True)
class TextNode:
    key: str
    text: str = ""
    format: int = 0
    style: str = ""
    parent: str | None = None


@dataclass(slots=True)
class LineBreakNode:
    key: str
    parent: str | None = None

    @property
    def text(self) -> str:
        return "\n"


ElementNode = RootNode | ParagraphNode
LeafNode = TextNode | LineBreakNode
Node = RootNode | ParagraphNode | TextNode | LineBreakNode


def is_element(node: object) -> bool:
    return isinstance(node, (RootNode, ParagraphNode))


@dataclass(frozen=True, slots=True)
class Point:
    """A caret position: node key plus character (or child) offset."""

    key: str
    offset: int


@dataclass(frozen=True, slots=True)
class RangeSelection:
    anchor: Point
    focus: Point

    @classmethod
    def collapsed(cls, key: str, offset: int) -> "RangeSelection":
        point = Point(key=key, offset=offset)
        return cls(anchor=point, focus=point)

    @property
    def is_collapsed(self) -> bool:
        return self.anchor == self.focus


@dataclass(frozen=True, slots=True)
class NodeMark:
    """Out-of-band metadata attached to a node key.

    Marks live beside the tree rather than on node subclasses, so a marked
    node is still a plain ``TextNode`` for every traversal and mutation.
    """

    kind: str
    session_id: str
    editable: bool = False


@dataclass(slots=True)
class EditorState:
    """Attached nodes by key, the current selection and the mark registry.

    Only attached nodes are stored: a key missing from ``nodes`` means the node
    was removed (or never inserted).
    """

    nodes: dict[str, Node]
    selection: RangeSelection | None = None
    marks: dict[str, NodeMark] = field(default_factory=dict)

    @classmethod
    def empty(cls) -> "EditorState":
        return cls(nodes={ROOT_KEY: RootNode(key=ROOT_KEY)})

    @property
    def root(self) -> RootNode:
        root = self.nodes[ROOT_KEY]
        assert isinstance(root, RootNode)
        return root

    def copy(self) -> "EditorState":
        return copy.deepcopy(self)

    def get_node(self, key: str) -> Node | None:
        return self.nodes.get(key)

    def is_attached(self, key: str | None) -> bool:
        return key is not None and key in self.nodes

    def get_mark(self, key: str) -> NodeMark | None:
        return self.marks.get(key)

    def children(self, key: str) -> list[Node]:
        node = self.nodes.get(key)
        if not is_element(node):
            return []
        return [self.nodes[child_key] for child_key in node.children]  # type: ignore[union-attr]

    def index_in_parent(self, key: str) -> int:
        node = self.nodes[key]
        if node.parent is None:
            raise ValueError(f"Node {key} has no parent")
        parent = self.nodes[node.parent]
        return parent.children.index(key)  # type: ignore[union-attr]

    def previous_sibling(self, key: str) -> Node | None:
        node = self.nodes.get(key)
        if node is None or node.parent is None:
            return None
        index = self.index_in_parent(key)
        if index == 0:
            return None
        parent = self.nodes[node.parent]
        return self.nodes[parent.children[index - 1]]  # type: ignore[union-attr]

    def next_sibling(self, key: str) -> Node | None:
        node = self.nodes.get(key)
        if node is None or node.parent is None:
            return None
        parent = self.nodes[node.parent]
        siblings = parent.children  # type: ignore[union-attr]
        index = siblings.index(key)
        if index + 1 >= len(siblings):
            return None
        return self.nodes[siblings[index + 1]]

    def iter_preorder(self) -> Iterator[Node]:
        stack: list[str] = [ROOT_KEY]
        while stack:
            node = self.nodes[stack.pop()]
            yield node
            if is_element(node):
                stack.extend(reversed(node.children))  # type: ignore[union-attr]

    def iter_leaves(self, *, include_marked: bool = True) -> Iterator[LeafNode]:
        for node in self.iter_preorder():
            if not isinstance(node, (TextNode, LineBreakNode)):
                continue
            if not include_marked and node.key in self.marks:
                continue
            yield node

    def text_content(self, *, include_marked: bool = True) -> str:
        return "".join(leaf.text for leaf in self.iter_leaves(include_marked=include_marked))


def parse_style(style: str) -> dict[str, str]:
    """Parse an inline CSS declaration string into an ordered mapping."""
    return {match.group(1).lower(): match.group(2) for match in _STYLE_DECLARATION_RE.finditer(style or "")}


def format_style(values: dict[str, str]) -> str:
    return "; ".join(f"{name}: {value}" for name, value in values.items())

"""
Node identity and state store.

Builds the tree once from nested host data and keeps the mutable per-node
state (expansion, selection, previous screen position) that must survive
across re-renders.
"""

import json
import logging
import weakref
from collections import deque
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple, Union

import jsonschema

from collapsible_tree.core.errors import MalformedHierarchy, StaleStateReference

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).parent.parent / "schemas" / "hierarchy-schema.json"

# Radius 5 when the host does not size the node
DEFAULT_SIZE = 25.0


@dataclass(eq=False)
class TreeNode:
    """A single entry in the hierarchy.

    ``children`` is owned by the node and never changes after construction;
    ``expanded`` decides whether it is shown (``visible_children``) or
    collapsed away (``hidden_children``).
    """

    name: str
    size: float = DEFAULT_SIZE
    weight: float = 0
    tooltip: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    children: List["TreeNode"] = field(default_factory=list)

    expanded: bool = True
    selected: bool = False
    depth: int = 0
    identity: Optional[int] = None
    root_ancestor_id: Optional[int] = None

    # Previous rendered position
    x0: Optional[float] = None
    y0: Optional[float] = None

    _parent_ref: Optional[Callable[[], Optional["TreeNode"]]] = field(
        default=None, repr=False
    )

    @property
    def parent(self) -> Optional["TreeNode"]:
        if self._parent_ref is None:
            return None
        parent = self._parent_ref()
        if parent is None:
            raise StaleStateReference(f"Parent of node '{self.name}' no longer exists")
        return parent

    @parent.setter
    def parent(self, value: Optional["TreeNode"]) -> None:
        self._parent_ref = weakref.ref(value) if value is not None else None

    @property
    def is_leaf(self) -> bool:
        return not self.children

    @property
    def visible_children(self) -> List["TreeNode"]:
        return self.children if self.expanded else []

    @property
    def hidden_children(self) -> List["TreeNode"]:
        return [] if self.expanded else self.children

    @property
    def radius(self) -> float:
        return self.size**0.5

    @property
    def previous_position(self) -> Optional[Tuple[float, float]]:
        if self.x0 is None or self.y0 is None:
            return None
        return (self.x0, self.y0)


def validate_hierarchy(data: Any) -> None:
    """Validate host data against the bundled hierarchy schema.

    Raises
    ------
    MalformedHierarchy
        If the data does not match the schema.
    """
    with open(SCHEMA_PATH) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(data, schema)
    except jsonschema.ValidationError as err:
        location = "/".join(str(p) for p in err.absolute_path) or "<root>"
        raise MalformedHierarchy(f"Invalid hierarchy at {location}: {err.message}") from err


def _build_node(data: Dict[str, Any], parent: Optional[TreeNode], depth: int) -> TreeNode:
    size = data.get("SizeOfNode")
    weight = data.get("WeightOfNode")
    node = TreeNode(
        name=str(data["name"]),
        size=DEFAULT_SIZE if size is None else float(size),
        weight=0 if weight is None else weight,
        tooltip=data.get("tooltip"),
        data={k: v for k, v in data.items() if k != "children"},
        depth=depth,
    )
    node.parent = parent
    node.children = [_build_node(child, node, depth + 1) for child in data.get("children") or []]
    return node


class NodeStore:
    """Owns the tree and every piece of state that outlives a single render.

    Parameters
    ----------
    root : TreeNode
        Root of a fully built hierarchy.
    """

    def __init__(self, root: TreeNode) -> None:
        self.root = root
        self._counter = 0
        self._by_identity: Dict[int, TreeNode] = {}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "NodeStore":
        """Validate nested host data and build the node graph."""
        validate_hierarchy(data)
        return cls(_build_node(data, None, 0))

    # ------------------------------------------------------------ Identity
    def assign_identity(self, node: TreeNode) -> int:
        """Return the node's identity, assigning the next one on first call."""
        if node.identity is not None:
            return node.identity

        parent = node.parent
        if parent is not None and parent.identity is None:
            self.assign_identity(parent)

        self._counter += 1
        node.identity = self._counter
        self._by_identity[node.identity] = node
        if node.depth > 1 and parent is not None:
            node.root_ancestor_id = parent.root_ancestor_id
        else:
            node.root_ancestor_id = node.identity
        logger.debug("Assigned identity %d to node '%s'", node.identity, node.name)
        return node.identity

    def find(self, identity: int) -> TreeNode:
        """Look up a node by identity.

        Raises
        ------
        KeyError
            If no node has been assigned this identity.
        """
        try:
            return self._by_identity[identity]
        except KeyError:
            raise KeyError(f"Node {identity} not found") from None

    # ----------------------------------------------------------- Traversal
    def visible_nodes(self) -> List[TreeNode]:
        """Visible nodes in breadth-first order, refreshing each depth."""
        self.root.depth = 0
        result = []
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            result.append(node)
            for child in node.visible_children:
                child.depth = node.depth + 1
                queue.append(child)
        return result

    def iter_nodes(self) -> Iterator[TreeNode]:
        """Every node, visible or collapsed away, in breadth-first order."""
        queue = deque([self.root])
        while queue:
            node = queue.popleft()
            yield node
            queue.extend(node.children)

    @property
    def max_depth(self) -> int:
        """Depth of the deepest node in the full hierarchy."""
        return max(node.depth for node in self.iter_nodes())

    # ------------------------------------------------------------ Mutation
    def toggle_expanded(self, node: TreeNode) -> None:
        self._ensure_attached(node)
        node.expanded = not node.expanded

    def toggle_selected(self, node: TreeNode) -> None:
        self._ensure_attached(node)
        node.selected = not node.selected

    def set_previous_position(self, node: TreeNode, x: float, y: float) -> None:
        node.x0 = x
        node.y0 = y

    def previous_position(self, node: TreeNode) -> Optional[Tuple[float, float]]:
        return node.previous_position

    def apply_collapse_policy(self, collapsed: Union[bool, str]) -> None:
        """Collapse every subtree below depth 1.

        When ``collapsed`` names a field, nodes whose data carries that field
        with a false value are left expanded (their descendants are still
        visited).
        """
        if not collapsed:
            return
        for child in self.root.children:
            self._collapse(child, collapsed)

    def _collapse(self, node: TreeNode, collapsed: Union[bool, str]) -> None:
        if node.is_leaf:
            return
        keep_open = (
            isinstance(collapsed, str) and collapsed in node.data and not node.data[collapsed]
        )
        if not keep_open:
            node.expanded = False
        for child in node.children:
            self._collapse(child, collapsed)

    def _ensure_attached(self, node: TreeNode) -> None:
        current = node
        while current.parent is not None:
            current = current.parent
        if current is not self.root:
            raise StaleStateReference(f"Node '{node.name}' is not part of this tree")

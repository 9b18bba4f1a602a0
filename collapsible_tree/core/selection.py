"""Selection aggregator: the selected nodes, grouped by hierarchy level."""

import json
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from collapsible_tree.core.node import NodeStore, TreeNode
from collapsible_tree.core.options import level_label


@dataclass
class SelectionRecord:
    """One selected node as reported to the host.

    Attributes
    ----------
    identity : int, optional
        Identity of the node's depth-1 ancestor, grouping records by branch.
    parent : str
        Name of the node's parent.
    level : str, optional
        Hierarchy label for the node's depth.
    value : str
        Name of the node.
    """

    identity: Optional[int]
    parent: str
    level: Optional[str]
    value: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identity,
            "parent": self.parent,
            "level": self.level,
            "value": self.value,
        }


def aggregate_selection(store: NodeStore, hierarchy: List[str]) -> List[SelectionRecord]:
    """Build the selection record from the current ``selected`` flags.

    Walks the visible nodes breadth-first and reports every selected node
    below the root. Selected nodes inside collapsed subtrees are left out.
    Depends only on node state, never on render timing.
    """
    records = []
    for node in store.visible_nodes():
        parent = node.parent
        if parent is None or not node.selected:
            continue
        depth = parent.depth + 1
        records.append(
            SelectionRecord(
                identity=node.root_ancestor_id,
                parent=parent.name,
                level=level_label(hierarchy, depth),
                value=node.name,
            )
        )
    return records


def selection_json(records: List[SelectionRecord]) -> str:
    """Serialise records the way they are delivered to the host."""
    return json.dumps([r.to_dict() for r in records])


def selection_path(node: TreeNode, hierarchy: List[str]) -> Dict[str, List[str]]:
    """Selected names along the path from ``node`` up to depth 1, keyed by level.

    Unselected ancestors are skipped; the root is never included.
    """
    nest: Dict[str, List[str]] = {}
    current: Optional[TreeNode] = node
    while current is not None and current.parent is not None:
        if current.selected:
            level = level_label(hierarchy, current.depth)
            if level is not None:
                nest.setdefault(level, []).append(current.name)
        current = current.parent
    return nest

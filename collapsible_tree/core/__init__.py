"""Core tree state, render driver and selection."""

from collapsible_tree.core.node import NodeStore, TreeNode
from collapsible_tree.core.render import (
    LinkTransition,
    NodeState,
    NodeStyle,
    NodeTransition,
    Phase,
    RenderDriver,
    RenderPlan,
)
from collapsible_tree.core.selection import (
    SelectionRecord,
    aggregate_selection,
    selection_json,
    selection_path,
)

__all__ = [
    "TreeNode",
    "NodeStore",
    "Phase",
    "NodeState",
    "NodeStyle",
    "NodeTransition",
    "LinkTransition",
    "RenderPlan",
    "RenderDriver",
    "SelectionRecord",
    "aggregate_selection",
    "selection_json",
    "selection_path",
]

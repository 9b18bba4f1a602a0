"""
Collapsible Tree — Explore hierarchical data as an expandable node-link diagram in Jupyter notebooks.
"""

__version__ = "0.1.0"

from collapsible_tree.core.channel import CallbackChannel, HostChannel
from collapsible_tree.core.collapsible_tree import CollapsibleTree
from collapsible_tree.core.errors import (
    CollapsibleTreeError,
    InvalidConfiguration,
    MalformedHierarchy,
    StaleStateReference,
)
from collapsible_tree.core.node import NodeStore, TreeNode
from collapsible_tree.core.options import Margin, TreeOptions
from collapsible_tree.core.render import RenderPlan
from collapsible_tree.core.selection import SelectionRecord


def collapsible_tree(data, width=960, height=500, channel=None, **options):  # type: ignore[no-untyped-def]
    """Convenience function to build and render a tree in one call."""
    tree = CollapsibleTree(width=width, height=height, channel=channel)
    tree.render_value(data, options)
    return tree


__all__ = [
    "CollapsibleTree",
    "TreeNode",
    "NodeStore",
    "TreeOptions",
    "Margin",
    "RenderPlan",
    "SelectionRecord",
    "HostChannel",
    "CallbackChannel",
    "CollapsibleTreeError",
    "MalformedHierarchy",
    "InvalidConfiguration",
    "StaleStateReference",
    "collapsible_tree",
    "__version__",
]

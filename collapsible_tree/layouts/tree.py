"""Tidy tree layout for the visible part of the hierarchy."""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from collapsible_tree.core.node import TreeNode

Separation = Callable[[TreeNode, TreeNode], float]

# Sibling spacing is the summed radii divided by this
SIBLING_SPACING_DIVISOR = 25


def separation(a: TreeNode, b: TreeNode) -> float:
    """Spacing between two neighbouring nodes at the same depth.

    Siblings are spaced by their summed radii, so larger nodes get more room;
    cousins always get a fixed spacing of 1.
    """
    if a.parent is b.parent:
        return (a.radius + b.radius) / SIBLING_SPACING_DIVISOR
    return 1


@dataclass
class Placement:
    """Position assigned to a visible node.

    ``x`` runs along the breadth of the tree (vertical on screen) and ``y``
    along its depth (horizontal on screen).
    """

    node: TreeNode
    x: float
    y: float


class LayoutAdapter(ABC):
    """Positions the visible nodes of a tree within ``size``.

    Implementations only follow ``visible_children``.
    """

    def __init__(
        self,
        size: Tuple[float, float] = (1.0, 1.0),
        separation: Separation = separation,
    ) -> None:
        self.size = size
        self.separation = separation

    @abstractmethod
    def layout(self, root: TreeNode) -> List[Placement]:
        """Return placements for the visible nodes, breadth-first."""
        ...


class TidyTreeLayout(LayoutAdapter):
    """Contour-based tidy tree layout.

    Each child subtree is pushed right until, at every depth, its left
    contour clears the right contour of the subtrees already placed. Parents
    sit midway between their first and last child. The result is scaled so
    the breadth fills ``size[0]`` and the deepest level sits at ``size[1]``.
    """

    def layout(self, root: TreeNode) -> List[Placement]:
        offsets: Dict[TreeNode, float] = {}
        self._place(root, offsets)

        # Absolute breadth coordinates, breadth-first
        order: List[TreeNode] = []
        xs: Dict[TreeNode, float] = {root: 0.0}
        depths: Dict[TreeNode, int] = {root: 0}
        queue = deque([root])
        while queue:
            node = queue.popleft()
            order.append(node)
            for child in node.visible_children:
                xs[child] = xs[node] + offsets[child]
                depths[child] = depths[node] + 1
                queue.append(child)

        left = min(order, key=lambda n: xs[n])
        right = max(order, key=lambda n: xs[n])
        bottom = max(depths.values())

        s = 1.0 if left is right else self.separation(left, right) / 2
        tx = s - xs[left]
        span = xs[right] + s + tx
        if span <= 0:
            s = 1.0
            tx = s - xs[left]
            span = xs[right] + s + tx

        breadth, extent = self.size
        kx = breadth / span
        ky = extent / (bottom or 1)
        return [Placement(node=n, x=(xs[n] + tx) * kx, y=depths[n] * ky) for n in order]

    def _place(
        self, node: TreeNode, offsets: Dict[TreeNode, float]
    ) -> List[Tuple[TreeNode, float, TreeNode, float]]:
        """Lay out a subtree relative to its root.

        Returns the subtree contour: one ``(left_node, left_x, right_node,
        right_x)`` entry per level, the subtree root at ``x == 0``.
        """
        children = node.visible_children
        if not children:
            return [(node, 0.0, node, 0.0)]

        forest: Optional[List[Tuple[TreeNode, float, TreeNode, float]]] = None
        child_x: List[float] = []
        for child in children:
            contour = self._place(child, offsets)
            if forest is None:
                shift = 0.0
                forest = list(contour)
            else:
                shift = max(
                    forest[i][3]
                    + self.separation(forest[i][2], contour[i][0])
                    - contour[i][1]
                    for i in range(min(len(forest), len(contour)))
                )
                for i, (lnode, lx, rnode, rx) in enumerate(contour):
                    if i < len(forest):
                        forest[i] = (forest[i][0], forest[i][1], rnode, rx + shift)
                    else:
                        forest.append((lnode, lx + shift, rnode, rx + shift))
            child_x.append(shift)

        mid = (child_x[0] + child_x[-1]) / 2
        for child, x in zip(children, child_x):
            offsets[child] = x - mid

        return [(node, 0.0, node, 0.0)] + [
            (lnode, lx - mid, rnode, rx - mid) for lnode, lx, rnode, rx in forest
        ]

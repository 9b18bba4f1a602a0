"""
Diff and render driver.

Reconciles the visible nodes and links of successive renders by identity and
describes the result as transitions (start state, end state, duration) for a
rendering collaborator to animate. The driver never waits on an animation; a
new plan simply supersedes the previous one.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from collapsible_tree.core.node import NodeStore, TreeNode
from collapsible_tree.core.options import TreeOptions
from collapsible_tree.layouts.tree import LayoutAdapter
from collapsible_tree.styles.colors import UNSELECTED_FILL

logger = logging.getLogger(__name__)

# Stand-in for zero that renderers can still interpolate from
VANISH = 1e-6

# Gap between a node's circle and its label
LABEL_PADDING = 3

Point = Tuple[float, float]


class Phase(Enum):
    """Where an element sits in the enter/update/exit partition."""

    ENTER = "enter"
    UPDATE = "update"
    EXIT = "exit"


def _num(value: float) -> str:
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return "0" if text == "-0" else text


def diagonal(s: Point, d: Point) -> str:
    """Cubic path from ``s`` to ``d``, control points halfway along the depth axis.

    Points are ``(x, y)`` layout coordinates: ``x`` is drawn vertically and
    ``y`` horizontally.
    """
    sx, sy = s
    dx, dy = d
    my = (sy + dy) / 2
    return (
        f"M {_num(sy)} {_num(sx)} C {_num(my)} {_num(sx)}, "
        f"{_num(my)} {_num(dx)}, {_num(dy)} {_num(dx)}"
    )


@dataclass
class NodeState:
    """Visual state of a node at one end of a transition."""

    x: float
    y: float
    radius: float
    label_opacity: float = 1.0

    @property
    def position(self) -> Point:
        return (self.x, self.y)

    def to_dict(self) -> Dict[str, float]:
        return {
            "x": self.x,
            "y": self.y,
            "radius": self.radius,
            "label_opacity": self.label_opacity,
        }


@dataclass
class NodeStyle:
    """Non-animated attributes applied to a node when its transition starts."""

    fill: str
    font_size: float
    font_weight: str
    text_anchor: str
    label_x: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fill": self.fill,
            "font_size": self.font_size,
            "font_weight": self.font_weight,
            "text_anchor": self.text_anchor,
            "label_x": self.label_x,
        }


@dataclass
class NodeTransition:
    identity: int
    name: str
    phase: Phase
    start: NodeState
    end: NodeState
    duration: int
    style: NodeStyle

    @property
    def moved(self) -> bool:
        return self.start != self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identity,
            "name": self.name,
            "phase": self.phase.value,
            "start": self.start.to_dict(),
            "end": self.end.to_dict(),
            "duration": self.duration,
            "style": self.style.to_dict(),
        }


@dataclass
class LinkTransition:
    """Transition of the link into a child node, keyed by the child's identity."""

    identity: int
    parent_identity: int
    phase: Phase
    start: str
    end: str
    duration: int

    @property
    def moved(self) -> bool:
        return self.start != self.end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.identity,
            "parent": self.parent_identity,
            "phase": self.phase.value,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
        }


@dataclass
class RenderPlan:
    """Everything a renderer needs to move from the previous render to this one.

    Attributes
    ----------
    generation : int
        Increases with every render; a renderer drops plans older than the
        latest it has seen.
    source : int
        Identity of the node whose toggle triggered the render.
    nodes : List[NodeTransition]
        Entering and updating nodes breadth-first, then exiting nodes.
    links : List[LinkTransition]
        Same ordering as ``nodes``, one per non-root node.
    superseded : List[int]
        Identities whose transitions in the previous plan this plan replaces.
    """

    generation: int
    source: int
    nodes: List[NodeTransition] = field(default_factory=list)
    links: List[LinkTransition] = field(default_factory=list)
    superseded: List[int] = field(default_factory=list)

    def _phase(self, phase: Phase) -> List[NodeTransition]:
        return [t for t in self.nodes if t.phase is phase]

    @property
    def entering(self) -> List[NodeTransition]:
        return self._phase(Phase.ENTER)

    @property
    def updating(self) -> List[NodeTransition]:
        return self._phase(Phase.UPDATE)

    @property
    def exiting(self) -> List[NodeTransition]:
        return self._phase(Phase.EXIT)

    @property
    def visible_identities(self) -> List[int]:
        return [t.identity for t in self.nodes if t.phase is not Phase.EXIT]

    @property
    def is_noop(self) -> bool:
        """True when nothing enters, exits, or moves."""
        return (
            not any(t.phase is not Phase.UPDATE or t.moved for t in self.nodes)
            and not any(t.phase is not Phase.UPDATE or t.moved for t in self.links)
        )

    def node(self, identity: int) -> NodeTransition:
        for t in self.nodes:
            if t.identity == identity:
                return t
        raise KeyError(f"Node {identity} not in render plan")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "source": self.source,
            "nodes": [t.to_dict() for t in self.nodes],
            "links": [t.to_dict() for t in self.links],
            "superseded": list(self.superseded),
        }


class RenderDriver:
    """Plans the transitions between successive renders of one tree.

    Parameters
    ----------
    store : NodeStore
        State that persists between renders.
    layout : LayoutAdapter
        Positions the visible nodes.
    options : TreeOptions
        Supplies link length, duration, and styling.
    """

    def __init__(self, store: NodeStore, layout: LayoutAdapter, options: TreeOptions) -> None:
        self.store = store
        self.layout = layout
        self.options = options
        self.generation = 0
        self.current_plan: Optional[RenderPlan] = None
        self._previous: Dict[int, TreeNode] = {}

    def render(self, source: TreeNode) -> RenderPlan:
        """Plan the transition to the current tree state, animated from ``source``.

        Every visible node's previous position is overwritten with its new
        target before returning.
        """
        visible = self.store.visible_nodes()
        for node in visible:
            self.store.assign_identity(node)

        targets = self._targets()
        duration = self.options.duration

        origin = source.previous_position or targets.get(source.identity) or (0.0, 0.0)
        destination = targets.get(source.identity) or origin

        self.generation += 1
        plan = RenderPlan(generation=self.generation, source=source.identity)

        current_ids = set()
        for node in visible:
            current_ids.add(node.identity)
            target = targets[node.identity]
            end = NodeState(x=target[0], y=target[1], radius=node.radius)
            if node.identity in self._previous:
                phase = Phase.UPDATE
                prev = node.previous_position or target
                start = NodeState(x=prev[0], y=prev[1], radius=node.radius)
            else:
                phase = Phase.ENTER
                start = NodeState(x=origin[0], y=origin[1], radius=node.radius)
            plan.nodes.append(
                NodeTransition(
                    identity=node.identity,
                    name=node.name,
                    phase=phase,
                    start=start,
                    end=end,
                    duration=duration,
                    style=self._style(node),
                )
            )

            parent = node.parent
            if parent is None:
                continue
            if phase is Phase.ENTER:
                link_start = diagonal(origin, origin)
            else:
                link_start = diagonal(
                    node.previous_position or target,
                    parent.previous_position or targets[parent.identity],
                )
            plan.links.append(
                LinkTransition(
                    identity=node.identity,
                    parent_identity=parent.identity,
                    phase=phase,
                    start=link_start,
                    end=diagonal(target, targets[parent.identity]),
                    duration=duration,
                )
            )

        for identity, node in self._previous.items():
            if identity in current_ids:
                continue
            prev = node.previous_position or destination
            plan.nodes.append(
                NodeTransition(
                    identity=identity,
                    name=node.name,
                    phase=Phase.EXIT,
                    start=NodeState(x=prev[0], y=prev[1], radius=node.radius),
                    end=NodeState(
                        x=destination[0],
                        y=destination[1],
                        radius=VANISH,
                        label_opacity=VANISH,
                    ),
                    duration=duration,
                    style=self._style(node),
                )
            )
            parent = node.parent
            if parent is None:
                continue
            plan.links.append(
                LinkTransition(
                    identity=identity,
                    parent_identity=parent.identity,
                    phase=Phase.EXIT,
                    start=diagonal(prev, parent.previous_position or destination),
                    end=diagonal(destination, destination),
                    duration=duration,
                )
            )

        if self.current_plan is not None:
            replaced = {t.identity for t in plan.nodes}
            plan.superseded = [t.identity for t in self.current_plan.nodes if t.identity in replaced]

        # Store the old positions for the next transition
        for node in visible:
            x, y = targets[node.identity]
            self.store.set_previous_position(node, x, y)

        self._previous = {node.identity: node for node in visible}
        self.current_plan = plan
        logger.debug(
            "Render %d from node %s: %d entering, %d updating, %d exiting",
            plan.generation,
            source.identity,
            len(plan.entering),
            len(plan.updating),
            len(plan.exiting),
        )
        return plan

    def _targets(self) -> Dict[int, Point]:
        """Target position per visible identity, levels spaced by the link length."""
        link_length = self.options.link_length
        targets: Dict[int, Point] = {}
        for placement in self.layout.layout(self.store.root):
            node = placement.node
            y = node.depth * link_length if link_length else placement.y
            targets[node.identity] = (placement.x, y)
        return targets

    def _style(self, node: TreeNode) -> NodeStyle:
        padding = node.radius + LABEL_PADDING
        has_visible_children = bool(node.visible_children)
        return NodeStyle(
            fill=self.options.fill if node.selected else UNSELECTED_FILL,
            font_size=self.options.font_size + 1 if node.selected else self.options.font_size,
            font_weight="bolder" if node.selected else "lighter",
            text_anchor="end" if has_visible_children else "start",
            label_x=-padding if has_visible_children else padding,
        )

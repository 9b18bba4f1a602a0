"""CollapsibleTree — Jupyter widget for exploring a hierarchy one click at a time."""

import html
import json
import logging
import uuid
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional, Union

from collapsible_tree.core.channel import CallbackChannel, HostChannel
from collapsible_tree.core.errors import InvalidConfiguration
from collapsible_tree.core.node import NodeStore, TreeNode
from collapsible_tree.core.options import TreeOptions
from collapsible_tree.core.render import NodeTransition, Phase, RenderDriver, RenderPlan
from collapsible_tree.core.selection import (
    SelectionRecord,
    aggregate_selection,
    selection_json,
    selection_path,
)
from collapsible_tree.layouts.sizing import compute_link_length
from collapsible_tree.layouts.tree import LayoutAdapter, TidyTreeLayout
from collapsible_tree.styles.colors import (
    LABEL_COLOR,
    LINK_STROKE,
    LINK_STROKE_WIDTH,
    NODE_STROKE,
    NODE_STROKE_WIDTH,
    TOOLTIP_BACKGROUND,
    TOOLTIP_BORDER,
)

logger = logging.getLogger(__name__)

# Zoom is limited to between 1/5x and 5x of the initial viewport
MIN_ZOOM = 1 / 5
MAX_ZOOM = 5


@dataclass
class ViewTransform:
    """Pan and zoom applied to the whole diagram."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0

    def to_svg(self) -> str:
        return f"translate({self.x},{self.y}) scale({self.k})"

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "k": self.k}


@dataclass
class ViewTransition:
    start: ViewTransform
    end: ViewTransform
    duration: int


class CollapsibleTree:
    """Interactive node-link tree whose subtrees expand and collapse on click.

    One instance holds the state of one displayed tree: the node store, the
    render driver, the current view transform and the host channel.

    Parameters
    ----------
    width : float
        Canvas width in pixels.
    height : float
        Canvas height in pixels.
    channel : HostChannel, optional
        Receives the selection record when ``options.input`` is set.
        Defaults to an in-process ``CallbackChannel``.
    layout : LayoutAdapter, optional
        Positions visible nodes. Defaults to ``TidyTreeLayout``.

    Examples
    --------
    >>> tree = CollapsibleTree(width=800, height=400)
    >>> tree.render_value(data, {"hierarchy": ["Region", "Country"], "collapsed": True})
    >>> tree.click(2)
    >>> tree.selection_json()
    '[{"id": 2, "parent": "World", "level": "Region", "value": "Europe"}]'
    """

    def __init__(
        self,
        width: float = 960,
        height: float = 500,
        channel: Optional[HostChannel] = None,
        layout: Optional[LayoutAdapter] = None,
    ) -> None:
        self.width = width
        self.height = height
        self.channel = channel if channel is not None else CallbackChannel()
        self.layout = layout if layout is not None else TidyTreeLayout()
        self.options = TreeOptions()
        self.store: Optional[NodeStore] = None
        self.driver: Optional[RenderDriver] = None
        self.view = ViewTransform()
        self.view_transition: Optional[ViewTransition] = None
        self.tooltip_visible = False
        self.tooltip_content: Optional[str] = None
        self._uid = uuid.uuid4().hex[:12]

    # ------------------------------------------------------------ Lifecycle
    def render_value(
        self,
        data: Dict[str, Any],
        options: Union[TreeOptions, Dict[str, Any], None] = None,
    ) -> RenderPlan:
        """Build the tree from host data and render it for the first time.

        Raises
        ------
        MalformedHierarchy
            If ``data`` is not a valid nested hierarchy.
        InvalidConfiguration
            If the options are invalid, or ``hierarchy`` has fewer levels than
            the tree has below its root.
        """
        if isinstance(options, TreeOptions):
            options = replace(options)
        else:
            options = TreeOptions.from_dict(options)
        store = NodeStore.from_dict(data)
        depth = store.max_depth
        if len(options.hierarchy) < depth:
            raise InvalidConfiguration(
                f"hierarchy has {len(options.hierarchy)} level names "
                f"but the tree is {depth} levels deep"
            )

        root = store.root
        root.x0 = self.height / 2
        root.y0 = 0
        root.selected = True

        # The session keeps its previous tree until the new one has rendered
        previous_size = self.layout.size
        try:
            self._fit_layout(options)
            driver = RenderDriver(store, self.layout, options)
            plan = driver.render(root)
            if options.collapsed:
                store.apply_collapse_policy(options.collapsed)
                plan = driver.render(root)
        except Exception:
            self.layout.size = previous_size
            raise

        self.store = store
        self.options = options
        self.driver = driver
        self.view = ViewTransform()
        self.view_transition = None
        self.tooltip_visible = False

        logger.info(
            "Rendered tree '%s': %d nodes, %d visible, link length %s",
            root.name,
            sum(1 for _ in store.iter_nodes()),
            len(plan.visible_identities),
            options.link_length,
        )
        return plan

    def resize(self, width: float, height: float) -> Optional[RenderPlan]:
        """Fit the tree to a new canvas size without changing its state."""
        self.width = width
        self.height = height
        if self.store is None or self.driver is None:
            return None
        self._fit_layout(self.options)
        logger.info("Resized to %sx%s, link length %s", width, height, self.options.link_length)
        return self.driver.render(self.store.root)

    def _fit_layout(self, options: TreeOptions) -> None:
        margin = options.margin
        height_margin = self.height - margin.top - margin.bottom
        width_margin = self.width - margin.left - margin.right

        # Calculate a reasonable link length, if not otherwise specified
        if options.link_length is None or options.link_responsive:
            options.link_responsive = True
            options.link_length = compute_link_length(width_margin, len(options.hierarchy))

        self.layout.size = (height_margin, width_margin)

    def _require_store(self) -> NodeStore:
        if self.store is None:
            raise InvalidConfiguration("render_value() must be called first")
        return self.store

    # ---------------------------------------------------------- Interaction
    def click(self, identity: int) -> RenderPlan:
        """Toggle a node open or closed and selected or unselected.

        Recentres the view on the node, re-renders from it, hides the tooltip
        and pushes the new selection record to the host channel.

        Raises
        ------
        KeyError
            If no node has this identity.
        """
        store = self._require_store()
        node = store.find(identity)

        store.toggle_expanded(node)
        store.toggle_selected(node)

        self.view_transition = self._recenter(node)
        plan = self.driver.render(node)

        self.tooltip_visible = False

        if self.options.input:
            payload = selection_json(self.selection)
            self.channel.set_input_value(self.options.input, payload, priority="event")
            logger.debug("Sent selection to '%s': %s", self.options.input, payload)
        return plan

    def _recenter(self, node: TreeNode) -> ViewTransition:
        """Move the node's previous position towards the left-centre anchor."""
        k = self.view.k
        x0, y0 = node.previous_position or (self.height / 2, 0)
        end = ViewTransform(x=-y0 * k + self.width / 6, y=-x0 * k + self.height / 2, k=k)
        transition = ViewTransition(start=self.view, end=end, duration=self.options.duration)
        self.view = end
        return transition

    def zoom(self, k: float, x: Optional[float] = None, y: Optional[float] = None) -> ViewTransform:
        """Apply a pan/zoom gesture; ignored unless ``zoomable`` is set."""
        if not self.options.zoomable:
            return self.view
        k = min(max(k, MIN_ZOOM), MAX_ZOOM)
        self.view = ViewTransform(
            x=self.view.x if x is None else x,
            y=self.view.y if y is None else y,
            k=k,
        )
        return self.view

    def hover(self, identity: int) -> Optional[str]:
        """Show the tooltip for a node, returning its content."""
        if not self.options.tooltip:
            return None
        node = self._require_store().find(identity)
        self.tooltip_content = self.tooltip_html(node)
        self.tooltip_visible = True
        return self.tooltip_content

    def unhover(self) -> None:
        self.tooltip_visible = False

    def tooltip_html(self, node: TreeNode) -> str:
        """Tooltip from the data, or one built from the name and weight."""
        if node.tooltip:
            return node.tooltip
        return f"{node.name}<br>{self.options.attribute}: {node.weight}"

    # ------------------------------------------------------------ Selection
    @property
    def selection(self) -> List[SelectionRecord]:
        """Selected nodes below the root, breadth-first."""
        if self.store is None:
            return []
        return aggregate_selection(self.store, self.options.hierarchy)

    def selection_json(self) -> str:
        return selection_json(self.selection)

    def selection_path(self, identity: int) -> Dict[str, List[str]]:
        """Selected names from a node up to depth 1, keyed by hierarchy level."""
        node = self._require_store().find(identity)
        return selection_path(node, self.options.hierarchy)

    @property
    def plan(self) -> Optional[RenderPlan]:
        return self.driver.current_plan if self.driver is not None else None

    # -------------------------------------------------------------- Display
    def _repr_html_(self) -> str:
        """Jupyter auto-display."""
        return self.to_html()

    def display(self) -> None:
        """Display in IPython/Jupyter."""
        from IPython.display import HTML
        from IPython.display import display as ipy_display

        ipy_display(HTML(self.to_html()))

    def to_html(self) -> str:
        """Generate the full HTML string: a snapshot at the end of the current plan."""
        uid = self._uid
        parts = [
            f'<div id="ct-{uid}" class="ct-container">',
            f"<style>{self._css(uid)}</style>",
            self._svg_html(uid),
            f'<div id="ct-tooltip-{uid}" class="ct-tooltip" style="display:none;"></div>',
            self._plan_data_script(uid),
            "</div>",
        ]
        return "\n".join(parts)

    def _css(self, uid: str) -> str:
        s = f"#ct-{uid}"
        return f"""
{s} {{ position: relative; font-family: sans-serif; }}
{s} .ct-node {{ cursor: pointer; }}
{s} .ct-node circle {{
  stroke: {NODE_STROKE}; stroke-width: {NODE_STROKE_WIDTH}px;
}}
{s} .ct-node text {{ fill: {LABEL_COLOR}; }}
{s} .ct-link {{
  fill: none; stroke: {LINK_STROKE}; stroke-width: {LINK_STROKE_WIDTH}px;
}}
{s} .ct-tooltip {{
  position: absolute; text-align: left; padding: 4px;
  background: {TOOLTIP_BACKGROUND}; border: {TOOLTIP_BORDER};
  border-radius: 4px; pointer-events: none;
  font-size: {self.options.font_size + 1}px;
}}
"""

    def _svg_html(self, uid: str) -> str:
        margin = self.options.margin
        parts = [
            f'<svg width="{self.width}" height="{self.height}" '
            f'data-zoomable="{str(self.options.zoomable).lower()}">',
            f'<g transform="translate({margin.left},{margin.top})">',
            f'<g class="ct-view" transform="{self.view.to_svg()}">',
        ]

        plan = self.plan
        if plan is not None:
            for link in plan.links:
                if link.phase is Phase.EXIT:
                    continue
                parts.append(
                    f'<path class="ct-link" data-node-id="{link.identity}" d="{link.end}"/>'
                )
            for t in plan.nodes:
                if t.phase is Phase.EXIT:
                    continue
                parts.append(self._node_svg(t))

        parts.append("</g></g></svg>")
        return "\n".join(parts)

    def _node_svg(self, t: NodeTransition) -> str:
        node = self.store.find(t.identity)
        style = t.style
        title = ""
        if self.options.tooltip:
            title = f"<title>{html.escape(self.tooltip_html(node))}</title>"
        return (
            f'<g class="ct-node" data-node-id="{t.identity}" '
            f'transform="translate({t.end.y},{t.end.x})">'
            f'<circle r="{t.end.radius}" fill="{html.escape(style.fill)}"/>'
            f'<text dy=".35em" x="{style.label_x}" text-anchor="{style.text_anchor}" '
            f'style="font-size:{style.font_size}px;font-weight:{style.font_weight};">'
            f"{html.escape(node.name)}</text>"
            f"{title}"
            f"</g>"
        )

    def _plan_data_script(self, uid: str) -> str:
        """Embed the render plan and view as JSON for a client-side renderer."""
        data = {
            "options": self.options.to_dict(),
            "view": self.view.to_dict(),
            "plan": self.plan.to_dict() if self.plan is not None else None,
            "selection": [r.to_dict() for r in self.selection],
        }
        payload = json.dumps(data, ensure_ascii=False).replace("</", "<\\/")
        return f'<script type="application/json" id="ct-data-{uid}">{payload}</script>'

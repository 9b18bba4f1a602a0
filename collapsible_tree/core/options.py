"""Render options for the collapsible tree widget."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from collapsible_tree.core.errors import InvalidConfiguration

DEFAULT_DURATION = 750

# Host option keys (camelCase, as sent by the hosting runtime) -> field names
_OPTION_KEYS = {
    "margin": "margin",
    "linkLength": "link_length",
    "fontSize": "font_size",
    "fill": "fill",
    "tooltip": "tooltip",
    "zoomable": "zoomable",
    "collapsed": "collapsed",
    "hierarchy": "hierarchy",
    "attribute": "attribute",
    "input": "input",
    "duration": "duration",
}


def level_label(hierarchy: List[str], depth: int) -> Optional[str]:
    """Hierarchy label for a node at ``depth`` (depth 1 -> hierarchy[0])."""
    if depth < 1 or depth > len(hierarchy):
        return None
    return hierarchy[depth - 1]


@dataclass
class Margin:
    """Pixel insets applied to the drawing canvas."""

    top: float = 20
    right: float = 10
    bottom: float = 20
    left: float = 10

    def to_dict(self) -> Dict[str, float]:
        return {
            "top": self.top,
            "right": self.right,
            "bottom": self.bottom,
            "left": self.left,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Margin":
        return cls(
            top=data.get("top", 20),
            right=data.get("right", 10),
            bottom=data.get("bottom", 20),
            left=data.get("left", 10),
        )


@dataclass
class TreeOptions:
    """Options recognised by ``CollapsibleTree.render_value``.

    Attributes
    ----------
    margin : Margin
        Insets applied to the drawing canvas.
    link_length : float, optional
        Spacing between hierarchy levels. Computed from the viewport when
        not given, and then recomputed on every resize.
    font_size : float
        Label size in pixels.
    fill : str
        Circle colour for selected nodes.
    tooltip : bool
        Enable tooltips on hover.
    zoomable : bool
        Enable pan and zoom.
    collapsed : bool or str
        Start with every node below depth 1 collapsed. When a string, it names
        a per-node field; nodes where that field is present and false stay
        expanded.
    hierarchy : List[str]
        Level names, one per depth below the root.
    attribute : str
        Label used for the weight value in default tooltips.
    input : str, optional
        Host channel receiving the selection record on every click.
    duration : int
        Transition duration in milliseconds.
    """

    margin: Margin = field(default_factory=Margin)
    link_length: Optional[float] = None
    font_size: float = 10
    fill: str = "lightsteelblue"
    tooltip: bool = False
    zoomable: bool = False
    collapsed: Union[bool, str] = False
    hierarchy: List[str] = field(default_factory=list)
    attribute: str = "leafCount"
    input: Optional[str] = None
    duration: int = DEFAULT_DURATION

    # Set when link_length was derived from the viewport
    link_responsive: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "margin": self.margin.to_dict(),
            "linkLength": self.link_length,
            "fontSize": self.font_size,
            "fill": self.fill,
            "tooltip": self.tooltip,
            "zoomable": self.zoomable,
            "collapsed": self.collapsed,
            "hierarchy": list(self.hierarchy),
            "attribute": self.attribute,
            "input": self.input,
            "duration": self.duration,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TreeOptions":
        """Build options from host-style (camelCase) or snake_case keys."""
        data = data or {}
        kwargs: Dict[str, Any] = {}
        known = set(_OPTION_KEYS.values())
        for key, value in data.items():
            name = _OPTION_KEYS.get(key, key)
            if name not in known:
                raise InvalidConfiguration(f"Unknown option '{key}'")
            kwargs[name] = value

        margin = kwargs.get("margin")
        if isinstance(margin, dict):
            kwargs["margin"] = Margin.from_dict(margin)
        elif margin is None:
            kwargs.pop("margin", None)

        # A falsy link length means "not specified"
        if not kwargs.get("link_length"):
            kwargs["link_length"] = None

        hierarchy = kwargs.get("hierarchy")
        if isinstance(hierarchy, str):
            kwargs["hierarchy"] = [hierarchy]
        elif hierarchy is not None:
            kwargs["hierarchy"] = list(hierarchy)

        options = cls(**kwargs)
        options.validate()
        return options

    def validate(self) -> None:
        """Check option values that do not depend on the data.

        Raises
        ------
        InvalidConfiguration
            If any option is out of range.
        """
        if self.duration < 0:
            raise InvalidConfiguration(f"duration must be >= 0, got {self.duration}")
        if self.font_size <= 0:
            raise InvalidConfiguration(f"fontSize must be > 0, got {self.font_size}")
        if self.link_length is not None and self.link_length <= 0:
            raise InvalidConfiguration(f"linkLength must be > 0, got {self.link_length}")
        if not isinstance(self.collapsed, (bool, str)):
            raise InvalidConfiguration(
                f"collapsed must be a boolean or a field name, got {self.collapsed!r}"
            )
        if not all(isinstance(level, str) for level in self.hierarchy):
            raise InvalidConfiguration("hierarchy must be a list of level names")

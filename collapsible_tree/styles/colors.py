"""Colours and stroke constants for the tree diagram."""

UNSELECTED_FILL = "#FFF"
NODE_STROKE = "steelblue"
NODE_STROKE_WIDTH = 1
LINK_STROKE = "#CCC"
LINK_STROKE_WIDTH = 1.5
LABEL_COLOR = "#000"

TOOLTIP_BACKGROUND = "#FFF"
TOOLTIP_BORDER = "1px solid #AAA"

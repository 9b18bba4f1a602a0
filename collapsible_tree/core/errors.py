"""Exception types raised by the collapsible tree engine."""


class CollapsibleTreeError(Exception):
    """Base class for all collapsible tree errors."""


class MalformedHierarchy(CollapsibleTreeError, ValueError):
    """Host data does not describe a valid nested hierarchy."""


class InvalidConfiguration(CollapsibleTreeError, ValueError):
    """Render options are inconsistent with each other or with the data."""


class StaleStateReference(CollapsibleTreeError, RuntimeError):
    """A node was reached through a reference that no longer resolves."""

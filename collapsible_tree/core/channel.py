"""Host channels that receive the selection record."""

from abc import ABC, abstractmethod
from collections import defaultdict
from typing import Any, Callable, Dict, List, Optional, Tuple


class HostChannel(ABC):
    """Delivers named input values to the hosting application.

    Mirrors the host runtime's ``setInputValue(name, value, {priority})``.
    """

    @abstractmethod
    def set_input_value(self, name: str, value: Any, priority: str = "event") -> None: ...


class CallbackChannel(HostChannel):
    """In-process channel that records values and notifies subscribers.

    Examples
    --------
    >>> channel = CallbackChannel()
    >>> channel.on("selected", lambda value: print(value))
    >>> tree = CollapsibleTree(channel=channel)
    """

    def __init__(self) -> None:
        self._callbacks: Dict[str, List[Callable[[Any], None]]] = defaultdict(list)
        self.values: List[Tuple[str, Any, str]] = []

    def on(self, name: str, callback: Callable[[Any], None]) -> None:
        """Call ``callback(value)`` whenever ``name`` is set."""
        self._callbacks[name].append(callback)

    def set_input_value(self, name: str, value: Any, priority: str = "event") -> None:
        self.values.append((name, value, priority))
        for callback in self._callbacks.get(name, []):
            callback(value)

    def last(self, name: str) -> Optional[Any]:
        """Most recent value delivered under ``name``, or None."""
        for key, value, _ in reversed(self.values):
            if key == name:
                return value
        return None

"""
Abstract build engine contract.

A Compiler drives any engine that exposes a hook table, a one-shot ``run``
and a continuous ``watch``. Engines report each compilation through a
``callback(error, stats)``.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from ..models.events import BuildEvent

logger = logging.getLogger(__name__)

# callback(error, stats)
CompletionCallback = Callable[[Optional[BaseException], Any], None]


class HookTable:
    """
    Named lifecycle hooks with an ordered list of taps each.

    Hook names are fixed at construction; tapping an unknown name raises
    KeyError.
    """

    def __init__(self, names: Iterable[str]):
        self._taps: Dict[str, List[Tuple[str, Callable[..., Any]]]] = {
            name: [] for name in names
        }

    @property
    def names(self) -> List[str]:
        return list(self._taps)

    def tap(self, name: str, tap_name: str, callback: Callable[..., Any]) -> Callable[[], None]:
        """
        Register ``callback`` on hook ``name``.

        Returns:
            A function that removes this tap again
        """
        if name not in self._taps:
            raise KeyError(f"Unknown hook '{name}'. Available: {self.names}")
        entry = (tap_name, callback)
        self._taps[name].append(entry)

        def untap() -> None:
            if entry in self._taps[name]:
                self._taps[name].remove(entry)

        return untap

    def call(self, name: str, *args: Any) -> None:
        """Invoke every tap on hook ``name`` in registration order."""
        for _, callback in list(self._taps[name]):
            callback(*args)

    def count(self, name: str) -> int:
        return len(self._taps[name])


class WatchController(ABC):
    """Handle on a running watch."""

    @abstractmethod
    def close(self) -> None:
        """Stop watching; no further compilations are reported."""

    @abstractmethod
    def invalidate(self) -> None:
        """Force a rebuild."""


class InertWatcher(WatchController):
    """Controller returned for one-shot builds, where there is nothing to stop."""

    def close(self) -> None:
        pass

    def invalidate(self) -> None:
        pass


@dataclass(frozen=True)
class WatchOptions:
    """Options for continuous builds."""

    # Seconds between file-system polls
    poll_interval: float = 0.5


class AbstractBuildEngine(ABC):
    """
    Base class for multi-target build engines.

    Subclasses receive the ordered engine configurations, one per build
    profile, and must fire the ``BuildEvent`` hooks as they compile.
    """

    def __init__(self, configs: Sequence[Any]):
        self.configs = list(configs)
        self.hooks = HookTable(event.value for event in BuildEvent)

    @abstractmethod
    def run(self, callback: CompletionCallback) -> None:
        """Compile once and report through ``callback``."""

    @abstractmethod
    def watch(self, options: WatchOptions, callback: CompletionCallback) -> WatchController:
        """Compile now and again on every change, reporting each through ``callback``."""

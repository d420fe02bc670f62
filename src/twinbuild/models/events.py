"""
Lifecycle events a Compiler lets callers subscribe to.
"""

from enum import Enum
from typing import Union


class BuildEvent(Enum):
    """
    Named engine lifecycle events.

    The values are the hook names an engine's hook table is keyed by.
    """

    # A compilation is starting
    COMPILE = "compile"
    # A compilation completed (initial build or rebuild); receives the stats
    DONE = "done"
    # A compilation could not complete; receives the fatal error
    FAILED = "failed"
    # Watched files changed and the current output is stale
    INVALID = "invalid"
    # A watch-triggered rebuild is starting
    WATCH_RUN = "watch-run"

    @classmethod
    def coerce(cls, event: Union["BuildEvent", str]) -> "BuildEvent":
        """Accept either a member or its hook name."""
        if isinstance(event, cls):
            return event
        return cls(event)

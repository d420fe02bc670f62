"""
Shared data structures for the orchestration module.

This module defines the single-assignment DeferredValue used to hand data
from one build target to another, and the SharedState bag that groups the
DeferredValues of one Compiler.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, List, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DeferredState(Enum):
    """Settlement state of a DeferredValue."""
    PENDING = "pending"
    RESOLVED = "resolved"
    REJECTED = "rejected"


class DeferredValue(Generic[T]):
    """
    A value that is published once and may be awaited any number of times.

    The first call to ``resolve`` or ``reject`` settles the value for good;
    later settlement attempts are ignored and return False. Readers that
    await ``get()`` before settlement are woken when it happens, and readers
    arriving afterwards get the cached outcome immediately. A rejection is
    raised to every reader, including those that arrive after it.

    No timeout is applied; wrap ``get()`` in ``asyncio.wait_for`` when
    bounded latency is needed.
    """

    def __init__(self, name: str = "deferred"):
        self.name = name
        self._state = DeferredState.PENDING
        self._value: Optional[T] = None
        self._error: Optional[BaseException] = None
        self._waiters: List[asyncio.Future] = []

    @property
    def state(self) -> DeferredState:
        return self._state

    def done(self) -> bool:
        return self._state is not DeferredState.PENDING

    def resolve(self, value: T) -> bool:
        """
        Settle with ``value``.

        Returns:
            True if this call settled the value, False if it was already settled
        """
        if self.done():
            logger.debug(f"Ignoring resolve of already {self._state.value} value '{self.name}'")
            return False
        self._state = DeferredState.RESOLVED
        self._value = value
        self._wake_waiters()
        return True

    def reject(self, error: BaseException) -> bool:
        """
        Settle with ``error``; every reader of ``get()`` will have it raised.

        Returns:
            True if this call settled the value, False if it was already settled
        """
        if self.done():
            logger.debug(f"Ignoring reject of already {self._state.value} value '{self.name}'")
            return False
        self._state = DeferredState.REJECTED
        self._error = error
        self._wake_waiters()
        return True

    async def get(self) -> T:
        """
        Wait for settlement and return the resolved value.

        Raises:
            The rejection error, if the value was rejected
        """
        if not self.done():
            waiter = asyncio.get_running_loop().create_future()
            self._waiters.append(waiter)
            try:
                await waiter
            finally:
                if waiter in self._waiters:
                    self._waiters.remove(waiter)

        if self._state is DeferredState.REJECTED:
            raise self._error
        return self._value

    def _wake_waiters(self) -> None:
        waiters, self._waiters = self._waiters, []
        for waiter in waiters:
            if not waiter.done():
                waiter.set_result(None)

    def __repr__(self) -> str:
        return f"<DeferredValue {self.name!r} {self._state.value}>"


@dataclass
class SharedState:
    """
    Cross-target state shared by every profile of one Compiler.

    The DeferredValues carry the first browser build of the Compiler's
    lifetime. ``client_builds`` carries the latest one for each environment,
    so that later environments and watch rebuilds see their own output.
    """

    # Emitted client assets, consumed by the server bundle
    client_chunk_metadata: DeferredValue[Any] = field(
        default_factory=lambda: DeferredValue("client_chunk_metadata")
    )
    # Translation keys used by the client bundle
    i18n_manifest: DeferredValue[Any] = field(
        default_factory=lambda: DeferredValue("i18n_manifest")
    )
    # Latest browser build result per environment, replaced on every compilation
    client_builds: Dict[str, Any] = field(default_factory=dict)

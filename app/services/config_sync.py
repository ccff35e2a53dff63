# /classroom-ai-backend/app/services/config_sync.py

"""
Config Sync: keeps a cached Classroom fresh against edits made elsewhere
(another client, or the teacher saving settings) without any push channel.

The controller re-reads the classroom from the same store whenever one of
its change sources fires. Two sources ship here: a fixed polling interval and
a focus-regained event the host fires by hand. Both plug in through the
`ChangeSource` protocol, so a real event channel can replace them later
without touching the controller's callers.

State machine: UNSYNCED -> SYNCED on the first successful `load`, after which
every trigger re-validates. Closing the subscription returned by `start`
deregisters every trigger and cancels listener tasks still in flight; a
trigger that still arrives afterwards is ignored.
"""

import os
import asyncio
import inspect
import logging
from enum import Enum
from typing import Callable, List, Optional, Protocol, Set

from ..models.classroom_model import Classroom
from .faults import ConfigFault, ClassroomFault
from .storage_service import StorageService
from . import classroom_service

logger = logging.getLogger(__name__)

CONFIG_SYNC_INTERVAL = float(os.getenv("CONFIG_SYNC_INTERVAL", "2.0"))

Lookup = Callable[[str], Optional[Classroom]]
Listener = Callable[[Classroom], object]


class SyncState(str, Enum):
    UNSYNCED = "unsynced"
    SYNCED = "synced"


class Subscription:
    """Handle for one registered callback. `cancel` is idempotent."""

    def __init__(self, cancel: Callable[[], None]):
        self._cancel = cancel
        self.cancelled = False

    def cancel(self) -> None:
        if not self.cancelled:
            self.cancelled = True
            self._cancel()


class ChangeSource(Protocol):
    def register(self, callback: Callable[[], None]) -> Subscription: ...


class FocusSource:
    """Fires when the host regains foreground focus; the host calls `fire()`."""

    def __init__(self):
        self._callbacks: List[Callable[[], None]] = []

    def register(self, callback: Callable[[], None]) -> Subscription:
        self._callbacks.append(callback)
        return Subscription(lambda: self._callbacks.remove(callback))

    def fire(self) -> None:
        for callback in list(self._callbacks):
            callback()


class PollingSource:
    """
    Calls back every `interval` seconds from an asyncio task. Must be
    registered from inside a running event loop.
    """

    def __init__(self, interval: float = CONFIG_SYNC_INTERVAL):
        if interval <= 0:
            raise ValueError("Polling interval must be positive.")
        self.interval = interval

    async def _poll(self, callback: Callable[[], None]) -> None:
        while True:
            await asyncio.sleep(self.interval)
            callback()

    def register(self, callback: Callable[[], None]) -> Subscription:
        task = asyncio.get_running_loop().create_task(self._poll(callback))
        return Subscription(task.cancel)


class SyncSubscription:
    """
    Scoped registration of a controller with its change sources. Close it
    (or leave the `with` block) when the owning user context ends.
    """

    def __init__(self, subscriptions: List[Subscription]):
        self._subscriptions = subscriptions
        self.closed = False

    def close(self) -> None:
        if self.closed:
            return
        self.closed = True
        for subscription in self._subscriptions:
            subscription.cancel()

    def __enter__(self) -> "SyncSubscription":
        return self

    def __exit__(self, *exc) -> None:
        self.close()


class ConfigSyncController:
    def __init__(self, lookup: Lookup, on_change: Optional[Listener] = None):
        self._lookup = lookup
        self._listeners: List[Listener] = [on_change] if on_change else []
        self._active: Optional[SyncSubscription] = None
        self._pending: Set[asyncio.Task] = set()
        self.state = SyncState.UNSYNCED
        self.classroom: Optional[Classroom] = None

    @classmethod
    def for_storage(cls, db: StorageService, on_change: Optional[Listener] = None) -> "ConfigSyncController":
        return cls(lambda code: classroom_service.find_by_code(db, code), on_change=on_change)

    def subscribe(self, listener: Listener) -> Subscription:
        self._listeners.append(listener)
        return Subscription(lambda: self._listeners.remove(listener))

    def load(self, code: str) -> Classroom:
        """First load after login. Unknown code leaves the controller UNSYNCED."""
        classroom = self._lookup(code)
        if classroom is None:
            raise ConfigFault(f"Classroom with code {code} not found.")
        self.classroom = classroom
        self.state = SyncState.SYNCED
        return classroom

    def check(self) -> bool:
        """
        Re-reads the classroom and replaces the cached object when the
        credential or the instruction changed. Returns True on replacement.
        """
        if self.state is not SyncState.SYNCED or self.classroom is None:
            return False
        latest = self._lookup(self.classroom.code)
        if latest is None:
            return False
        if (
            latest.api_key == self.classroom.api_key
            and latest.system_instruction == self.classroom.system_instruction
        ):
            return False
        logger.info("Detected classroom config update for %s, reloading.", latest.code)
        self.classroom = latest
        self._notify(latest)
        return True

    def _notify(self, classroom: Classroom) -> None:
        for listener in list(self._listeners):
            outcome = listener(classroom)
            if inspect.isawaitable(outcome):
                task = asyncio.ensure_future(outcome)
                self._pending.add(task)
                task.add_done_callback(self._listener_done)

    def _listener_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error("Config change listener failed: %s", error, exc_info=error)

    def _cancel_pending(self) -> None:
        for task in list(self._pending):
            task.cancel()

    def _on_trigger(self) -> None:
        if self._active is None or self._active.closed:
            return
        try:
            self.check()
        except ClassroomFault as e:
            # One failed re-read does not stop future triggers.
            logger.warning("Config re-validation failed: %s", e)

    def start(self, *sources: ChangeSource) -> SyncSubscription:
        """Registers re-validation with every source and returns the scoped handle."""
        if self._active is not None and not self._active.closed:
            self._active.close()
        subscriptions = [source.register(self._on_trigger) for source in sources]
        # Closing also cancels listener tasks that have not finished yet.
        subscriptions.append(Subscription(self._cancel_pending))
        self._active = SyncSubscription(subscriptions)
        return self._active

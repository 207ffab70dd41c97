"""
Reload protection for a signed-in browser session.

Two independent effects:
  * emergency clear (always on): Ctrl/Cmd+Shift+Alt+C wipes persisted ToolHub
    state after confirmation, for when a corrupted session blocks login.
  * refresh interception (only while a session exists): F5 and Ctrl/Cmd+R
    (with or without Shift) are cancelled and leaving the page asks first.

Listeners are acquired on session start and released on session end or
close(), whichever comes first.

This is the client-side half of the session: the SPA mirrors it against the
real window and localStorage. EventTarget and LocalStore model those objects
so the behaviour can be driven from IdentityGateway transitions
(follow_identity) and tested here.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterator, List, MutableMapping, Optional, Tuple

logger = logging.getLogger(__name__)

UNLOAD_MESSAGE = (
    "Are you sure you want to reload? This might cause a problem if you reload. "
    "You may need to clear local storage to login again."
)
EMERGENCY_CLEAR_PROMPT = (
    "EMERGENCY STORAGE CLEAR\n\n"
    "This will clear all ToolHub data from local storage and reload the page.\n\n"
    "You will need to login again.\n\n"
    "Continue?"
)

STORAGE_PREFIXES = ("tool-hub", "sb-")
STORAGE_KEYS = ("supabase.auth.token",)


@dataclass
class KeyEvent:
    key: str
    ctrl: bool = False
    meta: bool = False
    shift: bool = False
    alt: bool = False
    default_prevented: bool = False
    propagation_stopped: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass
class BeforeUnloadEvent:
    return_value: str = ""
    default_prevented: bool = False

    def prevent_default(self) -> None:
        self.default_prevented = True


Listener = Callable[[Any], Any]


class EventTarget:
    """Minimal window-like listener registry."""

    def __init__(self):
        self._listeners: Dict[str, List[Tuple[Listener, bool]]] = {}

    def add_listener(self, event_type: str, listener: Listener, capture: bool = False) -> None:
        entries = self._listeners.setdefault(event_type, [])
        if (listener, capture) not in entries:
            entries.append((listener, capture))

    def remove_listener(self, event_type: str, listener: Listener, capture: bool = False) -> None:
        entries = self._listeners.get(event_type, [])
        if (listener, capture) in entries:
            entries.remove((listener, capture))

    def listener_count(self, event_type: str) -> int:
        return len(self._listeners.get(event_type, []))

    def dispatch(self, event_type: str, event: Any) -> Any:
        # Capture-phase listeners run first, matching browser dispatch order
        entries = sorted(self._listeners.get(event_type, []), key=lambda entry: not entry[1])
        for listener, _capture in entries:
            listener(event)
        return event


class LocalStore(MutableMapping):
    """Persisted client state (browser localStorage equivalent)."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def __getitem__(self, key: str) -> str:
        return self._data[key]

    def __setitem__(self, key: str, value: str) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def toolhub_keys(self) -> List[str]:
        return [
            key for key in self._data
            if key.startswith(STORAGE_PREFIXES) or key in STORAGE_KEYS
        ]

    def clear_toolhub(self) -> List[str]:
        """Remove ToolHub and Supabase session keys. Unrelated keys survive."""
        removed = self.toolhub_keys()
        for key in removed:
            del self._data[key]
        logger.info(f"Cleared ToolHub storage: {removed}")
        return removed


def is_refresh_shortcut(event: KeyEvent) -> bool:
    if event.key == "F5":
        return True
    return (event.ctrl or event.meta) and event.key.lower() == "r"


def is_emergency_clear_shortcut(event: KeyEvent) -> bool:
    return (event.ctrl or event.meta) and event.shift and event.alt and event.key.lower() == "c"


class ReloadGuard:
    def __init__(
        self,
        target: EventTarget,
        store: LocalStore,
        confirm: Callable[[str], bool],
        reload: Optional[Callable[[], None]] = None,
    ):
        self.target = target
        self.store = store
        self.confirm = confirm
        self.reload = reload or (lambda: None)
        self.protection_active = False
        self.target.add_listener("keydown", self._handle_emergency_clear)

    def _handle_emergency_clear(self, event: KeyEvent) -> None:
        if not is_emergency_clear_shortcut(event):
            return
        event.prevent_default()
        if self.confirm(EMERGENCY_CLEAR_PROMPT):
            self.store.clear_toolhub()
            self.reload()

    def _prevent_refresh(self, event: KeyEvent) -> None:
        if is_refresh_shortcut(event):
            event.prevent_default()
            event.stop_propagation()

    def _before_unload(self, event: BeforeUnloadEvent) -> str:
        event.prevent_default()
        event.return_value = UNLOAD_MESSAGE
        return UNLOAD_MESSAGE

    def on_session_change(self, active: bool) -> None:
        if active and not self.protection_active:
            self.target.add_listener("keydown", self._prevent_refresh, capture=True)
            self.target.add_listener("beforeunload", self._before_unload)
            self.protection_active = True
            logger.debug("Reload protection enabled")
        elif not active and self.protection_active:
            self._detach_protection()

    def _detach_protection(self) -> None:
        self.target.remove_listener("keydown", self._prevent_refresh, capture=True)
        self.target.remove_listener("beforeunload", self._before_unload)
        self.protection_active = False
        logger.debug("Reload protection disabled")

    def close(self) -> None:
        if self.protection_active:
            self._detach_protection()
        self.target.remove_listener("keydown", self._handle_emergency_clear)


@contextmanager
def session_protection(guard: ReloadGuard) -> Iterator[ReloadGuard]:
    """Hold reload protection for the lifetime of a session block."""
    guard.on_session_change(True)
    try:
        yield guard
    finally:
        guard.on_session_change(False)


def follow_identity(guard: ReloadGuard, gateway) -> Callable[[], None]:
    """Toggle protection whenever the identity gateway settles. Returns the unsubscribe callable."""
    return gateway.subscribe(lambda snapshot: guard.on_session_change(snapshot.current_user is not None))

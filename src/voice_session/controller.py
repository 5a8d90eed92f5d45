"""Session controller.

Maintains the reduced application state as a pure function of the session
client's transport state, owns the user-toggleable session options and the
fatal error slot, and requests device initialization once per idle period.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import Final

from voice_session.client.base import SessionClient, TransportState
from voice_session.errors import FatalError
from voice_session.snapshot import ErrorPayload, SessionSnapshot

logger = logging.getLogger(__name__)


class ApplicationState(str, Enum):
    """Coarse, UI-facing reduction of the transport state.

    States:
    - IDLE: Devices not ready, or session ended
    - READY: Devices initialized, start action enabled (sub-state of IDLE)
    - CONNECTING: Authenticating or connecting to the backend
    - CONNECTED: Media connected or session fully ready
    """

    IDLE = "idle"
    READY = "ready"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class View(str, Enum):
    """View the presentation layer renders."""

    ERROR = "error"
    SESSION = "session"
    CONFIGURE = "configure"


# Transport state → application state. Anything absent maps to IDLE.
STATE_REDUCTION: Final[dict[TransportState, ApplicationState]] = {
    TransportState.INITIALIZED: ApplicationState.READY,
    TransportState.AUTHENTICATING: ApplicationState.CONNECTING,
    TransportState.CONNECTING: ApplicationState.CONNECTING,
    TransportState.CONNECTED: ApplicationState.CONNECTED,
    TransportState.READY: ApplicationState.CONNECTED,
}

# Start control label per transport state
STATUS_TEXT: Final[dict[TransportState, str]] = {
    TransportState.IDLE: "Initializing...",
    TransportState.INITIALIZING: "Initializing...",
    TransportState.INITIALIZED: "Start",
    TransportState.AUTHENTICATING: "Requesting bot...",
    TransportState.CONNECTING: "Connecting...",
}


def _coerce_transport_state(ts: TransportState | str) -> TransportState | None:
    try:
        return TransportState(ts)
    except ValueError:
        return None


def reduce_transport_state(ts: TransportState | str) -> ApplicationState:
    """Map a transport state to its application state.

    Args:
        ts: Transport state, or a raw value from a newer client

    Returns:
        Mapped application state; unrecognized values map to IDLE
    """
    known = _coerce_transport_state(ts)
    if known is None:
        return ApplicationState.IDLE
    return STATE_REDUCTION.get(known, ApplicationState.IDLE)


@dataclass
class SessionOptions:
    """User-chosen session toggles."""

    start_muted: bool = False


SnapshotListener = Callable[[SessionSnapshot], None]


class SessionController:
    """Reactive bookkeeping over an externally owned session client.

    Registers with the client's state channel at construction and applies the
    client's current state immediately. Transitions are driven only by
    transport state notifications.
    """

    def __init__(self, client: SessionClient, options: SessionOptions | None = None) -> None:
        """Initialize controller and subscribe to the client.

        Args:
            client: Session client whose transport state is observed
            options: Initial session options
        """
        self._client = client
        self.options = options or SessionOptions()
        self.app_state = ApplicationState.IDLE
        self.transport_state: TransportState | str = client.state
        self.fatal_error: FatalError | None = None

        # One-shot latch: device init requested during the current idle period
        self._devices_requested = False
        self._listeners: list[SnapshotListener] = []
        self._closed = False

        client.add_state_listener(self.on_transport_state_change)
        self.on_transport_state_change(client.state)

    def __enter__(self) -> "SessionController":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def is_closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Deregister from the client. Later notifications are ignored."""
        if self._closed:
            return
        self._closed = True
        self._client.remove_state_listener(self.on_transport_state_change)
        self._listeners.clear()
        logger.debug("Session controller closed")

    def on_transport_state_change(self, ts: TransportState | str) -> ApplicationState:
        """Apply a transport state notification.

        Args:
            ts: New transport state

        Returns:
            Resulting application state
        """
        if self._closed:
            return self.app_state

        new_state = reduce_transport_state(ts)
        old_state = self.app_state
        self.transport_state = ts
        self.app_state = new_state

        if new_state != old_state:
            logger.info(
                "Application state transition",
                extra={
                    "transport_state": str(getattr(ts, "value", ts)),
                    "from_state": old_state.value,
                    "to_state": new_state.value,
                },
            )

        if new_state != ApplicationState.IDLE:
            self._devices_requested = False

        self._notify()

        if new_state == ApplicationState.IDLE and not self._devices_requested:
            # Latch before the call: clients may emit synchronously
            self._devices_requested = True
            logger.info("Requesting device initialization")
            self._client.init_devices()

        return new_state

    @property
    def view(self) -> View:
        """View to render; a fatal error pre-empts everything."""
        if self.fatal_error is not None:
            return View.ERROR
        if self.app_state == ApplicationState.CONNECTED:
            return View.SESSION
        return View.CONFIGURE

    @property
    def start_enabled(self) -> bool:
        """Start is enabled only once devices are ready."""
        return self.app_state == ApplicationState.READY

    @property
    def status_text(self) -> str | None:
        """Start control label for the current transport state."""
        known = _coerce_transport_state(self.transport_state)
        if known is None:
            return None
        return STATUS_TEXT.get(known)

    def toggle_start_muted(self) -> bool:
        """Flip the start-muted option.

        Returns:
            New value of the option
        """
        self.options.start_muted = not self.options.start_muted
        logger.info("Start muted toggled", extra={"start_muted": self.options.start_muted})
        self._notify()
        return self.options.start_muted

    def record_fatal_error(self, error: FatalError) -> None:
        """Store a fatal error, replacing any previous one."""
        if self.fatal_error is not None:
            logger.debug(
                "Replacing previous fatal error",
                extra={"previous_kind": self.fatal_error.kind.value},
            )
        self.fatal_error = error
        self._notify()

    def reset(self) -> None:
        """Clear the fatal error and re-apply the client's current state."""
        logger.info("Session controller reset")
        self.fatal_error = None
        self._devices_requested = False
        self.on_transport_state_change(self._client.state)

    def add_listener(self, listener: SnapshotListener) -> None:
        """Register a callback receiving a snapshot after every change."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: SnapshotListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def snapshot(self) -> SessionSnapshot:
        """Capture the controller state for the presentation layer."""
        error = None
        if self.fatal_error is not None:
            error = ErrorPayload(
                kind=self.fatal_error.kind.value,
                message=self.fatal_error.message,
            )

        return SessionSnapshot(
            app_state=self.app_state.value,
            transport_state=str(getattr(self.transport_state, "value", self.transport_state)),
            view=self.view.value,
            start_enabled=self.start_enabled,
            status_text=self.status_text,
            start_muted=self.options.start_muted,
            error=error,
        )

    def _notify(self) -> None:
        if not self._listeners:
            return
        snapshot = self.snapshot()
        for listener in list(self._listeners):
            listener(snapshot)

"""Base session client abstraction.

Defines the interface the session controller and action gateway consume from
the external session client: device initialization, microphone control,
connect / disconnect, and a push-based transport state channel.
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

from voice_session.errors import ConnectFault

logger = logging.getLogger(__name__)


class TransportState(str, Enum):
    """Fine-grained connection lifecycle signal emitted by a session client.

    Typical progression:
    - IDLE → INITIALIZING → INITIALIZED (device init)
    - INITIALIZED → AUTHENTICATING → CONNECTING → CONNECTED → READY (start)
    - * → DISCONNECTING → DISCONNECTED (disconnect)
    - * → ERROR (failure)
    """

    IDLE = "idle"
    INITIALIZING = "initializing"
    INITIALIZED = "initialized"
    AUTHENTICATING = "authenticating"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    READY = "ready"  # Remote bot joined, session usable
    DISCONNECTING = "disconnecting"
    DISCONNECTED = "disconnected"
    ERROR = "error"


StateListener = Callable[[TransportState], None]


class SessionClient(ABC):
    """Base class for session clients.

    Concrete clients perform device enumeration, network negotiation, and
    media streaming. They report progress by calling ``_set_state``, which
    pushes the new state to every registered listener in registration order.
    """

    def __init__(self) -> None:
        self._state: TransportState = TransportState.IDLE
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> TransportState:
        """Most recently emitted transport state."""
        return self._state

    def add_state_listener(self, listener: StateListener) -> None:
        """Register a callback for transport state changes."""
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_state_listener(self, listener: StateListener) -> None:
        """Deregister a callback. Unknown listeners are ignored."""
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _set_state(self, state: TransportState) -> None:
        """Record a new transport state and notify listeners."""
        previous = self._state
        self._state = state
        logger.debug(
            "Transport state changed",
            extra={"from_state": previous.value, "to_state": state.value},
        )
        # Copy so listeners may deregister while being notified
        for listener in list(self._listeners):
            listener(state)

    @abstractmethod
    def init_devices(self) -> None:
        """Initialize local audio devices.

        Idempotent. May complete synchronously or schedule its own async
        work; progress is reported through the state channel.
        """
        pass

    @abstractmethod
    def enable_mic(self, enabled: bool) -> None:
        """Enable or disable local microphone capture."""
        pass

    @abstractmethod
    async def start(self) -> ConnectFault | None:
        """Authenticate and connect to the voice backend.

        Returns:
            None on success, or a ConnectFault describing the failure
        """
        pass

    @abstractmethod
    async def disconnect(self) -> None:
        """Leave the session and release transport resources."""
        pass

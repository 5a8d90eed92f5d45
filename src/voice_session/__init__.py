"""Client-side orchestration for real-time voice sessions.

Reduces a session client's transport lifecycle to a small set of application
states, gates user actions, and classifies connect failures.
"""

from voice_session.controller import (
    ApplicationState,
    SessionController,
    SessionOptions,
    View,
    reduce_transport_state,
)
from voice_session.errors import ConnectFault, FatalError, FaultKind
from voice_session.gateway import ActionGateway

__all__ = [
    "ActionGateway",
    "ApplicationState",
    "ConnectFault",
    "FatalError",
    "FaultKind",
    "SessionController",
    "SessionOptions",
    "View",
    "reduce_transport_state",
]

"""Session client interface and implementations."""

from voice_session.client.base import SessionClient, TransportState
from voice_session.client.mock import MockSessionClient

__all__ = [
    "MockSessionClient",
    "SessionClient",
    "TransportState",
]

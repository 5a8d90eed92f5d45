"""Connect fault taxonomy and fatal error records.

Faults from the connect command are data, not exceptions. A session client
returns a ``ConnectFault`` whose ``kind`` tag carries the classification, and
the action gateway turns it into the single ``FatalError`` held by the
controller.

Clients that prefer raising can use the ``VoiceError`` hierarchy; each class
declares its ``kind`` so conversion stays a tag lookup.
"""

from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Final

UNKNOWN_ERROR_MESSAGE: Final[str] = "Unknown error occurred"


class FaultKind(str, Enum):
    """Coarse classification of a failed connect attempt."""

    AUTH = "auth"  # Credential / auth bundle rejected
    TIMEOUT = "timeout"  # Connection attempt exceeded allotted time
    OTHER = "other"


@dataclass(frozen=True)
class ConnectFault:
    """Tagged fault returned by ``SessionClient.start()``."""

    kind: FaultKind
    message: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> "ConnectFault":
        """Build a fault from a raised exception.

        ``VoiceError`` subclasses provide their own kind; anything else is
        classified as ``OTHER``.
        """
        kind = getattr(exc, "kind", FaultKind.OTHER)
        message = str(exc) or None
        return cls(kind=kind, message=message)


@dataclass(frozen=True)
class FatalError:
    """Single-slot failure record shown in place of every other view."""

    kind: FaultKind
    message: str


def classify_fault(fault: ConnectFault) -> FatalError:
    """Convert a connect fault into a fatal error record.

    Args:
        fault: Fault returned by the session client

    Returns:
        FatalError with the fault's kind and message. Unknown tags are
        classified as OTHER, and a missing message becomes a generic one
    """
    try:
        kind = FaultKind(fault.kind)
    except ValueError:
        kind = FaultKind.OTHER
    return FatalError(kind=kind, message=fault.message or UNKNOWN_ERROR_MESSAGE)


class VoiceError(Exception):
    """Base class for faults raised by session clients."""

    kind: ClassVar[FaultKind] = FaultKind.OTHER


class TransportAuthBundleError(VoiceError):
    """Backend rejected the credential bundle."""

    kind = FaultKind.AUTH


class ConnectionTimeoutError(VoiceError):
    """Connection attempt did not complete in time."""

    kind = FaultKind.TIMEOUT

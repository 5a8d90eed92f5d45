"""Action gateway.

Translates user intent (start / leave) into session client commands and
records connect failures in the controller's fatal error slot.
"""

import logging

from voice_session.client.base import SessionClient, TransportState
from voice_session.controller import ApplicationState, SessionController
from voice_session.errors import ConnectFault, FatalError, classify_fault
from voice_session.snapshot import SessionSnapshot
from voice_session.utils.logging import log_event

logger = logging.getLogger(__name__)


class ActionGateway:
    """Command surface invoked by the presentation layer.

    The only component that issues mutating commands against the client.
    Also releases the microphone once the remote bot is ready, honouring the
    start-muted option.
    """

    def __init__(self, client: SessionClient | None, controller: SessionController) -> None:
        """Initialize gateway.

        Args:
            client: Session client handle, or None when unavailable
            controller: Controller receiving fatal errors
        """
        self._client = client
        self._controller = controller
        self._start_pending = False
        self._mic_released = False

        controller.add_listener(self._on_snapshot)

    @property
    def start_pending(self) -> bool:
        return self._start_pending

    async def start(self) -> FatalError | None:
        """Join the session.

        Disables the microphone before connecting so no audio reaches the
        backend until the bot has joined. Overlapping calls are ignored.
        Faults, whether returned or raised by the client, are recorded as a
        fatal error and never propagate.

        Returns:
            The recorded FatalError if the attempt failed, otherwise None
        """
        if self._client is None:
            logger.warning("Start requested without a session client")
            return None

        if self._start_pending:
            logger.warning("Start already pending, ignoring request")
            return None

        self._start_pending = True
        try:
            self._client.enable_mic(False)
            try:
                fault = await self._client.start()
            except Exception as e:
                logger.warning("Session client raised during start", exc_info=True)
                fault = ConnectFault.from_exception(e)
        finally:
            self._start_pending = False

        if fault is None:
            logger.info("Session start completed")
            return None

        error = classify_fault(fault)
        log_event(
            "session_start_failed",
            {"kind": error.kind.value, "message": error.message},
        )
        self._controller.record_fatal_error(error)
        return error

    async def leave(self) -> None:
        """Leave the session and wait for the disconnect to finish.

        Raises:
            Exception: Whatever the client's disconnect raises, after logging
        """
        if self._client is None:
            logger.warning("Leave requested without a session client")
            return

        logger.info("Leaving session")
        try:
            await self._client.disconnect()
        except Exception:
            logger.exception("Disconnect failed")
            raise

    def _on_snapshot(self, snapshot: SessionSnapshot) -> None:
        if snapshot.app_state != ApplicationState.CONNECTED.value:
            self._mic_released = False
            return

        if (
            self._client is None
            or self._mic_released
            or snapshot.error is not None
            or snapshot.transport_state != TransportState.READY.value
        ):
            return

        self._mic_released = True
        enabled = not snapshot.start_muted
        logger.info("Bot ready, applying microphone option", extra={"mic_enabled": enabled})
        self._client.enable_mic(enabled)

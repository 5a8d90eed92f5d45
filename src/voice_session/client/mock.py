"""Mock session client for demos and integration tests.

Walks the transport lifecycle in-process with configurable delays, and can
be scripted to fail the connect attempt with any fault kind.
"""

import asyncio
import logging

from voice_session.client.base import SessionClient, TransportState
from voice_session.config import MockClientConfig
from voice_session.errors import ConnectFault, FaultKind

logger = logging.getLogger(__name__)

_DEFAULT_FAULT_MESSAGES: dict[FaultKind, str] = {
    FaultKind.AUTH: "Invalid auth bundle",
    FaultKind.TIMEOUT: "Bot did not join in time",
}


class MockSessionClient(SessionClient):
    """Session client that simulates a remote voice backend.

    Attributes:
        config: Delays and fault injection settings
        mic_enabled: Last value passed to enable_mic
        device_init_count: Number of init_devices calls
    """

    def __init__(self, config: MockClientConfig | None = None) -> None:
        super().__init__()
        self.config = config or MockClientConfig()
        self.mic_enabled = True
        self.device_init_count = 0
        self._device_init_handle: asyncio.TimerHandle | None = None
        self._init_after_disconnect = False
        # Bumped by disconnect; an in-flight start compares against it
        self._connect_attempt = 0
        logger.info("MockSessionClient initialized")

    def init_devices(self) -> None:
        """Report devices initializing, then initialized.

        With a zero delay both states are emitted before returning; otherwise
        the second is scheduled on the running loop.
        """
        self.device_init_count += 1
        if self.state == TransportState.DISCONNECTING:
            # Devices are released at the end of disconnect; init afterwards
            self._init_after_disconnect = True
            return

        self._begin_device_init()

    def _begin_device_init(self) -> None:
        if self.state == TransportState.INITIALIZING:
            logger.debug("Device init already in progress")
            return

        self._set_state(TransportState.INITIALIZING)

        delay = self.config.device_init_delay_s
        if delay <= 0:
            self._set_state(TransportState.INITIALIZED)
            return

        loop = asyncio.get_running_loop()
        self._device_init_handle = loop.call_later(delay, self._finish_device_init)

    def _finish_device_init(self) -> None:
        self._device_init_handle = None
        if self.state == TransportState.INITIALIZING:
            self._set_state(TransportState.INITIALIZED)

    def enable_mic(self, enabled: bool) -> None:
        self.mic_enabled = enabled
        logger.info("Microphone toggled", extra={"enabled": enabled})

    async def start(self) -> ConnectFault | None:
        """Simulate authentication, connection, and the bot joining.

        Returns:
            None on success or when a disconnect abandons the attempt,
            otherwise the scripted ConnectFault
        """
        fault_kind = FaultKind(self.config.fail_with) if self.config.fail_with else None
        self._connect_attempt += 1
        attempt = self._connect_attempt

        self._set_state(TransportState.AUTHENTICATING)
        await asyncio.sleep(self.config.auth_delay_s)
        if self._abandoned(attempt):
            return None
        if fault_kind == FaultKind.AUTH:
            return self._fail(fault_kind)

        self._set_state(TransportState.CONNECTING)
        await asyncio.sleep(self.config.connect_delay_s)
        if self._abandoned(attempt):
            return None
        if fault_kind is not None:
            return self._fail(fault_kind)

        self._set_state(TransportState.CONNECTED)
        await asyncio.sleep(self.config.bot_ready_delay_s)
        if self._abandoned(attempt):
            return None
        self._set_state(TransportState.READY)
        logger.info("Mock session ready")
        return None

    def _abandoned(self, attempt: int) -> bool:
        if attempt == self._connect_attempt:
            return False
        logger.info("Connect attempt abandoned after disconnect", extra={"attempt": attempt})
        return True

    def _fail(self, kind: FaultKind) -> ConnectFault:
        message = self.config.fail_message or _DEFAULT_FAULT_MESSAGES.get(kind)
        logger.warning(
            "Mock connect failed",
            extra={"fault_kind": kind.value, "fault_message": message},
        )
        self._set_state(TransportState.ERROR)
        return ConnectFault(kind=kind, message=message)

    async def disconnect(self) -> None:
        """Simulate leaving the session.

        Abandons any connect attempt still in flight.
        """
        self._connect_attempt += 1
        if self._device_init_handle is not None:
            self._device_init_handle.cancel()
            self._device_init_handle = None

        self._set_state(TransportState.DISCONNECTING)
        await asyncio.sleep(self.config.disconnect_delay_s)
        self.mic_enabled = False
        self._set_state(TransportState.DISCONNECTED)

        if self._init_after_disconnect:
            self._init_after_disconnect = False
            self._begin_device_init()

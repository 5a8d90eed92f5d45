"""Unit tests for the action gateway.

Tests start ordering, fault classification, overlapping starts, leave, and
microphone release on bot ready.
"""

import asyncio

import pytest

from tests.helpers.fake_client import FakeSessionClient
from voice_session.client.base import TransportState
from voice_session.controller import SessionController, SessionOptions, View
from voice_session.errors import (
    ConnectFault,
    ConnectionTimeoutError,
    FatalError,
    FaultKind,
    TransportAuthBundleError,
    VoiceError,
)
from voice_session.gateway import ActionGateway


def _commands(client: FakeSessionClient) -> list[tuple[str, object]]:
    """Commands issued after mount (device init excluded)."""
    return [call for call in client.calls if call[0] != "init_devices"]


@pytest.mark.asyncio
async def test_start_without_client_is_noop(controller: SessionController) -> None:
    """Test start does nothing when no client handle is available."""
    gateway = ActionGateway(None, controller)

    assert await gateway.start() is None
    assert controller.fatal_error is None


@pytest.mark.asyncio
async def test_start_disables_mic_before_connect(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test the microphone is disabled strictly before the connect command."""
    result = await gateway.start()

    assert result is None
    assert _commands(client) == [("enable_mic", False), ("start", None)]
    assert controller.fatal_error is None


@pytest.mark.parametrize(
    ("fault", "expected"),
    [
        (
            ConnectFault(kind=FaultKind.AUTH, message="invalid token"),
            FatalError(kind=FaultKind.AUTH, message="invalid token"),
        ),
        (
            ConnectFault(kind=FaultKind.TIMEOUT, message="bot never joined"),
            FatalError(kind=FaultKind.TIMEOUT, message="bot never joined"),
        ),
        (
            ConnectFault(kind=FaultKind.OTHER, message="network unreachable"),
            FatalError(kind=FaultKind.OTHER, message="network unreachable"),
        ),
        (
            ConnectFault(kind=FaultKind.OTHER),
            FatalError(kind=FaultKind.OTHER, message="Unknown error occurred"),
        ),
    ],
)
@pytest.mark.asyncio
async def test_start_classifies_returned_fault(
    client: FakeSessionClient,
    controller: SessionController,
    gateway: ActionGateway,
    fault: ConnectFault,
    expected: FatalError,
) -> None:
    """Test each fault kind produces a fatal error with the matching class."""
    client.start_result = fault

    result = await gateway.start()

    assert result == expected
    assert controller.fatal_error == expected
    assert controller.view == View.ERROR


@pytest.mark.asyncio
async def test_auth_fault_scenario(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test an auth bundle fault carrying 'invalid token' is recorded as auth."""
    client.start_result = ConnectFault(kind=FaultKind.AUTH, message="invalid token")

    await gateway.start()

    assert controller.fatal_error is not None
    assert controller.fatal_error.kind == FaultKind.AUTH
    assert controller.fatal_error.message == "invalid token"


@pytest.mark.parametrize(
    ("exc", "kind", "message"),
    [
        (TransportAuthBundleError("bad bundle"), FaultKind.AUTH, "bad bundle"),
        (ConnectionTimeoutError("timed out"), FaultKind.TIMEOUT, "timed out"),
        (VoiceError(), FaultKind.OTHER, "Unknown error occurred"),
    ],
)
@pytest.mark.asyncio
async def test_start_classifies_raised_voice_error(
    client: FakeSessionClient,
    controller: SessionController,
    gateway: ActionGateway,
    exc: VoiceError,
    kind: FaultKind,
    message: str,
) -> None:
    """Test clients raising VoiceError subclasses are classified the same way."""
    client.start_exc = exc

    await gateway.start()

    assert controller.fatal_error == FatalError(kind=kind, message=message)


@pytest.mark.parametrize(
    ("exc", "message"),
    [
        (TimeoutError("connect timed out"), "connect timed out"),
        (ConnectionError("connection refused"), "connection refused"),
        (OSError(), "Unknown error occurred"),
    ],
)
@pytest.mark.asyncio
async def test_start_records_builtin_exception_as_other(
    client: FakeSessionClient,
    controller: SessionController,
    gateway: ActionGateway,
    exc: Exception,
    message: str,
) -> None:
    """Test any exception raised by the client becomes an OTHER fatal error."""
    client.start_exc = exc

    result = await gateway.start()

    assert result == FatalError(kind=FaultKind.OTHER, message=message)
    assert controller.fatal_error == result
    assert controller.view == View.ERROR
    assert gateway.start_pending is False


@pytest.mark.asyncio
async def test_start_unknown_fault_tag_is_other(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test a fault tag outside FaultKind is classified as OTHER."""
    client.start_result = ConnectFault(kind="rate_limited", message="slow down")  # type: ignore[arg-type]

    result = await gateway.start()

    assert result == FatalError(kind=FaultKind.OTHER, message="slow down")
    assert controller.fatal_error == result


@pytest.mark.asyncio
async def test_failed_attempts_overwrite_error(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test one fatal error per failed attempt, the latest winning."""
    client.start_result = ConnectFault(kind=FaultKind.AUTH, message="first")
    await gateway.start()

    client.start_result = ConnectFault(kind=FaultKind.TIMEOUT, message="second")
    await gateway.start()

    assert controller.fatal_error == FatalError(kind=FaultKind.TIMEOUT, message="second")


@pytest.mark.asyncio
async def test_overlapping_start_ignored(
    client: FakeSessionClient, gateway: ActionGateway
) -> None:
    """Test a start issued while one is pending is ignored."""
    client.start_gate = asyncio.Event()

    first = asyncio.create_task(gateway.start())
    await asyncio.sleep(0)
    assert gateway.start_pending is True

    assert await gateway.start() is None
    assert client.count("start") == 1

    client.start_gate.set()
    assert await first is None
    assert gateway.start_pending is False


@pytest.mark.asyncio
async def test_leave_awaits_disconnect(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test leave while connected awaits disconnect and sets no error."""
    client.emit(TransportState.READY)

    await gateway.leave()

    assert client.disconnected is True
    assert client.count("disconnect") == 1
    assert controller.fatal_error is None


@pytest.mark.asyncio
async def test_leave_without_client_is_noop(controller: SessionController) -> None:
    """Test leave does nothing when no client handle is available."""
    gateway = ActionGateway(None, controller)
    await gateway.leave()


@pytest.mark.asyncio
async def test_leave_reraises_disconnect_fault(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test disconnect faults propagate and never touch the fatal error slot."""
    client.disconnect_exc = ConnectionError("socket already closed")

    with pytest.raises(ConnectionError):
        await gateway.leave()

    assert controller.fatal_error is None


def test_mic_released_when_bot_ready(
    client: FakeSessionClient, gateway: ActionGateway
) -> None:
    """Test the microphone is enabled once the bot is ready."""
    client.emit(TransportState.CONNECTED)
    assert ("enable_mic", True) not in client.calls

    client.emit(TransportState.READY)
    client.emit(TransportState.READY)

    assert _commands(client) == [("enable_mic", True)]


def test_mic_stays_off_when_start_muted(client: FakeSessionClient) -> None:
    """Test the start-muted option keeps the microphone disabled."""
    controller = SessionController(client, SessionOptions(start_muted=True))
    ActionGateway(client, controller)

    client.emit(TransportState.READY)

    assert _commands(client) == [("enable_mic", False)]


def test_mic_released_again_after_reconnect(
    client: FakeSessionClient, gateway: ActionGateway
) -> None:
    """Test each connected period releases the microphone once."""
    client.emit(TransportState.READY)
    client.emit(TransportState.DISCONNECTED)
    client.emit(TransportState.INITIALIZED)
    client.emit(TransportState.READY)

    assert _commands(client) == [("enable_mic", True), ("enable_mic", True)]


def test_mic_not_released_with_fatal_error(
    client: FakeSessionClient, controller: SessionController, gateway: ActionGateway
) -> None:
    """Test a fatal error suppresses the microphone release."""
    controller.record_fatal_error(FatalError(kind=FaultKind.OTHER, message="boom"))

    client.emit(TransportState.READY)

    assert _commands(client) == []

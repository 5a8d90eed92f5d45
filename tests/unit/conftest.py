"""Shared fixtures for unit tests."""

import pytest

from tests.helpers.fake_client import FakeSessionClient
from voice_session.controller import SessionController
from voice_session.gateway import ActionGateway


@pytest.fixture
def client() -> FakeSessionClient:
    return FakeSessionClient()


@pytest.fixture
def controller(client: FakeSessionClient) -> SessionController:
    return SessionController(client)


@pytest.fixture
def gateway(client: FakeSessionClient, controller: SessionController) -> ActionGateway:
    return ActionGateway(client, controller)

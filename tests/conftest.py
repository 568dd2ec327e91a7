"""Pytest configuration and fixtures for the Dataverse client tests"""
from unittest.mock import Mock

import httpx
import pytest

from dataverse import DataverseClient, DataverseConfig, Lock


class FakeClock:
    """Monotonic clock that only advances when the fake sleep is called"""

    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def locks(*lock_types):
    """Build a lock snapshot from lock type names"""
    return [Lock(lock_type=t) for t in lock_types]


def ok(data=None, status_code=200):
    return httpx.Response(status_code, json={"status": "OK", "data": data})


def error(status_code, message):
    return httpx.Response(status_code, json={"status": "ERROR", "message": message})


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def mock_sleep():
    return Mock()


@pytest.fixture
def config():
    return DataverseConfig(
        base_url="https://demo.dataverse.test",
        api_token="test-token",
        await_lock_state_max_attempts=3,
        await_lock_state_interval_ms=10,
        await_indexing_max_attempts=5,
        await_indexing_interval_ms=20,
    )


@pytest.fixture
def make_client(config):
    """Create a client whose HTTP traffic is answered by ``responder``.

    ``responder`` is either a callable taking an httpx.Request or a list of
    responses served in order. Every request is recorded on ``client.requests``.
    """
    clients = []

    def _make(responder):
        requests = []
        queue = list(responder) if isinstance(responder, list) else None

        def handler(request):
            requests.append(request)
            if queue is not None:
                return queue.pop(0)
            return responder(request)

        client = DataverseClient(config, transport=httpx.MockTransport(handler))
        client.requests = requests
        clients.append(client)
        return client

    yield _make
    for client in clients:
        client.close()

"""Shared fixtures: a clean client configuration and a mocked remote client."""

from unittest.mock import Mock

import pytest

from remote_entities.client import Response, configure, reset_client
from remote_entities.populator import parse_document


@pytest.fixture(autouse=True)
def clean_client(monkeypatch):
    """Start every test without a configured client or API key."""
    monkeypatch.delenv("REMOTE_ENTITIES_API_KEY", raising=False)
    monkeypatch.delenv("REMOTE_ENTITIES_ENDPOINT", raising=False)
    monkeypatch.delenv("REMOTE_ENTITIES_TIMEOUT", raising=False)
    reset_client()
    yield
    reset_client()


@pytest.fixture
def remote():
    """Configure a mocked remote client; set ``remote.reply(xml)`` per test."""
    client = Mock(spec=["call"])

    def reply(xml, method="mock.method"):
        client.call.return_value = Response(method=method, body=parse_document(xml))
        return client.call.return_value

    client.reply = reply
    configure(client)
    return client

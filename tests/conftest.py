"""Shared fakes for hybsearch tests."""

import io
import json
from pathlib import Path
from unittest.mock import Mock

import pytest
from rich.console import Console

from hybsearch.config import ConfigManager
from hybsearch.connection import Connection, ConnectionManager
from hybsearch.dispatcher import MessageDispatcher
from hybsearch.session import Session, SessionClient


class FakeWebSocket:
    """In-memory stand-in for a websockets client connection."""

    def __init__(self, incoming=(), fail_with=None):
        self.incoming = list(incoming)
        self.fail_with = fail_with
        self.sent = []
        self.close_calls = 0

    async def send(self, message):
        self.sent.append(message)

    async def close(self):
        self.close_calls += 1

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for raw in self.incoming:
            if self.close_calls:
                return
            yield raw
        if self.fail_with is not None:
            raise self.fail_with


class FakeConnector:
    """Connector returning a prepared FakeWebSocket, or raising ``error``."""

    def __init__(self, websocket=None, error=None):
        self.websocket = websocket or FakeWebSocket()
        self.error = error
        self.urls = []

    async def __call__(self, url):
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.websocket


def envelope(message_type, **payload):
    return json.dumps({"type": message_type, "payload": payload})


def make_console():
    return Console(file=io.StringIO(), width=200, color_system=None)


@pytest.fixture
def consoles():
    return make_console(), make_console()


@pytest.fixture
def dispatcher(consoles):
    out, err = consoles
    return MessageDispatcher(console=out, err_console=err)


@pytest.fixture
def session():
    session = Session(server="example.org:80", pipeline="mbnb", input_file=Path("sample.gb"))
    session.connection = Connection(FakeWebSocket(), "ws://example.org:80")
    return session


@pytest.fixture
def input_file(tmp_path):
    path = tmp_path / "sample.gb"
    path.write_text("LOCUS       AB000001   10 bp    DNA\nORIGIN\n        1 acgtacgtac\n//\n", encoding="utf-8")
    return path


@pytest.fixture
def api():
    api = Mock()
    api.get_uptime.return_value = 90_000
    api.list_pipelines.return_value = ["mbnb", "njbb"]
    return api


@pytest.fixture
def make_client(tmp_path, api, consoles):
    """Build a SessionClient wired to a fake transport and control plane."""
    def factory(websocket=None, error=None):
        connector = FakeConnector(websocket, error)
        out, err = consoles
        client = SessionClient(
            connection_manager=ConnectionManager(connector=connector),
            api_factory=lambda server: api,
            dispatcher=MessageDispatcher(console=out, err_console=err),
            config_manager=ConfigManager(config_dir=tmp_path / "config"),
        )
        return client, connector
    return factory

"""
Session connection handling.

A hybsearch run uses exactly one WebSocket connection. ConnectionManager
opens it once (resolving on the open handshake or failing on the first
transport error) and ``connect`` scopes it so it is closed on every exit path.
"""

import functools
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Awaitable, Callable, Optional, Union

import websockets
from websockets.exceptions import ConnectionClosedError, WebSocketException

from hybsearch.errors import ServerConnectionError


# No open timeout and no frame size limit: a run waits as long as the server
# needs and results may be large.
default_connector = functools.partial(websockets.connect, open_timeout=None, max_size=None)


class Connection:
    """An open session connection owned by a single run."""

    def __init__(self, websocket: Any, url: str) -> None:
        self.url = url
        self._websocket = websocket
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def send(self, message: str) -> None:
        if self._closed:
            raise ServerConnectionError(f"Connection to {self.url} is already closed")
        try:
            await self._websocket.send(message)
        except (OSError, WebSocketException) as e:
            raise ServerConnectionError(f"Could not send to {self.url}: {e}") from e

    async def close(self) -> None:
        """Close the connection. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        await self._websocket.close()

    def __aiter__(self) -> AsyncIterator[Union[str, bytes]]:
        return self._messages()

    async def _messages(self) -> AsyncIterator[Union[str, bytes]]:
        try:
            async for raw in self._websocket:
                if self._closed:
                    break
                yield raw
        except ConnectionClosedError as e:
            if not self._closed:
                raise ServerConnectionError(f"Connection to {self.url} was lost: {e}") from e


class ConnectionManager:
    """Opens session connections."""

    def __init__(self, connector: Optional[Callable[[str], Awaitable[Any]]] = None) -> None:
        self._connector = connector or default_connector

    async def open(self, url: str) -> Connection:
        """Open a connection to ``url``.

        Raises:
            ServerConnectionError: If the transport reports an error before opening
        """
        try:
            websocket = await self._connector(url)
        except (OSError, WebSocketException) as e:
            raise ServerConnectionError(f"Could not connect to {url}: {e}") from e
        return Connection(websocket, url)

    @asynccontextmanager
    async def connect(self, url: str) -> AsyncIterator[Connection]:
        """Open a connection that is closed when the block exits, however it exits."""
        connection = await self.open(url)
        try:
            yield connection
        finally:
            await connection.close()

import json
import logging
from urllib.parse import urlsplit, urlunsplit

from websockets.asyncio.client import ClientConnection, connect

from logging_view_plugin.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

_WS_SCHEMES = {"http": "ws", "https": "wss", "ws": "ws", "wss": "wss"}


def resolve_socket_url(base_url: str, path: str) -> str:
    """Put a proxy path on the host of ``base_url``, switching to a WebSocket scheme."""
    parts = urlsplit(base_url)
    target = urlsplit(path)
    scheme = _WS_SCHEMES.get(parts.scheme, "ws")
    prefix = parts.path.rstrip("/")
    return urlunsplit((scheme, parts.netloc, prefix + target.path, target.query, ""))


class TailSocket:
    """Live tail connection; every frame is decoded as JSON.

    Use as an async context manager and iterate over it::

        async with client.tail(query, start, tenant) as socket:
            async for message in socket:
                ...

    Reconnecting after the server closes the stream is left to the caller.
    """

    subprotocols = ("json",)

    def __init__(self, url: str, headers: dict[str, str] | None = None, json_parse: bool = True):
        self.url = url
        self.headers = headers or {}
        self.json_parse = json_parse
        self._connection: ClientConnection | None = None

    async def connect(self) -> "TailSocket":
        logger.debug("opening tail socket %s", self.url)
        self._connection = await connect(
            self.url,
            subprotocols=list(self.subprotocols),
            additional_headers=self.headers or None,
        )
        return self

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

    async def __aenter__(self) -> "TailSocket":
        return await self.connect()

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __aiter__(self):
        return self._messages()

    async def _messages(self):
        if self._connection is None:
            raise RuntimeError("tail socket is not connected")
        async for message in self._connection:
            yield json.loads(message) if self.json_parse else message

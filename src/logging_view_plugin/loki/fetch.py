import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Generic, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from logging_view_plugin.logger import LOGGER_NAME

logger = logging.getLogger(LOGGER_NAME)

T = TypeVar("T", bound=BaseModel)


@dataclass
class RequestInit:
    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None  # seconds


class FetchError(Exception):
    """The log backend answered with an error or an unreadable body."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class CancellableFetch(Generic[T]):
    """One HTTP request that the caller may abort.

    ``request()`` starts the request on first use and returns its result;
    later calls await the same attempt. ``abort()`` cancels it, after which
    ``request()`` raises ``asyncio.CancelledError``. There is no retry.
    """

    def __init__(self, run: Callable[[], Awaitable[T]]):
        self._run = run
        self._task: asyncio.Task | None = None
        self._aborted = False

    async def request(self) -> T:
        if self._aborted:
            raise asyncio.CancelledError("request aborted")
        if self._task is None:
            self._task = asyncio.ensure_future(self._run())
        return await self._task

    def abort(self) -> None:
        self._aborted = True
        if self._task is not None and not self._task.done():
            self._task.cancel()

    @property
    def aborted(self) -> bool:
        return self._aborted


def cancellable_fetch(
    client: httpx.AsyncClient,
    url: str,
    response_model: type[T],
    request_init: RequestInit | None = None,
) -> CancellableFetch[T]:
    init = request_init or RequestInit()

    async def run() -> T:
        logger.debug("GET %s", url)
        try:
            if init.timeout:
                async with asyncio.timeout(init.timeout):
                    response = await client.get(url, headers=init.headers)
            else:
                response = await client.get(url, headers=init.headers)
        except httpx.HTTPError as e:
            raise FetchError(f"request to {url} failed: {e}") from e

        if not response.is_success:
            raise FetchError(response.text, response.status_code)

        try:
            return response_model.model_validate(response.json())
        except (json.JSONDecodeError, ValidationError) as e:
            raise FetchError(f"unexpected response from {url}: {e}", response.status_code) from e

    return CancellableFetch(run)

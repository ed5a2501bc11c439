"""Download the cooling-centre dataset over HTTP."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Protocol

import aiohttp

from app.config import get_settings
from app.services.errors import TransportFailure

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResponse:
    status: int
    body: bytes


class DatasetFetcher(Protocol):
    async def fetch(self, url: str) -> FetchResponse: ...


class AiohttpFetcher:
    """GET a URL with a bounded timeout, retrying transport errors and 5xx replies.

    Any status is handed back to the caller; only connection-level problems raise
    (TransportFailure, once the retries are used up).
    """

    def __init__(
        self,
        session: aiohttp.ClientSession,
        *,
        timeout_s: Optional[float] = None,
        retries: Optional[int] = None,
        backoff_s: Optional[float] = None,
    ) -> None:
        settings = get_settings()
        self.session = session
        self.timeout_s = settings.http_timeout_s if timeout_s is None else timeout_s
        self.retries = settings.fetch_retries if retries is None else retries
        self.backoff_s = settings.retry_backoff_s if backoff_s is None else backoff_s
        self.user_agent = settings.user_agent

    async def _get_once(self, url: str) -> FetchResponse:
        timeout = aiohttp.ClientTimeout(total=self.timeout_s)
        headers = {"User-Agent": self.user_agent}
        async with self.session.get(url, headers=headers, timeout=timeout) as resp:
            body = await resp.read()
            return FetchResponse(status=resp.status, body=body)

    async def fetch(self, url: str) -> FetchResponse:
        attempts = max(1, self.retries + 1)
        for attempt in range(attempts):
            last_try = attempt == attempts - 1
            try:
                response = await self._get_once(url)
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                reason = str(e) or type(e).__name__
                if last_try:
                    logger.error("Giving up on %s after %d attempt(s): %s", url, attempts, reason)
                    raise TransportFailure(url, reason) from e
                logger.warning("Fetching %s failed (attempt %d/%d): %s", url, attempt + 1, attempts, reason)
            else:
                if response.status < 500 or last_try:
                    return response
                logger.warning(
                    "Fetching %s returned HTTP %d (attempt %d/%d)", url, response.status, attempt + 1, attempts
                )
            await asyncio.sleep(self.backoff_s * 2**attempt)

        raise AssertionError("unreachable")

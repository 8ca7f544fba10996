"""Outbound retrieval of IMDb pages."""

from __future__ import annotations

import logging

import httpx

from ..config import DEFAULT_USER_AGENT

logger = logging.getLogger(__name__)


class FetchError(Exception):
    """Raised when a page could not be retrieved from the remote source."""

    def __init__(
        self,
        url: str,
        cause: BaseException,
        *,
        status_code: int | None = None,
    ) -> None:
        self.url = url
        self.cause = cause
        self.status_code = status_code
        if status_code is not None:
            message = f"GET {url} returned HTTP {status_code}"
        else:
            message = f"GET {url} failed: {cause.__class__.__name__}: {cause}"
        super().__init__(message)


class DocumentFetcher:
    """Fetch raw markup with a fixed browser identity.

    The fetcher never retries or caches; both are left to the caller.
    """

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        *,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self._client = http_client
        self._user_agent = user_agent

    @property
    def headers(self) -> dict[str, str]:
        return {"User-Agent": self._user_agent}

    async def fetch(self, url: str) -> str:
        """Return the body of ``url`` or raise :class:`FetchError`."""

        logger.debug("Fetching %s", url)
        try:
            response = await self._client.get(url, headers=self.headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning("Fetching %s failed with HTTP %s", url, status)
            raise FetchError(url, exc, status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.warning("Fetching %s failed: %s", url, exc)
            raise FetchError(url, exc) from exc
        return response.text

"""Fetch remote documents (type maps) with retries on transient failures."""

from __future__ import annotations

import asyncio
import logging
from typing import Final

import httpx

from apidoc2json.config import (
    APIDOC2JSON_FETCH_BACKOFF_S,
    APIDOC2JSON_FETCH_MAX_RETRIES,
    APIDOC2JSON_FETCH_TIMEOUT_S,
    APIDOC2JSON_USER_AGENT,
)
from apidoc2json.exceptions import FetchError

logger = logging.getLogger(__name__)

RETRY_STATUS_CODES: Final[frozenset[int]] = frozenset({429, 500, 502, 503, 504})

_MAX_REDIRECTS: Final[int] = 5


async def fetch_text(
    url: str,
    *,
    client: httpx.AsyncClient | None = None,
    max_retries: int | None = None,
    backoff_s: float | None = None,
    timeout_s: float | None = None,
) -> str:
    """Fetch a text document, retrying transient failures with backoff.

    Args:
        url: The URL to fetch.
        client: Optional shared client. When omitted, a client is created for
            this request and closed afterwards.
        max_retries: Retries after the first attempt. Defaults to
            ``APIDOC2JSON_FETCH_MAX_RETRIES``.
        backoff_s: Base delay, doubled after every failed attempt. Defaults to
            ``APIDOC2JSON_FETCH_BACKOFF_S``.
        timeout_s: Per-request timeout for a newly created client.

    Returns:
        The decoded response body.

    Raises:
        FetchError: On 404, or when every attempt failed.
    """
    retries = APIDOC2JSON_FETCH_MAX_RETRIES if max_retries is None else max_retries
    backoff = APIDOC2JSON_FETCH_BACKOFF_S if backoff_s is None else backoff_s

    async def do_fetch(http_client: httpx.AsyncClient) -> str:
        last_exc: Exception | None = None

        for attempt in range(retries + 1):
            try:
                response = await http_client.get(url)

                if response.status_code == 404:
                    raise FetchError(f"Resource not found at {url}")

                if response.status_code in RETRY_STATUS_CODES:
                    last_exc = FetchError(f"HTTP {response.status_code} from {url}")
                else:
                    response.raise_for_status()
                    return response.text
            except (httpx.RequestError, httpx.HTTPStatusError) as exc:
                last_exc = exc

            if attempt < retries:
                delay = backoff * (2**attempt)
                logger.debug("Retrying %s in %.2fs after: %s", url, delay, last_exc)
                await asyncio.sleep(delay)

        raise FetchError(f"Failed to fetch {url}: {last_exc}")

    if client is not None:
        return await do_fetch(client)

    async with httpx.AsyncClient(
        timeout=httpx.Timeout(APIDOC2JSON_FETCH_TIMEOUT_S if timeout_s is None else timeout_s),
        headers={"User-Agent": APIDOC2JSON_USER_AGENT},
        follow_redirects=True,
        max_redirects=_MAX_REDIRECTS,
    ) as new_client:
        return await do_fetch(new_client)

"""Shared upstream HTTP handling.

Every upstream feed can fail in the same handful of ways. ``fetch_json``
turns each of them into an ``UpstreamTransientError`` with a stable code so
callers only ever handle one exception type.
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from turbcast.errors import UpstreamTransientError

logger = logging.getLogger(__name__)


async def fetch_json(
    client: httpx.AsyncClient,
    source: str,
    url: str,
    *,
    params: dict[str, Any] | None = None,
    headers: dict[str, str] | None = None,
) -> Any:
    """GET ``url`` and decode its JSON body.

    Raises:
        UpstreamTransientError: on transport error or timeout, rate limiting,
            non-2xx status, empty body, or a body that is not JSON.
    """
    try:
        resp = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as exc:
        raise UpstreamTransientError(source, f"request timed out: {exc}", code="timeout") from exc
    except httpx.HTTPError as exc:
        raise UpstreamTransientError(source, f"request failed: {exc}", code="transport_error") from exc

    if resp.status_code == 429:
        raise UpstreamTransientError(source, "rate limit exceeded", code="rate_limited")
    if not resp.is_success:
        raise UpstreamTransientError(source, f"HTTP {resp.status_code}", code="http_status")

    text = resp.text
    if not text or not text.strip():
        raise UpstreamTransientError(source, "empty response body", code="empty_body")

    try:
        return json.loads(text)
    except ValueError as exc:
        logger.debug("%s returned non-JSON body: %.200s", source, text)
        raise UpstreamTransientError(source, "response is not valid JSON", code="invalid_json") from exc

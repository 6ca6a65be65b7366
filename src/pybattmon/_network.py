"""Public IP lookup over HTTP."""

from __future__ import annotations

import json
import logging
from typing import Any

import aiohttp

from pybattmon._constants import IP_LOOKUP_URL, IP_PLACEHOLDER, USER_AGENT
from pybattmon.exceptions import NetworkUnavailableError

_logger = logging.getLogger(__name__)


async def fetch_public_ip(
    http_session: aiohttp.ClientSession,
    *,
    url: str = IP_LOOKUP_URL,
    timeout: float = 5.0,
) -> str:
    """Return the public IP reported by a ``{"ip": "..."}`` JSON endpoint.

    Raises
    ------
    NetworkUnavailableError
        On connection errors, non-200 replies, invalid JSON or a missing ``ip``.
    """
    _logger.debug("GET %s", url)
    try:
        async with http_session.get(
            url,
            headers={"user-agent": USER_AGENT, "accept": "application/json"},
            timeout=aiohttp.ClientTimeout(total=timeout),
        ) as resp:
            text = await resp.text()
            if resp.status != 200:
                raise NetworkUnavailableError(
                    f"HTTP {resp.status} from {url}: {text[:200]}",
                    url=url,
                    status_code=resp.status,
                )
    except NetworkUnavailableError:
        raise
    except (aiohttp.ClientError, TimeoutError) as exc:
        raise NetworkUnavailableError(f"Request to {url} failed: {exc}", url=url) from exc

    try:
        body: Any = json.loads(text)
    except json.JSONDecodeError as exc:
        raise NetworkUnavailableError(f"Invalid JSON from {url}: {text[:200]}", url=url) from exc

    ip = body.get("ip") if isinstance(body, dict) else None
    if not isinstance(ip, str) or not ip.strip():
        raise NetworkUnavailableError(f"Missing 'ip' field from {url}", url=url)
    return ip.strip()


async def lookup_public_ip(
    http_session: aiohttp.ClientSession | None,
    *,
    url: str = IP_LOOKUP_URL,
    timeout: float = 5.0,
) -> str:
    """Like :func:`fetch_public_ip` but substitutes ``"DEVICE_IP"`` on any failure."""
    if http_session is None:
        return IP_PLACEHOLDER
    try:
        return await fetch_public_ip(http_session, url=url, timeout=timeout)
    except NetworkUnavailableError as exc:
        _logger.debug("Public IP lookup failed: %s", exc)
        return IP_PLACEHOLDER

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import aiohttp
import pytest

from pybattmon._network import fetch_public_ip, lookup_public_ip
from pybattmon.exceptions import NetworkUnavailableError


@dataclass
class _FakeResponse:
    status: int
    body: str

    async def text(self) -> str:
        return self.body

    async def __aenter__(self) -> _FakeResponse:
        return self

    async def __aexit__(self, *exc: Any) -> None:
        return None


@dataclass
class _FakeSession:
    status: int = 200
    body: str = '{"ip": "203.0.113.7"}'
    error: Exception | None = None
    urls: list[str] = field(default_factory=list)

    def get(self, url: str, **kwargs: Any) -> _FakeResponse:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return _FakeResponse(self.status, self.body)


@pytest.mark.asyncio
async def test_fetch_public_ip() -> None:
    session = _FakeSession()
    ip = await fetch_public_ip(session, url="https://ip.example/json")  # type: ignore[arg-type]

    assert ip == "203.0.113.7"
    assert session.urls == ["https://ip.example/json"]


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "session",
    [
        _FakeSession(status=503, body="unavailable"),
        _FakeSession(body="<html>"),
        _FakeSession(body='{"address": "1.2.3.4"}'),
        _FakeSession(body='["1.2.3.4"]'),
        _FakeSession(error=aiohttp.ClientConnectionError("no route")),
        _FakeSession(error=TimeoutError()),
    ],
)
async def test_fetch_public_ip_failures(session: _FakeSession) -> None:
    with pytest.raises(NetworkUnavailableError):
        await fetch_public_ip(session)  # type: ignore[arg-type]


@pytest.mark.asyncio
async def test_fetch_public_ip_keeps_status_code() -> None:
    with pytest.raises(NetworkUnavailableError) as excinfo:
        await fetch_public_ip(_FakeSession(status=429, body="slow down"))  # type: ignore[arg-type]
    assert excinfo.value.status_code == 429


@pytest.mark.asyncio
async def test_lookup_substitutes_placeholder() -> None:
    assert await lookup_public_ip(None) == "DEVICE_IP"
    assert await lookup_public_ip(_FakeSession(status=500, body="")) == "DEVICE_IP"  # type: ignore[arg-type]
    assert await lookup_public_ip(_FakeSession()) == "203.0.113.7"  # type: ignore[arg-type]

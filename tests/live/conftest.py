from __future__ import annotations

import os
import uuid
from collections.abc import Iterator
from dataclasses import dataclass

import pytest

from resplink.connection import Connection
from resplink.transport.base import Endpoint


def _env(name: str, default: str | None = None) -> str | None:
    v = os.environ.get(name)
    if v is None or not v.strip():
        return default
    return v.strip()


@dataclass(slots=True)
class LiveConfig:
    endpoint: Endpoint
    timeout: float


@pytest.fixture(scope="session")
def live_config() -> LiveConfig:
    url = _env("RESPLINK_LIVE_URL")
    if url is None:
        pytest.skip("Set RESPLINK_LIVE_URL (e.g. redis://127.0.0.1:6379) to run live tests")
    timeout = float(_env("RESPLINK_LIVE_TIMEOUT", "5") or "5")
    return LiveConfig(endpoint=Endpoint.from_url(url), timeout=timeout)


@pytest.fixture
def live_conn(live_config: LiveConfig) -> Iterator[Connection]:
    conn = Connection.connect(live_config.endpoint, timeout=live_config.timeout)
    try:
        yield conn
    finally:
        conn.disconnect()


@pytest.fixture
def live_key(live_conn: Connection) -> Iterator[str]:
    key = f"resplink:test:{uuid.uuid4().hex}"
    try:
        yield key
    finally:
        if live_conn.connected:
            live_conn.call("DEL", key)

"""
Unit tests for notify_probe.transport.nats_client.NatsBusClient.

These tests validate transport behavior without a live NATS server:
- connect() passes the configured URL and timeout to nats.connect
- connect failures become BusConnectionError
- request() returns the reply payload and forwards subject/body/timeout
- nats timeouts and other bus errors are translated
- close() is idempotent and tolerant of close errors
- a refused startup connect fails fast (real socket, no broker)
- a loop thread that does not stop is reported

Approach
--------
We monkeypatch nats.connect with a coroutine returning a fake connection.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import asyncio
import socket
import time
from typing import Any, Dict, List, Tuple

import nats.errors
import pytest

from notify_probe.transport.bus import BusConnectionError, BusRequestError, BusTimeoutError
from notify_probe.transport.nats_client import NatsBusClient


@dataclass
class FakeMsg:
    data: bytes


@dataclass
class FakeNatsConnection:
    """
    Fake nats-py connection.

    Parameters
    ----------
    replies
        Reply payloads (bytes) or exceptions, consumed one per request.
    """

    replies: List[Any] = field(default_factory=list)
    requests: List[Tuple[str, bytes, float]] = field(default_factory=list)
    close_calls: int = 0
    close_error: Exception | None = None

    async def request(self, subject: str, payload: bytes, timeout: float) -> FakeMsg:
        """Record the request and return (or raise) the next reply."""
        self.requests.append((subject, payload, timeout))
        r = self.replies.pop(0)
        if isinstance(r, BaseException):
            raise r
        return FakeMsg(r)

    async def close(self) -> None:
        self.close_calls += 1
        if self.close_error is not None:
            raise self.close_error


def _install(monkeypatch, conn: FakeNatsConnection) -> Dict[str, Any]:
    seen: Dict[str, Any] = {}

    async def fake_connect(**kwargs):
        seen.update(kwargs)
        return conn

    monkeypatch.setattr("nats.connect", fake_connect)
    return seen


def test_connect_passes_url_and_disables_reconnect(monkeypatch) -> None:
    conn = FakeNatsConnection()
    seen = _install(monkeypatch, conn)

    client = NatsBusClient(url="nats://10.0.0.1:4222", connect_timeout_s=1.5)
    client.connect()

    assert seen["servers"] == ["nats://10.0.0.1:4222"]
    assert seen["connect_timeout"] == 1.5
    assert seen["allow_reconnect"] is False
    # 0 would make nats-py retry a refused server forever
    assert seen["max_reconnect_attempts"] == 1
    assert seen["error_cb"] is not None
    assert client.is_connected

    client.close()
    assert conn.close_calls == 1
    assert not client.is_connected


@pytest.mark.parametrize("error", [ConnectionRefusedError("refused"), nats.errors.NoServersError()])
def test_connect_failure_raises_bus_connection_error(monkeypatch, error) -> None:
    async def failing_connect(**kwargs):
        raise error

    monkeypatch.setattr("nats.connect", failing_connect)

    client = NatsBusClient(url="nats://nowhere:4222")
    with pytest.raises(BusConnectionError) as exc:
        client.connect()

    assert "nats://nowhere:4222" in str(exc.value)
    assert exc.value.__cause__ is error
    assert not client.is_connected
    # nothing to release
    client.close()


def test_request_returns_reply_payload(monkeypatch) -> None:
    conn = FakeNatsConnection(replies=[b'{"status":"ok"}'])
    _install(monkeypatch, conn)

    client = NatsBusClient()
    client.connect()
    try:
        resp = client.request("NOTIFICATION.list", b"{}", 5.0)
    finally:
        client.close()

    assert resp == b'{"status":"ok"}'
    assert conn.requests == [("NOTIFICATION.list", b"{}", 5.0)]


def test_request_timeout_raises_bus_timeout_error(monkeypatch) -> None:
    conn = FakeNatsConnection(replies=[nats.errors.TimeoutError()])
    _install(monkeypatch, conn)

    client = NatsBusClient()
    client.connect()
    try:
        with pytest.raises(BusTimeoutError) as exc:
            client.request("NOTIFICATION.send-to-all", b"[]", 5.0)
    finally:
        client.close()

    assert "timeout" in str(exc.value)


def test_request_no_responders_raises_bus_request_error(monkeypatch) -> None:
    conn = FakeNatsConnection(replies=[nats.errors.NoRespondersError()])
    _install(monkeypatch, conn)

    client = NatsBusClient()
    client.connect()
    try:
        with pytest.raises(BusRequestError) as exc:
            client.request("NOTIFICATION.send-to-all", b"[]", 5.0)
    finally:
        client.close()

    assert not isinstance(exc.value, BusTimeoutError)


def test_client_usable_after_failed_request(monkeypatch) -> None:
    conn = FakeNatsConnection(replies=[nats.errors.TimeoutError(), b"ack"])
    _install(monkeypatch, conn)

    client = NatsBusClient()
    client.connect()
    try:
        with pytest.raises(BusTimeoutError):
            client.request("S", b"1", 5.0)
        assert client.request("S", b"2", 5.0) == b"ack"
    finally:
        client.close()


def test_request_before_connect_raises_runtime_error() -> None:
    client = NatsBusClient()
    with pytest.raises(RuntimeError):
        client.request("S", b"{}", 5.0)


def test_close_is_idempotent_and_swallows_close_errors(monkeypatch) -> None:
    conn = FakeNatsConnection(close_error=RuntimeError("boom"))
    _install(monkeypatch, conn)

    client = NatsBusClient()
    client.connect()

    client.close()
    client.close()

    assert conn.close_calls == 1
    assert not client.is_connected


def _closed_port() -> int:
    """Return a local TCP port with nothing listening on it."""
    s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    s.bind(("127.0.0.1", 0))
    port = s.getsockname()[1]
    s.close()
    return port


def test_connect_to_refused_port_fails_fast(capsys) -> None:
    """
    A refused startup connect goes through the real nats-py connect loop and
    must give up instead of retrying the same server forever.
    """
    client = NatsBusClient(url=f"nats://127.0.0.1:{_closed_port()}", connect_timeout_s=1.0)

    start = time.monotonic()
    with pytest.raises(BusConnectionError):
        client.connect()
    elapsed = time.monotonic() - start

    assert elapsed < 5.0
    assert not client.is_connected
    assert client._loop is None
    assert "Connected to NATS" not in capsys.readouterr().out


class _StuckThread:
    """Thread stand-in whose join never finishes."""

    name = "nats-loop"

    def join(self, timeout=None) -> None:
        return None

    def is_alive(self) -> bool:
        return True


def test_stop_loop_reports_thread_that_does_not_stop(capsys) -> None:
    loop = asyncio.new_event_loop()
    client = NatsBusClient()
    client._loop = loop
    client._thread = _StuckThread()  # type: ignore[assignment]

    try:
        client.close()

        assert "did not stop" in capsys.readouterr().out
        assert not loop.is_closed()
        assert client._loop is None
    finally:
        loop.close()

from __future__ import annotations

import asyncio
import concurrent.futures
import threading
from dataclasses import dataclass
from typing import Any, Awaitable, Optional, TypeVar

import nats
import nats.errors

from notify_probe.transport.bus import (
    BusConnectionError,
    BusRequestError,
    BusTimeoutError,
)
from notify_probe.transport.client_config import (
    CONNECT_TIMEOUT_S,
    NATS_URL,
    REQUEST_TIMEOUT_S,
)

T = TypeVar("T")

# Extra time on top of connect_timeout_s before a startup connect is abandoned.
CONNECT_GRACE_S: float = 3.0


def _describe(e: BaseException) -> str:
    return str(e) or type(e).__name__


async def _quiet_error(e: Exception) -> None:
    # connect failures surface as BusConnectionError; request failures as BusRequestError
    return None


@dataclass
class NatsBusClient:
    """
    Blocking request/reply client for a NATS server.

    nats-py is asyncio-only. This adapter runs a private event loop on a
    dedicated daemon thread and blocks the caller on each call, so callers
    see plain methods that match :class:`~notify_probe.transport.bus.BusClient`.
    The loop keeps running between calls, so server PINGs are answered while
    the operator sits at the menu.

    Notes
    -----
    - This class is an infrastructure component. It knows nothing about
      notifications; it moves bytes on subjects.
    - Reconnects are disabled: a dropped connection surfaces as a failed
      request and the caller decides what to do.

    Parameters
    ----------
    url
        NATS server URL.
    connect_timeout_s
        Timeout (seconds) for the initial connect.

    Attributes
    ----------
    _loop
        Private event loop once connected; None when not connected.
    _thread
        Thread running ``_loop``.
    _nc
        Active nats-py connection once connected; None when not connected.
    """

    url: str = NATS_URL
    connect_timeout_s: float = CONNECT_TIMEOUT_S

    _loop: Optional[asyncio.AbstractEventLoop] = None
    _thread: Optional[threading.Thread] = None
    _nc: Optional[Any] = None

    def _start_loop(self) -> asyncio.AbstractEventLoop:
        loop = asyncio.new_event_loop()
        thread = threading.Thread(target=loop.run_forever, name="nats-loop", daemon=True)
        thread.start()
        self._loop = loop
        self._thread = thread
        return loop

    def _stop_loop(self) -> None:
        loop, thread = self._loop, self._thread
        self._loop = None
        self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join(timeout=2.0)
            if thread.is_alive():
                print(f"[PROBE][BUS] event loop thread {thread.name!r} did not stop; loop left open")
                return
        if not loop.is_running():
            loop.close()

    def _run(self, coro: Awaitable[T]) -> T:
        if self._loop is None:
            raise RuntimeError("Not connected")
        return asyncio.run_coroutine_threadsafe(coro, self._loop).result()  # type: ignore[arg-type]

    def connect(self) -> None:
        """
        Open the NATS connection.

        Raises
        ------
        BusConnectionError
            If the server cannot be reached or rejects the connection.
        """
        self._start_loop()
        try:
            self._nc = self._run(
                asyncio.wait_for(
                    nats.connect(
                        servers=[self.url],
                        connect_timeout=self.connect_timeout_s,
                        allow_reconnect=False,
                        # one attempt per server; 0 would mean "retry forever"
                        max_reconnect_attempts=1,
                        reconnect_time_wait=0,
                        error_cb=_quiet_error,
                    ),
                    timeout=self.connect_timeout_s + CONNECT_GRACE_S,
                )
            )
        except (nats.errors.Error, OSError, asyncio.TimeoutError, concurrent.futures.TimeoutError) as e:
            self._stop_loop()
            raise BusConnectionError(f"cannot connect to {self.url}: {_describe(e)}") from e

        print(f"[PROBE][BUS] Connected to NATS at {self.url}")

    def request(self, subject: str, data: bytes, timeout_s: float = REQUEST_TIMEOUT_S) -> bytes:
        """
        Send ``data`` on ``subject`` and wait for a single reply.

        Returns
        -------
        bytes
            Raw reply payload.

        Raises
        ------
        RuntimeError
            If called before :meth:`connect`.
        BusTimeoutError
            If no reply arrives within ``timeout_s``.
        BusRequestError
            For any other bus-level failure (e.g., no responders).
        """
        if self._nc is None:
            raise RuntimeError("Not connected")

        try:
            msg = self._run(self._nc.request(subject, data, timeout=timeout_s))
        except (nats.errors.TimeoutError, asyncio.TimeoutError, concurrent.futures.TimeoutError) as e:
            raise BusTimeoutError(_describe(e)) from e
        except (nats.errors.Error, OSError) as e:
            raise BusRequestError(_describe(e)) from e

        return bytes(msg.data)

    @property
    def is_connected(self) -> bool:
        return self._nc is not None

    def close(self) -> None:
        """
        Close the connection and stop the event loop thread if running.

        Notes
        -----
        Close errors are reported and swallowed because this is a shutdown path.
        """
        try:
            if self._nc is not None:
                self._run(self._nc.close())
        except Exception as e:
            print(f"[PROBE][BUS] error while closing: {e!r}")
        finally:
            self._nc = None
            self._stop_loop()

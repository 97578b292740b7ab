from __future__ import annotations

from typing import Protocol


class BusError(Exception):
    """Base class for message bus failures."""


class BusConnectionError(BusError):
    """The bus connection could not be established."""


class BusRequestError(BusError):
    """A request failed (no responders, connection dropped, ...)."""


class BusTimeoutError(BusRequestError):
    """No reply arrived before the request timeout."""


class BusClient(Protocol):
    """
    Protocol interface for a request/reply message bus.

    Any bus implementation can be used if it provides these three methods.
    This keeps the probe independent of the broker library and makes it easy
    to test with fakes.

    Methods
    -------
    connect()
        Open the connection. Raises BusConnectionError on failure.
    request(subject, data, timeout_s)
        Send ``data`` on ``subject`` and block for one reply.
        Raises BusRequestError (or BusTimeoutError) on failure.
    close()
        Release the connection. Must be safe to call more than once.
    """

    def connect(self) -> None:
        ...

    def request(self, subject: str, data: bytes, timeout_s: float) -> bytes:
        """
        Send a request and return the raw reply payload.

        Parameters
        ----------
        subject
            Subject the request is addressed to.
        data
            Request body.
        timeout_s
            Maximum time to wait for the reply, in seconds.
        """
        ...

    def close(self) -> None:
        ...

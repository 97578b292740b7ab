"""
Domain models and enums.

This module defines the payload types the probe sends to the notification
service:
- Notification type tags and their expected delivery priority
- Notification, one message to be delivered to end clients

Notifications are immutable (frozen) dataclasses so a batch stays stable
between construction, serialization and logging.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Tuple, Union


class NotificationType(str, Enum):
    """
    Known notification type tags.

    The service accepts other tags too; these are the ones the probe uses.

    Members
    -------
    INFO : str
        Informational message (lowest priority).
    WARNING : str
        Abnormal condition requiring attention.
    ERROR : str
        Failure that end clients should see first (highest priority).
    """

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def priority(self) -> int:
        """
        Expected server-side delivery rank (1 is delivered first).
        """
        return _PRIORITY[self]


_PRIORITY = {
    NotificationType.ERROR: 1,
    NotificationType.WARNING: 2,
    NotificationType.INFO: 3,
}


def _rfc3339(ts: datetime) -> str:
    """
    Convert a datetime to an RFC 3339 string with an explicit UTC offset.

    Naive datetimes are interpreted as local time.
    """
    if ts.tzinfo is None:
        ts = ts.astimezone()
    return ts.isoformat()


@dataclass(frozen=True)
class Notification:
    """
    One notification record as sent to the notification service.

    Parameters
    ----------
    type
        Type tag (e.g., "info", "warning", "error"). Any non-empty tag is
        accepted.
    message
        Human-readable message text.
    time
        Timestamp when the notification was created.
    clients
        Target client identifiers. Empty means broadcast to all clients.

    Raises
    ------
    ValueError
        If ``type`` is empty, ``time`` is not a datetime, or ``clients``
        contains non-string entries.
    """

    type: Union[NotificationType, str]
    message: str
    time: datetime
    clients: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.type, str) or not self.tag:
            raise ValueError("Notification type must be a non-empty string")
        if not isinstance(self.message, str):
            raise ValueError("Notification message must be a string")
        if not isinstance(self.time, datetime):
            raise ValueError(f"Notification time must be a datetime, got {self.time!r}")
        if isinstance(self.clients, str):
            raise ValueError("Notification clients must be a sequence of ids, not a string")
        clients = tuple(self.clients)
        for c in clients:
            if not isinstance(c, str):
                raise ValueError(f"Client id must be a string, got {c!r}")
        object.__setattr__(self, "clients", clients)

    @property
    def tag(self) -> str:
        """Wire value of the type tag."""
        if isinstance(self.type, NotificationType):
            return self.type.value
        return str(self.type)

    @property
    def is_broadcast(self) -> bool:
        return not self.clients

    def to_wire(self) -> Dict[str, Any]:
        """
        Return the JSON-ready mapping for this notification.

        ``clients`` is omitted (not an empty list) for broadcasts.
        """
        out: Dict[str, Any] = {
            "type": self.tag,
            "message": self.message,
            "time": _rfc3339(self.time),
        }
        if self.clients:
            out["clients"] = list(self.clients)
        return out

"""
Unit tests for notify_probe.domain.models.

These tests validate the Notification payload contract:
- wire form omits clients for broadcasts and keeps them in order otherwise
- timestamps are written as RFC 3339 strings with an offset
- invalid records are rejected at construction
- NotificationType priorities

No I/O is involved.
"""

from __future__ import annotations

from dataclasses import FrozenInstanceError
from datetime import datetime, timedelta, timezone

import pytest

from notify_probe.domain.models import Notification, NotificationType

TS = datetime(2026, 1, 1, 10, 0, 0, tzinfo=timezone.utc)


def test_broadcast_wire_form_omits_clients() -> None:
    """
    A notification without clients must not carry a clients key at all.
    """
    n = Notification(type=NotificationType.INFO, message="hi", time=TS)
    wire = n.to_wire()

    assert wire == {"type": "info", "message": "hi", "time": "2026-01-01T10:00:00+00:00"}
    assert "clients" not in wire
    assert n.is_broadcast


def test_targeted_wire_form_keeps_client_order() -> None:
    n = Notification(type=NotificationType.WARNING, message="m", time=TS, clients=["2", "1"])
    wire = n.to_wire()

    assert wire["clients"] == ["2", "1"]
    assert n.clients == ("2", "1")
    assert not n.is_broadcast


def test_time_keeps_explicit_offset() -> None:
    ts = datetime(2026, 1, 1, 10, 0, 0, 123456, tzinfo=timezone(timedelta(hours=2)))
    n = Notification(type="info", message="m", time=ts)

    assert n.to_wire()["time"] == "2026-01-01T10:00:00.123456+02:00"


def test_naive_time_gets_local_offset() -> None:
    """
    Naive datetimes are interpreted as local time and written with an offset.
    """
    n = Notification(type="info", message="m", time=datetime(2026, 1, 1, 10, 0, 0))
    parsed = datetime.fromisoformat(n.to_wire()["time"])

    assert parsed.tzinfo is not None
    assert parsed.replace(tzinfo=None) == datetime(2026, 1, 1, 10, 0, 0)


def test_custom_type_tag_is_accepted() -> None:
    n = Notification(type="maintenance", message="m", time=TS)
    assert n.tag == "maintenance"
    assert n.to_wire()["type"] == "maintenance"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"type": "", "message": "m", "time": TS},
        {"type": None, "message": "m", "time": TS},
        {"type": "info", "message": None, "time": TS},
        {"type": "info", "message": "m", "time": "2026-01-01T10:00:00"},
        {"type": "info", "message": "m", "time": TS, "clients": [1, 2]},
        {"type": "info", "message": "m", "time": TS, "clients": "12"},
    ],
)
def test_invalid_notification_raises_value_error(kwargs) -> None:
    with pytest.raises(ValueError):
        Notification(**kwargs)


def test_notification_is_frozen() -> None:
    n = Notification(type="info", message="m", time=TS)
    with pytest.raises(FrozenInstanceError):
        n.message = "changed"  # type: ignore[misc]


def test_priority_ranks_error_first() -> None:
    assert NotificationType.ERROR.priority == 1
    assert NotificationType.WARNING.priority == 2
    assert NotificationType.INFO.priority == 3

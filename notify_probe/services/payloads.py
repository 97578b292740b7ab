from __future__ import annotations

from datetime import datetime
from typing import List, Sequence, Tuple

from notify_probe.domain.models import Notification, NotificationType

# Client ids addressed by the targeted test.
TARGETED_CLIENTS: Tuple[str, ...] = ("1", "2")


def build_broadcast(now: datetime) -> List[Notification]:
    """
    Build the broadcast test batch: one info notification with no targets.
    """
    return [
        Notification(
            type=NotificationType.INFO,
            message="Hello World from Python client!",
            time=now,
        )
    ]


def build_targeted(now: datetime, clients: Sequence[str] = TARGETED_CLIENTS) -> List[Notification]:
    """
    Build the targeted test batch: one warning notification for ``clients``.

    Raises
    ------
    ValueError
        If ``clients`` is empty (that would turn the batch into a broadcast).
    """
    if not clients:
        raise ValueError("Targeted notification needs at least one client id")

    return [
        Notification(
            type=NotificationType.WARNING,
            message="Targeted message from Python client!",
            time=now,
            clients=tuple(clients),
        )
    ]


def build_priority_batch(now: datetime) -> List[Notification]:
    """
    Build the priority test batch.

    The batch is deliberately out of priority order (info, error, warning) so
    the service's reordering is visible on the receiving side.
    """
    return [
        Notification(
            type=NotificationType.INFO,
            message="Info message (priority 3)",
            time=now,
        ),
        Notification(
            type=NotificationType.ERROR,
            message="Error message (priority 1)",
            time=now,
        ),
        Notification(
            type=NotificationType.WARNING,
            message="Warning message (priority 2)",
            time=now,
        ),
    ]


def _rank(n: Notification) -> int:
    try:
        return NotificationType(n.tag).priority
    except ValueError:
        # unknown tags go last
        return len(NotificationType) + 1


def expected_delivery_order(batch: Sequence[Notification]) -> List[Notification]:
    """
    Return ``batch`` in the order the service is expected to deliver it.

    This mirrors the service's documented priority rule (error, then warning,
    then info; stable within a type). The probe never verifies it.
    """
    return sorted(batch, key=_rank)

from __future__ import annotations

import json
from typing import Sequence

from notify_probe.domain.models import Notification

# Body of a list request: an empty JSON object.
LIST_REQUEST_BODY = b"{}"


def encode_notifications(notifications: Sequence[Notification]) -> bytes:
    """
    Serialize a request envelope (JSON array of notifications).

    Notifications are written in the given order, using compact separators.

    Parameters
    ----------
    notifications
        One or more notifications.

    Returns
    -------
    bytes
        UTF-8 encoded JSON array.

    Raises
    ------
    ValueError
        If the envelope is empty or a notification cannot be serialized.
    """
    if not notifications:
        raise ValueError("Request envelope must contain at least one notification")

    try:
        text = json.dumps(
            [n.to_wire() for n in notifications],
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError, OverflowError) as e:
        raise ValueError(f"json: {e}") from e

    return text.encode("utf-8")


def decode_reply(data: bytes) -> str:
    """
    Decode a reply payload for display.

    The service decides the reply format, so bytes are shown verbatim;
    undecodable bytes are replaced rather than rejected.
    """
    return data.decode("utf-8", errors="replace")

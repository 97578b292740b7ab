from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

from notify_probe.domain.models import Notification
from notify_probe.services.payloads import (
    TARGETED_CLIENTS,
    build_broadcast,
    build_priority_batch,
    build_targeted,
    expected_delivery_order,
)
from notify_probe.transport.bus import BusClient, BusError
from notify_probe.transport.client_config import (
    REQUEST_TIMEOUT_S,
    SUBJECT_LIST,
    SUBJECT_SEND_TO_ALL,
    SUBJECT_SEND_TO_CLIENTS,
)
from notify_probe.transport.codec import LIST_REQUEST_BODY, decode_reply, encode_notifications

_ORDINALS = ("1st", "2nd", "3rd")


def _ordinal(i: int) -> str:
    return _ORDINALS[i] if i < len(_ORDINALS) else f"{i + 1}th"


@dataclass
class NotificationProbe:
    """
    Exercise the notification service through its request/reply subjects.

    Responsibilities
    ----------------
    - Build the test batches (broadcast, targeted, priority) and serialize them.
    - Send exactly one request per operation and print the raw reply.
    - Report serialization and bus failures without raising, so the menu loop
      keeps running.

    Notes
    -----
    The probe keeps no state between operations. Expectations printed in the
    hints (e.g., priority delivery order) describe the service's contract and
    are not verified here.

    Parameters
    ----------
    bus
        Connected bus client used for requests.
    now
        Optional clock used to timestamp notifications. If None, uses local
        current time.
    out
        Line printer for operator output.
    """

    bus: BusClient
    now: Optional[Callable[[], datetime]] = None
    out: Callable[[str], None] = print

    def _timestamp(self) -> datetime:
        if self.now is not None:
            return self.now()
        return datetime.now().astimezone()

    def _request(self, subject: str, data: bytes) -> Optional[bytes]:
        try:
            resp = self.bus.request(subject, data, REQUEST_TIMEOUT_S)
        except BusError as e:
            self.out(f"❌ Failed to send request: {e}")
            return None

        self.out(f"✅ Success! Response: {decode_reply(resp)}")
        return resp

    def _send_batch(
        self,
        subject: str,
        build: Callable[[datetime], List[Notification]],
        sending_line: str,
    ) -> Optional[bytes]:
        try:
            data = encode_notifications(build(self._timestamp()))
        except ValueError as e:
            self.out(f"❌ Failed to marshal notifications: {e}")
            return None

        self.out(sending_line)
        return self._request(subject, data)

    def broadcast(self) -> bool:
        """
        Send one info notification to every connected client.

        Returns
        -------
        bool
            True if the service replied.
        """
        self.out("\n📡 Testing Broadcast Notification...")
        resp = self._send_batch(
            SUBJECT_SEND_TO_ALL,
            build_broadcast,
            "📤 Sending broadcast notification...",
        )
        if resp is None:
            return False
        self.out("💡 Check your WebSocket client to see the message!")
        return True

    def targeted(self) -> bool:
        """
        Send one warning notification to clients "1" and "2" only.
        """
        clients = list(TARGETED_CLIENTS)
        ids = " and ".join(clients)
        self.out("\n🎯 Testing Targeted Notification...")
        resp = self._send_batch(
            SUBJECT_SEND_TO_CLIENTS,
            lambda ts: build_targeted(ts, clients),
            f"📤 Sending targeted notification to clients {ids}...",
        )
        if resp is None:
            return False
        self.out(f"💡 Only WebSocket clients with ID {' or '.join(clients)} should receive this message!")
        return True

    def priority_test(self) -> bool:
        """
        Send an info, error, warning batch (in that order) to all clients.

        After a reply, prints the delivery order the service is expected to
        apply. The order is documentation only.
        """
        self.out("\n⚡ Testing Priority Ordering...")
        sent: List[Notification] = []

        def _build(ts: datetime) -> List[Notification]:
            sent.extend(build_priority_batch(ts))
            return sent

        resp = self._send_batch(
            SUBJECT_SEND_TO_ALL,
            _build,
            "📤 Sending multiple notifications...",
        )
        if resp is None:
            return False

        order = expected_delivery_order(sent)
        self.out("💡 WebSocket clients should receive messages in priority order:")
        for i, n in enumerate(order):
            if i == 0:
                rank = "highest priority"
            elif i == len(order) - 1:
                rank = "lowest priority"
            else:
                rank = "medium priority"
            self.out(f"   {_ordinal(i)}: {n.tag.capitalize()} message ({rank})")
        return True

    def list_notifications(self) -> bool:
        """
        Ask the service for its stored notifications and print the reply.
        """
        self.out("\n📋 Testing Notification List...")
        self.out("📤 Requesting stored notifications...")
        resp = self._request(SUBJECT_LIST, LIST_REQUEST_BODY)
        if resp is None:
            return False
        self.out("💡 This shows all notifications stored in the database!")
        return True

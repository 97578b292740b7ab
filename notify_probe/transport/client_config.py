from __future__ import annotations

"""
Default bus settings for the probe transport layer.

These values are used when no config file overrides them, and as defaults by
the NATS client when constructed without explicit arguments.

Attributes
----------
NATS_URL
    Default NATS server URL.
CONNECT_TIMEOUT_S
    Timeout (seconds) for establishing the bus connection.
REQUEST_TIMEOUT_S
    Timeout (seconds) for one request/reply call.
SUBJECT_SEND_TO_ALL
    Subject for broadcast notifications.
SUBJECT_SEND_TO_CLIENTS
    Subject for notifications targeted at specific clients.
SUBJECT_LIST
    Subject for listing stored notifications.
"""

NATS_URL: str = "nats://127.0.0.1:4222"
CONNECT_TIMEOUT_S: float = 2.0
REQUEST_TIMEOUT_S: float = 5.0

SUBJECT_SEND_TO_ALL: str = "NOTIFICATION.send-to-all"
SUBJECT_SEND_TO_CLIENTS: str = "NOTIFICATION.send-to-clients"
SUBJECT_LIST: str = "NOTIFICATION.list"

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Optional

from notify_probe.core.config.yaml_config import ProbeConfig, load_probe_config
from notify_probe.services.probe import NotificationProbe
from notify_probe.transport.nats_client import NatsBusClient


@dataclass(frozen=True)
class ProbeWiring:
    """Everything the menu needs to run the probe."""
    config: ProbeConfig
    bus: NatsBusClient
    probe: NotificationProbe


def build_bus(cfg: ProbeConfig) -> NatsBusClient:
    return NatsBusClient(
        url=cfg.bus.url,
        connect_timeout_s=cfg.bus.connect_timeout_s,
    )


def build_probe_system(
    config_path: Optional[str] = None,
    out: Callable[[str], None] = print,
) -> ProbeWiring:
    """
    Load configuration and build an unconnected bus plus the probe using it.

    The caller owns the connection lifecycle (connect / close).
    """
    cfg = load_probe_config(config_path)

    bus = build_bus(cfg)

    probe = NotificationProbe(
        bus=bus,
        out=out,
    )

    return ProbeWiring(config=cfg, bus=bus, probe=probe)

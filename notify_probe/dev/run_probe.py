from __future__ import annotations

import sys
from typing import Callable, List, Optional

from notify_probe.bootstrap import build_probe_system
from notify_probe.cli.menu import run_menu
from notify_probe.transport.bus import BusConnectionError


def _config_path(argv: List[str]) -> Optional[str]:
    if "--config" in argv:
        i = argv.index("--config")
        if i + 1 < len(argv):
            return argv[i + 1]
    return None


def run(
    argv: List[str],
    read_line: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> int:
    """
    Connect to the bus, run the menu, and always close the connection.

    Returns
    -------
    int
        0 when the operator exits, 1 when the bus connection fails.
    """
    wiring = build_probe_system(config_path=_config_path(argv), out=out)

    try:
        try:
            wiring.bus.connect()
        except BusConnectionError as e:
            print(f"[PROBE] Failed to connect to NATS: {e}")
            return 1

        return run_menu(wiring.probe, read_line=read_line, out=out)
    finally:
        wiring.bus.close()


def main() -> None:
    """
    Start the interactive notification probe.

    Notes
    -----
    - Loads `config.yaml` if one is found, otherwise uses built-in defaults.
    - Optional CLI usage:
        python -m notify_probe.dev.run_probe --config path/to/config.yaml
    """
    sys.exit(run(sys.argv[1:]))


if __name__ == "__main__":
    main()

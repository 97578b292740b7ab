from __future__ import annotations

import re
from typing import Callable, Dict, List, Optional

from notify_probe.services.probe import NotificationProbe

EXIT_CHOICE = 5

MENU_LINES: List[str] = [
    "\n========================================",
    "🔔 NATS Notification Test Client",
    "========================================",
    "Connected to NATS server ✅",
    "\nChoose test:",
    "1. Broadcast notification",
    "2. Targeted notification",
    "3. Multiple notifications (priority test)",
    "4. List notifications",
    "5. Exit",
]

PROMPT = "\nEnter choice (1-5): "
INVALID_INPUT = "❌ Invalid input. Please enter a number between 1-5."
INVALID_CHOICE = "❌ Invalid choice. Please enter a number between 1-5."
FAREWELL = "👋 Goodbye!"

# ASCII decimal integer with optional sign, as a C-style %d scan reads it.
_CHOICE_RE = re.compile(r"[+-]?[0-9]+")


def parse_choice(line: str) -> Optional[int]:
    """
    Parse one menu line into an integer choice.

    The line must hold exactly one integer token; anything else (empty line,
    extra tokens, non-numeric text) yields None. Only ASCII digits count, so
    forms like "0_1" or fullwidth digits are rejected. Range is not checked here.
    """
    tokens = line.split()
    if len(tokens) != 1 or not _CHOICE_RE.fullmatch(tokens[0]):
        return None
    return int(tokens[0])


def run_menu(
    probe: NotificationProbe,
    read_line: Callable[[str], str] = input,
    out: Callable[[str], None] = print,
) -> int:
    """
    Run the interactive menu until the operator exits.

    Parameters
    ----------
    probe
        Probe whose operations back choices 1-4.
    read_line
        Reads one line after showing a prompt (``input``-compatible).
        EOFError is treated as Exit.
    out
        Line printer for menu output.

    Returns
    -------
    int
        Process exit code (always 0).
    """
    actions: Dict[int, Callable[[], bool]] = {
        1: probe.broadcast,
        2: probe.targeted,
        3: probe.priority_test,
        4: probe.list_notifications,
    }

    while True:
        for line in MENU_LINES:
            out(line)

        try:
            raw = read_line(PROMPT)
        except EOFError:
            out(FAREWELL)
            return 0

        choice = parse_choice(raw)
        if choice is None:
            # the rest of the line was consumed with it
            out(INVALID_INPUT)
            continue

        if choice == EXIT_CHOICE:
            out(FAREWELL)
            return 0

        action = actions.get(choice)
        if action is None:
            out(INVALID_CHOICE)
        else:
            action()

        out("\nPress Enter to continue...")
        try:
            read_line("")
        except EOFError:
            out(FAREWELL)
            return 0

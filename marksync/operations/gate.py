"""Decide whether the remote tree needs to be rebuilt."""

from enum import Enum
from typing import Optional


class TriggerKind(str, Enum):
    INSTALL = "install"
    STARTUP = "startup"
    MANUAL = "manual"
    SCHEDULED = "scheduled"


# Passive triggers skip the rebuild when nothing changed upstream
PASSIVE_TRIGGERS = (TriggerKind.STARTUP, TriggerKind.SCHEDULED)


def should_rebuild(trigger: TriggerKind, stored_marker: Optional[str],
                   fetched_marker: str) -> bool:
    """Return False only for a passive trigger with an unchanged marker."""
    if trigger in PASSIVE_TRIGGERS and stored_marker == fetched_marker:
        return False
    return True

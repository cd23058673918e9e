# backend/soundcomm/services/instruments.py

from __future__ import annotations

from typing import Any, Dict, NamedTuple, Optional, Tuple

INITIAL_LEVEL = 5
MIN_LEVEL = 0
MAX_LEVEL = 10

UNKNOWN_LABEL = "Unknown"


class Instrument(NamedTuple):
    key: str
    label: str


# ============================================================================
# INSTRUMENT REGISTRY
# ============================================================================

# Order matters: snapshots list levels in this order.
INSTRUMENTS: Tuple[Instrument, ...] = (
    Instrument("keyboard", "Keyboard"),
    Instrument("organ", "Organ"),
    Instrument("guitar", "Guitar"),
    Instrument("drum", "Drums"),
    Instrument("conga", "Conga Drum"),
    Instrument("monitor", "Monitor Speaker"),
    Instrument("songleader", "Song Leader"),
)

_LABELS: Dict[str, str] = {instrument.key: instrument.label for instrument in INSTRUMENTS}


def find_label(key: Any) -> Optional[str]:
    """Return the display label for *key*, or None when the key is not registered."""
    if not isinstance(key, str):
        return None
    return _LABELS.get(key)


def label_for(key: Any) -> str:
    """Return the display label for *key*, falling back to "Unknown"."""
    return find_label(key) or UNKNOWN_LABEL


def instrument_keys() -> Tuple[str, ...]:
    return tuple(instrument.key for instrument in INSTRUMENTS)


def default_levels() -> Dict[str, int]:
    """Fresh level mapping with every instrument at the initial level."""
    return {instrument.key: INITIAL_LEVEL for instrument in INSTRUMENTS}


def clamp(value: int) -> int:
    return max(MIN_LEVEL, min(MAX_LEVEL, value))

"""engine.persistence

Save payloads: the whole Ledger as UTF-8 JSON.

deserialize() raises SaveError on anything unreadable; load_save() is the
boundary the UI calls and never raises.
"""

from __future__ import annotations

import json
from typing import List, Tuple

from core.state import Ledger, LogEntry, ledger_from_mapping, ledger_to_dict

from .config import EngineConfig
from .logging import append_lines

SAVE_VERSION = 1


class SaveError(ValueError):
    """Save payload could not be turned back into a Ledger."""


def serialize(ledger: Ledger) -> bytes:
    payload = {"version": SAVE_VERSION, "state": ledger_to_dict(ledger)}
    return json.dumps(payload, ensure_ascii=False, sort_keys=True).encode("utf-8")


def deserialize(raw: bytes) -> Ledger:
    try:
        data = json.loads(raw.decode("utf-8") if isinstance(raw, (bytes, bytearray)) else str(raw))
    except Exception as e:
        raise SaveError(f"save is not valid JSON: {type(e).__name__}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("state"), dict):
        raise SaveError("save has no state object")
    try:
        return ledger_from_mapping(data["state"])
    except Exception as e:
        raise SaveError(f"save state is malformed: {type(e).__name__}: {e}") from e


def load_save(current: Ledger, raw: bytes, config: EngineConfig = EngineConfig()) -> Tuple[Ledger, List[LogEntry]]:
    """Replace `current` with the saved Ledger, or keep it and log the failure."""
    try:
        loaded = deserialize(raw)
    except SaveError:
        return append_lines(current, [("Failed to load save.", "danger")], cap=config.log_cap)
    return append_lines(loaded, [("Game loaded.", "system")], cap=config.log_cap)

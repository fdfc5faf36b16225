"""engine.logging

Game log sink and run export helpers.

- append_lines() commits (text, tag) lines produced by the rules into the
  Ledger's log: ids keep increasing, only the newest `cap` entries are kept.
- A run export is JSON-serializable so it can be exported/imported later.
"""

from __future__ import annotations

import json
from dataclasses import asdict, replace
from typing import Any, Dict, Iterable, List, Tuple

from core.state import LOG_TAGS, Ledger, LogEntry, LogLine, ledger_to_dict

DEFAULT_LOG_CAP = 600


def next_log_id(ledger: Ledger) -> int:
    return ledger.logs[-1].id + 1 if ledger.logs else 1


def append_lines(ledger: Ledger, lines: Iterable[LogLine], *, cap: int = DEFAULT_LOG_CAP) -> Tuple[Ledger, List[LogEntry]]:
    """Return (ledger with lines appended, the new entries)."""
    nid = next_log_id(ledger)
    added: List[LogEntry] = []
    for text, tag in lines:
        if tag not in LOG_TAGS:
            raise ValueError(f"Unknown log tag: {tag}")
        added.append(LogEntry(text=str(text), tag=str(tag), id=nid))
        nid += 1
    if not added:
        return ledger, added
    logs = (*ledger.logs, *added)[-int(cap):]
    return replace(ledger, logs=logs), added


def make_run_export(*, seed: int, config: Dict[str, Any], initial_state: Ledger, command_logs: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "version": 1,
        "seed": int(seed),
        "config": dict(config),
        "initial_state": ledger_to_dict(initial_state),
        "command_logs": list(command_logs),
    }


def command_log(command: str, args: Dict[str, Any], before: Ledger, after: Ledger, entries: List[LogEntry]) -> Dict[str, Any]:
    """One run-export record: what was asked, what changed, what was said."""
    tracked = ("day", "money", "people", "happiness", "strength", "wfight", "lfight")
    return {
        "command": str(command),
        "args": dict(args),
        "day": int(before.day),
        "before": {k: getattr(before, k) for k in tracked},
        "after": {k: getattr(after, k) for k in tracked},
        "lines": [asdict(e) for e in entries],
    }


def dumps_run_export(obj: Dict[str, Any]) -> str:
    return json.dumps(obj, ensure_ascii=False, indent=2, sort_keys=True)

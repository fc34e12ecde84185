"""
modules/observability/logger.py
-------------------------------
Generation audit trail: append-only JSON lines, one file per request.

Usage:
    from modules.observability.logger import AuditLogger

    audit = AuditLogger("logs/audit")
    audit.log(request_id, "prompt", {"kind": "trip_plan", "prompt": text})

Records land in  <logs_dir>/<request_id>.jsonl. Each generation request
writes a "prompt" record, a "raw_response" record when the model answered,
and exactly one "outcome" record (ok / error class / anomalies).

The trail holds prompts and model text only. Passwords, tokens and
password hashes are never passed to it.
"""

from __future__ import annotations

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import IO, Optional

import config


class AuditLogger:
    """Thread-safe, append-only JSONL writer."""

    def __init__(self, logs_dir: Path | str) -> None:
        self._logs_dir = Path(logs_dir)
        self._lock = threading.Lock()
        self._handles: dict[str, IO[str]] = {}  # request_id -> file handle

    @property
    def logs_dir(self) -> Path:
        return self._logs_dir

    # ── public API ────────────────────────────────────────────────────────

    def log(self, request_id: str, event_type: str, payload: dict) -> None:
        """Append one record to ``<request_id>.jsonl``."""
        record = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "request_id": request_id,
            "event_type": event_type,
            "payload": payload,
        }
        line = json.dumps(record, default=str, ensure_ascii=False) + "\n"

        with self._lock:
            fh = self._handles.get(request_id)
            if fh is None:
                fh = self._open(request_id)
            fh.write(line)
            fh.flush()

    def close(self, request_id: Optional[str] = None) -> None:
        """Close one or all open file handles."""
        with self._lock:
            if request_id:
                fh = self._handles.pop(request_id, None)
                if fh:
                    fh.close()
            else:
                for fh in self._handles.values():
                    fh.close()
                self._handles.clear()

    def read(self, request_id: str) -> list[dict]:
        """Return the records written for ``request_id`` (oldest first)."""
        path = self._logs_dir / f"{request_id}.jsonl"
        if not path.exists():
            return []
        with open(path, "r", encoding="utf-8") as fh:
            return [json.loads(line) for line in fh if line.strip()]

    # ── internals ─────────────────────────────────────────────────────────

    def _open(self, request_id: str) -> IO[str]:
        os.makedirs(self._logs_dir, exist_ok=True)
        path = self._logs_dir / f"{request_id}.jsonl"
        fh = open(path, "a", encoding="utf-8")  # noqa: SIM115
        self._handles[request_id] = fh
        return fh


def get_audit_logger() -> Optional[AuditLogger]:
    """AuditLogger for AUDIT_LOG_DIR, or None when auditing is off."""
    if not config.AUDIT_LOG_DIR:
        return None
    return AuditLogger(config.AUDIT_LOG_DIR)

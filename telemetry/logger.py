from __future__ import annotations

import json
import os
import threading
import time
from typing import Any, Dict, List, Optional, TextIO


class TelemetryLogger:
    """Structured JSONL logger for sea drone telemetry.

    Thread-safe, append-only logging of tick records, one JSON object per
    line. Each record gets a wall-clock `wall_time` stamp unless it already
    carries one.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        os.makedirs(os.path.dirname(self.path) or ".", exist_ok=True)
        self._lock = threading.Lock()
        self._fp: Optional[TextIO] = open(self.path, "a", encoding="utf-8")

    def log_step(self, record: Dict[str, Any]) -> None:
        """Append a single telemetry record to the JSONL file."""
        if "wall_time" not in record:
            record = dict(record, wall_time=time.time())
        line = json.dumps(record, separators=(",", ":"))
        with self._lock:
            if self._fp is None:
                return
            self._fp.write(line + "\n")
            self._fp.flush()

    def close(self) -> None:
        with self._lock:
            if self._fp is not None:
                self._fp.close()
                self._fp = None

    def __enter__(self) -> "TelemetryLogger":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()


def read_records(path: str) -> List[Dict[str, Any]]:
    """Load all well-formed records from a JSONL telemetry file."""
    records: List[Dict[str, Any]] = []
    if not os.path.exists(path):
        return records
    with open(path, "r", encoding="utf-8") as f:
        for line in f:
            line = line.strip()
            if not line:
                continue
            try:
                records.append(json.loads(line))
            except json.JSONDecodeError:
                continue
    return records

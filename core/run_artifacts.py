"""Run artifact helpers: analysis output and operational run reports."""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any


def write_json_document(
    payload: dict[str, Any],
    path: str,
    indent: int = 2,
    sort_keys: bool = False,
) -> str:
    """Write a JSON document, creating parent directories. Returns the path.

    Key order is preserved unless ``sort_keys`` is set, so repeated runs over
    the same input produce byte-identical files.
    """
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, indent=indent, sort_keys=sort_keys, ensure_ascii=False)
        f.write("\n")
    return path


def write_run_report(
    report: dict[str, Any],
    run_id: str,
    output_dir: str = "output/run_reports",
) -> str:
    """Write a JSON run report named after ``run_id`` and return its path."""
    payload = dict(report)
    payload.setdefault("run_id", run_id)
    payload.setdefault("timestamp_utc", datetime.now(timezone.utc).isoformat())
    return write_json_document(
        payload, os.path.join(output_dir, f"{run_id}.json"), sort_keys=True
    )

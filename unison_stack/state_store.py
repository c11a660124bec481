from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

import yaml

from .pipeline import RunState

logger = logging.getLogger(__name__)


def _detect_format(path: Path) -> str:
    ext = path.suffix.lower().lstrip(".")
    if ext in {"json", "yaml", "yml"}:
        return ext
    # Default to JSON for unknown extensions.
    return "json"


def report_from_state(state: RunState, *, ok: bool) -> Dict[str, Any]:
    report = asdict(state)
    report["ok"] = ok
    report["finished_at"] = datetime.now(timezone.utc).isoformat(timespec="seconds")
    return report


def save_report(path: str, report: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)

    if _detect_format(p) in {"yaml", "yml"}:
        p.write_text(yaml.safe_dump(report, sort_keys=False) + "\n", encoding="utf-8")
    else:
        p.write_text(json.dumps(report, indent=2, sort_keys=True) + "\n", encoding="utf-8")
    logger.info("Run report written to %s", str(p))

from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from ..errors import ProvisionError

logger = logging.getLogger(__name__)

MEMINFO_PATH = Path("/proc/meminfo")
DEVICE_MODEL_PATH = Path("/proc/device-tree/model")


def _read_text(path: Path) -> Optional[str]:
    try:
        txt = path.read_text(encoding="utf-8", errors="ignore").replace("\0", "").strip()
        return txt or None
    except OSError:
        return None


def total_ram_mib(meminfo: Path = MEMINFO_PATH) -> int:
    """Return MemTotal from /proc/meminfo in MiB (truncated)."""

    txt = _read_text(meminfo) or ""
    for line in txt.splitlines():
        if line.startswith("MemTotal:"):
            parts = line.split()
            return int(parts[1]) // 1024
    raise ProvisionError(f"MemTotal not found in {meminfo}")


def device_model(path: Path = DEVICE_MODEL_PATH) -> Optional[str]:
    """Board model string on device-tree systems (e.g. Raspberry Pi), else None."""
    return _read_text(path)

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FstabEntry:
    spec: str
    mountpoint: str
    fstype: str
    options: str = "defaults"
    dump: int = 0
    passno: int = 0

    def render(self) -> str:
        return f"{self.spec} {self.mountpoint} {self.fstype} {self.options} {self.dump} {self.passno}"


def swap_entry(swap_file: str) -> FstabEntry:
    return FstabEntry(spec=swap_file, mountpoint="none", fstype="swap", options="sw")


def has_entry(fstab_path: str, entry: FstabEntry) -> bool:
    p = Path(fstab_path)
    if not p.exists():
        return False
    line = entry.render()
    return any(l == line for l in p.read_text(encoding="utf-8").splitlines())


def ensure_entry(fstab_path: str, entry: FstabEntry, *, dry_run: bool = False) -> bool:
    """Append entry unless an identical line is already present.

    Returns True if the file was (or, in dry-run, would be) modified.
    """

    if has_entry(fstab_path, entry):
        logger.info("fstab already contains: %s", entry.render())
        return False

    p = Path(fstab_path)
    if dry_run:
        logger.info("Would append to %s: %s", str(p), entry.render())
        return True

    existing = p.read_text(encoding="utf-8") if p.exists() else ""
    prefix = "" if (not existing or existing.endswith("\n")) else "\n"
    with p.open("a", encoding="utf-8") as f:
        f.write(f"{prefix}{entry.render()}\n")
    logger.info("Appended to %s: %s", str(p), entry.render())
    return True

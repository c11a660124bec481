from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List

from ..errors import CommandError
from .command import run_cmd

logger = logging.getLogger(__name__)

PROC_SWAPS = Path("/proc/swaps")


def active_swaps(proc_swaps: Path = PROC_SWAPS) -> List[str]:
    """Return the device/file names of active swap areas."""

    try:
        lines = proc_swaps.read_text(encoding="utf-8").splitlines()
    except OSError:
        return []
    # First line is the column header.
    return [l.split()[0] for l in lines[1:] if l.strip()]


def is_swap_active(swap_file: str, proc_swaps: Path = PROC_SWAPS) -> bool:
    return swap_file in active_swaps(proc_swaps)


def remove_stale_swapfile(swap_file: str, *, dry_run: bool = False) -> None:
    if not Path(swap_file).exists():
        return
    logger.info("Removing stale swap file %s", swap_file)
    run_cmd(["swapoff", swap_file], check=False, dry_run=dry_run)
    if dry_run:
        logger.info("Would remove %s", swap_file)
    else:
        Path(swap_file).unlink()


def allocate_swapfile(swap_file: str, size_mib: int, *, dry_run: bool = False) -> str:
    """Allocate the backing file; returns the strategy used ("fallocate" or "dd").

    fallocate is not supported on every filesystem, so a zero-fill is the fallback.
    """

    try:
        run_cmd(["fallocate", "-l", f"{size_mib}MiB", swap_file], dry_run=dry_run)
        return "fallocate"
    except (CommandError, OSError) as e:
        logger.warning("fallocate failed (%s); falling back to dd", e)

    if Path(swap_file).exists() and not dry_run:
        Path(swap_file).unlink()
    run_cmd(
        ["dd", "if=/dev/zero", f"of={swap_file}", "bs=1M", f"count={size_mib}"],
        dry_run=dry_run,
    )
    return "dd"


def create_swapfile(swap_file: str, size_mib: int, *, dry_run: bool = False) -> str:
    remove_stale_swapfile(swap_file, dry_run=dry_run)
    strategy = allocate_swapfile(swap_file, size_mib, dry_run=dry_run)

    if dry_run:
        logger.info("Would chmod 0600 %s", swap_file)
    else:
        os.chmod(swap_file, 0o600)

    run_cmd(["mkswap", swap_file], dry_run=dry_run)
    run_cmd(["swapon", swap_file], dry_run=dry_run)
    return strategy

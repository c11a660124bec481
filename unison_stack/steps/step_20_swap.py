from __future__ import annotations

import logging

from ..config import RunConfig
from ..lib.fstab import ensure_entry, swap_entry
from ..lib.hwinfo import total_ram_mib
from ..lib.swap import create_swapfile, is_swap_active
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)


class ProvisionSwapStep:
    step_id = "20_swap"
    policy = ErrorPolicy.FATAL

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        ram = total_ram_mib()
        state.ram_mib = ram
        logger.info("Detected RAM   : %s MB", ram)

        if ram >= config.min_ram_mb:
            logger.info("RAM >= %s MB - swap not required.", config.min_ram_mb)
            return StepOutcome.ALREADY_SATISFIED

        if is_swap_active(config.swap_file):
            logger.info("Swap file already active: %s", config.swap_file)
            return StepOutcome.ALREADY_SATISFIED

        logger.info(
            "Creating %s swap at %s (RAM < %s MB)", config.swap_size, config.swap_file, config.min_ram_mb
        )
        strategy = create_swapfile(config.swap_file, config.swap_size_mib, dry_run=config.dry_run)
        ensure_entry(config.fstab_path, swap_entry(config.swap_file), dry_run=config.dry_run)
        logger.info("Swap enabled (allocated with %s).", strategy)
        return StepOutcome.CREATED

from __future__ import annotations

import logging

from ..config import RunConfig
from ..lib.pkg import apt_install, apt_update, missing_packages
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)


class InstallPackagesStep:
    step_id = "40_packages"
    policy = ErrorPolicy.FATAL

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        packages = missing_packages(config.package_map)
        if not packages:
            return StepOutcome.ALREADY_SATISFIED

        # One index refresh and one install call for the whole batch.
        logger.info("Running apt-get update & install: %s", " ".join(packages))
        apt_update(dry_run=config.dry_run)
        apt_install(packages, dry_run=config.dry_run)
        return StepOutcome.CREATED

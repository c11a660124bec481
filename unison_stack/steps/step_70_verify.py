from __future__ import annotations

import logging
import os

from ..config import RunConfig
from ..errors import ProvisionError
from ..lib.identity import as_identity
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)


class VerifyUnisonStep:
    step_id = "70_verify"
    policy = ErrorPolicy.FATAL

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        identity = state.require_identity()
        path = f"{config.bin_dir}:{os.environ.get('PATH', '')}"

        # Read-only check: runs even in dry-run mode.
        with as_identity(identity) as session:
            r = session.run(["env", f"PATH={path}", "unison", "-version"], check=False)

        if not r.ok and config.dry_run:
            logger.warning("Unison is not runnable yet (dry-run, nothing was installed).")
            return StepOutcome.FAILED
        if not r.ok:
            raise ProvisionError(
                f"Unison binary installed but not runnable from {identity.user}'s environment."
            )

        lines = (r.stdout or r.stderr).strip().splitlines()
        state.unison_version = lines[0] if lines else ""
        logger.info("Installation successful - %s", state.unison_version)
        return StepOutcome.ALREADY_SATISFIED

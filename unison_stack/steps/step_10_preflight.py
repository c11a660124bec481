from __future__ import annotations

import logging
import re
import sys
from typing import Callable, Optional, TextIO

from ..config import RunConfig
from ..errors import ConfigError
from ..lib.hwinfo import device_model
from ..lib.identity import require_root, resolve_identity
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)

_YES_RE = re.compile(r"^[Yy]$")


class PreflightStep:
    step_id = "10_preflight"
    policy = ErrorPolicy.FATAL

    def __init__(
        self,
        *,
        prompt: Callable[[str], str] = input,
        stdin: Optional[TextIO] = None,
    ) -> None:
        self._prompt = prompt
        self._stdin = stdin

    def _confirm(self, config: RunConfig) -> None:
        if config.assume_yes:
            logger.info("Assuming yes due to -y/--yes flag.")
            return

        stdin = self._stdin if self._stdin is not None else sys.stdin
        if not stdin.isatty():
            raise ConfigError("Cannot prompt without a TTY. Re-run with -y to accept defaults.")

        try:
            reply = self._prompt("Proceed with these parameters? [y/N]: ")
        except EOFError as e:
            raise ConfigError("No input received.") from e
        if not _YES_RE.match(reply.strip()):
            raise ConfigError("Aborted by user.")

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        require_root()

        identity = resolve_identity()
        state.identity = identity
        logger.info("Real user      : %s", identity.user)
        logger.info("User home      : %s", identity.home)

        model = device_model()
        if model:
            logger.info("Device model   : %s", model)

        logger.info(
            "Parameters     : SWAP_SIZE=%s | MIN_RAM_MB=%s%s",
            config.swap_size,
            config.min_ram_mb,
            " | DRY-RUN" if config.dry_run else "",
        )
        self._confirm(config)
        return StepOutcome.ALREADY_SATISFIED

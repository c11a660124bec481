from __future__ import annotations

import logging
import os
import shlex
import shutil
import tempfile
from pathlib import Path

from ..config import RunConfig
from ..errors import ProvisionError
from ..lib.command import run_cmd
from ..lib.identity import Identity, as_identity
from ..lib.opam import OPAM_ENV
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)

BUILD_OUTPUT = "src/unison"
MAN_OUTPUT = "man/unison.1"


def is_executable(path: Path) -> bool:
    return path.is_file() and os.access(path, os.X_OK)


def make_build_dir(identity: Identity) -> Path:
    """Unique scratch dir owned by the invoking user (they clone and build into it)."""

    build_dir = Path(tempfile.mkdtemp(prefix="unison-build-"))
    try:
        os.chown(build_dir, identity.uid, identity.gid)
    except OSError:
        shutil.rmtree(build_dir, ignore_errors=True)
        raise
    return build_dir


class BuildUnisonStep:
    step_id = "60_build_unison"
    policy = ErrorPolicy.FATAL

    def _build(self, config: RunConfig, identity: Identity, build_dir: Path) -> None:
        with as_identity(identity, dry_run=config.dry_run) as session:
            logger.info("Cloning Unison...")
            session.run(["git", "clone", "--depth=1", config.unison_repo, str(build_dir)])

            logger.info("Building Unison...")
            session.shell(f"cd {shlex.quote(str(build_dir))} && {OPAM_ENV} && make")

    def _install(self, config: RunConfig, build_dir: Path) -> None:
        logger.info("Installing Unison binary...")
        run_cmd(
            ["install", "-m", "0755", str(build_dir / BUILD_OUTPUT), str(config.unison_bin)],
            dry_run=config.dry_run,
        )

        man_page = build_dir / MAN_OUTPUT
        if man_page.is_file():
            logger.info("Installing Unison man page...")
            run_cmd(["install", "-d", "-m", "0755", config.man_dir], dry_run=config.dry_run)
            run_cmd(["install", "-m", "0644", str(man_page), str(config.unison_man)], dry_run=config.dry_run)

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        if is_executable(config.unison_bin):
            logger.info("Unison already installed at %s - skipping build.", str(config.unison_bin))
            return StepOutcome.ALREADY_SATISFIED

        identity = state.require_identity()
        if config.dry_run:
            build_dir = Path(tempfile.gettempdir()) / "unison-build-XXXXXX"
            self._build(config, identity, build_dir)
            logger.info("Would install %s to %s", BUILD_OUTPUT, str(config.unison_bin))
            return StepOutcome.CREATED

        build_dir = make_build_dir(identity)
        try:
            self._build(config, identity, build_dir)

            if not is_executable(build_dir / BUILD_OUTPUT):
                raise ProvisionError("Unison binary not found.")

            self._install(config, build_dir)
        finally:
            shutil.rmtree(build_dir, ignore_errors=True)
            logger.debug("Removed build dir %s", str(build_dir))

        return StepOutcome.CREATED

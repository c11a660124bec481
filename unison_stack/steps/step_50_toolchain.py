from __future__ import annotations

import logging

from ..config import RunConfig
from ..errors import ProvisionError
from ..lib import opam
from ..lib.identity import UserSession, as_identity
from ..lib.pkg import command_exists
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)


class InstallToolchainStep:
    """OPAM bootstrap, per-user init, index refresh and the ``default`` switch.

    Every gate except the index refresh is skipped when its target state
    already holds. All opam commands run as the invoking user so that
    ~/.opam stays owned by them.
    """

    step_id = "50_toolchain"
    policy = ErrorPolicy.FATAL

    def _ensure_switch(self, config: RunConfig, state: RunState, session: UserSession) -> bool:
        if opam.SWITCH_NAME in opam.list_switches(session):
            logger.info("OPAM switch '%s' already exists - selecting it.", opam.SWITCH_NAME)
            opam.set_switch(session)
            return False

        available = opam.list_available_compilers(session)
        compiler = opam.choose_compiler(available, config.preferred_compilers)
        if compiler is None:
            raise ProvisionError("No suitable OCaml compiler found.")

        state.compiler = compiler
        logger.info("Creating OPAM switch '%s' with %s", opam.SWITCH_NAME, compiler)
        opam.create_switch(session, compiler)
        return True

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        identity = state.require_identity()
        changed = False

        with as_identity(identity, dry_run=config.dry_run) as session:
            if command_exists("opam"):
                logger.info("OPAM already installed.")
            else:
                logger.info("Installing OPAM...")
                opam.bootstrap(session, config.opam_installer_url)
                changed = True
                if config.dry_run:
                    logger.info("Would initialise OPAM and create switch '%s'", opam.SWITCH_NAME)
                    return StepOutcome.CREATED

            if opam.state_dir(identity.home).is_dir():
                logger.info("OPAM already initialised.")
            else:
                logger.info("Initializing OPAM for %s...", identity.user)
                opam.init(session)
                changed = True
                if config.dry_run:
                    logger.info("Would create switch '%s'", opam.SWITCH_NAME)
                    return StepOutcome.CREATED

            logger.info("Updating OPAM package index...")
            opam.update(session)

            if self._ensure_switch(config, state, session):
                changed = True

            logger.info("Verifying OCaml compiler in switch...")
            if not opam.compiler_available(session):
                logger.info("ocamlc not found in switch - installing minimal compiler.")
                opam.install_minimal_compiler(session)
                changed = True

        return StepOutcome.CREATED if changed else StepOutcome.ALREADY_SATISFIED

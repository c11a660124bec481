from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Sequence

from .config import RunConfig, load_config
from .errors import ConfigError, InstallerError
from .logging_utils import DEFAULT_LOG_PATH, configure_logging
from .pipeline import PipelineResult, RunState, Step, run_pipeline
from .state_store import report_from_state, save_report
from .steps import (
    BuildUnisonStep,
    EnsureWifiStep,
    InstallPackagesStep,
    InstallToolchainStep,
    PreflightStep,
    ProvisionSwapStep,
    VerifyUnisonStep,
)

logger = logging.getLogger(__name__)


DEFAULT_STATE_PATH = "/var/lib/unison-stack-installer/last-run.json"

EPILOG = """\
Environment overrides:
  SWAP_SIZE     Size of swapfile (e.g. 1G).
  MIN_RAM_MB    RAM threshold (MiB) below which swap is enabled.
"""


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> None:  # type: ignore[override]
        raise ConfigError(message)


def build_parser() -> argparse.ArgumentParser:
    p = _ArgumentParser(
        prog="unison-stack-installer",
        description="Install VCS tools, OPAM with an OCaml switch, and Unison built from source.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    p.add_argument("-y", "--yes", action="store_true", help="Run with default parameters without prompting.")
    p.add_argument("--config", default=None, help="Optional YAML file overriding defaults")
    p.add_argument("--state", default=DEFAULT_STATE_PATH, help="Run report path (json|yaml); empty to disable")
    p.add_argument("--log", default=DEFAULT_LOG_PATH, help="Path to installer log")
    p.add_argument("--dry-run", action="store_true", help="Log mutating commands instead of running them")
    p.add_argument("-v", "--verbose", action="store_true", help="Log command output")
    return p


def build_steps() -> List[Step]:
    return [
        PreflightStep(),
        ProvisionSwapStep(),
        EnsureWifiStep(),
        InstallPackagesStep(),
        InstallToolchainStep(),
        BuildUnisonStep(),
        VerifyUnisonStep(),
    ]


def run(
    config: RunConfig,
    *,
    state_path: Optional[str] = DEFAULT_STATE_PATH,
    steps: Optional[Sequence[Step]] = None,
) -> PipelineResult:
    """Run the provisioning pipeline, writing a run report whatever the outcome."""

    state = RunState()
    ok = False
    try:
        result = run_pipeline(
            config=config,
            state=state,
            steps=build_steps() if steps is None else steps,
        )
        ok = True
        logger.info(
            "Done (changed=%s satisfied=%s failed=%s)",
            ",".join(result.changed_steps) or "-",
            ",".join(result.satisfied_steps) or "-",
            ",".join(result.failed_steps) or "-",
        )
        return result
    except Exception:
        logger.error("Step %s failed", state.current_step or "-")
        raise
    finally:
        if state_path:
            try:
                save_report(state_path, report_from_state(state, ok=ok))
            except OSError as e:
                logger.warning("Could not write run report %s: %s", state_path, e)


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except ConfigError as e:
        parser.print_usage(sys.stderr)
        sys.stderr.write(f"{parser.prog}: error: {e}\n")
        return 1

    configure_logging(log_path=args.log, level=logging.DEBUG if args.verbose else logging.INFO)

    try:
        config = load_config(config_path=args.config, assume_yes=args.yes, dry_run=args.dry_run)
        run(config, state_path=args.state or None)
    except InstallerError as e:
        logger.error("FATAL %s", e)
        return 1
    except Exception:
        logger.exception("FATAL unexpected error")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

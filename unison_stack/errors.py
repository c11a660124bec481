from __future__ import annotations

import shlex
from typing import Sequence


class InstallerError(RuntimeError):
    """Base class for every failure the installer reports itself."""


class ConfigError(InstallerError):
    """Bad flags, malformed overrides, missing privilege or identity."""


class ProvisionError(InstallerError):
    """The host cannot reach the required end state."""


class CommandError(InstallerError):
    def __init__(self, argv: Sequence[str], returncode: int, stderr: str = "") -> None:
        self.argv = list(argv)
        self.returncode = returncode
        self.stderr = stderr
        msg = f"cmd: {fmt_argv(self.argv)!r} | exit: {returncode}"
        if stderr.strip():
            msg += f"\n{stderr.strip()}"
        super().__init__(msg)


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)

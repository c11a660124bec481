from __future__ import annotations

import logging
import os
import pwd
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator, Mapping, Optional, Sequence

from ..errors import ConfigError, InstallerError
from .command import CmdResult, run_cmd

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    user: str
    home: str
    uid: int
    gid: int


def require_root() -> None:
    if os.geteuid() != 0:
        raise ConfigError(
            "Run as root (with sudo) for a system-wide install. Without root, packages "
            "and binaries would be limited to your user and may fail to write to /usr/local."
        )


def resolve_identity(environ: Optional[Mapping[str, str]] = None) -> Identity:
    """Resolve the invoking (non-elevated) user behind sudo."""

    env = os.environ if environ is None else environ
    user = env.get("SUDO_USER") or env.get("USER") or ""
    if not user:
        raise ConfigError("Cannot determine the invoking user (SUDO_USER/USER unset).")
    try:
        pw = pwd.getpwnam(user)
    except KeyError as e:
        raise ConfigError(f"Cannot determine home directory for user '{user}'.") from e
    if not pw.pw_dir:
        raise ConfigError(f"Cannot determine home directory for user '{user}'.")
    return Identity(user=user, home=pw.pw_dir, uid=pw.pw_uid, gid=pw.pw_gid)


class UserSession:
    """Commands executed on behalf of one identity.

    Only valid inside the ``as_identity`` block that created it.
    """

    def __init__(self, identity: Identity, *, dry_run: bool = False) -> None:
        self.identity = identity
        self.dry_run = dry_run
        self._open = True

    def _prefix(self) -> list[str]:
        if not self._open:
            raise InstallerError(f"Session for '{self.identity.user}' is closed")
        return ["sudo", "-u", self.identity.user, "-H", "--"]

    def run(
        self,
        argv: Sequence[str],
        *,
        check: bool = True,
        cwd: str | None = None,
        input_text: str | None = None,
        dry_run: Optional[bool] = None,
    ) -> CmdResult:
        return run_cmd(
            [*self._prefix(), *argv],
            check=check,
            cwd=cwd,
            input_text=input_text,
            dry_run=self.dry_run if dry_run is None else dry_run,
        )

    def shell(
        self,
        script: str,
        *,
        check: bool = True,
        dry_run: Optional[bool] = None,
    ) -> CmdResult:
        """Run a script in a login shell so the user's profile (and opam) is loaded."""
        return self.run(["bash", "-lc", script], check=check, dry_run=dry_run)

    def close(self) -> None:
        self._open = False


@contextmanager
def as_identity(identity: Identity, *, dry_run: bool = False) -> Iterator[UserSession]:
    session = UserSession(identity, dry_run=dry_run)
    logger.debug("Entering session as %s", identity.user)
    try:
        yield session
    finally:
        session.close()
        logger.debug("Left session as %s", identity.user)

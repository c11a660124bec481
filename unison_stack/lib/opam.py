from __future__ import annotations

import logging
import re
import shlex
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from .identity import UserSession

logger = logging.getLogger(__name__)

SWITCH_NAME = "default"
COMPILER_PACKAGE = "ocaml-base-compiler"

_COMPILER_RE = re.compile(r"^ocaml-base-compiler\.(\d+)\.(\d+)\.(\d+)$")

# Runs inside the user's login shell so opam's PATH additions apply.
OPAM_ENV = "eval $(opam env)"


def state_dir(home: str) -> Path:
    return Path(home) / ".opam"


def compiler_key(name: str) -> Tuple[int, ...]:
    m = _COMPILER_RE.match(name)
    if not m:
        raise ValueError(f"Not a base compiler package: {name}")
    return tuple(int(g) for g in m.groups())


def filter_compilers(lines: Sequence[str]) -> List[str]:
    return [l.strip() for l in lines if _COMPILER_RE.match(l.strip())]


def choose_compiler(available: Sequence[str], preferred: Sequence[str]) -> Optional[str]:
    """Pick the first preferred version that is available, else the highest available.

    Returns None if nothing is available.
    """

    candidates = filter_compilers(available)
    for v in preferred:
        if v in candidates:
            return v
    if not candidates:
        return None
    return max(candidates, key=compiler_key)


def bootstrap(session: UserSession, installer_url: str) -> None:
    """Download and run the official installer, accepting its default prompts."""

    url = shlex.quote(installer_url)
    session.shell(
        "set -e; "
        'tmp=$(mktemp /tmp/opam-install-XXXXXX.sh); '
        'trap \'rm -f "$tmp"\' EXIT; '
        f'curl -fsSL {url} -o "$tmp"; '
        'chmod +x "$tmp"; '
        # the installer insists on a tty; feed newlines to accept /usr/local/bin
        'script -qfc "yes \\"\\" | \\"$tmp\\" --tty" /dev/null'
    )


def init(session: UserSession) -> None:
    session.shell("opam init -y --disable-sandboxing")


def update(session: UserSession) -> None:
    session.shell(f"{OPAM_ENV} && opam update -y")


def list_switches(session: UserSession) -> List[str]:
    r = session.shell("opam switch list --short", dry_run=False)
    return [l.strip() for l in r.stdout.splitlines() if l.strip()]


def list_available_compilers(session: UserSession) -> List[str]:
    r = session.shell("opam switch list-available --short", check=False, dry_run=False)
    return filter_compilers(r.stdout.splitlines())


def set_switch(session: UserSession, name: str = SWITCH_NAME) -> None:
    session.shell(f"opam switch set {shlex.quote(name)}")


def create_switch(session: UserSession, compiler: str, name: str = SWITCH_NAME) -> None:
    session.shell(f"opam switch create {shlex.quote(name)} {shlex.quote(compiler)} -y")


def compiler_available(session: UserSession) -> bool:
    r = session.shell(f"{OPAM_ENV} && command -v ocamlc >/dev/null 2>&1", check=False, dry_run=False)
    return r.ok


def install_minimal_compiler(session: UserSession) -> None:
    session.shell(f"{OPAM_ENV} && opam install -y {COMPILER_PACKAGE} dune")

"""
Shared test fixtures: a recording stand-in for run_cmd and a fake identity.
"""

import os
from pathlib import Path
from typing import Callable, List, Optional

import pytest

from unison_stack.config import RunConfig
from unison_stack.errors import CommandError
from unison_stack.lib.command import CmdResult
from unison_stack.lib.identity import Identity


class FakeRunner:
    """Records argv lists; replies through an optional handler(argv) -> (rc, stdout)."""

    def __init__(self, handler: Optional[Callable[[List[str]], tuple]] = None) -> None:
        self.calls: List[List[str]] = []
        self.handler = handler

    def __call__(self, argv, *, check=True, dry_run=False, **kwargs) -> CmdResult:
        argv = list(argv)
        self.calls.append(argv)
        rc, out = (0, "")
        if self.handler is not None and not dry_run:
            rc, out = self.handler(argv)
        if check and rc != 0:
            raise CommandError(argv, rc, "")
        return CmdResult(argv=argv, returncode=rc, stdout=out, stderr="")

    @property
    def scripts(self) -> List[str]:
        """Last argv element of every call (the script for ``bash -lc``)."""
        return [c[-1] for c in self.calls]


@pytest.fixture
def identity(tmp_path: Path) -> Identity:
    home = tmp_path / "home" / "pi"
    home.mkdir(parents=True)
    return Identity(user="pi", home=str(home), uid=os.getuid(), gid=os.getgid())


@pytest.fixture
def config(tmp_path: Path) -> RunConfig:
    bin_dir = tmp_path / "bin"
    man_dir = tmp_path / "man" / "man1"
    bin_dir.mkdir()
    return RunConfig(
        assume_yes=True,
        swap_file=str(tmp_path / "swapfile"),
        fstab_path=str(tmp_path / "fstab"),
        bin_dir=str(bin_dir),
        man_dir=str(man_dir),
    )


@pytest.fixture
def installed_unison(config: RunConfig) -> Path:
    """An executable placeholder at the install path."""
    p = config.unison_bin
    p.write_text("#!/bin/sh\necho unison version 2.53.7\n", encoding="utf-8")
    p.chmod(0o755)
    return p


@pytest.fixture
def make_runner() -> Callable[..., FakeRunner]:
    return FakeRunner

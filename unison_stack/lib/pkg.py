from __future__ import annotations

import logging
import shutil
from typing import List, Mapping, Sequence

from .command import run_cmd

logger = logging.getLogger(__name__)

APT_ENV = {"DEBIAN_FRONTEND": "noninteractive"}


def command_exists(name: str) -> bool:
    return shutil.which(name) is not None


def missing_packages(package_map: Mapping[str, str]) -> List[str]:
    """Packages for every probe command that is not on PATH, in map order, de-duplicated."""

    missing: List[str] = []
    for cmd, package in package_map.items():
        if command_exists(cmd):
            logger.info("'%s' already installed.", cmd)
            continue
        logger.info("'%s' missing - will install '%s'.", cmd, package)
        if package not in missing:
            missing.append(package)
    return missing


def apt_update(*, dry_run: bool = False) -> None:
    run_cmd(["apt-get", "update", "-qq"], env=APT_ENV, dry_run=dry_run)


def apt_install(packages: Sequence[str], *, dry_run: bool = False) -> None:
    if not packages:
        return
    argv = ["apt-get", "install", "-y", "--no-install-recommends", *packages]
    run_cmd(argv, env=APT_ENV, dry_run=dry_run)

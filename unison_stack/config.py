from __future__ import annotations

import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError

_SIZE_RE = re.compile(r"^([0-9]+)([GgMm])$")
_COUNTRY_RE = re.compile(r"^[A-Z]{2}$")

DEFAULT_PREFERRED_COMPILERS: Tuple[str, ...] = (
    "ocaml-base-compiler.4.14.2",
    "ocaml-base-compiler.4.14.1",
    "ocaml-base-compiler.4.12.1",
)

# Probe command -> Debian package that provides it.
PACKAGE_MAP: Dict[str, str] = {
    "git": "git",
    "hg": "mercurial",
    "darcs": "darcs",
    "gcc": "gcc",
    "make": "build-essential",
    "curl": "curl",
    "unzip": "unzip",
    "bwrap": "bubblewrap",
}


def parse_size_mib(size: str) -> int:
    """Convert "<int>M" / "<int>G" (case-insensitive) to MiB."""

    m = _SIZE_RE.match(size or "")
    if not m:
        raise ConfigError(f"Unsupported SWAP_SIZE format '{size}'")
    n, unit = int(m.group(1)), m.group(2)
    return n * 1024 if unit in "Gg" else n


@dataclass(frozen=True)
class RunConfig:
    assume_yes: bool = False
    dry_run: bool = False
    swap_size: str = "2G"
    min_ram_mb: int = 2048
    swap_file: str = "/swapfile"
    fstab_path: str = "/etc/fstab"
    bin_dir: str = "/usr/local/bin"
    man_dir: str = "/usr/local/share/man/man1"
    unison_repo: str = "https://github.com/bcpierce00/unison.git"
    opam_installer_url: str = "https://opam.ocaml.org/install.sh"
    preferred_compilers: Tuple[str, ...] = DEFAULT_PREFERRED_COMPILERS
    wifi_fallback_country: str = "US"
    geolocation_url: str = "https://ipinfo.io/country"
    package_map: Mapping[str, str] = field(default_factory=lambda: dict(PACKAGE_MAP), hash=False)

    def __post_init__(self) -> None:
        parse_size_mib(self.swap_size)
        if self.min_ram_mb < 0:
            raise ConfigError(f"MIN_RAM_MB must be >= 0, got {self.min_ram_mb}")
        if not _COUNTRY_RE.match(self.wifi_fallback_country):
            raise ConfigError(
                f"Wi-Fi fallback country must be a two-letter code, got '{self.wifi_fallback_country}'"
            )
        # Read-only copy, so neither the caller nor PACKAGE_MAP can change it later.
        object.__setattr__(self, "package_map", MappingProxyType(dict(self.package_map)))

    @property
    def swap_size_mib(self) -> int:
        return parse_size_mib(self.swap_size)

    @property
    def unison_bin(self) -> Path:
        return Path(self.bin_dir) / "unison"

    @property
    def unison_man(self) -> Path:
        return Path(self.man_dir) / "unison.1"


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    sec = raw.get(name) or {}
    if not isinstance(sec, dict):
        raise ConfigError(f"config: '{name}' must be a mapping")
    return sec


def _parse_int(value: Any, what: str) -> int:
    try:
        return int(str(value).strip())
    except ValueError as e:
        raise ConfigError(f"{what} must be an integer, got '{value}'") from e


def load_yaml_config(path: str) -> Dict[str, Any]:
    p = Path(path)
    if not p.exists():
        raise ConfigError(f"Config file not found: {path}")
    if p.suffix.lower() not in {".yaml", ".yml"}:
        raise ConfigError("config file must be YAML")
    try:
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(raw, dict):
        raise ConfigError(f"{path} must contain a mapping/object")
    return raw


def _overrides_from_yaml(raw: Dict[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = {}

    swap = _section(raw, "swap")
    if "size" in swap:
        out["swap_size"] = str(swap["size"])
    if "min_ram_mb" in swap:
        out["min_ram_mb"] = _parse_int(swap["min_ram_mb"], "swap.min_ram_mb")
    if "file" in swap:
        out["swap_file"] = str(swap["file"])

    paths = _section(raw, "paths")
    for key, attr in (("fstab", "fstab_path"), ("bin_dir", "bin_dir"), ("man_dir", "man_dir")):
        if key in paths:
            out[attr] = str(paths[key])

    unison = _section(raw, "unison")
    if "repo" in unison:
        out["unison_repo"] = str(unison["repo"])

    opam = _section(raw, "opam")
    if "installer_url" in opam:
        out["opam_installer_url"] = str(opam["installer_url"])
    if "preferred_compilers" in opam:
        pref = opam["preferred_compilers"]
        if not isinstance(pref, list) or not all(isinstance(v, str) for v in pref):
            raise ConfigError("opam.preferred_compilers must be a list of strings")
        out["preferred_compilers"] = tuple(pref)

    wifi = _section(raw, "wifi")
    if "fallback_country" in wifi:
        out["wifi_fallback_country"] = str(wifi["fallback_country"]).upper()
    if "geolocation_url" in wifi:
        out["geolocation_url"] = str(wifi["geolocation_url"])

    return out


def load_config(
    *,
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
    assume_yes: bool = False,
    dry_run: bool = False,
) -> RunConfig:
    """Build the RunConfig: defaults < YAML file < environment < flags.

    Raises ConfigError before anything touches the host.
    """

    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    if config_path:
        values.update(_overrides_from_yaml(load_yaml_config(config_path)))

    if env.get("SWAP_SIZE"):
        values["swap_size"] = env["SWAP_SIZE"]
    if env.get("MIN_RAM_MB"):
        values["min_ram_mb"] = _parse_int(env["MIN_RAM_MB"], "MIN_RAM_MB")

    return RunConfig(assume_yes=assume_yes, dry_run=dry_run, **values)

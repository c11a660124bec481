"""Unison stack installer (Debian / Raspberry Pi OS).

Provisions VCS tools, a build toolchain, OPAM with an OCaml switch, and
Unison built from source.

Core design goals:
- Idempotent steps: every stage probes the host before mutating it
- Fail fast, except for best-effort convenience steps
- User-owned artifacts are produced as the invoking (sudo) user
- Centralized logging
"""

__all__ = []

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Tuple

DEFAULT_LOG_PATH = "/var/log/unison-stack-installer.log"
FALLBACK_LOG_NAME = "unison-stack-installer.log"

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _open_log_file(log_path: str) -> Tuple[logging.Handler, str]:
    try:
        Path(os.path.dirname(log_path) or ".").mkdir(parents=True, exist_ok=True)
        return logging.FileHandler(log_path), log_path
    except OSError:
        fallback = str(Path.cwd() / FALLBACK_LOG_NAME)
        return logging.FileHandler(fallback), fallback


def configure_logging(
    log_path: str = DEFAULT_LOG_PATH,
    level: int = logging.INFO,
    also_console: bool = True,
) -> str:
    """Send installer logs to ``log_path`` and, by default, the terminal.

    The installer normally runs under sudo and writes to /var/log. A run
    without root (a dry run from a user shell, say) cannot open that file,
    so the log lands in ./unison-stack-installer.log instead.

    Returns the log file actually opened.
    """

    root = logging.getLogger()
    root.setLevel(level)

    # main() and tests may call this more than once per process.
    if getattr(root, "_unison_stack_log_path", None):
        return root._unison_stack_log_path  # type: ignore[attr-defined]

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)
    file_handler, actual_path = _open_log_file(log_path)
    handlers: List[logging.Handler] = [file_handler]
    if also_console:
        handlers.append(logging.StreamHandler())

    for h in handlers:
        h.setFormatter(fmt)
        root.addHandler(h)
    setattr(root, "_unison_stack_log_path", actual_path)

    logging.getLogger(__name__).debug("Logging to %s (requested %s)", actual_path, log_path)
    return actual_path

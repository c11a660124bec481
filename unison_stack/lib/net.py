from __future__ import annotations

import http.client
import logging
import re
import shutil
import urllib.request
from pathlib import Path
from typing import Optional

from .command import run_cmd

logger = logging.getLogger(__name__)

WPA_SUPPLICANT_CONF = Path("/etc/wpa_supplicant/wpa_supplicant.conf")

_COUNTRY_RE = re.compile(r"^[A-Za-z]{2}$")


def wifi_soft_blocked() -> bool:
    """True if rfkill reports the wifi radio as soft blocked."""

    try:
        r = run_cmd(["rfkill", "list", "wifi"], check=False)
    except FileNotFoundError:
        logger.info("rfkill not available")
        return False
    if r.returncode != 0:
        return False
    return "soft blocked: yes" in r.stdout.lower()


def lookup_country(url: str, *, timeout: float = 4.0) -> Optional[str]:
    """Two-letter country code from a geolocation endpoint, or None."""

    try:
        with urllib.request.urlopen(url, timeout=timeout) as resp:
            body = resp.read(64).decode("ascii", errors="ignore").strip()
    except (OSError, ValueError, http.client.HTTPException) as e:
        logger.info("Geolocation lookup failed: %s", e)
        return None
    if not _COUNTRY_RE.match(body):
        logger.info("Geolocation returned unexpected payload: %r", body)
        return None
    return body.upper()


def set_wifi_country(country: str, *, conf_path: Path = WPA_SUPPLICANT_CONF, dry_run: bool = False) -> None:
    if shutil.which("raspi-config"):
        run_cmd(["raspi-config", "nonint", "do_wifi_country", country], check=False, dry_run=dry_run)
        return

    if not conf_path.exists():
        logger.warning("No raspi-config and no %s; cannot set Wi-Fi country", str(conf_path))
        return

    txt = conf_path.read_text(encoding="utf-8")
    updated = re.sub(r"(?m)^country=.*$", f"country={country}", txt)
    if dry_run:
        logger.info("Would write %s (country=%s)", str(conf_path), country)
        return
    conf_path.with_name(conf_path.name + ".bak").write_text(txt, encoding="utf-8")
    conf_path.write_text(updated, encoding="utf-8")


def unblock_wifi(*, dry_run: bool = False) -> None:
    run_cmd(["rfkill", "unblock", "wifi"], check=False, dry_run=dry_run)

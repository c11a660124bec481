from __future__ import annotations

import logging

from ..config import RunConfig
from ..lib.net import lookup_country, set_wifi_country, unblock_wifi, wifi_soft_blocked
from ..pipeline import ErrorPolicy, RunState, StepOutcome

logger = logging.getLogger(__name__)


class EnsureWifiStep:
    """Unblock the radio so apt/git have network; never fatal."""

    step_id = "30_wifi"
    policy = ErrorPolicy.LOGGED_AND_IGNORED

    def run(self, config: RunConfig, state: RunState) -> StepOutcome:
        if not wifi_soft_blocked():
            logger.info("Wi-Fi not rfkill-blocked - nothing to do.")
            return StepOutcome.ALREADY_SATISFIED

        logger.info("Wi-Fi appears rfkill-blocked - attempting to fix.")
        country = lookup_country(config.geolocation_url)
        if country is None:
            country = config.wifi_fallback_country
            logger.info("Geolocation failed; defaulting country to %s", country)

        logger.info("Setting Wi-Fi country to %s and unblocking radio.", country)
        try:
            set_wifi_country(country, dry_run=config.dry_run)
        except Exception as e:
            logger.warning("Could not set Wi-Fi country to %s: %s", country, e)
        unblock_wifi(dry_run=config.dry_run)
        logger.info("Wi-Fi rfkill unblock attempted.")
        return StepOutcome.CREATED

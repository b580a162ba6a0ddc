"""CAPTCHA and rate-limit detection on the demo app's pages."""

from __future__ import annotations

import logging
from typing import Optional

from ..constants import CHALLENGE_SELECTORS
from .browser import BrowserDriver

logger = logging.getLogger(__name__)


async def detect_challenge(driver: BrowserDriver) -> Optional[str]:
    """Return the type of the first challenge element on the page, or None."""
    for selector, challenge_type in CHALLENGE_SELECTORS:
        try:
            if await driver.exists(selector):
                logger.info(f"Detected challenge type: {challenge_type}")
                return challenge_type
        except Exception:
            continue
    return None

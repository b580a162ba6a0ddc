"""One scripted journey: land, sign up, log in, watch a movie, log out.

``run_session`` owns exactly one remote browser for its lifetime and always
asks the provider to release it, whichever stage failed. It reports its
outcome only through its return value.
"""

from __future__ import annotations

import logging
import random
from typing import Awaitable, Callable, Optional
from urllib.parse import urlencode, urljoin

from ..config import INTERSTITIAL_TIMEOUT_MS, LANDING_TIMEOUT_MS, SESSION_TIMEOUT_MS
from ..constants import (
    CSRF_TOKEN_SCRIPT,
    LOGIN_ERROR_SCRIPT,
    LOGIN_PATH,
    MODAL_REMOVE_SCRIPT,
    MODAL_VISIBLE_SCRIPT,
    SELECTORS,
    SIGNUP_LABELS,
    SIGNUP_PATH,
)
from ..models.fixtures import DeviceProfile, PlanSelection, UserFixture, UtmParameters
from ..tools.random_browser import randomize_browser, randomize_geolocation
from ..tools.random_data import (
    generate_movie_number,
    generate_plan_selection,
    generate_user,
    generate_utm,
)
from .browser import BrowserDriver, PlaywrightDriver
from .captcha import detect_challenge
from .provider import BrowserbaseClient

logger = logging.getLogger(__name__)

ADULT_CHECKBOX_RATE = 0.55

Connect = Callable[[str], Awaitable[BrowserDriver]]


class LoginError(RuntimeError):
    """The demo app rejected the login and showed an error banner."""


def landing_url(base_domain: str, utm: UtmParameters) -> str:
    return f"{base_domain}?{urlencode(utm.query_params())}"


async def _apply_profile(driver: BrowserDriver, profile: DeviceProfile) -> None:
    await driver.set_viewport(profile.viewport)
    if profile.user_agent:
        try:
            await driver.set_user_agent(profile.user_agent)
        except Exception as e:
            logger.warning(f"Could not set user agent, continuing anyway: {e}")


async def _dismiss_interstitial(driver: BrowserDriver) -> None:
    try:
        await driver.wait_for_visible(
            SELECTORS["interstitial_continue"], timeout=INTERSTITIAL_TIMEOUT_MS
        )
    except Exception:
        logger.info("No Codespaces continue button found, proceeding with normal flow")
        return
    try:
        await driver.click(SELECTORS["interstitial_continue"])
        await driver.wait_for_load_state("networkidle")
    except Exception as e:
        logger.warning(f"Could not get past the Codespaces continue page, proceeding anyway: {e}")


async def _land(driver: BrowserDriver, base_domain: str, utm: UtmParameters) -> None:
    await driver.navigate(
        landing_url(base_domain, utm), wait_until="networkidle", timeout=LANDING_TIMEOUT_MS
    )
    await _dismiss_interstitial(driver)
    await driver.human_pause("MEDIUM")


async def _sign_up(
    driver: BrowserDriver, base_domain: str, user: UserFixture, plan: PlanSelection
) -> None:
    await driver.navigate(urljoin(base_domain, SIGNUP_PATH), wait_until="networkidle")
    await driver.wait_for_visible(SELECTORS["signup_form_control"])
    await driver.human_pause("SHORT")

    await driver.fill_label(SIGNUP_LABELS["username"], user.username)
    await driver.press("Tab")
    await driver.human_pause("MEDIUM")
    await driver.fill_label(SIGNUP_LABELS["email"], user.email)
    await driver.press("Tab")
    await driver.human_pause("MEDIUM")
    await driver.fill(SELECTORS["signup_password"], user.password)
    await driver.press("Tab")
    await driver.human_pause("MEDIUM")
    await driver.fill(SELECTORS["signup_password_confirm"], user.password)
    await driver.press("Tab")

    if random.random() < ADULT_CHECKBOX_RATE:
        await driver.press("Tab")
        await driver.natural_click(SELECTORS["signup_adult_checkbox"])

    await driver.human_pause("MEDIUM")
    await driver.scroll_to_bottom()

    await driver.human_pause("MEDIUM")
    await driver.natural_click(SELECTORS["signup_plan_button"].format(plan=plan.name))
    await driver.human_pause("MEDIUM")
    await driver.natural_click(SELECTORS["signup_submit"])
    await driver.human_pause("MEDIUM")


async def _read_csrf_token(driver: BrowserDriver) -> Optional[str]:
    try:
        token = await driver.evaluate(CSRF_TOKEN_SCRIPT)
    except Exception as e:
        logger.warning(f"Error getting CSRF token: {e}")
        return None
    if not token:
        logger.warning("CSRF token not found, proceeding without it")
    return token


async def _log_in(driver: BrowserDriver, base_domain: str, user: UserFixture) -> None:
    await driver.navigate(urljoin(base_domain, LOGIN_PATH), wait_until="domcontentloaded")
    await driver.human_pause("MEDIUM")
    await _read_csrf_token(driver)

    await driver.type_text(SELECTORS["login_username"], user.username)
    await driver.human_pause("MEDIUM")
    await driver.type_text(SELECTORS["login_password"], user.password)
    await driver.human_pause("MEDIUM")

    await driver.click(SELECTORS["login_submit"])
    await driver.human_pause("MEDIUM")

    banner = await driver.evaluate(LOGIN_ERROR_SCRIPT, SELECTORS["login_error"])
    if banner:
        raise LoginError(f"Login failed: {banner}")

    challenge = await detect_challenge(driver)
    if challenge:
        logger.warning(f"Challenge '{challenge}' present after login, continuing")


async def _close_signup_modal(driver: BrowserDriver) -> None:
    if not await driver.evaluate(MODAL_VISIBLE_SCRIPT, SELECTORS["signup_modal"]):
        return
    logger.info("Modal detected, attempting to close...")
    try:
        await driver.click(SELECTORS["signup_modal_close"])
        await driver.human_pause("SHORT")
    except Exception:
        logger.info("Could not use close button, removing modal programmatically")
        await driver.evaluate(
            MODAL_REMOVE_SCRIPT, [SELECTORS["signup_modal"], SELECTORS["modal_backdrop"]]
        )


async def _watch_and_log_out(driver: BrowserDriver, base_domain: str, movie_number: int) -> None:
    await driver.human_pause("MEDIUM")
    await driver.navigate(base_domain, wait_until="domcontentloaded")
    await _close_signup_modal(driver)

    await driver.natural_click(SELECTORS["movie_link"].format(number=movie_number))
    await driver.wait_for_load_state("networkidle")
    logger.info(f"Movie {movie_number} should be playing now")
    await driver.human_pause("LONG")

    await driver.wait_for_visible(SELECTORS["user_dropdown"])
    await driver.natural_click(SELECTORS["user_dropdown"])
    await driver.human_pause("MEDIUM")

    await driver.natural_click(SELECTORS["logout_link"])
    await driver.wait_for_load_state("networkidle")
    logger.info("Logout successful")


async def run_session(
    session_number: int,
    total_sessions: int,
    provider: BrowserbaseClient,
    base_domain: str,
    connect: Connect = PlaywrightDriver.connect,
) -> bool:
    """Run one scripted journey on a fresh remote browser.

    Args:
        session_number: 1-based index of this run within its batch.
        total_sessions: Batch size, used for logging only.
        provider: Allocates and releases the remote browser.
        base_domain: Demo app root, ending with "/".
        connect: Opens a driver on the session's connect URL.

    Returns:
        True if the journey reached logout, False on any failure.
    """
    session = None
    driver: Optional[BrowserDriver] = None
    try:
        logger.info(f"Starting session {session_number}/{total_sessions}...")
        session = await provider.create_session(geolocation=randomize_geolocation())

        profile = randomize_browser()
        logger.info(f"Using chromium in {profile.label} mode")
        driver = await connect(session.connect_url)
        await _apply_profile(driver, profile)
        await driver.set_timeouts(SESSION_TIMEOUT_MS)

        user = generate_user()
        utm = generate_utm()
        plan = generate_plan_selection()
        movie_number = generate_movie_number()
        logger.info(f"User agent: {await driver.user_agent()}")

        await _land(driver, base_domain, utm)
        await _sign_up(driver, base_domain, user, plan)
        await _log_in(driver, base_domain, user)
        await _watch_and_log_out(driver, base_domain, movie_number)
        await driver.human_pause("LONG")

        logger.info(
            f"Session {session_number} complete!\n"
            f"- Replay: {session.replay_url}\n"
            f"- Username: {user.username}\n"
            f"- Password: {user.password}\n"
            f"- Plan: {plan.name}\n"
            f"- Screen: {profile.viewport.width}x{profile.viewport.height}\n"
            f"- Device: {profile.label}\n"
            f"- URL: {landing_url(base_domain, utm)}"
        )
        return True

    except Exception as e:
        logger.error(f"Error in session {session_number}: {e}")
        return False

    finally:
        if driver is not None:
            try:
                await driver.close()
            except Exception as e:
                logger.warning(f"Failed to close browser for session {session_number}: {e}")
        if session is not None:
            try:
                await provider.release_session(session.id)
            except Exception as e:
                logger.warning(f"Failed to cleanup session {session.id}: {e}")

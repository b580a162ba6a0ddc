"""Human-like pauses, pointer paths, typing and scrolling for Playwright pages.

Every interaction falls back to the plain Playwright action when the
humanized path fails, so the intended DOM action always happens.
"""

from __future__ import annotations

import asyncio
import logging
import random

from playwright.async_api import Page

logger = logging.getLogger(__name__)

# Seconds
PAUSE_BANDS = {
    "SHORT": (0.5, 1.5),
    "MEDIUM": (1.5, 3.5),
    "LONG": (4.0, 8.0),
}

TYPING_DELAY_MS = (50, 150)
MOUSE_STEPS = (15, 35)
SCROLL_STEPS = (3, 8)


def pause_duration(band: str) -> float:
    try:
        low, high = PAUSE_BANDS[band.upper()]
    except KeyError:
        raise ValueError(f"Unknown pause band: {band!r}") from None
    return random.uniform(low, high)


async def human_pause(band: str = "MEDIUM") -> None:
    await asyncio.sleep(pause_duration(band))


def bezier_path(
    start: tuple[float, float],
    end: tuple[float, float],
    steps: int,
    jitter: float = 2.0,
) -> list[tuple[float, float]]:
    """Points along a quadratic Bezier curve from start to end.

    The control point is offset from the straight line so the path bows
    slightly. Intermediate points get a little jitter; the endpoints are
    exact.
    """
    steps = max(steps, 2)
    (x0, y0), (x2, y2) = start, end
    dx, dy = x2 - x0, y2 - y0
    bow = random.uniform(-0.3, 0.3)
    cx = x0 + dx / 2 - dy * bow
    cy = y0 + dy / 2 + dx * bow

    points = []
    for i in range(steps + 1):
        t = i / steps
        x = (1 - t) ** 2 * x0 + 2 * (1 - t) * t * cx + t ** 2 * x2
        y = (1 - t) ** 2 * y0 + 2 * (1 - t) * t * cy + t ** 2 * y2
        if 0 < i < steps:
            x += random.uniform(-jitter, jitter)
            y += random.uniform(-jitter, jitter)
        points.append((x, y))
    return points


async def move_mouse_human(page: Page, selector: str) -> tuple[float, float]:
    """Move the pointer along a smoothed path to a point inside the element."""
    locator = page.locator(selector).first
    await locator.scroll_into_view_if_needed()
    box = await locator.bounding_box()
    if box is None:
        raise RuntimeError(f"Element {selector!r} has no bounding box")

    viewport = page.viewport_size or {"width": 1280, "height": 720}
    start = (random.uniform(0, viewport["width"]), random.uniform(0, viewport["height"]))
    target = (
        box["x"] + box["width"] * random.uniform(0.3, 0.7),
        box["y"] + box["height"] * random.uniform(0.3, 0.7),
    )
    for x, y in bezier_path(start, target, random.randint(*MOUSE_STEPS)):
        await page.mouse.move(x, y)
        await asyncio.sleep(random.uniform(0.005, 0.02))
    return target


async def natural_click(page: Page, selector: str) -> None:
    try:
        x, y = await move_mouse_human(page, selector)
        await asyncio.sleep(random.uniform(0.05, 0.25))
        await page.mouse.click(x, y)
    except Exception as e:
        logger.warning(f"Humanized click on {selector!r} failed, clicking directly: {e}")
        await page.click(selector)


async def natural_type(page: Page, selector: str, text: str) -> None:
    try:
        await natural_click(page, selector)
        for char in text:
            await page.keyboard.type(char, delay=random.randint(*TYPING_DELAY_MS))
    except Exception as e:
        logger.warning(f"Humanized typing into {selector!r} failed, filling directly: {e}")
        await page.fill(selector, text)


async def natural_scroll(page: Page) -> None:
    """Wheel down to the bottom of the page in a few uneven steps."""
    try:
        height = await page.evaluate("document.body.scrollHeight")
        steps = random.randint(*SCROLL_STEPS)
        for _ in range(steps):
            await page.mouse.wheel(0, height / steps * random.uniform(0.8, 1.2))
            await asyncio.sleep(random.uniform(0.1, 0.4))
    except Exception as e:
        logger.warning(f"Humanized scroll failed, jumping to bottom: {e}")
    await page.evaluate("window.scrollTo(0, document.body.scrollHeight)")

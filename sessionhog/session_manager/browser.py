"""Browser driver: the narrow set of page operations a scripted journey needs."""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from playwright.async_api import Browser, Page, Playwright, async_playwright

from ..models.fixtures import Viewport
from . import humanize

logger = logging.getLogger(__name__)


class BrowserDriver(abc.ABC):
    """Page operations consumed by the session run loop."""

    @abc.abstractmethod
    async def navigate(self, url: str, wait_until: str = "load", timeout: Optional[int] = None) -> None: ...

    @abc.abstractmethod
    async def wait_for_visible(self, selector: str, timeout: Optional[int] = None) -> None: ...

    @abc.abstractmethod
    async def wait_for_load_state(self, state: str = "load") -> None: ...

    @abc.abstractmethod
    async def fill(self, selector: str, value: str) -> None: ...

    @abc.abstractmethod
    async def fill_label(self, label: str, value: str) -> None: ...

    @abc.abstractmethod
    async def type_text(self, selector: str, value: str) -> None: ...

    @abc.abstractmethod
    async def press(self, key: str) -> None: ...

    @abc.abstractmethod
    async def click(self, selector: str, timeout: Optional[int] = None) -> None: ...

    @abc.abstractmethod
    async def natural_click(self, selector: str) -> None: ...

    @abc.abstractmethod
    async def scroll_to_bottom(self) -> None: ...

    @abc.abstractmethod
    async def evaluate(self, script: str, arg: Any = None) -> Any: ...

    @abc.abstractmethod
    async def exists(self, selector: str) -> bool: ...

    @abc.abstractmethod
    async def human_pause(self, band: str = "MEDIUM") -> None: ...

    @abc.abstractmethod
    async def set_viewport(self, viewport: Viewport) -> None: ...

    @abc.abstractmethod
    async def set_user_agent(self, user_agent: str) -> None: ...

    @abc.abstractmethod
    async def set_timeouts(self, timeout_ms: int) -> None: ...

    @abc.abstractmethod
    async def user_agent(self) -> str: ...

    @abc.abstractmethod
    async def close(self) -> None: ...


class PlaywrightDriver(BrowserDriver):
    """Drives the first page of a remote Chromium reached over CDP."""

    def __init__(self, playwright: Playwright, browser: Browser, page: Page):
        self._playwright = playwright
        self._browser = browser
        self._page = page

    @classmethod
    async def connect(cls, connect_url: str) -> "PlaywrightDriver":
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.connect_over_cdp(connect_url)
            context = browser.contexts[0] if browser.contexts else await browser.new_context()
            page = context.pages[0] if context.pages else await context.new_page()
        except Exception:
            await playwright.stop()
            raise
        logger.info("Connected to remote browser over CDP")
        return cls(playwright, browser, page)

    async def navigate(self, url: str, wait_until: str = "load", timeout: Optional[int] = None) -> None:
        logger.info(f"Navigating to {url}")
        await self._page.goto(url, wait_until=wait_until, timeout=timeout)

    async def wait_for_visible(self, selector: str, timeout: Optional[int] = None) -> None:
        await self._page.wait_for_selector(selector, state="visible", timeout=timeout)

    async def wait_for_load_state(self, state: str = "load") -> None:
        await self._page.wait_for_load_state(state)

    async def fill(self, selector: str, value: str) -> None:
        await self._page.locator(selector).fill(value)

    async def fill_label(self, label: str, value: str) -> None:
        await self._page.get_by_label(label).fill(value)

    async def type_text(self, selector: str, value: str) -> None:
        await humanize.natural_type(self._page, selector, value)

    async def press(self, key: str) -> None:
        await self._page.keyboard.press(key)

    async def click(self, selector: str, timeout: Optional[int] = None) -> None:
        await self._page.click(selector, timeout=timeout)

    async def natural_click(self, selector: str) -> None:
        await humanize.natural_click(self._page, selector)

    async def scroll_to_bottom(self) -> None:
        await humanize.natural_scroll(self._page)

    async def evaluate(self, script: str, arg: Any = None) -> Any:
        return await self._page.evaluate(script, arg)

    async def exists(self, selector: str) -> bool:
        return await self._page.query_selector(selector) is not None

    async def human_pause(self, band: str = "MEDIUM") -> None:
        await humanize.human_pause(band)

    async def set_viewport(self, viewport: Viewport) -> None:
        await self._page.set_viewport_size(viewport.model_dump())

    async def set_user_agent(self, user_agent: str) -> None:
        await self._page.set_extra_http_headers({"User-Agent": user_agent})

    async def set_timeouts(self, timeout_ms: int) -> None:
        self._page.set_default_timeout(timeout_ms)
        self._page.set_default_navigation_timeout(timeout_ms)

    async def user_agent(self) -> str:
        return await self._page.evaluate("() => navigator.userAgent")

    async def close(self):
        """Close page, browser and Playwright; failures are logged, not raised."""
        try:
            await self._page.close()
        except Exception as e:
            logger.warning(f"Error closing page: {e}")

        try:
            await self._browser.close()
        except Exception as e:
            logger.warning(f"Error closing browser: {e}")

        try:
            await self._playwright.stop()
        except Exception as e:
            logger.warning(f"Error stopping playwright: {e}")

"""
Browser Session
===============
The "controllable browser page" the scraper core depends on, and the
Playwright-backed session that provides it.

The core only ever calls the handful of page methods listed on
``BrowserPage``; Playwright's ``Page`` satisfies the protocol as-is and the
tests drive the same code with an in-memory fake.

Each top-level operation opens exactly one session and closes it on every
exit path.  Close failures are logged and swallowed so they never mask the
error that ended the operation.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncContextManager, AsyncIterator, Callable, List, Optional, Protocol

from playwright.async_api import async_playwright

from .run_config import ScraperRunConfig

logger = logging.getLogger(__name__)


class BrowserPage(Protocol):
    """Subset of ``playwright.async_api.Page`` used by the scraper."""

    keyboard: Any

    async def goto(self, url: str, **kwargs: Any) -> Any: ...

    async def wait_for_timeout(self, timeout: float) -> None: ...

    async def query_selector(self, selector: str) -> Any: ...

    async def content(self) -> str: ...

    async def inner_text(self, selector: str, **kwargs: Any) -> str: ...

    def expect_navigation(self, **kwargs: Any) -> Any: ...


SessionFactory = Callable[[], AsyncContextManager[BrowserPage]]


def _launch_args(config: ScraperRunConfig) -> List[str]:
    args = ['--no-sandbox', '--disable-setuid-sandbox']
    if config.proxy_url:
        args.append(f'--proxy-server={config.proxy_url}')
    return args


@asynccontextmanager
async def browser_session(config: Optional[ScraperRunConfig] = None) -> AsyncIterator[BrowserPage]:
    """Launch Chromium, yield one fresh page, tear everything down on exit."""
    config = config or ScraperRunConfig()
    playwright = await async_playwright().start()
    browser = None
    context = None
    try:
        browser = await playwright.chromium.launch(
            headless=config.headless,
            args=_launch_args(config),
        )
        context = await browser.new_context(
            user_agent=config.user_agent,
            viewport={
                'width': config.viewport_width,
                'height': config.viewport_height,
            },
        )
        context.set_default_navigation_timeout(config.navigation_timeout_ms)
        page = await context.new_page()
        logger.debug(f"[BROWSER] Session opened (headless={config.headless})")
        yield page
    finally:
        await _close_quietly(playwright, browser, context)


async def _close_quietly(playwright, browser, context) -> None:
    """Best-effort teardown; never raises."""
    if context is not None:
        try:
            await context.close()
        except Exception as e:
            logger.debug(f"[BROWSER] Context close failed: {e}")
    if browser is not None:
        try:
            await browser.close()
        except Exception as e:
            logger.debug(f"[BROWSER] Browser close failed: {e}")
    try:
        await playwright.stop()
    except Exception as e:
        logger.debug(f"[BROWSER] Playwright stop failed: {e}")
    logger.debug("[BROWSER] Session closed")


def session_factory(config: Optional[ScraperRunConfig] = None) -> SessionFactory:
    """Bind a config so callers can open sessions with no arguments."""
    config = config or ScraperRunConfig()

    def _open() -> AsyncContextManager[BrowserPage]:
        return browser_session(config)

    return _open

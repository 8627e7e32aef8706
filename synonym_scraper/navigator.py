"""
Page Navigator
==============
Gets a browser page onto a usable results view for a query term.

Attempt ladder (first success wins):
  1. Direct search URL        /ricerca/<term>/<city>
  2. Canonical category slug  /<region>/<city>/<slug>.html
  3. Bare search URL          /ricerca/<term>
  4. Homepage search form     type term + city, press Enter

Every attempt returns a ``NavigationOutcome``; browser errors inside an
attempt are logged and turned into a failed outcome, so only exhausting
the whole ladder is reported to the caller.  Consent-dialog dismissal runs
after every page load and is best-effort.
"""

from __future__ import annotations

import logging
import re
import unicodedata
from typing import Awaitable, Callable, List, Optional, Tuple
from urllib.parse import quote

from playwright.async_api import Error as PlaywrightError

from .browser import BrowserPage
from .models import NavigationOutcome, NavigationStrategy, Query
from .run_config import ScraperRunConfig

logger = logging.getLogger(__name__)

_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")
_SPACES_RE = re.compile(r"\s+")

Attempt = Callable[[BrowserPage], Awaitable[NavigationOutcome]]


def slugify(text: str) -> str:
    """
    Lowercase, strip diacritics, collapse everything else into underscores.

    "Ristoranti & Pizzerie" -> "ristoranti_pizzerie".  Idempotent.
    """
    text = unicodedata.normalize("NFD", text.lower().strip())
    text = "".join(ch for ch in text if not unicodedata.combining(ch))
    text = _NON_ALNUM_RE.sub(" ", text).strip()
    return _SPACES_RE.sub("_", text)


class PageNavigator:
    """Drives one page through the attempt ladder for a ``Query``."""

    def __init__(self, config: Optional[ScraperRunConfig] = None):
        self.config = config or ScraperRunConfig()
        self.site = self.config.site

    # ------------------------------------------------------------------
    # Candidates
    # ------------------------------------------------------------------

    def candidate_urls(self, query: Query) -> List[Tuple[NavigationStrategy, str]]:
        """Ordered (strategy, url) pairs for the URL-based attempts."""
        site = self.site
        term = quote(query.term, safe="")
        city = quote(query.city, safe="")
        return [
            (
                NavigationStrategy.DIRECT_SEARCH_URL,
                site.search_url_template.format(base=site.base_url, term=term, city=city),
            ),
            (
                NavigationStrategy.SLUG_URL,
                site.slug_url_template.format(
                    base=site.base_url,
                    region=query.region,
                    city=query.city,
                    slug=slugify(query.term),
                ),
            ),
            (
                NavigationStrategy.BARE_SEARCH_URL,
                site.bare_search_url_template.format(base=site.base_url, term=term),
            ),
        ]

    def attempts(self, query: Query) -> List[Attempt]:
        ladder: List[Attempt] = [
            self._url_attempt(strategy, url)
            for strategy, url in self.candidate_urls(query)
        ]
        ladder.append(lambda page: self._form_attempt(page, query))
        return ladder

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def reach(self, page: BrowserPage, query: Query) -> NavigationOutcome:
        """Walk the ladder; return the first successful outcome."""
        for attempt in self.attempts(query):
            outcome = await attempt(page)
            if outcome.success:
                logger.info(
                    f"[NAV] '{query.term}' reached via {outcome.strategy.value} ({outcome.url})"
                )
                return outcome
        logger.warning(f"[NAV] '{query.term}': every candidate failed")
        return NavigationOutcome.failed()

    # ------------------------------------------------------------------
    # Attempts
    # ------------------------------------------------------------------

    def _url_attempt(self, strategy: NavigationStrategy, url: str) -> Attempt:
        async def attempt(page: BrowserPage) -> NavigationOutcome:
            try:
                await page.goto(
                    url,
                    wait_until="networkidle",
                    timeout=self.config.navigation_timeout_ms,
                )
                await self.dismiss_consent(page)
                if await page.query_selector(self.site.results_probe_selector):
                    return NavigationOutcome(True, strategy, url)
                logger.debug(f"[NAV] No results marker on {url}")
            except PlaywrightError as e:
                logger.debug(f"[NAV] {strategy.value} failed for {url}: {e}")
            return NavigationOutcome.failed(strategy, url)

        return attempt

    async def _form_attempt(self, page: BrowserPage, query: Query) -> NavigationOutcome:
        """Homepage fallback: fill the what/where inputs and submit."""
        site = self.site
        strategy = NavigationStrategy.FORM_SUBMISSION
        try:
            await page.goto(
                site.homepage_url,
                wait_until="networkidle",
                timeout=self.config.navigation_timeout_ms,
            )
        except PlaywrightError as e:
            logger.debug(f"[FORM] Homepage load failed: {e}")

        await self.dismiss_consent(page)
        await self._fill_first(page, site.what_input_selectors, query.term, "what")
        await self._fill_first(page, site.where_input_selectors, query.city, "where")

        try:
            async with page.expect_navigation(
                wait_until="networkidle",
                timeout=self.config.navigation_timeout_ms,
            ):
                await page.keyboard.press(site.submit_key)
        except PlaywrightError as e:
            logger.debug(f"[FORM] Submit navigation failed: {e}")
            return NavigationOutcome.failed(strategy, "form")
        return NavigationOutcome(True, strategy, "form")

    async def _fill_first(self, page: BrowserPage, selectors, text: str, label: str) -> bool:
        for selector in selectors:
            try:
                field = await page.query_selector(selector)
                if not field:
                    continue
                await field.click()
                await field.type(text)
                logger.debug(f"[FORM] Typed {label}='{text}' via {selector}")
                return True
            except PlaywrightError as e:
                logger.debug(f"[FORM] {label} input {selector} failed: {e}")
                continue
        logger.debug(f"[FORM] No {label} input found")
        return False

    async def dismiss_consent(self, page: BrowserPage) -> bool:
        """Click the first affirmative consent button, if any. Never raises."""
        try:
            await page.wait_for_timeout(self.config.consent_grace_ms)
            for text in self.site.consent_button_texts:
                btn = await page.query_selector(f'button:has-text("{text}")')
                if btn:
                    await btn.click()
                    logger.debug(f"[CONSENT] Dismissed via '{text}'")
                    return True
        except PlaywrightError as e:
            logger.debug(f"[CONSENT] Dismissal failed: {e}")
        return False

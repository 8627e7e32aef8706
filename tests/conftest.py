"""
Shared fixtures: an in-memory stand-in for a Playwright page.

``FakePage`` serves fixture HTML per URL and answers CSS selectors with
BeautifulSoup, so navigator and extractors run unchanged against it.
URLs without a registered view raise Playwright's ``TimeoutError`` just
like an unreachable page would.
"""

from __future__ import annotations

import re
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

import pytest
from bs4 import BeautifulSoup
from playwright.async_api import TimeoutError as PlaywrightTimeout

from synonym_scraper.models import Query
from synonym_scraper.navigator import PageNavigator
from synonym_scraper.run_config import ScraperRunConfig

_HAS_TEXT_RE = re.compile(r'^(\w+):has-text\("(.*)"\)$')

HOMEPAGE = "https://www.paginegialle.it"

RESULTS_HTML = """
<html><body>
  <h1>Ristoranti a Milano</h1>
  <div class="search-filters">
    <ul>
      <li><a href="/pizzeria">Pizzeria</a></li>
      <li><a href="/trattoria">Trattoria</a></li>
      <li><a href="/etnici">Ristoranti   etnici</a></li>
      <li><button>Aperto ora</button></li>
      <li><button>Mappa</button></li>
    </ul>
  </div>
  <p>1.234 risultati</p>
</body></html>
"""

NO_PROBE_HTML = "<html><body><p>Pagina non trovata</p></body></html>"

CONSENT_HTML = """
<html><body>
  <div class="cookie-banner"><button>Accetta tutti</button></div>
  <h1>Risultati</h1>
</body></html>
"""

HOMEPAGE_HTML = """
<html><body>
  <form>
    <input placeholder="Inserisci il nome dell’attività">
    <input placeholder="Inserisci l'indirizzo">
  </form>
</body></html>
"""


@dataclass
class FakeView:
    html: str
    text: Optional[str] = None


class FakeElement:
    def __init__(self, page: "FakePage", selector: str):
        self.page = page
        self.selector = selector

    async def click(self, **kwargs) -> None:
        self.page.clicks.append(self.selector)

    async def type(self, text: str, **kwargs) -> None:
        self.page.typed.append((self.selector, text))


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page

    async def press(self, key: str, **kwargs) -> None:
        self.page.pressed.append(key)
        if self.page.submit_view is not None:
            self.page._pending = self.page.submit_view


class FakePage:
    """Scripted page: ``views`` maps URL → FakeView."""

    def __init__(self, views: Optional[Dict[str, FakeView]] = None, submit_view: Optional[FakeView] = None):
        self.views = dict(views or {})
        self.submit_view = submit_view
        self.current: Optional[FakeView] = None
        self.keyboard = FakeKeyboard(self)
        self.goto_calls: List[str] = []
        self.waits: List[float] = []
        self.clicks: List[str] = []
        self.typed: List[tuple] = []
        self.pressed: List[str] = []
        self.inner_text_calls = 0
        self._pending: Optional[FakeView] = None

    async def goto(self, url: str, **kwargs) -> None:
        self.goto_calls.append(url)
        view = self.views.get(url)
        if view is None:
            raise PlaywrightTimeout(f"Timeout 45000ms exceeded navigating to {url}")
        self.current = view

    async def wait_for_timeout(self, timeout: float) -> None:
        self.waits.append(timeout)

    def _soup(self) -> BeautifulSoup:
        return BeautifulSoup(self.current.html if self.current else "", "lxml")

    async def query_selector(self, selector: str):
        if self.current is None:
            return None
        soup = self._soup()
        match = _HAS_TEXT_RE.match(selector)
        if match:
            tag, text = match.groups()
            for element in soup.find_all(tag):
                if text in element.get_text():
                    return FakeElement(self, selector)
            return None
        return FakeElement(self, selector) if soup.select_one(selector) else None

    async def content(self) -> str:
        return self.current.html if self.current else ""

    async def inner_text(self, selector: str, **kwargs) -> str:
        self.inner_text_calls += 1
        if self.current is None:
            return ""
        if self.current.text is not None:
            return self.current.text
        body = self._soup().body
        return body.get_text("\n", strip=True) if body else ""

    @asynccontextmanager
    async def expect_navigation(self, **kwargs):
        self._pending = None
        yield
        if self._pending is None:
            raise PlaywrightTimeout("Timeout 45000ms exceeded waiting for navigation")
        self.current = self._pending
        self._pending = None


class FakeSessions:
    """Session factory that counts opens/closes around a fake page."""

    def __init__(self, page: Optional[FakePage] = None, page_factory: Optional[Callable[[], FakePage]] = None):
        self.page = page
        self.page_factory = page_factory
        self.opened = 0
        self.closed = 0
        self.pages: List[FakePage] = []

    def __call__(self):
        return self._session()

    @asynccontextmanager
    async def _session(self):
        self.opened += 1
        page = self.page_factory() if self.page_factory else self.page
        self.pages.append(page)
        try:
            yield page
        finally:
            self.closed += 1


def candidate_urls(term: str, city: str = "milano", region: str = "lombardia") -> List[str]:
    """The navigator's own candidate URLs, in attempt order."""
    navigator = PageNavigator()
    return [url for _, url in navigator.candidate_urls(Query(term, city, region))]


@pytest.fixture()
def config() -> ScraperRunConfig:
    return ScraperRunConfig()


@pytest.fixture()
def navigator(config) -> PageNavigator:
    return PageNavigator(config)

"""
Scrape Pipeline
===============
Chains category lookup → synonym harvest → per-synonym result counts.

Operations:
  - ``synonyms(category, ...)``  normalized, deduplicated, size-limited labels
  - ``count(term, ...)``         result count for one arbitrary term
  - ``scrape(category, ...)``    synonyms, optionally each with its count

Each operation validates input before touching the browser, opens exactly
one browser session for its whole duration and releases it on every exit
path.  Failures leave an operation only as a ``ScraperError``:

  - ``InputError``          missing term/category, no navigation attempted
  - ``NavigationExhausted`` the category/term page could not be reached
  - ``ScrapeFailed``        anything else, with the original message

Inside ``scrape`` a synonym whose page cannot be reached or read is
recorded as ``unknown``; one bad synonym never fails the batch.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Awaitable, Callable, List, Optional, TypeVar

from .browser import BrowserPage, SessionFactory, session_factory
from .counts import CountExtractor
from .errors import InputError, NavigationExhausted, ScrapeFailed, ScraperError
from .models import CountLookup, CountResult, Query, ScrapeItem, ScrapeResult, SynonymsResult
from .navigator import PageNavigator
from .run_config import ScraperRunConfig
from .synonyms import SynonymExtractor, normalize_synonyms

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ScrapePipeline:
    """Request-scoped orchestration over a browser session factory."""

    def __init__(
        self,
        config: Optional[ScraperRunConfig] = None,
        sessions: Optional[SessionFactory] = None,
        navigator: Optional[PageNavigator] = None,
        synonym_extractor: Optional[SynonymExtractor] = None,
        count_extractor: Optional[CountExtractor] = None,
    ):
        self.config = config or ScraperRunConfig()
        self.sessions = sessions or session_factory(self.config)
        self.navigator = navigator or PageNavigator(self.config)
        self.synonym_extractor = synonym_extractor or SynonymExtractor(self.config.site)
        self.count_extractor = count_extractor or CountExtractor(self.config.site)

    # ------------------------------------------------------------------
    # Public operations
    # ------------------------------------------------------------------

    async def synonyms(
        self,
        category: Optional[str],
        city: Optional[str] = None,
        region: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> SynonymsResult:
        query = Query.build(category, city, region, field_name="category")
        limit = self._check_limit(limit)

        async def run(page: BrowserPage) -> SynonymsResult:
            labels = await self._harvest(page, query, limit)
            return SynonymsResult(query.term, query.city, query.region, labels)

        return await self._run("synonyms", query, run)

    async def count(
        self,
        term: Optional[str],
        city: Optional[str] = None,
        region: Optional[str] = None,
    ) -> CountLookup:
        query = Query.build(term, city, region, field_name="term")

        async def run(page: BrowserPage) -> CountLookup:
            await self._reach_or_fail(page, query)
            await page.wait_for_timeout(self.config.count_settle_ms)
            result = await self.count_extractor.extract(page)
            return CountLookup(query.term, query.city, query.region, result)

        return await self._run("count", query, run)

    async def scrape(
        self,
        category: Optional[str],
        city: Optional[str] = None,
        region: Optional[str] = None,
        with_counts: bool = True,
        limit: Optional[int] = None,
    ) -> ScrapeResult:
        query = Query.build(category, city, region, field_name="category")
        limit = self._check_limit(limit)

        async def run(page: BrowserPage) -> ScrapeResult:
            labels = await self._harvest(page, query, limit)
            result = ScrapeResult(query.term, query.city, query.region)
            if not with_counts:
                result.items = [ScrapeItem(label) for label in labels]
                return result
            if self.config.count_concurrency > 1:
                counts = await self._count_parallel(labels, query)
            else:
                counts = [await self._count_item(page, label, query) for label in labels]
            result.items = [ScrapeItem(label, n) for label, n in zip(labels, counts)]
            return result

        return await self._run("scrape", query, run)

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _check_limit(self, limit: Optional[int]) -> int:
        if limit is None:
            return self.config.default_limit
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise InputError("limit must be a positive integer")
        return limit

    async def _reach_or_fail(self, page: BrowserPage, query: Query) -> None:
        outcome = await self.navigator.reach(page, query)
        if not outcome.success:
            raise NavigationExhausted()

    async def _harvest(self, page: BrowserPage, query: Query, limit: int) -> List[str]:
        await self._reach_or_fail(page, query)
        await page.wait_for_timeout(self.config.synonyms_settle_ms)
        raw = await self.synonym_extractor.extract(page)
        labels = normalize_synonyms(raw, limit, self.config.max_label_length)
        logger.info(f"[SYNONYMS] '{query.term}': {len(labels)} synonyms (limit {limit})")
        return labels

    async def _count_item(self, page: BrowserPage, synonym: str, query: Query) -> CountResult:
        """Count for one synonym; any failure degrades to unknown."""
        item_query = Query(f"{synonym} {query.city}", query.city, query.region)
        try:
            outcome = await self.navigator.reach(page, item_query)
            if not outcome.success:
                logger.warning(f"[SCRAPE] '{synonym}' unreachable, recording unknown")
                return CountResult.unknown()
            await page.wait_for_timeout(self.config.item_settle_ms)
            return await self.count_extractor.extract(page)
        except Exception as e:
            logger.warning(f"[SCRAPE] '{synonym}' count failed: {e}")
            return CountResult.unknown()

    async def _count_parallel(self, labels: List[str], query: Query) -> List[CountResult]:
        """One isolated session per synonym, bounded by ``count_concurrency``."""
        semaphore = asyncio.Semaphore(self.config.count_concurrency)

        async def one(label: str) -> CountResult:
            async with semaphore:
                try:
                    async with self.sessions() as item_page:
                        return await self._count_item(item_page, label, query)
                except Exception as e:
                    logger.warning(f"[SCRAPE] '{label}' session failed: {e}")
                    return CountResult.unknown()

        return list(await asyncio.gather(*(one(label) for label in labels)))

    # ------------------------------------------------------------------
    # Operation boundary
    # ------------------------------------------------------------------

    async def _run(
        self,
        operation: str,
        query: Query,
        body: Callable[[BrowserPage], Awaitable[T]],
    ) -> T:
        """Scoped session + error boundary shared by every operation."""
        start = time.monotonic()
        logger.info(f"[{operation.upper()}] '{query.term}' in {query.city}/{query.region}")
        try:
            async with self.sessions() as page:
                result = await body(page)
        except ScraperError:
            raise
        except Exception as e:
            logger.error(f"[{operation.upper()}] '{query.term}' failed: {e}", exc_info=True)
            raise ScrapeFailed(str(e) or type(e).__name__) from e
        logger.info(
            f"[{operation.upper()}] '{query.term}' done in {time.monotonic() - start:.1f}s"
        )
        return result

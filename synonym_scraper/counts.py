"""
Count Extractor
===============
Recovers the number of results from the visible text of a results view.

Patterns are tried in strict priority order on the lowercased body text
and the first one that matches decides the outcome:

  (a) "<digits> risultati"   → exact count (zero when the number is 0)
  (b) "più di <N>"           → lower bound "N+"
  (c) "nessun risultato"     → zero
  (d) nothing recognizable   → unknown
"""

from __future__ import annotations

import logging
from typing import Optional

from .browser import BrowserPage
from .models import CountResult
from .site import PAGINEGIALLE, SiteProfile

logger = logging.getLogger(__name__)


_INLINE_SPACES = " \t\u00a0\u202f"


def strip_grouping(raw: str, separators: str) -> str:
    """Drop digit-grouping characters; in-line spaces count when " " is listed."""
    if " " in separators:
        separators += _INLINE_SPACES
    return "".join(ch for ch in raw if ch not in separators)


def parse_count(text: str, site: SiteProfile = PAGINEGIALLE) -> CountResult:
    """Apply the priority ladder to free text."""
    text = (text or "").lower()

    match = site.exact_count_re.search(text)
    if match:
        digits = strip_grouping(match.group(1), site.grouping_separators)
        if digits.isdecimal():
            return CountResult.exact(int(digits))

    match = site.lower_bound_re.search(text)
    if match:
        return CountResult.lower_bound(match.group(1))

    if site.zero_results_re.search(text):
        return CountResult.zero()

    return CountResult.unknown()


class CountExtractor:
    def __init__(self, site: Optional[SiteProfile] = None):
        self.site = site or PAGINEGIALLE

    async def extract(self, page: BrowserPage) -> CountResult:
        body_text = await page.inner_text("body")
        result = parse_count(body_text, self.site)
        logger.info(f"[COUNT] {result.kind.value} → {result.to_wire()}")
        return result

"""
Synonym Extractor
=================
Harvests short sub-category labels from a loaded results view.

The site's filter markup differs from one category page to the next, so
no single selector is reliable.  Three tiers run over a snapshot of the
page and their output is merged:

  1. Filter boxes   — elements whose class/id mentions "filter"/"filtri"
  2. Taxonomy boxes — sections introduced by headings such as "Tipi di…",
                      "Categorie correlate", "Specialità"
  3. Text fallback  — plain-text scan after a "Tipi di" marker; only runs
                      when tiers 1 and 2 found nothing

The tier functions are pure: they take a parsed DOM or a text string, so
they can be exercised against fixture HTML without a browser.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from bs4 import BeautifulSoup

from .browser import BrowserPage
from .site import PAGINEGIALLE, SiteProfile

logger = logging.getLogger(__name__)

_BS_PARSER = "lxml"

# Elements whose text never reaches the rendered page
_INVISIBLE_TAGS = ('script', 'style', 'noscript', 'template')

_WHITESPACE_RE = re.compile(r"\s+")

MAX_LABEL_LENGTH = 60


@dataclass
class PageSnapshot:
    """Rendered HTML plus visible body text, captured once per extraction."""
    html: str
    body_text: str

    def soup(self) -> BeautifulSoup:
        soup = BeautifulSoup(self.html or "", _BS_PARSER)
        for tag in _INVISIBLE_TAGS:
            for element in soup.find_all(tag):
                element.decompose()
        return soup


# ---------------------------------------------------------------------------
# Label acceptance
# ---------------------------------------------------------------------------

def is_acceptable_label(text: str, site: SiteProfile = PAGINEGIALLE) -> bool:
    """Non-empty, shorter than the label limit, and not UI noise."""
    return bool(text) and len(text) < MAX_LABEL_LENGTH and not site.ui_noise_re.search(text)


def _add(bag: Dict[str, None], text: str, site: SiteProfile) -> None:
    # rendered text collapses whitespace the same way
    text = _WHITESPACE_RE.sub(" ", text).strip()
    if is_acceptable_label(text, site):
        bag.setdefault(text, None)


def _collect_from_box(box, bag: Dict[str, None], site: SiteProfile) -> None:
    if box is None:
        return
    for element in box.select(site.label_selector):
        _add(bag, element.get_text(" ", strip=True), site)


# ---------------------------------------------------------------------------
# Tiers
# ---------------------------------------------------------------------------

def harvest_filter_boxes(soup: BeautifulSoup, site: SiteProfile = PAGINEGIALLE) -> List[str]:
    """Tier 1: labels inside elements whose class/id hints at filters."""
    bag: Dict[str, None] = {}
    for box in soup.select(site.filter_box_selector):
        _collect_from_box(box, bag, site)
    return list(bag)


def harvest_taxonomy_sections(soup: BeautifulSoup, site: SiteProfile = PAGINEGIALLE) -> List[str]:
    """Tier 2: labels from sections introduced by taxonomy headings."""
    bag: Dict[str, None] = {}
    for heading in soup.select(site.heading_selector):
        if not site.taxonomy_heading_re.search(heading.get_text().lower()):
            continue
        if heading.name in site.section_tags:
            container = heading
        else:
            container = heading.find_parent(list(site.section_tags)) or heading.parent
        _collect_from_box(container, bag, site)
    return list(bag)


def harvest_types_marker(body_text: str, site: SiteProfile = PAGINEGIALLE) -> List[str]:
    """Tier 3: split the text that follows a "Tipi di" line into labels."""
    bag: Dict[str, None] = {}
    match = site.types_marker_re.search(body_text or "")
    if match:
        for chunk in site.label_split_re.split(match.group(1)):
            _add(bag, chunk, site)
    return list(bag)


def merge_tiers(*tiers: Iterable[str]) -> List[str]:
    """Ordered set union."""
    bag: Dict[str, None] = {}
    for tier in tiers:
        for label in tier:
            bag.setdefault(label, None)
    return list(bag)


def harvest(snapshot: PageSnapshot, site: SiteProfile = PAGINEGIALLE) -> List[str]:
    """Run all three tiers over one snapshot."""
    soup = snapshot.soup()
    labels = merge_tiers(
        harvest_filter_boxes(soup, site),
        harvest_taxonomy_sections(soup, site),
    )
    if not labels:
        labels = harvest_types_marker(snapshot.body_text, site)
        if labels:
            logger.debug(f"[SYNONYMS] Text fallback produced {len(labels)} labels")
    return labels


# ---------------------------------------------------------------------------
# Normalization (applied by the pipeline)
# ---------------------------------------------------------------------------

def normalize_synonyms(
    labels: Iterable[str],
    limit: int,
    max_length: int = MAX_LABEL_LENGTH,
) -> List[str]:
    """Collapse whitespace, drop empty/over-long, dedupe, keep first ``limit``."""
    seen: Dict[str, None] = {}
    for label in labels:
        text = _WHITESPACE_RE.sub(" ", label or "").strip()
        if text and len(text) <= max_length:
            seen.setdefault(text, None)
    return list(seen)[:max(limit, 0)]


class SynonymExtractor:
    """Snapshots a live page and runs the harvesting tiers over it."""

    def __init__(self, site: Optional[SiteProfile] = None):
        self.site = site or PAGINEGIALLE

    async def snapshot(self, page: BrowserPage) -> PageSnapshot:
        html = await page.content()
        body_text = await page.inner_text("body")
        return PageSnapshot(html=html, body_text=body_text)

    async def extract(self, page: BrowserPage) -> List[str]:
        """Raw labels in harvest order; normalization is the caller's job."""
        labels = harvest(await self.snapshot(page), self.site)
        logger.info(f"[SYNONYMS] Harvested {len(labels)} raw labels")
        return labels

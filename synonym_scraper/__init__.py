"""
Synonym Scraper Package
Sub-category synonyms and result counts for a business category on
paginegialle.it, read from the rendered page with Playwright.

CLI Usage:
    python -m synonym_scraper scrape <category> [city] [region] [options]

    Options:
        --limit         Maximum synonyms (default: 25)
        --no-counts     Skip per-synonym result counts
        --concurrency   Parallel browser sessions for counts (default: 1)
        --output-json   Export items to JSON file
        --output-csv    Export items to CSV file

HTTP Usage:
    python -m synonym_scraper serve --port 3000
"""

from .errors import ScraperError, InputError, NavigationExhausted, ScrapeFailed
from .models import (
    Query,
    NavigationStrategy,
    NavigationOutcome,
    CountKind,
    CountResult,
    ScrapeItem,
    ScrapeResult,
    SynonymsResult,
    CountLookup,
)
from .site import SiteProfile, PAGINEGIALLE
from .run_config import ScraperRunConfig
from .browser import BrowserPage, browser_session, session_factory
from .navigator import PageNavigator, slugify
from .synonyms import SynonymExtractor, normalize_synonyms
from .counts import CountExtractor, parse_count
from .pipeline import ScrapePipeline

__all__ = [
    # Errors
    'ScraperError',
    'InputError',
    'NavigationExhausted',
    'ScrapeFailed',
    # Data model
    'Query',
    'NavigationStrategy',
    'NavigationOutcome',
    'CountKind',
    'CountResult',
    'ScrapeItem',
    'ScrapeResult',
    'SynonymsResult',
    'CountLookup',
    # Configuration
    'SiteProfile',
    'PAGINEGIALLE',
    'ScraperRunConfig',
    # Browser
    'BrowserPage',
    'browser_session',
    'session_factory',
    # Core
    'PageNavigator',
    'slugify',
    'SynonymExtractor',
    'normalize_synonyms',
    'CountExtractor',
    'parse_count',
    'ScrapePipeline',
]

__version__ = '1.0.0'

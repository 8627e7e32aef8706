"""
Unified Run Configuration
=========================
Single source of truth for scraper defaults and runtime limits.

The CLI, the HTTP app and the Streamlit frontend all build a
``ScraperRunConfig``; the browser session, navigator and pipeline read
their timeouts and delays from it.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Optional

from .site import PAGINEGIALLE, SiteProfile

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Canonical defaults: the ONLY place these numbers live
# ---------------------------------------------------------------------------
_DEFAULTS = {
    "headless": True,
    "proxy_url": None,
    "port": 3000,
    "user_agent": (
        "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124 Safari/537.36"
    ),
    "viewport_width": 1366,
    "viewport_height": 900,
    "navigation_timeout_ms": 45000,
    "consent_grace_ms": 400,         # let the consent dialog render before looking for it
    "synonyms_settle_ms": 800,       # dynamic filter boxes render after networkidle
    "count_settle_ms": 500,
    "item_settle_ms": 400,           # per-synonym settle inside scrape
    "default_limit": 25,
    "max_label_length": 60,
    "count_concurrency": 1,          # 1 = sequential on a single page
}

_TRUTHY = {"1", "true", "yes", "on", "new"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip().lower() in _TRUTHY


@dataclass
class ScraperRunConfig:
    """
    Configuration consumed by every scraper subsystem.

    Populate via:
      - ``ScraperRunConfig()``                  → all defaults
      - ``ScraperRunConfig(headless=False)``     → override one value
      - ``ScraperRunConfig.from_env()``          → HEADLESS / PROXY_URL / PORT
      - ``ScraperRunConfig.from_cli_args(ns)``   → from argparse Namespace
    """

    # ---- Browser ----
    headless: bool = _DEFAULTS["headless"]
    proxy_url: Optional[str] = _DEFAULTS["proxy_url"]
    user_agent: str = _DEFAULTS["user_agent"]
    viewport_width: int = _DEFAULTS["viewport_width"]
    viewport_height: int = _DEFAULTS["viewport_height"]

    # ---- HTTP app ----
    port: int = _DEFAULTS["port"]

    # ---- Timing ----
    navigation_timeout_ms: int = _DEFAULTS["navigation_timeout_ms"]
    consent_grace_ms: int = _DEFAULTS["consent_grace_ms"]
    synonyms_settle_ms: int = _DEFAULTS["synonyms_settle_ms"]
    count_settle_ms: int = _DEFAULTS["count_settle_ms"]
    item_settle_ms: int = _DEFAULTS["item_settle_ms"]

    # ---- Extraction ----
    default_limit: int = _DEFAULTS["default_limit"]
    max_label_length: int = _DEFAULTS["max_label_length"]

    # ---- Per-synonym counts ----
    count_concurrency: int = _DEFAULTS["count_concurrency"]

    # ---- Target site ----
    site: SiteProfile = field(default_factory=lambda: PAGINEGIALLE)

    # -----------------------------------------------------------------------
    # Factory helpers
    # -----------------------------------------------------------------------
    @classmethod
    def from_env(cls, **overrides) -> "ScraperRunConfig":
        """Read HEADLESS, PROXY_URL and PORT; keyword overrides win."""
        values = dict(
            headless=_env_bool("HEADLESS", _DEFAULTS["headless"]),
            proxy_url=os.getenv("PROXY_URL") or None,
            port=int(os.getenv("PORT") or _DEFAULTS["port"]),
        )
        values.update(overrides)
        return cls(**values)

    @classmethod
    def from_cli_args(cls, args) -> "ScraperRunConfig":
        """Build config from an argparse Namespace (``__main__.py``)."""
        cfg = cls.from_env()
        if getattr(args, "headed", False):
            cfg.headless = False
        if getattr(args, "proxy", None):
            cfg.proxy_url = args.proxy
        if getattr(args, "timeout", None):
            cfg.navigation_timeout_ms = int(args.timeout * 1000)
        if getattr(args, "concurrency", None):
            cfg.count_concurrency = max(1, args.concurrency)
        if getattr(args, "port", None):
            cfg.port = args.port
        return cfg

    # -----------------------------------------------------------------------
    # Logging helper
    # -----------------------------------------------------------------------
    def log_summary(self, operation: str, term: str) -> None:
        """Emit a structured summary to the logger."""
        logger.info("=" * 60)
        logger.info("SCRAPER RUN CONFIG")
        logger.info("=" * 60)
        logger.info(f"  Operation:        {operation}")
        logger.info(f"  Term:             {term}")
        logger.info(f"  Site:             {self.site.base_url}")
        logger.info(f"  Headless:         {self.headless}")
        logger.info(f"  Nav Timeout:      {self.navigation_timeout_ms}ms")
        logger.info(f"  Count Workers:    {self.count_concurrency}")
        if self.proxy_url:
            logger.info(f"  Proxy:            configured")
        logger.info("=" * 60)

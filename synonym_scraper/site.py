"""
Site Profile
============
Every URL template, selector and text pattern that ties the scraper to
paginegialle.it lives here, so the navigation and extraction code reads
the same regardless of the markup it is pointed at.

Patterns are Italian because the target site is.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Tuple


def _ci(pattern: str) -> re.Pattern:
    return re.compile(pattern, re.IGNORECASE)


@dataclass(frozen=True)
class SiteProfile:
    """Site-specific catalogue consumed by navigator and extractors."""

    base_url: str = "https://www.paginegialle.it"

    # ---- Candidate URLs (tried in this order) ----
    search_url_template: str = "{base}/ricerca/{term}/{city}"
    slug_url_template: str = "{base}/{region}/{city}/{slug}.html"
    bare_search_url_template: str = "{base}/ricerca/{term}"

    # ---- Results-page probe ----
    results_probe_selector: str = "h1, [class*=risultat], [id*=risultat]"

    # ---- Consent overlay ----
    consent_button_texts: Tuple[str, ...] = ("Accetta", "Accetto", "Accept", "Consenti")

    # ---- Homepage search form (apostrophe variants included) ----
    what_input_selectors: Tuple[str, ...] = (
        'input[placeholder="Inserisci il nome dell’attività"]',
        'input[placeholder="Inserisci il nome dell\'attività"]',
        'input[aria-label*="attività"]',
    )
    where_input_selectors: Tuple[str, ...] = (
        'input[placeholder="Inserisci l\'indirizzo"]',
        'input[placeholder="Inserisci l’indirizzo"]',
        'input[aria-label*="indirizzo"]',
        'input[aria-label*="dove"]',
    )
    submit_key: str = "Enter"

    # ---- Synonym harvesting ----
    filter_box_selector: str = "[class*=filter], [class*=filtri], [id*=filter]"
    label_selector: str = "a, button, span, li"
    heading_selector: str = "h2, h3, h4, strong, [role=heading]"
    section_tags: Tuple[str, ...] = ("section", "div", "aside")
    taxonomy_heading_re: re.Pattern = field(
        default_factory=lambda: _ci(
            r"tipi di|categorie correlate|categorie simili|specialit|prodotti|settori"
        )
    )
    types_marker_re: re.Pattern = field(
        default_factory=lambda: _ci(r"Tipi di[^\n]*\n([\s\S]{0,600})")
    )
    label_split_re: re.Pattern = field(default_factory=lambda: re.compile(r"\s{2,}|\n"))
    ui_noise_re: re.Pattern = field(
        default_factory=lambda: _ci(
            r"prenota|aperto|chiuso|ordina|distanza|filtri|mappa|recensioni"
        )
    )

    # ---- Result counts (applied to lowercased body text) ----
    exact_count_re: re.Pattern = field(
        default_factory=lambda: re.compile(r"(\d[\d. \t\u00a0\u202f]*)[ \t\u00a0\u202f]+risultat")
    )
    lower_bound_re: re.Pattern = field(
        default_factory=lambda: re.compile(r"pi[uù]\s+di\s+(\d+)")
    )
    zero_results_re: re.Pattern = field(
        default_factory=lambda: re.compile(r"nessun risultato|0 risultati")
    )
    # European digit grouping: "1.234" and "1 234" both mean 1234.
    # Horizontal whitespace (incl. no-break spaces) counts when " " is listed;
    # a line break never joins two numbers.
    grouping_separators: str = ". "

    @property
    def homepage_url(self) -> str:
        return self.base_url


PAGINEGIALLE = SiteProfile()

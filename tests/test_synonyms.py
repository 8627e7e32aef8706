"""
Tests for synonyms.py: the three harvesting tiers, label acceptance and
pipeline-side normalization.
"""

import asyncio

import pytest
from bs4 import BeautifulSoup

from synonym_scraper.site import PAGINEGIALLE
from synonym_scraper.synonyms import (
    PageSnapshot,
    SynonymExtractor,
    harvest,
    harvest_filter_boxes,
    harvest_taxonomy_sections,
    harvest_types_marker,
    is_acceptable_label,
    merge_tiers,
    normalize_synonyms,
)

from conftest import RESULTS_HTML, FakePage, FakeView


def _soup(html: str) -> BeautifulSoup:
    return PageSnapshot(html=html, body_text="").soup()


TAXONOMY_HTML = """
<html><body>
  <section>
    <h3>Tipi di ristoranti</h3>
    <ul><li>Sushi</li><li>Steakhouse</li></ul>
  </section>
  <div>
    <strong>Specialità</strong>
    <span>Cucina lombarda</span>
  </div>
  <div role="heading">Categorie correlate <a>Catering</a></div>
  <section>
    <h2>Orari</h2>
    <ul><li>Lunedì</li></ul>
  </section>
</body></html>
"""


# ====================================================================
# Label acceptance
# ====================================================================

class TestAcceptance:

    @pytest.mark.parametrize("label", [
        "Prenota un tavolo", "Aperto ora", "Chiuso", "Ordina per", "Distanza",
        "Filtri", "Mappa", "Recensioni", "MAPPA",
    ])
    def test_ui_noise_rejected(self, label):
        assert not is_acceptable_label(label)

    def test_empty_and_long_rejected(self):
        assert not is_acceptable_label("")
        assert not is_acceptable_label("x" * 60)
        assert is_acceptable_label("x" * 59)

    def test_plain_label_accepted(self):
        assert is_acceptable_label("Trattoria")


# ====================================================================
# Tier 1: filter boxes
# ====================================================================

class TestFilterBoxes:

    def test_labels_from_filter_class(self):
        labels = harvest_filter_boxes(_soup(RESULTS_HTML))
        assert labels == ["Pizzeria", "Trattoria", "Ristoranti etnici"]

    def test_filter_id_and_filtri_class(self):
        html = """
        <div id="filterPanel"><a>Enoteca</a></div>
        <aside class="box-filtri"><span>Vineria</span><button>Filtri</button></aside>
        """
        assert harvest_filter_boxes(_soup(html)) == ["Enoteca", "Vineria"]

    def test_script_text_ignored(self):
        html = '<div class="filters"><span>Bar</span><script>var a = "<span>x</span>";</script></div>'
        assert harvest_filter_boxes(_soup(html)) == ["Bar"]

    def test_no_filter_boxes(self):
        assert harvest_filter_boxes(_soup("<p>niente</p>")) == []


# ====================================================================
# Tier 2: taxonomy sections
# ====================================================================

class TestTaxonomySections:

    def test_heading_sections(self):
        labels = harvest_taxonomy_sections(_soup(TAXONOMY_HTML))
        assert "Sushi" in labels
        assert "Steakhouse" in labels
        assert "Cucina lombarda" in labels
        assert "Catering" in labels

    def test_unrelated_headings_ignored(self):
        labels = harvest_taxonomy_sections(_soup(TAXONOMY_HTML))
        assert "Lunedì" not in labels


# ====================================================================
# Tier 3: text fallback
# ====================================================================

class TestTypesMarker:

    def test_splits_on_newlines_and_wide_gaps(self):
        text = "Risultati\nTipi di ristorante\nPizzeria   Trattoria\nSushi\n\nMappa"
        assert harvest_types_marker(text) == ["Pizzeria", "Trattoria", "Sushi"]

    def test_marker_is_case_insensitive(self):
        assert harvest_types_marker("TIPI DI bar\nBar tabacchi") == ["Bar tabacchi"]

    def test_window_is_bounded(self):
        text = "Tipi di bar\n" + "a" * 600 + "\nLontano"
        assert "Lontano" not in harvest_types_marker(text)

    def test_no_marker(self):
        assert harvest_types_marker("nessuna sezione") == []


# ====================================================================
# Tier composition
# ====================================================================

class TestHarvest:

    def test_tiers_one_and_two_merge(self):
        html = RESULTS_HTML.replace("</body>", TAXONOMY_HTML.split("<body>")[1])
        labels = harvest(PageSnapshot(html=html, body_text=""))
        assert labels[:3] == ["Pizzeria", "Trattoria", "Ristoranti etnici"]
        assert "Sushi" in labels

    def test_text_fallback_only_when_dom_tiers_empty(self):
        text = "Tipi di ristorante\nFusion"
        with_boxes = harvest(PageSnapshot(html=RESULTS_HTML, body_text=text))
        assert "Fusion" not in with_boxes
        without_boxes = harvest(PageSnapshot(html="<p>vuoto</p>", body_text=text))
        assert without_boxes == ["Fusion"]

    def test_merge_keeps_first_seen_order(self):
        assert merge_tiers(["b", "a"], ["a", "c"]) == ["b", "a", "c"]

    def test_every_label_respects_invariant(self):
        labels = harvest(PageSnapshot(html=RESULTS_HTML + TAXONOMY_HTML, body_text=""))
        for label in labels:
            assert 0 < len(label) < 60
            assert not PAGINEGIALLE.ui_noise_re.search(label)


# ====================================================================
# Normalization
# ====================================================================

class TestNormalize:

    def test_dedupe_and_limit(self):
        raw = ["A", "B", "A", "C", "B", "D", "E"]
        assert normalize_synonyms(raw, 3) == ["A", "B", "C"]

    def test_limit_larger_than_distinct(self):
        raw = ["A", "B", "A"]
        assert normalize_synonyms(raw, 25) == ["A", "B"]

    def test_size_is_min_of_limit_and_distinct(self):
        raw = [f"label {i % 7}" for i in range(40)]
        for limit in (1, 5, 7, 30):
            assert len(normalize_synonyms(raw, limit)) == min(limit, 7)

    def test_whitespace_collapsed_before_dedupe(self):
        raw = ["Ristoranti   etnici", " Ristoranti etnici ", "Ristoranti\netnici"]
        assert normalize_synonyms(raw, 10) == ["Ristoranti etnici"]

    def test_case_preserved(self):
        assert normalize_synonyms(["Pizzeria", "pizzeria"], 10) == ["Pizzeria", "pizzeria"]

    def test_overlong_and_empty_dropped(self):
        raw = ["", "   ", "y" * 61, "y" * 60]
        assert normalize_synonyms(raw, 10) == ["y" * 60]


# ====================================================================
# Extractor over a page
# ====================================================================

class TestSynonymExtractor:

    def test_extract_from_page(self):
        page = FakePage()
        page.current = FakeView(RESULTS_HTML)
        labels = asyncio.run(SynonymExtractor().extract(page))
        assert labels == ["Pizzeria", "Trattoria", "Ristoranti etnici"]

    def test_extract_uses_body_text_fallback(self):
        page = FakePage()
        page.current = FakeView("<html><body></body></html>", text="Tipi di bar\nBar tabacchi")
        assert asyncio.run(SynonymExtractor().extract(page)) == ["Bar tabacchi"]

"""
Synonym Scraper - Streamlit Frontend
Browse the sub-categories paginegialle.it lists for a category, with
result counts, and download them as JSON or CSV.
"""

import streamlit as st
import pandas as pd
import asyncio
import json
import logging
import subprocess
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()


# Install Playwright browsers on first run (for Streamlit Cloud)
@st.cache_resource
def install_playwright_browsers():
    """Install Playwright Chromium browser on first run."""
    try:
        # Check if browsers are already installed
        from playwright.sync_api import sync_playwright
        with sync_playwright() as p:
            try:
                browser = p.chromium.launch(headless=True)
                browser.close()
                return True
            except Exception:
                pass

        result = subprocess.run(
            ["playwright", "install", "chromium"],
            capture_output=True,
            text=True,
            timeout=300
        )
        return result.returncode == 0
    except Exception:
        return False


_playwright_available = install_playwright_browsers()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

from synonym_scraper.errors import ScraperError
from synonym_scraper.models import DEFAULT_CITY, DEFAULT_REGION, ScrapeResult
from synonym_scraper.pipeline import ScrapePipeline
from synonym_scraper.run_config import ScraperRunConfig

# Page configuration
st.set_page_config(
    page_title="Synonym Scraper",
    page_icon="📒",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .main-header {
        font-size: 2.5rem;
        font-weight: 700;
        color: #1E293B;
        margin-bottom: 0.5rem;
    }
    .sub-header {
        font-size: 1rem;
        color: #64748B;
        margin-bottom: 2rem;
    }
    [data-testid="stMetric"] {
        background-color: #F8F9FB;
        border: 1px solid #E2E8F0;
        border-radius: 10px;
        padding: 0.75rem;
    }
</style>
""", unsafe_allow_html=True)


def init_session_state():
    """Initialize session state variables."""
    if 'scrape_running' not in st.session_state:
        st.session_state.scrape_running = False
    if 'scrape_result' not in st.session_state:
        st.session_state.scrape_result = None
    if 'scrape_logs' not in st.session_state:
        st.session_state.scrape_logs = []


def add_log(message: str):
    """Add a log message."""
    timestamp = datetime.now().strftime("%H:%M:%S")
    st.session_state.scrape_logs.append(f"[{timestamp}] {message}")
    if len(st.session_state.scrape_logs) > 100:
        st.session_state.scrape_logs = st.session_state.scrape_logs[-100:]


def run_scrape(category: str, config: dict) -> ScrapeResult:
    """Run the full pipeline with the sidebar settings."""
    run_cfg = ScraperRunConfig.from_env(
        headless=config['headless'],
        count_concurrency=config['concurrency'],
    )
    pipeline = ScrapePipeline(run_cfg)
    return asyncio.run(pipeline.scrape(
        category,
        config['city'],
        config['region'],
        with_counts=config['with_counts'],
        limit=config['limit'],
    ))


def export_to_json(result: ScrapeResult) -> str:
    """Export result to JSON string."""
    data = result.to_dict()
    data['exported_at'] = datetime.now().isoformat()
    return json.dumps(data, indent=2, ensure_ascii=False)


def export_to_csv(result: ScrapeResult) -> str:
    """Export result to CSV string."""
    rows = result.to_flat_rows()
    if not rows:
        return ""
    return pd.DataFrame(rows).to_csv(index=False)


def render_sidebar() -> dict:
    """Render the sidebar with configuration options."""
    st.sidebar.markdown("## ⚙️ Settings")

    city = st.sidebar.text_input("City", value=DEFAULT_CITY)
    region = st.sidebar.text_input("Region", value=DEFAULT_REGION)
    limit = st.sidebar.number_input(
        "Max Synonyms",
        min_value=1,
        max_value=100,
        value=25,
        help="Maximum number of synonyms to keep"
    )
    with_counts = st.sidebar.checkbox(
        "Fetch result counts",
        value=True,
        help="Visit each synonym's results page and read its result count"
    )
    concurrency = st.sidebar.number_input(
        "Parallel sessions",
        min_value=1,
        max_value=6,
        value=1,
        help="Browser sessions used for counts (1 = one page, sequential)",
        disabled=not with_counts
    )
    headless = st.sidebar.checkbox("Headless browser", value=True)

    return {
        'city': city,
        'region': region,
        'limit': int(limit),
        'with_counts': with_counts,
        'concurrency': int(concurrency),
        'headless': headless,
    }


def render_results(result: ScrapeResult):
    """Render results table and downloads."""
    st.markdown("## 📊 Results")

    rows = result.to_flat_rows()
    col1, col2, col3 = st.columns(3)
    col1.metric("Synonyms", len(rows))
    col2.metric("City", result.city)
    col3.metric("Region", result.region)

    if not rows:
        st.warning("No synonyms found for this category.")
        return

    st.dataframe(pd.DataFrame(rows), use_container_width=True, hide_index=True)

    base_name = f"{result.category}_{result.city}".replace(" ", "_")
    dl1, dl2 = st.columns(2)
    with dl1:
        st.download_button(
            "📥 Download JSON",
            data=export_to_json(result),
            file_name=f"{base_name}.json",
            mime="application/json"
        )
    with dl2:
        st.download_button(
            "📥 Download CSV",
            data=export_to_csv(result),
            file_name=f"{base_name}.csv",
            mime="text/csv"
        )


def main():
    """Main application."""
    init_session_state()

    st.markdown('<p class="main-header">📒 Synonym Scraper</p>', unsafe_allow_html=True)
    st.markdown(
        '<p class="sub-header">Sub-categories and result counts from paginegialle.it</p>',
        unsafe_allow_html=True
    )

    if not _playwright_available:
        st.warning("Chromium could not be installed, scraping will likely fail.")

    config = render_sidebar()

    col1, col2 = st.columns([4, 1])
    with col1:
        category = st.text_input(
            "Category",
            placeholder="ristoranti",
            help="Business category to expand",
            label_visibility="collapsed"
        )
    with col2:
        scrape_button = st.button(
            "🚀 Scrape",
            type="primary",
            disabled=st.session_state.scrape_running
        )

    if scrape_button:
        if not category or not category.strip():
            st.error("Please enter a category")
        else:
            st.session_state.scrape_running = True
            st.session_state.scrape_result = None
            add_log(f"Scraping '{category}' in {config['city']}/{config['region']}")
            try:
                with st.spinner("Scraping in progress..."):
                    result = run_scrape(category, config)
                st.session_state.scrape_result = result
                add_log(f"Done: {len(result.items)} synonyms")
            except ScraperError as e:
                st.error(f"Scrape failed: {e.message}")
                add_log(f"Error: {e.message}")
            finally:
                st.session_state.scrape_running = False

    if st.session_state.scrape_result:
        render_results(st.session_state.scrape_result)

    if st.session_state.scrape_logs:
        with st.expander("📋 Logs", expanded=False):
            st.code("\n".join(st.session_state.scrape_logs[-50:]), language=None)


if __name__ == "__main__":
    main()

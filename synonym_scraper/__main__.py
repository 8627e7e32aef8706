#!/usr/bin/env python3
"""
Command-line entry point
========================
Run with: python -m synonym_scraper <command> ...

    scrape   <category> [city] [region]   synonyms + result counts (JSON list)
    synonyms <category> [city] [region]   synonyms only
    count    <term>     [city] [region]   result count for one term
    serve                                 start the HTTP app

Results go to stdout as JSON, logs go to stderr.  On failure a JSON
``{"error": ...}`` object is written to stderr and the process exits with
status 2 (status 1 for missing input).
"""

import argparse
import asyncio
import csv
import json
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

from .errors import InputError, ScraperError
from .models import DEFAULT_CITY, DEFAULT_REGION
from .pipeline import ScrapePipeline
from .run_config import ScraperRunConfig

# Load .env file (HEADLESS, PROXY_URL, PORT) before anything else
_env_path = Path(__file__).resolve().parent.parent / '.env'
if _env_path.exists():
    load_dotenv(_env_path)
else:
    load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s | %(levelname)s | %(message)s',
    datefmt='%H:%M:%S'
)
logger = logging.getLogger(__name__)

EXIT_USAGE = 1
EXIT_FAILURE = 2


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------

def _emit(data) -> None:
    print(json.dumps(data, ensure_ascii=False))


def _emit_error(message: str) -> None:
    print(json.dumps({'error': message}, ensure_ascii=False), file=sys.stderr)


def _export_json(rows, filepath: str) -> str:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(rows, f, indent=2, ensure_ascii=False)
    return str(path.absolute())


def _export_csv(rows, filepath: str) -> str:
    path = Path(filepath)
    path.parent.mkdir(parents=True, exist_ok=True)
    fieldnames = ['category', 'synonym', 'results']
    with open(path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()
        writer.writerows(rows)
    return str(path.absolute())


# ---------------------------------------------------------------------------
# Commands
# ---------------------------------------------------------------------------

async def _run_scrape(pipeline: ScrapePipeline, args) -> list:
    result = await pipeline.scrape(
        args.term, args.city, args.region,
        with_counts=not args.no_counts,
        limit=args.limit,
    )
    rows = result.to_flat_rows()
    if args.no_counts:
        rows = [{'category': r['category'], 'synonym': r['synonym']} for r in rows]
    if args.output_json:
        logger.info(f"Exported: {_export_json(rows, args.output_json)}")
    if args.output_csv:
        logger.info(f"Exported: {_export_csv(rows, args.output_csv)}")
    return rows


async def _run_synonyms(pipeline: ScrapePipeline, args) -> dict:
    result = await pipeline.synonyms(args.term, args.city, args.region, args.limit)
    return result.to_dict()


async def _run_count(pipeline: ScrapePipeline, args) -> dict:
    result = await pipeline.count(args.term, args.city, args.region)
    return result.to_dict()


_COMMANDS = {
    'scrape': _run_scrape,
    'synonyms': _run_synonyms,
    'count': _run_count,
}


def _serve(cfg: ScraperRunConfig, host: str) -> int:
    import uvicorn

    uvicorn.run("synonym_scraper.api:app", host=host, port=cfg.port)
    return 0


# ---------------------------------------------------------------------------
# Argument parsing
# ---------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='python -m synonym_scraper',
        description='Sub-category synonyms and result counts from paginegialle.it',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m synonym_scraper scrape ristoranti
  python -m synonym_scraper scrape "idraulici" torino piemonte --limit 10
  python -m synonym_scraper scrape ristoranti --no-counts --output-csv out.csv
  python -m synonym_scraper count "pizzeria milano"
  python -m synonym_scraper serve --port 3000
        """
    )
    sub = parser.add_subparsers(dest='command')

    for name, help_text, term_help in (
        ('scrape', 'Synonyms plus a result count for each', 'Category to expand'),
        ('synonyms', 'Synonyms only', 'Category to expand'),
        ('count', 'Result count for one term', 'Search term'),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument('term', nargs='?', help=term_help)
        cmd.add_argument('city', nargs='?', default=DEFAULT_CITY, help=f'City (default: {DEFAULT_CITY})')
        cmd.add_argument('region', nargs='?', default=DEFAULT_REGION, help=f'Region (default: {DEFAULT_REGION})')
        cmd.add_argument('--timeout', type=float, help='Navigation timeout in seconds (default: 45)')
        cmd.add_argument('--headed', action='store_true', help='Show the browser window')
        cmd.add_argument('--proxy', type=str, help='Proxy server URL (or set PROXY_URL)')
        if name != 'count':
            cmd.add_argument('--limit', type=int, default=None, help='Maximum synonyms (default: 25)')
        if name == 'scrape':
            cmd.add_argument('--no-counts', action='store_true', help='Skip per-synonym result counts')
            cmd.add_argument('--concurrency', type=int, help='Parallel browser sessions for counts (default: 1)')
            cmd.add_argument('--output-json', type=str, help='Also write the item list to this JSON file')
            cmd.add_argument('--output-csv', type=str, help='Also write the item list to this CSV file')

    serve = sub.add_parser('serve', help='Run the HTTP API')
    serve.add_argument('--host', type=str, default='0.0.0.0', help='Bind address (default: 0.0.0.0)')
    serve.add_argument('--port', type=int, help='Port (default: PORT env or 3000)')
    return parser


def main(argv=None, pipeline: ScrapePipeline = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    cfg = ScraperRunConfig.from_cli_args(args)
    if args.command == 'serve':
        return _serve(cfg, args.host)

    if not args.term:
        label = 'term' if args.command == 'count' else 'category'
        print(f'Usage: python -m synonym_scraper {args.command} "<{label}>" [city] [region]', file=sys.stderr)
        return EXIT_USAGE

    cfg.log_summary(args.command, args.term)
    pipeline = pipeline or ScrapePipeline(cfg)
    try:
        data = asyncio.run(_COMMANDS[args.command](pipeline, args))
    except InputError as e:
        _emit_error(e.message)
        return EXIT_USAGE
    except ScraperError as e:
        _emit_error(e.message)
        return EXIT_FAILURE
    _emit(data)
    return 0


if __name__ == '__main__':
    sys.exit(main())

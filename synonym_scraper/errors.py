"""
Scraper Errors
==============
Failure taxonomy shared by the pipeline, the HTTP app and the CLI.

A page without a recognizable pattern is not an error: it yields an empty
synonym list or an ``unknown`` count.
"""

from __future__ import annotations


class ScraperError(Exception):
    """Base class for every failure an operation reports to its caller."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InputError(ScraperError):
    """A required field is missing or invalid. Raised before any browser work."""

    status_code = 400


class NavigationExhausted(ScraperError):
    """Every candidate URL and the search-form fallback failed."""

    def __init__(self, message: str = "cannot reach results page"):
        super().__init__(message)


class ScrapeFailed(ScraperError):
    """Any other runtime fault caught at the top of an operation."""

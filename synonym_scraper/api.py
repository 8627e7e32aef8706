"""
synonym_scraper/api.py

HTTP boundary over ``ScrapePipeline``.

Every endpoint maps one pipeline operation; failures come back as
``{"error": "<message>"}`` with 400 for input problems and 500 otherwise.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Optional

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .errors import ScraperError
from .pipeline import ScrapePipeline
from .run_config import ScraperRunConfig
from .schemas import (
    CountRequest,
    CountResponse,
    ErrorResponse,
    HealthResponse,
    ScrapeRequest,
    ScrapeResponse,
    SynonymsRequest,
    SynonymsResponse,
)

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {"model": ErrorResponse},
    status.HTTP_500_INTERNAL_SERVER_ERROR: {"model": ErrorResponse},
}


@lru_cache(maxsize=1)
def get_pipeline() -> ScrapePipeline:
    """Process-wide pipeline; it holds config only, sessions are per call."""
    return ScrapePipeline(ScraperRunConfig.from_env())


app = FastAPI(title="synonym-scraper")


@app.exception_handler(ScraperError)
async def _scraper_error_handler(_request: Request, exc: ScraperError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


@app.exception_handler(RequestValidationError)
async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = exc.errors()
    if errors:
        first = errors[0]
        where = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
        message = f"{where}: {first.get('msg', 'invalid')}" if where else first.get("msg", "invalid")
    else:
        message = "invalid request"
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": message})


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(ok=True)


@app.post("/synonyms", response_model=SynonymsResponse, responses=_ERROR_RESPONSES)
async def synonyms(
    payload: Optional[SynonymsRequest] = None,
    pipeline: ScrapePipeline = Depends(get_pipeline),
) -> SynonymsResponse:
    """Sub-category labels the site lists for a category."""
    payload = payload or SynonymsRequest()
    result = await pipeline.synonyms(
        payload.category, payload.city, payload.region, payload.limit
    )
    return SynonymsResponse(**result.to_dict())


@app.post("/count", response_model=CountResponse, responses=_ERROR_RESPONSES)
async def count(
    payload: Optional[CountRequest] = None,
    pipeline: ScrapePipeline = Depends(get_pipeline),
) -> CountResponse:
    """Approximate number of results for one term."""
    payload = payload or CountRequest()
    result = await pipeline.count(payload.term, payload.city, payload.region)
    return CountResponse(**result.to_dict())


@app.post(
    "/scrape",
    response_model=ScrapeResponse,
    response_model_exclude_none=True,
    responses=_ERROR_RESPONSES,
)
async def scrape(
    payload: Optional[ScrapeRequest] = None,
    pipeline: ScrapePipeline = Depends(get_pipeline),
) -> ScrapeResponse:
    """Category → synonyms → (optionally) a count for each synonym."""
    payload = payload or ScrapeRequest()
    result = await pipeline.scrape(
        payload.category,
        payload.city,
        payload.region,
        with_counts=payload.with_counts,
        limit=payload.limit,
    )
    return ScrapeResponse(**result.to_dict())

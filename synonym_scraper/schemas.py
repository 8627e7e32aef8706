"""
synonym_scraper/schemas.py

Request and response schemas for the HTTP app.
"""

from __future__ import annotations

from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class SynonymsRequest(BaseModel):
    category: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    limit: Optional[int] = None


class CountRequest(BaseModel):
    term: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None


class ScrapeRequest(BaseModel):
    """
    Full-flow request. ``withCounts`` is the wire name; ``with_counts``
    is accepted too.
    """

    model_config = ConfigDict(populate_by_name=True)

    category: Optional[str] = None
    city: Optional[str] = None
    region: Optional[str] = None
    with_counts: bool = Field(default=True, alias="withCounts")
    limit: Optional[int] = None


class SynonymsResponse(BaseModel):
    category: str
    city: str
    region: str
    count: int = Field(..., ge=0)
    synonyms: List[str] = Field(default_factory=list)


class CountResponse(BaseModel):
    term: str
    city: str
    region: str
    results: Union[int, str]


class ScrapeItemResponse(BaseModel):
    synonym: str
    results: Optional[Union[int, str]] = None


class ScrapeResponse(BaseModel):
    category: str
    city: str
    region: str
    items: List[ScrapeItemResponse] = Field(default_factory=list)


class HealthResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    error: str

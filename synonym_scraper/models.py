"""
Request-scoped data model.

Every object here is created at the start of a pipeline call and dropped
at its end; nothing is persisted across requests.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Union

from .errors import InputError

DEFAULT_CITY = "milano"
DEFAULT_REGION = "lombardia"
UNKNOWN = "unknown"

WireCount = Union[int, str]


@dataclass(frozen=True)
class Query:
    """Search term plus location, validated once per invocation."""
    term: str
    city: str = DEFAULT_CITY
    region: str = DEFAULT_REGION

    @classmethod
    def build(
        cls,
        term: Optional[str],
        city: Optional[str] = None,
        region: Optional[str] = None,
        field_name: str = "term",
    ) -> "Query":
        """Validate raw input; blank city/region fall back to the defaults."""
        term = (term or "").strip()
        if not term:
            raise InputError(f"{field_name} is required")
        return cls(
            term=term,
            city=(city or "").strip() or DEFAULT_CITY,
            region=(region or "").strip() or DEFAULT_REGION,
        )


class NavigationStrategy(str, Enum):
    DIRECT_SEARCH_URL = "direct_search_url"
    SLUG_URL = "slug_url"
    BARE_SEARCH_URL = "bare_search_url"
    FORM_SUBMISSION = "form_submission"
    NONE = "none"


@dataclass(frozen=True)
class NavigationOutcome:
    success: bool
    strategy: NavigationStrategy = NavigationStrategy.NONE
    url: str = ""

    @classmethod
    def failed(cls, strategy: NavigationStrategy = NavigationStrategy.NONE, url: str = "") -> "NavigationOutcome":
        return cls(success=False, strategy=strategy, url=url)


class CountKind(str, Enum):
    EXACT = "exact"
    LOWER_BOUND = "lower_bound"
    ZERO = "zero"
    UNKNOWN = "unknown"


@dataclass(frozen=True)
class CountResult:
    """
    Tagged result count.

    ``EXACT`` carries a positive int, ``LOWER_BOUND`` a string like "50+".
    ``ZERO`` and ``UNKNOWN`` carry nothing.
    """
    kind: CountKind
    value: Optional[WireCount] = None

    @classmethod
    def exact(cls, n: int) -> "CountResult":
        if n == 0:
            return cls.zero()
        return cls(CountKind.EXACT, n)

    @classmethod
    def lower_bound(cls, n: Union[int, str]) -> "CountResult":
        return cls(CountKind.LOWER_BOUND, f"{n}+")

    @classmethod
    def zero(cls) -> "CountResult":
        return cls(CountKind.ZERO)

    @classmethod
    def unknown(cls) -> "CountResult":
        return cls(CountKind.UNKNOWN)

    def to_wire(self) -> WireCount:
        """Boundary form: int, "N+", 0 or "unknown"."""
        if self.kind is CountKind.ZERO:
            return 0
        if self.kind is CountKind.UNKNOWN:
            return UNKNOWN
        return self.value


@dataclass
class ScrapeItem:
    synonym: str
    results: Optional[CountResult] = None

    def to_dict(self) -> dict:
        if self.results is None:
            return {'synonym': self.synonym}
        return {'synonym': self.synonym, 'results': self.results.to_wire()}


@dataclass
class SynonymsResult:
    category: str
    city: str
    region: str
    synonyms: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.synonyms)

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'city': self.city,
            'region': self.region,
            'count': self.count,
            'synonyms': list(self.synonyms),
        }


@dataclass
class CountLookup:
    term: str
    city: str
    region: str
    results: CountResult = field(default_factory=CountResult.unknown)

    def to_dict(self) -> dict:
        return {
            'term': self.term,
            'city': self.city,
            'region': self.region,
            'results': self.results.to_wire(),
        }


@dataclass
class ScrapeResult:
    category: str
    city: str
    region: str
    items: List[ScrapeItem] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'category': self.category,
            'city': self.city,
            'region': self.region,
            'items': [item.to_dict() for item in self.items],
        }

    def to_flat_rows(self) -> List[dict]:
        """One row per synonym, for CSV export and tables."""
        return [
            {
                'category': self.category,
                'synonym': item.synonym,
                'results': item.results.to_wire() if item.results is not None else None,
            }
            for item in self.items
        ]

"""Rule-based natural-language query parser for company search.

Turns free text like "ashwagandha exporters in gujarat" into structured
search filters: keywords, entity type, location and certifications. The
parser is purely functional; every call builds a fresh ParsedQuery.
"""
from __future__ import annotations

import logging
import re
from dataclasses import asdict, dataclass, field, replace
from enum import Enum
from functools import lru_cache

from rapidfuzz import fuzz, process

from config.search_vocabulary import (
    CERTIFICATION_KEYWORDS,
    ENTITY_KEYWORDS,
    ENTITY_PHRASES,
    EXPLICIT_ENTITY_WORDS,
    EXPORTER_TERMS,
    INDIAN_CITIES,
    INDIAN_STATES,
    INTENT_KEYWORDS,
    PRODUCT_KEYWORDS,
    STOP_WORDS,
)

from .config import settings
from .pipelines.normalization import normalize_query, tokenize

logger = logging.getLogger(__name__)


class Intent(str, Enum):
    """What the user wants to do with the results."""
    SEARCH = "search"
    COMPARE = "compare"
    VERIFY = "verify"
    CONTACT = "contact"


@dataclass
class ParsedQuery:
    """Structured reading of a free-text query."""
    entity_types: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)
    certifications: list[str] = field(default_factory=list)
    products: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    employee_size: str | None = None
    min_year_established: int | None = None
    intent: Intent = Intent.SEARCH
    exporter: bool = False
    source: str = "rules"  # rules, ai

    def to_dict(self) -> dict:
        data = asdict(self)
        data["intent"] = self.intent.value
        return data


@dataclass
class SearchFilters:
    """Database-facing filters derived from a ParsedQuery."""
    keywords: list[str] = field(default_factory=list)
    entity_type: str | None = None
    location: str | None = None
    certifications: list[str] = field(default_factory=list)
    exporter: bool = False

    @property
    def is_empty(self) -> bool:
        return not (
            self.keywords or self.entity_type or self.location
            or self.certifications or self.exporter
        )


def _add_unique(values: list[str], value: str) -> None:
    if value not in values:
        values.append(value)


def _contains_phrase(text: str, phrase: str) -> bool:
    return re.search(rf"\b{re.escape(phrase)}\b", text) is not None


class QueryParser:
    """Keyword-dictionary and gazetteer driven query parser.

    Supports:
    - Multi-word locations and entity phrases
    - Entity, certification, product and intent keywords
    - Stop word and numeric token filtering
    - Fuzzy location matching via rapidfuzz for common misspellings
    """

    def __init__(
        self,
        *,
        states: list[str] | None = None,
        cities: list[str] | None = None,
        fuzzy_threshold: int | None = None,
        min_keyword_length: int | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            states: State gazetteer. Defaults to the Indian states list.
            cities: City gazetteer. Defaults to the Indian cities list.
            fuzzy_threshold: Rapidfuzz ratio needed to accept a misspelt location
            min_keyword_length: Shortest token kept as a free keyword
        """
        self.states = states if states is not None else INDIAN_STATES
        self.cities = cities if cities is not None else INDIAN_CITIES
        self.fuzzy_threshold = (
            fuzzy_threshold if fuzzy_threshold is not None else settings.search.fuzzy_threshold
        )
        self.min_keyword_length = (
            min_keyword_length if min_keyword_length is not None else settings.search.min_keyword_length
        )

        self._single_states = {s for s in self.states if " " not in s}
        self._single_cities = {c for c in self.cities if " " not in c}
        # Longest first so "navi mumbai" wins over "mumbai"
        self._multi_word_locations = sorted(
            [loc for loc in [*self.states, *self.cities] if " " in loc],
            key=len,
            reverse=True,
        )
        self._fuzzy_choices = sorted(self._single_states | self._single_cities)
        self._products = set(PRODUCT_KEYWORDS)

    def _match_location_fuzzy(self, token: str) -> str | None:
        if len(token) < 5 or not self._fuzzy_choices:
            return None
        match = process.extractOne(
            token,
            self._fuzzy_choices,
            scorer=fuzz.ratio,
            score_cutoff=self.fuzzy_threshold,
        )
        if match is None:
            return None
        location, score, _ = match
        logger.debug(f"Fuzzy location match: {token!r} -> {location!r} ({score:.0f})")
        return location

    def parse(self, query: str) -> ParsedQuery:
        """Parse a free-text query.

        Args:
            query: Raw user query

        Returns:
            ParsedQuery; empty lists when nothing matched
        """
        normalized = normalize_query(query)
        result = ParsedQuery()
        if not normalized:
            return result

        tokens = tokenize(normalized)
        phrase_words: set[str] = set()

        # Multi-word locations first (e.g. "tamil nadu", "navi mumbai")
        for location in self._multi_word_locations:
            if _contains_phrase(normalized, location):
                _add_unique(result.locations, location)
                phrase_words.update(location.split())

        for phrase, entity_type in ENTITY_PHRASES.items():
            if _contains_phrase(normalized, phrase):
                _add_unique(result.entity_types, entity_type)
                phrase_words.update(phrase.split())

        for token in tokens:
            if token in phrase_words:
                continue

            if token in EXPORTER_TERMS:
                result.exporter = True
                continue

            if token in ENTITY_KEYWORDS:
                _add_unique(result.entity_types, ENTITY_KEYWORDS[token])
                continue

            if token in CERTIFICATION_KEYWORDS:
                _add_unique(result.certifications, CERTIFICATION_KEYWORDS[token])
                continue

            if token in self._single_states or token in self._single_cities:
                _add_unique(result.locations, token)
                continue

            if token in INTENT_KEYWORDS:
                if result.intent == Intent.SEARCH:
                    result.intent = Intent(INTENT_KEYWORDS[token])
                continue

            if token in STOP_WORDS or token.isdigit():
                continue

            if token in self._products:
                _add_unique(result.products, token)
                continue

            location = self._match_location_fuzzy(token)
            if location:
                _add_unique(result.locations, location)
                continue

            if len(token) >= self.min_keyword_length:
                _add_unique(result.keywords, token)

        return apply_exporter_rewrite(result, query)


def apply_exporter_rewrite(parsed: ParsedQuery, query: str) -> ParsedQuery:
    """Rewrite a parsed query that asks for exporters.

    Exporters live in the functionalities column rather than entity, so an
    exporter query becomes a functionality match. The entity type detected
    alongside it is dropped unless the query names an entity explicitly
    ("manufacturer exporters" keeps manufacturer, "testing exporters" does not).

    Args:
        parsed: Result of rule-based or AI parsing
        query: Original query text

    Returns:
        New ParsedQuery; the input is left untouched
    """
    tokens = tokenize(normalize_query(query))
    exporter_terms = set(EXPORTER_TERMS)

    if not parsed.exporter and not any(t in exporter_terms for t in tokens):
        return parsed

    entity_types = parsed.entity_types
    explicit_words = {w for word in EXPLICIT_ENTITY_WORDS for w in (word, word + "s")}
    if entity_types and not any(t in explicit_words for t in tokens):
        logger.debug(f"Exporter query, clearing entity types {entity_types}")
        entity_types = []

    return replace(
        parsed,
        exporter=True,
        entity_types=list(entity_types),
        keywords=[k for k in parsed.keywords if k not in exporter_terms],
        products=[p for p in parsed.products if p not in exporter_terms],
    )


def to_search_filters(parsed: ParsedQuery) -> SearchFilters:
    """Convert a ParsedQuery into database-facing filters."""
    keywords: list[str] = []
    for term in [*parsed.products, *parsed.keywords]:
        _add_unique(keywords, term)

    return SearchFilters(
        keywords=keywords,
        entity_type=parsed.entity_types[0] if parsed.entity_types else None,
        location=parsed.locations[0] if parsed.locations else None,
        certifications=list(parsed.certifications),
        exporter=parsed.exporter,
    )


@lru_cache(maxsize=1)
def get_default_parser() -> QueryParser:
    """Cached parser built from the default vocabulary."""
    return QueryParser()


def parse_search_query(query: str) -> ParsedQuery:
    """Parse a query with the default vocabulary."""
    return get_default_parser().parse(query)

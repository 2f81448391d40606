"""OpenAI-backed query parsing with caching and retries.

Asks a chat model to read the query into the same ParsedQuery structure the
rule-based parser produces, then validates every value against the
directory vocabulary. Callers fall back to rule-based parsing on
QueryParsingError.
"""
from __future__ import annotations

import json
import logging
import re
import time
from functools import lru_cache
from typing import Any

from openai import APIConnectionError, APITimeoutError, AsyncOpenAI, RateLimitError
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from config.search_vocabulary import INDIAN_CITIES, INDIAN_STATES, VALID_CERTIFICATIONS, VALID_ENTITY_TYPES
from nutra.config import settings
from nutra.pipelines.normalization import normalize_query
from nutra.query_parser import Intent, ParsedQuery, apply_exporter_rewrite

logger = logging.getLogger(__name__)


class QueryParsingError(Exception):
    """Raised when AI query parsing fails."""
    pass


SYSTEM_PROMPT = """You are a search query parser for NutraConnect, an Indian B2B nutraceutical and supplement industry platform.

Parse the user's natural language search query and extract structured filters.

ENTITY TYPES (use exactly these values):
- manufacturer: Companies that manufacture products
- distributor: Companies that distribute products
- retailer: Companies that sell to end consumers
- wholesaler: Bulk traders and wholesalers
- raw_material: Raw material and ingredient suppliers
- formulator: Companies that formulate products
- packager: Packaging companies
- cro: Contract research organizations, testing labs

CERTIFICATIONS (use exactly these values):
- gmp, fssai, iso, fda, halal, organic, haccp, kosher, who-gmp

LOCATIONS: Indian states and cities, e.g. Maharashtra, Gujarat, Karnataka,
Tamil Nadu, Delhi, Mumbai, Pune, Ahmedabad, Bangalore, Hyderabad, Chennai.

Respond ONLY with valid JSON in this exact format:
{
  "entityTypes": ["manufacturer"],
  "locations": ["mumbai"],
  "certifications": ["gmp"],
  "products": ["protein", "supplements"],
  "keywords": ["other", "terms"],
  "employeeSize": "100+",
  "minYearEstablished": 2010,
  "intent": "search"
}

Rules:
1. Use lowercase for all values
2. Only include fields that are clearly mentioned or implied
3. employeeSize should be like "50+", "100+", "500+", or "50-100"
4. intent is usually "search" unless user wants to compare, verify, or contact
5. products should be specific product types mentioned (protein, vitamins, ayurvedic, etc.)
6. keywords are any remaining meaningful search terms not covered by other fields"""

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")


def extract_json_object(text: str) -> dict[str, Any]:
    """Pull the first JSON object out of a model reply.

    Raises:
        QueryParsingError: If no parsable object is present
    """
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise QueryParsingError("No JSON found in AI response")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise QueryParsingError(f"Invalid JSON in AI response: {e}") from e
    if not isinstance(data, dict):
        raise QueryParsingError("AI response JSON is not an object")
    return data


def _lower_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    items = [str(v).strip().lower() for v in value if v is not None]
    return [item for item in items if item]


def _is_known_location(location: str) -> bool:
    known = [*INDIAN_STATES, *INDIAN_CITIES]
    if location in known:
        return True
    # Partial matches for flexibility ("navi mumbai" / "mumbai")
    return any(location in place or place in location for place in known)


def _canonical_certification(cert: str) -> str | None:
    folded = cert.replace("-", "")
    for valid in VALID_CERTIFICATIONS:
        if valid.replace("-", "") == folded:
            return valid
    return None


def sanitize_parsed_query(data: dict[str, Any]) -> ParsedQuery:
    """Validate an AI reply against the directory vocabulary."""
    certifications = []
    for cert in _lower_list(data.get("certifications")):
        canonical = _canonical_certification(cert)
        if canonical and canonical not in certifications:
            certifications.append(canonical)

    min_year = data.get("minYearEstablished")
    try:
        min_year = int(min_year) if min_year is not None else None
    except (TypeError, ValueError):
        min_year = None

    employee_size = data.get("employeeSize")
    intent_value = str(data.get("intent") or "search").lower()

    return ParsedQuery(
        entity_types=[e for e in _lower_list(data.get("entityTypes")) if e in VALID_ENTITY_TYPES],
        locations=[loc for loc in _lower_list(data.get("locations")) if _is_known_location(loc)],
        certifications=certifications,
        products=_lower_list(data.get("products")),
        keywords=_lower_list(data.get("keywords")),
        employee_size=str(employee_size) if employee_size else None,
        min_year_established=min_year,
        intent=Intent(intent_value) if intent_value in Intent._value2member_map_ else Intent.SEARCH,
        source="ai",
    )


class AIQueryParser:
    """Chat-completions query parser with a bounded per-process TTL cache."""

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        model: str | None = None,
        cache_ttl: float | None = None,
        cache_max_entries: int | None = None,
    ) -> None:
        """Initialize the parser.

        Args:
            client: OpenAI client. Built lazily from OPENAI_* settings if None.
            model: Chat model name (uses config default if None)
            cache_ttl: Cache lifetime in seconds (uses config default if None)
            cache_max_entries: Most cached queries kept (uses config default if None)
        """
        self._client = client
        self.model = model or settings.openai.model
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.search.cache_ttl_seconds
        self.cache_max_entries = (
            cache_max_entries if cache_max_entries is not None else settings.search.cache_max_entries
        )
        # Insertion ordered, oldest first
        self._cache: dict[str, tuple[ParsedQuery, float]] = {}

    @property
    def client(self) -> AsyncOpenAI:
        if self._client is None:
            if not settings.openai.api_key:
                raise QueryParsingError("OPENAI_API_KEY not configured")
            self._client = AsyncOpenAI(
                api_key=settings.openai.api_key,
                timeout=settings.openai.timeout,
            )
        return self._client

    def clear_cache(self) -> None:
        self._cache.clear()

    def _cached(self, key: str) -> ParsedQuery | None:
        entry = self._cache.get(key)
        if entry is None:
            return None
        result, stored_at = entry
        if time.monotonic() - stored_at >= self.cache_ttl:
            del self._cache[key]
            return None
        return result

    def _store(self, key: str, parsed: ParsedQuery) -> None:
        now = time.monotonic()
        expired = [k for k, (_, stored_at) in self._cache.items() if now - stored_at >= self.cache_ttl]
        for k in expired:
            del self._cache[k]

        self._cache.pop(key, None)
        while len(self._cache) >= self.cache_max_entries:
            del self._cache[next(iter(self._cache))]
        self._cache[key] = (parsed, now)

    @retry(
        retry=retry_if_exception_type((APIConnectionError, APITimeoutError, RateLimitError)),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=1, max=8),
        reraise=True,
    )
    async def _complete(self, query: str) -> str:
        response = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=settings.openai.max_tokens,
            temperature=settings.openai.temperature,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": f'Parse this search query: "{query}"'},
            ],
        )
        if not response.choices:
            return ""
        return response.choices[0].message.content or ""

    async def parse(self, query: str) -> ParsedQuery:
        """Parse a query with the chat model.

        Args:
            query: Raw user query

        Returns:
            Sanitized ParsedQuery with the exporter rewrite applied

        Raises:
            QueryParsingError: If the model call or its reply is unusable
        """
        key = normalize_query(query)
        cached = self._cached(key)
        if cached is not None:
            logger.debug(f"AI parse cache hit for {key!r}")
            return cached

        try:
            content = await self._complete(query)
            parsed = sanitize_parsed_query(extract_json_object(content))
        except QueryParsingError:
            raise
        except Exception as e:
            logger.warning(f"AI query parsing failed: {e}")
            raise QueryParsingError(f"AI query parsing failed: {e}") from e

        parsed = apply_exporter_rewrite(parsed, query)
        self._store(key, parsed)
        return parsed


@lru_cache(maxsize=1)
def get_ai_parser() -> AIQueryParser:
    """Shared parser so the cache lives for the whole process."""
    return AIQueryParser()

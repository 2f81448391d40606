"""WHERE-clause builder for company search.

Search filters are first expressed as a small condition tree (plain dicts,
JSON friendly) and then compiled to SQLAlchemy expressions. The tree form is
what `/search/parse` returns for debugging; the compiled form is what runs.

Condition tree nodes:
    {"and": [node, ...]}
    {"or": [node, ...]}
    {"field": <column>, "op": "contains" | "in" | "not_null", "value": ...}
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from sqlalchemy import and_, or_
from sqlalchemy.sql.elements import ColumnElement

from . import models
from .companies import functionality_search_terms, map_type_to_entity_values
from .query_parser import SearchFilters

logger = logging.getLogger(__name__)

Condition = dict[str, Any]

KEYWORD_FIELDS = (
    "company_name",
    "category_search",
    "short_overview",
    "functionalities",
    "product_portfolio",
    "entity",
)

LOCATION_FIELDS = ("address", "hq_country_city_address")

ALLOWED_FIELDS = frozenset(
    [*KEYWORD_FIELDS, *LOCATION_FIELDS, "certifications", "gst_number"]
)

EXPORTER_TERM = "exporter"


@dataclass
class SearchContext:
    """Explicit filters chosen by the caller, alongside the free-text query."""
    types: list[str] = field(default_factory=list)
    cities: list[str] = field(default_factory=list)
    states: list[str] = field(default_factory=list)
    verified: bool = False


def contains(field_name: str, value: str) -> Condition:
    return {"field": field_name, "op": "contains", "value": value}


def keyword_condition(keyword: str) -> Condition:
    """Keyword must appear in at least one searchable field."""
    return {"or": [contains(f, keyword) for f in KEYWORD_FIELDS]}


def entity_type_condition(entity_type: str) -> Condition:
    """Hybrid match: primary entity value OR a mention in functionalities."""
    return {
        "or": [
            {"field": "entity", "op": "in", "value": map_type_to_entity_values(entity_type)},
            *[contains("functionalities", term) for term in functionality_search_terms(entity_type)],
        ]
    }


def location_condition(location: str) -> Condition:
    return {"or": [contains(f, location) for f in LOCATION_FIELDS]}


def certification_condition(certifications: list[str]) -> Condition:
    return {"or": [contains("certifications", cert) for cert in certifications]}


def any_location_condition(places: list[str]) -> Condition:
    return {"or": [location_condition(place) for place in places]}


def describe_where(
    filters: SearchFilters,
    context: SearchContext | None = None,
) -> list[Condition]:
    """Build the AND-ed condition list for a search.

    Args:
        filters: Filters parsed from the query
        context: Explicit caller filters (types, cities, states, verified)

    Returns:
        List of condition trees, all of which must hold
    """
    context = context or SearchContext()
    conditions: list[Condition] = [keyword_condition(kw) for kw in filters.keywords]

    if filters.exporter:
        conditions.append(keyword_condition(EXPORTER_TERM))

    # An explicit type filter overrides whatever the query implied
    if filters.entity_type and not context.types:
        conditions.append(entity_type_condition(filters.entity_type))

    if filters.location:
        conditions.append(location_condition(filters.location))

    if filters.certifications:
        conditions.append(certification_condition(filters.certifications))

    if context.verified:
        conditions.append({"field": "gst_number", "op": "not_null", "value": None})

    if context.types:
        entity_values = [v for t in context.types for v in map_type_to_entity_values(t)]
        conditions.append({"field": "entity", "op": "in", "value": entity_values})

    if context.cities:
        conditions.append(any_location_condition(context.cities))

    if context.states:
        conditions.append(any_location_condition(context.states))

    return conditions


def compile_condition(condition: Condition) -> ColumnElement[bool]:
    """Compile a condition tree into a SQLAlchemy expression.

    Raises:
        ValueError: For unknown operators or non-searchable columns
    """
    if "and" in condition:
        return and_(*[compile_condition(c) for c in condition["and"]])
    if "or" in condition:
        return or_(*[compile_condition(c) for c in condition["or"]])

    field_name = condition.get("field")
    if field_name not in ALLOWED_FIELDS:
        raise ValueError(f"Field not searchable: {field_name}")

    column = getattr(models.Company, field_name)
    op = condition.get("op")
    value = condition.get("value")

    if op == "contains":
        return column.icontains(value, autoescape=True)
    elif op == "in":
        return column.in_(value)
    elif op == "not_null":
        return column.is_not(None)

    raise ValueError(f"Unknown operator: {op}")


def build_where_clause(
    filters: SearchFilters,
    context: SearchContext | None = None,
) -> list[ColumnElement[bool]]:
    """Compiled WHERE conditions for `select(Company).where(*conditions)`."""
    conditions = describe_where(filters, context)
    logger.debug(f"Built {len(conditions)} WHERE conditions")
    return [compile_condition(c) for c in conditions]

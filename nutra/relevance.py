"""Relevance scoring for search result pages."""
from __future__ import annotations

import logging

from .companies import CompanyDTO, functionality_search_terms

logger = logging.getLogger(__name__)

FIELD_MATCH_POINTS = 5
PRIMARY_TYPE_POINTS = 10
FUNCTIONALITY_POINTS = 5


def score_company(
    company: CompanyDTO,
    keywords: list[str],
    entity_type: str | None = None,
) -> int:
    """Score one company against the searched keywords and entity type.

    Each keyword earns points per field it appears in (name, category,
    products, description, functionalities summary). A company whose
    primary type is the searched type outranks one that only lists the
    role among its functionalities.
    """
    score = 0

    for keyword in keywords:
        kw = keyword.lower()
        if kw in company.name.lower():
            score += FIELD_MATCH_POINTS
        if any(kw in c.lower() for c in company.category):
            score += FIELD_MATCH_POINTS
        if any(kw in p.lower() for p in company.products):
            score += FIELD_MATCH_POINTS
        if company.description and kw in company.description.lower():
            score += FIELD_MATCH_POINTS
        if company.ai_summary and kw in company.ai_summary.lower():
            score += FIELD_MATCH_POINTS

    if entity_type:
        if company.type.value == entity_type:
            score += PRIMARY_TYPE_POINTS
        elif company.ai_summary and any(
            term.lower() in company.ai_summary.lower()
            for term in functionality_search_terms(entity_type)
        ):
            score += FUNCTIONALITY_POINTS

    return score


def rank_companies(
    companies: list[CompanyDTO],
    keywords: list[str],
    entity_type: str | None = None,
) -> list[CompanyDTO]:
    """Sort by score (desc), then name (asc)."""
    scored = [(score_company(c, keywords, entity_type), c) for c in companies]
    scored.sort(key=lambda pair: (-pair[0], pair[1].name.lower()))
    ranked = [c for _, c in scored]

    logger.debug(f"Ranked {len(ranked)} companies, top: {[c.name for c in ranked[:3]]}")
    return ranked

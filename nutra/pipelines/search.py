"""Search pipeline: free-text query → parsed filters → paginated companies.

Implements the directory search workflow:
1. Parse the query (AI when configured, rule-based otherwise or on failure)
2. Build the WHERE clause from parsed filters and explicit context
3. Count and fetch one page ordered by name
4. Rank the page by keyword / entity-type relevance
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ai.query_ai import QueryParsingError, get_ai_parser
from nutra import models
from nutra.companies import CompanyDTO, to_company_dto
from nutra.config import settings
from nutra.query_builder import SearchContext, build_where_clause
from nutra.query_parser import ParsedQuery, SearchFilters, parse_search_query, to_search_filters
from nutra.relevance import rank_companies

logger = logging.getLogger(__name__)


class SearchError(Exception):
    """Raised when the search pipeline fails."""
    pass


@dataclass
class SearchRequest:
    """One search call: query text plus explicit filters and paging."""
    query: str | None = None
    context: SearchContext = field(default_factory=SearchContext)
    skip: int = 0
    take: int | None = None
    use_ai: bool = True


@dataclass
class SearchPage:
    """A page of ranked results."""
    companies: list[CompanyDTO]
    total: int
    has_more: bool
    skip: int
    take: int
    parsed_query: ParsedQuery | None = None
    filters: SearchFilters | None = None


async def parse_query(query: str, *, use_ai: bool = True) -> ParsedQuery:
    """Parse a query, preferring the AI parser when it is enabled.

    Args:
        query: Raw user query
        use_ai: Caller opt-out for AI parsing

    Returns:
        ParsedQuery from the AI parser or the rule-based fallback
    """
    if use_ai and settings.search.use_ai and settings.openai.enabled:
        try:
            return await get_ai_parser().parse(query)
        except QueryParsingError as e:
            logger.warning(f"AI parsing failed, using rule-based parser: {e}")

    return parse_search_query(query)


async def search_companies(
    session: AsyncSession,
    request: SearchRequest,
) -> SearchPage:
    """Run a paginated company search.

    Args:
        session: Database session
        request: Query, explicit filters and paging

    Returns:
        SearchPage with the ranked page and total match count

    Raises:
        SearchError: If the database query fails
    """
    take = min(request.take or settings.search.default_take, settings.search.max_take)
    skip = max(request.skip, 0)

    parsed: ParsedQuery | None = None
    filters = SearchFilters()
    if request.query and request.query.strip():
        parsed = await parse_query(request.query, use_ai=request.use_ai)
        filters = to_search_filters(parsed)
        logger.info(
            f"Search query={request.query!r} keywords={filters.keywords} "
            f"entity_type={filters.entity_type} location={filters.location} "
            f"exporter={filters.exporter}"
        )

    conditions = build_where_clause(filters, request.context)

    try:
        count_stmt = select(func.count()).select_from(models.Company).where(*conditions)
        total = (await session.execute(count_stmt)).scalar_one()

        page_stmt = (
            select(models.Company)
            .where(*conditions)
            .order_by(models.Company.company_name.asc(), models.Company.id.asc())
            .offset(skip)
            .limit(take)
        )
        rows = (await session.execute(page_stmt)).scalars().all()
    except Exception as e:
        logger.error(f"Company search failed: {e}")
        raise SearchError(f"Failed to search companies: {e}") from e

    companies = [to_company_dto(row) for row in rows]

    # Exporter queries rank on the exporter term as well
    score_terms = [*filters.keywords, *(["exporter"] if filters.exporter else [])]
    if score_terms:
        companies = rank_companies(companies, score_terms, filters.entity_type)

    logger.info(f"Search matched {total} companies, returning {len(companies)}")

    return SearchPage(
        companies=companies,
        total=total,
        has_more=skip + take < total,
        skip=skip,
        take=take,
        parsed_query=parsed,
        filters=filters if parsed else None,
    )

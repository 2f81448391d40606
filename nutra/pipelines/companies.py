"""Company lookups used by profile pages, landing sections and filters."""
from __future__ import annotations

import logging

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from nutra import models
from nutra.companies import (
    DEFAULT_REGION,
    CompanyDTO,
    extract_city,
    generate_slug,
    map_type_to_entity_values,
    to_company_dto,
)
from nutra.config import settings

logger = logging.getLogger(__name__)


async def get_company_by_id(session: AsyncSession, company_id: int) -> CompanyDTO | None:
    company = await session.get(models.Company, company_id)
    return to_company_dto(company) if company else None


async def get_company_by_slug(session: AsyncSession, slug: str) -> CompanyDTO | None:
    """Find a company whose generated slug matches.

    Slugs are not stored, so this scans the first rows of the table.
    """
    query = select(models.Company).order_by(models.Company.id).limit(settings.search.slug_scan_limit)
    result = await session.execute(query)

    for company in result.scalars():
        if generate_slug(company.company_name or "") == slug:
            return to_company_dto(company)
    return None


async def get_featured_companies(session: AsyncSession, limit: int = 8) -> list[CompanyDTO]:
    """Companies with a name, overview and certifications, by name."""
    query = (
        select(models.Company)
        .where(
            models.Company.company_name.is_not(None),
            models.Company.short_overview.is_not(None),
            models.Company.certifications.is_not(None),
        )
        .order_by(models.Company.company_name.asc())
        .limit(limit)
    )
    result = await session.execute(query)
    return [to_company_dto(c, featured=True) for c in result.scalars()]


async def get_trending_companies(
    session: AsyncSession,
    company_types: list[str],
    limit: int = 4,
) -> list[CompanyDTO]:
    """Newest named companies of the given types."""
    entity_values = [v for t in company_types for v in map_type_to_entity_values(t)]
    query = (
        select(models.Company)
        .where(
            models.Company.company_name.is_not(None),
            models.Company.entity.in_(entity_values),
        )
        .order_by(models.Company.created_at.desc(), models.Company.id.desc())
        .limit(limit)
    )
    result = await session.execute(query)
    return [to_company_dto(c, featured=True) for c in result.scalars()]


async def get_similar_companies(
    session: AsyncSession,
    company_id: int,
    limit: int = 4,
) -> list[CompanyDTO]:
    """Companies sharing the first category or the entity type."""
    company = await get_company_by_id(session, company_id)
    if company is None:
        return []

    similarity = [models.Company.entity.icontains(company.type.value, autoescape=True)]
    if company.category:
        similarity.append(
            models.Company.category_search.icontains(company.category[0], autoescape=True)
        )

    query = (
        select(models.Company)
        .where(models.Company.id != company_id, or_(*similarity))
        .order_by(models.Company.id)
        .limit(limit)
    )
    result = await session.execute(query)
    return [to_company_dto(c) for c in result.scalars()]


async def get_company_count(session: AsyncSession) -> int:
    result = await session.execute(select(func.count()).select_from(models.Company))
    return result.scalar_one()


async def get_unique_cities(session: AsyncSession, limit: int = 500) -> list[str]:
    """Sorted distinct cities extracted from company addresses."""
    query = select(
        models.Company.address,
        models.Company.hq_country_city_address,
    ).limit(limit)
    result = await session.execute(query)

    cities = {
        extract_city(address, hq_address)
        for address, hq_address in result.all()
    }
    cities.discard(DEFAULT_REGION)
    cities.discard("")
    return sorted(cities)

from __future__ import annotations

from nutra import models
from nutra.pipelines.companies import (
    get_company_by_id,
    get_company_by_slug,
    get_company_count,
    get_featured_companies,
    get_similar_companies,
    get_trending_companies,
    get_unique_cities,
)


async def test_get_company_by_id(seeded_session) -> None:
    company = await get_company_by_id(seeded_session, 4)

    assert company is not None
    assert company.name == "Mumbai Whey Labs"
    assert await get_company_by_id(seeded_session, 999) is None


async def test_get_company_by_slug(seeded_session) -> None:
    company = await get_company_by_slug(seeded_session, "mumbai-whey-labs")

    assert company is not None
    assert company.id == "4"
    assert await get_company_by_slug(seeded_session, "no-such-company") is None


async def test_featured_companies_have_complete_profiles(seeded_session) -> None:
    featured = await get_featured_companies(seeded_session)

    assert [c.name for c in featured] == ["Gujarat Herbals Pvt Ltd", "Mumbai Whey Labs"]
    assert all(c.is_featured for c in featured)


async def test_trending_companies_newest_first(seeded_session) -> None:
    trending = await get_trending_companies(seeded_session, ["manufacturer", "wholesaler"], limit=2)

    assert [c.id for c in trending] == ["4", "2"]

    wholesalers = await get_trending_companies(seeded_session, ["wholesaler"])

    assert [c.id for c in wholesalers] == ["2"]


async def test_similar_companies_share_type_or_category(seeded_session) -> None:
    similar = await get_similar_companies(seeded_session, 4)

    assert [c.id for c in similar] == ["1", "3"]
    assert await get_similar_companies(seeded_session, 999) == []


async def test_company_count(seeded_session) -> None:
    assert await get_company_count(seeded_session) == 7


async def test_unique_cities(seeded_session) -> None:
    seeded_session.add(models.Company(company_name="No Address Co"))
    await seeded_session.commit()

    cities = await get_unique_cities(seeded_session)

    assert cities == ["Ahmedabad", "Chennai", "Kochi", "Mumbai", "Pune", "Surat"]

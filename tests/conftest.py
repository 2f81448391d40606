from __future__ import annotations

import os
from datetime import datetime

# Settings are read once at import time; point them at test values first
os.environ["DB_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["OPENAI_API_KEY"] = ""
os.environ["LOG_FORMAT"] = "text"

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from nutra import models

SAMPLE_COMPANIES = [
    {
        "id": 1,
        "company_name": "Gujarat Herbals Pvt Ltd",
        "entity": "Manufacturer",
        "functionalities": "Manufacturer, Exporter",
        "category_search": "Herbal Extracts, Ayurvedic",
        "product_portfolio": "Ashwagandha Extract, Tulsi Powder",
        "short_overview": "Leading ashwagandha exporter",
        "address": "Plot 12, GIDC, Ahmedabad, Gujarat",
        "hq_country_city_address": "Ahmedabad, Gujarat, India",
        "gst_number": "24AAAAA0000A1Z5",
        "certifications": "GMP, FSSAI",
        "created_at": datetime(2024, 1, 1),
    },
    {
        "id": 2,
        "company_name": "Ashwa Naturals",
        "entity": "Trader",
        "functionalities": "Trader",
        "category_search": "Herbs",
        "product_portfolio": "Ashwagandha Root",
        "hq_country_city_address": "Surat, Gujarat, India",
        "created_at": datetime(2024, 3, 1),
    },
    {
        "id": 3,
        "company_name": "Kerala Ayur Exports",
        "entity": "Manufacturer | Exporter",
        "functionalities": "Exporter",
        "category_search": "Ayurvedic",
        "product_portfolio": "Ashwagandha Capsules",
        "hq_country_city_address": "Kochi, Kerala, India",
        "gst_number": "32BBBBB1111B1Z5",
        "certifications": "ISO, Organic",
        "created_at": datetime(2024, 2, 1),
    },
    {
        "id": 4,
        "company_name": "Mumbai Whey Labs",
        "entity": "Manufacturer",
        "functionalities": "Manufacturer",
        "category_search": "Sports Nutrition",
        "product_portfolio": "Whey Protein",
        "short_overview": "Sports nutrition manufacturer",
        "hq_country_city_address": "Mumbai, Maharashtra, India",
        "gst_number": "27CCCCC2222C1Z5",
        "certifications": "FSSAI",
        "created_at": datetime(2024, 4, 1),
    },
    {
        "id": 5,
        "company_name": "Pune Testing Services",
        "entity": "CRO",
        "functionalities": "Testing, Laboratory",
        "category_search": "Quality Testing",
        "short_overview": "NABL accredited lab",
        "hq_country_city_address": "Pune, Maharashtra, India",
        "created_at": datetime(2024, 5, 1),
    },
    {
        "id": 6,
        "company_name": "Chennai Raw Botanicals",
        "entity": "Raw material",
        "functionalities": "Supplier",
        "category_search": "Botanicals",
        "product_portfolio": "Turmeric, Ashwagandha Powder",
        "hq_country_city_address": "Chennai, Tamil Nadu, India",
        "created_at": datetime(2024, 6, 1),
    },
    {
        "id": 7,
        "company_name": "Distribution Hub India",
        "entity": "Distributor",
        "functionalities": "Distributor, Trader",
        "category_search": "Vitamins",
        "product_portfolio": "Vitamin Tablets",
        "hq_country_city_address": "Ahmedabad, Gujarat, India",
        "gst_number": "24DDDDD3333D1Z5",
        "created_at": datetime(2024, 7, 1),
    },
]


@pytest.fixture
def sample_companies() -> list[models.Company]:
    """Unsaved Company rows built from SAMPLE_COMPANIES."""
    return [models.Company(**row) for row in SAMPLE_COMPANIES]


@pytest.fixture
async def db_engine():
    """In-memory SQLite database shared across one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(models.Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False, class_=AsyncSession)


@pytest.fixture
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_session(session):
    session.add_all([models.Company(**row) for row in SAMPLE_COMPANIES])
    await session.commit()
    return session

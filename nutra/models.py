"""Core SQLAlchemy models (2.x style) for the directory schema.

The companies table mirrors the industry dataset columns one to one.
"""

from __future__ import annotations

from datetime import date, datetime

from sqlalchemy import Date, Index, Integer, String, Text
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Base class for all models."""
    pass


class Company(Base):
    """Directory companies table."""
    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    our_id: Mapped[str | None] = mapped_column(String(100))
    native_id: Mapped[str | None] = mapped_column(String(100))
    gst_number: Mapped[str | None] = mapped_column(String(50))
    company_name: Mapped[str | None] = mapped_column(String(500), index=True)
    category_search: Mapped[str | None] = mapped_column(Text)
    entity: Mapped[str | None] = mapped_column(String(255), index=True)
    functionalities: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(Text)
    hq_country_city_address: Mapped[str | None] = mapped_column(Text)
    profile_url: Mapped[str | None] = mapped_column(Text)
    catalog_mobile_url: Mapped[str | None] = mapped_column(Text)
    year_of_establishment: Mapped[int | None] = mapped_column(Integer)
    ownership_type: Mapped[str | None] = mapped_column(String(255))
    employee_size: Mapped[str | None] = mapped_column(String(100))
    revenue_range: Mapped[str | None] = mapped_column(String(255))
    main_channels: Mapped[str | None] = mapped_column(Text)
    markets_served: Mapped[str | None] = mapped_column(Text)
    sustainability_traceability_notes: Mapped[str | None] = mapped_column(Text)
    certifications: Mapped[str | None] = mapped_column(Text)
    confidence_rating: Mapped[str | None] = mapped_column(String(50))
    key_contact_person_designation: Mapped[str | None] = mapped_column(String(255))
    key_contact_person: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    production_sites: Mapped[str | None] = mapped_column(Text)
    export_destinations: Mapped[str | None] = mapped_column(Text)
    key_clients: Mapped[str | None] = mapped_column(Text)
    source_urls: Mapped[str | None] = mapped_column(Text)
    collection_date: Mapped[date | None] = mapped_column(Date)
    recent_news: Mapped[str | None] = mapped_column(Text)
    short_overview: Mapped[str | None] = mapped_column(Text)
    product_portfolio: Mapped[str | None] = mapped_column(Text)
    map_url: Mapped[str | None] = mapped_column(Text)
    country: Mapped[str | None] = mapped_column(String(100))
    created_at: Mapped[datetime | None] = mapped_column(default=datetime.utcnow)

    __table_args__ = (
        Index("ix_companies_created_at", "created_at"),
    )

"""Company classification and row-to-DTO mapping.

Translates between the free-form dataset values (entity, addresses, comma
lists) and the API's Company shape.
"""
from __future__ import annotations

import re
from enum import Enum

from pydantic import BaseModel, Field

from . import models


class CompanyType(str, Enum):
    """The eight directory entity types."""
    MANUFACTURER = "manufacturer"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"  # includes traders
    RAW_MATERIAL = "raw_material"
    FORMULATOR = "formulator"
    PACKAGER = "packager"
    CRO = "cro"


class SearchType(str, Enum):
    """Type filters accepted by search: the directory types plus exporters."""
    MANUFACTURER = "manufacturer"
    DISTRIBUTOR = "distributor"
    RETAILER = "retailer"
    WHOLESALER = "wholesaler"
    RAW_MATERIAL = "raw_material"
    FORMULATOR = "formulator"
    PACKAGER = "packager"
    CRO = "cro"
    EXPORTER = "exporter"


ENTITY_VALUES = {
    "manufacturer": ["Manufacturer"],
    "distributor": ["Distributor"],
    "retailer": ["Retailer"],
    "wholesaler": ["Trader", "Wholesaler"],
    "raw_material": ["Raw material", "Raw Material"],
    "formulator": ["Formulator"],
    "packager": ["Packager"],
    "cro": ["CRO"],
    "exporter": ["Exporter", "Manufacturer | Exporter"],
}

FUNCTIONALITY_TERMS = {
    "manufacturer": ["Manufacturer"],
    "distributor": ["Distributor"],
    "retailer": ["Retailer"],
    "wholesaler": ["Trader", "Wholesaler"],
    "raw_material": ["Raw Material", "Supplier"],
    "formulator": ["Formulator"],
    "packager": ["Packager"],
    "cro": ["CRO", "Testing", "Laboratory"],
    "exporter": ["Exporter"],
}

EXACT_ENTITY_TYPES = {
    "manufacturer": CompanyType.MANUFACTURER,
    "distributor": CompanyType.DISTRIBUTOR,
    "retailer": CompanyType.RETAILER,
    "raw material": CompanyType.RAW_MATERIAL,
    "formulator": CompanyType.FORMULATOR,
    "packager": CompanyType.PACKAGER,
    "cro": CompanyType.CRO,
    "trader": CompanyType.WHOLESALER,
}

# Checked in order; first hit wins
FUZZY_ENTITY_HINTS = [
    (("manufacturer", "manufacturing"), CompanyType.MANUFACTURER),
    (("distributor", "distribution"), CompanyType.DISTRIBUTOR),
    (("retailer", "retail"), CompanyType.RETAILER),
    (("wholesaler", "wholesale", "trader"), CompanyType.WHOLESALER),
    (("raw material", "supplier", "ingredient"), CompanyType.RAW_MATERIAL),
    (("formulator", "formulation"), CompanyType.FORMULATOR),
    (("packager", "packaging"), CompanyType.PACKAGER),
    (("cro", "contract research", "testing", "lab"), CompanyType.CRO),
]

DEFAULT_REGION = "India"


def map_type_to_entity_values(company_type: str) -> list[str]:
    """Database entity values for a company type."""
    return ENTITY_VALUES.get(company_type, [company_type])


def functionality_search_terms(company_type: str) -> list[str]:
    """Terms matched in the functionalities column for hybrid type search."""
    return FUNCTIONALITY_TERMS.get(company_type, [company_type])


def map_entity_to_type(entity: str | None) -> CompanyType:
    """Classify a raw entity value, defaulting to manufacturer."""
    if not entity:
        return CompanyType.MANUFACTURER

    entity_lower = entity.lower().strip()
    if entity_lower in EXACT_ENTITY_TYPES:
        return EXACT_ENTITY_TYPES[entity_lower]

    for hints, company_type in FUZZY_ENTITY_HINTS:
        if any(hint in entity_lower for hint in hints):
            return company_type

    return CompanyType.MANUFACTURER


def generate_slug(name: str) -> str:
    """URL slug from a company name."""
    slug = name.lower()
    slug = re.sub(r"[^a-z0-9\s-]", "", slug)
    slug = re.sub(r"\s+", "-", slug)
    slug = re.sub(r"-+", "-", slug)
    return slug.strip()


def parse_to_array(value: str | None) -> list[str]:
    """Split a comma separated dataset value."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _address_parts(value: str | None) -> list[str]:
    return [p.strip() for p in value.split(",")] if value else []


def extract_city(address: str | None, hq_address: str | None) -> str:
    """City from "City, State, Country" HQ text, else second-to-last address part."""
    hq_parts = _address_parts(hq_address)
    if hq_parts:
        return hq_parts[0] or DEFAULT_REGION

    parts = _address_parts(address)
    if len(parts) >= 2:
        return parts[-2] or DEFAULT_REGION

    return DEFAULT_REGION


def extract_state(address: str | None, hq_address: str | None) -> str:
    """State from HQ text, else the last address part."""
    hq_parts = _address_parts(hq_address)
    if len(hq_parts) >= 2:
        return hq_parts[1] or DEFAULT_REGION

    parts = _address_parts(address)
    if parts:
        return parts[-1] or DEFAULT_REGION

    return DEFAULT_REGION


COMPLETENESS_FIELDS = (
    "company_name",
    "gst_number",
    "entity",
    "category_search",
    "address",
    "email",
    "profile_url",
    "year_of_establishment",
    "employee_size",
    "revenue_range",
    "short_overview",
    "product_portfolio",
    "certifications",
)


def completeness_score(company: models.Company) -> int:
    """Percentage of profile fields that are populated."""
    filled = sum(1 for name in COMPLETENESS_FIELDS if getattr(company, name))
    return round(filled / len(COMPLETENESS_FIELDS) * 100)


class CompanyDTO(BaseModel):
    """Company data transfer object."""
    id: str
    name: str
    slug: str
    type: CompanyType
    category: list[str] = Field(default_factory=list)
    city: str
    state: str
    address: str | None = None
    email: str | None = None
    website: str | None = None
    gst_number: str | None = None
    year_established: int | None = None
    employee_count: str | None = None
    annual_turnover: str | None = None
    products: list[str] = Field(default_factory=list)
    is_verified: bool = False
    verifications: list[str] = Field(default_factory=list)
    description: str | None = None
    ai_summary: str | None = None
    highlights: list[str] = Field(default_factory=list)
    coverage_areas: list[str] = Field(default_factory=list)
    is_featured: bool = False
    completeness_score: int = 0
    created_at: str | None = None


def to_company_dto(company: models.Company, *, featured: bool = False) -> CompanyDTO:
    """Map a companies row to the API shape."""
    name = company.company_name or "Unknown Company"
    created = company.created_at.isoformat() if company.created_at else None

    return CompanyDTO(
        id=str(company.id),
        name=name,
        slug=generate_slug(name),
        type=map_entity_to_type(company.entity),
        category=parse_to_array(company.category_search),
        city=extract_city(company.address, company.hq_country_city_address),
        state=extract_state(company.address, company.hq_country_city_address),
        address=company.address,
        email=company.email,
        website=company.profile_url,
        gst_number=company.gst_number,
        year_established=company.year_of_establishment,
        employee_count=company.employee_size,
        annual_turnover=company.revenue_range,
        products=parse_to_array(company.product_portfolio),
        is_verified=bool(company.gst_number),
        verifications=["gst"] if company.certifications else [],
        description=company.short_overview,
        ai_summary=company.functionalities,
        highlights=parse_to_array(company.certifications),
        coverage_areas=parse_to_array(company.markets_served),
        is_featured=featured,
        completeness_score=completeness_score(company),
        created_at=created,
    )

from __future__ import annotations

import pytest

from nutra import models
from nutra.companies import (
    CompanyType,
    completeness_score,
    extract_city,
    extract_state,
    generate_slug,
    map_entity_to_type,
    map_type_to_entity_values,
    parse_to_array,
    to_company_dto,
)


@pytest.mark.parametrize(
    "entity, expected",
    [
        ("Manufacturer", CompanyType.MANUFACTURER),
        ("Trader", CompanyType.WHOLESALER),
        ("Raw material", CompanyType.RAW_MATERIAL),
        ("CRO", CompanyType.CRO),
        ("Manufacturer | Exporter", CompanyType.MANUFACTURER),
        ("Contract Research Organisation", CompanyType.CRO),
        ("Packaging Solutions", CompanyType.PACKAGER),
        ("Something else", CompanyType.MANUFACTURER),
        (None, CompanyType.MANUFACTURER),
    ],
)
def test_map_entity_to_type(entity, expected) -> None:
    assert map_entity_to_type(entity) == expected


def test_map_type_to_entity_values() -> None:
    assert map_type_to_entity_values("wholesaler") == ["Trader", "Wholesaler"]
    assert map_type_to_entity_values("unknown") == ["unknown"]


@pytest.mark.parametrize(
    "name, slug",
    [
        ("Gujarat Herbals Pvt Ltd", "gujarat-herbals-pvt-ltd"),
        ("A & B Co.", "a-b-co"),
        ("Nutri--Life  (India)", "nutri-life-india"),
    ],
)
def test_generate_slug(name: str, slug: str) -> None:
    assert generate_slug(name) == slug


def test_parse_to_array() -> None:
    assert parse_to_array("GMP, FSSAI,, ISO ") == ["GMP", "FSSAI", "ISO"]
    assert parse_to_array(None) == []


def test_city_and_state_prefer_hq_address() -> None:
    address = "Plot 12, GIDC, Vatva, Gujarat"
    hq = "Ahmedabad, Gujarat, India"

    assert extract_city(address, hq) == "Ahmedabad"
    assert extract_state(address, hq) == "Gujarat"


def test_city_and_state_fall_back_to_address() -> None:
    address = "Plot 12, GIDC, Ahmedabad, Gujarat"

    assert extract_city(address, None) == "Ahmedabad"
    assert extract_state(address, None) == "Gujarat"


def test_city_and_state_default_region() -> None:
    assert extract_city(None, None) == "India"
    assert extract_state(None, None) == "India"
    assert extract_city("Somewhere", None) == "India"


def test_completeness_score(sample_companies) -> None:
    company = sample_companies[0]

    # 8 of 13 profile fields are filled
    assert completeness_score(company) == 62
    assert completeness_score(models.Company()) == 0


def test_to_company_dto(sample_companies) -> None:
    dto = to_company_dto(sample_companies[0])

    assert dto.id == "1"
    assert dto.name == "Gujarat Herbals Pvt Ltd"
    assert dto.slug == "gujarat-herbals-pvt-ltd"
    assert dto.type == CompanyType.MANUFACTURER
    assert dto.category == ["Herbal Extracts", "Ayurvedic"]
    assert dto.city == "Ahmedabad"
    assert dto.state == "Gujarat"
    assert dto.products == ["Ashwagandha Extract", "Tulsi Powder"]
    assert dto.is_verified is True
    assert dto.highlights == ["GMP", "FSSAI"]
    assert dto.ai_summary == "Manufacturer, Exporter"
    assert dto.is_featured is False
    assert dto.created_at == "2024-01-01T00:00:00"


def test_to_company_dto_without_name_or_gst() -> None:
    dto = to_company_dto(models.Company(id=9, entity="Trader"), featured=True)

    assert dto.name == "Unknown Company"
    assert dto.type == CompanyType.WHOLESALER
    assert dto.is_verified is False
    assert dto.verifications == []
    assert dto.is_featured is True
    assert dto.city == "India"

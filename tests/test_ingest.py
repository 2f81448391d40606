from __future__ import annotations

from datetime import date, datetime
from io import BytesIO

import pandas as pd
import pytest
from sqlalchemy import select

from nutra import models
from nutra.parsers import DatasetParseError, FileType, detect_file_type, parse_csv, parse_dataset
from nutra.pipelines.ingest import (
    IngestError,
    import_companies,
    map_row_to_company,
    parse_date,
    parse_year,
)

CSV_CONTENT = (
    "Our_ID,Company Name,Entity,Functionalities,HQ_Country_City_Address,"
    "Year_Of_Establishment,Collection_Date,Certifications, Short_Overview \n"
    "N-1,Gujarat Herbals,Manufacturer,\"Manufacturer, Exporter\",\"Ahmedabad, Gujarat, India\","
    "1998,15-08-2024,\"GMP, FSSAI\",Herbal extracts\n"
    "N-2,,Trader,Trader,\"Surat, Gujarat, India\",,,,\n"
    "N-3,Mumbai Whey Labs,Manufacturer,Manufacturer,\"Mumbai, Maharashtra, India\","
    "2012 (approx),2024-09-01,,\n"
).encode("utf-8")


@pytest.mark.parametrize(
    "filename, content, expected",
    [
        ("companies.csv", None, FileType.CSV),
        ("Companies.XLSX", None, FileType.EXCEL),
        ("upload", b"PK\x03\x04rest", FileType.EXCEL),
        ("notes.txt", b"hello", FileType.UNKNOWN),
    ],
)
def test_detect_file_type(filename: str, content: bytes | None, expected: FileType) -> None:
    assert detect_file_type(filename, content) == expected


def test_parse_csv_returns_records_with_none_for_blanks() -> None:
    records = parse_csv(BytesIO(CSV_CONTENT), "companies.csv")

    assert len(records) == 3
    assert records[0]["Company Name"] == "Gujarat Herbals"
    assert records[0]["Short_Overview"] == "Herbal extracts"
    assert records[1]["Company Name"] is None
    assert records[2]["Year_Of_Establishment"] == "2012 (approx)"


def test_parse_excel_keeps_date_cells() -> None:
    buffer = BytesIO()
    pd.DataFrame([
        {
            "Company Name": "Gujarat Herbals",
            "Entity": "Manufacturer",
            "Year_Of_Establishment": 1998,
            "Collection_Date": datetime(2024, 8, 15),
        },
    ]).to_excel(buffer, index=False, engine="openpyxl")
    buffer.seek(0)

    records = parse_dataset(buffer, "companies.xlsx")
    values = map_row_to_company(records[0])

    assert values["company_name"] == "Gujarat Herbals"
    assert values["year_of_establishment"] == 1998
    assert values["collection_date"] == date(2024, 8, 15)


def test_parse_dataset_rejects_unknown_types() -> None:
    with pytest.raises(DatasetParseError):
        parse_dataset(BytesIO(b"hello"), "notes.txt")


def test_parse_csv_rejects_empty_files() -> None:
    with pytest.raises(DatasetParseError):
        parse_csv(BytesIO(b""), "empty.csv")
    with pytest.raises(DatasetParseError):
        parse_csv(BytesIO(b"Company Name,Entity\n"), "header_only.csv")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("15-08-2024", date(2024, 8, 15)),
        ("2024-09-01", date(2024, 9, 1)),
        ("2024-08-15 00:00:00", date(2024, 8, 15)),
        (datetime(2024, 8, 15, 0, 0), date(2024, 8, 15)),
        (date(2024, 8, 15), date(2024, 8, 15)),
        ("31-02-2024", None),
        ("August 2024", None),
        (None, None),
    ],
)
def test_parse_date(value, expected) -> None:
    assert parse_date(value) == expected


@pytest.mark.parametrize(
    "value, expected",
    [("1998", 1998), ("2012 (approx)", 2012), ("est. 1990", None), ("", None)],
)
def test_parse_year(value, expected) -> None:
    assert parse_year(value) == expected


def test_map_row_to_company() -> None:
    values = map_row_to_company({
        "Company Name": "  Gujarat Herbals ",
        "Entity": "Manufacturer",
        "Certifications": "",
        "Year_Of_Establishment": "1998",
        "Collection_Date": "15-08-2024",
        "Unmapped": "ignored",
    })

    assert values["company_name"] == "Gujarat Herbals"
    assert values["entity"] == "Manufacturer"
    assert values["certifications"] is None
    assert values["email"] is None
    assert values["year_of_establishment"] == 1998
    assert values["collection_date"] == date(2024, 8, 15)
    assert "Unmapped" not in values


async def test_import_companies_skips_unnamed_rows(session) -> None:
    records = parse_csv(BytesIO(CSV_CONTENT), "companies.csv")

    inserted = await import_companies(session, records, batch_size=1)
    await session.commit()

    assert inserted == 2
    result = await session.execute(select(models.Company).order_by(models.Company.id))
    companies = result.scalars().all()
    assert [c.company_name for c in companies] == ["Gujarat Herbals", "Mumbai Whey Labs"]
    assert companies[0].functionalities == "Manufacturer, Exporter"
    assert companies[0].year_of_establishment == 1998
    assert companies[1].collection_date == date(2024, 9, 1)


async def test_import_failure_raises_ingest_error(session, monkeypatch) -> None:
    async def broken_flush(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(session, "flush", broken_flush)

    with pytest.raises(IngestError):
        await import_companies(session, [{"Company Name": "Gujarat Herbals"}])

"""Ingestion pipeline for directory dataset rows.

Maps dataset columns to the companies table and inserts in batches. Reusable
from both the init_db script and the upload endpoint.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Iterable, Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from .. import models

logger = logging.getLogger(__name__)

BATCH_SIZE = 500

# Dataset column -> model attribute
COLUMN_MAP = {
    "Our_ID": "our_id",
    "Native_id": "native_id",
    "gst_number": "gst_number",
    "Company Name": "company_name",
    "Category(Search)": "category_search",
    "Entity": "entity",
    "Functionalities": "functionalities",
    "Address": "address",
    "HQ_Country_City_Address": "hq_country_city_address",
    "profile_url": "profile_url",
    "catalog_mobile_url": "catalog_mobile_url",
    "Ownership_Type": "ownership_type",
    "Employee_Size": "employee_size",
    "Revenue_Range": "revenue_range",
    "Main_Channels": "main_channels",
    "Markets_Served": "markets_served",
    "Sustainability_Traceability_Notes": "sustainability_traceability_notes",
    "Certifications": "certifications",
    "Confidence_Rating": "confidence_rating",
    "Key_Contact_Person_Designation": "key_contact_person_designation",
    "Key_Contact_Person": "key_contact_person",
    "email": "email",
    "Production_Sites": "production_sites",
    "Export_Destinations": "export_destinations",
    "Key_Clients": "key_clients",
    "Source_URLs": "source_urls",
    "Recent_News": "recent_news",
    "Short_Overview": "short_overview",
    "Product_Portfolio": "product_portfolio",
    "map_url": "map_url",
    "Country": "country",
}


class IngestError(Exception):
    """Raised when dataset rows cannot be persisted."""
    pass


def clean_string(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def parse_year(value: Any) -> int | None:
    text = clean_string(value)
    if not text:
        return None
    match = re.match(r"^\d{4}", text)
    return int(match.group(0)) if match else None


def parse_date(value: Any) -> date | None:
    """Parse DD-MM-YYYY or YYYY-MM-DD.

    Excel date cells arrive as datetimes, or as "YYYY-MM-DD HH:MM:SS" text
    when the sheet is read with dtype=str; the time part is dropped.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    text = clean_string(value)
    if not text:
        return None

    ddmmyyyy = re.match(r"^(\d{1,2})-(\d{1,2})-(\d{4})$", text)
    yyyymmdd = re.match(r"^(\d{4})-(\d{1,2})-(\d{1,2})(?:[ T]\d{1,2}:\d{2}(?::\d{2})?)?$", text)
    try:
        if ddmmyyyy:
            day, month, year = (int(g) for g in ddmmyyyy.groups())
            return date(year, month, day)
        if yyyymmdd:
            year, month, day = (int(g) for g in yyyymmdd.groups())
            return date(year, month, day)
    except ValueError:
        logger.debug(f"Invalid calendar date: {text!r}")
    return None


def map_row_to_company(row: Mapping[str, Any]) -> dict[str, Any]:
    """Map one dataset row to companies column values."""
    values = {attr: clean_string(row.get(column)) for column, attr in COLUMN_MAP.items()}
    values["year_of_establishment"] = parse_year(row.get("Year_Of_Establishment"))
    values["collection_date"] = parse_date(row.get("Collection_Date"))
    return values


async def import_companies(
    session: AsyncSession,
    records: Iterable[Mapping[str, Any]],
    *,
    batch_size: int = BATCH_SIZE,
) -> int:
    """Insert dataset rows as companies.

    Rows without a company name are skipped. Each batch is flushed; the
    caller owns the commit.

    Returns:
        Number of inserted companies

    Raises:
        IngestError: If a batch fails to flush
    """
    inserted = 0
    skipped = 0
    batch: list[models.Company] = []

    async def flush_batch() -> None:
        nonlocal inserted
        if not batch:
            return
        session.add_all(batch)
        try:
            await session.flush()
        except Exception as e:
            logger.error(f"Failed to insert batch of {len(batch)} companies: {e}")
            raise IngestError(f"Failed to insert companies: {e}") from e
        inserted += len(batch)
        batch.clear()

    for row in records:
        values = map_row_to_company(row)
        if not values["company_name"]:
            skipped += 1
            continue
        batch.append(models.Company(**values))
        if len(batch) >= batch_size:
            await flush_batch()

    await flush_batch()

    logger.info(f"Imported {inserted} companies ({skipped} rows skipped)")
    return inserted

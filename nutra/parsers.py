"""Dataset file parsing for company imports.

Supports CSV and Excel directory exports via pandas.
"""
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, BinaryIO

import pandas as pd

logger = logging.getLogger(__name__)


class FileType(str, Enum):
    """Supported file types."""
    CSV = "csv"
    EXCEL = "excel"
    UNKNOWN = "unknown"


class DatasetParseError(Exception):
    """Raised when a dataset file cannot be parsed."""
    pass


def detect_file_type(filename: str, content: bytes | None = None) -> FileType:
    """Detect file type from filename or content.

    Args:
        filename: Original filename
        content: Optional file content for magic number detection

    Returns:
        Detected FileType
    """
    filename_lower = filename.lower()

    if filename_lower.endswith('.csv'):
        return FileType.CSV
    elif filename_lower.endswith(('.xls', '.xlsx', '.xlsm')):
        return FileType.EXCEL

    if content and content.startswith(b'PK\x03\x04'):  # ZIP/Office
        return FileType.EXCEL

    return FileType.UNKNOWN


def _records(df: pd.DataFrame) -> list[dict[str, Any]]:
    # Blank cells come back as NaN; the row mapper expects None
    df = df.astype(object).where(pd.notna(df), None)
    df.columns = [str(c).strip() for c in df.columns]
    return df.to_dict('records')


def parse_csv(file_obj: BinaryIO, filename: str) -> list[dict[str, Any]]:
    """Parse CSV file into structured records.

    Raises:
        DatasetParseError: If CSV parsing fails or the file is empty
    """
    try:
        df = pd.read_csv(
            file_obj,
            encoding='utf-8',
            dtype=str,
            keep_default_na=False,
            na_values=[''],
            skip_blank_lines=True,
            on_bad_lines='warn',
        )
    except Exception as e:
        logger.error(f"CSV parsing failed for {filename}: {e}")
        raise DatasetParseError(f"Failed to parse CSV: {e}") from e

    if df.empty:
        raise DatasetParseError(f"CSV file is empty: {filename}")

    logger.info(f"Parsed CSV {filename} with {len(df)} rows and {len(df.columns)} columns")
    return _records(df)


def parse_excel(file_obj: BinaryIO, filename: str, sheet_name: str | int = 0) -> list[dict[str, Any]]:
    """Parse Excel file into structured records.

    Raises:
        DatasetParseError: If Excel parsing fails or the sheet is empty
    """
    try:
        df = pd.read_excel(file_obj, sheet_name=sheet_name, engine='openpyxl', dtype=str)
    except Exception as e:
        logger.error(f"Excel parsing failed for {filename}: {e}")
        raise DatasetParseError(f"Failed to parse Excel: {e}") from e

    if df.empty:
        raise DatasetParseError(f"Excel sheet is empty: {filename}")

    logger.info(f"Parsed Excel {filename} with {len(df)} rows and {len(df.columns)} columns")
    return _records(df)


def parse_dataset(file_obj: BinaryIO, filename: str) -> list[dict[str, Any]]:
    """Parse an uploaded dataset file based on type.

    Raises:
        DatasetParseError: If file type unsupported or parsing fails
    """
    file_type = detect_file_type(filename)

    if file_type == FileType.CSV:
        return parse_csv(file_obj, filename)
    elif file_type == FileType.EXCEL:
        return parse_excel(file_obj, filename)
    else:
        raise DatasetParseError(f"Unsupported file type: {filename}")

"""
Spreadsheet extractor for agreement rows (.xlsx, .xls, .csv)
"""

import json
import pandas as pd
from typing import List, Dict, Any, Optional
from pathlib import Path
from core.exceptions import SpreadsheetReadError
import logging

logger = logging.getLogger(__name__)

EXCEL_SUFFIXES = {".xlsx", ".xlsm", ".xls"}
CSV_SUFFIXES = {".csv"}


def dataframe_to_records(df: pd.DataFrame) -> List[Dict[str, Any]]:
    """
    Convert a sheet to row mappings.

    Header whitespace is stripped, blank rows are dropped and empty cells
    become None.
    """
    df.columns = [str(column).strip() for column in df.columns]
    df = df.dropna(how="all")
    df = df.astype(object).where(pd.notna(df), None)

    records = df.to_dict(orient="records")
    for record in records:
        for column, value in record.items():
            if isinstance(value, str) and not value.strip():
                record[column] = None
    return records


def parse_raw_json(raw_json: Optional[str]) -> List[Dict[str, Any]]:
    """Rows stored as a JSON array (uploaded_files.raw_json)"""
    if not raw_json:
        return []
    try:
        data = json.loads(raw_json)
    except ValueError as e:
        raise SpreadsheetReadError(
            "Stored rows are not valid JSON",
            original_exception=e
        )
    if isinstance(data, dict):
        data = [data]
    if not isinstance(data, list):
        raise SpreadsheetReadError(
            "Stored rows must be a JSON array",
            context={"type": type(data).__name__}
        )
    return [row for row in data if isinstance(row, dict)]


class SpreadsheetExtractor:
    """
    Read agreement rows from a spreadsheet file.

    Supports:
    - Excel workbooks (first sheet, openpyxl engine for .xlsx)
    - CSV files (all cells read as text)
    """

    def __init__(self, file_path: str, sheet_name: Any = 0):
        self.file_path = Path(file_path)
        self.sheet_name = sheet_name

    @property
    def file_name(self) -> str:
        return self.file_path.name

    async def fetch_data(self) -> List[Dict[str, Any]]:
        """
        Read every row of the file.

        Raises:
            SpreadsheetReadError: File missing, unsupported or unreadable
        """
        context = {"file_name": self.file_name}

        if not self.file_path.exists():
            raise SpreadsheetReadError(f"File not found: {self.file_path}", context=context)

        suffix = self.file_path.suffix.lower()
        logger.info(f"Reading spreadsheet from {self.file_path}")

        try:
            if suffix in CSV_SUFFIXES:
                df = pd.read_csv(self.file_path, dtype=str)
            elif suffix in EXCEL_SUFFIXES:
                engine = "openpyxl" if suffix != ".xls" else None
                df = pd.read_excel(self.file_path, sheet_name=self.sheet_name, engine=engine)
            else:
                raise SpreadsheetReadError(f"Unsupported file type: {suffix or '(none)'}", context=context)
        except SpreadsheetReadError:
            raise
        except Exception as e:
            raise SpreadsheetReadError(
                f"Failed to read {self.file_name}",
                context=context,
                original_exception=e
            )

        records = dataframe_to_records(df)
        logger.info(f"Read {len(records)} records from {self.file_name}")
        return records

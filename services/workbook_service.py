"""
Workbook service - Open lead workbooks and locate sheets and columns.

Every lookup here either returns what was asked for or raises an
InputRejectedError naming what is missing.
"""

import io
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, Optional, Tuple

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from services.cell_service import CellParser, normalize_header
from services.exceptions import (
    MissingColumnError, MissingHeaderRowError, MissingSheetError, WorkbookReadError
)

logger = logging.getLogger(__name__)


class WorkbookReader:
    """Structural access to a lead workbook."""

    @staticmethod
    @contextmanager
    def open(content: bytes) -> Iterator[Workbook]:
        """
        Open workbook bytes and close the workbook on exit.

        Formula cells are read through their cached values, the way a
        spreadsheet application would display them.

        Raises:
            WorkbookReadError: If the bytes are not a readable XLSX workbook
        """
        try:
            workbook = openpyxl.load_workbook(io.BytesIO(content), data_only=True)
        except Exception as e:
            logger.error(f"Could not open workbook ({len(content)} bytes): {e}")
            raise WorkbookReadError() from e

        logger.debug(f"Opened workbook with sheets: {workbook.sheetnames}")
        try:
            yield workbook
        finally:
            workbook.close()

    @staticmethod
    def require_sheet(workbook: Workbook, name: str) -> Worksheet:
        """
        Find a sheet by exact name, then case-insensitively.

        Raises:
            MissingSheetError: If no sheet matches
        """
        if name in workbook.sheetnames:
            return workbook[name]

        for candidate in workbook.sheetnames:
            if candidate.lower() == name.lower():
                logger.debug(f"Sheet '{name}' matched as '{candidate}'")
                return workbook[candidate]

        raise MissingSheetError(name)

    @staticmethod
    def build_header_index(sheet: Worksheet) -> Dict[str, int]:
        """
        Map normalized header labels of the first row to 0-based column indexes.

        Blank header cells are ignored. When two headers normalize to the same
        label, the rightmost one wins. A first row that exists but is entirely
        blank yields an empty index, so the first required column lookup fails.

        Raises:
            MissingHeaderRowError: If the first row is absent
        """
        if not WorkbookReader.has_header_row(sheet):
            raise MissingHeaderRowError(sheet.title)

        headers = {}
        for index, cell in enumerate(next(sheet.iter_rows(min_row=1, max_row=1))):
            text = CellParser.cell_to_text(cell)
            if text:
                headers[normalize_header(text)] = index

        if not headers:
            logger.debug(f"Sheet '{sheet.title}' has a blank header row")
        return headers

    @staticmethod
    def has_header_row(sheet: Worksheet) -> bool:
        """
        Tell whether the first row of a sheet was ever written.

        openpyxl reports an untouched sheet as the single blank cell A1, and a
        sheet whose content starts lower down with a min_row above 1.
        """
        if sheet.min_row > 1:
            return False
        return sheet.calculate_dimension() != 'A1:A1' or sheet['A1'].value is not None

    @staticmethod
    def require_column(headers: Dict[str, int], name: str, sheet_name: Optional[str] = None) -> int:
        """
        Get the column index for a required header.

        Raises:
            MissingColumnError: If the header is not present
        """
        index = headers.get(normalize_header(name))
        if index is None:
            raise MissingColumnError(name, sheet_name)
        return index

    @staticmethod
    def iter_data_rows(sheet: Worksheet) -> Iterator[Tuple[int, tuple]]:
        """Yield (1-based row number, cells) for every row below the header."""
        for row_number, row in enumerate(sheet.iter_rows(min_row=2), 2):
            yield row_number, row

    @staticmethod
    def cell_at(row: tuple, index: int):
        """Get the cell at a column index, or None when the row is shorter."""
        if index < len(row):
            return row[index]
        return None

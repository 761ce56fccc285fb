"""
Cell service for reading typed values out of spreadsheet cells.

This module converts raw openpyxl cells into normalized text, timestamps and
tri-state booleans. Source sheets are typed by hand, so every conversion
tolerates stray whitespace, casing and accents.
"""

import re
import unicodedata
from datetime import date, datetime, time, timedelta
from typing import Any, Optional

from services.exceptions import InvalidDateError

# Accepted text layouts for DATA CADASTRO, tried in order
DATE_TIME_FORMATS = (
    '%d/%m/%Y %H:%M:%S',
    '%d/%m/%Y %H:%M',
    '%d/%m/%Y',
    '%Y-%m-%d %H:%M:%S',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
)

# VENDIDO vocabulary (Portuguese yes/no plus the usual boolean spellings)
TRUE_TOKENS = frozenset({'SIM', 'S', 'TRUE', '1'})
FALSE_TOKENS = frozenset({'NAO', 'N', 'FALSE', '0'})

_WHITESPACE = re.compile(r'\s+')

# Integer formats padded with leading zeros, e.g. '00000'
_ZERO_PADDED_FORMAT = re.compile(r'^0+$')

# Day zero of the 1900 date system; time-only and duration cells count from it
SPREADSHEET_EPOCH = datetime(1899, 12, 31)


def normalize_text(value: str) -> str:
    """
    Strip accents and surrounding whitespace, then uppercase.

    Example: ' Não ' -> 'NAO'
    """
    decomposed = unicodedata.normalize('NFD', value.strip())
    stripped = ''.join(ch for ch in decomposed if not unicodedata.combining(ch))
    return stripped.upper()


def normalize_header(value: str) -> str:
    """Normalize a header label so lookups ignore case, accents and spacing."""
    return _WHITESPACE.sub(' ', normalize_text(value))


def parse_tri_bool(value: Optional[str]) -> Optional[bool]:
    """
    Map a free-text yes/no answer to True, False or None.

    Args:
        value: Raw text, e.g. 'Sim', 'não', '1'

    Returns:
        True for SIM/S/TRUE/1, False for NAO/N/FALSE/0, None otherwise
    """
    if value is None or not value.strip():
        return None
    normalized = normalize_header(value)
    if normalized in TRUE_TOKENS:
        return True
    if normalized in FALSE_TOKENS:
        return False
    return None


def parse_datetime(value: str) -> Optional[datetime]:
    """Try every accepted layout; date-only layouts resolve to midnight."""
    for fmt in DATE_TIME_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    return None


class CellParser:
    """Read spreadsheet cells as normalized Python values."""

    @staticmethod
    def display_value(value: Any, number_format: Optional[str] = None) -> Optional[str]:
        """
        Render a raw cell value the way a spreadsheet shows it.

        Integral floats lose their trailing '.0' so numeric IDs like 12345
        come back as '12345'. Integral numbers under a zero-padded format
        keep their padding: 123 with format '00000' is '00123'.
        """
        if value is None:
            return None
        if isinstance(value, bool):
            return 'TRUE' if value else 'FALSE'
        if isinstance(value, (int, float)) and float(value).is_integer():
            text = str(int(value))
            section = (number_format or '').split(';')[0]
            if _ZERO_PADDED_FORMAT.match(section):
                sign = '-' if value < 0 else ''
                return sign + text.lstrip('-').zfill(len(section))
            return text
        if isinstance(value, datetime):
            return value.strftime('%Y-%m-%d %H:%M:%S')
        if isinstance(value, (date, time)):
            return value.isoformat()
        return str(value)

    @staticmethod
    def cell_to_text(cell) -> Optional[str]:
        """
        Get the trimmed display text of a cell.

        Args:
            cell: openpyxl cell (or None when the row is shorter than the header)

        Returns:
            Trimmed text, or None for an absent or blank cell
        """
        if cell is None:
            return None
        text = CellParser.display_value(cell.value, getattr(cell, 'number_format', None))
        if text is None:
            return None
        text = text.strip()
        return text or None

    @staticmethod
    def cell_to_timestamp(cell, row_number: int, sheet_name: str = 'BASE') -> Optional[datetime]:
        """
        Get a timestamp from a date- or time-typed cell or from date text.

        Time-only and duration cells are counted from SPREADSHEET_EPOCH, so
        10:00 becomes 1899-12-31 10:00.

        Args:
            cell: openpyxl cell or None
            row_number: 1-based spreadsheet row, used in error messages
            sheet_name: Sheet name, used in error messages

        Returns:
            datetime, or None for an absent or blank cell

        Raises:
            InvalidDateError: If the cell holds text matching no accepted layout
        """
        if cell is None or cell.value is None:
            return None

        value = cell.value
        if isinstance(value, datetime):
            return value
        if isinstance(value, date):
            return datetime.combine(value, time())
        if isinstance(value, time):
            return datetime.combine(SPREADSHEET_EPOCH.date(), value)
        if isinstance(value, timedelta):
            return SPREADSHEET_EPOCH + value

        text = CellParser.cell_to_text(cell)
        if text is None:
            return None

        parsed = parse_datetime(text)
        if parsed is None:
            raise InvalidDateError(sheet_name, row_number, text)
        return parsed

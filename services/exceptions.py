"""
Errors raised by the lead import pipeline.

InputRejectedError covers caller mistakes (bad file, missing sheet or column,
bad date, unknown lead). WorkbookReadError means the bytes could not be
opened as a spreadsheet at all.
"""

from typing import Optional


class LeadImportError(Exception):
    """Base class for failures raised on purpose by the import pipeline."""


class InputRejectedError(LeadImportError, ValueError):
    """The uploaded workbook does not honor the expected layout or content."""


class EmptyFileError(InputRejectedError):
    def __init__(self):
        super().__init__("File is required.")


class MissingSheetError(InputRejectedError):
    def __init__(self, sheet: str):
        self.sheet = sheet
        super().__init__(f"Missing sheet: {sheet}")


class MissingHeaderRowError(InputRejectedError):
    def __init__(self, sheet: str):
        self.sheet = sheet
        super().__init__(f"Missing header row in sheet: {sheet}")


class MissingColumnError(InputRejectedError):
    def __init__(self, column: str, sheet: Optional[str] = None):
        self.column = column
        self.sheet = sheet
        where = f" in sheet {sheet}" if sheet else ""
        super().__init__(f"Missing column: {column}{where}")


class InvalidDateError(InputRejectedError):
    def __init__(self, sheet: str, row: int, value: str):
        self.sheet = sheet
        self.row = row
        self.value = value
        super().__init__(f"Invalid date in {sheet} at row {row}: {value}")


class UnresolvedLeadError(InputRejectedError):
    """A dimensional row points at a LEAD_ID the BASE sheet never declared."""

    def __init__(self, lead_id: str, sheet: Optional[str] = None, row: Optional[int] = None):
        self.lead_id = lead_id
        self.sheet = sheet
        self.row = row
        where = f" (sheet {sheet}, row {row})" if sheet and row else ""
        super().__init__(f"Lead ID not found in BASE: {lead_id}{where}")


class WorkbookReadError(LeadImportError):
    def __init__(self, message: str = "Unable to read XLSX file."):
        super().__init__(message)

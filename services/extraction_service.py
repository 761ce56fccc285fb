"""
Extraction Service - Turn a lead workbook into a persisted lead graph.

This module contains the spreadsheet import workflow: it reads the BASE
sheet into an in-memory map of leads keyed by LEAD_ID, resolves every
dimensional sheet against that map, and hands the validated graph to a
LeadStore inside a single transaction.
"""

import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

from openpyxl.workbook.workbook import Workbook

from backend.models.schema import (
    Document, Lead, Market, Source, Location, Size, Objective
)
from services.cell_service import CellParser, normalize_header, parse_tri_bool
from services.excel_schema import Columns, FactKinds, Sheets
from services.exceptions import EmptyFileError, LeadImportError, UnresolvedLeadError
from services.persistence_service import LeadStore
from services.workbook_service import WorkbookReader

logger = logging.getLogger(__name__)


class UploadedFile:
    """Inbound workbook: raw bytes plus the name and type the caller declared."""

    def __init__(self, content: bytes, filename: Optional[str] = None,
                 content_type: Optional[str] = None):
        self.content = content
        self.filename = filename
        self.content_type = content_type

    def is_empty(self) -> bool:
        return not self.content

    def __repr__(self):
        return f"<UploadedFile(filename='{self.filename}', size={len(self.content or b'')})>"


def _build_market(lead: Lead, value: str, extras: Dict[str, Optional[str]]) -> Market:
    return Market(name=value, lead=lead)


def _build_source(lead: Lead, value: str, extras: Dict[str, Optional[str]]) -> Source:
    return Source(name=value, sub_source=extras.get(Columns.SUB_ORIGEM), lead=lead)


def _build_location(lead: Lead, value: str, extras: Dict[str, Optional[str]]) -> Location:
    return Location(name=value, lead=lead)


def _build_size(lead: Lead, value: str, extras: Dict[str, Optional[str]]) -> Size:
    return Size(size_range=value, lead=lead)


def _build_objective(lead: Lead, value: str, extras: Dict[str, Optional[str]]) -> Objective:
    return Objective(description=value, lead=lead)


# (sheet, fact kind, value column, extra columns, fact builder), in processing order
DIMENSION_SHEETS = (
    (Sheets.MERCADO, FactKinds.MARKET, Columns.MERCADO, (), _build_market),
    (Sheets.ORIGEM, FactKinds.SOURCE, Columns.ORIGEM, (Columns.SUB_ORIGEM,), _build_source),
    (Sheets.LOCAL, FactKinds.LOCATION, Columns.LOCAL, (), _build_location),
    (Sheets.PORTE, FactKinds.SIZE, Columns.PORTE, (), _build_size),
    (Sheets.OBJETIVO, FactKinds.OBJECTIVE, Columns.OBJETIVO, (), _build_objective),
)


class ExtractionService:
    """
    Spreadsheet-to-graph import workflow.

    One call to extract() is all-or-nothing: either every lead and every
    dimensional fact of the file is committed, or none is.
    """

    def __init__(
        self,
        store: LeadStore,
        progress_callback: Optional[Callable[[str, float, str], None]] = None
    ):
        """
        Initialize extraction service.

        Args:
            store: Storage boundary receiving the extracted graph
            progress_callback: Optional callback for progress updates
                              Signature: callback(stage: str, percent: float, message: str)
        """
        self.store = store
        self.progress_callback = progress_callback or (lambda *args: None)

    def _emit_progress(self, stage: str, percent: float, message: str):
        """Emit progress update via callback."""
        self.progress_callback(stage, percent, message)
        logger.info(f"Progress: {stage} ({percent:.1f}%) - {message}")

    def extract(self, upload: Optional[UploadedFile]) -> Dict[str, Any]:
        """
        Main extraction workflow.

        Args:
            upload: Workbook bytes with declared name and content type

        Returns:
            Summary dictionary:
            {
                'document_id': int,
                'leads': int,
                'facts': {'market': int, 'source': int, ...}
            }

        Raises:
            EmptyFileError: If no file or an empty file was given
            WorkbookReadError: If the bytes are not a readable workbook
            InputRejectedError: If a sheet, column, date or lead reference is invalid
        """
        if upload is None or upload.is_empty():
            raise EmptyFileError()

        logger.info(f"Starting extraction of {upload!r}")
        document_id = None

        try:
            with self.store.transaction():
                self._emit_progress('document', 5, 'Recording document...')
                document = self.store.save_document(Document(
                    name=upload.filename,
                    content_type=upload.content_type,
                    content=upload.content
                ))
                document_id = document.id

                with WorkbookReader.open(upload.content) as workbook:
                    leads, facts = self.read_workbook(workbook, document)

                self._emit_progress('saving', 80, f"Saving {len(leads)} leads...")
                self.store.save_all_leads(list(leads.values()))
                for kind in FactKinds.ALL:
                    if facts[kind]:
                        self.store.save_all_facts(kind, facts[kind])

        except LeadImportError as e:
            logger.error(f"Extraction of '{upload.filename}' failed "
                         f"(document {document_id} rolled back): {e}", exc_info=True)
            raise

        self._emit_progress('complete', 100, 'Extraction complete')

        summary = {
            'document_id': document_id,
            'leads': len(leads),
            'facts': {kind: len(facts[kind]) for kind in FactKinds.ALL}
        }
        logger.info(f"Extraction completed: {summary}")
        return summary

    def read_workbook(self, workbook: Workbook,
                      document: Optional[Document] = None) -> Tuple[Dict[str, Lead], Dict[str, List]]:
        """
        Build the lead graph of an opened workbook without saving anything.

        Returns:
            (leads keyed by LEAD_ID, facts keyed by fact kind)
        """
        self._emit_progress('parsing', 10, f"Reading sheet {Sheets.BASE}...")
        leads, base_markets = self._read_base_sheet(workbook, document)

        facts = {kind: [] for kind in FactKinds.ALL}
        for key, row_number, name in base_markets:
            lead = self._find_lead(leads, key, Sheets.BASE, row_number)
            facts[FactKinds.MARKET].append(Market(name=name, lead=lead))

        for step, (sheet_name, kind, value_column, extra_columns, build_fact) in enumerate(DIMENSION_SHEETS):
            self._emit_progress('parsing', 20 + step * 12, f"Reading sheet {sheet_name}...")
            facts[kind].extend(self._read_dimension_sheet(
                workbook, leads, sheet_name, value_column, build_fact, extra_columns
            ))

        return leads, facts

    def _read_base_sheet(self, workbook: Workbook,
                         document: Optional[Document]) -> Tuple[Dict[str, Lead], List[Tuple[str, int, str]]]:
        """
        Read BASE into a map of leads keyed by LEAD_ID.

        A later row with the same LEAD_ID replaces the earlier one. Values of
        the optional MERCADO column are returned as (key, row, name) so they
        can be attached to the surviving lead afterwards.
        """
        sheet = WorkbookReader.require_sheet(workbook, Sheets.BASE)
        headers = WorkbookReader.build_header_index(sheet)
        lead_id_index = WorkbookReader.require_column(headers, Columns.LEAD_ID, sheet.title)
        created_at_index = WorkbookReader.require_column(headers, Columns.DATA_CADASTRO, sheet.title)
        sold_index = WorkbookReader.require_column(headers, Columns.VENDIDO, sheet.title)
        market_index = headers.get(normalize_header(Columns.MERCADO))

        leads = {}
        base_markets = []
        for row_number, row in WorkbookReader.iter_data_rows(sheet):
            lead_id = CellParser.cell_to_text(WorkbookReader.cell_at(row, lead_id_index))
            if lead_id is None:
                logger.debug(f"{sheet.title} row {row_number}: blank LEAD_ID, skipped")
                continue

            leads[lead_id] = Lead(
                lead_code=lead_id,
                document=document,
                created_at=CellParser.cell_to_timestamp(
                    WorkbookReader.cell_at(row, created_at_index), row_number, sheet.title
                ),
                sold=parse_tri_bool(
                    CellParser.cell_to_text(WorkbookReader.cell_at(row, sold_index))
                )
            )

            if market_index is not None:
                market = CellParser.cell_to_text(WorkbookReader.cell_at(row, market_index))
                if market is not None:
                    base_markets.append((lead_id, row_number, market))

        logger.info(f"Sheet {sheet.title}: {len(leads)} leads")
        return leads, base_markets

    def _read_dimension_sheet(
        self,
        workbook: Workbook,
        leads: Dict[str, Lead],
        sheet_name: str,
        value_column: str,
        build_fact: Callable[[Lead, str, Dict[str, Optional[str]]], Any],
        extra_columns: Tuple[str, ...] = ()
    ) -> List:
        """
        Read one dimensional sheet into a list of facts.

        Rows with a blank LEAD_ID are skipped. The LEAD_ID of every other row
        must exist in BASE, even when the dimension value itself is blank.
        """
        sheet = WorkbookReader.require_sheet(workbook, sheet_name)
        headers = WorkbookReader.build_header_index(sheet)
        lead_id_index = WorkbookReader.require_column(headers, Columns.LEAD_ID, sheet.title)
        value_index = WorkbookReader.require_column(headers, value_column, sheet.title)
        extra_indexes = {
            column: WorkbookReader.require_column(headers, column, sheet.title)
            for column in extra_columns
        }

        facts = []
        for row_number, row in WorkbookReader.iter_data_rows(sheet):
            lead_id = CellParser.cell_to_text(WorkbookReader.cell_at(row, lead_id_index))
            if lead_id is None:
                continue

            lead = self._find_lead(leads, lead_id, sheet.title, row_number)

            value = CellParser.cell_to_text(WorkbookReader.cell_at(row, value_index))
            if value is None:
                logger.debug(f"{sheet.title} row {row_number}: blank {value_column}, skipped")
                continue

            extras = {
                column: CellParser.cell_to_text(WorkbookReader.cell_at(row, index))
                for column, index in extra_indexes.items()
            }
            facts.append(build_fact(lead, value, extras))

        logger.info(f"Sheet {sheet.title}: {len(facts)} facts")
        return facts

    @staticmethod
    def _find_lead(leads: Dict[str, Lead], lead_id: str, sheet_name: str, row_number: int) -> Lead:
        """Resolve a LEAD_ID against BASE; unknown keys abort the import."""
        lead = leads.get(lead_id.strip())
        if lead is None:
            raise UnresolvedLeadError(lead_id, sheet_name, row_number)
        return lead

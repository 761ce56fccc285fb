"""
Tests for workbook opening and sheet/column lookups.
"""

import pytest

from conftest import build_workbook
from services.exceptions import (
    MissingColumnError, MissingHeaderRowError, MissingSheetError, WorkbookReadError
)
from services.workbook_service import WorkbookReader


class TestOpen:
    """Test opening workbook bytes."""

    def test_opens_valid_workbook(self):
        content = build_workbook({'BASE': [['LEAD_ID']]})

        with WorkbookReader.open(content) as workbook:
            assert workbook.sheetnames == ['BASE']

    def test_rejects_non_workbook(self):
        with pytest.raises(WorkbookReadError) as exc_info:
            with WorkbookReader.open(b'plain text, not a spreadsheet'):
                pass

        assert str(exc_info.value) == 'Unable to read XLSX file.'
        assert exc_info.value.__cause__ is not None


class TestRequireSheet:
    """Test sheet lookup."""

    def test_exact_name(self):
        with WorkbookReader.open(build_workbook({'BASE': [['x']], 'Mercado': [['y']]})) as workbook:
            assert WorkbookReader.require_sheet(workbook, 'BASE').title == 'BASE'

    def test_case_insensitive_fallback(self):
        with WorkbookReader.open(build_workbook({'Mercado': [['x']]})) as workbook:
            assert WorkbookReader.require_sheet(workbook, 'MERCADO').title == 'Mercado'

    def test_missing_sheet(self):
        with WorkbookReader.open(build_workbook({'BASE': [['x']]})) as workbook:
            with pytest.raises(MissingSheetError) as exc_info:
                WorkbookReader.require_sheet(workbook, 'ORIGEM')

        assert str(exc_info.value) == 'Missing sheet: ORIGEM'


class TestHeaders:
    """Test header indexing and column lookup."""

    def test_header_index_is_normalized(self):
        content = build_workbook({'BASE': [['lead_id', ' Data  Cadastro', None, 'Vendido']]})

        with WorkbookReader.open(content) as workbook:
            headers = WorkbookReader.build_header_index(workbook['BASE'])

        assert headers == {'LEAD_ID': 0, 'DATA CADASTRO': 1, 'VENDIDO': 3}

    def test_missing_header_row(self):
        content = build_workbook({'LOCAL': []})

        with WorkbookReader.open(content) as workbook:
            with pytest.raises(MissingHeaderRowError) as exc_info:
                WorkbookReader.build_header_index(workbook['LOCAL'])

        assert 'LOCAL' in str(exc_info.value)

    def test_first_row_never_written(self):
        content = build_workbook({'LOCAL': [[], ['LEAD_ID', 'LOCAL']]})

        with WorkbookReader.open(content) as workbook:
            assert not WorkbookReader.has_header_row(workbook['LOCAL'])
            with pytest.raises(MissingHeaderRowError):
                WorkbookReader.build_header_index(workbook['LOCAL'])

    def test_blank_header_row_has_no_columns(self):
        content = build_workbook(
            {'LOCAL': [[None, None], ['12345', 'Recife']]},
            number_formats={'LOCAL': {'A1': '@', 'B1': '@'}}
        )

        with WorkbookReader.open(content) as workbook:
            headers = WorkbookReader.build_header_index(workbook['LOCAL'])

        assert headers == {}
        with pytest.raises(MissingColumnError) as exc_info:
            WorkbookReader.require_column(headers, 'LEAD_ID', 'LOCAL')
        assert str(exc_info.value) == 'Missing column: LEAD_ID in sheet LOCAL'

    def test_require_column(self):
        headers = {'LEAD_ID': 0, 'SUB-ORIGEM': 2}

        assert WorkbookReader.require_column(headers, 'lead_id') == 0
        assert WorkbookReader.require_column(headers, 'Sub-Origem') == 2

    def test_missing_column(self):
        with pytest.raises(MissingColumnError) as exc_info:
            WorkbookReader.require_column({'LEAD_ID': 0}, 'VENDIDO', 'BASE')

        assert exc_info.value.column == 'VENDIDO'
        assert 'Missing column: VENDIDO' in str(exc_info.value)


class TestRows:
    """Test data row iteration."""

    def test_iter_data_rows_skips_header(self):
        content = build_workbook({'BASE': [['LEAD_ID', 'VENDIDO'], ['1', 'SIM'], ['2']]})

        with WorkbookReader.open(content) as workbook:
            rows = list(WorkbookReader.iter_data_rows(workbook['BASE']))

            assert [number for number, _ in rows] == [2, 3]
            assert rows[0][1][0].value == '1'
            assert WorkbookReader.cell_at(rows[1][1], 5) is None

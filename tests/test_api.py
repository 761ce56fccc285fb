"""
HTTP tests for the upload and report endpoints.
"""

import pytest
from fastapi import HTTPException
from fastapi.concurrency import run_in_threadpool
from fastapi.testclient import TestClient

from conftest import build_workbook
from api.config import settings
from api.dependencies import get_db, verify_file_size, verify_filename
from api.main import app
from api.routers import etl_router
from backend.models.schema import Document, Lead

XLSX_TYPE = 'application/vnd.openxmlformats-officedocument.spreadsheetml.sheet'


@pytest.fixture
def client(session):
    """Test client whose requests use the test session."""
    app.dependency_overrides[get_db] = lambda: session
    yield TestClient(app)
    app.dependency_overrides.clear()


def upload(client, content, filename='leads.xlsx'):
    return client.post('/api/etl/upload', files={'file': (filename, content, XLSX_TYPE)})


class TestUpload:
    """Test POST /api/etl/upload."""

    def test_valid_workbook(self, client, session, lead_sheets):
        response = upload(client, build_workbook(lead_sheets))

        assert response.status_code == 201
        body = response.json()
        assert body['leads'] == 1
        assert body['facts']['market'] == 1
        assert body['facts']['source'] == 1
        assert session.query(Lead).count() == 1
        assert session.query(Document).one().name == 'leads.xlsx'

    def test_extraction_runs_in_threadpool(self, client, lead_sheets, monkeypatch):
        offloaded = []

        async def spy(func, *args, **kwargs):
            offloaded.append(func)
            return await run_in_threadpool(func, *args, **kwargs)

        monkeypatch.setattr(etl_router, 'run_in_threadpool', spy)

        response = upload(client, build_workbook(lead_sheets))

        assert response.status_code == 201
        assert [func.__name__ for func in offloaded] == ['extract']

    @pytest.mark.parametrize('filename', ['leads.csv', 'leads.xls', 'leads.xlsx.txt'])
    def test_rejected_filename(self, client, session, lead_sheets, filename):
        response = upload(client, build_workbook(lead_sheets), filename)

        assert response.status_code == 400
        assert session.query(Document).count() == 0

    def test_empty_file(self, client):
        response = upload(client, b'')

        assert response.status_code == 400
        assert response.json()['error'] == 'File is required.'

    def test_missing_sheet(self, client, session, lead_sheets):
        del lead_sheets['PORTE']

        response = upload(client, build_workbook(lead_sheets))

        assert response.status_code == 400
        body = response.json()
        assert body['error'] == 'Missing sheet: PORTE'
        assert body['detail'] == {'type': 'MissingSheetError'}
        assert session.query(Document).count() == 0

    def test_unresolved_lead(self, client, session, lead_sheets):
        lead_sheets['MERCADO'].append(['99999', 'Saúde'])

        response = upload(client, build_workbook(lead_sheets))

        assert response.status_code == 400
        assert '99999' in response.json()['error']
        assert session.query(Lead).count() == 0

    def test_unreadable_workbook(self, client, session):
        response = upload(client, b'this is not a zip archive')

        assert response.status_code == 422
        assert response.json()['error'] == 'Unable to read XLSX file.'
        assert session.query(Document).count() == 0


class TestReport:
    """Test GET /api/v1/analytics/report."""

    def test_empty_report(self, client):
        response = client.get('/api/v1/analytics/report')

        assert response.status_code == 200
        body = response.json()
        assert body['global_stats'] == {'total_leads': 0, 'total_sales': 0, 'overall_conversion_rate': 0.0}
        assert [a['dimension'] for a in body['analyses']] == ['MERCADO', 'ORIGEM']
        assert body['top_insights'] == {}

    def test_report_after_upload(self, client, lead_sheets):
        upload(client, build_workbook(lead_sheets))

        body = client.get('/api/v1/analytics/report').json()

        assert body['global_stats']['total_sales'] == 1
        mercado = body['analyses'][0]
        assert mercado['description'] == 'Performance por segmento'
        assert mercado['ranking'] == [{
            'group_name': 'Tecnologia',
            'total_leads': 1,
            'total_sold': 1,
            'conversion_rate': 100.0,
            'status': 'INCONCLUSIVE'
        }]
        assert body['report_id']

    def test_reports_are_fresh(self, client):
        first = client.get('/api/v1/analytics/report').json()
        second = client.get('/api/v1/analytics/report').json()

        assert first['report_id'] != second['report_id']


class TestHealth:
    """Test liveness endpoints."""

    def test_ping(self, client):
        assert client.get('/api/ping').json() == {'ping': 'pong'}


class TestUploadValidation:
    """Test upload checks that run before extraction."""

    @pytest.mark.parametrize('filename', ['', '   ', '../leads.xlsx', 'dir/leads.xlsx',
                                          'dir\\leads.xlsx', 'leads.csv', 'leads'])
    def test_rejected_filenames(self, filename):
        with pytest.raises(HTTPException) as exc_info:
            verify_filename(filename)

        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize('filename', ['leads.xlsx', 'LEADS.XLSX', 'leads 2026.xlsx'])
    def test_accepted_filenames(self, filename):
        assert verify_filename(filename) is True

    def test_file_too_large(self):
        with pytest.raises(HTTPException) as exc_info:
            verify_file_size(settings.MAX_FILE_SIZE_MB * 1024 * 1024 + 1)

        assert exc_info.value.status_code == 413
        assert verify_file_size(1024) is True

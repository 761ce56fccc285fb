"""
Pytest configuration and fixtures for lead import tests.
"""

import io
import os
from contextlib import contextmanager

import openpyxl
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from dotenv import load_dotenv

from backend.models.schema import Base
from services.persistence_service import LeadStore

# Load environment
load_dotenv()

# Test database URL (in-memory SQLite unless overridden)
TEST_DATABASE_URL = os.getenv('TEST_DATABASE_URL', 'sqlite://')


@pytest.fixture(scope='function')
def engine():
    """Create a fresh test database engine per test."""
    if TEST_DATABASE_URL.startswith('sqlite'):
        eng = create_engine(
            TEST_DATABASE_URL,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool
        )
    else:
        eng = create_engine(TEST_DATABASE_URL)
    Base.metadata.create_all(eng)
    yield eng
    Base.metadata.drop_all(eng)
    eng.dispose()


@pytest.fixture(scope='function')
def session(engine):
    """Create a new database session for a test."""
    Session = sessionmaker(bind=engine, autoflush=False)
    sess = Session()

    yield sess

    sess.close()


def build_workbook(sheets, number_formats=None):
    """
    Build XLSX bytes from {sheet name: [rows]}.

    A sheet mapped to an empty list has no rows at all, not even a header.
    number_formats maps a sheet name to {cell coordinate: format code}.
    """
    workbook = openpyxl.Workbook()
    workbook.remove(workbook.active)
    for name, rows in sheets.items():
        worksheet = workbook.create_sheet(name)
        for row in rows:
            worksheet.append(row)
        for coordinate, number_format in (number_formats or {}).get(name, {}).items():
            worksheet[coordinate].number_format = number_format
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


@pytest.fixture
def lead_sheets():
    """Minimal valid workbook layout: one sold lead with a market and a source."""
    return {
        'BASE': [
            ['LEAD_ID', 'DATA CADASTRO', 'VENDIDO'],
            ['12345', '01/01/2026 10:00', 'SIM'],
        ],
        'MERCADO': [
            ['LEAD_ID', 'MERCADO'],
            ['12345', 'Tecnologia'],
        ],
        'ORIGEM': [
            ['LEAD_ID', 'ORIGEM', 'SUB-ORIGEM'],
            ['12345', 'Google', 'Ads'],
        ],
        'LOCAL': [['LEAD_ID', 'LOCAL']],
        'PORTE': [['LEAD_ID', 'PORTE']],
        'OBJETIVO': [['LEAD_ID', 'OBJETIVO']],
    }


class RecordingStore(LeadStore):
    """LeadStore keeping every call in memory."""

    def __init__(self):
        self.calls = []
        self.committed = False
        self.rolled_back = False

    def save_document(self, document):
        document.id = 1
        self.calls.append(('document', document))
        return document

    def save_all_leads(self, leads):
        self.calls.append(('leads', list(leads)))

    def save_all_facts(self, kind, facts):
        self.calls.append((kind, list(facts)))

    @contextmanager
    def transaction(self):
        try:
            yield self
            self.committed = True
        except Exception:
            self.rolled_back = True
            raise

    def saved(self, name):
        """Get the batch recorded under a call name, or None."""
        for call_name, payload in self.calls:
            if call_name == name:
                return payload
        return None


@pytest.fixture
def recording_store():
    return RecordingStore()


class MockCell:
    """Stand-in for an openpyxl cell."""

    def __init__(self, value, number_format='General'):
        self.value = value
        self.number_format = number_format

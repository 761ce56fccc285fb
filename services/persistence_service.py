"""
Persistence Service - Storage boundary for extracted lead graphs.

The extraction pipeline only talks to LeadStore. SqlAlchemyLeadStore is the
concrete store used by the API and the CLI.
"""

import logging
from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List

from sqlalchemy.orm import Session

from backend.models.schema import Document, Lead
from services.excel_schema import FactKinds

logger = logging.getLogger(__name__)


class LeadStore(ABC):
    """Outbound storage boundary used by the extraction pipeline."""

    @abstractmethod
    def save_document(self, document: Document) -> Document:
        """Record the uploaded document."""

    @abstractmethod
    def save_all_leads(self, leads: List[Lead]) -> None:
        """Record a batch of leads."""

    @abstractmethod
    def save_all_facts(self, kind: str, facts: List) -> None:
        """Record a batch of dimensional facts of one kind."""

    @abstractmethod
    def transaction(self):
        """Context manager spanning one whole extraction."""


class SqlAlchemyLeadStore(LeadStore):
    """
    LeadStore backed by a SQLAlchemy session.

    Saves are flushed, not committed. The enclosing transaction() commits
    everything at once or rolls everything back.
    """

    def __init__(self, db_session: Session):
        self.session = db_session

    def save_document(self, document: Document) -> Document:
        self.session.add(document)
        self.session.flush()  # Get document.id
        logger.info(f"Saved document {document.id} ('{document.name}')")
        return document

    def save_all_leads(self, leads: List[Lead]) -> None:
        self.session.add_all(leads)
        self.session.flush()
        logger.info(f"Saved {len(leads)} leads")

    def save_all_facts(self, kind: str, facts: List) -> None:
        if kind not in FactKinds.ALL:
            raise ValueError(f"Unsupported fact kind: {kind}")
        self.session.add_all(facts)
        self.session.flush()
        logger.info(f"Saved {len(facts)} {kind} facts")

    @contextmanager
    def transaction(self) -> Iterator[Session]:
        try:
            yield self.session
            self.session.commit()
        except Exception:
            logger.warning("Rolling back import transaction")
            self.session.rollback()
            raise

"""
SQLAlchemy models for the lead import system.

This module defines the relational graph produced by one spreadsheet import:
a Document owns Leads, and every Lead owns zero or more dimensional facts
(Market, Source, Location, Size, Objective).
"""

from sqlalchemy import (
    Boolean, Column, Integer, String, Text, LargeBinary, TIMESTAMP,
    ForeignKey, Index, text
)
from sqlalchemy.orm import declarative_base, relationship

Base = declarative_base()


class Document(Base):
    """Original binary of an imported workbook."""

    __tablename__ = 'documents'
    __table_args__ = (
        Index('idx_documents_uploaded_at', 'uploaded_at'),
        {'comment': 'Original uploaded workbook, kept for audit'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    name = Column(
        String(255),
        nullable=True,
        comment='Declared filename of the upload'
    )
    content_type = Column(
        String(255),
        nullable=True,
        comment='Declared content type of the upload'
    )
    content = Column(
        LargeBinary,
        nullable=False,
        comment='Raw workbook bytes'
    )
    uploaded_at = Column(
        TIMESTAMP,
        server_default=text('CURRENT_TIMESTAMP'),
        nullable=False,
        comment='Upload timestamp'
    )

    leads = relationship('Lead', back_populates='document')

    def __repr__(self):
        return f"<Document(id={self.id}, name='{self.name}')>"


class Lead(Base):
    """A prospective customer, aggregate root of one BASE row."""

    __tablename__ = 'leads'
    __table_args__ = (
        Index('idx_leads_document', 'document_id'),
        Index('idx_leads_code', 'lead_code'),
        Index('idx_leads_sold', 'sold'),
        {'comment': 'Leads declared in the BASE sheet'}
    )

    id = Column(
        Integer,
        primary_key=True,
        autoincrement=True,
        nullable=False
    )
    document_id = Column(
        Integer,
        ForeignKey('documents.id', ondelete='CASCADE'),
        nullable=True,
        comment='Workbook this lead was imported from'
    )
    lead_code = Column(
        String(255),
        nullable=False,
        comment='Business key from the LEAD_ID column'
    )
    created_at = Column(
        TIMESTAMP,
        nullable=True,
        comment='DATA CADASTRO value'
    )
    sold = Column(
        Boolean,
        nullable=True,
        comment='VENDIDO flag: true, false or unknown'
    )

    document = relationship('Document', back_populates='leads')
    markets = relationship('Market', back_populates='lead', cascade='all, delete-orphan')
    sources = relationship('Source', back_populates='lead', cascade='all, delete-orphan')
    locations = relationship('Location', back_populates='lead', cascade='all, delete-orphan')
    sizes = relationship('Size', back_populates='lead', cascade='all, delete-orphan')
    objectives = relationship('Objective', back_populates='lead', cascade='all, delete-orphan')

    def __repr__(self):
        return f"<Lead(id={self.id}, lead_code='{self.lead_code}', sold={self.sold})>"


class Market(Base):
    """Market segment a lead belongs to."""

    __tablename__ = 'markets'
    __table_args__ = (
        Index('idx_markets_lead', 'lead_id'),
        Index('idx_markets_name', 'name'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    lead_id = Column(
        Integer,
        ForeignKey('leads.id', ondelete='CASCADE'),
        nullable=False
    )
    name = Column(
        String(255),
        nullable=False,
        comment='Segment name, e.g. Tecnologia'
    )

    lead = relationship('Lead', back_populates='markets')

    def __repr__(self):
        return f"<Market(lead_id={self.lead_id}, name='{self.name}')>"


class Source(Base):
    """Acquisition channel of a lead."""

    __tablename__ = 'sources'
    __table_args__ = (
        Index('idx_sources_lead', 'lead_id'),
        Index('idx_sources_name', 'name'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    lead_id = Column(
        Integer,
        ForeignKey('leads.id', ondelete='CASCADE'),
        nullable=False
    )
    name = Column(
        String(255),
        nullable=False,
        comment='Channel name, e.g. Google'
    )
    sub_source = Column(
        String(255),
        nullable=True,
        comment='Sub-channel from SUB-ORIGEM'
    )

    lead = relationship('Lead', back_populates='sources')

    def __repr__(self):
        return f"<Source(lead_id={self.lead_id}, name='{self.name}', sub_source='{self.sub_source}')>"


class Location(Base):
    """Geographic location of a lead."""

    __tablename__ = 'locations'
    __table_args__ = (
        Index('idx_locations_lead', 'lead_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    lead_id = Column(
        Integer,
        ForeignKey('leads.id', ondelete='CASCADE'),
        nullable=False
    )
    name = Column(String(255), nullable=False, comment='City, state or region')

    lead = relationship('Lead', back_populates='locations')

    def __repr__(self):
        return f"<Location(lead_id={self.lead_id}, name='{self.name}')>"


class Size(Base):
    """Company size range of a lead."""

    __tablename__ = 'sizes'
    __table_args__ = (
        Index('idx_sizes_lead', 'lead_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    lead_id = Column(
        Integer,
        ForeignKey('leads.id', ondelete='CASCADE'),
        nullable=False
    )
    size_range = Column(String(255), nullable=False, comment='PORTE value')

    lead = relationship('Lead', back_populates='sizes')

    def __repr__(self):
        return f"<Size(lead_id={self.lead_id}, size_range='{self.size_range}')>"


class Objective(Base):
    """Declared goal of a lead."""

    __tablename__ = 'objectives'
    __table_args__ = (
        Index('idx_objectives_lead', 'lead_id'),
    )

    id = Column(Integer, primary_key=True, autoincrement=True, nullable=False)
    lead_id = Column(
        Integer,
        ForeignKey('leads.id', ondelete='CASCADE'),
        nullable=False
    )
    description = Column(Text, nullable=False, comment='OBJETIVO free text')

    lead = relationship('Lead', back_populates='objectives')

    def __repr__(self):
        return f"<Objective(lead_id={self.lead_id})>"

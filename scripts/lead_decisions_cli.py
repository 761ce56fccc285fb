#!/usr/bin/env python3
"""
Lead workbook import and report CLI

Usage:
    # Import a workbook into DATABASE_URL
    python scripts/lead_decisions_cli.py import --file leads.xlsx

    # Print the marketing report
    python scripts/lead_decisions_cli.py report [--threshold 10] [--dimension MERCADO --dimension ORIGEM] [--json]
"""

import os
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

import mimetypes
import logging
from typing import Tuple

import click
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from backend.models.schema import Base
from services.aggregation_service import SqlAlchemyAggregationAdapter
from services.analytics_service import (
    AnalyticsService, DEFAULT_DIMENSIONS, DEFAULT_STATISTICAL_THRESHOLD, DIMENSIONS
)
from services.exceptions import LeadImportError
from services.extraction_service import ExtractionService, UploadedFile
from services.persistence_service import SqlAlchemyLeadStore

# Load environment variables
load_dotenv()

# Configure logging
LOG_LEVEL = os.getenv('LOG_LEVEL', 'INFO')
LOG_FILE = os.getenv('LOG_FILE', 'cli.log')

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(LOG_FILE),
        logging.StreamHandler(sys.stderr)
    ]
)

logger = logging.getLogger('lead_decisions_cli')

# Configuration
DATABASE_URL = os.getenv('DATABASE_URL', 'sqlite:///./lead_decisions.db')


def open_session():
    """Create tables if needed and return a new session."""
    engine = create_engine(DATABASE_URL)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine)
    return Session()


@click.group()
def cli():
    """Lead workbook import and marketing report CLI"""


@cli.command('import')
@click.option('--file', '-f', 'file_path', required=True, type=click.Path(exists=True, dir_okay=False),
              help='Path to the lead workbook (.xlsx)')
def import_cmd(file_path: str):
    """Import a lead workbook."""
    click.echo(f"\n📁 Importing: {file_path}")

    def on_progress(stage: str, percent: float, message: str):
        bar_length = 40
        filled = int(bar_length * percent / 100)
        bar = '█' * filled + '░' * (bar_length - filled)
        click.echo(f"\r[{bar}] {percent:.1f}% - {stage}: {message}", nl=False)

    upload = UploadedFile(
        content=Path(file_path).read_bytes(),
        filename=Path(file_path).name,
        content_type=mimetypes.guess_type(file_path)[0]
    )

    session = open_session()
    try:
        service = ExtractionService(SqlAlchemyLeadStore(session), progress_callback=on_progress)
        result = service.extract(upload)
    except LeadImportError as e:
        click.echo()
        click.echo(f"\n✗ Import failed: {e}", err=True)
        sys.exit(1)
    finally:
        session.close()

    click.echo()  # New line after progress bar
    click.echo(f"\n✓ Import successful!")
    click.echo(f"Document ID: {result['document_id']}")
    click.echo(f"Leads: {result['leads']}")
    click.echo(f"\nFacts:")
    for kind, count in result['facts'].items():
        click.echo(f"  {kind}: {count}")


@cli.command('report')
@click.option('--threshold', '-t', type=int, default=DEFAULT_STATISTICAL_THRESHOLD, show_default=True,
              help='Minimum leads per group for a conclusive status')
@click.option('--dimension', '-d', 'dimensions', multiple=True,
              type=click.Choice(list(DIMENSIONS)), help='Dimension to rank (repeatable)')
@click.option('--json', 'as_json', is_flag=True, help='Print the report as JSON')
def report_cmd(threshold: int, dimensions: Tuple[str, ...], as_json: bool):
    """Print the marketing performance report."""
    session = open_session()
    try:
        service = AnalyticsService(
            SqlAlchemyAggregationAdapter(session),
            threshold=threshold,
            dimensions=dimensions or DEFAULT_DIMENSIONS
        )
        report = service.generate_report()
    finally:
        session.close()

    if as_json:
        click.echo(report.model_dump_json(indent=2))
        return

    stats = report.global_stats
    click.echo(f"\nReport {report.report_id} ({report.generated_at:%Y-%m-%d %H:%M:%S})")
    click.echo(f"Leads: {stats.total_leads}  Sales: {stats.total_sales}  "
               f"Conversion: {stats.overall_conversion_rate:.2f}%")

    for analysis in report.analyses:
        click.echo(f"\n{analysis.dimension} - {analysis.description}")
        for position, group in enumerate(analysis.ranking, 1):
            click.echo(f"  {position:>2}. {group.group_name:<30} {group.conversion_rate:>6.2f}%  "
                       f"{group.total_sold}/{group.total_leads}  {group.status.value}")

    if report.top_insights:
        click.echo(f"\nInsights:")
        for dimension, headline in report.top_insights.items():
            click.echo(f"  Melhor {dimension}: {headline}")


if __name__ == '__main__':
    cli()

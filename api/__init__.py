"""
FastAPI application for the lead import system.

This package contains the REST API for uploading lead workbooks and
reading marketing performance reports.
"""

__version__ = "1.0.0"

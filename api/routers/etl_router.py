"""
ETL router - Upload lead workbooks.

This module provides the endpoint that receives a workbook and runs the
extraction pipeline synchronously.
"""

import logging

from fastapi import APIRouter, UploadFile, File, Depends, status
from fastapi.concurrency import run_in_threadpool

from api.dependencies import get_extraction_service, verify_file_size, verify_filename
from api.schemas.import_schema import ExtractionResultResponse
from services.extraction_service import ExtractionService, UploadedFile

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(prefix='/etl', tags=['etl'])


@router.post('/upload', response_model=ExtractionResultResponse, status_code=status.HTTP_201_CREATED)
async def upload_lead_workbook(
    file: UploadFile = File(..., description="Lead workbook (.xlsx)"),
    service: ExtractionService = Depends(get_extraction_service)
):
    """
    Upload a lead workbook and import it.
    
    The workbook must contain the sheets BASE, MERCADO, ORIGEM, LOCAL, PORTE
    and OBJETIVO, each with a header row. The import is all-or-nothing.
    
    **Example:**
    ```bash
    curl -F "file=@leads.xlsx" http://localhost:8000/api/etl/upload
    ```
    
    **Returns:**
    - 201 with the number of leads and facts imported
    - 400 if the file, a sheet, a column, a date or a LEAD_ID is invalid
    - 413 if the file is too large
    - 422 if the file is not a readable workbook
    """
    verify_filename(file.filename)
    
    content = await file.read()
    verify_file_size(len(content))
    
    logger.info(f"Upload received: {file.filename} ({len(content)} bytes)")
    
    # Parsing and the database commit are blocking; keep them off the event loop
    summary = await run_in_threadpool(service.extract, UploadedFile(
        content=content,
        filename=file.filename,
        content_type=file.content_type
    ))
    
    return ExtractionResultResponse(**summary)

"""
Decorators for FastAPI endpoint error handling and resource management.

Uploaded PDFs are validated, written to a temporary file for the duration of
the request, and processing errors are mapped to HTTP status codes.
"""

import os
import tempfile
import logging
import asyncio
from functools import wraps
from typing import Callable, Optional
from fastapi import UploadFile, HTTPException, Request

from utils.validation import (
    validate_file_content,
    validate_processing_environment,
    PdfValidationError,
    ProcessingTimeoutError,
    MemoryLimitError,
    VALIDATION_CONSTANTS
)

logger = logging.getLogger(__name__)


def handle_pdf_processing(func: Callable) -> Callable:
    """
    Decorator for endpoints that take an uploaded PDF.

    The decorated function must accept `request: Request` and `file: UploadFile`
    as keyword arguments. It finds the temporary copy of the upload in
    `request.state.temp_file_path`.

    Status codes: 400 for invalid uploads or PDFs, 408 on timeout,
    507 when the host lacks resources, 500 otherwise.
    """
    @wraps(func)
    async def wrapper(*args, **kwargs):
        request: Request = kwargs.get('request')
        if not request:
            raise HTTPException(
                status_code=500,
                detail="Endpoint decorated with handle_pdf_processing must accept 'request: Request'"
            )

        file: UploadFile = kwargs.get('file')
        if not file:
            raise HTTPException(status_code=400, detail="File parameter is required")

        processing_timeout: Optional[int] = kwargs.get('processing_timeout')
        timeout_seconds = processing_timeout or VALIDATION_CONSTANTS['MAX_PROCESSING_TIME_SECONDS']

        if not file.filename or not file.filename.lower().endswith('.pdf'):
            raise HTTPException(status_code=400, detail="Only PDF files are supported")

        content = await file.read()
        is_valid_content, content_error = validate_file_content(
            content,
            max_size_mb=VALIDATION_CONSTANTS['MAX_FILE_SIZE_MB']
        )
        if not is_valid_content:
            logger.warning(f"File content validation failed for {file.filename}: {content_error}")
            raise HTTPException(status_code=400, detail=content_error)

        temp_file = None
        try:
            env_valid, env_error = validate_processing_environment()
            if not env_valid:
                raise MemoryLimitError(env_error)

            temp_file = tempfile.NamedTemporaryFile(delete=False, suffix='.pdf')
            temp_file.write(content)
            temp_file.flush()
            temp_file.close()  # Close handle to allow processing on Windows

            request.state.temp_file_path = temp_file.name

            try:
                return await asyncio.wait_for(func(*args, **kwargs), timeout=timeout_seconds)
            except asyncio.TimeoutError:
                raise ProcessingTimeoutError(f"PDF processing timed out after {timeout_seconds} seconds.")

        except PdfValidationError as e:
            logger.warning(f"PDF validation failed for {file.filename}: {e}")
            raise HTTPException(status_code=400, detail=f"PDF validation failed: {str(e)}")
        except ProcessingTimeoutError as e:
            logger.error(f"Processing timeout for {file.filename}: {e}")
            raise HTTPException(status_code=408, detail=f"Processing timeout: {str(e)}")
        except MemoryLimitError as e:
            logger.error(f"Insufficient resources for {file.filename}: {e}")
            raise HTTPException(status_code=507, detail=f"Memory limit exceeded: {str(e)}")
        except HTTPException:
            raise
        except Exception as e:
            logger.exception(f"Unexpected error processing {file.filename}: {e}")
            raise HTTPException(
                status_code=500,
                detail=f"Internal server error during PDF processing: {str(e)}"
            )
        finally:
            if temp_file and os.path.exists(temp_file.name):
                try:
                    os.unlink(temp_file.name)
                    logger.debug(f"Cleaned up temporary file: {temp_file.name}")
                except OSError as e:
                    logger.warning(f"Failed to clean up temporary file {temp_file.name}: {e}")

    return wrapper

"""
PDF file validation and error types.

Validation helpers return (is_valid, error_message) tuples so callers can
decide whether a problem is fatal; only the engine and the endpoint
decorator turn them into exceptions.
"""

import os
import tempfile
from typing import Optional, Tuple, Dict, Any
import logging

import psutil

logger = logging.getLogger(__name__)

VALIDATION_CONSTANTS = {
    'PDF_SIGNATURE': b'%PDF',
    'MAX_FILE_SIZE_MB': 50,
    'MAX_PROCESSING_TIME_SECONDS': 300,
    'MIN_AVAILABLE_MEMORY_MB': 100,
    'MIN_FREE_DISK_MB': 100,
    'SUPPORTED_PDF_VERSIONS': ['1.0', '1.1', '1.2', '1.3', '1.4', '1.5', '1.6', '1.7', '2.0'],
}


class PdfValidationError(Exception):
    """The document or the request cannot be processed"""
    pass


class ProcessingTimeoutError(Exception):
    """Processing exceeded its time budget"""
    pass


class MemoryLimitError(Exception):
    """The host does not have the memory to process the document"""
    pass


def _check_header(header: bytes) -> Tuple[bool, Optional[str]]:
    if len(header) < 4:
        return False, "File too small to be a valid PDF"

    if not header.startswith(VALIDATION_CONSTANTS['PDF_SIGNATURE']):
        return False, f"Invalid PDF signature: got {header[:4]!r}"

    if len(header) >= 8:
        version_str = header[5:8].decode('ascii', errors='replace')
        if version_str not in VALIDATION_CONSTANTS['SUPPORTED_PDF_VERSIONS']:
            # Many such files still parse; only note it
            logger.warning(f"Unsupported PDF version: {version_str}")

    return True, None


def validate_pdf_signature(file_path: str) -> Tuple[bool, Optional[str]]:
    """
    Check the %PDF magic bytes and version of a file on disk.

    Returns:
        Tuple of (is_valid, error_message)
    """
    try:
        with open(file_path, 'rb') as f:
            return _check_header(f.read(8))
    except FileNotFoundError:
        return False, f"File not found: {file_path}"
    except PermissionError:
        return False, f"Permission denied accessing file: {file_path}"


def validate_file_size(file_path: str, max_size_mb: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    if max_size_mb is None:
        max_size_mb = VALIDATION_CONSTANTS['MAX_FILE_SIZE_MB']

    try:
        size_mb = os.path.getsize(file_path) / (1024 * 1024)
    except FileNotFoundError:
        return False, f"File not found: {file_path}"

    if size_mb > max_size_mb:
        return False, f"File too large: {size_mb:.1f}MB (max: {max_size_mb}MB)"

    logger.debug(f"File size validation passed: {size_mb:.1f}MB")
    return True, None


def validate_file_content(content: bytes, max_size_mb: Optional[int] = None) -> Tuple[bool, Optional[str]]:
    """
    Validate uploaded bytes before they are written to disk.

    Returns:
        Tuple of (is_valid, error_message)
    """
    if max_size_mb is None:
        max_size_mb = VALIDATION_CONSTANTS['MAX_FILE_SIZE_MB']

    size_mb = len(content) / (1024 * 1024)
    if size_mb > max_size_mb:
        return False, f"File too large: {size_mb:.1f}MB (max: {max_size_mb}MB)"

    return _check_header(content[:8])


def validate_processing_environment() -> Tuple[bool, Optional[str]]:
    """Check that memory and temp disk space are available."""
    available_mb = psutil.virtual_memory().available / (1024 * 1024)
    if available_mb < VALIDATION_CONSTANTS['MIN_AVAILABLE_MEMORY_MB']:
        return False, f"Insufficient memory available: {available_mb:.1f}MB"

    temp_dir = tempfile.gettempdir()
    free_mb = psutil.disk_usage(temp_dir).free / (1024 * 1024)
    if free_mb < VALIDATION_CONSTANTS['MIN_FREE_DISK_MB']:
        return False, f"Insufficient disk space in {temp_dir}: {free_mb:.1f}MB"

    logger.debug(f"Environment validation passed: {available_mb:.1f}MB memory, {free_mb:.1f}MB disk")
    return True, None


def comprehensive_pdf_validation(file_path: str, max_size_mb: Optional[int] = None) -> Dict[str, Any]:
    """
    Run every file check and collect the results.

    Returns:
        Dictionary with is_valid, errors, warnings and file_info
    """
    results: Dict[str, Any] = {
        'is_valid': True,
        'errors': [],
        'warnings': [],
        'file_info': {}
    }

    if not os.path.exists(file_path):
        results['is_valid'] = False
        results['errors'].append(f"File not found: {file_path}")
        return results

    size_valid, size_error = validate_file_size(file_path, max_size_mb)
    if size_valid:
        results['file_info']['size_mb'] = round(os.path.getsize(file_path) / (1024 * 1024), 2)
    else:
        results['is_valid'] = False
        results['errors'].append(size_error)

    sig_valid, sig_error = validate_pdf_signature(file_path)
    if not sig_valid:
        results['is_valid'] = False
        results['errors'].append(sig_error)

    env_valid, env_error = validate_processing_environment()
    if not env_valid:
        # Low resources do not make the file invalid
        results['warnings'].append(env_error)

    return results


__all__ = [
    'validate_pdf_signature',
    'validate_file_size',
    'validate_file_content',
    'validate_processing_environment',
    'comprehensive_pdf_validation',
    'PdfValidationError',
    'ProcessingTimeoutError',
    'MemoryLimitError',
    'VALIDATION_CONSTANTS'
]

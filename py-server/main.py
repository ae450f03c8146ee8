"""PDF Layout Text Python Server"""

import asyncio
import json
import logging
import os
from typing import List, Optional

import uvicorn
from fastapi import FastAPI, UploadFile, File, HTTPException, Query, Form, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from rich.console import Console
from rich.logging import RichHandler

from engine.config import MIN_FIXED_CHAR_WIDTH, LayoutTextOptions
from extractors.text_extractor import extract_layout_text
from models.pdf_types import LayoutTextResponse, RegionFilter
from utils.endpoint_decorators import handle_pdf_processing

API_VERSION = "1.0.0"
ALLOWED_ORIGINS = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
DEFAULT_TIMEOUT_SECONDS = 300
MIN_TIMEOUT_SECONDS = 30
MAX_TIMEOUT_SECONDS = 600
DEFAULT_PORT = 8000

logger = logging.getLogger("rich")

app = FastAPI(
    title="PDF Layout Text API",
    description="Extract plain text that preserves the on-page layout of PDF files",
    version=API_VERSION
)
app.add_middleware(
    CORSMiddleware,
    allow_origins=ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/")
async def root():
    """Health check endpoint"""
    return {
        "message": "PDF Layout Text API",
        "version": API_VERSION,
        "features": [
            "Layout-preserving text extraction",
            "Region-restricted extraction from a single page pass",
        ]
    }


@app.get("/health")
async def health_check():
    """Health check with dependency verification"""
    try:
        import pdfminer
        import pikepdf
        import numpy

        return {
            "status": "healthy",
            "version": API_VERSION,
            "features": {
                "text_extraction": "pdfminer.six",
                "document_access": "pikepdf",
            },
            "dependencies": {
                "pdfminer": pdfminer.__version__,
                "pikepdf": pikepdf.__version__,
                "numpy": numpy.__version__
            }
        }
    except ImportError as e:
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "error": f"Missing dependency: {str(e)}"
            }
        )


def _parse_regions(regions: Optional[str]) -> Optional[List[RegionFilter]]:
    if not regions:
        return None
    try:
        raw = json.loads(regions)
        if not isinstance(raw, list):
            raise ValueError("regions must be a JSON array")
        return [RegionFilter(**item) for item in raw]
    except (ValueError, TypeError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid regions: {str(e)}")


@app.post("/extract-layout-text", response_model=LayoutTextResponse)
@handle_pdf_processing
async def extract_pdf_layout_text(
    *,
    request: Request,
    file: UploadFile = File(...),
    page_left: float = Form(0.0, allow_inf_nan=False, description="X coordinate mapped to column zero"),
    fixed_char_width: float = Form(6.0, ge=MIN_FIXED_CHAR_WIDTH, allow_inf_nan=False, description="Width of one character cell in page units"),
    start_page: int = Form(1, ge=1, description="First page to extract (1-based)"),
    end_page: Optional[int] = Form(None, ge=1, description="Last page to extract; defaults to the last page"),
    regions: Optional[str] = Form(None, description="JSON array of {x, y, width, height} regions"),
    processing_timeout: Optional[int] = Query(DEFAULT_TIMEOUT_SECONDS, ge=MIN_TIMEOUT_SECONDS, le=MAX_TIMEOUT_SECONDS, description="Processing timeout in seconds")
):
    """
    Extract layout-preserving text from a PDF.

    Text runs are ordered by orientation, then line, then horizontal position.
    Spaces are inserted so each run lands in the fixed-width column nearest
    its position on the page.

    **Configuration Options:**
    - `page_left`: x coordinate treated as column zero (default: `0`)
    - `fixed_char_width`: width of one output column in page units (default: `6`)
    - `regions`: optional list of rectangles; each page then also reports the text of each region

    **Returns:**
    - One text string per page, plus the settings used
    """
    temp_file_path = request.state.temp_file_path
    region_filters = _parse_regions(regions)
    options = LayoutTextOptions(page_left=page_left, fixed_char_width=fixed_char_width)
    if not options.validate():
        raise HTTPException(status_code=400, detail=f"Invalid layout text configuration: {options.to_dict()}")

    logger.info(
        f"Extracting layout text (page_left={page_left}, fixed_char_width={fixed_char_width}, "
        f"regions={len(region_filters) if region_filters else 0})"
    )

    pages = await asyncio.to_thread(
        extract_layout_text,
        temp_file_path,
        start_page=start_page,
        end_page=end_page,
        text_config=options.to_dict(),
        regions=region_filters,
        timeout_seconds=processing_timeout,
    )

    logger.info(f"Layout text extraction complete: {len(pages)} pages")
    return LayoutTextResponse(
        pages=pages,
        pageLeft=page_left,
        fixedCharWidth=fixed_char_width,
    )


def _configure_server_logging():
    """Configure logging with Rich handler"""
    console = Console(force_terminal=True)

    log_level = os.getenv("LOG_LEVEL", "INFO").upper()

    rich_handler = RichHandler(
        console=console,
        rich_tracebacks=True,
        show_time=False,
        show_path=True
    )

    # Silence everything by default
    logging.basicConfig(level=logging.WARNING, format="%(message)s", handlers=[rich_handler])

    logging.getLogger("uvicorn").setLevel(logging.INFO)
    logging.getLogger("uvicorn.error").setLevel(logging.INFO)
    logging.getLogger("fastapi").setLevel(logging.INFO)
    # pdfminer is chatty at INFO about font and stream details
    logging.getLogger("pdfminer").setLevel(logging.ERROR)

    for module_name in ["main", "rich", "engine", "extractors", "processors", "utils"]:
        logging.getLogger(module_name).setLevel(log_level)

    return console


server_console = _configure_server_logging()

if __name__ == "__main__":
    port = int(os.getenv("PORT", DEFAULT_PORT))
    server_console.print(f"[bold green]Starting server on http://localhost:{port}[/bold green]")

    try:
        uvicorn.run("main:app", host="0.0.0.0", port=port, reload=True, log_config=None)
    except KeyboardInterrupt:
        server_console.print("\n[bold yellow]Server stopped.[/bold yellow]")

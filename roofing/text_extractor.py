"""
Report Text Extraction
Reads the embedded text of measurement report PDFs (or plain-text
exports) page by page. No OCR: image-only reports come back empty and
the parser reports them as having no extractable text.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import List

import fitz  # PyMuPDF
from pypdf import PdfReader

logger = logging.getLogger(__name__)

SUPPORTED_SUFFIXES = ('.pdf', '.txt')


@dataclass
class ExtractedPage:
    """Text of a single page."""
    page_num: int
    text: str


@dataclass
class ExtractedReport:
    """Extracted content of one report file."""
    filepath: str
    filename: str
    pages: List[ExtractedPage] = field(default_factory=list)
    full_text: str = ""
    page_count: int = 0
    extraction_method: str = "none"
    errors: List[str] = field(default_factory=list)

    @property
    def has_text(self) -> bool:
        return bool(self.full_text.strip())


def _pages_with_pymupdf(path: Path) -> List[str]:
    doc = fitz.open(str(path))
    try:
        return [page.get_text() for page in doc]
    finally:
        doc.close()


def _pages_with_pypdf(path: Path) -> List[str]:
    reader = PdfReader(str(path))
    return [page.extract_text() or "" for page in reader.pages]


def _build(report: ExtractedReport, page_texts: List[str], method: str) -> ExtractedReport:
    report.pages = [ExtractedPage(page_num=i + 1, text=text) for i, text in enumerate(page_texts)]
    report.full_text = "\n".join(page_texts)
    report.page_count = len(page_texts)
    report.extraction_method = method
    return report


def extract_report_text(path: str) -> ExtractedReport:
    """
    Extract per-page text from a report file.

    PDFs are read with PyMuPDF; if PyMuPDF cannot open the file, pypdf
    gets a second try. Text files are read as a single page.

    Args:
        path: Path to a .pdf or .txt report

    Returns:
        ExtractedReport. Failures are recorded in errors, not raised.
    """
    report_path = Path(path)
    report = ExtractedReport(filepath=str(report_path), filename=report_path.name)

    if not report_path.exists():
        report.errors.append(f"File not found: {report_path}")
        return report

    suffix = report_path.suffix.lower()
    if suffix not in SUPPORTED_SUFFIXES:
        report.errors.append(f"Unsupported file type: {report_path.suffix}")
        return report

    if suffix == '.txt':
        try:
            text = report_path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            report.errors.append(f"Could not read {report_path.name}: {e}")
            return report
        return _build(report, [text], "text")

    try:
        _build(report, _pages_with_pymupdf(report_path), "pymupdf")
    except Exception as e:
        logger.warning(f"PyMuPDF failed on {report_path.name}: {e}")
        report.errors.append(f"PyMuPDF: {e}")
        try:
            _build(report, _pages_with_pypdf(report_path), "pypdf")
        except Exception as e2:
            logger.error(f"pypdf failed on {report_path.name}: {e2}")
            report.errors.append(f"pypdf: {e2}")
            return report

    if not report.has_text:
        logger.warning(f"{report_path.name}: no embedded text (image-based PDF?)")
    else:
        logger.info(
            f"Extracted {len(report.full_text)} chars from {report.page_count} page(s) "
            f"of {report_path.name} using {report.extraction_method}"
        )
    return report

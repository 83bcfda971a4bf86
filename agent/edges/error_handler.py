"""
Error Handling Edges
Conditional routing logic for failed reports and file transitions.
"""

import logging
from typing import Literal
from pathlib import Path

from ..state import RoofTakeoffState, PER_FILE_RESET

logger = logging.getLogger(__name__)


def route_after_scan(state: RoofTakeoffState) -> Literal["extract", "summary"]:
    """Start on the first report, or go straight to the summary if none were found."""
    if state.get("current_file"):
        return "extract"
    logger.error(f"Nothing to process: {state.get('last_error')}")
    return "summary"


def route_after_extraction(state: RoofTakeoffState) -> Literal["parse", "skip"]:
    """
    Route after text extraction based on success/failure.

    There is no OCR fallback, so an unreadable or image-only report is
    skipped rather than retried.

    Args:
        state: Current workflow state

    Returns:
        Next node: "parse" or "skip"
    """
    extracted_text = state.get("extracted_text")

    if extracted_text and extracted_text.strip() and not state.get("last_error"):
        logger.debug("Extraction successful, routing to parse")
        return "parse"

    logger.error(f"Skipping file: {state.get('last_error')}")
    return "skip"


def route_after_parse(state: RoofTakeoffState) -> Literal["calculate", "skip"]:
    """
    Continue to material calculation unless nothing was parsed.

    Low-confidence parses continue; they are flagged in the report.
    """
    if state.get("last_error"):
        logger.error(f"Skipping file: {state.get('last_error')}")
        return "skip"
    return "calculate"


def route_after_report(state: RoofTakeoffState) -> Literal["next_file", "summary", "failed"]:
    """
    Route after report generation to next file or batch summary.

    Decision logic:
    - If the report could not be written: record the file as failed
    - If more files pending: process next file
    - If no more files: generate batch summary

    Args:
        state: Current workflow state

    Returns:
        Next node: "next_file", "summary" or "failed"
    """
    if state.get("last_error"):
        return "failed"

    files_pending = state.get("files_pending", [])

    if len(files_pending) > 1:
        # Current file is still in the list
        logger.info(f"{len(files_pending) - 1} files remaining")
        return "next_file"

    logger.info("All files processed, generating summary")
    return "summary"


def route_after_failure(state: RoofTakeoffState) -> Literal["next_file", "summary"]:
    return "next_file" if state.get("current_file") else "summary"


def mark_file_failed(state: RoofTakeoffState) -> dict:
    """
    Mark current file as failed and prepare for next file.

    Args:
        state: Current workflow state

    Returns:
        State updates with file added to failed list
    """
    current_file = state.get("current_file", "")
    last_error = state.get("last_error") or "Unknown error"
    files_pending = state.get("files_pending", [])
    parse_result = state.get("parse_result") or {}

    failed_result = {
        "filename": Path(current_file).name if current_file else "Unknown",
        "filepath": current_file,
        "success": False,
        "page_count": state.get("page_count", 0),
        "detected_format": parse_result.get("detected_format"),
        "confidence": parse_result.get("confidence", 0.0),
        "total_squares": 0.0,
        "material_lines": 0,
        "needs_verification": True,
        "extraction_method": state.get("extraction_method") or "error",
        "report_path": None,
        "csv_path": None,
        "email_path": None,
        "errors": [last_error] + list(parse_result.get("warnings", []))
    }

    new_pending = [f for f in files_pending if f != current_file]

    logger.warning(f"File marked as failed: {current_file}")

    return {
        **PER_FILE_RESET,
        "files_failed": state.get("files_failed", []) + [failed_result],
        "files_pending": new_pending,
        "current_file": new_pending[0] if new_pending else None,
    }


def advance_to_next_file(state: RoofTakeoffState) -> dict:
    """
    Move to the next file in the pending list.

    Totals and files_completed are already updated by generate_report_node.

    Args:
        state: Current workflow state

    Returns:
        State updates with next file as current
    """
    current_file = state.get("current_file", "")
    new_pending = [f for f in state.get("files_pending", []) if f != current_file]

    logger.info(f"File completed: {current_file}")

    return {
        **PER_FILE_RESET,
        "files_pending": new_pending,
        "current_file": new_pending[0] if new_pending else None,
    }

"""
Node 5: Batch Summary Generation
Aggregates results across all processed reports and writes the master summary.
Also hosts the START node that collects the reports to process.
"""

import json
import logging
import re
from datetime import datetime
from pathlib import Path
from typing import Dict, Any, List

from roofing.text_extractor import SUPPORTED_SUFFIXES

from ..state import RoofTakeoffState

logger = logging.getLogger(__name__)


def extract_project_name(filename: str) -> str:
    """
    Extract project name from a report filename.

    Examples:
        123-Main-St_iroof.pdf → 123-Main-St
        Smith_page1.pdf → Smith
        single_file.pdf → single_file
    """
    stem = Path(filename).stem
    match = re.match(
        r'^(.+?)(?:_part|_page|_report|_iroof|_eagleview|_hover|_roofsnap|_\d+)',
        stem,
        re.IGNORECASE
    )
    return match.group(1) if match else stem


def batch_summary_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Generate master summary for batch processing.

    Args:
        state: Current workflow state

    Returns:
        State updates with master_summary, end_time
    """
    output_path = state.get("output_path", "")
    files_completed = state.get("files_completed", [])
    files_failed = state.get("files_failed", [])
    start_time = state.get("start_time")

    logger.info(f"Generating batch summary: {len(files_completed)} successful, {len(files_failed)} failed")

    end_time = datetime.now()
    start_dt = datetime.fromisoformat(start_time) if start_time else end_time
    processing_time = (end_time - start_dt).total_seconds()

    needs_verification: List[str] = [
        f["filename"] for f in files_completed if f.get("needs_verification")
    ]

    summary_data = {
        "run_datetime": start_time or end_time.isoformat(),
        "input_path": state.get("input_path", ""),
        "output_folder": output_path,
        "preset": state.get("preset_name"),
        "statistics": {
            "total_files": len(files_completed) + len(files_failed),
            "successful_files": len(files_completed),
            "failed_files": len(files_failed),
            "needs_verification": len(needs_verification),
            "total_pages_analyzed": state.get("total_pages", 0),
            "total_squares": round(state.get("total_squares", 0.0), 2),
            "processing_time_seconds": round(processing_time, 2)
        },
        "needs_verification": needs_verification,
        "files_completed": files_completed,
        "files_failed": files_failed
    }

    if not output_path:
        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
            "last_error": None
        }

    try:
        output_dir = Path(output_path)
        output_dir.mkdir(parents=True, exist_ok=True)

        json_path = output_dir / "batch_summary.json"
        with open(json_path, 'w', encoding='utf-8') as f:
            json.dump(summary_data, f, indent=2)

        logger.info(f"Batch summary saved: {json_path}")

        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
            "last_error": None
        }

    except Exception as e:
        logger.error(f"Batch summary failed: {e}")
        return {
            "master_summary": summary_data,
            "end_time": end_time.isoformat(),
            "last_error": f"Batch summary generation failed: {str(e)}"
        }


def _is_report(path: Path) -> bool:
    return path.is_file() and path.suffix.lower() in SUPPORTED_SUFFIXES


def scan_reports_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Scan input path and identify all reports to process.

    This is the START node that initializes the file list.

    Args:
        state: Current workflow state

    Returns:
        State updates with files_pending
    """
    input_path = state.get("input_path", "")

    if not input_path:
        return {
            "last_error": "No input path specified",
            "files_pending": []
        }

    path = Path(input_path)

    if path.is_file():
        if not _is_report(path):
            return {
                "last_error": f"Not a PDF or text report: {path}",
                "files_pending": []
            }
        report_files = [path]
        logger.info(f"Single file mode: {path.name}")

    elif path.is_dir():
        report_files = sorted(
            (p for p in path.iterdir() if _is_report(p)),
            key=lambda p: p.name.lower()
        )
        if not report_files:
            return {
                "last_error": f"No report files found in: {path}",
                "files_pending": []
            }
        logger.info(f"Found {len(report_files)} report files in {path}")

    else:
        return {
            "last_error": f"Path does not exist: {input_path}",
            "files_pending": []
        }

    # Organize outputs under a folder named after the first report
    project_name = extract_project_name(report_files[0].name)
    new_output_path = str(Path(state.get("output_path", "")) / project_name)
    Path(new_output_path).mkdir(parents=True, exist_ok=True)

    file_paths = [str(p) for p in report_files]
    logger.info(f"Project name: {project_name}, output: {new_output_path}")

    return {
        "files_pending": file_paths,
        "current_file": file_paths[0],
        "project_name": project_name,
        "output_path": new_output_path,
        "last_error": None
    }

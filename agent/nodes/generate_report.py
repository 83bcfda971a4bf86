"""
Node 4: Report Generation
Writes the JSON takeoff, the materials CSV and the supplier email text.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Dict, Any, List

from roofing.models import JobOptions, MaterialLineItem, Measurements, RoofOrder
from roofing.order_email import generate_email_body, generate_email_subject

from ..state import RoofTakeoffState

logger = logging.getLogger(__name__)


def _generate_csv_report(materials: List[Dict], output_path: Path, filename_stem: str) -> str:
    """
    Generate CSV report from material lines.

    Args:
        materials: List of material line dictionaries
        output_path: Output directory path
        filename_stem: Base filename (without extension)

    Returns:
        Path to generated CSV file
    """
    csv_path = output_path / f"{filename_stem}_materials.csv"

    fieldnames = [
        'Category',
        'Material',
        'Description',
        'Quantity',
        'Unit',
        'Calculated',
        'Adjusted',
        'Notes'
    ]

    with open(csv_path, 'w', newline='', encoding='utf-8') as f:
        writer = csv.DictWriter(f, fieldnames=fieldnames)
        writer.writeheader()

        for item in materials:
            writer.writerow({
                'Category': item.get('category', ''),
                'Material': item.get('name', ''),
                'Description': item.get('description', ''),
                'Quantity': item.get('quantity', 0),
                'Unit': item.get('unit', ''),
                'Calculated': item.get('calculated_quantity', 0),
                'Adjusted': 'Yes' if item.get('is_manually_adjusted') else 'No',
                'Notes': item.get('notes', '')
            })

    return str(csv_path)


def _build_order(state: RoofTakeoffState, project_name: str) -> RoofOrder:
    parse_result = state.get("parse_result") or {}
    return RoofOrder(
        project_name=project_name,
        measurements=Measurements.from_dict(parse_result.get("measurements", {})),
        materials=[MaterialLineItem.from_dict(item) for item in state.get("materials") or []],
        job_options=JobOptions(**state.get("job_options", {})),
        preset_name=state.get("preset_name"),
        parse_confidence=parse_result.get("confidence", 0.0),
        detected_format=parse_result.get("detected_format"),
    )


def generate_report_node(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Generate the takeoff outputs for the current report.

    Steps:
    1. Validate inputs
    2. Build JSON report structure
    3. Save JSON, CSV and email text
    4. Update batch totals

    Args:
        state: Current workflow state

    Returns:
        State updates with output paths, updated totals, or last_error
    """
    current_file = state.get("current_file", "")
    output_path = state.get("output_path", "")
    parse_result = state.get("parse_result") or {}
    materials = state.get("materials") or []
    extraction_method = state.get("extraction_method", "unknown")
    page_count = state.get("page_count", 0)

    # Step 1: Validate inputs
    if not output_path:
        logger.error("No output path specified")
        return {"last_error": "No output path specified"}

    if not current_file:
        logger.error("No current file in state")
        return {"last_error": "No current file specified"}

    output_dir = Path(output_path)
    output_dir.mkdir(parents=True, exist_ok=True)

    filename_stem = Path(current_file).stem
    measurements = parse_result.get("measurements", {})
    total_squares = measurements.get("total_squares", 0.0)
    needs_verification = parse_result.get("needs_verification", False)

    logger.info(f"Generating report: {len(materials)} material lines, {total_squares:.2f} SQ")

    try:
        # Step 2: Build JSON report data
        order = _build_order(state, filename_stem)

        report_data = {
            "source": Path(current_file).name,
            "detected_format": parse_result.get("detected_format"),
            "confidence": parse_result.get("confidence", 0.0),
            "needs_verification": needs_verification,
            "warnings": parse_result.get("warnings", []),
            "measurements": measurements,
            "preset": state.get("preset_name"),
            "job_options": state.get("job_options", {}),
            "materials": materials,
            "notes": [
                f"Extracted via {extraction_method}",
                f"Pages: {page_count}"
            ]
        }

        # Step 3: Save JSON report
        report_path = output_dir / f"{filename_stem}_takeoff.json"
        with open(report_path, 'w', encoding='utf-8') as f:
            json.dump(report_data, f, indent=2)
        logger.info(f"JSON report saved: {report_path}")

        # Step 3b: Save CSV report
        csv_path = _generate_csv_report(materials, output_dir, filename_stem)
        logger.info(f"CSV report saved: {csv_path}")

        # Step 3c: Save supplier email
        email_path = output_dir / f"{filename_stem}_order_email.txt"
        with open(email_path, 'w', encoding='utf-8') as f:
            f.write(f"Subject: {generate_email_subject(order)}\n\n")
            f.write(generate_email_body(order))
        logger.info(f"Order email saved: {email_path}")

        # Step 4: Return updates including batch totals
        file_result = {
            "filename": Path(current_file).name,
            "filepath": current_file,
            "success": True,
            "page_count": page_count,
            "detected_format": parse_result.get("detected_format"),
            "confidence": parse_result.get("confidence", 0.0),
            "total_squares": total_squares,
            "material_lines": len(materials),
            "needs_verification": needs_verification,
            "extraction_method": extraction_method,
            "report_path": str(report_path),
            "csv_path": csv_path,
            "email_path": str(email_path),
            "errors": []
        }

        return {
            "report_path": str(report_path),
            "csv_path": csv_path,
            "email_path": str(email_path),
            "last_error": None,
            "total_squares": state.get("total_squares", 0.0) + total_squares,
            "total_pages": state.get("total_pages", 0) + page_count,
            "files_completed": state.get("files_completed", []) + [file_result],
        }

    except Exception as e:
        logger.error(f"Report generation failed: {e}")
        return {"last_error": f"Report generation failed: {str(e)}"}

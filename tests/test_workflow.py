"""
Tests for the LangGraph Takeoff Workflow

Runs the compiled graph end to end on plain-text reports and checks the
routing edges and extraction node on their own.
"""

import csv
import json
import pytest
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import fitz  # PyMuPDF

from agent import run_takeoff_workflow, stream_takeoff_workflow
from agent.edges import (
    advance_to_next_file,
    mark_file_failed,
    route_after_extraction,
    route_after_parse,
    route_after_report,
)
from agent.nodes.batch_summary import extract_project_name
from roofing.config_factors import ConfigFactors
from roofing.models import JobOptions
from roofing.text_extractor import extract_report_text


IROOF_TEXT = """iRoof Measurement Report
Total Area 5855.54 sqft
Total Squares 58.56 SQ
Predominant Pitch 6/12
Ridge: 166'10"
Valley: 40'6"
Rake: 133'10"
Eave: 210'0"
Hip: 30'0"
Step Flashing: 24'0"
"""

GENERIC_TEXT = """Roof Summary
Roof area: 1,800 sqft
Ridge: 40
"""


@pytest.fixture
def reports_dir(tmp_path):
    folder = tmp_path / "reports"
    folder.mkdir()
    (folder / "123-Main_iroof.txt").write_text(IROOF_TEXT)
    (folder / "blank_report.txt").write_text("   \n")
    (folder / "cabin.txt").write_text(GENERIC_TEXT)
    (folder / "notes.docx").write_text("ignored")
    return folder


def _run(input_path, output_path):
    return run_takeoff_workflow(
        input_path=str(input_path),
        output_path=str(output_path),
        factors=ConfigFactors().to_dict(),
        job_options=JobOptions().to_dict(),
        enable_checkpoints=False,
    )


class TestProjectName:
    """Tests for project name extraction from filenames."""

    @pytest.mark.parametrize("filename,expected", [
        ("123-Main-St_iroof.pdf", "123-Main-St"),
        ("Smith_page1.pdf", "Smith"),
        ("Jones_EagleView.pdf", "Jones"),
        ("single_file.pdf", "single_file"),
    ])
    def test_extract_project_name(self, filename, expected):
        assert extract_project_name(filename) == expected


class TestWorkflowRun:
    """End-to-end runs of the compiled graph."""

    def test_batch_folder(self, reports_dir, tmp_path):
        result = _run(reports_dir, tmp_path / "out")

        completed = [f["filename"] for f in result["files_completed"]]
        failed = [f["filename"] for f in result["files_failed"]]
        assert completed == ["123-Main_iroof.txt", "cabin.txt"]
        assert failed == ["blank_report.txt"]

        output_dir = tmp_path / "out" / "123-Main"
        assert Path(result["output_path"]) == output_dir
        for name in ("123-Main_iroof_takeoff.json", "123-Main_iroof_materials.csv",
                     "123-Main_iroof_order_email.txt", "batch_summary.json"):
            assert (output_dir / name).exists()

    def test_takeoff_json(self, reports_dir, tmp_path):
        _run(reports_dir, tmp_path / "out")
        data = json.loads((tmp_path / "out" / "123-Main" / "123-Main_iroof_takeoff.json").read_text())
        assert data["detected_format"] == "iRoof"
        assert data["confidence"] == 100.0
        assert data["needs_verification"] is False
        assert data["measurements"]["total_sq_ft"] == pytest.approx(5855.54)
        assert data["materials"][0]["category"] == "Shingles"

    def test_materials_csv(self, reports_dir, tmp_path):
        _run(reports_dir, tmp_path / "out")
        with open(tmp_path / "out" / "123-Main" / "123-Main_iroof_materials.csv", newline="") as f:
            rows = list(csv.DictReader(f))
        assert rows[0]["Category"] == "Shingles"
        assert rows[0]["Adjusted"] == "No"
        assert {"Material", "Quantity", "Unit", "Notes"} <= set(rows[0])

    def test_order_email(self, reports_dir, tmp_path):
        _run(reports_dir, tmp_path / "out")
        text = (tmp_path / "out" / "123-Main" / "123-Main_iroof_order_email.txt").read_text()
        assert text.startswith("Subject: Roof Order - 123-Main_iroof - 64.4 SQ")
        assert "MATERIALS" in text

    def test_low_confidence_is_flagged_not_failed(self, reports_dir, tmp_path):
        result = _run(reports_dir, tmp_path / "out")
        cabin = next(f for f in result["files_completed"] if f["filename"] == "cabin.txt")
        assert cabin["needs_verification"] is True
        assert result["master_summary"]["needs_verification"] == ["cabin.txt"]

    def test_batch_summary(self, reports_dir, tmp_path):
        result = _run(reports_dir, tmp_path / "out")
        summary = json.loads((tmp_path / "out" / "123-Main" / "batch_summary.json").read_text())
        stats = summary["statistics"]
        assert stats["total_files"] == 3
        assert stats["successful_files"] == 2
        assert stats["failed_files"] == 1
        assert stats["total_squares"] == pytest.approx(58.5554 + 18.0, abs=0.01)
        assert result["end_time"] is not None

    def test_single_file(self, reports_dir, tmp_path):
        result = _run(reports_dir / "cabin.txt", tmp_path / "out")
        assert [f["filename"] for f in result["files_completed"]] == ["cabin.txt"]
        assert (tmp_path / "out" / "cabin" / "cabin_takeoff.json").exists()

    def test_empty_folder(self, tmp_path):
        empty = tmp_path / "empty"
        empty.mkdir()
        result = _run(empty, tmp_path / "out")
        assert result["files_completed"] == []
        assert result["master_summary"]["statistics"]["total_files"] == 0
        assert (tmp_path / "out" / "batch_summary.json").exists()

    def test_stream_yields_node_updates(self, reports_dir, tmp_path):
        nodes = [node for node, _ in stream_takeoff_workflow(
            input_path=str(reports_dir / "cabin.txt"),
            output_path=str(tmp_path / "out"),
            factors=ConfigFactors().to_dict(),
            job_options=JobOptions().to_dict(),
            enable_checkpoints=False,
        )]
        assert nodes == [
            "scan_reports", "extract_text", "parse_report",
            "calculate_materials", "generate_report", "batch_summary",
        ]

    def test_checkpointed_run(self, reports_dir, tmp_path):
        result = run_takeoff_workflow(
            input_path=str(reports_dir / "cabin.txt"),
            output_path=str(tmp_path / "out"),
            factors=ConfigFactors().to_dict(),
            job_options=JobOptions().to_dict(),
            enable_checkpoints=True,
        )
        assert len(result["files_completed"]) == 1


class TestRouting:
    """Tests for the conditional edges."""

    def test_extraction_routes(self):
        assert route_after_extraction({"extracted_text": "Ridge: 40", "last_error": None}) == "parse"
        assert route_after_extraction({"extracted_text": "  ", "last_error": None}) == "skip"
        assert route_after_extraction({"extracted_text": "x", "last_error": "boom"}) == "skip"

    def test_parse_routes(self):
        assert route_after_parse({"last_error": None}) == "calculate"
        assert route_after_parse({"last_error": "No measurements could be extracted"}) == "skip"

    def test_report_routes(self):
        assert route_after_report({"files_pending": ["a", "b"], "last_error": None}) == "next_file"
        assert route_after_report({"files_pending": ["a"], "last_error": None}) == "summary"
        assert route_after_report({"files_pending": ["a"], "last_error": "disk full"}) == "failed"

    def test_mark_failed_advances(self):
        update = mark_file_failed({
            "current_file": "/r/a.txt",
            "files_pending": ["/r/a.txt", "/r/b.txt"],
            "files_failed": [],
            "last_error": "boom",
            "parse_result": None,
        })
        assert update["current_file"] == "/r/b.txt"
        assert update["files_pending"] == ["/r/b.txt"]
        assert update["files_failed"][0]["errors"] == ["boom"]
        assert update["last_error"] is None

    def test_advance_clears_per_file_data(self):
        update = advance_to_next_file({
            "current_file": "/r/a.txt",
            "files_pending": ["/r/a.txt"],
            "materials": [{"name": "x"}],
        })
        assert update["current_file"] is None
        assert update["materials"] is None


class TestTextExtraction:
    """Tests for report text extraction."""

    def test_text_file(self, tmp_path):
        path = tmp_path / "report.txt"
        path.write_text(GENERIC_TEXT)
        report = extract_report_text(str(path))
        assert report.extraction_method == "text"
        assert report.page_count == 1
        assert report.has_text

    def test_pdf_file(self, tmp_path):
        path = tmp_path / "report.pdf"
        doc = fitz.open()
        page = doc.new_page()
        page.insert_text((72, 72), "EagleView Premium Report")
        page.insert_text((72, 100), "Total Roof Area: 2,450 sq ft")
        doc.save(str(path))
        doc.close()

        report = extract_report_text(str(path))
        assert report.extraction_method == "pymupdf"
        assert report.page_count == 1
        assert "Total Roof Area" in report.full_text

    def test_missing_file(self, tmp_path):
        report = extract_report_text(str(tmp_path / "missing.pdf"))
        assert not report.has_text
        assert report.errors

    def test_unsupported_suffix(self, tmp_path):
        path = tmp_path / "report.docx"
        path.write_text("x")
        assert "Unsupported file type" in extract_report_text(str(path)).errors[0]

"""
Workflow State Schema for the Roof Takeoff Agent
Defines the state that flows through the LangGraph workflow.
"""

from typing import TypedDict, List, Optional, Dict, Any
from datetime import datetime


class FileResult(TypedDict):
    """Result from processing a single report file."""
    filename: str
    filepath: str
    success: bool
    page_count: int
    detected_format: Optional[str]
    confidence: float
    total_squares: float
    material_lines: int
    needs_verification: bool
    extraction_method: str
    report_path: Optional[str]
    csv_path: Optional[str]
    email_path: Optional[str]
    errors: List[str]


class RoofTakeoffState(TypedDict):
    """
    State schema for the roof takeoff workflow.

    Every node reads from this state and returns a dict of updates.
    Values are kept JSON-friendly (dicts and lists) so checkpoints and
    reports can store them as-is.
    """

    # ========================
    # Input Configuration
    # ========================
    input_path: str                    # Report file or folder path
    output_path: str                   # Output directory for reports
    factors: Dict[str, Any]            # Resolved ConfigFactors as a dict
    preset_name: Optional[str]         # Preset the factors came from, if any
    job_options: Dict[str, Any]        # JobOptions as a dict
    confidence_threshold: float        # Below this a parse needs verification
    low_pitch_threshold: int           # Pitch rise below this is low-pitch

    # ========================
    # Progress Tracking
    # ========================
    current_file: Optional[str]        # Report being processed
    files_pending: List[str]           # Reports not yet processed
    files_completed: List[FileResult]  # Successfully processed reports
    files_failed: List[FileResult]     # Failed reports with error info

    # ========================
    # Per-File Intermediate Data
    # ========================
    # These are cleared between files
    extracted_text: Optional[str]      # From extract_text node
    extraction_method: Optional[str]   # 'pymupdf', 'pypdf' or 'text'
    page_count: int                    # Pages in current file
    parse_result: Optional[Dict]       # ParseResult.to_dict() from parse_report
    materials: Optional[List[Dict]]    # MaterialLineItem dicts from calculate_materials
    report_path: Optional[str]         # Generated JSON report
    csv_path: Optional[str]            # Generated materials CSV
    email_path: Optional[str]          # Generated supplier email text

    # ========================
    # Error Handling
    # ========================
    last_error: Optional[str]          # Most recent error message

    # ========================
    # Batch Summary
    # ========================
    total_squares: float               # Running total across all files
    total_pages: int                   # Pages read across all files
    master_summary: Optional[Dict]     # Final batch summary data

    # ========================
    # Timing
    # ========================
    start_time: Optional[str]          # ISO timestamp when run started
    end_time: Optional[str]            # ISO timestamp when run completed

    # ========================
    # Project Organization
    # ========================
    project_name: Optional[str]        # Output subfolder, from the first report's name


# Per-file keys cleared when moving to the next report
PER_FILE_RESET: Dict[str, Any] = {
    "extracted_text": None,
    "extraction_method": None,
    "page_count": 0,
    "parse_result": None,
    "materials": None,
    "report_path": None,
    "csv_path": None,
    "email_path": None,
    "last_error": None,
}


def create_initial_state(
    input_path: str,
    output_path: str,
    factors: Dict[str, Any],
    job_options: Dict[str, Any],
    preset_name: Optional[str] = None,
    confidence_threshold: float = 80.0,
    low_pitch_threshold: int = 4,
) -> RoofTakeoffState:
    """
    Create initial state for a new workflow run.

    Args:
        input_path: Report file or folder to process
        output_path: Directory for output reports
        factors: Resolved calculation factors (ConfigFactors.to_dict())
        job_options: JobOptions.to_dict()
        preset_name: Name of the preset in use, for the reports
        confidence_threshold: Parse confidence below which reports are flagged
        low_pitch_threshold: Pitch rise below which areas get ice & water

    Returns:
        Initialized RoofTakeoffState
    """
    return RoofTakeoffState(
        # Input
        input_path=input_path,
        output_path=output_path,
        factors=factors,
        preset_name=preset_name,
        job_options=job_options,
        confidence_threshold=confidence_threshold,
        low_pitch_threshold=low_pitch_threshold,

        # Progress
        current_file=None,
        files_pending=[],
        files_completed=[],
        files_failed=[],

        # Per-file data
        extracted_text=None,
        extraction_method=None,
        page_count=0,
        parse_result=None,
        materials=None,
        report_path=None,
        csv_path=None,
        email_path=None,

        # Error handling
        last_error=None,

        # Batch summary
        total_squares=0.0,
        total_pages=0,
        master_summary=None,

        # Timing
        start_time=datetime.now().isoformat(),
        end_time=None,

        # Project Organization
        project_name=None
    )


def get_state_summary(state: RoofTakeoffState) -> Dict[str, Any]:
    """
    Get a summary of current state for logging/debugging.
    """
    return {
        "current_file": state.get("current_file"),
        "files_pending": len(state.get("files_pending", [])),
        "files_completed": len(state.get("files_completed", [])),
        "files_failed": len(state.get("files_failed", [])),
        "total_squares": state.get("total_squares", 0),
        "last_error": state.get("last_error"),
    }

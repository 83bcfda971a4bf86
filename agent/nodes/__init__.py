# Workflow nodes
from .extract_text import extract_text_node
from .parse_report import parse_report_node
from .calculate_materials import calculate_materials_node
from .generate_report import generate_report_node
from .batch_summary import batch_summary_node, scan_reports_node

__all__ = [
    "extract_text_node",
    "parse_report_node",
    "calculate_materials_node",
    "generate_report_node",
    "batch_summary_node",
    "scan_reports_node",
]

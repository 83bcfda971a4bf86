# Conditional edges
from .error_handler import (
    route_after_scan,
    route_after_extraction,
    route_after_parse,
    route_after_report,
    route_after_failure,
    mark_file_failed,
    advance_to_next_file,
)

__all__ = [
    "route_after_scan",
    "route_after_extraction",
    "route_after_parse",
    "route_after_report",
    "route_after_failure",
    "mark_file_failed",
    "advance_to_next_file",
]

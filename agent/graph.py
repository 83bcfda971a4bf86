"""
LangGraph Workflow Definition
Wires together nodes and edges for the roof takeoff agent.
"""

import logging
from typing import Dict, Any, Optional, Iterator, Tuple

from langgraph.graph import StateGraph, END
from langgraph.checkpoint.memory import MemorySaver

from .state import RoofTakeoffState, create_initial_state
from .nodes import (
    scan_reports_node,
    extract_text_node,
    parse_report_node,
    calculate_materials_node,
    generate_report_node,
    batch_summary_node,
)
from .edges import (
    route_after_scan,
    route_after_extraction,
    route_after_parse,
    route_after_report,
    route_after_failure,
    mark_file_failed,
    advance_to_next_file,
)

logger = logging.getLogger(__name__)

# Each report passes through ~6 nodes
RECURSION_LIMIT = 250


def create_takeoff_graph(checkpointer: Optional[MemorySaver] = None) -> StateGraph:
    """
    Create the LangGraph workflow for roof report processing.

    Graph structure:
    ```
    START (scan_reports)
        │
        ▼
    extract_text ◄──────────────┐
        │                       │
        ▼                       │
    [route_after_extraction]    │
        │ parse       │ skip    │
        ▼             ▼         │
    parse_report   mark_failed ─┤
        │ calculate   ▲ skip    │
        ▼             │         │
    calculate_materials         │
        │                       │
        ▼                       │
    generate_report             │
        │                       │
        ▼                       │
    [route_after_report]        │
        │ next_file             │
        ▼                       │
    advance_file ───────────────┘
        │ summary
        ▼
    batch_summary
        │
        ▼
       END
    ```

    Args:
        checkpointer: Optional checkpointer for state persistence

    Returns:
        Compiled StateGraph
    """
    workflow = StateGraph(RoofTakeoffState)

    # ========================
    # Add Nodes
    # ========================
    workflow.add_node("scan_reports", scan_reports_node)
    workflow.add_node("extract_text", extract_text_node)
    workflow.add_node("parse_report", parse_report_node)
    workflow.add_node("calculate_materials", calculate_materials_node)
    workflow.add_node("generate_report", generate_report_node)
    workflow.add_node("mark_failed", mark_file_failed)
    workflow.add_node("advance_file", advance_to_next_file)
    workflow.add_node("batch_summary", batch_summary_node)

    # ========================
    # Add Edges
    # ========================
    workflow.set_entry_point("scan_reports")

    workflow.add_conditional_edges(
        "scan_reports",
        route_after_scan,
        {
            "extract": "extract_text",
            "summary": "batch_summary"
        }
    )

    workflow.add_conditional_edges(
        "extract_text",
        route_after_extraction,
        {
            "parse": "parse_report",
            "skip": "mark_failed"
        }
    )

    workflow.add_conditional_edges(
        "parse_report",
        route_after_parse,
        {
            "calculate": "calculate_materials",
            "skip": "mark_failed"
        }
    )

    workflow.add_edge("calculate_materials", "generate_report")

    workflow.add_conditional_edges(
        "generate_report",
        route_after_report,
        {
            "next_file": "advance_file",
            "summary": "batch_summary",
            "failed": "mark_failed"
        }
    )

    workflow.add_conditional_edges(
        "mark_failed",
        route_after_failure,
        {
            "next_file": "extract_text",
            "summary": "batch_summary"
        }
    )

    workflow.add_edge("advance_file", "extract_text")
    workflow.add_edge("batch_summary", END)

    if checkpointer:
        return workflow.compile(checkpointer=checkpointer)
    return workflow.compile()


def _run_config(enable_checkpoints: bool, thread_id: str) -> Dict[str, Any]:
    if enable_checkpoints:
        return {
            "configurable": {"thread_id": thread_id},
            "recursion_limit": RECURSION_LIMIT
        }
    return {"recursion_limit": RECURSION_LIMIT}


def run_takeoff_workflow(
    input_path: str,
    output_path: str,
    factors: Dict[str, Any],
    job_options: Dict[str, Any],
    preset_name: Optional[str] = None,
    confidence_threshold: float = 80.0,
    low_pitch_threshold: int = 4,
    enable_checkpoints: bool = True
) -> Dict[str, Any]:
    """
    Run the complete takeoff workflow.

    Args:
        input_path: Report file or folder path
        output_path: Directory for output reports
        factors: Resolved calculation factors (ConfigFactors.to_dict())
        job_options: JobOptions.to_dict()
        preset_name: Preset name recorded in the reports
        confidence_threshold: Parses below this are flagged for verification
        low_pitch_threshold: Pitch rise below which areas get ice & water
        enable_checkpoints: Enable state persistence

    Returns:
        Final workflow state with results
    """
    checkpointer = MemorySaver() if enable_checkpoints else None
    graph = create_takeoff_graph(checkpointer)

    initial_state = create_initial_state(
        input_path=input_path,
        output_path=output_path,
        factors=factors,
        job_options=job_options,
        preset_name=preset_name,
        confidence_threshold=confidence_threshold,
        low_pitch_threshold=low_pitch_threshold
    )

    logger.info(f"Starting takeoff workflow: {input_path} -> {output_path}")

    try:
        final_state = graph.invoke(initial_state, _run_config(enable_checkpoints, "roof-takeoff-1"))
        logger.info("Workflow completed successfully")
        return final_state
    except Exception as e:
        logger.error(f"Workflow failed: {e}")
        raise


def stream_takeoff_workflow(
    input_path: str,
    output_path: str,
    factors: Dict[str, Any],
    job_options: Dict[str, Any],
    preset_name: Optional[str] = None,
    confidence_threshold: float = 80.0,
    low_pitch_threshold: int = 4,
    enable_checkpoints: bool = True
) -> Iterator[Tuple[str, Dict[str, Any]]]:
    """
    Stream the takeoff workflow, yielding progress updates after each node.

    Same arguments as run_takeoff_workflow.

    Yields:
        Tuple of (node_name, state_update_dict) after each node executes
    """
    checkpointer = MemorySaver() if enable_checkpoints else None
    graph = create_takeoff_graph(checkpointer)

    initial_state = create_initial_state(
        input_path=input_path,
        output_path=output_path,
        factors=factors,
        job_options=job_options,
        preset_name=preset_name,
        confidence_threshold=confidence_threshold,
        low_pitch_threshold=low_pitch_threshold
    )

    logger.info(f"Starting takeoff workflow (streaming): {input_path} -> {output_path}")

    try:
        for update in graph.stream(
            initial_state,
            _run_config(enable_checkpoints, "roof-takeoff-stream-1"),
            stream_mode="updates"
        ):
            if update:
                node_name = list(update.keys())[0]
                yield (node_name, update[node_name])

        logger.info("Workflow streaming completed successfully")

    except Exception as e:
        logger.error(f"Workflow streaming failed: {e}")
        raise


def get_workflow_visualization() -> str:
    """
    Get ASCII visualization of the workflow graph.

    Returns:
        ASCII art representation of the graph
    """
    return """
    Roof Takeoff Workflow
    =====================

              ┌──────────────┐
              │ scan_reports │
              │   (START)    │
              └──────┬───────┘
                     │
              ┌──────▼───────┐
              │ extract_text │◄─────────────────┐
              │  (PyMuPDF)   │                  │
              └──────┬───────┘                  │
                     │                          │
              ┌──────┴──────┐                   │
           parse          skip                  │
              │             │                   │
              ▼             ▼                   │
       ┌─────────────┐  ┌──────────┐            │
       │parse_report │─►│  mark    │────────────┤
       │(detect+read)│  │ failed   │            │
       └──────┬──────┘  └──────────┘            │
              │                                 │
              ▼                                 │
       ┌─────────────┐                          │
       │ calculate   │                          │
       │ materials   │                          │
       └──────┬──────┘                          │
              │                                 │
              ▼                                 │
       ┌─────────────┐                          │
       │  generate   │  json + csv + email      │
       │   report    │                          │
       └──────┬──────┘                          │
              │                                 │
       ┌──────┴──────┐                          │
   next_file     summary                        │
       │             │                          │
       ▼             │                          │
 ┌──────────┐        │                          │
 │ advance  │────────┼──────────────────────────┘
 │   file   │        │
 └──────────┘        ▼
             ┌──────────────┐
             │    batch     │
             │   summary    │
             └──────┬───────┘
                    │
                    ▼
                 ┌─────┐
                 │ END │
                 └─────┘
    """

# Roof Takeoff Agent
from .graph import (
    create_takeoff_graph,
    run_takeoff_workflow,
    stream_takeoff_workflow,
    get_workflow_visualization,
)
from .state import RoofTakeoffState, create_initial_state

__all__ = [
    "create_takeoff_graph",
    "run_takeoff_workflow",
    "stream_takeoff_workflow",
    "get_workflow_visualization",
    "RoofTakeoffState",
    "create_initial_state",
]

"""vkflow: import OpenSpec task lists into Vibe Kanban, idempotently."""

from .markers import (
    PLAN_TASK_TOKEN,
    compute_task_id,
    extract_vkflow_markers,
    make_change_marker,
    make_task_marker,
)
from .models import ImportDecision, ImportReport, TaskRecord, VkflowMarkers
from .reconciler import build_task_description, collect_existing_task_ids, reconcile
from .tasks_parser import parse_tasks_from_markdown

__version__ = "0.1.0"

__all__ = [
    "PLAN_TASK_TOKEN",
    "ImportDecision",
    "ImportReport",
    "TaskRecord",
    "VkflowMarkers",
    "build_task_description",
    "collect_existing_task_ids",
    "compute_task_id",
    "extract_vkflow_markers",
    "make_change_marker",
    "make_task_marker",
    "parse_tasks_from_markdown",
    "reconcile",
]

"""Import reconciliation: decide which parsed tasks still need creating."""

from __future__ import annotations

from typing import Any, Iterable, List, Mapping, Optional, Sequence, Set

from .markers import (
    PLAN_TASK_TOKEN,
    compute_task_id,
    extract_vkflow_markers,
    make_change_marker,
    make_task_marker,
)
from .models import CREATE, SKIP, ImportDecision, TaskRecord

SEPARATOR_LINE = "---"


def spec_reference(change: str) -> str:
    """Provenance line pointing back at the OpenSpec change directory."""
    return f"Spec: openspec/changes/{change}"


def build_task_description(
    change: str,
    task_id: str,
    body: str,
    *,
    appendix: Optional[str] = None,
) -> str:
    """Assemble the persisted description: markers, body, footer, appendix."""
    parts = [
        make_change_marker(change),
        make_task_marker(task_id),
        "",
        body,
        "",
        SEPARATOR_LINE,
        spec_reference(change),
    ]
    if appendix:
        parts.extend(["", appendix.strip()])
    return "\n".join(parts)


def collect_existing_task_ids(change: str, descriptions: Iterable[Optional[str]]) -> Set[str]:
    """Task tokens already imported for ``change``.

    Descriptions without markers, or marked for another change, are ignored.
    """
    existing: Set[str] = set()
    for description in descriptions:
        markers = extract_vkflow_markers(description)
        if markers and markers.change == change and markers.task:
            existing.add(markers.task)
    return existing


def find_plan_task(change: str, tasks: Iterable[Mapping[str, Any]]) -> Optional[Mapping[str, Any]]:
    """Return the backend task carrying the planning marker for ``change``."""
    for task in tasks:
        markers = extract_vkflow_markers(task.get("description"))
        if markers and markers.change == change and markers.task == PLAN_TASK_TOKEN:
            return task
    return None


def reconcile(
    change: str,
    candidates: Sequence[TaskRecord],
    existing_task_ids: Iterable[str],
    *,
    allow_duplicates: bool = False,
    appendix: Optional[str] = None,
) -> List[ImportDecision]:
    """Produce one create/skip decision per candidate, in input order.

    Only created tasks join the working set, so repeated candidates within a
    batch collapse to a single creation.
    """
    seen: Set[str] = set(existing_task_ids)
    decisions: List[ImportDecision] = []
    for candidate in candidates:
        task_id = compute_task_id(candidate.title, candidate.description)
        if not allow_duplicates and task_id in seen:
            decisions.append(ImportDecision(action=SKIP, task_id=task_id, title=candidate.title))
            continue

        description = build_task_description(
            change, task_id, candidate.description, appendix=appendix
        )
        decisions.append(
            ImportDecision(action=CREATE, task_id=task_id, title=candidate.title, description=description)
        )
        seen.add(task_id)
    return decisions

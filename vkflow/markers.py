"""Idempotency markers embedded in Vibe Kanban task descriptions.

Imported tasks carry two HTML comments, invisible once the description is
rendered as markdown::

    <!-- vkflow:change=add-login -->
    <!-- vkflow:task=3f2a9c01b7de -->

The task token is either a content fingerprint from :func:`compute_task_id`
or :data:`PLAN_TASK_TOKEN` for the single planning task of a change. The
format is persisted on the backend and must not change.
"""

from __future__ import annotations

import hashlib
import re
from typing import Optional

from .models import VkflowMarkers

PLAN_TASK_TOKEN = "plan"
TASK_ID_LENGTH = 12

_CHANGE_MARKER_PATTERN = re.compile(r"<!--\s*vkflow:change=(\S+)\s*-->", re.IGNORECASE)
_TASK_MARKER_PATTERN = re.compile(r"<!--\s*vkflow:task=(\S+)\s*-->", re.IGNORECASE)


def _check_token(token: str, kind: str) -> str:
    if not token or any(ch.isspace() for ch in token):
        raise ValueError(f"{kind} token must be non-empty and contain no whitespace: {token!r}")
    return token


def make_change_marker(change: str) -> str:
    return f"<!-- vkflow:change={_check_token(change, 'Change')} -->"


def make_task_marker(task_id: str) -> str:
    return f"<!-- vkflow:task={_check_token(task_id, 'Task')} -->"


def compute_task_id(title: str, description: str) -> str:
    """Return the 12-character hex fingerprint of a task's content.

    The digest covers ``title``, a newline, then ``description`` exactly as
    given. No case or whitespace normalization is applied, so re-wrapping a
    description yields a new id.
    """
    digest = hashlib.sha1()
    digest.update((title or "").encode("utf-8"))
    digest.update(b"\n")
    digest.update((description or "").encode("utf-8"))
    return digest.hexdigest()[:TASK_ID_LENGTH]


def extract_vkflow_markers(description: Optional[str]) -> Optional[VkflowMarkers]:
    """Decode the change and task markers from a description.

    Each marker is searched for independently anywhere in the text. Returns
    ``None`` when neither is present.
    """
    if not isinstance(description, str):
        return None

    change = _CHANGE_MARKER_PATTERN.search(description)
    task = _TASK_MARKER_PATTERN.search(description)
    if not change and not task:
        return None
    return VkflowMarkers(
        change=change.group(1) if change else None,
        task=task.group(1) if task else None,
    )

"""Markdown task extraction for vkflow.

Two dialects are recognized. The preferred one is a sequence of
``## Task: <title>`` sections whose bodies become task descriptions. When a
document has no such section, unchecked checklist items (``- [ ] title``)
are imported as title-only tasks.

Fenced code blocks never contribute structure: a heading or checkbox inside a
fence is ignored, but the fence itself is kept verbatim in the description of
the section that contains it.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Sequence

from .models import TaskRecord

logger = logging.getLogger("vkflow.parser")

_TASK_HEADING_PATTERN = re.compile(r"^##[ \t]+Task:[ \t]*(?P<title>.*)$")
_CHECKBOX_PATTERN = re.compile(r"^\s*[-*]\s+\[ \]\s+(?P<title>.+?)\s*$")
_FENCE_PATTERN = re.compile(r"^[ \t]*(?P<fence>`{3,}|~{3,})(?P<info>.*)$")
_THEMATIC_BREAK_PATTERN = re.compile(r"^ {0,3}([-*_])(?:[ \t]*\1){2,}[ \t]*$")


def normalize_newlines(text: str) -> str:
    """Convert CRLF and bare CR line endings to LF."""
    return text.replace("\r\n", "\n").replace("\r", "\n")


def structural_mask(lines: Sequence[str]) -> List[bool]:
    """Flag each line that may carry document structure.

    Fence delimiter lines and everything between them are ``False``. A fence
    is closed only by a run of the same character at least as long as the
    opener; an unclosed fence extends to the end of the document.
    """
    mask: List[bool] = []
    open_fence: Optional[str] = None
    for line in lines:
        match = _FENCE_PATTERN.match(line)
        if open_fence is None:
            if match and not (match.group("fence")[0] == "`" and "`" in match.group("info")):
                open_fence = match.group("fence")
                mask.append(False)
                continue
            mask.append(True)
            continue

        mask.append(False)
        if (
            match
            and match.group("fence")[0] == open_fence[0]
            and len(match.group("fence")) >= len(open_fence)
            and not match.group("info").strip()
        ):
            open_fence = None
    return mask


def _trim_section(lines: List[str], mask: List[bool]) -> str:
    start, end = 0, len(lines)
    while True:
        while start < end and not lines[start].strip():
            start += 1
        while end > start and not lines[end - 1].strip():
            end -= 1
        # A rule after a blank line separates sections; directly under text it is a setext underline.
        if (
            end > start
            and mask[end - 1]
            and _THEMATIC_BREAK_PATTERN.match(lines[end - 1])
            and (end - 1 == start or not lines[end - 2].strip())
        ):
            end -= 1
            continue
        break
    return "\n".join(lines[start:end]).rstrip()


def _parse_sections(lines: List[str], mask: List[bool]) -> List[TaskRecord]:
    headings = []
    for index, line in enumerate(lines):
        if not mask[index]:
            continue
        match = _TASK_HEADING_PATTERN.match(line)
        if match:
            headings.append((index, match.group("title").strip()))

    tasks: List[TaskRecord] = []
    for position, (index, title) in enumerate(headings):
        stop = headings[position + 1][0] if position + 1 < len(headings) else len(lines)
        body = _trim_section(lines[index + 1:stop], mask[index + 1:stop])
        tasks.append(TaskRecord(title=title, description=body))
    return tasks


def _parse_checkboxes(lines: List[str], mask: List[bool]) -> List[TaskRecord]:
    tasks: List[TaskRecord] = []
    for index, line in enumerate(lines):
        if not mask[index]:
            continue
        match = _CHECKBOX_PATTERN.match(line)
        if match:
            tasks.append(TaskRecord(title=match.group("title").strip(), description=""))
    return tasks


def parse_tasks_from_markdown(markdown: str) -> List[TaskRecord]:
    """Extract the ordered task list from a tasks.md document.

    Returns an empty list when neither dialect matches; callers decide
    whether that is an error.
    """
    lines = normalize_newlines(markdown).split("\n")
    mask = structural_mask(lines)

    tasks = _parse_sections(lines, mask)
    if tasks:
        logger.debug(f"Parsed {len(tasks)} task sections")
        return tasks

    tasks = _parse_checkboxes(lines, mask)
    logger.debug(f"Parsed {len(tasks)} checklist tasks")
    return tasks

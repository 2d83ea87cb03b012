"""Data models for vkflow.

This module contains the value types passed between the markdown extractor,
the marker codec, the import reconciler and the Vibe Kanban client.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

CREATE = "create"
SKIP = "skip"


@dataclass(slots=True)
class TaskRecord:
    """A single task parsed from a tasks.md document."""

    title: str
    description: str = ""

    def to_dict(self) -> Dict[str, str]:
        """Convert to dictionary representation."""
        return {"title": self.title, "description": self.description}


@dataclass(slots=True)
class VkflowMarkers:
    """Change and task tokens decoded from a task description."""

    change: Optional[str] = None
    task: Optional[str] = None

    def to_dict(self) -> Dict[str, Optional[str]]:
        return {"change": self.change, "task": self.task}


@dataclass(slots=True)
class ImportDecision:
    """Reconciler verdict for one candidate task."""

    action: str  # 'create' or 'skip'
    task_id: str
    title: str
    description: Optional[str] = None  # assembled payload, only set for 'create'

    @property
    def is_create(self) -> bool:
        return self.action == CREATE

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "action": self.action,
            "task_id": self.task_id,
            "title": self.title,
            "description": self.description,
        }


@dataclass(slots=True)
class TagDefinition:
    """A reusable prompt snippet seeded into the backend as a tag."""

    tag_name: str
    content: str
    source: str

    def to_dict(self) -> Dict[str, str]:
        return {"tag_name": self.tag_name, "content": self.content, "source": self.source}


@dataclass(slots=True)
class TagCatalog:
    """The bundled set of tags, as loaded from the manifest."""

    version: int
    tags: List[TagDefinition] = field(default_factory=list)

    def names(self) -> List[str]:
        return [tag.tag_name for tag in self.tags]

    def get(self, tag_name: str) -> Optional[TagDefinition]:
        for tag in self.tags:
            if tag.tag_name == tag_name:
                return tag
        return None


@dataclass(slots=True)
class UpsertResult:
    """Outcome of seeding one tag: 'created', 'updated' or 'skipped'."""

    action: str
    tag: Dict[str, Any]


@dataclass(slots=True)
class ImportReport:
    """Summary of an import-change run."""

    change: str
    project_id: str
    tasks_file: str
    decisions: List[ImportDecision] = field(default_factory=list)
    created: List[Dict[str, Any]] = field(default_factory=list)
    dry_run: bool = False

    @property
    def to_create(self) -> List[ImportDecision]:
        return [d for d in self.decisions if d.is_create]

    @property
    def skipped(self) -> List[ImportDecision]:
        return [d for d in self.decisions if not d.is_create]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "change": self.change,
            "project_id": self.project_id,
            "tasks_file": self.tasks_file,
            "dry_run": self.dry_run,
            "decisions": [d.to_dict() for d in self.decisions],
            "created_count": len(self.created),
            "skipped_count": len(self.skipped),
        }

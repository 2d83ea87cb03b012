"""Workspace management for vkflow.

This module locates OpenSpec change artifacts inside a repository and
writes the helper files that ``vkflow init`` installs.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .errors import ImportInputError
from .models import TaskRecord
from .tag_catalog import asset_path
from .tasks_parser import parse_tasks_from_markdown

logger = logging.getLogger("vkflow.workspace")


class Workspace:
    """OpenSpec and vkflow artifacts within a repository."""

    def __init__(self, root: Path | str):
        self.root = Path(root).resolve()
        self.openspec_dir = self.root / "openspec"
        self.changes_dir = self.openspec_dir / "changes"
        self.vkflow_dir = self.root / ".vkflow"
        self.workflows_dir = self.root / ".github" / "workflows"

    # ------------------------------------------------------------------
    # Changes
    # ------------------------------------------------------------------

    def change_dir(self, change: str) -> Path:
        return self.changes_dir / change

    def change_exists(self, change: str) -> bool:
        return self.change_dir(change).is_dir()

    def list_changes(self) -> List[str]:
        """Names of the change directories, excluding the archive."""
        if not self.changes_dir.exists():
            return []
        return sorted(
            path.name for path in self.changes_dir.iterdir()
            if path.is_dir() and path.name != "archive"
        )

    def tasks_path(self, change: str, tasks_file: Optional[str] = None) -> Path:
        """Resolve the tasks document, relative paths against the root."""
        if tasks_file:
            candidate = Path(tasks_file).expanduser()
            return candidate if candidate.is_absolute() else (self.root / candidate).resolve()
        return self.change_dir(change) / "tasks.md"

    def read_tasks(self, change: str, tasks_file: Optional[str] = None) -> Tuple[Path, List[TaskRecord]]:
        """Parse the change's tasks file.

        Raises ImportInputError when the file is missing, unreadable, or yields no tasks.
        """
        path = self.tasks_path(change, tasks_file)
        if not path.is_file():
            raise ImportInputError(f"Tasks file not found: {path}")

        try:
            text = path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ImportInputError(f"Cannot read tasks file {path}: {exc}") from exc

        tasks = parse_tasks_from_markdown(text)
        if not tasks:
            raise ImportInputError(f"No tasks found in {path}. Use @vkflow_tasks_format.")

        logger.info(f"Read {len(tasks)} tasks from {path}")
        return path, tasks

    # ------------------------------------------------------------------
    # Helper files
    # ------------------------------------------------------------------

    @staticmethod
    def write_text(path: Path, content: str, *, force: bool = False) -> bool:
        """Write ``content`` unless the file exists and ``force`` is off."""
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists() and not force:
            logger.debug(f"Keeping existing {path}")
            return False
        path.write_text(content, encoding="utf-8")
        logger.info(f"Wrote {path}")
        return True

    @property
    def readme_path(self) -> Path:
        return self.vkflow_dir / "README.md"

    @property
    def validate_workflow_path(self) -> Path:
        return self.workflows_dir / "openspec-validate.yml"

    def install_helper_files(self, *, force: bool = False) -> Dict[str, bool]:
        """Install ``.vkflow/README.md`` and the OpenSpec CI workflow.

        Returns a mapping of written path to whether it was (re)written.
        """
        readme = asset_path("templates", "vkflow-readme.md").read_text(encoding="utf-8")
        workflow = asset_path("templates", "openspec-validate.yml").read_text(encoding="utf-8")
        return {
            str(self.readme_path): self.write_text(self.readme_path, readme, force=force),
            str(self.validate_workflow_path): self.write_text(
                self.validate_workflow_path, workflow, force=force
            ),
        }

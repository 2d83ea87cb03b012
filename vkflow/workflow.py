"""Workflow orchestration for vkflow.

``WorkflowManager`` ties the workspace, the tag catalog, the OpenSpec CLI
and the Vibe Kanban client together into the user-facing operations:
``init``, ``seed-tags``, ``plan-change``, ``import-change`` and ``preview``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import resolve_vk_base_url
from .errors import ImportInputError, TaskCreationError, VkApiError
from .markers import PLAN_TASK_TOKEN, compute_task_id
from .models import ImportDecision, ImportReport
from .openspec import run_openspec_init, run_openspec_new_change
from .reconciler import (
    build_task_description,
    collect_existing_task_ids,
    find_plan_task,
    reconcile,
)
from .tag_catalog import TagCatalogCache
from .vk_client import VibeKanbanClient
from .vkflow_logging import (
    log_change_imported,
    log_error_with_context,
    log_operation,
    log_performance,
    log_plan_task_created,
    log_tag_upserted,
    log_task_created,
    log_task_skipped,
)
from .workspace import Workspace

logger = logging.getLogger("vkflow.workflow")

DEFAULT_TOOLS = "codex,claude"
DEFAULT_EXECUTION_NOTES = "Execution:\n- Follow TDD + small steps (see @superpowers_tdd)"
PLAN_GUIDANCE = "Planning:\n- Follow @vkflow_plan_change, then import tasks with `vkflow import-change`."

ProgressCallback = Callable[[str, str], None]


def _require_token(value: Optional[str], label: str) -> str:
    if not value or not value.strip():
        raise ImportInputError(f"{label} is required")
    if any(ch.isspace() for ch in value):
        raise ImportInputError(f"{label} must not contain whitespace: '{value}'")
    return value


class WorkflowManager:
    """Runs vkflow operations against one repository and one backend."""

    def __init__(
        self,
        root: Path | str,
        *,
        client: Optional[VibeKanbanClient] = None,
        vk_url: Optional[str] = None,
        tag_cache: Optional[TagCatalogCache] = None,
    ):
        self.workspace = Workspace(root)
        self._client = client
        self._vk_url = vk_url
        self.tag_cache = tag_cache or TagCatalogCache()

    @property
    def client(self) -> VibeKanbanClient:
        """Backend client, resolved on first use so offline commands never need one."""
        if self._client is None:
            self._client = VibeKanbanClient(resolve_vk_base_url(self._vk_url))
        return self._client

    # ------------------------------------------------------------------
    # init / seed-tags
    # ------------------------------------------------------------------

    def init_project(
        self,
        *,
        tools: Optional[str] = DEFAULT_TOOLS,
        force: bool = False,
        seed_tags: bool = False,
        overwrite: bool = True,
        progress: Optional[ProgressCallback] = None,
    ) -> Dict[str, Any]:
        """Initialize OpenSpec and install vkflow helper files."""
        with log_operation("init_project", root=str(self.workspace.root), tools=tools, force=force):
            run_openspec_init(tools=tools, path=self.workspace.root)
            written = self.workspace.install_helper_files(force=force)

            result: Dict[str, Any] = {"root": str(self.workspace.root), "files": written}
            if seed_tags:
                result["tags"] = self.seed_tags(overwrite=overwrite, progress=progress)
            return result

    @log_performance("seed_tags")
    def seed_tags(self, *, overwrite: bool = True, progress: Optional[ProgressCallback] = None) -> Dict[str, Any]:
        """Upsert every bundled tag on the backend."""
        catalog = self.tag_cache.get()
        counts = {"created": 0, "updated": 0, "skipped": 0}
        results: List[Dict[str, str]] = []

        with log_operation("seed_tags", tag_count=len(catalog.tags), overwrite=overwrite):
            for tag in catalog.tags:
                upsert = self.client.upsert_tag(tag.tag_name, tag.content, overwrite=overwrite)
                counts[upsert.action] += 1
                results.append({"tag_name": tag.tag_name, "action": upsert.action, "source": tag.source})
                log_tag_upserted(tag.tag_name, upsert.action)
                if progress:
                    progress(upsert.action, f"@{tag.tag_name} ({tag.source})")

        return {"results": results, **counts}

    # ------------------------------------------------------------------
    # preview / import-change
    # ------------------------------------------------------------------

    def preview_change(self, change: str, *, tasks_file: Optional[str] = None) -> Dict[str, Any]:
        """Parse a change's tasks without contacting the backend."""
        change = _require_token(change, "change")
        path, tasks = self.workspace.read_tasks(change, tasks_file)
        return {
            "change": change,
            "tasks_file": str(path),
            "tasks": [
                {"task_id": compute_task_id(t.title, t.description), **t.to_dict()}
                for t in tasks
            ],
        }

    @log_performance("import_change")
    def import_change(
        self,
        change: str,
        project_id: str,
        *,
        tasks_file: Optional[str] = None,
        dry_run: bool = False,
        allow_duplicates: bool = False,
        execution_notes: Optional[str] = DEFAULT_EXECUTION_NOTES,
        progress: Optional[ProgressCallback] = None,
    ) -> ImportReport:
        """Import a change's tasks, creating only those not imported before.

        Creation is sequential and stops at the first failure with a
        TaskCreationError; tasks created so far stay created and are skipped
        on the next run.
        """
        change = _require_token(change, "change")
        project_id = _require_token(project_id, "project_id")
        path, tasks = self.workspace.read_tasks(change, tasks_file)

        with log_operation("import_change", change=change, project_id=project_id, dry_run=dry_run):
            existing_tasks = self.client.list_tasks(project_id)
            existing_ids = collect_existing_task_ids(
                change, (task.get("description") for task in existing_tasks)
            )
            logger.info(f"Found {len(existing_ids)} tasks already imported for change '{change}'")

            decisions = reconcile(
                change,
                tasks,
                existing_ids,
                allow_duplicates=allow_duplicates,
                appendix=execution_notes,
            )
            report = ImportReport(
                change=change,
                project_id=project_id,
                tasks_file=str(path),
                decisions=decisions,
                dry_run=dry_run,
            )
            if dry_run:
                return report

            self._create_tasks(report, progress)
            log_change_imported(change, created=len(report.created), skipped=len(report.skipped))
            return report

    def _create_tasks(self, report: ImportReport, progress: Optional[ProgressCallback]) -> None:
        total = len(report.to_create)
        for decision in report.decisions:
            if not decision.is_create:
                log_task_skipped(report.change, decision.task_id, decision.title)
                if progress:
                    progress("skipped", decision.title)
                continue
            try:
                created = self.client.create_task(report.project_id, decision.title, decision.description or "")
            except VkApiError as exc:
                error = TaskCreationError(decision.title, len(report.created), total, exc)
                log_error_with_context(error, {
                    "operation": "create_task",
                    "change": report.change,
                    "task_id": decision.task_id,
                })
                raise error from exc
            report.created.append(created or {})
            log_task_created(report.change, decision.task_id, decision.title)
            if progress:
                progress("created", decision.title)

    # ------------------------------------------------------------------
    # plan-change
    # ------------------------------------------------------------------

    @log_performance("plan_change")
    def plan_change(
        self,
        change: str,
        project_id: str,
        *,
        description: Optional[str] = None,
        schema: Optional[str] = None,
        scaffold: bool = True,
    ) -> Dict[str, Any]:
        """Scaffold an OpenSpec change and create its planning task once."""
        change = _require_token(change, "change")
        project_id = _require_token(project_id, "project_id")

        with log_operation("plan_change", change=change, project_id=project_id, scaffold=scaffold):
            if scaffold and not self.workspace.change_exists(change):
                run_openspec_new_change(change, description=description, schema=schema, cwd=self.workspace.root)

            # Checked once; a concurrent plan-change for the same change can still double-create.
            existing = find_plan_task(change, self.client.list_tasks(project_id))
            if existing is not None:
                logger.info(f"Planning task for change '{change}' already exists")
                return {"change": change, "action": "skipped", "task": dict(existing)}

            body = f"Plan the OpenSpec change `{change}`."
            if description:
                body = f"{body}\n\n{description.strip()}"
            task = self.client.create_task(
                project_id,
                f"Plan: {change}",
                build_task_description(change, PLAN_TASK_TOKEN, body, appendix=PLAN_GUIDANCE),
            )
            log_plan_task_created(change, project_id=project_id)
            return {"change": change, "action": "created", "task": task or {}}

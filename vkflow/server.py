"""MCP server exposing vkflow operations as tools."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from .config import LOG_FILE_ENV, LOG_LEVEL_ENV, resolve_project_root
from .tag_catalog import TagCatalogCache
from .vkflow_logging import setup_logging
from .workflow import DEFAULT_EXECUTION_NOTES, WorkflowManager


class VkflowTools:
    """Tool implementations sharing one tag catalog cache per server."""

    def __init__(self, tag_cache: Optional[TagCatalogCache] = None):
        self.tag_cache = tag_cache or TagCatalogCache()

    def _manager(self, root: Optional[str], vk_url: Optional[str] = None) -> WorkflowManager:
        return WorkflowManager(resolve_project_root(root), vk_url=vk_url, tag_cache=self.tag_cache)

    def seed_tags(
        self, overwrite: bool = True, vk_url: Optional[str] = None, root: Optional[str] = None
    ) -> Dict[str, Any]:
        """STEP 1: Create or update the vkflow prompt tags (@vkflow_tasks_format, @superpowers_tdd, ...)
        in Vibe Kanban so task descriptions can reference them."""

        result = self._manager(root, vk_url).seed_tags(overwrite=overwrite)
        return {
            **result,
            "next_suggested_step": "plan_change",
            "message": (
                f"Tags seeded. created={result['created']} updated={result['updated']} skipped={result['skipped']}"
            ),
        }

    def plan_change(
        self,
        change: str,
        project_id: str,
        description: Optional[str] = None,
        schema: Optional[str] = None,
        scaffold: bool = True,
        vk_url: Optional[str] = None,
        root: Optional[str] = None,
    ) -> Dict[str, Any]:
        """STEP 2: Scaffold an OpenSpec change and create its single planning task.
        Running it again for the same change does not create a second planning task."""

        result = self._manager(root, vk_url).plan_change(
            change, project_id, description=description, schema=schema, scaffold=scaffold
        )
        return {
            **result,
            "next_suggested_step": "preview_change",
            "workflow_tip": f"Next: write openspec/changes/{change}/tasks.md, then preview it with preview_change",
        }

    def preview_change(
        self, change: str, tasks_file: Optional[str] = None, root: Optional[str] = None
    ) -> Dict[str, Any]:
        """STEP 3: Parse a change's tasks.md and show the tasks and ids that import_change would use.
        Does not contact Vibe Kanban."""

        result = self._manager(root).preview_change(change, tasks_file=tasks_file)
        return {**result, "next_suggested_step": "import_change"}

    def import_change(
        self,
        change: str,
        project_id: str,
        tasks_file: Optional[str] = None,
        dry_run: bool = False,
        allow_duplicates: bool = False,
        execution_notes: bool = True,
        vk_url: Optional[str] = None,
        root: Optional[str] = None,
    ) -> Dict[str, Any]:
        """STEP 4: Import a change's tasks.md into Vibe Kanban.
        Tasks imported by an earlier run are skipped, so re-running after a failure is safe."""

        report = self._manager(root, vk_url).import_change(
            change,
            project_id,
            tasks_file=tasks_file,
            dry_run=dry_run,
            allow_duplicates=allow_duplicates,
            execution_notes=DEFAULT_EXECUTION_NOTES if execution_notes else None,
        )
        verb = "Would create" if report.dry_run else "Created"
        count = len(report.to_create) if report.dry_run else len(report.created)
        return {
            **report.to_dict(),
            "message": f"{verb} {count} tasks, skipped {len(report.skipped)} already imported.",
        }

    def resource_tags(self) -> str:
        """Resource view listing the bundled tag catalog."""

        catalog = self.tag_cache.get()
        lines = ["vkflow Tags"]
        for tag in catalog.tags:
            lines.append("")
            lines.append(f"- @{tag.tag_name} ({tag.source})")
        return "\n".join(lines)


def build_server(tag_cache: Optional[TagCatalogCache] = None) -> FastMCP:
    """Create the FastMCP server with its tools bound to one catalog cache."""
    tools = VkflowTools(tag_cache)
    server = FastMCP("vkflow")
    for tool in (tools.seed_tags, tools.plan_change, tools.preview_change, tools.import_change):
        server.add_tool(tool)
    server.resource("vkflow://tags")(tools.resource_tags)
    return server


def main() -> None:
    log_file = os.getenv(LOG_FILE_ENV)
    setup_logging(os.getenv(LOG_LEVEL_ENV, "WARNING"), Path(log_file) if log_file else None)
    logging.getLogger("vkflow.server").info("Starting vkflow MCP server")
    build_server().run(transport="stdio")

"""vkflow command-line interface.

Usage:
    vkflow init [--tools codex,claude] [--seed-tags] [--force]
    vkflow seed-tags [--no-overwrite]
    vkflow plan-change --change add-login --project-id <uuid>
    vkflow import-change --change add-login --project-id <uuid> [--dry-run]
    vkflow preview --change add-login
"""

from __future__ import annotations

import argparse
import os
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from .config import LOG_FILE_ENV, LOG_LEVEL_ENV, debug_enabled, resolve_project_root
from .errors import VkflowError
from .vkflow_logging import setup_logging
from .workflow import DEFAULT_EXECUTION_NOTES, DEFAULT_TOOLS, WorkflowManager


def _print_progress(action: str, label: str) -> None:
    print(f"{action:<8} {label}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vkflow",
        description="Bridge OpenSpec changes and Vibe Kanban tasks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Notes:
  Vibe Kanban URL auto-detection checks: --vk-url, VIBE_BACKEND_URL,
  BACKEND_PORT/PORT, or the temp port file.
  OpenSpec runs via: npx -y @fission-ai/openspec@latest
        """
    )
    parser.add_argument("--root", help="Project root (default: VKFLOW_PROJECT_ROOT or cwd)")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    def add_vk_url(sub: argparse.ArgumentParser) -> None:
        sub.add_argument("--vk-url", help="Vibe Kanban backend URL")

    # INIT command
    init_parser = subparsers.add_parser("init", help="Initialize OpenSpec and vkflow helper files")
    init_parser.add_argument("--tools", default=DEFAULT_TOOLS, help="OpenSpec tools to configure")
    init_parser.add_argument("--seed-tags", action="store_true", help="Seed tags after init")
    init_parser.add_argument("--force", action="store_true", help="Overwrite existing helper files")
    init_parser.add_argument("--no-overwrite", dest="overwrite", action="store_false",
                             help="Keep existing tags when seeding")
    add_vk_url(init_parser)

    # SEED-TAGS command
    seed_parser = subparsers.add_parser("seed-tags", help="Create or update the bundled tags")
    seed_parser.add_argument("--no-overwrite", dest="overwrite", action="store_false",
                             help="Keep tags that already exist")
    add_vk_url(seed_parser)

    # PLAN-CHANGE command
    plan_parser = subparsers.add_parser("plan-change", help="Scaffold a change and create its planning task")
    plan_parser.add_argument("--change", required=True, help="Change name")
    plan_parser.add_argument("--project-id", required=True, help="Vibe Kanban project id")
    plan_parser.add_argument("--description", help="Change description")
    plan_parser.add_argument("--schema", help="OpenSpec schema")
    plan_parser.add_argument("--no-scaffold", dest="scaffold", action="store_false",
                             help="Do not run openspec new change")
    add_vk_url(plan_parser)

    # IMPORT-CHANGE command
    import_parser = subparsers.add_parser("import-change", help="Import a change's tasks.md as tasks")
    import_parser.add_argument("--change", required=True, help="Change name")
    import_parser.add_argument("--project-id", required=True, help="Vibe Kanban project id")
    import_parser.add_argument("--tasks-file", help="Tasks file (default: openspec/changes/<change>/tasks.md)")
    import_parser.add_argument("--dry-run", action="store_true", help="Show what would be created")
    import_parser.add_argument("--allow-duplicates", action="store_true",
                               help="Create tasks even if already imported")
    import_parser.add_argument("--no-execution-notes", dest="execution_notes", action="store_false",
                               help="Do not append execution guidance to descriptions")
    add_vk_url(import_parser)

    # PREVIEW command
    preview_parser = subparsers.add_parser("preview", help="List the tasks a change would import")
    preview_parser.add_argument("--change", required=True, help="Change name")
    preview_parser.add_argument("--tasks-file", help="Tasks file (default: openspec/changes/<change>/tasks.md)")

    return parser


def run(args: argparse.Namespace) -> int:
    manager = WorkflowManager(resolve_project_root(args.root), vk_url=getattr(args, "vk_url", None))

    if args.command == "init":
        result = manager.init_project(
            tools=args.tools,
            force=args.force,
            seed_tags=args.seed_tags,
            overwrite=args.overwrite,
            progress=_print_progress,
        )
        for path, written in result["files"].items():
            _print_progress("wrote" if written else "kept", path)
        print("\nInit complete.")
        if not args.seed_tags:
            print("- Next: start Vibe Kanban and run: vkflow seed-tags")
        return 0

    if args.command == "seed-tags":
        result = manager.seed_tags(overwrite=args.overwrite, progress=_print_progress)
        print(f"\nDone. created={result['created']} updated={result['updated']} skipped={result['skipped']}")
        return 0

    if args.command == "plan-change":
        result = manager.plan_change(
            args.change,
            args.project_id,
            description=args.description,
            schema=args.schema,
            scaffold=args.scaffold,
        )
        _print_progress(result["action"], f"Plan: {args.change}")
        return 0

    if args.command == "import-change":
        report = manager.import_change(
            args.change,
            args.project_id,
            tasks_file=args.tasks_file,
            dry_run=args.dry_run,
            allow_duplicates=args.allow_duplicates,
            execution_notes=DEFAULT_EXECUTION_NOTES if args.execution_notes else None,
            progress=_print_progress,
        )
        if report.dry_run:
            print(f"Would create {len(report.to_create)} of {len(report.decisions)} tasks "
                  f"in project {report.project_id}:")
            for decision in report.decisions:
                _print_progress(decision.action, f"{decision.title} [{decision.task_id}]")
            return 0
        print(f"\nDone. Imported {len(report.created)} tasks, skipped {len(report.skipped)}.")
        return 0

    if args.command == "preview":
        result = manager.preview_change(args.change, tasks_file=args.tasks_file)
        print(f"{len(result['tasks'])} tasks in {result['tasks_file']}:")
        for task in result["tasks"]:
            print(f"- [{task['task_id']}] {task['title']}")
        return 0

    raise VkflowError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 0

    log_file = os.getenv(LOG_FILE_ENV)
    setup_logging(os.getenv(LOG_LEVEL_ENV, "WARNING"), Path(log_file) if log_file else None)

    try:
        return run(args)
    except VkflowError as exc:
        print(f"\nError: {exc}", file=sys.stderr)
        if debug_enabled():
            traceback.print_exc()
        return 1


if __name__ == "__main__":
    sys.exit(main())

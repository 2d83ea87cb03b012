"""Thin wrapper around the OpenSpec CLI, run through ``npx``."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import List, Optional

from .errors import OpenSpecError

logger = logging.getLogger("vkflow.openspec")

OPENSPEC_PACKAGE = "@fission-ai/openspec@latest"


def _run(args: List[str], label: str, cwd: Optional[Path] = None) -> None:
    command = ["npx", "-y", OPENSPEC_PACKAGE, *args]
    logger.info(f"Running: {' '.join(command)}")
    try:
        result = subprocess.run(command, cwd=str(cwd) if cwd else None, check=False)
    except OSError as exc:
        raise OpenSpecError(f"openspec {label} could not start: {exc}") from exc
    if result.returncode != 0:
        raise OpenSpecError(f"openspec {label} failed with exit code {result.returncode}")


def run_openspec_init(tools: Optional[str] = None, path: Optional[Path] = None) -> None:
    """Initialize OpenSpec non-interactively in ``path``."""
    args = ["init"]
    if tools:
        args.extend(["--tools", tools])
    if path:
        args.append(str(path))
    _run(args, "init")


def run_openspec_new_change(
    name: str,
    *,
    description: Optional[str] = None,
    schema: Optional[str] = None,
    cwd: Optional[Path] = None,
) -> None:
    """Scaffold ``openspec/changes/<name>/``."""
    if not name:
        raise ValueError("run_openspec_new_change requires a change name")
    args = ["new", "change", name]
    if description:
        args.extend(["--description", description])
    if schema:
        args.extend(["--schema", schema])
    _run(args, "new change", cwd=cwd)

"""Runtime configuration resolved from arguments and the environment."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Mapping, Optional

from .errors import ConfigError

BACKEND_URL_ENV = "VIBE_BACKEND_URL"
PROJECT_ROOT_ENV = "VKFLOW_PROJECT_ROOT"
LOG_LEVEL_ENV = "VKFLOW_LOG_LEVEL"
LOG_FILE_ENV = "VKFLOW_LOG_FILE"
DEBUG_ENV = "VKFLOW_DEBUG"

DEFAULT_HOST = "127.0.0.1"
DEFAULT_TIMEOUT = 30


def trim_trailing_slash(url: str) -> str:
    return url.rstrip("/")


def port_file_path() -> Path:
    """Location where a running Vibe Kanban instance advertises its port."""
    return Path(tempfile.gettempdir()) / "vibe-kanban" / "vibe-kanban.port"


def read_port_file(path: Optional[Path] = None) -> Optional[int]:
    path = path or port_file_path()
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8").strip()
    if not raw.isdigit():
        return None
    port = int(raw)
    if port <= 0 or port > 65535:
        return None
    return port


def resolve_vk_base_url(
    vk_url: Optional[str] = None,
    *,
    env: Optional[Mapping[str, str]] = None,
    port_file: Optional[Path] = None,
) -> str:
    """Find the Vibe Kanban backend.

    Order: explicit ``vk_url``, ``VIBE_BACKEND_URL``, ``HOST`` with
    ``BACKEND_PORT``/``PORT``, then the port file written by the backend.
    """
    env = os.environ if env is None else env

    if vk_url:
        return trim_trailing_slash(vk_url)
    if env.get(BACKEND_URL_ENV):
        return trim_trailing_slash(env[BACKEND_URL_ENV])

    host = env.get("HOST") or DEFAULT_HOST
    port_value = env.get("BACKEND_PORT") or env.get("PORT")
    if port_value:
        if not port_value.strip().isdigit():
            raise ConfigError(f"Invalid backend port '{port_value}'.")
        port: Optional[int] = int(port_value)
    else:
        port = read_port_file(port_file)

    if port:
        return trim_trailing_slash(f"http://{host}:{port}")

    raise ConfigError(
        "Unable to determine Vibe Kanban backend URL. Start Vibe Kanban, "
        f"or set {BACKEND_URL_ENV}, or pass --vk-url."
    )


def resolve_project_root(root: Optional[str] = None, *, env: Optional[Mapping[str, str]] = None) -> Path:
    """Resolve the repository that holds the ``openspec/`` directory."""
    env = os.environ if env is None else env

    if root:
        resolved = Path(root).expanduser().resolve()
        if not resolved.exists():
            raise ConfigError(f"Provided root '{root}' does not exist.")
        return resolved

    env_root = env.get(PROJECT_ROOT_ENV)
    if env_root:
        env_path = Path(env_root).expanduser().resolve()
        if not env_path.exists():
            raise ConfigError(
                f"Environment variable {PROJECT_ROOT_ENV} points to '{env_root}', which does not exist."
            )
        return env_path

    return Path.cwd().resolve()


def debug_enabled(env: Optional[Mapping[str, str]] = None) -> bool:
    env = os.environ if env is None else env
    return (env.get(DEBUG_ENV) or "").strip().lower() not in {"", "0", "false", "no", "off"}

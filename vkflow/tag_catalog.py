"""Bundled tag catalog: reusable prompt snippets seeded into Vibe Kanban."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Callable, Optional

from .errors import TagCatalogError
from .models import TagCatalog, TagDefinition

logger = logging.getLogger("vkflow.tags")

ASSETS_DIR = Path(__file__).resolve().parent / "assets"


def asset_path(*parts: str) -> Path:
    return ASSETS_DIR.joinpath(*parts)


def load_tag_catalog(assets_dir: Optional[Path] = None) -> TagCatalog:
    """Read ``tags.json`` and the prompt file behind every entry."""
    base = Path(assets_dir) if assets_dir else ASSETS_DIR
    manifest_path = base / "tags.json"
    try:
        manifest = json.loads(manifest_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise TagCatalogError(f"Invalid tags manifest: {manifest_path}: {exc}") from exc

    if not isinstance(manifest, dict) or not isinstance(manifest.get("tags"), list):
        raise TagCatalogError(f"Invalid tags manifest: {manifest_path}")

    tags = []
    for entry in manifest["tags"]:
        if not isinstance(entry, dict) or not entry.get("tag_name") or not entry.get("file"):
            raise TagCatalogError(f"Invalid tags manifest entry: {entry!r}")
        source = Path(entry["file"])
        try:
            content = (base / source).read_text(encoding="utf-8")
        except OSError as exc:
            raise TagCatalogError(f"Tag file missing for @{entry['tag_name']}: {source}") from exc
        tags.append(TagDefinition(tag_name=entry["tag_name"], content=content, source=source.as_posix()))

    logger.debug(f"Loaded {len(tags)} tags from {manifest_path}")
    return TagCatalog(version=manifest.get("version") or 1, tags=tags)


class TagCatalogCache:
    """Loads the catalog on first use and keeps it for the owner's lifetime."""

    def __init__(self, loader: Callable[[], TagCatalog] = load_tag_catalog):
        self._loader = loader
        self._catalog: Optional[TagCatalog] = None

    @property
    def loaded(self) -> bool:
        return self._catalog is not None

    def get(self) -> TagCatalog:
        if self._catalog is None:
            self._catalog = self._loader()
        return self._catalog

    def invalidate(self) -> None:
        self._catalog = None

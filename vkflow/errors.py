"""Exception taxonomy for vkflow.

Every error the command line reports as ``Error: <message>`` derives from
:class:`VkflowError`.
"""

from __future__ import annotations

from typing import Optional


class VkflowError(Exception):
    """Base class for user-facing vkflow failures."""


class ConfigError(VkflowError):
    """Backend URL or project root could not be resolved."""


class ImportInputError(VkflowError):
    """The import cannot start: missing arguments, tasks file, or tasks."""


class TagCatalogError(VkflowError):
    """The bundled tag manifest is malformed."""


class OpenSpecError(VkflowError):
    """The OpenSpec scaffolding command failed."""


class VkApiError(VkflowError):
    """The Vibe Kanban backend rejected a request or could not be reached."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TaskCreationError(VkApiError):
    """A create call failed part-way through an import."""

    def __init__(self, title: str, created: int, total: int, cause: Exception):
        message = (
            f"Failed to create task '{title}' after {created} of {total} created: {cause}. "
            "Re-run the import to resume; tasks already created will be skipped."
        )
        super().__init__(message, getattr(cause, "status_code", None))
        self.title = title
        self.created = created
        self.total = total

"""HTTP client for the Vibe Kanban backend API.

Every endpoint answers with an envelope ``{"success": bool, "data": ...,
"message": ...}``; :meth:`VibeKanbanClient.request_json` unwraps it and turns
failures into :class:`~vkflow.errors.VkApiError`. Requests are never retried.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import requests

from .config import DEFAULT_TIMEOUT, trim_trailing_slash
from .errors import VkApiError
from .models import UpsertResult

logger = logging.getLogger("vkflow.vk")


class VibeKanbanClient:
    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        self.base_url = trim_trailing_slash(base_url)
        self.session = session or requests.Session()
        self.timeout = timeout

    def request_json(
        self,
        method: str,
        api_path: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.base_url}{api_path}"
        headers = {"Accept": "application/json"}
        kwargs: Dict[str, Any] = {"headers": headers, "timeout": self.timeout}
        if params:
            kwargs["params"] = params
        if payload is not None:
            kwargs["json"] = payload

        logger.debug(f"{method} {url}")
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as exc:
            raise VkApiError(f"VK API network error: {exc}") from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise VkApiError(
                f"VK API response was not JSON ({response.status_code} {response.reason}): "
                f"{response.text[:200]}",
                response.status_code,
            ) from exc

        if response.status_code >= 400:
            message = self._message(body) or f"{response.status_code} {response.reason}"
            raise VkApiError(f"VK API error: {message}", response.status_code)

        if isinstance(body, dict) and body.get("success") is False:
            message = self._message(body) or "Unknown VK API error"
            raise VkApiError(f"VK API error: {message}", response.status_code)

        return body.get("data") if isinstance(body, dict) else None

    @staticmethod
    def _message(body: Any) -> Optional[str]:
        if not isinstance(body, dict):
            return None
        return body.get("message") or body.get("error")

    # ------------------------------------------------------------------
    # Projects and tasks
    # ------------------------------------------------------------------

    def list_projects(self) -> List[Dict[str, Any]]:
        return self.request_json("GET", "/api/projects") or []

    def list_tasks(self, project_id: str) -> List[Dict[str, Any]]:
        if not project_id:
            raise ValueError("list_tasks requires a project_id")
        return self.request_json("GET", "/api/tasks", params={"project_id": project_id}) or []

    def create_task(self, project_id: str, title: str, description: str) -> Dict[str, Any]:
        return self.request_json(
            "POST",
            "/api/tasks",
            {"project_id": project_id, "title": title, "description": description, "status": "todo"},
        )

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def list_tags(self, search: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"search": search} if search else None
        return self.request_json("GET", "/api/tags", params=params) or []

    def create_tag(self, tag_name: str, content: str) -> Dict[str, Any]:
        return self.request_json("POST", "/api/tags", {"tag_name": tag_name, "content": content})

    def update_tag(self, tag_id: str, tag_name: str, content: str) -> Dict[str, Any]:
        return self.request_json(
            "PUT",
            f"/api/tags/{quote(str(tag_id), safe='')}",
            {"tag_name": tag_name, "content": content},
        )

    def upsert_tag(self, tag_name: str, content: str, *, overwrite: bool = True) -> UpsertResult:
        existing = next((t for t in self.list_tags() if t.get("tag_name") == tag_name), None)
        if existing is None:
            return UpsertResult(action="created", tag=self.create_tag(tag_name, content))
        if not overwrite:
            return UpsertResult(action="skipped", tag=existing)
        return UpsertResult(action="updated", tag=self.update_tag(existing["id"], tag_name, content))

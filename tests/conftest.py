"""Shared fixtures: an in-memory Vibe Kanban backend behind a fake session."""

import itertools
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import pytest

from vkflow.vk_client import VibeKanbanClient
from vkflow.vkflow_logging import performance_monitor


class FakeResponse:
    def __init__(self, status_code: int = 200, payload: Any = None, reason: str = "OK", text: Optional[str] = None):
        self.status_code = status_code
        self._payload = payload
        self.reason = reason
        self.text = text if text is not None else str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


class FakeVkSession:
    """Routes the handful of endpoints vkflow uses to in-memory lists."""

    def __init__(self):
        self.tasks: List[Dict[str, Any]] = []
        self.tags: List[Dict[str, Any]] = []
        self.projects: List[Dict[str, Any]] = [{"id": "proj-1", "name": "Demo"}]
        self.calls: List[tuple] = []
        self.fail_create_after: Optional[int] = None
        self.created_count = 0
        self._ids = itertools.count(1)

    @staticmethod
    def ok(data: Any) -> FakeResponse:
        return FakeResponse(200, {"success": True, "data": data})

    def request(self, method, url, headers=None, timeout=None, params=None, json=None):
        path = urlparse(url).path
        self.calls.append((method, path, params, json))

        if method == "GET" and path == "/api/projects":
            return self.ok(self.projects)
        if method == "GET" and path == "/api/tasks":
            project_id = (params or {}).get("project_id")
            return self.ok([t for t in self.tasks if t["project_id"] == project_id])
        if method == "POST" and path == "/api/tasks":
            if self.fail_create_after is not None and self.created_count >= self.fail_create_after:
                return FakeResponse(500, {"success": False, "message": "backend exploded"}, "Internal Server Error")
            task = {"id": f"task-{next(self._ids)}", **json}
            self.tasks.append(task)
            self.created_count += 1
            return self.ok(task)
        if method == "GET" and path == "/api/tags":
            return self.ok(list(self.tags))
        if method == "POST" and path == "/api/tags":
            tag = {"id": f"tag-{next(self._ids)}", **json}
            self.tags.append(tag)
            return self.ok(tag)
        if method == "PUT" and path.startswith("/api/tags/"):
            tag_id = path.rsplit("/", 1)[-1]
            for tag in self.tags:
                if tag["id"] == tag_id:
                    tag.update(json)
                    return self.ok(tag)
            return FakeResponse(404, {"success": False, "message": "tag not found"}, "Not Found")
        return FakeResponse(404, {"success": False, "message": f"no route {method} {path}"}, "Not Found")

    def calls_to(self, method: str, path: str) -> List[tuple]:
        return [call for call in self.calls if call[0] == method and call[1] == path]


@pytest.fixture
def fake_session():
    return FakeVkSession()


@pytest.fixture
def vk_client(fake_session):
    return VibeKanbanClient("http://vk.test/", session=fake_session)


@pytest.fixture(autouse=True)
def reset_performance_metrics():
    performance_monitor.clear()
    yield
    performance_monitor.clear()


@pytest.fixture
def change_repo(tmp_path):
    """A repository with one OpenSpec change holding two task sections."""
    change_dir = tmp_path / "openspec" / "changes" / "add-login"
    change_dir.mkdir(parents=True)
    (change_dir / "tasks.md").write_text(
        "# Tasks\n\n"
        "## Task: Add login form\n\nRender email and password fields.\n\n---\n\n"
        "## Task: Wire session cookie\n\n```python\n## Task: not a heading\n```\n",
        encoding="utf-8",
    )
    return tmp_path

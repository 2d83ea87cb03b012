"""Unit tests for vkflow models.

This module tests the value types exchanged between the parser,
the reconciler and the backend client.
"""

import pytest

from vkflow.models import (
    CREATE,
    SKIP,
    ImportDecision,
    ImportReport,
    TagCatalog,
    TagDefinition,
    TaskRecord,
    VkflowMarkers,
)


class TestTaskRecord:
    """Test cases for TaskRecord model."""

    def test_defaults_to_empty_description(self):
        """Test creating a title-only task."""
        record = TaskRecord(title="One")

        assert record.description == ""
        assert record.to_dict() == {"title": "One", "description": ""}

    def test_equality_by_value(self):
        assert TaskRecord("A", "B") == TaskRecord("A", "B")
        assert TaskRecord("A", "B") != TaskRecord("A", "B2")


class TestVkflowMarkers:
    """Test cases for VkflowMarkers model."""

    def test_partial_markers(self):
        markers = VkflowMarkers(change="c1")

        assert markers.task is None
        assert markers.to_dict() == {"change": "c1", "task": None}


class TestImportDecision:
    """Test cases for ImportDecision model."""

    def test_create_decision(self):
        decision = ImportDecision(action=CREATE, task_id="abc", title="T", description="D")

        assert decision.is_create
        assert decision.to_dict()["description"] == "D"

    def test_skip_decision(self):
        decision = ImportDecision(action=SKIP, task_id="abc", title="T")

        assert not decision.is_create
        assert decision.description is None


class TestImportReport:
    """Test cases for ImportReport model."""

    @pytest.fixture
    def report(self):
        return ImportReport(
            change="c1",
            project_id="p1",
            tasks_file="tasks.md",
            decisions=[
                ImportDecision(CREATE, "a", "A", "desc"),
                ImportDecision(SKIP, "b", "B"),
                ImportDecision(CREATE, "c", "C", "desc"),
            ],
        )

    def test_partitions_decisions(self, report):
        """Test to_create and skipped views."""
        assert [d.task_id for d in report.to_create] == ["a", "c"]
        assert [d.task_id for d in report.skipped] == ["b"]

    def test_to_dict_counts(self, report):
        report.created.append({"id": "t1"})
        data = report.to_dict()

        assert data["created_count"] == 1
        assert data["skipped_count"] == 1
        assert data["dry_run"] is False
        assert len(data["decisions"]) == 3


class TestTagCatalog:
    """Test cases for TagCatalog model."""

    def test_lookup_by_name(self):
        catalog = TagCatalog(version=1, tags=[TagDefinition("a", "content", "tags/a.md")])

        assert catalog.names() == ["a"]
        assert catalog.get("a").content == "content"
        assert catalog.get("missing") is None

"""Unit tests for markdown task extraction."""

from vkflow.models import TaskRecord
from vkflow.tasks_parser import (
    normalize_newlines,
    parse_tasks_from_markdown,
    structural_mask,
)


class TestTaskSections:
    """Test cases for the '## Task:' dialect."""

    def test_parses_task_sections_in_order(self):
        """Test that each section becomes one task with its body."""
        md = "# Tasks\n\n## Task: First\n\nHello\n\n---\n\n## Task: Second\n\nWorld"
        tasks = parse_tasks_from_markdown(md)

        assert tasks == [
            TaskRecord(title="First", description="Hello"),
            TaskRecord(title="Second", description="World"),
        ]

    def test_multiline_body_is_preserved(self):
        """Test that inner blank lines and list items survive."""
        md = "## Task: Build\n\nStep one.\n\n- detail a\n- detail b\n\n\n"
        tasks = parse_tasks_from_markdown(md)

        assert tasks[0].description == "Step one.\n\n- detail a\n- detail b"

    def test_fenced_code_is_kept_in_description(self):
        """Test that a fence containing a fake heading stays in the body."""
        md = (
            "## Task: Document parser\n\n"
            "Example input:\n\n"
            "```markdown\n"
            "## Task: Not a real task\n"
            "- [ ] not a checkbox\n"
            "```\n\n"
            "## Task: Ship it\n"
        )
        tasks = parse_tasks_from_markdown(md)

        assert [t.title for t in tasks] == ["Document parser", "Ship it"]
        assert tasks[0].description == (
            "Example input:\n\n```markdown\n## Task: Not a real task\n- [ ] not a checkbox\n```"
        )
        assert tasks[1].description == ""

    def test_tilde_fence_closes_only_on_tildes(self):
        """Test that backticks do not close a tilde fence."""
        md = "## Task: A\n\n~~~\n```\n## Task: hidden\n~~~\n\n## Task: B\n"
        tasks = parse_tasks_from_markdown(md)

        assert [t.title for t in tasks] == ["A", "B"]
        assert "## Task: hidden" in tasks[0].description

    def test_unclosed_fence_hides_rest_of_document(self):
        """Test that an unclosed fence swallows later headings."""
        md = "## Task: A\n\n````\n## Task: B\n```\n"
        tasks = parse_tasks_from_markdown(md)

        assert [t.title for t in tasks] == ["A"]

    def test_crlf_line_endings(self):
        """Test that Windows line endings are normalized."""
        md = "## Task: One\r\n\r\nBody\r\n## Task: Two\r\n"
        tasks = parse_tasks_from_markdown(md)

        assert tasks == [TaskRecord("One", "Body"), TaskRecord("Two", "")]

    def test_title_is_trimmed(self):
        md = "##   Task:    Spaced out   \n"
        assert parse_tasks_from_markdown(md)[0].title == "Spaced out"

    def test_empty_title_is_still_a_task(self):
        """Test that a heading with no title text yields an empty title."""
        tasks = parse_tasks_from_markdown("## Task:\n\nBody only\n")

        assert tasks == [TaskRecord(title="", description="Body only")]

    def test_whitespace_only_description_is_empty(self):
        tasks = parse_tasks_from_markdown("## Task: A\n   \n\t\n## Task: B")
        assert tasks[0].description == ""

    def test_other_heading_levels_are_not_tasks(self):
        """Test that only level-2 headings start a task."""
        md = "### Task: deeper\n# Task: shallower\n- [ ] fallback item\n"
        tasks = parse_tasks_from_markdown(md)

        assert tasks == [TaskRecord(title="fallback item", description="")]

    def test_trailing_rule_is_a_separator(self):
        """Test that rules between sections are dropped but inner rules stay."""
        md = "## Task: A\n\nabove\n\n***\n\nbelow\n\n- - -\n\n## Task: B\n"
        tasks = parse_tasks_from_markdown(md)

        assert tasks[0].description == "above\n\n***\n\nbelow"

    def test_rule_closing_a_fence_body_is_kept(self):
        md = "## Task: A\n\n```\n---\n```\n"
        assert parse_tasks_from_markdown(md)[0].description == "```\n---\n```"

    def test_setext_underline_is_content(self):
        """Test that a rule directly under text stays in the description."""
        md = "## Task: A\n\nSummary\n---\n\n## Task: B\n"
        assert parse_tasks_from_markdown(md)[0].description == "Summary\n---"

    def test_sections_win_over_checkboxes(self):
        """Test that checkboxes inside sections stay in the description."""
        md = "## Task: A\n\n- [ ] sub step\n"
        tasks = parse_tasks_from_markdown(md)

        assert tasks == [TaskRecord(title="A", description="- [ ] sub step")]


class TestCheckboxFallback:
    """Test cases for the checklist dialect."""

    def test_parses_unchecked_items(self):
        tasks = parse_tasks_from_markdown("- [ ] One\n- [ ] Two")
        assert tasks == [TaskRecord("One", ""), TaskRecord("Two", "")]

    def test_checked_items_are_ignored(self):
        """Test that [x] and [X] items never produce tasks."""
        md = "- [x] Done\n- [ ] Open\n* [X] Also done\n"
        tasks = parse_tasks_from_markdown(md)

        assert [t.title for t in tasks] == ["Open"]

    def test_star_bullets_and_indentation(self):
        md = "  * [ ] Nested star\n\t- [ ] Tabbed dash   \n"
        tasks = parse_tasks_from_markdown(md)

        assert [t.title for t in tasks] == ["Nested star", "Tabbed dash"]

    def test_checkboxes_inside_fences_are_ignored(self):
        md = "```\n- [ ] example\n```\n- [ ] real\n"
        assert [t.title for t in parse_tasks_from_markdown(md)] == ["real"]

    def test_fence_nested_in_list_item_is_ignored(self):
        """Test that an indented fence under a list item hides its checkboxes."""
        md = "- [ ] real\n\n    ```\n    - [ ] example only\n    ```\n"
        assert [t.title for t in parse_tasks_from_markdown(md)] == ["real"]

    def test_deeply_indented_tilde_fence(self):
        md = "- [ ] real\n\t\t~~~md\n\t\t- [ ] hidden\n\t\t~~~\n- [ ] after\n"
        assert [t.title for t in parse_tasks_from_markdown(md)] == ["real", "after"]

    def test_no_tasks_returns_empty_list(self):
        """Test that a document with neither dialect yields nothing."""
        assert parse_tasks_from_markdown("# Notes\n\nJust prose.\n") == []
        assert parse_tasks_from_markdown("") == []


class TestHelpers:
    """Test cases for newline and fence helpers."""

    def test_normalize_newlines(self):
        assert normalize_newlines("a\r\nb\rc\n") == "a\nb\nc\n"

    def test_structural_mask_marks_fence_lines(self):
        lines = ["text", "```py", "code", "```", "after"]
        assert structural_mask(lines) == [True, False, False, False, True]

    def test_shorter_closing_fence_does_not_close(self):
        lines = ["````", "```", "still code", "````", "out"]
        assert structural_mask(lines) == [False, False, False, False, True]

"""Tests for the markdown building blocks."""

from ticsreview_core.markdown import (
    Status,
    generate_expandable_area,
    generate_link,
    generate_status,
    generate_table,
)


def test_link():
    assert generate_link("viewer", "https://x/y") == "[viewer](https://x/y)"


class TestGenerateStatus:
    def test_passed_without_suffix(self):
        assert generate_status(Status.PASSED) == ":heavy_check_mark:"

    def test_failed_with_suffix(self):
        assert generate_status(Status.FAILED, True) == ":x: Failed"

    def test_passed_with_suffix(self):
        assert generate_status(Status.PASSED, True) == ":heavy_check_mark: Passed"

    def test_skipped_and_warning(self):
        assert generate_status(Status.SKIPPED) == ":grey_question:"
        assert generate_status(Status.WARNING, True) == ":warning: Warning"


def test_expandable_area():
    assert generate_expandable_area("head", "body") == "<details><summary>head</summary>\nbody</details>\n\n"


class TestGenerateTable:
    def test_header_separator_and_rows(self):
        table = generate_table([["File", "Violations"]], [["a.c", "3"], ["b.c", "1"]])
        assert table == "| File | Violations |\n|---|---|\n| a.c | 3 |\n| b.c | 1 |\n"

    def test_no_rows(self):
        assert generate_table([["File", "Violations"]], []) == "| File | Violations |\n|---|---|\n"

    def test_pipes_in_cells_are_escaped(self):
        table = generate_table([["File"]], [["a|b"]])
        assert "| a\\|b |" in table

    def test_no_headers(self):
        assert generate_table([], [["x"]]) == ""

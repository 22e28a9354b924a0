"""Tests for the GitHub Actions summary and output writers."""

import re

from promptlens_core.gh.actions import set_output, write_step_summary


class TestWriteStepSummary:
    def test_appends_markdown(self, tmp_path, monkeypatch):
        summary = tmp_path / "summary.md"
        summary.write_text("earlier step\n")
        monkeypatch.setenv("GITHUB_STEP_SUMMARY", str(summary))

        assert write_step_summary("# PROMPT REVIEW") is True
        assert summary.read_text() == "earlier step\n# PROMPT REVIEW\n"

    def test_unset_outside_actions(self, monkeypatch):
        monkeypatch.delenv("GITHUB_STEP_SUMMARY", raising=False)
        assert write_step_summary("x") is False


class TestSetOutput:
    def test_single_line_value(self, tmp_path, monkeypatch):
        out = tmp_path / "output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))

        assert set_output("overall_score", "Good, Critical") is True
        assert out.read_text() == "overall_score=Good, Critical\n"

    def test_multi_line_value_uses_delimiter(self, tmp_path, monkeypatch):
        out = tmp_path / "output"
        monkeypatch.setenv("GITHUB_OUTPUT", str(out))

        set_output("report", "line one\nline two")

        text = out.read_text()
        match = re.fullmatch(r"report<<(\S+)\nline one\nline two\n(\S+)\n", text)
        assert match is not None
        assert match.group(1) == match.group(2)

    def test_unset_outside_actions(self, monkeypatch):
        monkeypatch.delenv("GITHUB_OUTPUT", raising=False)
        assert set_output("x", "y") is False

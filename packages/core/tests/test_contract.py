"""Tests for request building and response parsing."""

import pytest

from promptlens_core.api.contract import FileEntry, build_request, parse_response
from promptlens_core.api.errors import ReviewAPIError


def _entry(status="modified", before="old"):
    return FileEntry(path="prompts/a.md", name="a.md", status=status, after="new", before=before)


class TestFileEntry:
    def test_to_dict(self):
        assert _entry().to_dict() == {
            "path": "prompts/a.md",
            "name": "a.md",
            "status": "modified",
            "after": "new",
            "before": "old",
        }

    def test_added_file_has_null_before(self):
        assert _entry(status="added", before=None).to_dict()["before"] is None

    def test_unknown_status_rejected(self):
        with pytest.raises(ValueError, match="Unknown file status"):
            _entry(status="deleted")


class TestBuildRequest:
    def test_minimal_request(self):
        request = build_request("key", "on-demand", [_entry(status="added", before=None)])
        assert request == {
            "apiKey": "key",
            "mode": "on-demand",
            "files": [
                {"path": "prompts/a.md", "name": "a.md", "status": "added", "after": "new", "before": None}
            ],
        }

    def test_optional_fields(self):
        request = build_request(
            "key",
            "pr",
            [_entry()],
            system_overview="Support triage bot",
            repository="acme/prompts",
            pr_number=42,
        )
        assert request["systemOverview"] == "Support triage bot"
        assert request["metadata"] == {"repository": "acme/prompts", "prNumber": 42}

    def test_empty_overview_omitted(self):
        assert "systemOverview" not in build_request("key", "pr", [], system_overview="")

    def test_partial_metadata(self):
        assert build_request("key", "pr", [], pr_number=7)["metadata"] == {"prNumber": 7}

    def test_unknown_mode_rejected(self):
        with pytest.raises(ValueError, match="Unknown review mode"):
            build_request("key", "batch", [])


class TestParseResponse:
    def test_success(self, api_response, comparison_payload):
        results = parse_response(api_response(comparison_payload(prompt_file="prompts/x.md")))
        assert len(results) == 1
        assert results[0].file == "prompts/x.md"
        assert results[0].comparison.prompt_file == "prompts/x.md"
        assert results[0].synthesis.prompt_description == "Summarises support tickets for triage"
        assert len(results[0].factor_results) == 3

    def test_result_without_comparison(self, api_response):
        payload = api_response()
        del payload["results"][0]["comparison"]
        assert parse_response(payload)[0].comparison is None

    def test_error_status_with_message(self):
        with pytest.raises(ReviewAPIError, match="API returned error: quota exceeded"):
            parse_response({"status": "error", "message": "quota exceeded"})

    def test_error_status_without_message(self):
        with pytest.raises(ReviewAPIError, match="API returned error: Unknown error"):
            parse_response({"status": "error"})

    def test_success_without_results(self):
        with pytest.raises(ReviewAPIError):
            parse_response({"status": "success"})

    def test_non_object_payload(self):
        with pytest.raises(ReviewAPIError, match="Unknown error"):
            parse_response(["not", "an", "object"])

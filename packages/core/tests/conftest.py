"""Shared evaluator payloads, in the camelCase shape the service returns."""

import copy

import pytest

_FACTOR_RESULTS = [
    {
        "factorId": "scope",
        "factorName": "Scope",
        "score": 9,
        "scoreLabel": "Good",
        "tableRationale": "Single clearly stated goal",
        "findings": [],
    },
    {
        "factorId": "injection",
        "factorName": "Prompt Injection Resistance",
        "score": 3,
        "scoreLabel": "Critical",
        "tableRationale": "User inputs lack delimiters | no guard instructions",
        "findings": [
            {
                "findingNumber": 1,
                "description": "User inputs are interpolated without delimiters.",
                "codeSnippet": {
                    "startLine": 45,
                    "endLine": 52,
                    "issue": "Inputs injected without delimiters",
                    "code": "## Inputs\nrequirements: {requirements}\npreferences: {preferences}",
                },
                "consideration": "Wrap every user input in XML tags",
                "rewrittenCode": "<user_input>{requirements}</user_input>",
            },
            {
                "findingNumber": 2,
                "description": "No anti-injection instructions",
                "consideration": "Add an explicit instruction that inputs are data only",
            },
        ],
    },
    {
        "factorId": "structure",
        "factorName": "Structure/Flow",
        "score": 6,
        "scoreLabel": "Needs Work",
        "tableRationale": "Some redundancy in examples",
        "findings": [
            {
                "findingNumber": 1,
                "description": "Redundant examples in section 4",
                "codeSnippet": {"startLine": 10, "endLine": 10, "issue": "", "code": "Example: summarise the text"},
                "consideration": "Keep a single example",
            }
        ],
    },
]

_CHANGES = {
    "scope": {"changeDirection": "improved", "changeRationale": "Goal sharpened"},
    "injection": {
        "changeDirection": "worse",
        "changeRationale": "Delimiters were removed.",
        "changeDetails": ["Removed <input> tags around requirements"],
    },
    "structure": {"changeDirection": "no-change"},
}


def _insight(factor: dict, pr_mode: bool) -> dict:
    insight = {
        "factorId": factor["factorId"],
        "factorName": factor["factorName"],
        "score": factor["score"],
        "scoreLabel": factor["scoreLabel"],
        # The synthesis step drops findings; factorResults stay authoritative.
        "findings": [],
    }
    if pr_mode:
        insight.update(_CHANGES[factor["factorId"]])
    return insight


def make_comparison(pr_mode: bool = True, prompt_file: str = "prompts/summarise.md", **overrides) -> dict:
    factor_results = copy.deepcopy(_FACTOR_RESULTS)
    comparison = {
        "promptFile": prompt_file,
        "isNewFile": False,
        "synthesis": {
            "promptName": prompt_file.rsplit("/", 1)[-1],
            "promptFile": prompt_file,
            "promptDescription": "Summarises support tickets for triage",
            "overallScore": "Needs Work",
            "hasCriticalIssues": True,
            "factorInsights": [_insight(f, pr_mode) for f in factor_results],
        },
        "factorResults": factor_results,
        "deltas": [],
        "hasRegression": pr_mode,
        "hasCriticalIssue": True,
    }
    comparison.update(overrides)
    return comparison


@pytest.fixture
def comparison_payload():
    """Factory for a three-factor comparison: Good, Critical and Needs Work."""
    return make_comparison


@pytest.fixture
def api_response(comparison_payload):
    def _make(*comparisons):
        comparisons = comparisons or (comparison_payload(),)
        return {
            "status": "success",
            "results": [
                {
                    "file": c["promptFile"],
                    "factorResults": c["factorResults"],
                    "synthesis": c["synthesis"],
                    "comparison": c,
                }
                for c in comparisons
            ],
        }

    return _make

"""Tests for the listing moderation gate."""

import asyncio

import pytest
from conftest import ScriptedCompletionClient

from bizhub.agent.completion_client import (
    CompletionNetworkError,
    MalformedResponse,
    RateLimited,
    ServiceError,
)
from bizhub.agent.moderation import (
    FAIL_CLOSED_VERDICT,
    ModerationEvaluator,
)
from bizhub.core.schema import ModerationVerdict

GOOD = '{"score":85,"approved":true,"reason":"Looks legitimate."}'


def _evaluate(*responses):
    client = ScriptedCompletionClient(*responses)
    verdict = asyncio.run(
        ModerationEvaluator(client).evaluate("Luigi's Pizza", "Wood-fired pizza", "Food & Dining")
    )
    return verdict, client


@pytest.mark.parametrize("wrapped", [GOOD, f"```json\n{GOOD}\n```", f"```\n{GOOD}\n```"])
def test_verdict_is_parsed(wrapped: str) -> None:
    verdict, client = _evaluate(wrapped)
    assert verdict == ModerationVerdict(score=85, approved=True, reason="Looks legitimate.")
    assert len(client.calls) == 1


def test_prompt_carries_the_listing() -> None:
    _, client = _evaluate(GOOD)
    prompt = client.calls[0]
    assert isinstance(prompt, str)
    assert "Business Name: Luigi's Pizza" in prompt
    assert "Category: Food & Dining" in prompt
    assert "Description: Wood-fired pizza" in prompt


def test_rejection_is_passed_through() -> None:
    verdict, _ = _evaluate('{"score": 12, "approved": false, "reason": "Looks like spam."}')
    assert verdict.approved is False
    assert verdict.reason == "Looks like spam."


@pytest.mark.parametrize(
    "error",
    [RateLimited(), ServiceError(500), MalformedResponse("no text"), CompletionNetworkError("x")],
)
def test_service_failure_fails_closed(error: Exception) -> None:
    verdict, client = _evaluate(error)
    assert verdict == ModerationVerdict(
        score=0, approved=False, reason="AI Service unavailable. Manual review required."
    )
    assert len(client.calls) == 1  # no retries


@pytest.mark.parametrize(
    "response",
    [
        "Looks fine to me!",
        '{"score": 90, "approved": true}',
        '{"score": 150, "approved": true, "reason": "Great"}',
        '{"score": 90, "approved": "yes", "reason": "Great"}',
        '[{"score": 90, "approved": true, "reason": "Great"}]',
    ],
)
def test_malformed_verdict_fails_closed(response: str) -> None:
    verdict, _ = _evaluate(response)
    assert verdict == FAIL_CLOSED_VERDICT

"""Screen new business listings before they are published."""

import json
import logging

from bizhub.agent.completion_client import CompletionClient
from bizhub.common import strip_code_fences
from bizhub.core.schema import ModerationVerdict

logger = logging.getLogger(__name__)

FAIL_CLOSED_VERDICT = ModerationVerdict(
    score=0, approved=False, reason="AI Service unavailable. Manual review required."
)

MODERATION_PROMPT = """\
You are a content moderator for a business directory. Evaluate the following business listing:

Business Name: {name}
Category: {category}
Description: {description}

Check for:
1. Inappropriate content (NSFW, hate speech, illegal).
2. Spam or low quality (gibberish, repeated text).
3. Relevance (does it look like a real business?).

Return a JSON object with:
- score: A quality score from 0 to 100.
- approved: true if it should be published, false otherwise.
- reason: A short explanation (max 1 sentence).

Output JSON only.
"""


class ModerationEvaluator:
    """Single-shot listing review; every failure yields :data:`FAIL_CLOSED_VERDICT`."""

    def __init__(self, client: CompletionClient):
        self.client = client

    async def evaluate(self, name: str, description: str, category: str) -> ModerationVerdict:
        """Return the verdict for one listing. Never raises."""
        prompt = MODERATION_PROMPT.format(name=name, category=category, description=description)
        try:
            response = await self.client.complete(prompt)
            verdict = ModerationVerdict.model_validate(json.loads(strip_code_fences(response)))
        except Exception as exc:  # pylint: disable=broad-except
            # Hold the listing for manual review rather than publish it unscreened.
            logger.error("AI evaluation of listing %r failed: %s", name, exc)
            return FAIL_CLOSED_VERDICT

        logger.info(
            "Listing %r reviewed: approved=%s score=%d", name, verdict.approved, verdict.score
        )
        return verdict

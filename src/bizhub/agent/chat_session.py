"""
Chat surface around the agent loop.

A :class:`ChatSession` is what a chat widget talks to: it owns the conversation history,
refuses sends that come too fast or while a reply is still pending, and turns failures into
messages fit for the user.
"""

from __future__ import annotations

import logging
import math
import time
from dataclasses import (
    dataclass,
    field,
)
from typing import (
    Callable,
    List,
)

from bizhub.agent.agent_loop import AgentLoop
from bizhub.agent.completion_client import (
    CompletionNetworkError,
    RateLimited,
)
from bizhub.config import settings
from bizhub.core.schema import (
    ConversationTurn,
    Speaker,
)

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_CONTEXT = """\
You are an AI assistant for BizHub, a local business directory platform that connects residents \
with businesses.

Key information about BizHub:
- It's a platform where residents can browse and search for local businesses
- Businesses can create profiles, list products/services, and connect with customers
- Categories include: Food & Dining, Home Services, Healthcare, Education, Retail, \
Professional Services, etc.

WEBSITE AUTOMATION:
You are an AGENT that can control the website. DON'T just describe what to do - DO IT using the \
available tools.
- If a user asks to find something -> Use the search tool.
- If a user wants to go somewhere -> Use the navigate tool.
- If a user mentions dark/light mode -> Use the setTheme tool.
- If a user wants to scroll -> Use the scroll tool.

When answering questions:
- Be helpful, friendly, and concise
- For general questions, provide helpful answers while relating back to BizHub when appropriate
- Keep responses conversational and easy to understand"""

RATE_LIMITED_REPLY = (
    "⚡ The AI is currently experiencing high traffic (Rate Limit Exceeded). "
    "Please wait a minute before trying again."
)
NETWORK_ERROR_REPLY = "🌐 Network error. Please check your internet connection."
GENERIC_ERROR_REPLY = "Sorry, I encountered an error. Please try again later."


class ChatRateLimiter:
    """
    Minimum spacing between accepted chat sends.

    The spacing starts at ``CHAT_MIN_INTERVAL_MS`` and is widened to
    ``CHAT_RATE_LIMITED_INTERVAL_MS`` once the completion service has rate limited us.
    """

    def __init__(
        self,
        min_interval_ms: int | None = None,
        rate_limited_interval_ms: int | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        if min_interval_ms is None:
            min_interval_ms = settings.CHAT_MIN_INTERVAL_MS
        if rate_limited_interval_ms is None:
            rate_limited_interval_ms = settings.CHAT_RATE_LIMITED_INTERVAL_MS
        self.min_interval_ms = min_interval_ms
        self.rate_limited_interval_ms = rate_limited_interval_ms
        self._clock = clock
        self._last_request: float | None = None

    def wait_seconds(self) -> int:
        """Whole seconds the caller still has to wait; 0 means a send is allowed now."""
        if self._last_request is None:
            return 0
        elapsed_ms = (self._clock() - self._last_request) * 1000
        remaining_ms = self.min_interval_ms - elapsed_ms
        return math.ceil(remaining_ms / 1000) if remaining_ms > 0 else 0

    def record_request(self) -> None:
        self._last_request = self._clock()

    def back_off(self) -> None:
        """Widen the spacing after a rate-limit failure."""
        logger.info("Widening chat spacing to %d ms", self.rate_limited_interval_ms)
        self.min_interval_ms = self.rate_limited_interval_ms


@dataclass
class ChatReply:
    """What the chat widget should display."""

    text: str
    ok: bool = True


class SessionBusy(RuntimeError):
    """A previous message in this session is still being answered."""


@dataclass
class ChatSession:
    """Conversation state for one chat widget."""

    system_context: str = DEFAULT_SYSTEM_CONTEXT
    history: List[ConversationTurn] = field(default_factory=list)
    limiter: ChatRateLimiter = field(default_factory=ChatRateLimiter)
    is_processing: bool = False

    async def send(self, message: str, agent: AgentLoop) -> ChatReply:
        """
        Run *agent* on *message* and record the exchange on success.

        Raises
        ------
        SessionBusy
            If another send on this session has not finished yet.
        """
        if self.is_processing:
            raise SessionBusy("Still answering the previous message.")

        wait = self.limiter.wait_seconds()
        if wait > 0:
            plural = "s" if wait > 1 else ""
            return ChatReply(
                text=f"⏰ Please wait {wait} second{plural} before sending another message.",
                ok=False,
            )

        self.is_processing = True
        self.limiter.record_request()
        try:
            reply = await agent.run(message, self.system_context, self.history)
        except RateLimited:
            self.limiter.back_off()
            return ChatReply(text=RATE_LIMITED_REPLY, ok=False)
        except CompletionNetworkError:
            return ChatReply(text=NETWORK_ERROR_REPLY, ok=False)
        except Exception:  # pylint: disable=broad-except
            logger.exception("Chat request failed")
            return ChatReply(text=GENERIC_ERROR_REPLY, ok=False)
        finally:
            self.is_processing = False

        self.history.append(ConversationTurn(role=Speaker.USER, text=message))
        self.history.append(ConversationTurn(role=Speaker.ASSISTANT, text=reply))
        return ChatReply(text=reply)

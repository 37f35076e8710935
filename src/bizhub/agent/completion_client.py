"""
Completion client for BizHub.

This module is the only place that *directly* talks to the completion service.  Requests go to the
trusted proxy (see :mod:`bizhub.proxy.app`), which holds the real Gemini key; this client only ever
sends the public anon key it was configured with.

Wire format (Gemini ``generateContent``)::

    request:  {"contents": [{"role": "user"|"model", "parts": [{"text": "..."}]}, ...]}
    response: {"candidates": [{"content": {"parts": [{"text": "..."}]}}, ...]}

The client never retries; every failure surfaces as a :class:`CompletionError` subclass.
"""

import logging
from typing import (
    Any,
    Dict,
    List,
    Sequence,
)

import httpx

from bizhub.config import settings
from bizhub.core.schema import (
    ConversationTurn,
    Speaker,
)

logger = logging.getLogger(__name__)

_ROLE_NAMES = {Speaker.USER: "user", Speaker.ASSISTANT: "model"}


class CompletionError(RuntimeError):
    """Base class for completion service failures."""


class RateLimited(CompletionError):
    """The completion service throttled the request (HTTP 429)."""

    def __init__(self) -> None:
        super().__init__("Rate limit exceeded")


class ServiceError(CompletionError):
    """The completion service answered with a non-success status."""

    def __init__(self, status: int) -> None:
        super().__init__(f"API Error: {status}")
        self.status = status


class MalformedResponse(CompletionError):
    """A success response did not carry ``candidates[0].content.parts[0].text``."""


class CompletionNetworkError(CompletionError):
    """The request never got an HTTP answer (connection refused, timeout, ...)."""


def to_contents(conversation: Sequence[ConversationTurn]) -> List[Dict[str, Any]]:
    """Convert turns to the ``contents`` array understood by the completion service."""
    return [
        {"role": _ROLE_NAMES[turn.role], "parts": [{"text": turn.text}]} for turn in conversation
    ]


def extract_text(data: Any) -> str:
    """Return the best candidate's text or raise :class:`MalformedResponse`."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise MalformedResponse("Could not parse AI response") from exc
    if not isinstance(text, str):
        raise MalformedResponse("Could not parse AI response")
    return text


class CompletionClient:
    """Send a conversation (or a single prompt) to the completion proxy."""

    def __init__(
        self,
        endpoint: str | None = None,
        anon_key: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._endpoint = endpoint or settings.COMPLETION_PROXY_URL
        self._anon_key = anon_key if anon_key is not None else settings.COMPLETION_ANON_KEY
        self._timeout = timeout if timeout is not None else settings.COMPLETION_TIMEOUT
        self._http_client = http_client

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self._anon_key}",
            "apikey": self._anon_key,
        }

    async def complete(self, conversation: Sequence[ConversationTurn] | str) -> str:
        """
        Return the completion service's top answer for *conversation*.

        Parameters
        ----------
        conversation:
            Either an ordered, non-empty sequence of turns or a raw prompt string (sent as a
            single user turn).

        Raises
        ------
        RateLimited
            On HTTP 429.
        ServiceError
            On any other non-2xx status.
        MalformedResponse
            When a 2xx body has no parsable text.
        CompletionNetworkError
            When no HTTP response was received at all.
        """
        if isinstance(conversation, str):
            conversation = [ConversationTurn(role=Speaker.USER, text=conversation)]
        if not conversation:
            raise ValueError("Cannot request a completion for an empty conversation.")

        payload = {"contents": to_contents(conversation)}
        logger.debug("Requesting completion for %d turn(s)", len(conversation))

        try:
            if self._http_client is not None:
                resp = await self._http_client.post(
                    self._endpoint, json=payload, headers=self._headers()
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    resp = await client.post(self._endpoint, json=payload, headers=self._headers())
        except httpx.TransportError as exc:
            logger.error("Completion request failed: %s", exc)
            raise CompletionNetworkError(f"Network error: {exc}") from exc

        if resp.status_code == 429:
            logger.warning("Completion service rate limited the request")
            raise RateLimited()
        if not resp.is_success:
            logger.error("Completion service returned status %d", resp.status_code)
            raise ServiceError(resp.status_code)

        try:
            data = resp.json()
        except ValueError as exc:
            raise MalformedResponse("Completion response is not JSON") from exc

        text = extract_text(data)
        logger.debug("Completion response: %s", text)
        return text

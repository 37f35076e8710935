"""Terminal chat against a running BizHub API."""

from __future__ import annotations

import logging
import time
from typing import (
    Any,
    Dict,
    Optional,
)

import httpx

from bizhub.common import (
    AnsiColors,
    colored_print,
)
from bizhub.config import settings

logger = logging.getLogger(__name__)

WELCOME = (
    "Hello! I'm your AI assistant for BizHub. I can help you find businesses, answer questions "
    "about services, or assist with anything related to our business directory. "
    "How can I help you today?"
)
EXIT_WORDS = {"exit", "quit", "bye"}


class DirectoryApiClient:
    """
    Thin synchronous client for the directory API.

    Failures never raise; they come back as ``{"reply": <message>, "ok": False}`` so the
    shell can print them like any other answer.
    """

    def __init__(self, base_url: Optional[str] = None, http_client: Optional[httpx.Client] = None):
        self.base_url = (base_url or f"http://localhost:{settings.API_PORT}").rstrip("/")
        self._http = http_client or httpx.Client(timeout=60.0)
        self.session_id: Optional[str] = None

    def wait_until_ready(self, attempts: int = 6) -> bool:
        """Poll ``/health`` with doubling delays (0.5 s, 1 s, 2 s, ...) until the API answers."""
        delay = 0.5
        for attempt in range(1, attempts + 1):
            try:
                if self._http.get(f"{self.base_url}/health").is_success:
                    return True
            except httpx.TransportError:
                logger.info("Waiting for the API (attempt %d/%d)", attempt, attempts)
            if attempt < attempts:
                time.sleep(delay)
                delay *= 2
        return False

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        try:
            resp = self._http.post(f"{self.base_url}{path}", json=payload)
        except httpx.HTTPError as exc:
            logger.error("Request to %s failed: %s", path, exc)
            return {"reply": f"Could not reach the BizHub API: {exc}", "ok": False}

        if resp.is_error:
            try:
                detail = resp.json()["detail"]
            except (ValueError, KeyError, TypeError):
                detail = resp.status_code
            return {"reply": f"API error: {detail}", "ok": False}
        return resp.json()

    def start_session(self) -> Optional[str]:
        self.session_id = self._post("/sessions", {}).get("session_id")
        return self.session_id

    def chat(self, message: str) -> Dict[str, Any]:
        """Send one message in the current session."""
        return self._post("/chat", {"message": message, "session_id": self.session_id})

    def close(self) -> None:
        self._http.close()


def describe_action(action: Dict[str, Any]) -> str:
    """One-line rendering of a page command returned by the API."""
    args = ", ".join(f"{k}={v!r}" for k, v in action.get("args", {}).items())
    return f"[{action.get('type')}] {args}"


def run_cli(api: Optional[DirectoryApiClient] = None) -> None:
    """Interactive loop: read a line, send it, print page actions then the reply."""
    api = api or DirectoryApiClient()
    try:
        if not api.wait_until_ready() or not api.start_session():
            colored_print(f"⚠️ No answer from the BizHub API at {api.base_url}.", AnsiColors.RED)
            return

        colored_print("\n🏪 BizHub assistant (type 'exit' to leave)", AnsiColors.GREEN)
        colored_print(WELCOME, AnsiColors.YELLOW)
        while True:
            colored_print("\n🧑 You: ", AnsiColors.BLUE, end="")
            try:
                message = input().strip()
            except (EOFError, KeyboardInterrupt):
                break
            if message.lower() in EXIT_WORDS:
                break
            if not message:
                continue

            answer = api.chat(message)
            for action in answer.get("actions") or []:
                colored_print(describe_action(action), AnsiColors.CYAN)
            color = AnsiColors.YELLOW if answer.get("ok", True) else AnsiColors.RED
            colored_print(answer.get("reply", "No response from API"), color)
    finally:
        api.close()


if __name__ == "__main__":
    run_cli()

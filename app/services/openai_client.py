"""
HTTP client for the hosted OpenAI endpoints the service depends on.

Two calls are needed: minting an ephemeral realtime session for a browser, and the
Responses API used by the supervisor and the moderation classifier. requests is
blocking, so each call runs in a worker thread via asyncio.to_thread. Any non-2xx
status or network failure is raised as TransportError.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import requests

from app.config.constants import (
    DEFAULT_REALTIME_MODEL,
    LOGGER_NAME,
    OPENAI_BASE_URL,
    UPSTREAM_TIMEOUT,
)
from app.errors import TransportError

logger = logging.getLogger(LOGGER_NAME)


def extract_output_text(output: List[Dict[str, Any]]) -> str:
    """
    Text of the message items in a Responses API output list.

    Parts of one message are concatenated; separate messages are joined by newlines.
    """
    messages = []
    for item in output or []:
        if item.get("type") != "message":
            continue
        parts = [
            part.get("text", "")
            for part in item.get("content") or []
            if part.get("type") == "output_text"
        ]
        messages.append("".join(parts))
    return "\n".join(messages)


class OpenAIClient:
    """Minimal async wrapper around the OpenAI REST endpoints."""

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = OPENAI_BASE_URL,
        timeout: float = UPSTREAM_TIMEOUT,
    ):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def _headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    async def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        if not self.api_key:
            raise TransportError("OPENAI_API_KEY is not configured")

        endpoint = f"{self.base_url}{path}"
        try:
            response = await asyncio.to_thread(
                requests.post,
                endpoint,
                headers=self._headers(),
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransportError(f"Request to {path} failed: {e}") from e

        if not response.ok:
            logger.error(f"Upstream {path} returned {response.status_code}: {response.text[:500]}")
            raise TransportError(
                f"Upstream {path} returned status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(f"Upstream {path} returned invalid JSON") from e

    async def create_realtime_session(self, model: str = DEFAULT_REALTIME_MODEL) -> Dict[str, Any]:
        """Mint an ephemeral realtime session; the key is at client_secret.value."""
        return await self._post("/realtime/sessions", {"model": model})

    async def create_response(self, body: Dict[str, Any]) -> Dict[str, Any]:
        """Call the Responses API without streaming."""
        return await self._post("/responses", {**body, "stream": False})

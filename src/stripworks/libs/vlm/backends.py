"""Chat-completion client for OpenAI-compatible text generation services."""

from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional
import logging

import requests

logger = logging.getLogger(__name__)


class VLMBackend(str, Enum):
    """Serving stacks known to expose ``/chat/completions``."""

    VLLM = "vllm"
    LMDEPLOY = "lmdeploy"
    OLLAMA = "ollama"
    OPENAI = "openai"


class VLMBackendError(RuntimeError):
    """Raised when a backend fails to execute a completion request."""


class OpenAICompatibleBackend:
    """Thin ``requests`` session bound to one base URL and model."""

    def __init__(
        self,
        backend: VLMBackend,
        *,
        base_url: str,
        model_name: str,
        api_key: str = "EMPTY",
        timeout: int = 120,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.backend = backend
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update(
            {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
        )
        self.last_error: Optional[str] = None

    def chat_completions(self, payload: Dict[str, Any]) -> requests.Response:
        url = f"{self.base_url}/chat/completions"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            self.last_error = str(exc)
            logger.debug("%s request to %s failed: %s", self.backend.value, url, exc)
            raise VLMBackendError(str(exc)) from exc
        self.last_error = None
        return response

    def close(self) -> None:
        self.session.close()


def create_backend_client(
    backend: VLMBackend,
    *,
    base_url: str,
    model_name: str,
    api_key: str = "EMPTY",
    timeout: int = 120,
) -> OpenAICompatibleBackend:
    """Build a client for *backend*; all supported stacks share one protocol."""

    return OpenAICompatibleBackend(
        VLMBackend(backend),
        base_url=base_url,
        model_name=model_name,
        api_key=api_key,
        timeout=timeout,
    )


def extract_message_content(data: Dict[str, Any]) -> str:
    """Return the first choice's message text from a chat completion body."""

    choices = data.get("choices") or [{}]
    message = choices[0].get("message") or {}
    content = message.get("content") or ""
    return str(content).strip()

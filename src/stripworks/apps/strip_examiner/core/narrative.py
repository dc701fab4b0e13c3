"""Narrative report generation through an OpenAI-compatible backend."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from stripworks.libs.vlm import (
    VLMBackend,
    VLMBackendError,
    create_backend_client,
    extract_message_content,
)

from .config import ExaminerConfig
from .errors import NarrativeError
from .models import AnalysisSummary
from .prompts import NarrativePromptProfile, get_prompt_profile

logger = logging.getLogger(__name__)


@dataclass
class NarrativeGenerator:
    """Turn an analysis summary into free text via a chat completion.

    The returned text is opaque: it is never parsed, only passed through.
    """

    config: ExaminerConfig
    prompt_profile: NarrativePromptProfile

    def __post_init__(self) -> None:
        try:
            self._backend = VLMBackend(self.config.backend.lower())
        except ValueError as exc:
            raise NarrativeError(
                f"Unknown backend '{self.config.backend}' for narratives"
            ) from exc
        self._client = create_backend_client(
            self._backend,
            base_url=self.config.base_url,
            model_name=self.config.model,
            api_key=self.config.api_key,
            timeout=self.config.timeout,
        )

    def build_payload(self, summary: AnalysisSummary) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "messages": self.prompt_profile.messages(summary),
            "temperature": self.prompt_profile.temperature,
            "max_tokens": self.prompt_profile.max_tokens,
            "stream": False,
        }

    def generate(self, summary: AnalysisSummary) -> str:
        """Return the narrative text or raise :class:`NarrativeError`."""

        payload = self.build_payload(summary)
        try:
            response = self._client.chat_completions(payload)
        except VLMBackendError as exc:
            raise NarrativeError(f"{self._backend.value} backend error: {exc}") from exc

        if response.status_code != 200:
            raise NarrativeError(
                f"Narrative request failed: HTTP {response.status_code}: "
                f"{response.text[:200]}"
            )

        try:
            content = extract_message_content(response.json())
        except (ValueError, AttributeError, TypeError) as exc:
            raise NarrativeError(f"Malformed narrative response: {exc}") from exc
        if not content:
            raise NarrativeError("Narrative backend returned empty text")
        return content

    def close(self) -> None:
        self._client.close()


def create_narrative_generator(config: ExaminerConfig) -> NarrativeGenerator:
    profile = get_prompt_profile(config.prompt_profile)
    return NarrativeGenerator(config=config, prompt_profile=profile)

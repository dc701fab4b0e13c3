"""Shared utilities for talking to OpenAI-compatible backends."""

from .backends import (  # noqa: F401
    VLMBackend,
    VLMBackendError,
    OpenAICompatibleBackend,
    create_backend_client,
    extract_message_content,
)

__all__ = [
    "VLMBackend",
    "VLMBackendError",
    "OpenAICompatibleBackend",
    "create_backend_client",
    "extract_message_content",
]

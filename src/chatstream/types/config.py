"""Configuration types for chatstream."""

from __future__ import annotations

from dataclasses import dataclass, field

DEFAULT_URL = "http://localhost:8000/api/chat"
DEFAULT_MODEL = "llama3"
DEFAULT_TIMEOUT = 60.0
DEFAULT_ENCODING = "utf-8"
DEFAULT_GREETING = "Hello! How can I assist you today?"
DEFAULT_ERROR_MESSAGE = "Sorry, I encountered an error. Please try again."


@dataclass(frozen=True, slots=True)
class ChatConfig:
    """Settings for talking to a streaming chat endpoint."""

    url: str = DEFAULT_URL
    model: str = DEFAULT_MODEL
    timeout: float = DEFAULT_TIMEOUT  # seconds, per read
    encoding: str = DEFAULT_ENCODING
    greeting: str | None = DEFAULT_GREETING
    error_message: str = DEFAULT_ERROR_MESSAGE
    headers: dict[str, str] = field(default_factory=dict)

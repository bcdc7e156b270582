from __future__ import annotations

from typing import Any, Callable

from planner.log import get_logger

from .base import LLMProvider, parse_json_object
from .openai_provider import OpenAIProvider
from .anthropic_provider import AnthropicProvider, merge_system_into_messages

log = get_logger(__name__)

__all__ = [
    "LLMProvider", "OpenAIProvider", "AnthropicProvider",
    "parse_json_object", "merge_system_into_messages",
    "get_provider",
]


def get_provider(settings: dict[str, Any], env_getter: Callable[[str], str]) -> LLMProvider | None:
    """Primary (OpenAI) when its key is set, else secondary (Anthropic), else None."""
    timeout = float(settings.get("llm_timeout_seconds", 45.0))
    models = settings.get("models", {})

    openai_key = env_getter("OPENAI_API_KEY")
    if openai_key:
        log.debug("Using provider: OpenAI")
        return OpenAIProvider(openai_key, models.get("openai", {}), timeout=timeout)

    anthropic_key = env_getter("ANTHROPIC_API_KEY")
    if anthropic_key:
        log.debug("Using provider: Anthropic")
        return AnthropicProvider(anthropic_key, models.get("anthropic", {}), timeout=timeout)

    log.debug("No LLM credentials found, heuristic and template paths only")
    return None

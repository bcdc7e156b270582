"""Anthropic messages API (secondary provider).

The message list sent to Anthropic carries no system-role entries, so the
system prompt is folded into the first user turn instead.
"""
from __future__ import annotations

from planner.errors import UpstreamUnavailable
from planner.log import get_logger
from planner.models import Completion, TokenUsage
from planner.providers.base import JSON_INSTRUCTION, LLMProvider

log = get_logger(__name__)


def merge_system_into_messages(system: str, messages: list[dict[str, str]]) -> list[dict[str, str]]:
    """Prefix *system* onto the first user turn (or open with one)."""
    out = [{"role": m["role"], "content": m["content"]} for m in messages if m.get("role") != "system"]
    if not system:
        return out
    for m in out:
        if m["role"] == "user":
            m["content"] = f"{system}\n\n{m['content']}"
            return out
    return [{"role": "user", "content": system}] + out


class AnthropicProvider(LLMProvider):
    name = "anthropic"

    def __init__(self, api_key: str, models: dict[str, str], timeout: float = 45.0) -> None:
        super().__init__(api_key, models, timeout)
        self._client = None

    def _get_client(self):
        if self._client is None:
            import anthropic

            self._client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout, max_retries=0)
        return self._client

    def complete(
        self,
        messages: list[dict[str, str]],
        *,
        system: str = "",
        task: str = "chat",
        json_mode: bool = False,
        temperature: float = 0.7,
        max_tokens: int = 1000,
    ) -> Completion:
        model = self.model_for(task)
        payload = merge_system_into_messages(system, messages)
        if json_mode and payload:
            last = payload[-1]
            if last["role"] == "user":
                last["content"] = f"{last['content']}\n\n{JSON_INSTRUCTION}"

        try:
            r = self._get_client().messages.create(
                model=model,
                max_tokens=max_tokens,
                temperature=temperature,
                messages=payload,
            )
        except Exception as exc:
            raise UpstreamUnavailable(f"Anthropic {model} call failed: {exc}") from exc

        text = "".join(getattr(block, "text", "") for block in (r.content or []))
        usage = getattr(r, "usage", None)
        log.debug("Anthropic %s usage: %s", model, usage)
        return Completion(
            text=text.strip(),
            model=model,
            usage=TokenUsage(
                input=getattr(usage, "input_tokens", 0) or 0,
                output=getattr(usage, "output_tokens", 0) or 0,
            ),
        )

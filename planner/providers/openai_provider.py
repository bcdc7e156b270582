"""OpenAI chat completions (primary provider)."""
from __future__ import annotations

from planner.errors import UpstreamUnavailable
from planner.log import get_logger
from planner.models import Completion, TokenUsage
from planner.providers.base import LLMProvider

log = get_logger(__name__)


class OpenAIProvider(LLMProvider):
    name = "openai"

    def __init__(self, api_key: str, models: dict[str, str], timeout: float = 45.0) -> None:
        super().__init__(api_key, models, timeout)
        self._client = None

    def _get_client(self):
        if self._client is None:
            from openai import OpenAI

            # SDK retries off; callers fall back instead
            self._client = OpenAI(api_key=self.api_key, timeout=self.timeout, max_retries=0)
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
        payload = ([{"role": "system", "content": system}] if system else []) + list(messages)
        kwargs: dict = {
            "model": model,
            "messages": payload,
            "temperature": temperature,
            "max_tokens": max_tokens,
        }
        if json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            r = self._get_client().chat.completions.create(**kwargs)
        except Exception as exc:
            raise UpstreamUnavailable(f"OpenAI {model} call failed: {exc}") from exc

        if not r.choices:
            raise UpstreamUnavailable(f"OpenAI {model} returned no choices")
        usage = getattr(r, "usage", None)
        log.debug("OpenAI %s usage: %s", model, usage)
        return Completion(
            text=(r.choices[0].message.content or "").strip(),
            model=model,
            usage=TokenUsage(
                input=getattr(usage, "prompt_tokens", 0) or 0,
                output=getattr(usage, "completion_tokens", 0) or 0,
            ),
        )

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from typing import Any

from planner.models import Completion

JSON_INSTRUCTION = "Respond only with valid JSON."


class LLMProvider(ABC):
    """One chat-completion capability, shaped per vendor.

    ``messages`` holds only user/assistant turns; the system prompt is passed
    separately so each variant can place it where its API expects it.
    Implementations raise ``UpstreamUnavailable`` on any failure.
    """

    name: str = "base"

    def __init__(self, api_key: str, models: dict[str, str], timeout: float = 45.0) -> None:
        self.api_key = api_key
        self.models = dict(models)
        self.timeout = timeout

    def model_for(self, task: str) -> str:
        return self.models.get(task) or next(iter(self.models.values()), "")

    @abstractmethod
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
        pass

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(models={self.models})"


def parse_json_object(text: str) -> dict[str, Any]:
    """Parse the outermost ``{...}`` in *text*; raises ValueError when absent."""
    raw = (text or "").strip()
    start = raw.find("{")
    end = raw.rfind("}") + 1
    if start == -1 or end == 0:
        raise ValueError("LLM did not return valid JSON")
    data = json.loads(raw[start:end])
    if not isinstance(data, dict):
        raise ValueError("LLM JSON payload is not an object")
    return data

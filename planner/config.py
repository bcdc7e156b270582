"""Load settings, CV text and env configuration."""
from __future__ import annotations

import copy
import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from planner.log import get_logger

log = get_logger(__name__)

load_dotenv()

ROOT_DIR: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = ROOT_DIR / "config"
SETTINGS_PATH: Path = CONFIG_DIR / "settings.yaml"
CV_PATH: Path = CONFIG_DIR / "cv.md"
SUPPLEMENTALS_DIR: Path = ROOT_DIR / "supplementals"

DEFAULT_SETTINGS: dict[str, Any] = {
    "candidate_name": "Rushil Chandrupatla",
    "models": {
        "openai": {"plan": "gpt-4o", "fit": "gpt-4o", "chat": "gpt-4o", "context": "gpt-4o-mini"},
        "anthropic": {
            "plan": "claude-3-5-sonnet-20241022",
            "fit": "claude-3-5-sonnet-20241022",
            "chat": "claude-3-5-sonnet-20241022",
            "context": "claude-3-5-sonnet-20241022",
        },
    },
    # USD per 1M tokens
    "pricing": {
        "gpt-4o": {"input": 2.50, "output": 10.00},
        "gpt-4o-mini": {"input": 0.15, "output": 0.60},
        "claude-3-5-sonnet-20241022": {"input": 3.00, "output": 15.00},
    },
    "previous_employers": ["BILL"],
    "llm_timeout_seconds": 45.0,
    "chat_history_window": 10,
    "supplemental_basename": "Supplemental Interview",
    "sheets": {
        "plan_tab": "Plan Generator Logs",
        "chat_tab": "Chatbot Logs",
    },
}


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    out = copy.deepcopy(base)
    for k, v in override.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge(out[k], v)
        else:
            out[k] = v
    return out


def load_settings(path: Path | None = None) -> dict[str, Any]:
    """Built-in defaults overlaid with ``config/settings.yaml`` and env overrides."""
    path = path or SETTINGS_PATH
    data: dict[str, Any] = {}
    if path.exists():
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    settings = _merge(DEFAULT_SETTINGS, data)

    timeout = get_env("LLM_TIMEOUT_SECONDS")
    if timeout:
        try:
            settings["llm_timeout_seconds"] = float(timeout)
        except ValueError:
            log.warning("Ignoring non-numeric LLM_TIMEOUT_SECONDS=%r", timeout)

    for provider, env_key in (("openai", "OPENAI_MODEL"), ("anthropic", "ANTHROPIC_MODEL")):
        model = get_env(env_key)
        if model:
            settings["models"][provider] = {task: model for task in settings["models"][provider]}

    return settings


def load_cv(path: Path | None = None) -> str:
    path = path or CV_PATH
    if not path.exists():
        log.warning("CV file missing at %s, prompts will carry no CV", path)
        return ""
    return path.read_text(encoding="utf-8").strip()


def is_previous_employer(company_name: str, aliases: list[str]) -> bool:
    """Case-insensitive substring match of any alias inside *company_name*."""
    name = (company_name or "").lower()
    return any(alias.lower() in name for alias in aliases if alias)


def estimate_cost(model: str, input_tokens: int, output_tokens: int, pricing: dict[str, Any]) -> float:
    """Linear per-million-token estimate; unknown models cost 0."""
    prices = pricing.get(model)
    if not prices:
        log.warning("No price configured for model %s, reporting cost 0", model)
        return 0.0
    return (
        input_tokens / 1_000_000 * float(prices.get("input", 0))
        + output_tokens / 1_000_000 * float(prices.get("output", 0))
    )

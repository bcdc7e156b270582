#!/usr/bin/env python3
"""Entry point to run the plan generator / chatbot API."""
from __future__ import annotations

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from planner.config import CV_PATH, get_env
from planner.log import get_logger

log = get_logger(__name__)


def _check_setup() -> None:
    if not CV_PATH.exists():
        log.warning("No CV found at %s, prompts will carry no CV context", CV_PATH)
    if get_env("OPENAI_API_KEY"):
        log.info("OpenAI API key found - LLM features enabled")
    elif get_env("ANTHROPIC_API_KEY"):
        log.info("Anthropic API key found - LLM features enabled")
    else:
        log.warning("No LLM API key found - using heuristic and template fallbacks")
        log.warning("  Add OPENAI_API_KEY or ANTHROPIC_API_KEY to .env to enable LLM features")


if __name__ == "__main__":
    _check_setup()

    from planner.api import create_app

    port = int(get_env("PORT", "3000") or 3000)
    app = create_app()
    log.info("API server running on http://localhost:%d", port)
    log.info("  Plan endpoint:    POST /api/analyze-company")
    log.info("  Chatbot endpoint: POST /api/chatbot")
    app.run(host="0.0.0.0", port=port)

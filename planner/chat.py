"""Recruiter-facing chatbot that answers from the CV and supplemental text."""
from __future__ import annotations

import re
from typing import Any, Iterable

from planner.config import load_cv, load_settings
from planner.log import get_logger
from planner.models import ConversationTurn
from planner.providers import LLMProvider
from planner.supplemental import SupplementalText, get_supplemental

log = get_logger(__name__)

APOLOGY = "I'm sorry, I'm having trouble processing your question right now. Please try again later."

JOKE_OPENER = "Knock knock!"
JOKE_NAME = "Knott"
JOKE_PUNCHLINE = "Knott Rushil! I hope you enjoyed the joke L.A.M"

JOKE_DENYLIST = (
    "knock knock",
    "not rushil",
    "knott rushil",
    "knott who",
    "who's there",
    "whos there",
    "hope you liked the joke",
    "hope you enjoyed the joke",
    "hope u liked the joke",
    "hope u enjoyed the joke",
)

_ASK_FOR_JOKE_RE = re.compile(r"\bknock[\s-]*knock\b.*\bjoke\b|\bjoke\b.*\bknock[\s-]*knock\b", re.I | re.S)
_WHOS_THERE_RE = re.compile(r"^\W*who\s*(?:['’]?s|\s+is)\s+there\W*$", re.I)
_KNOTT_WHO_RE = re.compile(r"^\W*knott\s+who\b", re.I)

_SYSTEM_TEMPLATE = """\
You are a helpful assistant representing {name} to recruiters and hiring managers. Your PRIMARY role is to answer questions about {name}'s experience, skills, and background in a way that best represents them to prospective employers.

KNOCK-KNOCK JOKE INSTRUCTION (ONLY WHEN USER SPECIFICALLY ASKS FOR A KNOCK-KNOCK JOKE):
If and ONLY if the user specifically asks for a knock-knock joke, you MUST follow this EXACT sequence - this is the ONLY knock-knock joke you should ever tell:
1. When user asks for a knock-knock joke: respond with EXACTLY "{opener}" (nothing else)
2. When user responds with "whos there" (or variations like "who's there", "who is there"): respond with EXACTLY "{joke_name}" (nothing else)
3. When user responds with "knott who" (or variations like "knott who's there"): respond with EXACTLY "{punchline}" (nothing else)

IMPORTANT RESTRICTIONS:
- Do NOT tell any other types of jokes (no other knock-knock jokes, no puns, no other humor)
- Do NOT initiate jokes or humor unless specifically asked for a knock-knock joke
- If asked for any other type of joke or humor, politely decline and redirect to career-related questions

PRIMARY INSTRUCTIONS (FOR ALL NON-JOKE INTERACTIONS):
1. Base your answers ONLY on the information provided in the CV and supplemental materials below
2. If you're unsure about something or don't have the information, be honest and say so, but still try to provide relevant information from what you do know
3. Always represent {name} in the best possible light while being truthful and accurate
4. Be specific and detailed when discussing experience - mention specific projects, technologies, outcomes, and impact
5. If asked about something not explicitly mentioned, infer reasonable connections from related experiences
6. Be professional, enthusiastic, and focus on career-related topics

CV:
{cv}

SUPPLEMENTAL INFORMATION:
{supplemental}

Remember: Your role is to help recruiters understand {name}'s value and fit for their roles."""


def is_joke_turn(content: str | None) -> bool:
    text = (content or "").lower()
    if any(phrase in text for phrase in JOKE_DENYLIST):
        return True
    return "joke" in text and ("l.a.m" in text or "lam" in text)


def _as_turns(history: Iterable[Any] | None) -> list[ConversationTurn]:
    turns = []
    for raw in history or []:
        if isinstance(raw, ConversationTurn):
            turns.append(raw)
        elif isinstance(raw, dict):
            turns.append(ConversationTurn.from_dict(raw))
    return turns


def filter_history(history: Iterable[Any] | None, window: int = 10) -> list[ConversationTurn]:
    """Drop joke-script turns, then keep the most recent *window* turns."""
    turns = [t for t in _as_turns(history) if not is_joke_turn(t.content)]
    return turns[-window:] if window > 0 else []


def _last_assistant_reply(history: Iterable[Any] | None) -> str:
    for turn in reversed(_as_turns(history)):
        if turn.role == "assistant":
            return turn.content.strip()
    return ""


def scripted_joke_reply(message: str, history: Iterable[Any] | None = None) -> str | None:
    """The exact reply for a turn of the knock-knock script, or None.

    Steps two and three only fire when the previous assistant reply was the
    preceding step of the script.
    """
    text = (message or "").strip()
    previous = _last_assistant_reply(history)

    if _KNOTT_WHO_RE.search(text) and previous == JOKE_NAME:
        return JOKE_PUNCHLINE
    if _WHOS_THERE_RE.search(text) and previous == JOKE_OPENER:
        return JOKE_NAME
    if _ASK_FOR_JOKE_RE.search(text):
        return JOKE_OPENER
    return None


def build_system_prompt(cv: str, supplemental: str, settings: dict[str, Any]) -> str:
    return _SYSTEM_TEMPLATE.format(
        name=settings.get("candidate_name", "the candidate"),
        opener=JOKE_OPENER,
        joke_name=JOKE_NAME,
        punchline=JOKE_PUNCHLINE,
        cv=cv,
        supplemental=supplemental,
    )


def build_messages(message: str, history: Iterable[Any] | None, window: int = 10) -> list[dict[str, str]]:
    turns = [t.to_message() for t in filter_history(history, window)]
    turns.append({"role": "user", "content": message})
    return turns


def chat_with_candidate(
    message: str,
    history: Iterable[Any] | None = None,
    provider: LLMProvider | None = None,
    supplemental: SupplementalText | None = None,
    settings: dict[str, Any] | None = None,
    cv: str | None = None,
) -> str:
    """Reply text; the fixed apology on any provider failure."""
    history = list(history or [])
    scripted = scripted_joke_reply(message, history)
    if scripted is not None:
        log.info("Answered knock-knock script turn without a provider call")
        return scripted

    if provider is None:
        log.warning("No LLM provider configured, returning apology")
        return APOLOGY

    settings = settings or load_settings()
    supplemental = supplemental or get_supplemental()
    try:
        system = build_system_prompt(cv if cv is not None else load_cv(), supplemental.get(), settings)
        messages = build_messages(message, history, int(settings.get("chat_history_window", 10)))
        completion = provider.complete(messages, system=system, task="chat", temperature=0.7, max_tokens=1000)
        if not completion.text:
            raise ValueError("empty chat reply")
        return completion.text
    except Exception as exc:
        log.warning("Chat reply failed (%s), returning apology", exc)
        return APOLOGY

"""Streamlit UI for the 90-day plan generator and candidate chatbot."""
from __future__ import annotations

import sys
from pathlib import Path

import streamlit as st

ROOT = Path(__file__).resolve().parent
sys.path.insert(0, str(ROOT))

from planner.cards import job_fit_card, plan_item_card, research_card
from planner.config import CV_PATH, get_env, load_settings
from planner.errors import RequestValidationError
from planner.job_fit import sort_job_fit
from planner.log import get_logger
from planner.models import JobFitItem, ParsedPlan
from planner.plan_parser import parse_plan

log = get_logger(__name__)

_GLASS_CSS = """
<style>
[data-testid="stAppViewContainer"] {
    background: linear-gradient(135deg, #e8eaf6 0%, #f3e5f5 40%, #e0f2f1 100%);
}
[data-testid="stSidebar"] {
    background: rgba(255,255,255,0.55);
    backdrop-filter: blur(16px);
    border-right: 1px solid rgba(255,255,255,0.3);
}
.block-container { padding-top: 2rem; }
[data-testid="stMetric"], [data-testid="stForm"], [data-testid="stExpander"] {
    background: rgba(255,255,255,0.6);
    backdrop-filter: blur(12px);
    border-radius: 12px;
    border: 1px solid rgba(255,255,255,0.4);
    box-shadow: 0 4px 16px rgba(0,0,0,0.06);
}
[data-testid="stMetric"] { padding: 0.75rem 1rem; }
h1, h2, h3 { color: #1a1a2e; }
/* research + plan cards */
.plan-card {
    padding: 0.9rem 1.1rem; margin-bottom: 0.75rem;
    background: rgba(255,255,255,0.65);
    border: 1px solid rgba(74,144,217,0.25);
    border-radius: 12px;
}
.plan-card .field { font-size: 0.9rem; color: #333; margin-top: 0.35rem; }
.plan-card .label { font-weight: 600; color: #4a90d9; }
.fit-match { border-left: 3px solid #27ae60; padding-left: 0.6rem; margin-bottom: 0.6rem; }
.fit-gap { border-left: 3px solid #e67e22; padding-left: 0.6rem; margin-bottom: 0.6rem; }
</style>
"""

# ── Helpers ──────────────────────────────────────────────────────────────


@st.cache_resource
def _service():
    from planner.service import PlannerService

    return PlannerService.from_env()


def _status() -> dict[str, bool]:
    return {
        "openai": bool(get_env("OPENAI_API_KEY")),
        "anthropic": bool(get_env("ANTHROPIC_API_KEY")),
        "sheets": bool(get_env("GOOGLE_SERVICE_ACCOUNT_CREDENTIALS") and get_env("GOOGLE_SHEET_ID")),
        "cv": CV_PATH.exists(),
    }


def _check(label: str, ok: bool) -> str:
    icon = "✅" if ok else "⬜"
    return f"{icon} {label}"


def _render_research(parsed: ParsedPlan) -> None:
    if not parsed.research:
        return
    st.subheader("Research & Context")
    cols = st.columns(2)
    for idx, bullet in enumerate(parsed.research):
        cols[idx % 2].markdown(research_card(bullet), unsafe_allow_html=True)


def _render_sections(parsed: ParsedPlan) -> None:
    if not parsed.sections:
        return
    st.subheader("First 90 Days Plan")
    tabs = st.tabs([section.label for section in parsed.sections])
    for tab, section in zip(tabs, parsed.sections):
        with tab:
            if not section.items:
                st.caption("No structured items in this section.")
            for item in section.items:
                st.markdown(plan_item_card(item), unsafe_allow_html=True)


def _render_job_fit(raw_items: list[dict]) -> None:
    st.subheader("Job Fit")
    if not raw_items:
        st.info("Fit analysis unavailable for this request.")
        return
    items = sort_job_fit([JobFitItem.from_dict(r) for r in raw_items])
    matched = sum(1 for i in items if i.matches)
    st.progress(matched / len(items), text=f"{matched} of {len(items)} requirements matched")
    for item in items:
        st.markdown(job_fit_card(item), unsafe_allow_html=True)


# ── Page: Plan Generator ─────────────────────────────────────────────────


def page_plan() -> None:
    st.header("90-Day Plan Generator")
    st.caption("Paste a job description (or a link to one) and get a tailored first-90-days plan.")

    with st.form("analyze"):
        company = st.text_input("Company name", placeholder="e.g. Stripe")
        job_description = st.text_area("Job description or URL", height=220)
        submitted = st.form_submit_button("Generate Plan", type="primary", use_container_width=True)

    if submitted:
        with st.status("Generating plan…", expanded=True) as sw:
            try:
                sw.write("Running plan, job fit and context analysis in parallel…")
                st.session_state["analysis"] = _service().analyze_company(company, job_description)
                sw.update(label="Plan ready!", state="complete")
            except RequestValidationError as exc:
                sw.update(label="Check your input", state="error")
                st.error(exc.detail or exc.error)
            except Exception as exc:
                log.exception("Plan generation from UI failed")
                sw.update(label="Plan generation failed", state="error")
                st.error(str(exc))

    result = st.session_state.get("analysis")
    if not result:
        st.info("No plan yet. Fill in the form above to generate one.")
        return

    meta = result.get("metadata", {})
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Model", meta.get("model", "?"))
    c2.metric("Latency", f"{meta.get('latency', 0) / 1000:.1f}s")
    c3.metric("Tokens", meta.get("tokens", {}).get("total", 0))
    c4.metric("Cost", f"${meta.get('cost', 0):.4f}")

    context = result.get("context") or {}
    if context:
        with st.expander("Inferred context"):
            st.markdown(f"**ML maturity:** {context.get('mlMaturity')}  ·  "
                        f"**Infra complexity:** {context.get('infraComplexity')}")
            st.markdown(f"**Likely challenges:** {context.get('likelyChallenges')}")
            for signal in context.get("signals", []):
                st.markdown(f"- {signal}")

    parsed = parse_plan(result.get("plan", ""))
    if parsed.is_empty:
        st.markdown(result.get("plan", "") or "No plan generated.")
    else:
        _render_research(parsed)
        _render_sections(parsed)

    st.divider()
    _render_job_fit(result.get("jobFit", []))


# ── Page: Chat ───────────────────────────────────────────────────────────


def page_chat() -> None:
    name = load_settings().get("candidate_name", "the candidate")
    st.header(f"Ask about {name}")

    history: list[dict] = st.session_state.setdefault("chat_history", [])
    for turn in history:
        with st.chat_message(turn["role"]):
            st.markdown(turn["content"])

    message = st.chat_input("Ask about experience, projects, skills…")
    if not message:
        return

    with st.chat_message("user"):
        st.markdown(message)
    try:
        reply = _service().chat(message, list(history))["response"]
    except RequestValidationError as exc:
        reply = exc.error
    history.append({"role": "user", "content": message})
    history.append({"role": "assistant", "content": reply})
    with st.chat_message("assistant"):
        st.markdown(reply)


# ── Page: Logs ───────────────────────────────────────────────────────────


def page_logs() -> None:
    st.header("Interaction Logs")

    if not _status()["sheets"]:
        st.info("Google Sheets logging is not configured. Set GOOGLE_SERVICE_ACCOUNT_CREDENTIALS "
                "and GOOGLE_SHEET_ID in `.env`.")
        return

    sheets = _service().sheets_logger
    stats = sheets.get_log_stats()
    c1, c2 = st.columns(2)
    c1.metric("Plans generated", stats["planGenerator"]["total"])
    c2.metric("Chat messages", stats["chatbot"]["total"])

    limit = st.slider("Rows", 10, 500, 100)
    tab_plans, tab_chats = st.tabs(["Plan Generator", "Chatbot"])

    import pandas as pd

    with tab_plans:
        rows = sheets.get_plan_logs(limit)
        if not rows:
            st.info("No plan logs yet.")
        else:
            df = pd.DataFrame([{
                "timestamp": r["timestamp"],
                "company": r["userInput"]["companyName"],
                "is_url": r["userInput"]["isUrl"],
                "plan_length": r["modelOutput"]["planLength"],
                "fit_items": r["modelOutput"]["jobFitLength"],
                "model": r["metadata"].get("model", ""),
                "latency_ms": r["metadata"].get("latency", 0),
                "cost": r["metadata"].get("cost", 0),
                "error": r["error"] or "",
            } for r in rows])
            df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
            st.dataframe(df.sort_values("timestamp", ascending=False), use_container_width=True, hide_index=True)

    with tab_chats:
        rows = sheets.get_chat_logs(limit)
        if not rows:
            st.info("No chat logs yet.")
        else:
            df = pd.DataFrame([{
                "timestamp": r["timestamp"],
                "message": r["userInput"]["message"],
                "history_length": r["userInput"]["conversationHistoryLength"],
                "response": r["modelOutput"]["response"],
                "error": r["error"] or "",
            } for r in rows])
            df["timestamp"] = pd.to_datetime(df["timestamp"], errors="coerce")
            st.dataframe(df.sort_values("timestamp", ascending=False), use_container_width=True, hide_index=True)


# ── Layout ───────────────────────────────────────────────────────────────


def _inject_css() -> None:
    st.markdown(_GLASS_CSS, unsafe_allow_html=True)


def _sidebar_status() -> None:
    with st.sidebar:
        st.divider()
        s = _status()
        st.markdown("**Status**")
        st.markdown(_check("OpenAI API key", s["openai"]))
        st.markdown(_check("Anthropic API key", s["anthropic"]))
        st.markdown(_check("CV loaded", s["cv"]))
        st.markdown(_check("Google Sheets logging", s["sheets"]))

        st.divider()
        if st.button("🗑️ Clear Session", use_container_width=True):
            for key in ("analysis", "chat_history"):
                st.session_state.pop(key, None)
            st.rerun()


def _wrap_plan():
    _inject_css()
    _sidebar_status()
    page_plan()


def _wrap_chat():
    _inject_css()
    _sidebar_status()
    page_chat()


def _wrap_logs():
    _inject_css()
    _sidebar_status()
    page_logs()


pages = [
    st.Page(_wrap_plan, title="Plan Generator", icon="🗺️", url_path="plan", default=True),
    st.Page(_wrap_chat, title="Chat", icon="💬", url_path="chat"),
    st.Page(_wrap_logs, title="Logs", icon="📋", url_path="logs"),
]

nav = st.navigation(pages)
nav.run()

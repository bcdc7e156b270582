"""HTML card markup for the Streamlit plan page.

Every value placed in markup is model output, so all of it is escaped.
"""
from __future__ import annotations

from html import escape

from planner.models import JobFitItem, ParsedPlanItem, ResearchBullet


def research_card(bullet: ResearchBullet) -> str:
    title = f"<span class='label'>{escape(bullet.title)}</span><br>" if bullet.title else ""
    return f"<div class='plan-card'>{title}{escape(bullet.content)}</div>"


def plan_item_card(item: ParsedPlanItem) -> str:
    fields = "".join(
        f"<div class='field'><span class='label'>{label}:</span> {escape(value)}</div>"
        for label, value in (
            ("Objective", item.objective),
            ("Experience", item.experience),
            ("Action", item.action),
        )
        if value
    )
    title = escape(item.title) if item.title else f"Item {item.position}"
    return f"<div class='plan-card'><b>{item.position}. {title}</b>{fields}</div>"


def job_fit_card(item: JobFitItem) -> str:
    css = "fit-match" if item.matches else "fit-gap"
    icon = "✅" if item.matches else "⚠️"
    return f"<div class='{css}'>{icon} <b>{escape(item.requirement)}</b><br>{escape(item.evidence)}</div>"

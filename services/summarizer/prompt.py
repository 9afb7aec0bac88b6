"""Prompt builders for minutes summarization and performance analysis."""

from __future__ import annotations

from typing import Any, Dict

SUMMARY_SYSTEM = (
    "You are an expert at analyzing meeting minutes and extracting key information "
    "including performance metrics. Always respond with valid JSON."
)

PERFORMANCE_SYSTEM = (
    "You are an expert at analyzing meeting minutes for performance metrics, progress "
    "tracking, and risk assessment. Always respond with valid JSON."
)


def _meeting_header(minutes: Dict[str, Any]) -> str:
    agenda = ", ".join(minutes.get("agenda_items") or [])
    actions = ", ".join(minutes.get("actions_agreed") or [])
    return (
        f"Meeting Date: {minutes.get('date', '')}\n"
        f"Location: {minutes.get('location', '')}\n"
        f"Agenda Items: {agenda}\n"
        f"Actions Agreed: {actions}"
    )


def build_summary_prompt(minutes: Dict[str, Any]) -> str:
    return f"""You are a minute-taking assistant. Summarize these meeting minutes into:
- A 1-paragraph summary
- Bullet list of key decisions
- Bullet list of action items

{_meeting_header(minutes)}

Minutes text:
{minutes.get('ocr_text', '')}

Format your response as JSON with these fields:
{{
  "summaryText": "string (1 paragraph summary)",
  "decisions": ["string (each key decision)"],
  "actionItems": [{{"task": "string", "owner": "string", "dueDate": "YYYY-MM-DD", "status": "pending"}}],
  "sentiment": number between -1 and 1,
  "topics": ["string"]
}}
"""


def build_performance_prompt(minutes: Dict[str, Any]) -> str:
    text = minutes.get("ocr_text") or ""
    return f"""Analyze the following meeting minutes for performance insights:

{_meeting_header(minutes)}

Minutes text:
{text}

Extract performance-related information:
1. Progress Updates (quantified progress like "75% complete", "Phase 2 finished")
2. Milestones Achieved (completed deliverables, approvals, launches)
3. Risks & Blockers (challenges, delays, resource constraints)

Format as JSON:
{{
  "progressHighlights": ["string"],
  "milestones": ["string"],
  "risks": ["string"]
}}
"""

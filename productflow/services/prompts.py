"""
Prompt text and strict JSON schemas for every LLM stage.

Keys are snake_case so model output maps straight onto the schemas in
``productflow.schemas.llm_outputs`` and the ORM columns.
"""

import json
from typing import Any, Dict, List

PRIORITY_ENUM = ["critical", "high", "medium", "low"]
SENTIMENT_ENUM = ["positive", "negative", "neutral", "mixed"]


def _obj(properties: Dict[str, Any]) -> Dict[str, Any]:
    """Strict object: every property required, nothing extra allowed."""
    return {
        "type": "object",
        "properties": properties,
        "required": list(properties.keys()),
        "additionalProperties": False,
    }


def _array(items: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": "array", "items": items}


def _enum(values: List[str]) -> Dict[str, Any]:
    return {"type": "string", "enum": values}


STRING = {"type": "string"}
NUMBER = {"type": "number"}
INTEGER = {"type": "integer"}


# ============================================================================
# Analysis
# ============================================================================

ANALYSIS_SCHEMA_NAME = "analysis_result"

ANALYSIS_SCHEMA = _obj({
    "themes": _array(_obj({
        "name": STRING,
        "description": STRING,
        "frequency": NUMBER,
        "sentiment": _enum(SENTIMENT_ENUM),
    })),
    "pain_points": _array(_obj({
        "title": STRING,
        "description": STRING,
        "severity": _enum(PRIORITY_ENUM),
        "frequency": NUMBER,
    })),
    "feature_requests": _array(_obj({
        "title": STRING,
        "description": STRING,
        "request_count": NUMBER,
        "priority": _enum(PRIORITY_ENUM),
    })),
    "sentiment_summary": _obj({
        "overall": _enum(SENTIMENT_ENUM),
        "positive_percent": NUMBER,
        "negative_percent": NUMBER,
        "neutral_percent": NUMBER,
        "highlights": _array(STRING),
    }),
})


def analysis_messages(project_name: str, combined_content: str) -> List[Dict[str, str]]:
    system = (
        f'You are an expert product analyst. Analyze the following customer feedback data and product usage '
        f'data for the product "{project_name}". Extract key insights and return a structured JSON response.\n\n'
        "Return JSON with themes, pain_points, feature_requests and sentiment_summary.\n"
        '- "frequency" and "request_count" are numbers from 1-100 representing relative frequency\n'
        "- positive_percent, negative_percent and neutral_percent should add up to 100\n"
        "- Include 3-8 items per category\n"
        "- Be specific and actionable in descriptions\n"
        "- Base everything on the actual data provided"
    )
    user = f"Here is the customer feedback and usage data to analyze:\n\n{combined_content}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


# ============================================================================
# Feature proposals
# ============================================================================

PROPOSALS_SCHEMA_NAME = "feature_proposals"

PROPOSALS_SCHEMA = _obj({
    "proposals": _array(_obj({
        "title": STRING,
        "problem_statement": STRING,
        "proposed_solution": STRING,
        "ui_changes": STRING,
        "data_model_changes": STRING,
        "workflow_changes": STRING,
        "priority": _enum(PRIORITY_ENUM),
        "effort": _enum(["small", "medium", "large", "xlarge"]),
    })),
})


def proposal_messages(project_name: str, analysis: Any) -> List[Dict[str, str]]:
    system = (
        f'You are an expert product manager. Based on the analysis data for "{project_name}", generate 2-4 '
        "detailed feature proposals. Each proposal should address the most impactful pain points and feature "
        "requests.\n\n"
        "For each proposal give a title, a problem_statement (2-3 paragraphs explaining the problem based on "
        "customer feedback), a proposed_solution (2-3 paragraphs), the specific ui_changes, data_model_changes "
        "and workflow_changes needed, a priority and an effort estimate.\n\n"
        "Be specific and actionable. Reference actual customer feedback themes and pain points."
    )
    user = (
        "Analysis data:\n"
        f"Themes: {json.dumps(analysis.themes)}\n"
        f"Pain Points: {json.dumps(analysis.pain_points)}\n"
        f"Feature Requests: {json.dumps(analysis.feature_requests)}\n"
        f"Sentiment: {json.dumps(analysis.sentiment_summary)}"
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


# ============================================================================
# Tasks
# ============================================================================

TASKS_SCHEMA_NAME = "task_breakdown"

TASKS_SCHEMA = _obj({
    "tasks": _array(_obj({
        "title": STRING,
        "description": STRING,
        "category": _enum(["frontend", "backend", "database", "api", "testing", "devops", "design"]),
        "priority": _enum(PRIORITY_ENUM),
        "estimated_hours": NUMBER,
    })),
})


def task_messages(proposal: Any) -> List[Dict[str, str]]:
    system = (
        "You are a senior technical lead. Break down the following feature proposal into specific, actionable "
        "development tasks suitable for a coding agent or development team.\n\n"
        "Each task has a clear, concise title, a description with acceptance criteria, a category, a priority "
        "and estimated_hours.\n\n"
        "Generate 5-12 tasks. Order them by dependency (things that need to happen first should come first). "
        "Be specific about implementation details."
    )
    user = (
        f"Feature: {proposal.title}\n\n"
        f"Problem: {proposal.problem_statement}\n\n"
        f"Solution: {proposal.proposed_solution}\n\n"
        f"UI Changes: {proposal.ui_changes or ''}\n\n"
        f"Data Model Changes: {proposal.data_model_changes or ''}\n\n"
        f"Workflow Changes: {proposal.workflow_changes or ''}"
    )
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


# ============================================================================
# Company research
# ============================================================================

RESEARCH_GATHER_SCHEMA_NAME = "company_research_findings"

RESEARCH_GATHER_SCHEMA = _obj({
    "company_name": STRING,
    "company_description": STRING,
    "findings": _array(_obj({
        "source": STRING,
        "source_url": STRING,
        "source_type": _enum(["review", "forum", "social_media", "news", "blog", "support", "other"]),
        "title": STRING,
        "content": STRING,
        "sentiment": _enum(["positive", "negative", "neutral"]),
        "sentiment_score": INTEGER,
        "category": STRING,
        "tags": _array(STRING),
    })),
})


def research_gather_messages(company_url: str, domain: str) -> List[Dict[str, str]]:
    system = (
        "You are a market research analyst with broad knowledge of software products and what their users say "
        "about them on review sites (G2, Capterra, Trustpilot), forums (Reddit, Hacker News), social media, "
        "news, blogs and support communities.\n\n"
        "For the company at the given URL return its company_name, a one or two sentence company_description, "
        "and 15-25 findings. Each finding has:\n"
        '- source: the platform label, e.g. "G2" or "Reddit r/SaaS"\n'
        "- source_url: a realistic URL on that platform for this company\n"
        "- source_type: review, forum, social_media, news, blog, support or other\n"
        "- title and content (2-4 sentences paraphrasing what users say)\n"
        "- sentiment (positive, negative or neutral) and sentiment_score, an integer from -100 to 100\n"
        "- category: a short free-text area such as pricing, onboarding, performance or support\n"
        "- tags: a few short keywords\n\n"
        "Use your training knowledge. If you lack specific knowledge about this company, produce realistic "
        "findings typical for a product of its kind. Mix positive, negative and neutral findings in proportion "
        "to real sentiment."
    )
    user = f"Company URL: {company_url}\nDomain: {domain}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]


RESEARCH_SYNTHESIS_SCHEMA_NAME = "company_research_synthesis"

_INSIGHT = _obj({
    "title": STRING,
    "description": STRING,
    "evidence_count": INTEGER,
})

RESEARCH_SYNTHESIS_SCHEMA = _obj({
    "summary": STRING,
    "overall_sentiment": _enum(SENTIMENT_ENUM),
    "key_strengths": _array(_INSIGHT),
    "key_weaknesses": _array(_INSIGHT),
    "recommendations": _array(_obj({
        "title": STRING,
        "description": STRING,
        "priority": _enum(PRIORITY_ENUM),
        "category": STRING,
    })),
})


def research_synthesis_messages(company_name: str, findings: List[Dict[str, Any]]) -> List[Dict[str, str]]:
    system = (
        f'You are a senior product strategist. Synthesize the public sentiment findings about "{company_name}" '
        "into an executive briefing for a product team.\n\n"
        "Return a 3-5 paragraph executive summary, the overall_sentiment, 3-6 key_strengths and 3-6 "
        "key_weaknesses (each with title, description and evidence_count, the number of findings that support "
        "it), and 3-6 recommendations (title, description, priority, category) the product team should act on."
    )
    user = f"Findings ({len(findings)}):\n{json.dumps(findings, ensure_ascii=False)}"
    return [
        {"role": "system", "content": system},
        {"role": "user", "content": user},
    ]

"""
Pricing plans and their usage limits.

A limit of -1 means unlimited. Plans are static; the user row only stores
the plan id (kept current by the billing side, which lives outside this service).
"""

from dataclasses import dataclass, field
from typing import List, Optional

UNLIMITED = -1


@dataclass(frozen=True)
class PlanLimits:
    max_projects: int
    max_analyses_per_month: int
    max_research_per_month: int
    max_files_per_project: int
    priority_processing: bool = False
    export_to_jira: bool = False
    team_collaboration: bool = False


@dataclass(frozen=True)
class PricingPlan:
    id: str
    name: str
    description: str
    monthly_price: int  # cents
    yearly_price: int  # cents, per-month equivalent
    limits: PlanLimits
    features: List[str] = field(default_factory=list)
    highlighted: bool = False


PLANS: List[PricingPlan] = [
    PricingPlan(
        id="free",
        name="Free",
        description="Perfect for exploring product discovery",
        monthly_price=0,
        yearly_price=0,
        limits=PlanLimits(
            max_projects=2,
            max_analyses_per_month=3,
            max_research_per_month=1,
            max_files_per_project=10,
        ),
        features=[
            "2 projects",
            "3 AI analyses per month",
            "1 company research per month",
            "10 files per project",
            "Feature proposals",
            "Task breakdowns",
        ],
    ),
    PricingPlan(
        id="pro",
        name="Pro",
        description="For product managers and founders",
        monthly_price=2900,
        yearly_price=2400,
        limits=PlanLimits(
            max_projects=UNLIMITED,
            max_analyses_per_month=50,
            max_research_per_month=20,
            max_files_per_project=UNLIMITED,
            priority_processing=True,
        ),
        features=[
            "Unlimited projects",
            "50 AI analyses per month",
            "20 company researches per month",
            "Unlimited files per project",
            "Priority processing",
        ],
        highlighted=True,
    ),
    PricingPlan(
        id="team",
        name="Team",
        description="For product teams shipping fast",
        monthly_price=7900,
        yearly_price=6600,
        limits=PlanLimits(
            max_projects=UNLIMITED,
            max_analyses_per_month=UNLIMITED,
            max_research_per_month=UNLIMITED,
            max_files_per_project=UNLIMITED,
            priority_processing=True,
            export_to_jira=True,
            team_collaboration=True,
        ),
        features=[
            "Everything in Pro",
            "Unlimited analyses",
            "Unlimited company research",
            "Team collaboration",
        ],
    ),
]

_PLANS_BY_ID = {plan.id: plan for plan in PLANS}


def get_plan_by_id(plan_id: Optional[str]) -> Optional[PricingPlan]:
    return _PLANS_BY_ID.get(plan_id or "")


def get_free_plan() -> PricingPlan:
    return PLANS[0]


def resolve_plan(plan_id: Optional[str]) -> PricingPlan:
    """Plan for a user; unknown or missing ids fall back to the free tier."""
    return get_plan_by_id(plan_id) or get_free_plan()


def is_within_limit(limit: int, used: int) -> bool:
    """True when one more unit fits under ``limit``."""
    if limit == UNLIMITED:
        return True
    return used < limit

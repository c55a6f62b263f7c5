"""
Billing schemas: plans, the caller's current plan, and usage counters.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel


class PlanLimitsRead(BaseModel):
    max_projects: int
    max_analyses_per_month: int
    max_research_per_month: int
    max_files_per_project: int
    priority_processing: bool
    export_to_jira: bool
    team_collaboration: bool


class PlanRead(BaseModel):
    id: str
    name: str
    description: str
    monthly_price: int
    yearly_price: int
    limits: PlanLimitsRead
    features: List[str]
    highlighted: bool


class CurrentPlanRead(BaseModel):
    plan_id: str
    plan_name: str
    limits: PlanLimitsRead
    stripe_customer_id: Optional[str] = None
    stripe_subscription_id: Optional[str] = None
    plan_period_end: Optional[datetime] = None


class UsageRead(BaseModel):
    projects: int
    analyses_this_month: int
    research_this_month: int
    period_start: datetime

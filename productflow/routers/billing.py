"""
Billing router - read-only plan and usage information.

Checkout and subscription webhooks belong to the billing side; this service
only reads the stored plan id.
"""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from productflow.core.dependencies import get_current_user, get_db
from productflow.core.plans import PLANS, resolve_plan
from productflow.models.user import User
from productflow.schemas.billing import CurrentPlanRead, PlanLimitsRead, PlanRead, UsageRead
from productflow.services.usage_service import UsageService

router = APIRouter(prefix="/billing", tags=["billing"])


@router.get("/plans", response_model=List[PlanRead])
async def list_plans():
    return [PlanRead(**asdict(plan)) for plan in PLANS]


@router.get("/current-plan", response_model=CurrentPlanRead)
async def get_current_plan(user: User = Depends(get_current_user)):
    plan = resolve_plan(user.plan_id)
    return CurrentPlanRead(
        plan_id=plan.id,
        plan_name=plan.name,
        limits=PlanLimitsRead(**asdict(plan.limits)),
        stripe_customer_id=user.stripe_customer_id,
        stripe_subscription_id=user.stripe_subscription_id,
        plan_period_end=user.plan_period_end,
    )


@router.get("/usage", response_model=UsageRead)
async def get_usage(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    service = UsageService(db)
    return await service.get_usage(user)

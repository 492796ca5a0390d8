"""Subscription state, plan catalog and feature usage."""

from fastapi import APIRouter
from pydantic import BaseModel

from vpdash.api.deps import CurrentTenant, Session, subscription_info
from vpdash.models.plan import SubscriptionPlanRead
from vpdash.models.tenant import SubscriptionStatusRead
from vpdash.services.feature_limits import get_usage_with_limits
from vpdash.services.plan_registry import list_active_plans

router = APIRouter(prefix="/subscription", tags=["subscription"])


class FeatureUsage(BaseModel):
    current: int
    limit: int
    remaining: int
    unlimited: bool


class UsageResponse(BaseModel):
    plan_type: str
    usage: dict[str, FeatureUsage]


@router.get("/usage", response_model=UsageResponse)
async def feature_usage(tenant: CurrentTenant, session: Session) -> UsageResponse:
    usage = await get_usage_with_limits(session, tenant.id, tenant.plan_type)
    return UsageResponse(
        plan_type=tenant.plan_type,
        usage={feature: FeatureUsage(**values) for feature, values in usage.items()},
    )


@router.get("/plans", response_model=list[SubscriptionPlanRead])
async def list_plans(session: Session) -> list[SubscriptionPlanRead]:
    return [SubscriptionPlanRead.model_validate(p) for p in await list_active_plans(session)]


@router.get("/status", response_model=SubscriptionStatusRead)
async def subscription_status(tenant: CurrentTenant) -> SubscriptionStatusRead:
    return SubscriptionStatusRead(**subscription_info(tenant))

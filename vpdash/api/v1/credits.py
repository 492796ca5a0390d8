"""AI credit balance and usage for the current billing period."""

from fastapi import APIRouter
from pydantic import BaseModel

from vpdash.api.deps import CurrentTenant, Session
from vpdash.core.plans import AIActionType
from vpdash.models.credit import CreditUsageRead
from vpdash.services.credits import check_credits, get_credit_usage

router = APIRouter(prefix="/credits", tags=["credits"])


class CreditCheckResponse(BaseModel):
    action_type: AIActionType
    allowed: bool
    credits_required: int
    credits_remaining: int
    credits_used: int
    total_allowance: int
    unlimited: bool
    action_label: str


@router.get("/usage", response_model=CreditUsageRead)
async def credit_usage(tenant: CurrentTenant, session: Session) -> CreditUsageRead:
    return await get_credit_usage(session, tenant.id, tenant.plan_type)


@router.get("/check/{action_type}", response_model=CreditCheckResponse)
async def credit_check(
    action_type: AIActionType, tenant: CurrentTenant, session: Session
) -> CreditCheckResponse:
    """Whether the tenant could run ``action_type`` right now. Nothing is charged."""
    result = await check_credits(session, tenant.id, tenant.plan_type, action_type)
    return CreditCheckResponse(
        action_type=action_type,
        allowed=result.allowed,
        credits_required=result.credits_required,
        credits_remaining=result.credits_remaining,
        credits_used=result.credits_used,
        total_allowance=result.total_allowance,
        unlimited=result.unlimited,
        action_label=result.action_label,
    )

"""AI credit metering.

Each tenant gets one ledger row per billing period ("YYYY-MM", UTC),
created on first use and reconciled when the tenant's plan changes. A debit
is a single conditional UPDATE that only matches while the balance still
covers the cost, so concurrent debits can never push the balance below
zero. Every successful debit appends a ``CreditTransaction``.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone

from sqlalchemy import case, func, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vpdash.core.errors import PlanConfigurationError
from vpdash.core.plans import (
    AI_ACTION_CREDITS,
    AI_ACTION_LABELS,
    PLAN_CREDIT_ALLOWANCES,
    UNLIMITED,
    PlanType,
    is_unlimited,
)
from vpdash.models.base import utcnow
from vpdash.models.credit import (
    ActionBreakdown,
    CreditLedger,
    CreditMetadata,
    CreditTransaction,
    CreditTransactionRead,
    CreditUsageRead,
)
from vpdash.services.tenant_storage import TenantStorage

logger = logging.getLogger(__name__)

# Reported as the remaining balance after a debit on an unlimited plan.
UNLIMITED_BALANCE = 999999

RECENT_TRANSACTIONS_WINDOW = 50
RECENT_TRANSACTIONS_SHOWN = 20


@dataclass(frozen=True)
class CreditCheckResult:
    allowed: bool
    credits_required: int
    credits_remaining: int
    credits_used: int
    total_allowance: int
    unlimited: bool
    action_label: str


@dataclass(frozen=True)
class DeductResult:
    success: bool
    credits_remaining: int
    error: str | None = None


def current_billing_period(now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m")


def get_plan_allowance(plan_type: str | None) -> int:
    try:
        return PLAN_CREDIT_ALLOWANCES[plan_type or PlanType.FREE]
    except KeyError:
        raise PlanConfigurationError(plan_type, "no credit allowance") from None


def get_action_cost(action_type: str) -> int:
    try:
        return AI_ACTION_CREDITS[action_type]
    except KeyError:
        raise ValueError(f"Unknown AI action type: {action_type!r}") from None


def insufficient_credits_message(required: int, remaining: int) -> str:
    return (
        f"Insufficient credits. This action requires {required} credits, "
        f"but you have {remaining} remaining."
    )


async def _require_tenant(session: AsyncSession, tenant_id: int) -> None:
    """Raise ``TenantConfigurationError`` unless ``tenant_id`` names a real tenant."""
    await TenantStorage(session, tenant_id).ensure_tenant()


async def _select_ledger(
    session: AsyncSession, tenant_id: int, period: str
) -> CreditLedger | None:
    stmt = (
        select(CreditLedger)
        .where(
            CreditLedger.tenant_id == tenant_id,
            CreditLedger.billing_period == period,
        )
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def _reconcile(session: AsyncSession, ledger: CreditLedger, allowance: int) -> CreditLedger:
    """Move an existing ledger to a new allowance in one statement.

    The signed difference between the allowances is applied to the current
    balance, clamped at zero. A ledger that was unlimited restarts from the
    new allowance minus what has already been used. Switching to an
    unlimited plan leaves the ledger alone since unlimited debits never
    touch it.
    """
    rebalanced = case(
        (CreditLedger.total_allowance == UNLIMITED, allowance - CreditLedger.credits_used),
        else_=CreditLedger.credits_remaining + (allowance - CreditLedger.total_allowance),
    )
    stmt = (
        update(CreditLedger)
        .where(
            CreditLedger.id == ledger.id,
            CreditLedger.total_allowance != allowance,
        )
        .values(
            total_allowance=allowance,
            credits_remaining=case((rebalanced < 0, 0), else_=rebalanced),
            updated_at=utcnow(),
        )
        .execution_options(synchronize_session=False)
    )
    tenant_id, period, previous = ledger.tenant_id, ledger.billing_period, ledger.total_allowance
    await session.execute(stmt)
    await session.commit()
    logger.info(
        "Reconciled credit ledger for tenant %s period %s: allowance %d -> %d",
        tenant_id, period, previous, allowance,
    )
    return await _select_ledger(session, tenant_id, period)


async def get_or_create_ledger(
    session: AsyncSession,
    tenant_id: int,
    plan_type: str | None,
    period: str | None = None,
) -> CreditLedger:
    await _require_tenant(session, tenant_id)
    period = period or current_billing_period()
    allowance = get_plan_allowance(plan_type)

    ledger = await _select_ledger(session, tenant_id, period)
    if ledger is None:
        ledger = CreditLedger(
            tenant_id=tenant_id,
            billing_period=period,
            total_allowance=allowance,
            credits_used=0,
            credits_remaining=allowance,
        )
        session.add(ledger)
        try:
            await session.commit()
        except IntegrityError:
            # Lost the insert race; the winner's row is the ledger.
            await session.rollback()
            ledger = await _select_ledger(session, tenant_id, period)
            if ledger is None:
                raise
        else:
            await session.refresh(ledger)
            logger.info(
                "Created credit ledger for tenant %s period %s with %d credits",
                tenant_id, period, allowance,
            )
            return ledger

    if ledger.total_allowance != allowance and not is_unlimited(allowance):
        ledger = await _reconcile(session, ledger, allowance)
    return ledger


async def check_credits(
    session: AsyncSession,
    tenant_id: int,
    plan_type: str | None,
    action_type: str,
) -> CreditCheckResult:
    await _require_tenant(session, tenant_id)
    required = get_action_cost(action_type)
    label = AI_ACTION_LABELS[action_type]
    allowance = get_plan_allowance(plan_type)

    if is_unlimited(allowance):
        return CreditCheckResult(
            allowed=True,
            credits_required=required,
            credits_remaining=UNLIMITED,
            credits_used=0,
            total_allowance=UNLIMITED,
            unlimited=True,
            action_label=label,
        )

    ledger = await get_or_create_ledger(session, tenant_id, plan_type)
    return CreditCheckResult(
        allowed=ledger.credits_remaining >= required,
        credits_required=required,
        credits_remaining=ledger.credits_remaining,
        credits_used=ledger.credits_used,
        total_allowance=ledger.total_allowance,
        unlimited=False,
        action_label=label,
    )


async def deduct_credits(
    session: AsyncSession,
    tenant_id: int,
    plan_type: str | None,
    action_type: str,
    metadata: CreditMetadata | dict | None = None,
) -> DeductResult:
    """Charge a tenant for an AI action that has already completed."""
    await _require_tenant(session, tenant_id)
    cost = get_action_cost(action_type)
    allowance = get_plan_allowance(plan_type)
    period = current_billing_period()

    if isinstance(metadata, CreditMetadata):
        metadata = metadata.model_dump(exclude_none=True)
    transaction = CreditTransaction(
        tenant_id=tenant_id,
        action_type=str(action_type),
        credits_used=cost,
        billing_period=period,
        details=metadata or None,
    )

    if is_unlimited(allowance):
        session.add(transaction)
        await session.commit()
        logger.info(
            "Recorded %s (%d credits) for tenant %s on unlimited plan",
            action_type, cost, tenant_id,
        )
        return DeductResult(success=True, credits_remaining=UNLIMITED_BALANCE)

    ledger = await get_or_create_ledger(session, tenant_id, plan_type, period)
    balance = ledger.credits_remaining

    stmt = (
        update(CreditLedger)
        .where(
            CreditLedger.id == ledger.id,
            CreditLedger.credits_remaining >= cost,
        )
        .values(
            credits_remaining=CreditLedger.credits_remaining - cost,
            credits_used=CreditLedger.credits_used + cost,
            updated_at=utcnow(),
        )
        .returning(CreditLedger.credits_remaining)
        .execution_options(synchronize_session=False)
    )
    result = await session.execute(stmt)
    remaining = result.scalar_one_or_none()

    if remaining is None:
        # Nothing was written; end the transaction without expiring loaded rows.
        await session.commit()
        if balance >= cost:
            logger.info(
                "Concurrent debit exhausted credits for tenant %s before %s could be charged",
                tenant_id, action_type,
            )
        return DeductResult(
            success=False,
            credits_remaining=balance,
            error=insufficient_credits_message(cost, balance),
        )

    session.add(transaction)
    await session.commit()
    logger.info(
        "Deducted %d credits for %s from tenant %s, %d remaining",
        cost, action_type, tenant_id, remaining,
    )
    return DeductResult(success=True, credits_remaining=remaining)


async def get_credit_usage(
    session: AsyncSession, tenant_id: int, plan_type: str | None
) -> CreditUsageRead:
    await _require_tenant(session, tenant_id)
    allowance = get_plan_allowance(plan_type)
    unlimited = is_unlimited(allowance)
    period = current_billing_period()
    in_period = (
        CreditTransaction.tenant_id == tenant_id,
        CreditTransaction.billing_period == period,
    )

    grouped = await session.execute(
        select(
            CreditTransaction.action_type,
            func.count(CreditTransaction.id),
            func.coalesce(func.sum(CreditTransaction.credits_used), 0),
        )
        .where(*in_period)
        .group_by(CreditTransaction.action_type)
    )
    breakdown = {
        action: ActionBreakdown(
            count=count,
            credits_used=int(used),
            label=AI_ACTION_LABELS.get(action, action),
        )
        for action, count, used in grouped.all()
    }

    recent = await session.execute(
        select(CreditTransaction)
        .where(*in_period)
        .order_by(CreditTransaction.created_at.desc(), CreditTransaction.id.desc())
        .limit(RECENT_TRANSACTIONS_WINDOW)
    )
    transactions = [
        CreditTransactionRead.model_validate(tx)
        for tx in recent.scalars().all()[:RECENT_TRANSACTIONS_SHOWN]
    ]

    if unlimited:
        total = UNLIMITED
        used = sum(item.credits_used for item in breakdown.values())
        remaining = UNLIMITED
    else:
        ledger = await get_or_create_ledger(session, tenant_id, plan_type, period)
        total = ledger.total_allowance
        used = ledger.credits_used
        remaining = ledger.credits_remaining

    percent_used = 0 if unlimited or total <= 0 else int(used * 100 / total + 0.5)

    return CreditUsageRead(
        billing_period=period,
        total_allowance=total,
        credits_used=used,
        credits_remaining=remaining,
        unlimited=unlimited,
        percent_used=percent_used,
        action_breakdown=breakdown,
        recent_transactions=transactions,
        action_costs={str(action): cost for action, cost in AI_ACTION_CREDITS.items()},
    )

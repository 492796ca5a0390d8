"""Publish the built-in plan catalog to the ``subscription_plans`` table."""

import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vpdash.core import cache
from vpdash.core.plans import CURRENT_PLANS
from vpdash.models.base import utcnow
from vpdash.models.plan import SubscriptionPlan
from vpdash.services.feature_limits import PLAN_CACHE_PREFIX

logger = logging.getLogger(__name__)


async def sync_plans(session: AsyncSession) -> int:
    """Insert or refresh every catalog plan. Returns the number of plans written.

    Safe to run on every startup: rows are matched by slug and updated in
    place.
    """
    result = await session.execute(select(SubscriptionPlan))
    existing = {plan.slug: plan for plan in result.scalars().all()}

    for entry in CURRENT_PLANS:
        slug = str(entry["slug"])
        values = {
            "name": entry["name"],
            "monthly_price": float(entry["monthly_price"]),
            "yearly_price": float(entry["yearly_price"]),
            "features": list(entry["features"]),
            "limits": dict(entry["limits"]),
            "display_order": entry["display_order"],
            "is_active": True,
        }
        plan = existing.get(slug)
        if plan is None:
            session.add(SubscriptionPlan(slug=slug, **values))
            continue
        for field, value in values.items():
            setattr(plan, field, value)
        plan.updated_at = utcnow()
        session.add(plan)

    await session.commit()
    cache.invalidate_prefix(PLAN_CACHE_PREFIX)
    logger.info("Synced %d subscription plans", len(CURRENT_PLANS))
    return len(CURRENT_PLANS)


async def list_active_plans(session: AsyncSession) -> list[SubscriptionPlan]:
    stmt = (
        select(SubscriptionPlan)
        .where(SubscriptionPlan.is_active.is_(True))  # type: ignore[union-attr]
        .order_by(SubscriptionPlan.display_order.asc())  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())

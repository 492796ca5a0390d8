"""Plan-based feature limits — how many playbooks, ICPs, enrolled accounts,
accounts and users a tenant may hold on its current plan."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass
from types import MappingProxyType

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vpdash.core import cache
from vpdash.core.config import get_settings
from vpdash.core.errors import PlanConfigurationError
from vpdash.core.plans import DEFAULT_FREE_LIMITS, UNLIMITED, Feature, PlanType
from vpdash.models.plan import SubscriptionPlan
from vpdash.services.tenant_storage import TenantStorage

logger = logging.getLogger(__name__)

PLAN_CACHE_PREFIX = "plans"


@dataclass(frozen=True)
class LimitCheckResult:
    allowed: bool
    limit: int
    current: int
    feature: str
    plan_type: str


def _counters(store: TenantStorage) -> Mapping[Feature, Callable[[], Awaitable[int]]]:
    return {
        Feature.PLAYBOOKS: store.count_playbooks,
        Feature.ICPS: store.count_segment_profiles,
        Feature.ENROLLED_ACCOUNTS: store.count_program_accounts,
        Feature.ACCOUNTS: store.count_accounts,
        Feature.USERS: store.count_users,
    }


async def get_plan_limits(session: AsyncSession, plan_type: str | None) -> Mapping[str, int]:
    """Resolve the feature caps for a plan.

    Free (or no plan) uses the built-in defaults. Paid plans are read from
    the ``subscription_plans`` registry; a feature the plan does not list is
    unlimited. Raises ``PlanConfigurationError`` for a slug the registry
    does not know.
    """
    if not plan_type or plan_type == PlanType.FREE:
        return DEFAULT_FREE_LIMITS

    key = (PLAN_CACHE_PREFIX, str(plan_type))
    cached = cache.get(key, ttl=get_settings().plan_cache_ttl_seconds)
    if cached is not None:
        return cached

    result = await session.execute(
        select(SubscriptionPlan).where(SubscriptionPlan.slug == str(plan_type))
    )
    plan = result.scalar_one_or_none()
    if plan is None:
        raise PlanConfigurationError(plan_type)

    stored = plan.limits or {}
    limits = MappingProxyType(
        {feature.value: int(stored.get(feature.value, UNLIMITED)) for feature in Feature}
    )
    cache.put(key, limits)
    return limits


async def get_feature_usage(session: AsyncSession, tenant_id: int) -> dict[str, int]:
    store = TenantStorage(session, tenant_id)
    return {feature.value: await count() for feature, count in _counters(store).items()}


async def check_feature_limit(
    session: AsyncSession,
    tenant_id: int,
    plan_type: str | None,
    feature: str,
) -> LimitCheckResult:
    feature = Feature(feature)
    plan = plan_type or PlanType.FREE
    limits = await get_plan_limits(session, plan)
    limit = limits.get(feature.value, UNLIMITED)

    store = TenantStorage(session, tenant_id)
    current = await _counters(store)[feature]()

    allowed = limit == UNLIMITED or current < limit
    if not allowed:
        logger.info(
            "Feature limit reached for tenant %s: %s %d/%d on plan %s",
            tenant_id, feature.value, current, limit, plan,
        )
    return LimitCheckResult(
        allowed=allowed,
        limit=limit,
        current=current,
        feature=feature.value,
        plan_type=str(plan),
    )


async def get_usage_with_limits(
    session: AsyncSession, tenant_id: int, plan_type: str | None
) -> dict[str, dict]:
    limits = await get_plan_limits(session, plan_type)
    usage = await get_feature_usage(session, tenant_id)

    summary: dict[str, dict] = {}
    for feature, current in usage.items():
        limit = limits.get(feature, UNLIMITED)
        unlimited = limit == UNLIMITED
        summary[feature] = {
            "current": current,
            "limit": limit,
            "remaining": UNLIMITED if unlimited else max(0, limit - current),
            "unlimited": unlimited,
        }
    return summary

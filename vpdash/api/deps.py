"""FastAPI dependencies: authentication, tenant resolution and plan guards."""

import logging
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vpdash.core.database import get_session
from vpdash.core.plans import (
    ACTIVE_SUBSCRIPTION_STATUSES,
    PlanType,
    SubscriptionStatus,
    plan_rank,
)
from vpdash.core.security import decode_jwt, hash_api_token
from vpdash.models.api_token import ApiToken
from vpdash.models.base import utcnow
from vpdash.models.tenant import Tenant
from vpdash.models.user import User, has_permission
from vpdash.services.credits import CreditCheckResult, check_credits
from vpdash.services.feature_limits import LimitCheckResult, check_feature_limit
from vpdash.services.tenant_storage import TenantStorage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer()


class AuthContext:
    """Resolved identity carried through a request."""

    __slots__ = ("tenant_id", "user_id", "token_id", "user_role")

    def __init__(
        self,
        tenant_id: int,
        user_id: int,
        user_role: str,
        token_id: int | None = None,
    ) -> None:
        self.tenant_id = tenant_id
        self.user_id = user_id
        self.user_role = user_role
        self.token_id = token_id


async def _resolve_api_token(
    raw_token: str, session: AsyncSession
) -> AuthContext:
    """Look up an API token by its SHA-256 hash."""
    token_hash = hash_api_token(raw_token)
    stmt = select(ApiToken).where(
        ApiToken.token_hash == token_hash,
        ApiToken.is_active.is_(True),  # type: ignore[union-attr]
    )
    result = await session.execute(stmt)
    api_token = result.scalar_one_or_none()

    if api_token is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or revoked API token",
        )

    if api_token.expires_at and api_token.expires_at < utcnow():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="API token has expired",
        )

    user = await session.get(User, api_token.user_id)
    if user is None or not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token owner account is disabled",
        )

    api_token.last_used_at = utcnow()
    session.add(api_token)
    await session.commit()

    return AuthContext(
        tenant_id=api_token.tenant_id,
        user_id=api_token.user_id,
        user_role=user.role,
        token_id=api_token.id,
    )


async def _resolve_jwt(token: str) -> AuthContext:
    """Decode a JWT and extract tenant_id + user_id."""
    try:
        payload = decode_jwt(token)
    except JWTError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired JWT",
        ) from exc

    try:
        return AuthContext(
            tenant_id=int(payload["tid"]),
            user_id=int(payload["sub"]),
            user_role=payload.get("role", "viewer"),
        )
    except (KeyError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Malformed JWT payload",
        ) from exc


async def get_auth_context(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> AuthContext:
    """Resolve a bearer token to an AuthContext.

    Supports two token types:
    - API tokens (opaque, ~43 chars from token_urlsafe(32))
    - JWTs (contain dots: header.payload.signature)
    """
    raw = credentials.credentials

    if "." in raw:
        return await _resolve_jwt(raw)
    return await _resolve_api_token(raw, session)


# Typed shorthand for use in route signatures
Auth = Annotated[AuthContext, Depends(get_auth_context)]
Session = Annotated[AsyncSession, Depends(get_session)]


async def get_current_tenant(auth: Auth, session: Session) -> Tenant:
    tenant = await session.get(Tenant, auth.tenant_id)
    if tenant is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Tenant not found",
        )
    return tenant


def get_tenant_store(auth: Auth, session: Session) -> TenantStorage:
    return TenantStorage(session, auth.tenant_id)


CurrentTenant = Annotated[Tenant, Depends(get_current_tenant)]
Store = Annotated[TenantStorage, Depends(get_tenant_store)]


# ── Permissions ──────────────────────────────────────────────

def require_permission(permission: str):
    async def dependency(auth: Auth) -> AuthContext:
        if not has_permission(auth.user_role, permission):
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Missing permission: {permission}",
            )
        return auth

    return dependency


# ── Plan guards ──────────────────────────────────────────────
# The rejection builders are plain functions so the response bodies can be
# checked without a request.

def feature_limit_exceeded(result: LimitCheckResult) -> HTTPException:
    label = result.feature.replace("_", " ")
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": (
                f"You have reached the limit of {result.limit} {label} for your "
                f"{result.plan_type} plan. Please upgrade to continue."
            ),
            "error": "FEATURE_LIMIT_EXCEEDED",
            "feature": result.feature,
            "limit": result.limit,
            "current": result.current,
            "plan_type": result.plan_type,
            "upgrade_required": True,
        },
    )


def credit_limit_exceeded(action_type: str, result: CreditCheckResult) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": (
                "You've used all your AI credits for this billing period. "
                f'"{result.action_label}" requires {result.credits_required} credits, '
                f"but you have {result.credits_remaining} remaining. "
                "Please upgrade your plan for more credits."
            ),
            "error": "CREDIT_LIMIT_EXCEEDED",
            "action_type": str(action_type),
            "credits_required": result.credits_required,
            "credits_remaining": result.credits_remaining,
            "total_allowance": result.total_allowance,
            "upgrade_required": True,
        },
    )


def check_active_subscription(tenant: Tenant) -> None:
    plan = tenant.plan_type or PlanType.FREE
    subscription_status = tenant.subscription_status or SubscriptionStatus.NONE
    if plan == PlanType.FREE or subscription_status in ACTIVE_SUBSCRIPTION_STATUSES:
        return
    logger.info(
        "Tenant %s blocked: %s plan with subscription status %s",
        tenant.id, plan, subscription_status,
    )
    raise HTTPException(
        status_code=status.HTTP_402_PAYMENT_REQUIRED,
        detail={
            "message": "Active subscription required",
            "subscription_status": str(subscription_status),
            "plan_type": str(plan),
        },
    )


def check_plan(tenant: Tenant, min_plan: str) -> None:
    current = tenant.plan_type or PlanType.FREE
    if plan_rank(current) >= plan_rank(min_plan):
        return
    raise HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": f"{min_plan} plan or higher required",
            "current_plan": str(current),
            "required_plan": str(min_plan),
        },
    )


def subscription_info(tenant: Tenant) -> dict:
    return {
        "is_active": (tenant.subscription_status or "") in ACTIVE_SUBSCRIPTION_STATUSES,
        "status": tenant.subscription_status or SubscriptionStatus.NONE,
        "plan_type": tenant.plan_type or PlanType.FREE,
        "billing_period_end": tenant.billing_period_end,
    }


def require_feature_limit(feature: str):
    """Reject the request with 403 when the tenant is at its cap for ``feature``."""

    async def dependency(tenant: CurrentTenant, session: Session) -> LimitCheckResult:
        result = await check_feature_limit(session, tenant.id, tenant.plan_type, feature)
        if not result.allowed:
            raise feature_limit_exceeded(result)
        return result

    return dependency


def require_credits(action_type: str):
    """Reject the request with 403 when the balance cannot cover ``action_type``.

    Only checks; the handler deducts once the action has succeeded.
    """

    async def dependency(tenant: CurrentTenant, session: Session) -> CreditCheckResult:
        result = await check_credits(session, tenant.id, tenant.plan_type, action_type)
        if not result.allowed:
            logger.info(
                "Tenant %s lacks credits for %s: %d required, %d remaining",
                tenant.id, action_type, result.credits_required, result.credits_remaining,
            )
            raise credit_limit_exceeded(action_type, result)
        return result

    return dependency


async def require_active_subscription(tenant: CurrentTenant) -> Tenant:
    check_active_subscription(tenant)
    return tenant


def require_plan(min_plan: str):
    """Reject tenants below ``min_plan``.

    An unknown ``min_plan`` raises here, when the guard is built.
    """
    plan_rank(min_plan)

    async def dependency(tenant: CurrentTenant) -> Tenant:
        check_plan(tenant, min_plan)
        return tenant

    return dependency

"""Authentication endpoints — login + current user."""

import logging

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr
from sqlmodel import select

from vpdash.api.deps import Auth, CurrentTenant, Session, subscription_info
from vpdash.core.security import create_jwt, verify_password
from vpdash.models.tenant import SubscriptionStatusRead, Tenant, TenantRead
from vpdash.models.user import ROLE_PERMISSIONS, User, UserRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ── Schemas ──────────────────────────────────────────────────

class LoginRequest(BaseModel):
    email: EmailStr
    password: str
    # Needed only when the same email is registered with several tenants
    tenant_slug: str | None = None


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserRead
    tenant: TenantRead


class MeResponse(BaseModel):
    user: UserRead
    tenant: TenantRead
    permissions: list[str]
    subscription: SubscriptionStatusRead


# ── Routes ───────────────────────────────────────────────────

@router.post("/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: Session) -> LoginResponse:
    """Authenticate with email + password, receive a JWT scoped to one tenant."""
    stmt = select(User, Tenant).join(Tenant, Tenant.id == User.tenant_id).where(
        User.email == body.email
    )
    if body.tenant_slug:
        stmt = stmt.where(Tenant.slug == body.tenant_slug)
    matches = (await session.execute(stmt)).all()

    if len(matches) > 1:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email is registered with several tenants; pass tenant_slug",
        )
    if not matches or not verify_password(body.password, matches[0][0].password_hash):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )

    user, tenant = matches[0]
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is disabled",
        )

    token = create_jwt(
        subject=str(user.id),
        tenant_id=tenant.id,
        role=user.role,
    )
    logger.info("User %s logged in to tenant %s", user.id, tenant.id)

    return LoginResponse(
        access_token=token,
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
    )


@router.get("/me", response_model=MeResponse)
async def get_me(auth: Auth, tenant: CurrentTenant, session: Session) -> MeResponse:
    """The caller, their tenant, what their role may do and the subscription state."""
    user = await session.get(User, auth.user_id)
    if user is None or user.tenant_id != tenant.id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")

    return MeResponse(
        user=UserRead.model_validate(user),
        tenant=TenantRead.model_validate(tenant),
        permissions=sorted(ROLE_PERMISSIONS.get(user.role, frozenset())),
        subscription=SubscriptionStatusRead(**subscription_info(tenant)),
    )

"""Tenant signup and the current tenant."""

import logging
import re

from fastapi import APIRouter, HTTPException, status
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from vpdash.api.deps import CurrentTenant, Session
from vpdash.core.security import generate_api_token, hash_api_token, hash_password
from vpdash.models.api_token import ApiToken
from vpdash.models.tenant import Tenant, TenantRead
from vpdash.models.user import User, UserRole

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/tenants", tags=["tenants"])

# Suffixes tried before giving up on a derived slug
MAX_SLUG_ATTEMPTS = 20


# ── Signup request / response schemas ─────────────────────────

class TenantSignupRequest(BaseModel):
    """A new distributor and the super admin who manages it.

    ``tenant_slug`` may be omitted; it is then derived from the admin's email.
    """
    tenant_name: str = Field(max_length=255)
    tenant_slug: str | None = Field(default=None, max_length=100, pattern=r"^[a-z0-9\-]+$")
    admin_email: EmailStr
    admin_password: str = Field(min_length=8, max_length=128)
    admin_display_name: str = Field(default="", max_length=255)


class TenantSignupResponse(BaseModel):
    tenant: TenantRead
    api_token: str = Field(description="Shown once, store it securely")
    token_prefix: str


def slug_from_email(email: str) -> str:
    """``Jane.Doe@acme.com`` → ``jane-doe``."""
    local = email.split("@", 1)[0].lower()
    return re.sub(r"[^a-z0-9]+", "-", local).strip("-") or "tenant"


async def _slug_taken(session: AsyncSession, slug: str) -> bool:
    result = await session.execute(select(Tenant.id).where(Tenant.slug == slug))
    return result.first() is not None


async def _free_slug(session: AsyncSession, base: str) -> str:
    if not await _slug_taken(session, base):
        return base
    for n in range(2, MAX_SLUG_ATTEMPTS + 2):
        candidate = f"{base[:95]}-{n}"
        if not await _slug_taken(session, candidate):
            return candidate
    raise HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail=f"Could not derive a free slug from '{base}', pass tenant_slug",
    )


# ── Routes ────────────────────────────────────────────────────

@router.post(
    "",
    response_model=TenantSignupResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Sign up a new tenant",
)
async def signup_tenant(
    body: TenantSignupRequest,
    session: Session,
) -> TenantSignupResponse:
    """Create a tenant on the free plan, its super admin, and an API token.

    This is the only unauthenticated write endpoint. An explicit slug that
    is already taken is a conflict; a derived one gets a numeric suffix.
    The raw API token is returned once and is not recoverable.
    """
    if body.tenant_slug:
        if await _slug_taken(session, body.tenant_slug):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=f"Slug '{body.tenant_slug}' is already taken",
            )
        slug = body.tenant_slug
    else:
        slug = await _free_slug(session, slug_from_email(body.admin_email))

    tenant = Tenant(name=body.tenant_name, slug=slug)
    session.add(tenant)
    await session.flush()  # populate tenant.id

    admin = User(
        tenant_id=tenant.id,
        email=body.admin_email,
        password_hash=hash_password(body.admin_password),
        display_name=body.admin_display_name,
        role=UserRole.SUPER_ADMIN,
    )
    session.add(admin)
    await session.flush()

    raw_token = generate_api_token()
    prefix = raw_token[:8]
    session.add(ApiToken(
        tenant_id=tenant.id,
        user_id=admin.id,
        name="default",
        token_hash=hash_api_token(raw_token),
        token_prefix=prefix,
    ))
    await session.commit()
    await session.refresh(tenant)
    logger.info("Tenant %s (%s) signed up with admin user %s", tenant.id, slug, admin.id)

    return TenantSignupResponse(
        tenant=TenantRead.model_validate(tenant),
        api_token=raw_token,
        token_prefix=prefix,
    )


@router.get("/me", response_model=TenantRead, summary="Get current tenant info")
async def read_current_tenant(tenant: CurrentTenant) -> TenantRead:
    return TenantRead.model_validate(tenant)

"""Accounts — the distributor's customers, with their category gaps."""

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import Store, require_feature_limit, require_permission
from vpdash.core.plans import Feature
from vpdash.models.account import (
    Account,
    AccountCategoryGapRead,
    AccountCreate,
    AccountRead,
    AccountUpdate,
)
from vpdash.services.tenant_storage import TenantStorage

router = APIRouter(prefix="/accounts", tags=["accounts"])


@router.post(
    "",
    response_model=AccountRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("write")),
        Depends(require_feature_limit(Feature.ACCOUNTS)),
    ],
)
async def create_account(body: AccountCreate, store: Store) -> AccountRead:
    account = await store.create_account(body)
    return AccountRead.model_validate(account)


@router.get("", response_model=list[AccountRead])
async def list_accounts(store: Store) -> list[AccountRead]:
    return [AccountRead.model_validate(a) for a in await store.get_accounts()]


@router.get("/{account_id}", response_model=AccountRead)
async def get_account(account_id: int, store: Store) -> AccountRead:
    return AccountRead.model_validate(await _get_or_404(account_id, store))


@router.patch(
    "/{account_id}",
    response_model=AccountRead,
    dependencies=[Depends(require_permission("write"))],
)
async def update_account(account_id: int, body: AccountUpdate, store: Store) -> AccountRead:
    account = await store.update_account(account_id, body)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return AccountRead.model_validate(account)


@router.get("/{account_id}/gaps", response_model=list[AccountCategoryGapRead])
async def list_account_gaps(account_id: int, store: Store) -> list[AccountCategoryGapRead]:
    await _get_or_404(account_id, store)
    gaps = await store.get_account_category_gaps(account_id)
    return [AccountCategoryGapRead.model_validate(g) for g in gaps]


# ── Internal helper ───────────────────────────────────────────

async def _get_or_404(account_id: int, store: TenantStorage) -> Account:
    account = await store.get_account(account_id)
    if account is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    return account

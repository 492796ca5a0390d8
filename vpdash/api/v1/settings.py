"""Tenant settings and opportunity-scoring weights."""

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import Auth, Store, require_permission, require_plan
from vpdash.core.plans import PlanType
from vpdash.models.setting import (
    ScoringWeightsRead,
    ScoringWeightsWrite,
    SettingRead,
    SettingWrite,
)

router = APIRouter(prefix="/settings", tags=["settings"])


@router.get("", response_model=list[SettingRead])
async def list_settings(store: Store) -> list[SettingRead]:
    return [SettingRead.model_validate(s) for s in await store.get_settings()]


# Declared before "/{key}" so the literal path wins.
@router.get("/scoring-weights", response_model=ScoringWeightsRead)
async def get_scoring_weights(store: Store) -> ScoringWeightsRead:
    weights = await store.get_scoring_weights()
    if weights is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Scoring weights not configured",
        )
    return ScoringWeightsRead.model_validate(weights)


@router.put(
    "/scoring-weights",
    response_model=ScoringWeightsRead,
    dependencies=[
        Depends(require_permission("manage_settings")),
        Depends(require_plan(PlanType.STARTER)),
    ],
)
async def put_scoring_weights(
    body: ScoringWeightsWrite, auth: Auth, store: Store
) -> ScoringWeightsRead:
    total = body.gap_size_weight + body.revenue_potential_weight + body.category_count_weight
    if abs(total - 100.0) > 0.01:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Weights must sum to 100, got {total:g}",
        )
    weights = await store.upsert_scoring_weights({
        **body.model_dump(),
        "is_active": True,
        "updated_by": str(auth.user_id),
    })
    return ScoringWeightsRead.model_validate(weights)


@router.get("/{key}", response_model=SettingRead)
async def get_setting(key: str, store: Store) -> SettingRead:
    setting = await store.get_setting(key)
    if setting is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return SettingRead.model_validate(setting)


@router.put(
    "/{key}",
    response_model=SettingRead,
    dependencies=[Depends(require_permission("manage_settings"))],
)
async def put_setting(key: str, body: SettingWrite, store: Store) -> SettingRead:
    setting = await store.upsert_setting(key, body.value)
    return SettingRead.model_validate(setting)

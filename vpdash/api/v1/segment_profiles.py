"""Segment profiles (ICPs) — expected category mix per customer segment."""

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import Auth, Store, require_feature_limit, require_permission
from vpdash.core.plans import Feature
from vpdash.models.segment_profile import (
    SegmentProfileCreate,
    SegmentProfileRead,
    SegmentProfileUpdate,
)

router = APIRouter(prefix="/segment-profiles", tags=["segment-profiles"])


def _not_found() -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Segment profile not found")


@router.post(
    "",
    response_model=SegmentProfileRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("write")),
        Depends(require_feature_limit(Feature.ICPS)),
    ],
)
async def create_segment_profile(
    body: SegmentProfileCreate, auth: Auth, store: Store
) -> SegmentProfileRead:
    profile = await store.create_segment_profile(body)
    await store.create_profile_review_log({
        "profile_id": profile.id,
        "reviewer": str(auth.user_id),
        "action": "created",
    })
    return SegmentProfileRead.model_validate(profile)


@router.get("", response_model=list[SegmentProfileRead])
async def list_segment_profiles(store: Store) -> list[SegmentProfileRead]:
    return [SegmentProfileRead.model_validate(p) for p in await store.get_segment_profiles()]


@router.get("/{profile_id}", response_model=SegmentProfileRead)
async def get_segment_profile(profile_id: int, store: Store) -> SegmentProfileRead:
    profile = await store.get_segment_profile(profile_id)
    if profile is None:
        raise _not_found()
    return SegmentProfileRead.model_validate(profile)


@router.patch(
    "/{profile_id}",
    response_model=SegmentProfileRead,
    dependencies=[Depends(require_permission("write"))],
)
async def update_segment_profile(
    profile_id: int, body: SegmentProfileUpdate, auth: Auth, store: Store
) -> SegmentProfileRead:
    profile = await store.update_segment_profile(profile_id, body)
    if profile is None:
        raise _not_found()
    await store.create_profile_review_log({
        "profile_id": profile.id,
        "reviewer": str(auth.user_id),
        "action": "adjusted",
    })
    return SegmentProfileRead.model_validate(profile)


@router.post(
    "/{profile_id}/approve",
    response_model=SegmentProfileRead,
    dependencies=[Depends(require_permission("approve"))],
)
async def approve_segment_profile(
    profile_id: int, auth: Auth, store: Store
) -> SegmentProfileRead:
    profile = await store.approve_segment_profile(profile_id, approved_by=str(auth.user_id))
    if profile is None:
        raise _not_found()
    await store.create_profile_review_log({
        "profile_id": profile.id,
        "reviewer": str(auth.user_id),
        "action": "approved",
    })
    return SegmentProfileRead.model_validate(profile)


@router.delete(
    "/{profile_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(require_permission("delete"))],
)
async def delete_segment_profile(profile_id: int, store: Store) -> None:
    if await store.get_segment_profile(profile_id) is None:
        raise _not_found()
    await store.delete_profile_categories(profile_id)
    await store.delete_profile_review_log(profile_id)
    await store.delete_segment_profile(profile_id)

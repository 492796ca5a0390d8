"""Program accounts — revenue-share enrollments."""

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import (
    Auth,
    Store,
    require_active_subscription,
    require_feature_limit,
    require_permission,
)
from vpdash.core.plans import Feature
from vpdash.models.program import (
    ProgramAccountCreate,
    ProgramAccountRead,
    ProgramAccountUpdate,
)

router = APIRouter(prefix="/program-accounts", tags=["program-accounts"])


@router.post(
    "",
    response_model=ProgramAccountRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("write")),
        Depends(require_active_subscription),
        Depends(require_feature_limit(Feature.ENROLLED_ACCOUNTS)),
    ],
)
async def enroll_account(body: ProgramAccountCreate, auth: Auth, store: Store) -> ProgramAccountRead:
    if await store.get_account(body.account_id) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Account not found")
    if await store.get_program_account_by_account_id(body.account_id) is not None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Account is already enrolled",
        )

    enrollment = await store.create_program_account({
        **body.model_dump(),
        "enrolled_by": str(auth.user_id),
    })
    await store.update_account(body.account_id, {"enrollment_status": "enrolled"})
    return ProgramAccountRead.model_validate(enrollment)


@router.get("", response_model=list[ProgramAccountRead])
async def list_program_accounts(store: Store) -> list[ProgramAccountRead]:
    return [ProgramAccountRead.model_validate(p) for p in await store.get_program_accounts()]


@router.patch(
    "/{program_account_id}",
    response_model=ProgramAccountRead,
    dependencies=[Depends(require_permission("write"))],
)
async def update_program_account(
    program_account_id: int, body: ProgramAccountUpdate, store: Store
) -> ProgramAccountRead:
    enrollment = await store.update_program_account(program_account_id, body)
    if enrollment is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Program account not found"
        )
    return ProgramAccountRead.model_validate(enrollment)

"""Users — tenant-scoped, creation limited by plan and role."""

from fastapi import APIRouter, Depends, HTTPException, status

from vpdash.api.deps import Store, require_feature_limit, require_permission
from vpdash.core.plans import Feature
from vpdash.core.security import hash_password
from vpdash.models.user import User, UserCreate, UserRead

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "",
    response_model=UserRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[
        Depends(require_permission("manage_users")),
        Depends(require_feature_limit(Feature.USERS)),
    ],
)
async def create_user(body: UserCreate, store: Store) -> UserRead:
    if await store.users.first(User.email == body.email):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="A user with this email already exists in this tenant",
        )

    user = await store.users.create({
        "email": body.email,
        "password_hash": hash_password(body.password),
        "display_name": body.display_name,
        "role": body.role,
    })
    return UserRead.model_validate(user)


@router.get("", response_model=list[UserRead])
async def list_users(store: Store) -> list[UserRead]:
    return [UserRead.model_validate(u) for u in await store.get_users()]


@router.get("/{user_id}", response_model=UserRead)
async def get_user(user_id: int, store: Store) -> UserRead:
    user = await store.get_user(user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return UserRead.model_validate(user)

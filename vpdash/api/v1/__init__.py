"""V1 API router aggregation."""

from fastapi import APIRouter

from vpdash.api.v1.accounts import router as accounts_router
from vpdash.api.v1.auth import router as auth_router
from vpdash.api.v1.credits import router as credits_router
from vpdash.api.v1.playbooks import router as playbooks_router
from vpdash.api.v1.programs import router as programs_router
from vpdash.api.v1.segment_profiles import router as segment_profiles_router
from vpdash.api.v1.settings import router as settings_router
from vpdash.api.v1.subscription import router as subscription_router
from vpdash.api.v1.tasks import router as tasks_router
from vpdash.api.v1.tenants import router as tenants_router
from vpdash.api.v1.users import router as users_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(tenants_router)
v1_router.include_router(auth_router)
v1_router.include_router(users_router)
v1_router.include_router(accounts_router)
v1_router.include_router(segment_profiles_router)
v1_router.include_router(playbooks_router)
v1_router.include_router(tasks_router)
v1_router.include_router(programs_router)
v1_router.include_router(settings_router)
v1_router.include_router(credits_router)
v1_router.include_router(subscription_router)

"""API v1 router configuration."""

from fastapi import APIRouter

from api.v1.routes.groups import router as groups_router
from api.v1.routes.onboarding import router as onboarding_router
from api.v1.routes.status import router as status_router

router = APIRouter()
router.include_router(onboarding_router)
router.include_router(status_router)
router.include_router(groups_router)

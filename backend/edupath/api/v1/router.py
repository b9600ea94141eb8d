"""Version 1 of the HTTP API, mounted at /api/v1 by edupath.main."""

from fastapi import APIRouter

from edupath.api.v1 import onboarding

router = APIRouter()
router.include_router(onboarding.router, prefix="/onboarding", tags=["onboarding"])

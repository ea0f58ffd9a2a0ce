"""Main API router."""

from fastapi import APIRouter

from cinecrib.api.auth import router as auth_router
from cinecrib.api.content import router as content_router
from cinecrib.api.lookup import router as lookup_router
from cinecrib.api.recommendations import router as recommendations_router
from cinecrib.api.users import router as users_router

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth_router, prefix="/auth", tags=["auth"])
api_router.include_router(content_router, prefix="/content", tags=["content"])
api_router.include_router(lookup_router, prefix="/lookup", tags=["lookup"])
api_router.include_router(recommendations_router, prefix="/recommendations", tags=["recommendations"])
api_router.include_router(users_router, prefix="/users/me", tags=["users"])

# reflet/api/v1/router.py
from fastapi import APIRouter

from reflet.api.v1 import auth as auth_endpoints
from reflet.api.v1.endpoints import content, health, media

api_router = APIRouter()
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(content.router, prefix="/content", tags=["content"])
api_router.include_router(media.router, prefix="/media", tags=["media"])
api_router.include_router(auth_endpoints.router, prefix="/auth")

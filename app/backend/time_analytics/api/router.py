"""Top-level API router."""

from fastapi import APIRouter

from time_analytics.api.routes.exports import router as exports_router
from time_analytics.api.routes.health import router as health_router
from time_analytics.api.routes.me import router as me_router
from time_analytics.api.routes.team_analytics import router as team_analytics_router
from time_analytics.api.routes.time_analytics import router as time_analytics_router

api_router = APIRouter()
api_router.include_router(health_router, tags=["health"])
api_router.include_router(me_router)
api_router.include_router(time_analytics_router)
api_router.include_router(team_analytics_router)
api_router.include_router(exports_router)

"""API v1 router."""
from fastapi import APIRouter

from app.api.v1 import admin, auth, community, leaderboard, progress, topics, user

api_router = APIRouter()

api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(user.router, prefix="/users", tags=["Users"])
api_router.include_router(topics.router, prefix="/topics", tags=["Topics & Problems"])
api_router.include_router(progress.router, prefix="/progress", tags=["Progress"])
api_router.include_router(leaderboard.router, prefix="/leaderboard", tags=["Leaderboard"])
api_router.include_router(community.router, prefix="/community", tags=["Community"])
api_router.include_router(admin.router, prefix="/admin", tags=["Admin"])

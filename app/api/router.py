from fastapi import APIRouter

from app.api.v1 import genres, health, index, seasons, series, tracking, users

api_router = APIRouter()

api_router.include_router(index.router, tags=["Index"])
api_router.include_router(users.router, prefix="/users", tags=["Users"])
api_router.include_router(series.router, prefix="/tv", tags=["Series"])
api_router.include_router(tracking.router, prefix="/tv", tags=["Ratings & state"])
api_router.include_router(seasons.router, prefix="/tv", tags=["Seasons & episodes"])
api_router.include_router(genres.router, prefix="/genres", tags=["Genres"])
api_router.include_router(health.router, tags=["Health"])

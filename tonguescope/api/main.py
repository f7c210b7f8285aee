from fastapi import APIRouter

from .endpoints.analyses import router as analyses_router
from .endpoints.health import router as health_router
from .endpoints.history import router as history_router
from .endpoints.profiles import router as profiles_router

api_router = APIRouter()


@api_router.get("/")
async def root():
    return {"message": "TongueScope API is running"}


api_router.include_router(health_router)
api_router.include_router(profiles_router)
api_router.include_router(analyses_router)
api_router.include_router(history_router)

from fastapi import APIRouter

from parcinfo.api.v1.endpoints import auth, establishments, health, pcs, stats, users

api_router = APIRouter()

api_router.include_router(health.router)
api_router.include_router(auth.router)
api_router.include_router(establishments.router)
api_router.include_router(users.router)
api_router.include_router(pcs.router)
api_router.include_router(stats.router)

# matatu/api/v1/router.py
from fastapi import APIRouter

from matatu.api.v1.alerts import router as alerts_router
from matatu.api.v1.auth import me_router, router as auth_router
from matatu.api.v1.health import router as health_router
from matatu.api.v1.lost_items import router as lost_items_router
from matatu.api.v1.ratings import router as ratings_router
from matatu.api.v1.transit import router as transit_router
from matatu.api.v1.users import router as users_router

api_router = APIRouter()

api_router.include_router(auth_router)
api_router.include_router(me_router)
api_router.include_router(users_router)

api_router.include_router(alerts_router)
api_router.include_router(transit_router)
api_router.include_router(ratings_router)
api_router.include_router(lost_items_router)

api_router.include_router(health_router)

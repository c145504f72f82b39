from fastapi import APIRouter

from liveshop.api.v1.endpoints.analytics import router as analytics_router
from liveshop.api.v1.endpoints.live import router as live_router
from liveshop.api.v1.endpoints.reports import router as reports_router

routers = APIRouter()
routers.include_router(live_router)
routers.include_router(analytics_router)
routers.include_router(reports_router)

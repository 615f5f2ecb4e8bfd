"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from seen.presentation.api.v1.endpoints.health import router as health_router
from seen.presentation.api.v1.endpoints.links import router as links_router
from seen.presentation.api.v1.endpoints.search import router as search_router
from seen.presentation.api.v1.endpoints.telegram_webhook import router as telegram_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(links_router)
router.include_router(search_router)
router.include_router(telegram_router)

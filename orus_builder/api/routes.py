from fastapi import APIRouter
from orus_builder.api.routes_health import router as health_router
from orus_builder.api.routes_generation import router as generation_router
from orus_builder.api.routes_prompt import router as prompt_router
from orus_builder.api.routes_dashboard import router as dashboard_router

router = APIRouter()
router.include_router(health_router, tags=["health"])
router.include_router(generation_router, prefix="/v1", tags=["generation"])
router.include_router(prompt_router, prefix="/v1", tags=["prompt"])
router.include_router(dashboard_router, tags=["dashboard"])

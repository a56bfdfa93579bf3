from fastapi import APIRouter
from orus_builder.core.config import settings

router = APIRouter()

@router.get("/health")
def health():
    return {"status": "ok", "service": settings.app_name, "env": settings.app_env}

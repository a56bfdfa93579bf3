from typing import Optional
from fastapi import APIRouter, Depends, Query
from fastapi.encoders import jsonable_encoder
from orus_builder.api.deps import get_services
from orus_builder.core.registry import ServiceRegistry
from orus_builder.prompt.types import HistoryQuery
from orus_builder.schemas.prompt import HistoryListResponse, ProcessPromptRequest, ProcessPromptResponse

router = APIRouter(prefix="/prompt")

@router.post("/process", response_model=ProcessPromptResponse)
def process_prompt(req: ProcessPromptRequest, services: ServiceRegistry = Depends(get_services)):
    # PipelineStageError is rendered by the app-level handler
    result = services.processor.process(req.to_input())
    return ProcessPromptResponse(
        ready=result.ready,
        clarifications_needed=result.clarifications_needed,
        data=jsonable_encoder(result),
    )

@router.get("/history", response_model=HistoryListResponse)
def list_history(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    user_id: Optional[str] = Query(None, alias="userId"),
    keywords: Optional[str] = Query(None, description="Comma-separated keywords"),
    min_quality: Optional[float] = Query(None, alias="minQuality", ge=0, le=1),
    limit: int = Query(20, ge=1, le=200),
    services: ServiceRegistry = Depends(get_services),
):
    query = HistoryQuery(
        session_id=session_id,
        user_id=user_id,
        keywords=[k.strip() for k in keywords.split(",") if k.strip()] if keywords else [],
        min_quality=min_quality,
        limit=limit,
    )
    entries = services.history.search(query)
    return HistoryListResponse(total=len(entries), entries=jsonable_encoder(entries))

@router.get("/history/analytics")
def history_analytics(services: ServiceRegistry = Depends(get_services)):
    return {"success": True, "analytics": jsonable_encoder(services.history.analytics())}

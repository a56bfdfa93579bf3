import logging
import uuid
from fastapi import APIRouter, Depends, Response
from orus_builder.api.deps import get_services
from orus_builder.core.errors import GenerationFailedError, NotFoundError
from orus_builder.core.registry import ServiceRegistry
from orus_builder.generators.codegen.writer import build_zip, project_files
from orus_builder.schemas.generation import ErrorResponse, GenerateRequest, GenerateResponse, GenerationData

log = logging.getLogger(__name__)

router = APIRouter(prefix="/generation", responses={422: {"model": ErrorResponse}, 500: {"model": ErrorResponse}})

@router.post("/generate", response_model=GenerateResponse, status_code=201)
async def generate(req: GenerateRequest, services: ServiceRegistry = Depends(get_services)):
    request_id = f"gen-{uuid.uuid4().hex[:12]}"
    request = req.to_request(request_id)
    log.info("Generation requested", extra={"request_id": request_id, "stage": "api"})

    result = await services.generator.generate(request)
    if not result.ok:
        raise GenerationFailedError(result.error)

    return GenerateResponse(job_id=request_id, data=GenerationData.from_result(result.value))

@router.get("/{job_id}/result", responses={404: {"model": ErrorResponse}})
def get_result(job_id: str, services: ServiceRegistry = Depends(get_services)):
    result = services.generator.get_result(job_id)
    if result is None:
        raise NotFoundError("GENERATION_NOT_FOUND", job_id)
    return {"success": True, "data": GenerationData.from_result(result).model_dump(by_alias=True, mode="json")}

@router.get("/download/{job_id}", responses={404: {"model": ErrorResponse}})
def download(job_id: str, services: ServiceRegistry = Depends(get_services)):
    result = services.generator.get_result(job_id)
    if result is None:
        raise NotFoundError("GENERATION_NOT_FOUND", job_id)

    archive = build_zip(project_files(result))
    log.info("Serving archive (%d bytes)", len(archive), extra={"request_id": job_id, "stage": "download"})
    return Response(
        content=archive,
        media_type="application/zip",
        headers={"Content-Disposition": f'attachment; filename="{result.project_id}.zip"'},
    )

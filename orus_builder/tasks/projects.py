from __future__ import annotations
import asyncio
import logging
import uuid
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from orus_builder.core.registry import ServiceRegistry
from orus_builder.db.models import Project
from orus_builder.db.session import SessionLocal
from orus_builder.generators.codegen.types import GenerationOptions, GenerationRequest
from orus_builder.schemas.generation import GenerationData
from orus_builder.tasks.celery_app import celery_app

log = logging.getLogger(__name__)

_services: Optional[ServiceRegistry] = None


def worker_services() -> ServiceRegistry:
    global _services
    if _services is None:
        _services = ServiceRegistry.default()
    return _services


def request_for(project: Project) -> GenerationRequest:
    options = (project.project_metadata or {}).get("options") or {}
    return GenerationRequest(
        request_id=f"gen-{uuid.uuid4().hex[:12]}",
        user_id=project.user_id,
        project_id=project.id,
        prompt=project.prompt or project.description or project.name,
        language=project.language or "typescript",
        framework=project.framework if project.framework in ("react", "next") else "react",
        options=GenerationOptions(
            complexity=options.get("complexity", "medium"),
            include_tests=bool(options.get("includeTests", False)),
        ),
    )


@celery_app.task(name="regenerate_project")
def regenerate_project(project_id: str, services: Optional[ServiceRegistry] = None) -> None:
    db: Session = SessionLocal()
    try:
        project = db.get(Project, project_id)
        if not project or project.is_deleted:
            log.error("Project not found", extra={"request_id": project_id, "stage": "-"})
            return

        request = request_for(project)
        log.info("Regenerating project", extra={"request_id": request.request_id, "stage": "regenerate"})

        result = asyncio.run((services or worker_services()).generator.generate(request))
        if not result.ok:
            project.status = "failed"
            project.error_message = result.error.message.get("en")
            project.generation_data = {"error": result.error.to_dict()}
        else:
            data = GenerationData.from_result(result.value).model_dump(by_alias=True, mode="json")
            project.files = data.pop("files")
            project.generation_data = data
            project.status = "generated"
            project.error_message = None
            project.version += 1
        project.updated_at = datetime.utcnow()
        db.commit()
        log.info("Regeneration finished with status %s", project.status,
                 extra={"request_id": request.request_id, "stage": "regenerate"})

    except Exception as e:
        log.exception("Regeneration failed", extra={"request_id": project_id, "stage": "regenerate"})
        db.rollback()
        project = db.get(Project, project_id)
        if project:
            project.status = "failed"
            project.error_message = str(e)
            db.commit()
    finally:
        db.close()

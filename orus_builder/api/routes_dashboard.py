import logging
from datetime import datetime
from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy import func, select
from sqlalchemy.orm import Session
from orus_builder.core.errors import NotFoundError
from orus_builder.db.models import Project
from orus_builder.db.session import get_db
from orus_builder.schemas.dashboard import (
    DashboardStats,
    Pagination,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectSummary,
    ProjectUpdate,
    StatsResponse,
)
from orus_builder.tasks.projects import regenerate_project

log = logging.getLogger(__name__)

router = APIRouter(prefix="/dashboard")

STATS_STATUSES = ["draft", "generated", "deployed"]


def _get_active(db: Session, project_id: str, user_id: str) -> Project:
    project = db.get(Project, project_id)
    if not project or project.is_deleted or project.user_id != user_id:
        raise NotFoundError("PROJECT_NOT_FOUND", project_id)
    return project


@router.post("/projects", status_code=201)
def create_project(req: ProjectCreate, db: Session = Depends(get_db)):
    project = Project(
        user_id=req.user_id,
        name=req.name,
        description=req.description,
        prompt=req.prompt,
        framework=req.framework,
        language=req.language,
        generation_data=req.generation_data,
        files=req.files,
        project_metadata=req.metadata,
        status="generated",
        version=1,
        is_deleted=False,
    )
    db.add(project)
    db.commit()
    db.refresh(project)
    log.info("Project created: %s", project.name, extra={"request_id": project.id, "stage": "dashboard"})
    return {
        "success": True,
        "projectId": project.id,
        "project": ProjectResponse.model_validate(project).model_dump(by_alias=True, mode="json"),
    }


@router.get("/projects", response_model=ProjectListResponse)
def list_projects(
    user_id: str = Query("demo-user", alias="userId"),
    status: Optional[str] = None,
    limit: int = Query(20, ge=1, le=100),
    skip: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    conditions = [Project.user_id == user_id, Project.is_deleted.is_(False)]
    if status:
        conditions.append(Project.status == status)

    total = db.scalar(select(func.count()).select_from(Project).where(*conditions)) or 0
    projects = db.scalars(
        select(Project).where(*conditions).order_by(Project.created_at.desc()).offset(skip).limit(limit)
    ).all()

    return ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in projects],
        pagination=Pagination(total=total, limit=limit, skip=skip, has_more=total > skip + limit),
    )


@router.get("/projects/{project_id}")
def get_project(project_id: str, user_id: str = Query("demo-user", alias="userId"), db: Session = Depends(get_db)):
    project = _get_active(db, project_id, user_id)
    return {"success": True, "project": ProjectResponse.model_validate(project).model_dump(by_alias=True, mode="json")}


@router.put("/projects/{project_id}")
def update_project(
    project_id: str,
    req: ProjectUpdate,
    user_id: str = Query("demo-user", alias="userId"),
    db: Session = Depends(get_db),
):
    project = _get_active(db, project_id, user_id)

    updates = req.model_dump(exclude_unset=True, exclude_none=True)
    if "metadata" in updates:
        updates["project_metadata"] = updates.pop("metadata")
    for key, value in updates.items():
        setattr(project, key, value)
    project.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(project)

    log.info("Project updated", extra={"request_id": project_id, "stage": "dashboard"})
    return {"success": True, "project": ProjectResponse.model_validate(project).model_dump(by_alias=True, mode="json")}


@router.delete("/projects/{project_id}")
def delete_project(project_id: str, user_id: str = Query("demo-user", alias="userId"), db: Session = Depends(get_db)):
    project = _get_active(db, project_id, user_id)
    project.is_deleted = True
    project.updated_at = datetime.utcnow()
    db.commit()
    log.info("Project deleted", extra={"request_id": project_id, "stage": "dashboard"})
    return {"success": True, "message": "Project deleted"}


@router.post("/projects/{project_id}/regenerate", status_code=202)
def regenerate(project_id: str, user_id: str = Query("demo-user", alias="userId"), db: Session = Depends(get_db)):
    project = _get_active(db, project_id, user_id)
    project.status = "generating"
    project.error_message = None
    project.updated_at = datetime.utcnow()
    db.commit()

    regenerate_project.delay(project.id)
    return {"success": True, "projectId": project.id, "status": project.status}


@router.get("/stats", response_model=StatsResponse)
def stats(user_id: str = Query("demo-user", alias="userId"), db: Session = Depends(get_db)):
    active = [Project.user_id == user_id, Project.is_deleted.is_(False)]
    total = db.scalar(select(func.count()).select_from(Project).where(*active)) or 0

    rows = db.execute(
        select(Project.status, func.count()).where(*active).group_by(Project.status)
    ).all()
    counts = {status: count for status, count in rows}
    by_status = {status: counts.get(status, 0) for status in STATS_STATUSES}

    recent = db.scalars(select(Project).where(*active).order_by(Project.created_at.desc()).limit(5)).all()

    return StatsResponse(stats=DashboardStats(
        total_projects=total,
        by_status=by_status,
        recent_projects=[ProjectSummary.model_validate(p) for p in recent],
    ))

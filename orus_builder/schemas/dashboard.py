from datetime import datetime
from typing import Any, Dict, List, Literal, Optional
from pydantic import ConfigDict, Field
from pydantic.alias_generators import to_camel
from orus_builder.schemas.generation import CamelModel

ProjectStatus = Literal["draft", "generating", "generated", "deployed", "failed"]


class ProjectCreate(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    prompt: Optional[str] = None
    user_id: str = "demo-user"
    framework: str = "react"
    language: str = "typescript"
    generation_data: Dict[str, Any] = {}
    files: List[Dict[str, Any]] = []
    metadata: Dict[str, Any] = {}


class ProjectUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    prompt: Optional[str] = None
    framework: Optional[str] = None
    language: Optional[str] = None
    status: Optional[ProjectStatus] = None
    generation_data: Optional[Dict[str, Any]] = None
    files: Optional[List[Dict[str, Any]]] = None
    metadata: Optional[Dict[str, Any]] = None


class ProjectResponse(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    user_id: str
    name: str
    description: Optional[str] = None
    prompt: Optional[str] = None
    framework: str
    language: str
    status: str
    version: int
    generation_data: Dict[str, Any] = {}
    files: List[Dict[str, Any]] = []
    metadata: Dict[str, Any] = Field({}, validation_alias="project_metadata")
    error_message: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class Pagination(CamelModel):
    total: int
    limit: int
    skip: int
    has_more: bool


class ProjectListResponse(CamelModel):
    success: bool = True
    projects: List[ProjectResponse]
    pagination: Pagination


class ProjectSummary(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)

    id: str
    name: str
    status: str
    created_at: datetime


class DashboardStats(CamelModel):
    total_projects: int
    by_status: Dict[str, int]
    recent_projects: List[ProjectSummary]


class StatsResponse(CamelModel):
    success: bool = True
    stats: DashboardStats

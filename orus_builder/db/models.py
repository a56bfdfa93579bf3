from __future__ import annotations
import secrets
import time
from datetime import datetime
from sqlalchemy import Boolean, DateTime, Integer, JSON, String, Text
from sqlalchemy.orm import Mapped, mapped_column
from orus_builder.db.session import Base


def new_project_id() -> str:
    return f"proj-{int(time.time() * 1000)}-{secrets.token_hex(5)[:9]}"


class Project(Base):
    __tablename__ = "dashboard_projects"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=new_project_id)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True, default="demo-user")
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    prompt: Mapped[str | None] = mapped_column(Text, nullable=True)

    framework: Mapped[str] = mapped_column(String(20), nullable=False, default="react")
    language: Mapped[str] = mapped_column(String(20), nullable=False, default="typescript")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="generated")
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    generation_data: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)
    files: Mapped[list] = mapped_column(JSON, default=list, nullable=False)
    project_metadata: Mapped[dict] = mapped_column("metadata", JSON, default=dict, nullable=False)
    error_message: Mapped[str | None] = mapped_column(Text, nullable=True)

"""EPC project table."""

from datetime import datetime
from typing import Any, Dict, List

from sqlalchemy import JSON, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.core.database import Base


class EPCProject(Base):
    """EPC project; phases, resources, quality control and risks are JSON documents."""

    __tablename__ = "epc_projects"

    project_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    project_name: Mapped[str] = mapped_column(String(255), nullable=False)
    site_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    project_type: Mapped[str] = mapped_column(String(50), nullable=False)
    priority: Mapped[str] = mapped_column(String(20), nullable=False, default="medium", index=True)
    overall_status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="planning", index=True
    )
    health_score: Mapped[int] = mapped_column(Integer, nullable=False, default=100)

    phases: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    resources: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    quality_control: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False)
    risks: Mapped[List[Dict[str, Any]]] = mapped_column(JSON, nullable=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, server_default=func.now(), onupdate=func.now(), nullable=False
    )

    def __repr__(self) -> str:
        return f"<EPCProject(project_id='{self.project_id}', name='{self.project_name}')>"

"""Incident model."""

from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, DateTime, ForeignKey, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.client import Project
    from erp.models.employee import Employee


class Incident(Base):
    """Security incident reported on a project site."""
    
    __tablename__ = "incidents"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    project_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("projects.id"), 
        nullable=False
    )
    reported_by_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("employees.id"), 
        nullable=False
    )
    assigned_to_id: Mapped[str | None] = mapped_column(
        String, 
        ForeignKey("employees.id")
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    severity: Mapped[str] = mapped_column(String(20), nullable=False, default="LOW")
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="OPEN")
    occurred_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), 
        server_default=func.now()
    )
    
    # Relationships
    project: Mapped["Project"] = relationship("Project")
    reported_by: Mapped["Employee"] = relationship("Employee", foreign_keys=[reported_by_id])
    assigned_to: Mapped[Optional["Employee"]] = relationship("Employee", foreign_keys=[assigned_to_id])

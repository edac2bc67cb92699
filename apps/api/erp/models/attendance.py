"""Attendance and leave models."""

from datetime import date, datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, Date, DateTime, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.client import Project
    from erp.models.employee import Employee


class Attendance(Base):
    """One guard shift: check-in and (once finished) check-out."""
    
    __tablename__ = "attendance"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    employee_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("employees.id"), 
        nullable=False
    )
    project_id: Mapped[str | None] = mapped_column(
        String, 
        ForeignKey("projects.id")
    )
    check_in: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    check_out: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PRESENT")
    
    # Relationships
    employee: Mapped["Employee"] = relationship("Employee")
    project: Mapped[Optional["Project"]] = relationship("Project")


class Leave(Base):
    """Leave request."""
    
    __tablename__ = "leaves"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    employee_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("employees.id"), 
        nullable=False
    )
    approved_by_id: Mapped[str | None] = mapped_column(
        String, 
        ForeignKey("employees.id")
    )
    type: Mapped[str] = mapped_column(String(30), nullable=False, default="ANNUAL")
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    reason: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    
    # Relationships
    employee: Mapped["Employee"] = relationship("Employee", foreign_keys=[employee_id])
    approved_by: Mapped[Optional["Employee"]] = relationship("Employee", foreign_keys=[approved_by_id])

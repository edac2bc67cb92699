"""Equipment model."""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import String, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.client import Project


class Equipment(Base):
    """Issued equipment (weapons, vehicles, uniforms, radios)."""
    
    __tablename__ = "equipment"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False)
    serial_number: Mapped[str | None] = mapped_column(String(100), unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="AVAILABLE")
    project_id: Mapped[str | None] = mapped_column(
        String, 
        ForeignKey("projects.id")
    )
    
    # Relationships
    project: Mapped[Optional["Project"]] = relationship("Project", back_populates="equipment")

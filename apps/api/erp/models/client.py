"""Client and project models."""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, Date, ForeignKey, Integer, Numeric, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.equipment import Equipment


class Client(Base):
    """Customer contracting guard services."""
    
    __tablename__ = "clients"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    contact_email: Mapped[str | None] = mapped_column(String(255))
    
    # Relationships
    projects: Mapped[list["Project"]] = relationship(
        "Project", 
        back_populates="client"
    )


class Project(Base):
    """A client site/contract that guards are deployed to."""
    
    __tablename__ = "projects"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    client_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("clients.id"), 
        nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PLANNING")
    start_date: Mapped[date | None] = mapped_column(Date)
    end_date: Mapped[date | None] = mapped_column(Date)
    number_of_guards: Mapped[int] = mapped_column(Integer, default=0)
    budget: Mapped[Decimal | None] = mapped_column(Numeric(12, 2))
    
    # Relationships
    client: Mapped["Client"] = relationship("Client", back_populates="projects")
    equipment: Mapped[list["Equipment"]] = relationship(
        "Equipment", 
        back_populates="project"
    )

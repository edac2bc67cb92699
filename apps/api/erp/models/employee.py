"""Employee model."""

from datetime import date
from typing import TYPE_CHECKING

from sqlalchemy import String, Date, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.user import User


class Employee(Base):
    """Employee model."""
    
    __tablename__ = "employees"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    user_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("users.id"), 
        unique=True,
        nullable=False
    )
    employee_code: Mapped[str] = mapped_column(String(20), unique=True, nullable=False)
    first_name: Mapped[str] = mapped_column(String(100), nullable=False)
    last_name: Mapped[str] = mapped_column(String(100), nullable=False)
    position: Mapped[str | None] = mapped_column(String(100))
    department: Mapped[str | None] = mapped_column(String(100))
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="ACTIVE")
    date_joined: Mapped[date | None] = mapped_column(Date)
    
    # Relationships
    user: Mapped["User"] = relationship("User", back_populates="employee")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

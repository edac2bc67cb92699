"""Payroll model."""

from datetime import date
from decimal import Decimal
from typing import TYPE_CHECKING

from sqlalchemy import String, Date, ForeignKey, Integer, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from erp.core.database import Base

if TYPE_CHECKING:
    from erp.models.employee import Employee


class Payroll(Base):
    """Monthly payroll run for one employee."""
    
    __tablename__ = "payroll"
    
    id: Mapped[str] = mapped_column(String, primary_key=True)
    employee_id: Mapped[str] = mapped_column(
        String, 
        ForeignKey("employees.id"), 
        nullable=False
    )
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    basic_salary: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    allowances: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    deductions: Mapped[Decimal] = mapped_column(Numeric(12, 2), default=0)
    # Net pay: basic_salary + allowances - deductions
    amount: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    pay_date: Mapped[date | None] = mapped_column(Date)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="PENDING")
    
    # Relationships
    employee: Mapped["Employee"] = relationship("Employee")

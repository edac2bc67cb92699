"""Database models."""

from erp.core.database import Base
from erp.models.user import User
from erp.models.employee import Employee
from erp.models.client import Client, Project
from erp.models.equipment import Equipment
from erp.models.attendance import Attendance, Leave
from erp.models.payroll import Payroll
from erp.models.incident import Incident

__all__ = [
    "Base",
    "User",
    "Employee",
    "Client",
    "Project",
    "Equipment",
    "Attendance",
    "Leave",
    "Payroll",
    "Incident",
]

"""Report definitions and row builders.

Each report type has a fixed field catalog and turns ORM rows into plain,
nested dicts. Plain dicts are what the export renderers, the JSON endpoint
and the cache all consume.
"""

from dataclasses import dataclass, field
from datetime import date, datetime, time
from typing import Any, Dict, List, Optional

from fastapi import Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from erp.core.database import get_db
from erp.core.observability import trace_function
from erp.models import Attendance, Employee, Equipment, Incident, Leave, Payroll, Project

Row = Dict[str, Any]


@dataclass(frozen=True)
class ReportDefinition:
    """Static description of one report type."""
    key: str
    title: str
    filename: str
    fields: List[str]
    statuses: tuple[str, ...] = ()
    field_types: Dict[str, str] = field(default_factory=dict)


REPORTS: Dict[str, ReportDefinition] = {
    "attendance": ReportDefinition(
        key="attendance",
        title="Attendance Report",
        filename="attendance-report",
        fields=[
            "employee_id",
            "employee_name",
            "project.name",
            "project.client.name",
            "check_in",
            "check_out",
            "duration",
            "status",
        ],
        statuses=("PRESENT", "ABSENT", "LATE"),
    ),
    "leave": ReportDefinition(
        key="leave",
        title="Leave Report",
        filename="leave-report",
        fields=[
            "employee.first_name",
            "employee.last_name",
            "type",
            "start_date",
            "end_date",
            "reason",
            "status",
            "approved_by.first_name",
            "approved_by.last_name",
        ],
        statuses=("PENDING", "APPROVED", "REJECTED"),
    ),
    "payroll": ReportDefinition(
        key="payroll",
        title="Payroll Report",
        filename="payroll-report",
        fields=[
            "employee.first_name",
            "employee.last_name",
            "month",
            "year",
            "basic_salary",
            "allowances",
            "deductions",
            "amount",
            "status",
        ],
        statuses=("PENDING", "PAID", "CANCELLED"),
        field_types={
            "basic_salary": "currency",
            "allowances": "currency",
            "deductions": "currency",
            "amount": "currency",
        },
    ),
    "incident": ReportDefinition(
        key="incident",
        title="Incident Report",
        filename="incident-report",
        fields=[
            "project.name",
            "project.client.name",
            "reported_by.first_name",
            "reported_by.last_name",
            "assigned_to.first_name",
            "assigned_to.last_name",
            "title",
            "description",
            "severity",
            "status",
            "occurred_at",
        ],
        statuses=("OPEN", "IN_PROGRESS", "RESOLVED", "CLOSED"),
    ),
    "equipment": ReportDefinition(
        key="equipment",
        title="Equipment Report",
        filename="equipment-report",
        fields=["name", "type", "serial_number", "status", "project.name"],
        statuses=("AVAILABLE", "ASSIGNED", "MAINTENANCE", "RETIRED"),
    ),
    "project": ReportDefinition(
        key="project",
        title="Project Report",
        filename="project-report",
        fields=[
            "name",
            "description",
            "client.name",
            "status",
            "start_date",
            "end_date",
            "number_of_guards",
            "budget",
        ],
        statuses=("PLANNING", "ACTIVE", "COMPLETED", "ON_HOLD", "CANCELLED"),
        field_types={"budget": "currency"},
    ),
}


def get_report_definition(report_type: str) -> Optional[ReportDefinition]:
    return REPORTS.get(report_type)


@dataclass
class ReportFilters:
    """Filters shared by the report queries."""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None

    @property
    def start(self) -> Optional[datetime]:
        return datetime.combine(self.start_date, time.min) if self.start_date else None

    @property
    def end(self) -> Optional[datetime]:
        return datetime.combine(self.end_date, time.max) if self.end_date else None


def shift_hours(check_in: Optional[datetime], check_out: Optional[datetime]) -> int:
    """Whole hours worked in a shift; 0 while still checked in."""
    if not check_in or not check_out:
        return 0
    return round((check_out - check_in).total_seconds() / 3600)


def employee_row(employee: Optional[Employee]) -> Optional[Row]:
    if employee is None:
        return None
    return {
        "id": employee.id,
        "employee_code": employee.employee_code,
        "first_name": employee.first_name,
        "last_name": employee.last_name,
        "position": employee.position,
        "department": employee.department,
    }


def project_row(project: Optional[Project]) -> Optional[Row]:
    if project is None:
        return None
    return {
        "id": project.id,
        "name": project.name,
        "status": project.status,
        "client": {"id": project.client.id, "name": project.client.name} if project.client else None,
    }


def attendance_row(record: Attendance) -> Row:
    return {
        "id": record.id,
        "employee_id": record.employee_id,
        "employee_name": record.employee.full_name if record.employee else "",
        "project": project_row(record.project),
        "check_in": record.check_in,
        "check_out": record.check_out,
        "duration": shift_hours(record.check_in, record.check_out),
        "status": record.status,
    }


def leave_row(leave: Leave) -> Row:
    return {
        "id": leave.id,
        "employee": employee_row(leave.employee),
        "approved_by": employee_row(leave.approved_by),
        "type": leave.type,
        "start_date": leave.start_date,
        "end_date": leave.end_date,
        "reason": leave.reason,
        "status": leave.status,
    }


def payroll_row(payroll: Payroll) -> Row:
    return {
        "id": payroll.id,
        "employee": employee_row(payroll.employee),
        "month": payroll.month,
        "year": payroll.year,
        "basic_salary": payroll.basic_salary,
        "allowances": payroll.allowances,
        "deductions": payroll.deductions,
        "amount": payroll.amount,
        "pay_date": payroll.pay_date,
        "status": payroll.status,
    }


def incident_row(incident: Incident) -> Row:
    return {
        "id": incident.id,
        "project": project_row(incident.project),
        "reported_by": employee_row(incident.reported_by),
        "assigned_to": employee_row(incident.assigned_to),
        "title": incident.title,
        "description": incident.description,
        "severity": incident.severity,
        "status": incident.status,
        "occurred_at": incident.occurred_at,
    }


def equipment_row(equipment: Equipment) -> Row:
    return {
        "id": equipment.id,
        "name": equipment.name,
        "type": equipment.type,
        "serial_number": equipment.serial_number,
        "status": equipment.status,
        "project": project_row(equipment.project),
    }


def project_report_row(project: Project) -> Row:
    row = project_row(project) or {}
    row.update(
        description=project.description,
        start_date=project.start_date,
        end_date=project.end_date,
        number_of_guards=project.number_of_guards,
        budget=project.budget,
    )
    return row


class ReportRepository:
    """Loads report rows from the database."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @trace_function("report_repository.fetch")
    async def fetch(self, report_type: str, filters: ReportFilters) -> List[Row]:
        """Load the rows of ``report_type`` matching ``filters``."""
        loaders = {
            "attendance": self.attendance,
            "leave": self.leave,
            "payroll": self.payroll,
            "incident": self.incident,
            "equipment": self.equipment,
            "project": self.project,
        }
        loader = loaders.get(report_type)
        if loader is None:
            raise KeyError(f"Unknown report type: {report_type}")
        return await loader(filters)

    async def attendance(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Attendance).options(
            selectinload(Attendance.employee),
            selectinload(Attendance.project).selectinload(Project.client),
        )
        if filters.start:
            stmt = stmt.where(Attendance.check_in >= filters.start)
        if filters.end:
            stmt = stmt.where(Attendance.check_out <= filters.end)
        if filters.status:
            stmt = stmt.where(Attendance.status == filters.status)

        result = await self.db.execute(stmt.order_by(Attendance.check_in))
        return [attendance_row(r) for r in result.scalars().all()]

    async def leave(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Leave).options(
            selectinload(Leave.employee),
            selectinload(Leave.approved_by),
        )
        if filters.start_date:
            stmt = stmt.where(Leave.start_date >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(Leave.end_date <= filters.end_date)
        if filters.status:
            stmt = stmt.where(Leave.status == filters.status)

        result = await self.db.execute(stmt.order_by(Leave.start_date))
        return [leave_row(r) for r in result.scalars().all()]

    async def payroll(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Payroll).options(selectinload(Payroll.employee))
        if filters.start_date:
            stmt = stmt.where(Payroll.pay_date >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(Payroll.pay_date <= filters.end_date)
        if filters.status:
            stmt = stmt.where(Payroll.status == filters.status)

        result = await self.db.execute(stmt.order_by(Payroll.year, Payroll.month))
        return [payroll_row(r) for r in result.scalars().all()]

    async def incident(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Incident).options(
            selectinload(Incident.project).selectinload(Project.client),
            selectinload(Incident.reported_by),
            selectinload(Incident.assigned_to),
        )
        if filters.start:
            stmt = stmt.where(Incident.occurred_at >= filters.start)
        if filters.end:
            stmt = stmt.where(Incident.occurred_at <= filters.end)
        if filters.status:
            stmt = stmt.where(Incident.status == filters.status)

        result = await self.db.execute(stmt.order_by(Incident.occurred_at.desc()))
        return [incident_row(r) for r in result.scalars().all()]

    async def equipment(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Equipment).options(
            selectinload(Equipment.project).selectinload(Project.client),
        )
        if filters.status:
            stmt = stmt.where(Equipment.status == filters.status)

        result = await self.db.execute(stmt.order_by(Equipment.name))
        return [equipment_row(r) for r in result.scalars().all()]

    async def project(self, filters: ReportFilters) -> List[Row]:
        stmt = select(Project).options(selectinload(Project.client))
        if filters.start_date:
            stmt = stmt.where(Project.start_date >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(Project.end_date <= filters.end_date)
        if filters.status:
            stmt = stmt.where(Project.status == filters.status)

        result = await self.db.execute(stmt.order_by(Project.name))
        return [project_report_row(r) for r in result.scalars().all()]


def get_report_repository(db: AsyncSession = Depends(get_db)) -> ReportRepository:
    """FastAPI dependency."""
    return ReportRepository(db)

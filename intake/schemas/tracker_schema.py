"""
Work Tracker Schemas
Pydantic models for employee, reminder settings and work entry requests
"""
import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator

from intake.models.work_entry import EFFORT_TYPES
from intake.services.tracker_scheduler import day_of_week_expression, parse_time, validate_timezone


class EmployeeCreateSchema(BaseModel):
    """Schema for adding an employee to the tracker roster"""
    name: str = Field(..., min_length=1, max_length=150)
    email: EmailStr
    designation: Optional[str] = Field(None, max_length=150)
    department: Optional[str] = Field(None, max_length=150)
    employee_code: Optional[str] = Field(None, max_length=50)
    status: Literal["active", "inactive"] = "active"


class EmployeeUpdateSchema(BaseModel):
    """Schema for updating an employee; only sent fields change"""
    name: Optional[str] = Field(None, min_length=1, max_length=150)
    email: Optional[EmailStr] = None
    designation: Optional[str] = Field(None, max_length=150)
    department: Optional[str] = Field(None, max_length=150)
    employee_code: Optional[str] = Field(None, max_length=50)
    status: Optional[Literal["active", "inactive"]] = None


class TrackerSettingsUpdateSchema(BaseModel):
    """Schema for updating reminder settings"""
    cron_status: Optional[Literal["active", "paused"]] = None
    cron_time: Optional[str] = None
    timezone: Optional[str] = Field(None, max_length=64)
    days_active: Optional[List[str]] = Field(None, min_length=1, max_length=7)
    email_subject: Optional[str] = Field(None, min_length=1, max_length=255)
    additional_recipients: Optional[List[EmailStr]] = Field(None, max_length=20)

    @field_validator('cron_time')
    @classmethod
    def validate_cron_time(cls, v):
        if v is not None:
            parse_time(v)
        return v

    @field_validator('timezone')
    @classmethod
    def validate_timezone_name(cls, v):
        if v is not None:
            validate_timezone(v)
        return v

    @field_validator('days_active')
    @classmethod
    def validate_days(cls, v):
        if v is not None:
            day_of_week_expression(v)
        return v

    class Config:
        json_schema_extra = {
            "example": {
                "cron_status": "active",
                "cron_time": "18:30",
                "timezone": "Asia/Kolkata",
                "days_active": ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"],
            }
        }


# Work entries; the tracker form posts camelCase keys

EffortType = Literal[EFFORT_TYPES]


class EffortEntrySchema(BaseModel):
    """One project line of a day's work"""
    projectName: str = Field(..., min_length=1, max_length=200)
    docketNumber: Optional[str] = Field(None, max_length=120)
    effortType: EffortType
    hours: float = Field(..., ge=0, le=24)
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator('projectName', 'docketNumber', 'notes')
    @classmethod
    def strip_text(cls, v):
        if v is None:
            return v
        return v.strip()

    @field_validator('projectName')
    @classmethod
    def require_project_name(cls, v):
        if not v:
            raise ValueError("Project name is required")
        return v


class WorkEntrySubmitSchema(BaseModel):
    """Schema for the tracker form submission"""
    arrivalTime: str = Field(..., min_length=1, max_length=10)
    weekday: Optional[str] = Field(None, max_length=15)
    date: Optional[datetime.date] = None
    entries: List[EffortEntrySchema] = Field(..., min_length=1)

    @field_validator('arrivalTime')
    @classmethod
    def require_arrival_time(cls, v):
        if not v.strip():
            raise ValueError("Arrival time is required")
        return v.strip()

    def to_payload(self):
        payload = self.model_dump(exclude={"entries"})
        payload["entries"] = [entry.model_dump() for entry in self.entries]
        return payload

    class Config:
        json_schema_extra = {
            "example": {
                "arrivalTime": "09:30",
                "entries": [
                    {"projectName": "Acme sensor", "docketNumber": "IN-2026-014", "effortType": "Drafting", "hours": 5.5},
                    {"projectName": "Acme sensor", "docketNumber": "IN-2026-014", "effortType": "Drawing", "hours": 2},
                ],
            }
        }


class WorkEntryQuerySchema(BaseModel):
    startDate: Optional[datetime.date] = None
    endDate: Optional[datetime.date] = None
    employeeId: Optional[int] = Field(None, ge=1)

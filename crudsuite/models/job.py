# crudsuite/models/job.py
from datetime import datetime
from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional

from crudsuite.models.workflow import ApplicationStatus


class JobType(str, Enum):
    FULL_TIME = "Full-time"
    PART_TIME = "Part-time"
    CONTRACT = "Contract"
    INTERNSHIP = "Internship"
    REMOTE = "Remote"


class JobCreate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: str = Field(min_length=1)
    description: str = Field(min_length=1)
    location: str = Field(min_length=1)
    salary: str = Field(min_length=1)
    job_type: JobType = JobType.FULL_TIME
    requirements: str = ""
    experience_level: str = "Entry Level"
    deadline: Optional[datetime] = None


class JobUpdate(BaseModel):
    model_config = ConfigDict(use_enum_values=True)

    title: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = Field(default=None, min_length=1)
    location: Optional[str] = Field(default=None, min_length=1)
    salary: Optional[str] = Field(default=None, min_length=1)
    job_type: Optional[JobType] = None
    requirements: Optional[str] = None
    experience_level: Optional[str] = Field(default=None, min_length=1)
    deadline: Optional[datetime] = None
    is_active: Optional[bool] = None


class ApplicationCreate(BaseModel):
    job_id: str = Field(min_length=1)
    cover_letter: str = ""


class ApplicationDecision(BaseModel):
    status: ApplicationStatus

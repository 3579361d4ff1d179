# Domain enums and pydantic models shared by the store, engine and API

from typing import Dict, Optional
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class IssueCategory(str, Enum):
    GARBAGE = "Garbage"
    BROKEN_PIPELINE = "Broken Pipeline"
    STREET_LIGHT = "Street Light"
    POTHOLE = "Pothole"
    ENCROACHMENT = "Encroachment"
    OTHER = "Other"

class IssueStatus(str, Enum):
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"

class WorkerRole(str, Enum):
    SANITATION = "Sanitation"
    PLUMBER = "Plumber"
    ELECTRICIAN = "Electrician"
    GENERAL = "General"

# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------
class GeoPoint(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)

class Worker(BaseModel):
    id: str = Field(..., min_length=1, max_length=64)
    name: str = Field(..., max_length=200)
    role: WorkerRole
    location: GeoPoint
    active: bool = True
    phone: Optional[str] = Field(None, max_length=32)
    email: Optional[str] = Field(None, max_length=320)

class Issue(BaseModel):
    id: str
    title: str
    description: str
    category: IssueCategory
    image_data_url: Optional[str] = None
    proof_image_url: Optional[str] = None
    location: Optional[GeoPoint] = None
    address: Optional[str] = None
    status: IssueStatus = IssueStatus.PENDING
    created_at: int
    updated_at: int
    due_at: int
    assigned_to_worker_id: Optional[str] = None
    created_by: Optional[str] = None

# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------
class IssueCreate(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: str = Field(..., max_length=5000)
    category: IssueCategory
    image_data_url: Optional[str] = None
    location: Optional[GeoPoint] = None
    address: Optional[str] = Field(None, max_length=500)
    created_by: Optional[str] = Field(None, max_length=100)

    @field_validator("description")
    @classmethod
    def description_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Description is required")
        return v

class IssuePatch(BaseModel):
    title: Optional[str] = Field(None, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    category: Optional[IssueCategory] = None
    status: Optional[IssueStatus] = None
    proof_image_url: Optional[str] = None
    assigned_to_worker_id: Optional[str] = None
    address: Optional[str] = Field(None, max_length=500)
    location: Optional[GeoPoint] = None

class StatusChange(BaseModel):
    status: IssueStatus
    proof_image_url: Optional[str] = None

class WorkerAssignment(BaseModel):
    worker_id: str = Field(..., max_length=64)

class WorkerActivation(BaseModel):
    active: bool

# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------
class SlaStatus(BaseModel):
    overdue: bool
    hours_remaining: int
    due_at: int

class IssueResponse(Issue):
    sla: SlaStatus

class AssignmentResponse(BaseModel):
    outcome: str
    worker: Optional[Worker] = None
    distance_m: Optional[float] = None
    issue: Optional[IssueResponse] = None

class SubmissionResponse(BaseModel):
    issue: IssueResponse
    assignment: AssignmentResponse

class AnalyticsResponse(BaseModel):
    total_issues: int
    pending_count: int = 0
    sla_breached_count: int = 0
    unassigned_count: int = 0
    status_distribution: Dict[str, int] = Field(default_factory=dict)
    category_distribution: Dict[str, int] = Field(default_factory=dict)

"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional, List, Any, Union
from datetime import date, datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class BookingStatus(str, Enum):
    pending = "pending"
    confirmed = "confirmed"
    completed = "completed"
    cancelled = "cancelled"


class StorageKind(str, Enum):
    embedded = "embedded"
    local = "local"
    remote = "remote"


# ============================================================
# CONSULTATION (BOOKING) SCHEMAS
# ============================================================

class BookingRequest(BaseModel):
    """
    Raw booking input. Fields are left as loose strings on purpose:
    the coordinator validates them in a fixed order so clients always get
    the same first error for the same bad input.
    """
    full_name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    meeting_date: Optional[str] = None
    meeting_time: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def coerce_to_str(cls, v: Any) -> Any:
        if v is None or isinstance(v, str):
            return v
        return str(v)

class BookingDetails(BaseModel):
    full_name: str
    email: str
    meeting_date: date
    meeting_time: str
    status: BookingStatus

class BookingCreatedResponse(BaseModel):
    success: bool = True
    message: str
    consultation_id: int
    details: BookingDetails

class BookingResponse(BaseModel):
    id: int
    full_name: str
    email: str
    phone: str
    meeting_date: date
    meeting_time: str
    status: BookingStatus
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

class BookingStatusUpdate(BaseModel):
    status: Optional[str] = None

class BookingStatusResponse(BaseModel):
    success: bool = True
    message: str
    consultation_id: int
    status: BookingStatus


# ============================================================
# ARTIFACT SCHEMAS
# ============================================================

class ArtifactDescriptor(BaseModel):
    """Client-facing description of a stored file; never carries the bytes."""
    id: int
    kind: StorageKind
    original_name: str
    mime_type: str
    url: Optional[str] = None


# ============================================================
# REGISTRATION SCHEMAS
# ============================================================

class RegistrationCreatedResponse(BaseModel):
    message: str = "Registration successful"
    id: int
    cv: ArtifactDescriptor

class RegistrationResponse(BaseModel):
    id: int
    full_name: str
    email: str
    phone: Optional[str] = None
    roles: Optional[str] = None
    cv_name: Optional[str] = None
    created_at: Optional[datetime] = None


# ============================================================
# CONTENT SCHEMAS (courses, FAQs, partners, stories, stats)
# ============================================================

class CourseCreate(BaseModel):
    icon: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    full_description: Optional[str] = None
    duration: Optional[str] = None
    level: Optional[str] = None
    features: Optional[Union[List[str], str]] = None

class CourseResponse(BaseModel):
    id: int
    icon: Optional[str] = None
    title: str
    description: Optional[str] = None
    full_description: Optional[str] = None
    duration: Optional[str] = None
    level: Optional[str] = None
    features: List[str] = []

class FaqCreate(BaseModel):
    question: Optional[str] = None
    answer: Optional[str] = None

class FaqResponse(BaseModel):
    id: int
    question: str
    answer: str

class PartnerResponse(BaseModel):
    id: int
    name: str
    logo_url: Optional[str] = None
    created_at: Optional[datetime] = None

class SuccessStoryResponse(BaseModel):
    id: int
    quote: str
    name: str
    role: Optional[str] = None
    company: Optional[str] = None
    rating: Optional[int] = None
    image: Optional[str] = None
    created_at: Optional[datetime] = None

class SiteStatsUpdate(BaseModel):
    program_duration: Optional[str] = None
    course_tracks: Optional[str] = None
    placement_rate: Optional[str] = None
    industry_mentors: Optional[str] = None
    min_stipend: Optional[str] = None
    max_stipend: Optional[str] = None
    alumni_network: Optional[str] = None
    partner_companies: Optional[str] = None
    average_rating: Optional[str] = None


# ============================================================
# ADMIN SCHEMAS
# ============================================================

class AdminCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)

class AdminLogin(BaseModel):
    email: EmailStr
    password: str

class AdminResponse(BaseModel):
    id: int
    email: str

class TokenResponse(BaseModel):
    message: str = "Login successful"
    access_token: str
    token_type: str = "bearer"
    id: int


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True
    id: Optional[int] = None

class ErrorDetail(BaseModel):
    code: str
    message: str

class ErrorResponse(BaseModel):
    success: bool = False
    error: ErrorDetail

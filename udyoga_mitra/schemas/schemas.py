"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
"""

from pydantic import BaseModel, EmailStr, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum


# ============================================================
# ENUMS
# ============================================================

class UserType(str, Enum):
    student = "student"
    employer = "employer"


class PayType(str, Enum):
    per_hour = "per_hour"
    per_day = "per_day"


class JobStatus(str, Enum):
    active = "active"
    matched = "matched"
    completed = "completed"
    cancelled = "cancelled"


class RequestStatus(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class RequestOutcome(str, Enum):
    accepted = "accepted"
    rejected = "rejected"


class OnboardingState(str, Enum):
    needs_profile = "needs_profile"
    complete = "complete"


# ============================================================
# AUTH SCHEMAS
# ============================================================

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    user_type: UserType

class LoginRequest(BaseModel):
    email: EmailStr
    password: str

class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    account_id: int
    user_type: UserType
    expires_at: datetime

class SessionStateResponse(BaseModel):
    account_id: int
    email: str
    user_type: UserType
    onboarding_state: OnboardingState


# ============================================================
# PROFILE SCHEMAS
# ============================================================

class ProfileBase(BaseModel):
    full_name: str = Field(..., min_length=2, max_length=100)
    age: int = Field(..., ge=14, le=100)
    phone_number: str = Field(..., min_length=7, max_length=20)
    aadhaar_card: str = Field(..., min_length=4, max_length=20)

class StudentProfileCreate(ProfileBase):
    address: str = Field(..., min_length=1)
    college_id: str = Field(..., min_length=1, max_length=100)
    job_availability_hours: str = Field(..., min_length=1, max_length=200)
    skills_evidence_url: Optional[str] = None
    skills: List[str] = []

class EmployerProfileCreate(ProfileBase):
    business_name: str = Field(..., min_length=1, max_length=200)
    business_address: str = Field(..., min_length=1)
    job_type_provided: str = Field(..., min_length=1, max_length=200)

class ProfileUpdate(BaseModel):
    full_name: Optional[str] = Field(None, min_length=2, max_length=100)
    age: Optional[int] = Field(None, ge=14, le=100)
    phone_number: Optional[str] = Field(None, min_length=7, max_length=20)
    aadhaar_card: Optional[str] = Field(None, min_length=4, max_length=20)

class StudentProfileUpdate(BaseModel):
    address: Optional[str] = Field(None, min_length=1)
    college_id: Optional[str] = Field(None, min_length=1, max_length=100)
    job_availability_hours: Optional[str] = Field(None, min_length=1, max_length=200)
    skills_evidence_url: Optional[str] = None
    skills: Optional[List[str]] = None

class EmployerProfileUpdate(BaseModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=200)
    business_address: Optional[str] = Field(None, min_length=1)
    job_type_provided: Optional[str] = Field(None, min_length=1, max_length=200)

class StudentDetails(BaseModel):
    address: str
    college_id: str
    job_availability_hours: str
    skills_evidence_url: Optional[str] = None
    skills: List[str] = []

class EmployerDetails(BaseModel):
    business_name: str
    business_address: str
    job_type_provided: str

class ProfileResponse(BaseModel):
    id: int
    full_name: str
    age: int
    phone_number: str
    aadhaar_card: str
    user_type: UserType
    created_at: datetime
    updated_at: datetime
    student: Optional[StudentDetails] = None
    employer: Optional[EmployerDetails] = None


# ============================================================
# SKILL SCHEMAS
# ============================================================

class SkillResponse(BaseModel):
    id: int
    name: str


# ============================================================
# JOB SCHEMAS
# ============================================================

class JobCreate(BaseModel):
    title: str = Field(..., min_length=3, max_length=200)
    description: str = Field(..., min_length=1)
    hours_of_work: str = Field(..., min_length=1, max_length=200)
    pay_rate: float = Field(..., gt=0)
    pay_type: PayType = PayType.per_hour
    specific_instructions: Optional[str] = None
    contact_email: EmailStr
    whatsapp_number: str = Field(..., min_length=7, max_length=20)
    skills: List[str] = []

class JobUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=3, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    hours_of_work: Optional[str] = Field(None, min_length=1, max_length=200)
    pay_rate: Optional[float] = Field(None, gt=0)
    pay_type: Optional[PayType] = None
    specific_instructions: Optional[str] = None
    contact_email: Optional[EmailStr] = None
    whatsapp_number: Optional[str] = Field(None, min_length=7, max_length=20)
    skills: Optional[List[str]] = None

class JobStatusUpdate(BaseModel):
    status: JobStatus
    matched_student_id: Optional[int] = None

class JobResponse(BaseModel):
    id: int
    employer_id: int
    business_name: Optional[str] = None
    title: str
    description: str
    hours_of_work: str
    pay_rate: float
    pay_type: PayType
    specific_instructions: Optional[str] = None
    contact_email: str
    whatsapp_number: str
    status: JobStatus
    matched_student_id: Optional[int] = None
    skills: List[str] = []
    created_at: datetime
    updated_at: datetime

class MatchedJobResponse(JobResponse):
    matched_skills: List[str] = []

class JobListResponse(BaseModel):
    jobs: List[JobResponse]
    total: int
    page: int
    page_size: int

class MatchedJobListResponse(BaseModel):
    jobs: List[MatchedJobResponse]
    total: int
    student_skills: List[str]

class CandidateResponse(BaseModel):
    student_id: int
    full_name: str
    phone_number: str
    matching_skills_count: int


# ============================================================
# JOB REQUEST SCHEMAS
# ============================================================

class ApplyRequest(BaseModel):
    message: Optional[str] = Field(None, max_length=2000)

class OfferRequest(BaseModel):
    student_id: int
    message: Optional[str] = Field(None, max_length=2000)

class RespondRequest(BaseModel):
    outcome: RequestOutcome

class ContactDetails(BaseModel):
    """Counterparty contact channels, present only on accepted requests."""
    name: str
    phone_number: Optional[str] = None
    email: Optional[str] = None
    whatsapp_number: Optional[str] = None

class JobRequestResponse(BaseModel):
    id: int
    job_id: int
    job_title: str
    student_id: int
    student_name: str
    employer_id: int
    business_name: str
    initiated_by: UserType
    message: Optional[str] = None
    status: RequestStatus
    created_at: datetime
    updated_at: datetime
    responded_at: Optional[datetime] = None
    contact: Optional[ContactDetails] = None


# ============================================================
# MESSAGE SCHEMAS
# ============================================================

class MessageCreate(BaseModel):
    content: str = Field(..., min_length=1, max_length=4000)

class ChatMessageResponse(BaseModel):
    id: int
    job_request_id: int
    sender_id: int
    sender_name: str
    content: str
    created_at: datetime


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class MessageResponse(BaseModel):
    message: str
    success: bool = True

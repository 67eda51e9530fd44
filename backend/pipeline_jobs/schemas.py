from datetime import date, datetime
from typing import Any, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .models import ApplicationStatus, FeedbackCategory, FeedbackStatus, ReportStatus


class CamelModel(BaseModel):
    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# -----------------------------
# Users / auth
# -----------------------------
class RegisterRequest(CamelModel):
    username: str = Field(min_length=3, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str
    timezone: Optional[str] = None
    referred_by: Optional[str] = None

    @field_validator("email", mode="after")
    @classmethod
    def email_lower(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode="after")
    def passwords_match(self) -> "RegisterRequest":
        if self.password != self.confirm_password:
            raise ValueError("Passwords don't match")
        return self


class LoginRequest(CamelModel):
    username: str
    password: str


class UserOut(CamelModel):
    id: int
    username: str
    email: str
    timezone: Optional[str]
    is_admin: bool
    banked_credits: int
    referral_code: Optional[str]
    created_at: datetime


# -----------------------------
# Jobs
# -----------------------------
class JobCreate(CamelModel):
    title: str
    company: str
    location: str
    salary: str = ""
    description: str = ""
    requirements: str = ""
    benefits: Optional[str] = None
    type: str
    source: Optional[str] = None
    source_url: Optional[str] = None
    is_active: bool = True
    published: bool = True


class JobUpdate(CamelModel):
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    salary: Optional[str] = None
    description: Optional[str] = None
    requirements: Optional[str] = None
    benefits: Optional[str] = None
    type: Optional[str] = None
    is_active: Optional[bool] = None
    published: Optional[bool] = None


class JobOut(CamelModel):
    id: int
    title: str
    company: str
    location: str
    salary: str
    description: str
    requirements: str
    benefits: Optional[str]
    type: str
    source: Optional[str]
    source_url: Optional[str]
    is_active: bool
    published: bool


# -----------------------------
# Applications
# -----------------------------
class ApplicationCreate(CamelModel):
    job_id: int
    status: ApplicationStatus = ApplicationStatus.APPLIED
    # accepted for compatibility; the server clock decides which day is charged
    applied_at: Optional[datetime] = None
    cover_letter: Optional[str] = None
    application_data: dict[str, Any] = Field(default_factory=dict)

    @field_validator("status", mode="before")
    @classmethod
    def status_case_insensitive(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ApplicationStatusUpdate(CamelModel):
    status: Optional[ApplicationStatus] = None
    notes: Optional[str] = None

    @field_validator("status", mode="before")
    @classmethod
    def status_case_insensitive(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v


class ApplicationOut(CamelModel):
    id: int
    job_id: int
    user_id: int
    profile_id: Optional[int]
    status: str
    applied_at: datetime
    cover_letter: Optional[str]
    application_data: dict[str, Any]
    notes: Optional[str]
    last_status_update: Optional[datetime]


class ApplicationWithJob(ApplicationOut):
    job: Optional[JobOut]


class CreditsOut(CamelModel):
    remaining: int
    used: int
    limit: int
    day: date
    reset_at: datetime
    reset_in_seconds: int
    banked_credits: int


class CreditAdjustment(CamelModel):
    amount: int


# -----------------------------
# Job reports
# -----------------------------
class ReportCreate(CamelModel):
    job_id: int
    # checked by reports.submit_report for field-level messages
    reason: Optional[str] = None
    comments: Optional[str] = None


class ReportUpdate(CamelModel):
    status: ReportStatus
    admin_notes: Optional[str] = None


class ReportOut(CamelModel):
    id: int
    user_id: int
    job_id: int
    reason: str
    comments: str
    status: str
    created_at: datetime
    reviewed_at: Optional[datetime]
    reviewed_by: Optional[int]
    admin_notes: Optional[str]


class ReportDetailOut(ReportOut):
    job_title: Optional[str] = None
    company: Optional[str] = None
    reporter: Optional[str] = None


# -----------------------------
# Feedback
# -----------------------------
class FeedbackCreate(CamelModel):
    rating: int = Field(ge=1, le=5)
    subject: Optional[str] = Field(default=None, max_length=200)
    category: FeedbackCategory = FeedbackCategory.GENERAL
    comment: str = Field(min_length=10)

    @field_validator("subject", "comment", mode="before")
    @classmethod
    def strip_text(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class FeedbackUpdate(CamelModel):
    status: FeedbackStatus
    admin_response: Optional[str] = None


class FeedbackOut(CamelModel):
    id: int
    user_id: Optional[int]
    rating: int
    subject: Optional[str]
    category: str
    comment: str
    status: str
    admin_response: Optional[str]
    created_at: datetime


# -----------------------------
# Notifications
# -----------------------------
class NotificationOut(CamelModel):
    id: int
    user_id: int
    type: str
    title: str
    message: str
    # ORM attribute is `payload`; `metadata` is taken on declarative models
    payload: dict[str, Any] = Field(default_factory=dict, serialization_alias="metadata")
    read: bool
    created_at: datetime


# -----------------------------
# Referrals
# -----------------------------
class ReferralCodeOut(CamelModel):
    referral_code: Optional[str]
    referral_link: Optional[str] = None
    usage_count: int = 0


class ReferrerOut(CamelModel):
    username: str


# -----------------------------
# Profiles
# -----------------------------
class ProfileBase(CamelModel):
    phone: str = ""
    title: str = ""
    bio: str = ""
    location: str = ""
    skills: list[str] = Field(default_factory=list)
    education: list[dict[str, Any]] = Field(default_factory=list)
    experience: list[dict[str, Any]] = Field(default_factory=list)
    resume_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    github_url: Optional[str] = None
    availability: str = "2 Weeks"
    work_authorization: str = "US Citizen"
    visa_sponsorship: bool = False
    willing_to_relocate: bool = False
    preferred_locations: list[str] = Field(default_factory=list)
    salary_expectation: Optional[str] = None


class ProfileCreate(ProfileBase):
    name: str = Field(min_length=1, max_length=200)
    email: EmailStr


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    title: Optional[str] = None
    bio: Optional[str] = None
    location: Optional[str] = None
    skills: Optional[list[str]] = None
    education: Optional[list[dict[str, Any]]] = None
    experience: Optional[list[dict[str, Any]]] = None
    resume_url: Optional[str] = None
    linkedin_url: Optional[str] = None
    portfolio_url: Optional[str] = None
    github_url: Optional[str] = None
    availability: Optional[str] = None
    work_authorization: Optional[str] = None
    visa_sponsorship: Optional[bool] = None
    willing_to_relocate: Optional[bool] = None
    preferred_locations: Optional[list[str]] = None
    salary_expectation: Optional[str] = None


class ProfileOut(ProfileBase):
    id: int
    user_id: int
    name: str
    email: str
    created_at: datetime
    updated_at: Optional[datetime]


# -----------------------------
# Application messages
# -----------------------------
class MessageCreate(CamelModel):
    content: str = Field(min_length=1, max_length=2000)

    @field_validator("content", mode="before")
    @classmethod
    def strip_content(cls, v):
        if isinstance(v, str):
            return v.strip()
        return v


class ThreadMessageCreate(MessageCreate):
    application_id: int


class MessageOut(CamelModel):
    id: int
    application_id: int
    sender_id: int
    sender: str
    is_from_admin: bool
    content: str
    read: bool
    created_at: datetime

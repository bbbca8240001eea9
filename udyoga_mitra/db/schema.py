"""
Relational schema - table definitions and skill catalog seed.

Tables:
- accounts, auth_sessions: sign-up credentials and live login sessions
- profiles, student_profiles, employer_profiles: onboarding records
- skills, student_skills, job_skills: skill catalog and its links
- jobs, job_requests, messages: listings and the request workflow

Queries elsewhere are plain SQL; these definitions only create the tables.
"""

from sqlalchemy import (
    Boolean, Column, DateTime, Float, ForeignKey, Integer, MetaData, String,
    Table, Text, UniqueConstraint, text
)

from udyoga_mitra.db.database import engine, get_db_session
from udyoga_mitra.utils.logging import get_logger

logger = get_logger(__name__)

metadata = MetaData()


accounts = Table(
    "accounts", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True, index=True),
    Column("password_hash", String(255), nullable=False),
    Column("user_type", String(20), nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
    Column("created_at", DateTime, nullable=False),
)

auth_sessions = Table(
    "auth_sessions", metadata,
    Column("id", String(64), primary_key=True),
    Column("account_id", Integer, ForeignKey("accounts.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("created_at", DateTime, nullable=False),
    Column("expires_at", DateTime, nullable=False),
)

profiles = Table(
    "profiles", metadata,
    Column("id", Integer, ForeignKey("accounts.id", ondelete="CASCADE"), primary_key=True),
    Column("full_name", String(100), nullable=False),
    Column("age", Integer, nullable=False),
    Column("phone_number", String(20), nullable=False),
    Column("aadhaar_card", String(20), nullable=False),
    Column("user_type", String(20), nullable=False),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

student_profiles = Table(
    "student_profiles", metadata,
    Column("id", Integer, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("address", Text, nullable=False),
    Column("college_id", String(100), nullable=False),
    Column("job_availability_hours", String(200), nullable=False),
    Column("skills_evidence_url", String(500)),
    Column("created_at", DateTime, nullable=False),
)

employer_profiles = Table(
    "employer_profiles", metadata,
    Column("id", Integer, ForeignKey("profiles.id", ondelete="CASCADE"), primary_key=True),
    Column("business_name", String(200), nullable=False),
    Column("business_address", Text, nullable=False),
    Column("job_type_provided", String(200), nullable=False),
    Column("created_at", DateTime, nullable=False),
)

skills = Table(
    "skills", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(100), nullable=False, unique=True),
)

student_skills = Table(
    "student_skills", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("student_id", Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("skill_id", Integer, ForeignKey("skills.id"), nullable=False),
    UniqueConstraint("student_id", "skill_id", name="uq_student_skill"),
)

jobs = Table(
    "jobs", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("employer_id", Integer, ForeignKey("employer_profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("title", String(200), nullable=False),
    Column("description", Text, nullable=False),
    Column("hours_of_work", String(200), nullable=False),
    Column("pay_rate", Float, nullable=False),
    Column("pay_type", String(20), nullable=False),
    Column("specific_instructions", Text),
    Column("contact_email", String(255), nullable=False),
    Column("whatsapp_number", String(20), nullable=False),
    Column("status", String(20), nullable=False, default="active", index=True),
    Column("matched_student_id", Integer, ForeignKey("student_profiles.id")),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
)

job_skills = Table(
    "job_skills", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("skill_id", Integer, ForeignKey("skills.id"), nullable=False),
    UniqueConstraint("job_id", "skill_id", name="uq_job_skill"),
)

job_requests = Table(
    "job_requests", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("job_id", Integer, ForeignKey("jobs.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("student_id", Integer, ForeignKey("student_profiles.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("employer_id", Integer, ForeignKey("employer_profiles.id", ondelete="CASCADE"), nullable=False),
    Column("initiated_by", String(20), nullable=False),
    Column("message", Text),
    Column("status", String(20), nullable=False, default="pending"),
    Column("created_at", DateTime, nullable=False),
    Column("updated_at", DateTime, nullable=False),
    Column("responded_at", DateTime),
    # One request per (job, student), whichever side opened it
    UniqueConstraint("job_id", "student_id", name="uq_job_request_pair"),
)

messages = Table(
    "messages", metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("job_request_id", Integer, ForeignKey("job_requests.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("sender_id", Integer, ForeignKey("profiles.id", ondelete="CASCADE"), nullable=False),
    Column("content", Text, nullable=False),
    Column("created_at", DateTime, nullable=False),
)


SKILL_CATALOG = [
    "Data Entry", "Customer Service", "Content Writing", "Graphic Design",
    "Social Media Management", "Event Management", "Video Editing", "Photography",
    "Sales", "Tutoring", "Survey Taking", "Delivery Services", "Reception Work",
    "Email Marketing", "Coding (Web Development)", "Digital Marketing", "Blogging",
    "Technical Support", "Typing", "MS Office (Excel, Word, PowerPoint)",
    "Retail Assistance", "Market Research", "Influencer Collaboration",
    "Transcription", "Public Speaking", "Script Writing", "Voice-over",
    "Virtual Assistance", "Cooking or Catering Support", "Cleaning & Maintenance",
]


def seed_skill_catalog() -> int:
    """Insert catalog skills that are missing. Returns number inserted."""
    inserted = 0
    with get_db_session() as db:
        for name in SKILL_CATALOG:
            result = db.execute(
                text("INSERT INTO skills (name) VALUES (:name) ON CONFLICT (name) DO NOTHING"),
                {"name": name}
            )
            inserted += result.rowcount or 0
    return inserted


def init_db(seed: bool = True) -> None:
    """
    Create all tables (idempotent) and optionally seed the skill catalog.
    Call this once during app startup.
    """
    metadata.create_all(engine)
    if seed:
        inserted = seed_skill_catalog()
        logger.info("Skill catalog seeded", inserted=inserted, catalog_size=len(SKILL_CATALOG))


def drop_db() -> None:
    metadata.drop_all(engine)

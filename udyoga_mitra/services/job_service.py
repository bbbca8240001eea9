"""
Job Listing Service

Employer-owned postings. Only the owning employer may change or delete a
job; everyone signed in may read active ones.

Status lifecycle:
    active  -> matched | completed | cancelled
    matched -> completed | cancelled
    completed, cancelled: terminal
"""

from typing import Optional

from udyoga_mitra.core.auth import SessionContext
from udyoga_mitra.core.errors import (
    ConflictError, InvalidStatusTransitionError, NotFoundError, ValidationFailedError
)
from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import JobRepository, JobRequestRepository, SkillRepository
from udyoga_mitra.utils.logging import get_logger, session_log_context

logger = get_logger(__name__)

JOB_FIELDS = (
    "title", "description", "hours_of_work", "pay_rate", "pay_type",
    "specific_instructions", "contact_email", "whatsapp_number",
)

NULLABLE_JOB_FIELDS = ("specific_instructions",)

ALLOWED_TRANSITIONS = {
    "active": {"matched", "completed", "cancelled"},
    "matched": {"completed", "cancelled"},
    "completed": set(),
    "cancelled": set(),
}

TERMINAL_STATUSES = {status for status, targets in ALLOWED_TRANSITIONS.items() if not targets}


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, set())


class JobService:

    def create_job(self, session: SessionContext, data: dict) -> dict:
        """Insert a job and its skill links together."""
        with get_db_session() as db:
            skills = SkillRepository(db)
            skill_ids = skills.resolve_ids(data.get("skills", []))
            job_id = JobRepository(db).create(session.account_id, data)
            skills.replace_job_skills(job_id, skill_ids)

        logger.info("Job created", job_id=job_id, skills=len(skill_ids), **session_log_context(session))
        return self.get_job(job_id)

    def get_job(self, job_id: int) -> dict:
        with get_db_session() as db:
            job = JobRepository(db).get(job_id)
            if not job:
                raise NotFoundError("Job not found")
            job["skills"] = SkillRepository(db).job_skill_names(job_id)
        return job

    def list_active_jobs(self, page: int, page_size: int, search: Optional[str] = None) -> dict:
        with get_db_session() as db:
            jobs_repo = JobRepository(db)
            total = jobs_repo.count_active(search)
            jobs = jobs_repo.list_active(search, limit=page_size, offset=(page - 1) * page_size)
            skills_by_job = SkillRepository(db).job_skill_names_for([job["id"] for job in jobs])

        for job in jobs:
            job["skills"] = skills_by_job.get(job["id"], [])
        return {"jobs": jobs, "total": total, "page": page, "page_size": page_size}

    def list_employer_jobs(self, session: SessionContext, status: Optional[str] = None) -> list:
        with get_db_session() as db:
            jobs = JobRepository(db).list_for_employer(session.account_id, status)
            skills_by_job = SkillRepository(db).job_skill_names_for([job["id"] for job in jobs])

        for job in jobs:
            job["skills"] = skills_by_job.get(job["id"], [])
        return jobs

    def update_job(self, session: SessionContext, job_id: int, fields: dict, skill_names: Optional[list]) -> dict:
        with get_db_session() as db:
            jobs = JobRepository(db)
            job = self._owned_job(jobs, session, job_id)
            if job["status"] in TERMINAL_STATUSES:
                raise ConflictError(f"Cannot edit a {job['status']} job")

            job_fields = {
                name: value for name, value in fields.items()
                if name in JOB_FIELDS and (value is not None or name in NULLABLE_JOB_FIELDS)
            }
            if job_fields:
                jobs.update(job_id, job_fields)
            if skill_names is not None:
                skills = SkillRepository(db)
                skills.replace_job_skills(job_id, skills.resolve_ids(skill_names))

        logger.info("Job updated", job_id=job_id, fields=sorted(job_fields), **session_log_context(session))
        return self.get_job(job_id)

    def change_status(
        self,
        session: SessionContext,
        job_id: int,
        status: str,
        matched_student_id: Optional[int] = None
    ) -> dict:
        with get_db_session() as db:
            jobs = JobRepository(db)
            job = self._owned_job(jobs, session, job_id)

            if not can_transition(job["status"], status):
                raise InvalidStatusTransitionError(
                    f"Cannot change job status from '{job['status']}' to '{status}'"
                )

            if status == "matched":
                if matched_student_id is None:
                    raise ValidationFailedError("matched_student_id is required to mark a job as matched")
                if not JobRequestRepository(db).has_accepted(job_id, matched_student_id):
                    raise ValidationFailedError("Student has no accepted request for this job")
            else:
                # completed/cancelled keep whoever was matched before
                matched_student_id = job["matched_student_id"]

            jobs.set_status(job_id, status, matched_student_id)

        logger.info(
            "Job status changed",
            job_id=job_id,
            from_status=job["status"],
            to_status=status,
            **session_log_context(session)
        )
        return self.get_job(job_id)

    def delete_job(self, session: SessionContext, job_id: int) -> None:
        """Delete a job with its skill links, requests and messages."""
        with get_db_session() as db:
            jobs = JobRepository(db)
            self._owned_job(jobs, session, job_id)
            jobs.delete(job_id)

        logger.info("Job deleted", job_id=job_id, **session_log_context(session))

    def find_candidates(self, session: SessionContext, job_id: int) -> list:
        with get_db_session() as db:
            jobs = JobRepository(db)
            self._owned_job(jobs, session, job_id)
            return jobs.find_candidates(job_id)

    def _owned_job(self, jobs: JobRepository, session: SessionContext, job_id: int) -> dict:
        job = jobs.get(job_id)
        # Other employers' jobs are reported as missing, not forbidden
        if not job or job["employer_id"] != session.account_id:
            raise NotFoundError("Job not found or access denied")
        return job


def get_job_service() -> JobService:
    """Get job service instance."""
    return JobService()

"""
Skill Matching Service

PURPOSE:
Decide which active jobs a student gets to see, based on skill overlap.

HOW IT WORKS:
1. Normalize both skill lists (trim, lowercase, drop blanks)
2. A job with no required skills is shown to everyone
3. Otherwise the job is shown if any required skill is a substring of a
   student skill, or the other way round ("Typing" ~ "Typing (Hindi)")

The result is a plain yes/no. There is no score and no ordering; listing
order stays whatever the job query returned (newest first).
"""

from typing import Iterable, List, Set

from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import JobRepository, SkillRepository
from udyoga_mitra.utils.logging import get_logger

logger = get_logger(__name__)


def normalize_skills(names: Iterable[str]) -> Set[str]:
    """Lowercased, trimmed, non-blank skill names."""
    return {name.strip().lower() for name in names if name and name.strip()}


def _overlaps(required: str, held: str) -> bool:
    return required in held or held in required


def matches(student_skills: Iterable[str], job_skills: Iterable[str]) -> bool:
    """
    True if the job should be shown to the student.

    Args:
        student_skills: names of the student's skills
        job_skills: names of the job's required skills

    An empty requirement list always matches.
    """
    required = normalize_skills(job_skills)
    if not required:
        return True

    held = normalize_skills(student_skills)
    return any(_overlaps(r, h) for r in required for h in held)


def matched_skills(student_skills: Iterable[str], job_skills: Iterable[str]) -> List[str]:
    """Job skills, as spelled in the catalog, that overlap one of the student's skills."""
    held = normalize_skills(student_skills)
    result = []
    for name in job_skills:
        key = name.strip().lower()
        if key and any(_overlaps(key, h) for h in held):
            result.append(name)
    return result


def filter_jobs_for_student(student_skills: List[str], jobs: List[dict]) -> List[dict]:
    """
    Keep only the jobs the student matches.

    Each job dict must carry a "skills" list; kept jobs gain a
    "matched_skills" list.
    """
    visible = []
    for job in jobs:
        if matches(student_skills, job["skills"]):
            visible.append(dict(job, matched_skills=matched_skills(student_skills, job["skills"])))
    return visible


# ============================================================
# STUDENT DASHBOARD
# ============================================================

class JobMatchingService:
    """Loads a student's skills and the active jobs, then applies the filter."""

    def list_visible_jobs(self, student_id: int, show_all: bool = False) -> dict:
        with get_db_session() as db:
            skills = SkillRepository(db)
            student_skills = skills.student_skill_names(student_id)
            jobs = JobRepository(db).list_active()
            skills_by_job = skills.job_skill_names_for([job["id"] for job in jobs])

        for job in jobs:
            job["skills"] = skills_by_job.get(job["id"], [])

        if show_all:
            visible = [dict(job, matched_skills=matched_skills(student_skills, job["skills"])) for job in jobs]
        else:
            visible = filter_jobs_for_student(student_skills, jobs)

        logger.info(
            "Filtered jobs for student",
            student_id=student_id,
            active_jobs=len(jobs),
            visible_jobs=len(visible),
            show_all=show_all
        )
        return {"jobs": visible, "student_skills": student_skills}


def get_job_matching_service() -> JobMatchingService:
    """Get job matching service instance."""
    return JobMatchingService()

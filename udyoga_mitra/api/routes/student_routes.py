"""
Student Routes

GET /students/jobs - Active jobs that match the student's skills
"""

from fastapi import APIRouter, Depends, Query

from udyoga_mitra.core.auth import SessionContext, get_current_student
from udyoga_mitra.services.matching_service import get_job_matching_service
from udyoga_mitra.schemas.schemas import MatchedJobListResponse

router = APIRouter(prefix="/students", tags=["Students"])


@router.get("/jobs", response_model=MatchedJobListResponse)
async def browse_jobs(
    show_all: bool = Query(False, description="Skip the skill filter"),
    student: SessionContext = Depends(get_current_student)
):
    """
    Active jobs visible to this student.

    A job is shown when it requires no skills, or when one of its skills
    overlaps one of the student's (case-insensitive, either name containing
    the other).
    """
    result = get_job_matching_service().list_visible_jobs(student.account_id, show_all=show_all)
    return MatchedJobListResponse(
        jobs=result["jobs"],
        total=len(result["jobs"]),
        student_skills=result["student_skills"]
    )

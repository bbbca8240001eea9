"""
Employer Routes

GET /employers/jobs - Jobs posted by this employer
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from udyoga_mitra.core.auth import SessionContext, get_current_employer
from udyoga_mitra.services.job_service import get_job_service
from udyoga_mitra.schemas.schemas import JobResponse, JobStatus

router = APIRouter(prefix="/employers", tags=["Employers"])


@router.get("/jobs", response_model=List[JobResponse])
async def get_employer_jobs(
    status: Optional[JobStatus] = Query(None),
    employer: SessionContext = Depends(get_current_employer)
):
    """Get all jobs posted by this employer, newest first."""
    return get_job_service().list_employer_jobs(employer, status.value if status else None)

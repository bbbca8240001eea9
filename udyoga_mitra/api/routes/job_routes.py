"""
Job Routes

POST /jobs - Create job posting (employer only)
GET /jobs - List active jobs with search and pagination
GET /jobs/{job_id} - Get job details
PUT /jobs/{job_id} - Update job (owner only)
PUT /jobs/{job_id}/status - Change job status (owner only)
DELETE /jobs/{job_id} - Delete job with its skills and requests (owner only)
GET /jobs/{job_id}/candidates - Students sharing skills with the job (owner only)
POST /jobs/{job_id}/apply - Apply to job (student only)
POST /jobs/{job_id}/offers - Offer job to a student (owner only)
"""

from fastapi import APIRouter, Depends, Query
from typing import List, Optional

from udyoga_mitra.core.auth import SessionContext, get_profiled_session, get_current_student, get_current_employer
from udyoga_mitra.services.job_service import get_job_service
from udyoga_mitra.services.workflow_service import get_request_workflow
from udyoga_mitra.schemas.schemas import (
    JobCreate, JobUpdate, JobStatusUpdate, JobResponse, JobListResponse, CandidateResponse,
    ApplyRequest, OfferRequest, JobRequestResponse, MessageResponse
)

router = APIRouter(prefix="/jobs", tags=["Jobs"])


@router.post("", response_model=JobResponse, status_code=201)
async def create_job(job: JobCreate, employer: SessionContext = Depends(get_current_employer)):
    """Create a new job posting with its required skills."""
    return get_job_service().create_job(employer, job.model_dump(mode="json"))


@router.get("", response_model=JobListResponse)
async def list_jobs(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=50),
    search: Optional[str] = Query(None, description="Search in title"),
    session: SessionContext = Depends(get_profiled_session)
):
    """List all active job postings, newest first."""
    return get_job_service().list_active_jobs(page, page_size, search)


@router.get("/{job_id}", response_model=JobResponse)
async def get_job(job_id: int, session: SessionContext = Depends(get_profiled_session)):
    """Get details of a specific job."""
    return get_job_service().get_job(job_id)


@router.put("/{job_id}", response_model=JobResponse)
async def update_job(job_id: int, update: JobUpdate, employer: SessionContext = Depends(get_current_employer)):
    """Update a job posting. A skills list replaces the current skills."""
    fields = update.model_dump(mode="json", exclude_unset=True)
    skill_names = fields.pop("skills", None)
    return get_job_service().update_job(employer, job_id, fields, skill_names)


@router.put("/{job_id}/status", response_model=JobResponse)
async def change_job_status(
    job_id: int,
    update: JobStatusUpdate,
    employer: SessionContext = Depends(get_current_employer)
):
    """Move a job through active -> matched -> completed, or cancel it."""
    return get_job_service().change_status(employer, job_id, update.status.value, update.matched_student_id)


@router.delete("/{job_id}", response_model=MessageResponse)
async def delete_job(job_id: int, employer: SessionContext = Depends(get_current_employer)):
    """Delete a job posting. Removes its skill links, requests and messages."""
    get_job_service().delete_job(employer, job_id)
    return MessageResponse(message="Job deleted successfully")


@router.get("/{job_id}/candidates", response_model=List[CandidateResponse])
async def get_candidates(job_id: int, employer: SessionContext = Depends(get_current_employer)):
    """Students with at least one of the job's skills, most shared skills first."""
    return get_job_service().find_candidates(employer, job_id)


@router.post("/{job_id}/apply", response_model=JobRequestResponse, status_code=201)
async def apply_to_job(
    job_id: int,
    application: Optional[ApplyRequest] = None,
    student: SessionContext = Depends(get_current_student)
):
    """Apply to a job. Students only. Cannot apply twice to the same job."""
    message = application.message if application else None
    return get_request_workflow().create_request(student, job_id, student.account_id, message)


@router.post("/{job_id}/offers", response_model=JobRequestResponse, status_code=201)
async def offer_job(job_id: int, offer: OfferRequest, employer: SessionContext = Depends(get_current_employer)):
    """Offer a job to a student. One request per job and student."""
    return get_request_workflow().create_request(employer, job_id, offer.student_id, offer.message)

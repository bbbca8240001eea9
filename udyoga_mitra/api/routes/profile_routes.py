"""
Profile Routes

POST /profiles/student - Onboard as student (profile + details + skills)
POST /profiles/employer - Onboard as employer
GET /profiles/me - Get own profile
PUT /profiles/me - Update base profile fields
PUT /profiles/student - Update student details and skills
PUT /profiles/employer - Update business details
"""

from fastapi import APIRouter, Depends

from udyoga_mitra.core.auth import (
    SessionContext, get_current_session, get_profiled_session, get_current_student, get_current_employer
)
from udyoga_mitra.services.profile_service import get_profile_service
from udyoga_mitra.schemas.schemas import (
    StudentProfileCreate, EmployerProfileCreate, ProfileUpdate, StudentProfileUpdate,
    EmployerProfileUpdate, ProfileResponse
)

router = APIRouter(prefix="/profiles", tags=["Profiles"])


@router.post("/student", response_model=ProfileResponse, status_code=201)
async def create_student_profile(data: StudentProfileCreate, session: SessionContext = Depends(get_current_session)):
    """Create student profile. Account must have signed up as student."""
    return get_profile_service().create_student_profile(session, data.model_dump(mode="json"))


@router.post("/employer", response_model=ProfileResponse, status_code=201)
async def create_employer_profile(data: EmployerProfileCreate, session: SessionContext = Depends(get_current_session)):
    """Create employer profile. Account must have signed up as employer."""
    return get_profile_service().create_employer_profile(session, data.model_dump(mode="json"))


@router.get("/me", response_model=ProfileResponse)
async def get_my_profile(session: SessionContext = Depends(get_profiled_session)):
    return get_profile_service().get_profile(session.account_id)


@router.put("/me", response_model=ProfileResponse)
async def update_my_profile(data: ProfileUpdate, session: SessionContext = Depends(get_profiled_session)):
    """Update base fields. The profile type cannot be changed."""
    return get_profile_service().update_profile(session, data.model_dump(mode="json", exclude_unset=True))


@router.put("/student", response_model=ProfileResponse)
async def update_student_profile(data: StudentProfileUpdate, session: SessionContext = Depends(get_current_student)):
    """Update student details. A skills list replaces the current skills."""
    fields = data.model_dump(mode="json", exclude_unset=True)
    skill_names = fields.pop("skills", None)
    return get_profile_service().update_student_profile(session, fields, skill_names)


@router.put("/employer", response_model=ProfileResponse)
async def update_employer_profile(data: EmployerProfileUpdate, session: SessionContext = Depends(get_current_employer)):
    return get_profile_service().update_employer_profile(session, data.model_dump(mode="json", exclude_unset=True))

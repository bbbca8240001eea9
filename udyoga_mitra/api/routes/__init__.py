"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from udyoga_mitra.api.routes.auth_routes import router as auth_router
from udyoga_mitra.api.routes.profile_routes import router as profile_router
from udyoga_mitra.api.routes.skill_routes import router as skill_router
from udyoga_mitra.api.routes.job_routes import router as job_router
from udyoga_mitra.api.routes.request_routes import router as request_router
from udyoga_mitra.api.routes.student_routes import router as student_router
from udyoga_mitra.api.routes.employer_routes import router as employer_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(profile_router)
api_router.include_router(skill_router)
api_router.include_router(job_router)
api_router.include_router(request_router)
api_router.include_router(student_router)
api_router.include_router(employer_router)

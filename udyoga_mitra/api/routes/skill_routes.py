"""
Skill Catalog Routes

GET /skills - List the skill catalog
"""

from fastapi import APIRouter
from typing import List

from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import SkillRepository
from udyoga_mitra.schemas.schemas import SkillResponse

router = APIRouter(prefix="/skills", tags=["Skills"])


@router.get("", response_model=List[SkillResponse])
async def list_skills():
    """All catalog skills, alphabetical."""
    with get_db_session() as db:
        return SkillRepository(db).list_all()

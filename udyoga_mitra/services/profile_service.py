"""
Profile Service - onboarding and owner updates.

Onboarding writes the base profile, the student / employer row and the
student's skill links in a single transaction: either all of it is stored
or none of it.
"""

from typing import Optional

from udyoga_mitra.core.auth import SessionContext
from udyoga_mitra.core.errors import NotFoundError, PermissionDeniedError, ProfileExistsError
from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import ProfileRepository, SkillRepository
from udyoga_mitra.utils.logging import get_logger, session_log_context

logger = get_logger(__name__)

BASE_FIELDS = ("full_name", "age", "phone_number", "aadhaar_card")
STUDENT_FIELDS = ("address", "college_id", "job_availability_hours", "skills_evidence_url")
NULLABLE_STUDENT_FIELDS = ("skills_evidence_url",)
EMPLOYER_FIELDS = ("business_name", "business_address", "job_type_provided")


class ProfileService:

    def create_student_profile(self, session: SessionContext, data: dict) -> dict:
        self._check_can_onboard(session, "student")

        with get_db_session() as db:
            profiles = ProfileRepository(db)
            skills = SkillRepository(db)
            if profiles.exists(session.account_id):
                raise ProfileExistsError("Profile already exists")

            skill_ids = skills.resolve_ids(data.get("skills", []))
            profiles.create(session.account_id, "student", data)
            profiles.create_student(session.account_id, data)
            skills.replace_student_skills(session.account_id, skill_ids)

        logger.info("Student profile created", skills=len(skill_ids), **session_log_context(session))
        return self.get_profile(session.account_id)

    def create_employer_profile(self, session: SessionContext, data: dict) -> dict:
        self._check_can_onboard(session, "employer")

        with get_db_session() as db:
            profiles = ProfileRepository(db)
            if profiles.exists(session.account_id):
                raise ProfileExistsError("Profile already exists")

            profiles.create(session.account_id, "employer", data)
            profiles.create_employer(session.account_id, data)

        logger.info("Employer profile created", **session_log_context(session))
        return self.get_profile(session.account_id)

    def get_profile(self, profile_id: int) -> dict:
        with get_db_session() as db:
            profiles = ProfileRepository(db)
            profile = profiles.get(profile_id)
            if not profile:
                raise NotFoundError("Profile not found")

            if profile["user_type"] == "student":
                student = profiles.get_student(profile_id)
                if student:
                    student["skills"] = SkillRepository(db).student_skill_names(profile_id)
                profile["student"] = student
            else:
                profile["employer"] = profiles.get_employer(profile_id)

        return profile

    def update_profile(self, session: SessionContext, fields: dict) -> dict:
        fields = _pick(fields, BASE_FIELDS)
        with get_db_session() as db:
            ProfileRepository(db).update(session.account_id, fields)
        logger.info("Profile updated", fields=sorted(fields), **session_log_context(session))
        return self.get_profile(session.account_id)

    def update_student_profile(self, session: SessionContext, fields: dict, skill_names: Optional[list]) -> dict:
        with get_db_session() as db:
            profiles = ProfileRepository(db)
            skills = SkillRepository(db)
            if profiles.get_student(session.account_id) is None:
                raise NotFoundError("Student profile not found")

            student_fields = _pick(fields, STUDENT_FIELDS, nullable=NULLABLE_STUDENT_FIELDS)
            if student_fields:
                profiles.update_student(session.account_id, student_fields)
            if skill_names is not None:
                skills.replace_student_skills(session.account_id, skills.resolve_ids(skill_names))

        logger.info(
            "Student profile updated",
            fields=sorted(student_fields),
            skills_replaced=skill_names is not None,
            **session_log_context(session)
        )
        return self.get_profile(session.account_id)

    def update_employer_profile(self, session: SessionContext, fields: dict) -> dict:
        with get_db_session() as db:
            profiles = ProfileRepository(db)
            if profiles.get_employer(session.account_id) is None:
                raise NotFoundError("Employer profile not found")
            employer_fields = _pick(fields, EMPLOYER_FIELDS)
            if employer_fields:
                profiles.update_employer(session.account_id, employer_fields)

        logger.info("Employer profile updated", fields=sorted(employer_fields), **session_log_context(session))
        return self.get_profile(session.account_id)

    def _check_can_onboard(self, session: SessionContext, user_type: str) -> None:
        # The account's sign-up type decides which profile it may create
        if session.user_type != user_type:
            raise PermissionDeniedError(f"Only {user_type} accounts can create {user_type} profiles")
        if session.has_profile:
            raise ProfileExistsError("Profile already exists")


def _pick(fields: dict, allowed, nullable=()) -> dict:
    """Allowed fields; an explicit None only clears columns listed as nullable."""
    return {
        name: value for name, value in fields.items()
        if name in allowed and (value is not None or name in nullable)
    }


def get_profile_service() -> ProfileService:
    """Get profile service instance."""
    return ProfileService()

"""
Repositories - one typed data-access class per entity.

Each repository wraps an open SQLAlchemy session so that a service can run
several writes (profile + skills, job + skills, job delete) in one
transaction:

    with get_db_session() as db:
        profiles = ProfileRepository(db)
        skills = SkillRepository(db)
        ...

Rows come back as plain dicts. Ownership and visibility checks live in the
services, not here.
"""

from datetime import datetime, timezone
from typing import Dict, Iterable, List, Optional

from sqlalchemy import DateTime, bindparam, text
from sqlalchemy.orm import Session

from udyoga_mitra.core.errors import UnknownSkillError
from udyoga_mitra.db.database import rows_as_dicts


def utcnow() -> datetime:
    """Naive UTC timestamp, matching the timezone-less DateTime columns."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def timestamped(sql: str, *names: str):
    """text() with the named parameters bound as DateTime."""
    return text(sql).bindparams(*(bindparam(name, type_=DateTime) for name in names))


def _first(result) -> Optional[dict]:
    rows = rows_as_dicts(result)
    return rows[0] if rows else None


# ============================================================
# ACCOUNTS & SESSIONS
# ============================================================

class AccountRepository:
    """Sign-up credentials and server-side login sessions."""

    def __init__(self, db: Session):
        self.db = db

    def get_by_email(self, email: str) -> Optional[dict]:
        return _first(self.db.execute(
            text("""
                SELECT id, email, password_hash, user_type, is_active
                FROM accounts WHERE LOWER(email) = LOWER(:email)
            """),
            {"email": email}
        ))

    def create(self, email: str, password_hash: str, user_type: str) -> int:
        result = self.db.execute(
            timestamped("""
                INSERT INTO accounts (email, password_hash, user_type, is_active, created_at)
                VALUES (:email, :password_hash, :user_type, :is_active, :created_at)
                RETURNING id
            """, "created_at"),
            {
                "email": email.lower(),
                "password_hash": password_hash,
                "user_type": user_type,
                "is_active": True,
                "created_at": utcnow()
            }
        )
        return result.scalar_one()

    def create_session(self, session_id: str, account_id: int, expires_at: datetime) -> None:
        self.db.execute(
            timestamped("""
                INSERT INTO auth_sessions (id, account_id, created_at, expires_at)
                VALUES (:id, :account_id, :created_at, :expires_at)
            """, "created_at", "expires_at"),
            {"id": session_id, "account_id": account_id, "created_at": utcnow(), "expires_at": expires_at}
        )

    def get_live_session(self, session_id: str, account_id: int) -> Optional[dict]:
        """Session row if it belongs to the account and has not expired."""
        return _first(self.db.execute(
            timestamped("""
                SELECT s.id, s.account_id, a.email, a.user_type, a.is_active
                FROM auth_sessions s JOIN accounts a ON s.account_id = a.id
                WHERE s.id = :id AND s.account_id = :account_id AND s.expires_at > :now
            """, "now"),
            {"id": session_id, "account_id": account_id, "now": utcnow()}
        ))

    def delete_session(self, session_id: str) -> bool:
        result = self.db.execute(
            text("DELETE FROM auth_sessions WHERE id = :id"),
            {"id": session_id}
        )
        return result.rowcount > 0


# ============================================================
# PROFILES
# ============================================================

class ProfileRepository:
    """Base profiles plus the student / employer detail rows."""

    def __init__(self, db: Session):
        self.db = db

    def get(self, profile_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text("""
                SELECT id, full_name, age, phone_number, aadhaar_card, user_type, created_at, updated_at
                FROM profiles WHERE id = :id
            """),
            {"id": profile_id}
        ))

    def exists(self, profile_id: int) -> bool:
        result = self.db.execute(text("SELECT 1 FROM profiles WHERE id = :id"), {"id": profile_id})
        return result.fetchone() is not None

    def create(self, profile_id: int, user_type: str, data: dict) -> None:
        now = utcnow()
        self.db.execute(
            timestamped("""
                INSERT INTO profiles (id, full_name, age, phone_number, aadhaar_card, user_type, created_at, updated_at)
                VALUES (:id, :full_name, :age, :phone_number, :aadhaar_card, :user_type, :created_at, :updated_at)
            """, "created_at", "updated_at"),
            {
                "id": profile_id,
                "full_name": data["full_name"],
                "age": data["age"],
                "phone_number": data["phone_number"],
                "aadhaar_card": data["aadhaar_card"],
                "user_type": user_type,
                "created_at": now,
                "updated_at": now
            }
        )

    def update(self, profile_id: int, fields: dict) -> None:
        self._update("profiles", profile_id, fields, touch=True)

    def get_student(self, student_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text("""
                SELECT id, address, college_id, job_availability_hours, skills_evidence_url
                FROM student_profiles WHERE id = :id
            """),
            {"id": student_id}
        ))

    def create_student(self, student_id: int, data: dict) -> None:
        self.db.execute(
            timestamped("""
                INSERT INTO student_profiles (id, address, college_id, job_availability_hours, skills_evidence_url, created_at)
                VALUES (:id, :address, :college_id, :job_availability_hours, :skills_evidence_url, :created_at)
            """, "created_at"),
            {
                "id": student_id,
                "address": data["address"],
                "college_id": data["college_id"],
                "job_availability_hours": data["job_availability_hours"],
                "skills_evidence_url": data.get("skills_evidence_url"),
                "created_at": utcnow()
            }
        )

    def update_student(self, student_id: int, fields: dict) -> None:
        self._update("student_profiles", student_id, fields)

    def get_employer(self, employer_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text("""
                SELECT id, business_name, business_address, job_type_provided
                FROM employer_profiles WHERE id = :id
            """),
            {"id": employer_id}
        ))

    def create_employer(self, employer_id: int, data: dict) -> None:
        self.db.execute(
            timestamped("""
                INSERT INTO employer_profiles (id, business_name, business_address, job_type_provided, created_at)
                VALUES (:id, :business_name, :business_address, :job_type_provided, :created_at)
            """, "created_at"),
            {
                "id": employer_id,
                "business_name": data["business_name"],
                "business_address": data["business_address"],
                "job_type_provided": data["job_type_provided"],
                "created_at": utcnow()
            }
        )

    def update_employer(self, employer_id: int, fields: dict) -> None:
        self._update("employer_profiles", employer_id, fields)

    def _update(self, table: str, row_id: int, fields: dict, touch: bool = False) -> None:
        # Column names come from schema field names, never from user input
        updates = [f"{name} = :{name}" for name in fields]
        params = dict(fields, id=row_id)
        names = []
        if touch:
            updates.append("updated_at = :updated_at")
            params["updated_at"] = utcnow()
            names.append("updated_at")
        if not updates:
            return
        self.db.execute(
            timestamped(f"UPDATE {table} SET {', '.join(updates)} WHERE id = :id", *names),
            params
        )


# ============================================================
# SKILL CATALOG
# ============================================================

class SkillRepository:
    """The static skill catalog and the student / job links into it."""

    def __init__(self, db: Session):
        self.db = db

    def list_all(self) -> List[dict]:
        return rows_as_dicts(self.db.execute(text("SELECT id, name FROM skills ORDER BY name")))

    def resolve_ids(self, names: Iterable[str]) -> List[int]:
        """
        Map catalog names (case-insensitive) to skill ids.

        Raises UnknownSkillError naming every name not in the catalog.
        """
        catalog = {row["name"].lower(): row["id"] for row in self.list_all()}
        ids, unknown = [], []
        for name in names:
            skill_id = catalog.get(name.strip().lower())
            if skill_id is None:
                unknown.append(name)
            elif skill_id not in ids:
                ids.append(skill_id)
        if unknown:
            raise UnknownSkillError(unknown)
        return ids

    def student_skill_names(self, student_id: int) -> List[str]:
        result = self.db.execute(
            text("""
                SELECT sk.name FROM student_skills ss
                JOIN skills sk ON ss.skill_id = sk.id
                WHERE ss.student_id = :id ORDER BY sk.name
            """),
            {"id": student_id}
        )
        return [row[0] for row in result.fetchall()]

    def job_skill_names(self, job_id: int) -> List[str]:
        return self.job_skill_names_for([job_id]).get(job_id, [])

    def job_skill_names_for(self, job_ids: List[int]) -> Dict[int, List[str]]:
        if not job_ids:
            return {}
        statement = text("""
            SELECT js.job_id, sk.name FROM job_skills js
            JOIN skills sk ON js.skill_id = sk.id
            WHERE js.job_id IN :job_ids ORDER BY sk.name
        """).bindparams(bindparam("job_ids", expanding=True))
        skills_by_job: Dict[int, List[str]] = {job_id: [] for job_id in job_ids}
        for job_id, name in self.db.execute(statement, {"job_ids": list(job_ids)}).fetchall():
            skills_by_job[job_id].append(name)
        return skills_by_job

    def replace_student_skills(self, student_id: int, skill_ids: List[int]) -> None:
        self.db.execute(text("DELETE FROM student_skills WHERE student_id = :id"), {"id": student_id})
        for skill_id in skill_ids:
            self.db.execute(
                text("INSERT INTO student_skills (student_id, skill_id) VALUES (:student_id, :skill_id)"),
                {"student_id": student_id, "skill_id": skill_id}
            )

    def replace_job_skills(self, job_id: int, skill_ids: List[int]) -> None:
        self.db.execute(text("DELETE FROM job_skills WHERE job_id = :id"), {"id": job_id})
        for skill_id in skill_ids:
            self.db.execute(
                text("INSERT INTO job_skills (job_id, skill_id) VALUES (:job_id, :skill_id)"),
                {"job_id": job_id, "skill_id": skill_id}
            )


# ============================================================
# JOBS
# ============================================================

JOB_COLUMNS = """
    j.id, j.employer_id, e.business_name, j.title, j.description, j.hours_of_work,
    j.pay_rate, j.pay_type, j.specific_instructions, j.contact_email, j.whatsapp_number,
    j.status, j.matched_student_id, j.created_at, j.updated_at
"""


class JobRepository:
    """Employer job listings."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, employer_id: int, data: dict) -> int:
        now = utcnow()
        result = self.db.execute(
            timestamped("""
                INSERT INTO jobs (employer_id, title, description, hours_of_work, pay_rate, pay_type,
                    specific_instructions, contact_email, whatsapp_number, status, created_at, updated_at)
                VALUES (:employer_id, :title, :description, :hours_of_work, :pay_rate, :pay_type,
                    :specific_instructions, :contact_email, :whatsapp_number, 'active', :created_at, :updated_at)
                RETURNING id
            """, "created_at", "updated_at"),
            {
                "employer_id": employer_id,
                "title": data["title"],
                "description": data["description"],
                "hours_of_work": data["hours_of_work"],
                "pay_rate": data["pay_rate"],
                "pay_type": data["pay_type"],
                "specific_instructions": data.get("specific_instructions"),
                "contact_email": data["contact_email"],
                "whatsapp_number": data["whatsapp_number"],
                "created_at": now,
                "updated_at": now
            }
        )
        return result.scalar_one()

    def get(self, job_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text(f"""
                SELECT {JOB_COLUMNS}
                FROM jobs j JOIN employer_profiles e ON j.employer_id = e.id
                WHERE j.id = :id
            """),
            {"id": job_id}
        ))

    def list_active(self, search: Optional[str] = None, limit: Optional[int] = None, offset: int = 0) -> List[dict]:
        sql = f"""
            SELECT {JOB_COLUMNS}
            FROM jobs j JOIN employer_profiles e ON j.employer_id = e.id
            WHERE j.status = 'active'
        """
        params = {}
        if search:
            sql += " AND LOWER(j.title) LIKE :search"
            params["search"] = f"%{search.lower()}%"
        sql += " ORDER BY j.created_at DESC, j.id DESC"
        if limit is not None:
            sql += " LIMIT :limit OFFSET :offset"
            params["limit"] = limit
            params["offset"] = offset
        return rows_as_dicts(self.db.execute(text(sql), params))

    def count_active(self, search: Optional[str] = None) -> int:
        sql = "SELECT COUNT(*) FROM jobs j WHERE j.status = 'active'"
        params = {}
        if search:
            sql += " AND LOWER(j.title) LIKE :search"
            params["search"] = f"%{search.lower()}%"
        return self.db.execute(text(sql), params).scalar_one()

    def list_for_employer(self, employer_id: int, status: Optional[str] = None) -> List[dict]:
        sql = f"""
            SELECT {JOB_COLUMNS}
            FROM jobs j JOIN employer_profiles e ON j.employer_id = e.id
            WHERE j.employer_id = :employer_id
        """
        params = {"employer_id": employer_id}
        if status:
            sql += " AND j.status = :status"
            params["status"] = status
        sql += " ORDER BY j.created_at DESC, j.id DESC"
        return rows_as_dicts(self.db.execute(text(sql), params))

    def update(self, job_id: int, fields: dict) -> None:
        # Column names come from schema field names, never from user input
        updates = [f"{name} = :{name}" for name in fields]
        updates.append("updated_at = :updated_at")
        self.db.execute(
            timestamped(f"UPDATE jobs SET {', '.join(updates)} WHERE id = :id", "updated_at"),
            dict(fields, id=job_id, updated_at=utcnow())
        )

    def set_status(self, job_id: int, status: str, matched_student_id: Optional[int]) -> None:
        self.update(job_id, {"status": status, "matched_student_id": matched_student_id})

    def delete(self, job_id: int) -> bool:
        """Delete a job together with its skill links, requests and their messages."""
        self.db.execute(
            text("""
                DELETE FROM messages WHERE job_request_id IN
                    (SELECT id FROM job_requests WHERE job_id = :id)
            """),
            {"id": job_id}
        )
        self.db.execute(text("DELETE FROM job_requests WHERE job_id = :id"), {"id": job_id})
        self.db.execute(text("DELETE FROM job_skills WHERE job_id = :id"), {"id": job_id})
        result = self.db.execute(text("DELETE FROM jobs WHERE id = :id"), {"id": job_id})
        return result.rowcount > 0

    def find_candidates(self, job_id: int) -> List[dict]:
        """Students sharing at least one catalog skill with the job, most overlap first."""
        return rows_as_dicts(self.db.execute(
            text("""
                SELECT sp.id AS student_id, p.full_name, p.phone_number,
                       COUNT(ss.skill_id) AS matching_skills_count
                FROM student_profiles sp
                JOIN profiles p ON p.id = sp.id
                JOIN student_skills ss ON ss.student_id = sp.id
                JOIN job_skills js ON js.skill_id = ss.skill_id AND js.job_id = :job_id
                GROUP BY sp.id, p.full_name, p.phone_number
                ORDER BY matching_skills_count DESC, p.full_name
            """),
            {"job_id": job_id}
        ))


# ============================================================
# JOB REQUESTS
# ============================================================

REQUEST_SELECT = """
    SELECT r.id, r.job_id, j.title AS job_title, j.status AS job_status,
           j.contact_email, j.whatsapp_number,
           r.student_id, p.full_name AS student_name, p.phone_number AS student_phone,
           r.employer_id, e.business_name,
           r.initiated_by, r.message, r.status, r.created_at, r.updated_at, r.responded_at
    FROM job_requests r
    JOIN jobs j ON r.job_id = j.id
    JOIN profiles p ON r.student_id = p.id
    JOIN employer_profiles e ON r.employer_id = e.id
"""


class JobRequestRepository:
    """Offers (employer → student) and applications (student → employer)."""

    def __init__(self, db: Session):
        self.db = db

    def find_pair(self, job_id: int, student_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text("SELECT id, status FROM job_requests WHERE job_id = :job_id AND student_id = :student_id"),
            {"job_id": job_id, "student_id": student_id}
        ))

    def create(self, job_id: int, student_id: int, employer_id: int, initiated_by: str, message: Optional[str]) -> int:
        now = utcnow()
        result = self.db.execute(
            timestamped("""
                INSERT INTO job_requests (job_id, student_id, employer_id, initiated_by, message, status, created_at, updated_at)
                VALUES (:job_id, :student_id, :employer_id, :initiated_by, :message, 'pending', :created_at, :updated_at)
                RETURNING id
            """, "created_at", "updated_at"),
            {
                "job_id": job_id,
                "student_id": student_id,
                "employer_id": employer_id,
                "initiated_by": initiated_by,
                "message": message,
                "created_at": now,
                "updated_at": now
            }
        )
        return result.scalar_one()

    def get(self, request_id: int) -> Optional[dict]:
        return _first(self.db.execute(text(REQUEST_SELECT + " WHERE r.id = :id"), {"id": request_id}))

    def list_for_student(self, student_id: int, status: Optional[str] = None) -> List[dict]:
        sql = REQUEST_SELECT + " WHERE r.student_id = :student_id"
        params = {"student_id": student_id}
        if status:
            sql += " AND r.status = :status"
            params["status"] = status
        sql += " ORDER BY r.created_at DESC, r.id DESC"
        return rows_as_dicts(self.db.execute(text(sql), params))

    def list_for_employer(self, employer_id: int, status: Optional[str] = None, job_id: Optional[int] = None) -> List[dict]:
        sql = REQUEST_SELECT + " WHERE j.employer_id = :employer_id"
        params = {"employer_id": employer_id}
        if status:
            sql += " AND r.status = :status"
            params["status"] = status
        if job_id:
            sql += " AND r.job_id = :job_id"
            params["job_id"] = job_id
        sql += " ORDER BY r.created_at DESC, r.id DESC"
        return rows_as_dicts(self.db.execute(text(sql), params))

    def resolve(self, request_id: int, status: str) -> bool:
        """
        Move a pending request to its final status.

        Returns False when the request was no longer pending, so only the
        first of two racing responses takes effect.
        """
        now = utcnow()
        result = self.db.execute(
            timestamped("""
                UPDATE job_requests
                SET status = :status, responded_at = :now, updated_at = :now
                WHERE id = :id AND status = 'pending'
            """, "now"),
            {"id": request_id, "status": status, "now": now}
        )
        return result.rowcount > 0

    def has_accepted(self, job_id: int, student_id: int) -> bool:
        result = self.db.execute(
            text("""
                SELECT 1 FROM job_requests
                WHERE job_id = :job_id AND student_id = :student_id AND status = 'accepted'
            """),
            {"job_id": job_id, "student_id": student_id}
        )
        return result.fetchone() is not None


# ============================================================
# MESSAGES
# ============================================================

class MessageRepository:
    """Free-text messages on a job request."""

    def __init__(self, db: Session):
        self.db = db

    def create(self, job_request_id: int, sender_id: int, content: str) -> int:
        result = self.db.execute(
            timestamped("""
                INSERT INTO messages (job_request_id, sender_id, content, created_at)
                VALUES (:job_request_id, :sender_id, :content, :created_at)
                RETURNING id
            """, "created_at"),
            {"job_request_id": job_request_id, "sender_id": sender_id, "content": content, "created_at": utcnow()}
        )
        return result.scalar_one()

    def get(self, message_id: int) -> Optional[dict]:
        return _first(self.db.execute(
            text("""
                SELECT m.id, m.job_request_id, m.sender_id, p.full_name AS sender_name, m.content, m.created_at
                FROM messages m JOIN profiles p ON m.sender_id = p.id
                WHERE m.id = :id
            """),
            {"id": message_id}
        ))

    def list_for_request(self, job_request_id: int) -> List[dict]:
        return rows_as_dicts(self.db.execute(
            text("""
                SELECT m.id, m.job_request_id, m.sender_id, p.full_name AS sender_name, m.content, m.created_at
                FROM messages m JOIN profiles p ON m.sender_id = p.id
                WHERE m.job_request_id = :id
                ORDER BY m.created_at, m.id
            """),
            {"id": job_request_id}
        ))

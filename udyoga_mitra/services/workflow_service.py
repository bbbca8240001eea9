"""
Job Request Workflow

A job request links one student to one job. Either side can open it:
- student applies to a job   (initiated_by = "student")
- employer offers a job      (initiated_by = "employer")

Lifecycle: pending -> accepted | rejected. Only the party that did NOT open
the request may answer, and only once.

Visibility mirrors the row rules of the marketplace: a request, and its
messages, exist only for its student and for the employer owning the job.
Anyone else gets "not found".

Accepted requests expose the counterparty's contact channels in the
response. That is computed when reading; nothing extra is stored.
"""

from typing import Optional

from sqlalchemy.exc import IntegrityError

from udyoga_mitra.core.auth import SessionContext
from udyoga_mitra.core.errors import (
    DuplicateRequestError, NotFoundError, PermissionDeniedError,
    RequestAlreadyResolvedError, ValidationFailedError
)
from udyoga_mitra.db.database import get_db_session
from udyoga_mitra.services.repositories import (
    JobRepository, JobRequestRepository, MessageRepository, ProfileRepository
)
from udyoga_mitra.utils.logging import get_logger, session_log_context

logger = get_logger(__name__)

DEFAULT_APPLICATION_MESSAGE = "I am interested in this position and would like to apply."
DEFAULT_OFFER_MESSAGE = "We would like to offer you this position based on your skills match."

OPEN_JOB_STATUSES = ("active", "matched")


def is_party(request: dict, session: SessionContext) -> bool:
    if session.is_student:
        return request["student_id"] == session.account_id
    return request["employer_id"] == session.account_id


def project_contact(request: dict, session: SessionContext) -> Optional[dict]:
    """Counterparty contact details, only once the request is accepted."""
    if request["status"] != "accepted":
        return None
    if session.is_student:
        return {
            "name": request["business_name"],
            "email": request["contact_email"],
            "whatsapp_number": request["whatsapp_number"],
        }
    return {
        "name": request["student_name"],
        "phone_number": request["student_phone"],
    }


def to_view(request: dict, session: SessionContext) -> dict:
    view = dict(request)
    view["contact"] = project_contact(request, session)
    return view


class JobRequestWorkflow:

    def create_request(
        self,
        session: SessionContext,
        job_id: int,
        student_id: int,
        message: Optional[str] = None
    ) -> dict:
        """
        Open a pending request for (job, student).

        The caller's user type is the initiator. Fails with
        DuplicateRequestError if the pair already has a request, whether
        found up front or by the unique constraint on insert.
        """
        initiator = session.user_type
        try:
            with get_db_session() as db:
                jobs = JobRepository(db)
                requests = JobRequestRepository(db)

                job = jobs.get(job_id)
                if initiator == "student":
                    if student_id != session.account_id:
                        raise PermissionDeniedError("Students can only apply for themselves")
                    if not job:
                        raise NotFoundError("Job not found")
                    default_message = DEFAULT_APPLICATION_MESSAGE
                else:
                    if not job or job["employer_id"] != session.account_id:
                        raise NotFoundError("Job not found or access denied")
                    if ProfileRepository(db).get_student(student_id) is None:
                        raise NotFoundError("Student not found")
                    default_message = DEFAULT_OFFER_MESSAGE

                if job["status"] != "active":
                    raise ValidationFailedError("Job is not accepting requests")

                if requests.find_pair(job_id, student_id):
                    raise DuplicateRequestError("A request already exists for this job and student")

                request_id = requests.create(
                    job_id=job_id,
                    student_id=student_id,
                    employer_id=job["employer_id"],
                    initiated_by=initiator,
                    message=message or default_message
                )
        except IntegrityError:
            # Lost a race with a concurrent insert for the same pair
            logger.warning("Duplicate request rejected by constraint", job_id=job_id, student_id=student_id)
            raise DuplicateRequestError("A request already exists for this job and student")

        logger.info(
            "Job request created",
            request_id=request_id,
            job_id=job_id,
            student_id=student_id,
            initiated_by=initiator,
            **session_log_context(session)
        )
        return self.get_request(session, request_id)

    def respond(self, session: SessionContext, request_id: int, outcome: str) -> dict:
        """
        Accept or reject a pending request.

        Only the receiving party may respond. A second response fails with
        RequestAlreadyResolvedError and leaves the first outcome in place.
        """
        if outcome not in ("accepted", "rejected"):
            raise ValidationFailedError("Outcome must be 'accepted' or 'rejected'")

        with get_db_session() as db:
            requests = JobRequestRepository(db)
            request = self._visible_request(requests, session, request_id)

            if request["initiated_by"] == session.user_type:
                raise PermissionDeniedError("Only the receiving party can respond to this request")

            if request["status"] != "pending":
                raise RequestAlreadyResolvedError(f"Request already {request['status']}")

            # Contact details must not open up on a closed listing
            if outcome == "accepted" and request["job_status"] not in OPEN_JOB_STATUSES:
                raise ValidationFailedError(f"Job is {request['job_status']}; the request can only be rejected")

            if not requests.resolve(request_id, outcome):
                raise RequestAlreadyResolvedError("Request already answered")

        logger.info(
            "Job request answered",
            request_id=request_id,
            outcome=outcome,
            **session_log_context(session)
        )
        return self.get_request(session, request_id)

    def get_request(self, session: SessionContext, request_id: int) -> dict:
        with get_db_session() as db:
            request = self._visible_request(JobRequestRepository(db), session, request_id)
        return to_view(request, session)

    def list_requests(
        self,
        session: SessionContext,
        status: Optional[str] = None,
        job_id: Optional[int] = None,
        initiated_by: Optional[str] = None
    ) -> list:
        with get_db_session() as db:
            requests = JobRequestRepository(db)
            if session.is_student:
                rows = requests.list_for_student(session.account_id, status)
                if job_id:
                    rows = [row for row in rows if row["job_id"] == job_id]
            else:
                rows = requests.list_for_employer(session.account_id, status, job_id)

        if initiated_by:
            rows = [row for row in rows if row["initiated_by"] == initiated_by]
        return [to_view(row, session) for row in rows]

    # ========================================================
    # MESSAGES
    # ========================================================

    def post_message(self, session: SessionContext, request_id: int, content: str) -> dict:
        with get_db_session() as db:
            self._visible_request(JobRequestRepository(db), session, request_id)
            messages = MessageRepository(db)
            message_id = messages.create(request_id, session.account_id, content)
            message = messages.get(message_id)

        logger.info("Message posted", request_id=request_id, message_id=message_id, **session_log_context(session))
        return message

    def list_messages(self, session: SessionContext, request_id: int) -> list:
        with get_db_session() as db:
            self._visible_request(JobRequestRepository(db), session, request_id)
            return MessageRepository(db).list_for_request(request_id)

    def _visible_request(self, requests: JobRequestRepository, session: SessionContext, request_id: int) -> dict:
        request = requests.get(request_id)
        if not request or not is_party(request, session):
            raise NotFoundError("Job request not found")
        return request


def get_request_workflow() -> JobRequestWorkflow:
    """Get job request workflow instance."""
    return JobRequestWorkflow()

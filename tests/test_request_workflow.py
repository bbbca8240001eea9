"""Tests for applications, offers, responses, contact exchange and messages."""

import pytest

from udyoga_mitra.core.auth import SessionContext
from udyoga_mitra.core.errors import DuplicateRequestError, RequestAlreadyResolvedError
from udyoga_mitra.db.database import execute_raw_sql
from udyoga_mitra.services.repositories import JobRequestRepository
from udyoga_mitra.services.workflow_service import DEFAULT_APPLICATION_MESSAGE, get_request_workflow


@pytest.fixture
def marketplace(client, make_employer, make_student, make_job):
    """One employer with one job, one student, and an unrelated second student."""
    employer, employer_id = make_employer()
    student, student_id = make_student(skills=["Data Entry"])
    outsider, _ = make_student(email="outsider@example.com", full_name="Outsider")
    job = make_job(employer, skills=["Data Entry"])
    return {
        "employer": employer,
        "employer_id": employer_id,
        "student": student,
        "student_id": student_id,
        "outsider": outsider,
        "job": job,
    }


def apply(client, m, message=None):
    body = {"message": message} if message else None
    return client.post(f"/api/jobs/{m['job']['id']}/apply", json=body, headers=m["student"])


def offer(client, m, message=None):
    return client.post(
        f"/api/jobs/{m['job']['id']}/offers",
        json={"student_id": m["student_id"], "message": message},
        headers=m["employer"]
    )


def student_session(m):
    return SessionContext(
        account_id=m["student_id"],
        email="student@example.com",
        user_type="student",
        session_id="test",
        has_profile=True
    )


def respond(client, request_id, outcome, headers):
    return client.put(f"/api/requests/{request_id}/respond", json={"outcome": outcome}, headers=headers)


class TestCreateRequest:

    def test_application_is_pending(self, client, marketplace):
        response = apply(client, marketplace)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "pending"
        assert body["initiated_by"] == "student"
        assert body["student_id"] == marketplace["student_id"]
        assert body["employer_id"] == marketplace["employer_id"]
        assert body["message"] == DEFAULT_APPLICATION_MESSAGE
        assert body["contact"] is None

    def test_offer_keeps_custom_message(self, client, marketplace):
        response = offer(client, marketplace, message="Can you start Monday?")

        assert response.status_code == 201
        assert response.json()["initiated_by"] == "employer"
        assert response.json()["message"] == "Can you start Monday?"

    def test_second_application_conflicts(self, client, marketplace):
        apply(client, marketplace)

        response = apply(client, marketplace)

        assert response.status_code == 409

    def test_offer_after_application_conflicts(self, client, marketplace):
        apply(client, marketplace)

        response = offer(client, marketplace)

        assert response.status_code == 409
        assert len(execute_raw_sql("SELECT id FROM job_requests")) == 1

    def test_offer_to_unknown_student(self, client, marketplace):
        response = client.post(
            f"/api/jobs/{marketplace['job']['id']}/offers",
            json={"student_id": 9999},
            headers=marketplace["employer"]
        )
        assert response.status_code == 404

    def test_offer_on_someone_elses_job(self, client, marketplace, make_employer):
        other, _ = make_employer(email="other@example.com", business_name="Other Co")

        response = client.post(
            f"/api/jobs/{marketplace['job']['id']}/offers",
            json={"student_id": marketplace["student_id"]},
            headers=other
        )

        assert response.status_code == 404

    def test_cannot_apply_to_closed_job(self, client, marketplace):
        client.put(
            f"/api/jobs/{marketplace['job']['id']}/status",
            json={"status": "cancelled"},
            headers=marketplace["employer"]
        )

        assert apply(client, marketplace).status_code == 400

    def test_employers_cannot_apply(self, client, marketplace):
        response = client.post(f"/api/jobs/{marketplace['job']['id']}/apply", headers=marketplace["employer"])
        assert response.status_code == 403

    def test_constraint_catches_racing_insert(self, marketplace, monkeypatch):
        # Both racers pass the up-front check; the unique constraint decides
        monkeypatch.setattr(JobRequestRepository, "find_pair", lambda self, job_id, student_id: None)
        session = student_session(marketplace)
        workflow = get_request_workflow()
        job_id = marketplace["job"]["id"]

        workflow.create_request(session, job_id, marketplace["student_id"])
        with pytest.raises(DuplicateRequestError):
            workflow.create_request(session, job_id, marketplace["student_id"])

        assert len(execute_raw_sql("SELECT id FROM job_requests")) == 1


class TestRespond:

    def test_employer_accepts_application(self, client, marketplace):
        request = apply(client, marketplace).json()

        response = respond(client, request["id"], "accepted", marketplace["employer"])

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"
        assert response.json()["responded_at"] is not None

    def test_student_accepts_offer(self, client, marketplace):
        request = offer(client, marketplace).json()

        response = respond(client, request["id"], "accepted", marketplace["student"])

        assert response.status_code == 200
        assert response.json()["status"] == "accepted"

    def test_initiator_cannot_respond(self, client, marketplace):
        request = apply(client, marketplace).json()

        response = respond(client, request["id"], "accepted", marketplace["student"])

        assert response.status_code == 403

    def test_second_response_keeps_first_outcome(self, client, marketplace):
        request = offer(client, marketplace).json()
        respond(client, request["id"], "rejected", marketplace["student"])

        response = respond(client, request["id"], "accepted", marketplace["student"])

        assert response.status_code == 409
        current = client.get(f"/api/requests/{request['id']}", headers=marketplace["student"]).json()
        assert current["status"] == "rejected"

    def test_outsider_sees_request_as_missing(self, client, marketplace):
        request = offer(client, marketplace).json()

        assert respond(client, request["id"], "accepted", marketplace["outsider"]).status_code == 404
        assert client.get(f"/api/requests/{request['id']}", headers=marketplace["outsider"]).status_code == 404

    @pytest.mark.parametrize("closed_status", ["cancelled", "completed"])
    def test_closed_job_request_can_only_be_rejected(self, client, marketplace, closed_status):
        request = apply(client, marketplace).json()
        client.put(
            f"/api/jobs/{marketplace['job']['id']}/status",
            json={"status": closed_status},
            headers=marketplace["employer"]
        )

        accepted = respond(client, request["id"], "accepted", marketplace["employer"])

        assert accepted.status_code == 400
        current = client.get(f"/api/requests/{request['id']}", headers=marketplace["employer"]).json()
        assert current["status"] == "pending"
        assert current["contact"] is None

        rejected = respond(client, request["id"], "rejected", marketplace["employer"])
        assert rejected.status_code == 200
        assert rejected.json()["status"] == "rejected"

    def test_losing_a_response_race_reports_answered(self, client, marketplace, monkeypatch):
        request_id = offer(client, marketplace).json()["id"]
        # Another response lands between the read and the conditional update
        monkeypatch.setattr(JobRequestRepository, "resolve", lambda self, request_id, status: False)
        session = student_session(marketplace)

        with pytest.raises(RequestAlreadyResolvedError) as error:
            get_request_workflow().respond(session, request_id, "accepted")

        assert error.value.detail == "Request already answered"

    def test_invalid_outcome(self, client, marketplace):
        request = offer(client, marketplace).json()

        response = respond(client, request["id"], "pending", marketplace["student"])

        assert response.status_code == 422


class TestContactExchange:

    def test_contacts_shared_once_accepted(self, client, marketplace):
        request = apply(client, marketplace).json()
        respond(client, request["id"], "accepted", marketplace["employer"])

        student_view = client.get(f"/api/requests/{request['id']}", headers=marketplace["student"]).json()
        employer_view = client.get(f"/api/requests/{request['id']}", headers=marketplace["employer"]).json()

        assert student_view["contact"]["name"] == "Kumar Traders"
        assert student_view["contact"]["email"] == marketplace["job"]["contact_email"]
        assert student_view["contact"]["whatsapp_number"] == marketplace["job"]["whatsapp_number"]
        assert employer_view["contact"]["name"] == "Asha Rao"
        assert employer_view["contact"]["phone_number"] == "9876543210"

    def test_no_contacts_after_rejection(self, client, marketplace):
        request = apply(client, marketplace).json()

        response = respond(client, request["id"], "rejected", marketplace["employer"])

        assert response.json()["contact"] is None


class TestInbox:

    def test_each_side_sees_its_requests(self, client, marketplace):
        apply(client, marketplace)

        student_inbox = client.get("/api/requests", headers=marketplace["student"]).json()
        employer_inbox = client.get("/api/requests", headers=marketplace["employer"]).json()
        outsider_inbox = client.get("/api/requests", headers=marketplace["outsider"]).json()

        assert len(student_inbox) == 1
        assert [r["id"] for r in employer_inbox] == [student_inbox[0]["id"]]
        assert outsider_inbox == []

    def test_filters(self, client, marketplace):
        request = apply(client, marketplace).json()
        employer = marketplace["employer"]

        assert client.get("/api/requests", params={"status": "accepted"}, headers=employer).json() == []
        assert client.get("/api/requests", params={"initiated_by": "employer"}, headers=employer).json() == []
        pending = client.get("/api/requests", params={"status": "pending"}, headers=employer).json()
        assert [r["id"] for r in pending] == [request["id"]]


class TestMessages:

    def test_parties_exchange_messages_in_order(self, client, marketplace):
        request = apply(client, marketplace).json()
        url = f"/api/requests/{request['id']}/messages"

        first = client.post(url, json={"content": "Is the shift flexible?"}, headers=marketplace["student"])
        client.post(url, json={"content": "Yes, mornings or evenings."}, headers=marketplace["employer"])

        assert first.status_code == 201
        assert first.json()["sender_name"] == "Asha Rao"
        messages = client.get(url, headers=marketplace["employer"]).json()
        assert [m["content"] for m in messages] == ["Is the shift flexible?", "Yes, mornings or evenings."]
        assert messages[1]["sender_id"] == marketplace["employer_id"]

    def test_outsider_cannot_read_or_post(self, client, marketplace):
        request = apply(client, marketplace).json()
        url = f"/api/requests/{request['id']}/messages"

        assert client.get(url, headers=marketplace["outsider"]).status_code == 404
        assert client.post(url, json={"content": "hi"}, headers=marketplace["outsider"]).status_code == 404

    def test_empty_message_is_rejected(self, client, marketplace):
        request = apply(client, marketplace).json()

        response = client.post(
            f"/api/requests/{request['id']}/messages",
            json={"content": ""},
            headers=marketplace["student"]
        )

        assert response.status_code == 422

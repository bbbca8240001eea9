"""Tests for job listings, status changes, deletion and candidate search."""

import pytest

from udyoga_mitra.db.database import execute_raw_sql
from udyoga_mitra.services.job_service import can_transition
from tests.conftest import job_payload


class TestJobListings:

    def test_create_job_with_skills(self, client, make_employer):
        headers, employer_id = make_employer()

        response = client.post("/api/jobs", json=job_payload(skills=["Typing", "Data Entry"]), headers=headers)

        assert response.status_code == 201
        job = response.json()
        assert job["employer_id"] == employer_id
        assert job["business_name"] == "Kumar Traders"
        assert job["status"] == "active"
        assert job["pay_type"] == "per_hour"
        assert job["skills"] == ["Data Entry", "Typing"]

    def test_unknown_job_skill_creates_nothing(self, client, make_employer):
        headers, _ = make_employer()

        response = client.post("/api/jobs", json=job_payload(skills=["Juggling"]), headers=headers)

        assert response.status_code == 400
        assert execute_raw_sql("SELECT id FROM jobs") == []

    def test_students_cannot_post_jobs(self, client, make_student):
        headers, _ = make_student()

        response = client.post("/api/jobs", json=job_payload(), headers=headers)

        assert response.status_code == 403

    def test_list_active_jobs_newest_first(self, client, make_employer, make_job, make_student):
        employer, _ = make_employer()
        first = make_job(employer, title="Morning shift")
        second = make_job(employer, title="Evening shift")
        student, _ = make_student()

        response = client.get("/api/jobs", headers=student)

        body = response.json()
        assert body["total"] == 2
        assert [job["id"] for job in body["jobs"]] == [second["id"], first["id"]]

    def test_search_and_pagination(self, client, make_employer, make_job):
        employer, _ = make_employer()
        make_job(employer, title="Data entry clerk")
        make_job(employer, title="Delivery rider")
        make_job(employer, title="Data analyst helper")

        response = client.get("/api/jobs", params={"search": "DATA", "page_size": 1}, headers=employer)

        body = response.json()
        assert body["total"] == 2
        assert len(body["jobs"]) == 1
        assert body["jobs"][0]["title"] == "Data analyst helper"

    def test_get_missing_job(self, client, make_employer):
        headers, _ = make_employer()
        assert client.get("/api/jobs/999", headers=headers).status_code == 404

    def test_owner_updates_job_and_skills(self, client, make_employer, make_job):
        headers, _ = make_employer()
        job = make_job(headers, skills=["Typing"])

        response = client.put(
            f"/api/jobs/{job['id']}",
            json={"pay_rate": 200, "skills": ["Sales"]},
            headers=headers
        )

        assert response.status_code == 200
        assert response.json()["pay_rate"] == 200
        assert response.json()["skills"] == ["Sales"]
        assert response.json()["title"] == job["title"]

    def test_clear_specific_instructions(self, client, make_employer, make_job):
        headers, _ = make_employer()
        job = make_job(headers, specific_instructions="Bring your own laptop")

        response = client.put(
            f"/api/jobs/{job['id']}",
            json={"specific_instructions": None, "title": None},
            headers=headers
        )

        assert response.status_code == 200
        assert response.json()["specific_instructions"] is None
        assert response.json()["title"] == job["title"]

    def test_other_employer_sees_job_as_missing(self, client, make_employer, make_job):
        owner, _ = make_employer()
        job = make_job(owner)
        other, _ = make_employer(email="other@example.com", business_name="Other Co")

        assert client.put(f"/api/jobs/{job['id']}", json={"pay_rate": 1}, headers=other).status_code == 404
        assert client.delete(f"/api/jobs/{job['id']}", headers=other).status_code == 404
        assert client.get(f"/api/jobs/{job['id']}/candidates", headers=other).status_code == 404

    def test_employer_dashboard_lists_own_jobs(self, client, make_employer, make_job):
        owner, _ = make_employer()
        mine = make_job(owner)
        other, _ = make_employer(email="other@example.com", business_name="Other Co")
        make_job(other)

        response = client.get("/api/employers/jobs", headers=owner)

        assert [job["id"] for job in response.json()] == [mine["id"]]


class TestJobStatus:

    @pytest.mark.parametrize("current,target,allowed", [
        ("active", "matched", True),
        ("active", "completed", True),
        ("active", "cancelled", True),
        ("matched", "completed", True),
        ("matched", "active", False),
        ("completed", "cancelled", False),
        ("cancelled", "active", False),
    ])
    def test_transition_table(self, current, target, allowed):
        assert can_transition(current, target) is allowed

    def test_cancel_removes_job_from_listing(self, client, make_employer, make_job):
        headers, _ = make_employer()
        job = make_job(headers)

        response = client.put(f"/api/jobs/{job['id']}/status", json={"status": "cancelled"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["status"] == "cancelled"
        assert client.get("/api/jobs", headers=headers).json()["total"] == 0

    def test_terminal_status_cannot_change(self, client, make_employer, make_job):
        headers, _ = make_employer()
        job = make_job(headers)
        client.put(f"/api/jobs/{job['id']}/status", json={"status": "completed"}, headers=headers)

        response = client.put(f"/api/jobs/{job['id']}/status", json={"status": "cancelled"}, headers=headers)

        assert response.status_code == 409

    @pytest.mark.parametrize("closed_status", ["cancelled", "completed"])
    def test_closed_job_cannot_be_edited(self, client, make_employer, make_job, closed_status):
        headers, _ = make_employer()
        job = make_job(headers, skills=["Typing"])
        client.put(f"/api/jobs/{job['id']}/status", json={"status": closed_status}, headers=headers)

        response = client.put(f"/api/jobs/{job['id']}", json={"pay_rate": 500, "skills": []}, headers=headers)

        assert response.status_code == 409
        current = client.get(f"/api/jobs/{job['id']}", headers=headers).json()
        assert current["pay_rate"] == job["pay_rate"]
        assert current["skills"] == ["Typing"]

    def test_matched_requires_accepted_request(self, client, make_employer, make_student, make_job):
        employer, _ = make_employer()
        student, student_id = make_student()
        job = make_job(employer)
        url = f"/api/jobs/{job['id']}/status"

        assert client.put(url, json={"status": "matched"}, headers=employer).status_code == 400
        assert client.put(
            url, json={"status": "matched", "matched_student_id": student_id}, headers=employer
        ).status_code == 400

        request = client.post(f"/api/jobs/{job['id']}/apply", headers=student).json()
        client.put(f"/api/requests/{request['id']}/respond", json={"outcome": "accepted"}, headers=employer)

        response = client.put(url, json={"status": "matched", "matched_student_id": student_id}, headers=employer)

        assert response.status_code == 200
        assert response.json()["status"] == "matched"
        assert response.json()["matched_student_id"] == student_id

        response = client.put(url, json={"status": "completed"}, headers=employer)
        assert response.json()["status"] == "completed"
        assert response.json()["matched_student_id"] == student_id


class TestJobDeletion:

    def test_delete_removes_skills_requests_and_messages(self, client, make_employer, make_student, make_job):
        employer, _ = make_employer()
        student, _ = make_student()
        job = make_job(employer, skills=["Typing", "Sales"])
        request = client.post(f"/api/jobs/{job['id']}/apply", headers=student).json()
        client.post(f"/api/requests/{request['id']}/messages", json={"content": "Hello"}, headers=student)

        response = client.delete(f"/api/jobs/{job['id']}", headers=employer)

        assert response.status_code == 200
        assert response.json()["message"] == "Job deleted successfully"
        params = {"id": job["id"]}
        assert execute_raw_sql("SELECT id FROM job_skills WHERE job_id = :id", params) == []
        assert execute_raw_sql("SELECT id FROM job_requests WHERE job_id = :id", params) == []
        assert execute_raw_sql("SELECT id FROM messages") == []
        assert client.get(f"/api/jobs/{job['id']}", headers=employer).status_code == 404
        assert client.get("/api/requests", headers=student).json() == []


class TestCandidates:

    def test_candidates_ranked_by_shared_skills(self, client, make_employer, make_student, make_job):
        employer, _ = make_employer()
        _, strong_id = make_student(email="a@example.com", skills=["Data Entry", "Typing"], full_name="Anil")
        _, weak_id = make_student(email="b@example.com", skills=["Sales"], full_name="Bina")
        make_student(email="c@example.com", skills=["Photography"], full_name="Chitra")
        job = make_job(employer, skills=["Data Entry", "Typing", "Sales"])

        response = client.get(f"/api/jobs/{job['id']}/candidates", headers=employer)

        assert response.status_code == 200
        candidates = response.json()
        assert [c["student_id"] for c in candidates] == [strong_id, weak_id]
        assert [c["matching_skills_count"] for c in candidates] == [2, 1]

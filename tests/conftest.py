"""Shared fixtures: a throwaway SQLite database and API helpers."""

import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="udyoga-mitra-tests-")

# Settings are read once at import time, so these must be set first
os.environ["DATABASE_URL"] = f"sqlite:///{_DB_DIR}/test.db"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["DEBUG"] = "false"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from udyoga_mitra.db.schema import drop_db, init_db
from udyoga_mitra.main import app

PASSWORD = "correct-horse-1"


@pytest.fixture
def fresh_db():
    """Empty schema with the skill catalog seeded."""
    drop_db()
    init_db(seed=True)
    yield


@pytest.fixture
def client(fresh_db):
    return TestClient(app)


def register_and_login(client, email, user_type, password=PASSWORD):
    """Register an account and return (auth headers, account id)."""
    response = client.post(
        "/api/auth/register",
        json={"email": email, "password": password, "user_type": user_type}
    )
    assert response.status_code == 201, response.text

    response = client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    body = response.json()
    return {"Authorization": f"Bearer {body['access_token']}"}, body["account_id"]


def student_payload(full_name="Asha Rao", skills=None, **overrides):
    payload = {
        "full_name": full_name,
        "age": 20,
        "phone_number": "9876543210",
        "aadhaar_card": "123412341234",
        "address": "12 MG Road, Bengaluru",
        "college_id": "COL-001",
        "job_availability_hours": "Weekends, 10am-4pm",
        "skills": skills if skills is not None else [],
    }
    payload.update(overrides)
    return payload


def employer_payload(full_name="Ravi Kumar", business_name="Kumar Traders", **overrides):
    payload = {
        "full_name": full_name,
        "age": 40,
        "phone_number": "9123456780",
        "aadhaar_card": "567856785678",
        "business_name": business_name,
        "business_address": "5 Market Street, Mysuru",
        "job_type_provided": "Retail",
    }
    payload.update(overrides)
    return payload


def job_payload(title="Data entry assistant", skills=None, **overrides):
    payload = {
        "title": title,
        "description": "Enter sales records into spreadsheets.",
        "hours_of_work": "4 hours/day",
        "pay_rate": 150,
        "pay_type": "per_hour",
        "contact_email": "jobs@kumartraders.in",
        "whatsapp_number": "9123456780",
        "skills": skills if skills is not None else [],
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_student(client):
    """Factory: signed-in student with a completed profile."""
    def _make(email="student@example.com", skills=None, full_name="Asha Rao"):
        headers, account_id = register_and_login(client, email, "student")
        response = client.post(
            "/api/profiles/student",
            json=student_payload(full_name=full_name, skills=skills),
            headers=headers
        )
        assert response.status_code == 201, response.text
        return headers, account_id
    return _make


@pytest.fixture
def make_employer(client):
    """Factory: signed-in employer with a completed profile."""
    def _make(email="employer@example.com", business_name="Kumar Traders"):
        headers, account_id = register_and_login(client, email, "employer")
        response = client.post(
            "/api/profiles/employer",
            json=employer_payload(business_name=business_name),
            headers=headers
        )
        assert response.status_code == 201, response.text
        return headers, account_id
    return _make


@pytest.fixture
def make_job(client):
    """Factory: job posted by the given employer."""
    def _make(headers, title="Data entry assistant", skills=None, **overrides):
        response = client.post("/api/jobs", json=job_payload(title=title, skills=skills, **overrides), headers=headers)
        assert response.status_code == 201, response.text
        return response.json()
    return _make

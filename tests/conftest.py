"""
Test fixtures and factories.

The API runs against an in-memory mongomock database injected through
FastAPI dependency overrides, so no MongoDB server is needed.
"""

import os
import tempfile

# must be set before the app (and its cached settings) is imported
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET_KEY"] = "test-secret-key-for-the-placement-portal"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="portal-uploads-")
os.environ["MAX_UPLOAD_MB"] = "1"

from datetime import datetime, timedelta
from io import BytesIO

import mongomock
import pytest
from bson import ObjectId
from fastapi.testclient import TestClient
from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from app.main import app
from app.core.rate_limit import limiter
from app.db.mongodb import get_db, init_mongo_indexes


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Every test starts with empty per-IP counters."""
    limiter.reset()
    yield


@pytest.fixture
def db():
    """Fresh in-memory database with the production indexes."""
    database = mongomock.MongoClient()["placement_portal_test"]
    init_mongo_indexes(database)
    return database


@pytest.fixture
def client(db):
    app.dependency_overrides[get_db] = lambda: db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def college(db):
    """A seeded college, returned as its id string."""
    result = db.colleges.insert_one({
        "name": "Test Institute of Technology",
        "created_at": datetime.utcnow(),
        "updated_at": datetime.utcnow(),
    })
    return str(result.inserted_id)


@pytest.fixture
def other_college(db):
    result = db.colleges.insert_one({"name": "Other Engineering College"})
    return str(result.inserted_id)


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def register(client, college):
    """
    Factory: register a user through the API.

    Returns {"user", "token", "headers", "id", "principal"}.
    """
    counter = {"n": 0}

    def _register(role: str = "Student", email: str = None, college_id: str = None, **overrides):
        counter["n"] += 1
        details = {
            "Student": {"course_name": "B.Tech CSE", "college": college_id or college},
            "Recruiter": {"company_name": "Acme Corp", "industry": "Software", "designation": "HR Manager"},
            "TnP": {"college": college_id or college, "designation": "Placement Officer"},
        }[role]
        details.update(overrides.pop("details", {}))
        payload = {
            "full_name": f"{role} User {counter['n']}",
            "email": email or f"{role.lower()}{counter['n']}@example.com",
            "mobile_number": "9876543210",
            "password": "secret123",
            "role": role,
            "details": details,
        }
        payload.update(overrides)
        res = client.post("/api/auth/register", json=payload)
        assert res.status_code == 201, res.text
        # register sets a cookie; keep requests explicit about who is calling
        client.cookies.clear()
        data = res.json()["data"]
        user = data["user"]
        return {
            "user": user,
            "token": data["token"],
            "headers": auth(data["token"]),
            "id": user["_id"],
            "principal": {"user_id": user["_id"], "email": user["email"], "role": role},
        }
    return _register


@pytest.fixture
def student(register):
    return register("Student")


@pytest.fixture
def verified_student(register, db):
    s = register("Student")
    db.users.update_one({"_id": ObjectId(s["id"])}, {"$set": {"details.is_verified": True}})
    return s


@pytest.fixture
def recruiter(register):
    return register("Recruiter")


@pytest.fixture
def tnp(register):
    return register("TnP")


def job_payload(**overrides) -> dict:
    data = {
        "title": "Backend Engineer",
        "description": "Build and run the placement APIs",
        "company_name": "Acme Corp",
        "location": "Bangalore",
        "job_type": "Full-time",
        "designation": "SDE 1",
        "skills_required": ["Python", "MongoDB"],
        "ctc": {"min": 6, "max": 10},
        "application_deadline": (datetime.utcnow() + timedelta(days=30)).isoformat(),
    }
    data.update(overrides)
    return data


@pytest.fixture
def job_data():
    """Factory for a valid job payload."""
    return job_payload


@pytest.fixture
def create_job(client, recruiter):
    """Factory: recruiter posts a job (Pending)."""
    def _create_job(owner=None, **overrides):
        owner = owner or recruiter
        res = client.post("/api/jobs", json=job_payload(**overrides), headers=owner["headers"])
        assert res.status_code == 201, res.text
        return res.json()["data"]
    return _create_job


@pytest.fixture
def approved_job(client, create_job, tnp):
    job = create_job()
    res = client.put(f"/api/jobs/{job['_id']}/approve", json={}, headers=tnp["headers"])
    assert res.status_code == 200, res.text
    return res.json()["data"]


@pytest.fixture
def pdf_bytes():
    """A small, valid one-page PDF."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    c.drawString(100, 750, "Jane Doe - Resume")
    c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture
def apply(client, pdf_bytes):
    """Factory: student applies to a job with a valid PDF resume."""
    def _apply(student, job_id, content=None, filename="resume.pdf", mimetype="application/pdf"):
        files = {"resume": (filename, content if content is not None else pdf_bytes, mimetype)}
        return client.post(f"/api/applications/apply/{job_id}", files=files, headers=student["headers"])
    return _apply

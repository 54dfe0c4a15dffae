"""
Tests for the resume builder and PDF export.
"""

from io import BytesIO

from PyPDF2 import PdfReader


def resume_payload(**overrides) -> dict:
    data = {
        "personal_details": {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "phone": "9876543210",
            "github": "https://github.com/janedoe",
        },
        "education": [{
            "degree": "B.Tech",
            "institution": "Test Institute of Technology",
            "field": "Computer Science",
            "cgpa": 8.9,
            "year_of_completion": 2025,
        }],
        "skills": {
            "technical": [{"name": "Python", "proficiency": "Advanced"}],
            "soft": ["Communication"],
            "languages": [{"name": "English", "proficiency": "Fluent"}],
        },
        "projects": [{
            "title": "Placement Portal",
            "description": "Job and application tracking for campus placements.",
            "tech_used": ["FastAPI", "MongoDB"],
        }],
    }
    data.update(overrides)
    return data


class TestResumeBuilder:

    def test_create_and_get(self, client, db, student):
        res = client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        assert res.status_code == 201
        resume = res.json()["data"]
        assert resume["student_id"] == student["id"]
        assert resume["is_complete"] is True
        assert resume["visibility"] == {"public": False, "recruiters_only": True}
        assert db.activity_logs.find_one({"action": "RESUME_CREATE"}) is not None

        res = client.get("/api/resume", headers=student["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["personal_details"]["name"] == "Jane Doe"

    def test_only_one_resume(self, client, student):
        client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        res = client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        assert res.status_code == 409

    def test_incomplete_resume(self, client, student):
        res = client.post("/api/resume", json=resume_payload(education=[]), headers=student["headers"])
        assert res.json()["data"]["is_complete"] is False

    def test_get_before_create(self, client, student):
        assert client.get("/api/resume", headers=student["headers"]).status_code == 404

    def test_partial_update(self, client, student):
        client.post("/api/resume", json=resume_payload(education=[]), headers=student["headers"])
        res = client.put(
            "/api/resume",
            json={
                "personal_details": {"phone": "9999999999"},
                "education": resume_payload()["education"],
            },
            headers=student["headers"],
        )
        assert res.status_code == 200
        resume = res.json()["data"]
        assert resume["personal_details"]["phone"] == "9999999999"
        assert resume["personal_details"]["name"] == "Jane Doe"
        assert resume["is_complete"] is True

    def test_update_requires_a_field(self, client, student):
        client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        assert client.put("/api/resume", json={}, headers=student["headers"]).status_code == 400

    def test_recruiter_cannot_create(self, client, recruiter):
        assert client.post("/api/resume", json=resume_payload(), headers=recruiter["headers"]).status_code == 403


class TestResumeAccess:

    def test_recruiter_and_tnp_view_student_resume(self, client, student, recruiter, tnp):
        client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        for viewer in (recruiter, tnp):
            res = client.get(f"/api/resume/{student['id']}", headers=viewer["headers"])
            assert res.status_code == 200
            data = res.json()["data"]
            assert data["student"]["_id"] == student["id"]
            assert "password_hash" not in data["student"]

    def test_student_cannot_view_others(self, client, student, register):
        client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        other = register("Student")
        assert client.get(f"/api/resume/{student['id']}", headers=other["headers"]).status_code == 403

    def test_missing_resume(self, client, student, recruiter):
        assert client.get(f"/api/resume/{student['id']}", headers=recruiter["headers"]).status_code == 404


class TestResumePdf:

    def test_download_pdf(self, client, student):
        client.post("/api/resume", json=resume_payload(), headers=student["headers"])
        res = client.get("/api/resume/pdf", headers=student["headers"])
        assert res.status_code == 200
        assert res.headers["content-type"] == "application/pdf"
        assert 'filename="Jane_Doe_resume.pdf"' in res.headers["content-disposition"]

        reader = PdfReader(BytesIO(res.content))
        assert len(reader.pages) >= 1
        assert "Jane Doe" in reader.pages[0].extract_text()

    def test_pdf_without_resume(self, client, student):
        assert client.get("/api/resume/pdf", headers=student["headers"]).status_code == 404

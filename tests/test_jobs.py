"""
Tests for the job lifecycle: posting, approval, visibility and deletion.
"""

from datetime import datetime, timedelta
from unittest.mock import patch

import pytest
from bson import ObjectId

from app.core.errors import BadRequestError
from app.services.job_service import JobService


class TestCreateJob:

    def test_recruiter_creates_pending_job(self, client, db, recruiter, job_data):
        res = client.post("/api/jobs", json=job_data(), headers=recruiter["headers"])
        assert res.status_code == 201
        job = res.json()["data"]
        assert job["status"] == "Pending"
        assert job["posted_by"] == recruiter["id"]
        assert job["application_count"] == 0
        assert job["is_active"] is True

        log = db.activity_logs.find_one({"action": "JOB_CREATE"})
        assert str(log["entity_id"]) == job["_id"]

    def test_student_cannot_create_job(self, client, student, job_data):
        res = client.post("/api/jobs", json=job_data(), headers=student["headers"])
        assert res.status_code == 403

    def test_deadline_must_be_in_future(self, client, recruiter, job_data):
        past = (datetime.utcnow() - timedelta(days=1)).isoformat()
        res = client.post("/api/jobs", json=job_data(application_deadline=past), headers=recruiter["headers"])
        assert res.status_code == 400
        fields = [d["field"] for d in res.json()["error"]["details"]]
        assert "application_deadline" in fields

    def test_ctc_min_cannot_exceed_max(self, client, recruiter, job_data):
        res = client.post("/api/jobs", json=job_data(ctc={"min": 12, "max": 6}), headers=recruiter["headers"])
        assert res.status_code == 400

    def test_negative_ctc(self, client, recruiter, job_data):
        res = client.post("/api/jobs", json=job_data(ctc={"min": -1, "max": 6}), headers=recruiter["headers"])
        assert res.status_code == 400


class TestApproveReject:

    def test_approve_sets_approver_and_clears_reason(self, client, db, create_job, tnp, recruiter):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}/approve", json={"approval_notes": "Looks good"},
                         headers=tnp["headers"])
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["status"] == "Approved"
        assert data["approved_by"] == tnp["id"]
        assert data.get("rejection_reason") is None

        note = db.notifications.find_one({"recipient": ObjectId(recruiter["id"])})
        assert note["title"] == "Job Approved"
        assert note["type"] == "Job"
        assert note["priority"] == "High"

    def test_approve_without_body(self, client, create_job, tnp):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}/approve", headers=tnp["headers"])
        assert res.status_code == 200

    def test_reject_stores_reason_and_unsets_approver(self, client, create_job, tnp):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}/reject", json={"rejection_reason": "Incomplete JD"},
                         headers=tnp["headers"])
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["status"] == "Rejected"
        assert data["rejection_reason"] == "Incomplete JD"
        assert data.get("approved_by") is None

    def test_reject_requires_reason(self, client, create_job, tnp):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}/reject", json={"rejection_reason": "   "},
                         headers=tnp["headers"])
        assert res.status_code == 400

    def test_only_pending_jobs_can_be_reviewed(self, client, approved_job, tnp):
        res = client.put(f"/api/jobs/{approved_job['_id']}/approve", json={}, headers=tnp["headers"])
        assert res.status_code == 400
        res = client.put(f"/api/jobs/{approved_job['_id']}/reject", json={"rejection_reason": "late"},
                         headers=tnp["headers"])
        assert res.status_code == 400

    def test_recruiter_cannot_approve(self, client, create_job, recruiter):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}/approve", json={}, headers=recruiter["headers"])
        assert res.status_code == 403

    def test_unknown_job(self, client, tnp):
        res = client.put(f"/api/jobs/{ObjectId()}/approve", json={}, headers=tnp["headers"])
        assert res.status_code == 404
        res = client.put("/api/jobs/not-an-id/approve", json={}, headers=tnp["headers"])
        assert res.status_code == 404

    def test_concurrent_review_moves_job_once(self, db, create_job, tnp, register, recruiter):
        job = create_job()
        other_tnp = register("TnP")
        service = JobService(db)
        real_update = service.collection.update_one
        pending = [lambda: JobService(db).reject(other_tnp["id"], job["_id"], "Duplicate posting")]

        def update_after_rival(*args, **kwargs):
            if pending:
                pending.pop()()
            return real_update(*args, **kwargs)

        with patch.object(service.collection, "update_one", side_effect=update_after_rival):
            with pytest.raises(BadRequestError):
                service.approve(tnp["id"], job["_id"])

        stored = db.jobs.find_one({"_id": ObjectId(job["_id"])})
        assert stored["status"] == "Rejected"
        assert "approved_by" not in stored
        assert db.notifications.count_documents({"recipient": ObjectId(recruiter["id"])}) == 1
        assert db.activity_logs.find_one({"action": "JOB_APPROVE"}) is None


class TestUpdateJob:

    def test_owner_updates_pending_job(self, client, create_job, recruiter):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}", json={"title": "Senior Backend Engineer"},
                         headers=recruiter["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["title"] == "Senior Backend Engineer"

    def test_cannot_update_approved_job(self, client, approved_job, recruiter):
        res = client.put(f"/api/jobs/{approved_job['_id']}", json={"title": "Changed"},
                         headers=recruiter["headers"])
        assert res.status_code == 400
        assert res.json()["error"]["message"] == "Cannot update approved jobs"

    def test_cannot_update_rejected_job(self, client, create_job, tnp, recruiter):
        job = create_job()
        client.put(f"/api/jobs/{job['_id']}/reject", json={"rejection_reason": "no"}, headers=tnp["headers"])
        res = client.put(f"/api/jobs/{job['_id']}", json={"title": "Changed"}, headers=recruiter["headers"])
        assert res.status_code == 400

    def test_other_recruiter_cannot_update(self, client, create_job, register):
        job = create_job()
        other = register("Recruiter")
        res = client.put(f"/api/jobs/{job['_id']}", json={"title": "Mine now"}, headers=other["headers"])
        assert res.status_code == 403

    def test_empty_patch_is_rejected(self, client, create_job, recruiter):
        job = create_job()
        res = client.put(f"/api/jobs/{job['_id']}", json={}, headers=recruiter["headers"])
        assert res.status_code == 400


class TestVisibility:

    def test_student_sees_only_open_approved_jobs(self, client, db, create_job, approved_job, student):
        create_job(title="Still pending")
        expired = create_job(title="Expired")
        db.jobs.update_one(
            {"_id": ObjectId(expired["_id"])},
            {"$set": {"status": "Approved", "application_deadline": datetime.utcnow() - timedelta(days=1)}},
        )

        res = client.get("/api/jobs", headers=student["headers"])
        assert res.status_code == 200
        body = res.json()
        assert [j["_id"] for j in body["data"]] == [approved_job["_id"]]
        assert body["pagination"] == {"page": 1, "limit": 10, "total": 1, "totalPages": 1}

    def test_student_status_filter_is_ignored(self, client, create_job, approved_job, student):
        create_job(title="Pending one")
        res = client.get("/api/jobs?status=Pending", headers=student["headers"])
        assert [j["_id"] for j in res.json()["data"]] == [approved_job["_id"]]

    def test_recruiter_sees_only_own_jobs(self, client, create_job, register, recruiter):
        create_job()
        other = register("Recruiter")
        create_job(owner=other, title="Other job")

        res = client.get("/api/jobs", headers=recruiter["headers"])
        assert res.json()["pagination"]["total"] == 1
        assert res.json()["data"][0]["posted_by"] == recruiter["id"]

    def test_tnp_sees_all_and_can_filter(self, client, create_job, approved_job, tnp):
        create_job(title="Another")
        res = client.get("/api/jobs", headers=tnp["headers"])
        assert res.json()["pagination"]["total"] == 2

        res = client.get("/api/jobs?status=Approved", headers=tnp["headers"])
        assert [j["_id"] for j in res.json()["data"]] == [approved_job["_id"]]

    def test_search_and_location_filters(self, client, create_job, tnp):
        create_job(title="Data Analyst", location="Pune")
        create_job(title="Frontend Engineer", location="Bangalore")

        res = client.get("/api/jobs?search=analyst", headers=tnp["headers"])
        assert [j["title"] for j in res.json()["data"]] == ["Data Analyst"]

        res = client.get("/api/jobs?location=bangal", headers=tnp["headers"])
        assert [j["title"] for j in res.json()["data"]] == ["Frontend Engineer"]

    def test_pagination_falls_back_on_bad_values(self, client, create_job, tnp):
        for i in range(3):
            create_job(title=f"Job {i}")
        res = client.get("/api/jobs?page=0&limit=500", headers=tnp["headers"])
        assert res.json()["pagination"] == {"page": 1, "limit": 10, "total": 3, "totalPages": 1}

        res = client.get("/api/jobs?page=2&limit=2", headers=tnp["headers"])
        body = res.json()
        assert len(body["data"]) == 1
        assert body["pagination"]["totalPages"] == 2

    def test_student_cannot_open_pending_job(self, client, create_job, student):
        job = create_job()
        res = client.get(f"/api/jobs/{job['_id']}", headers=student["headers"])
        assert res.status_code == 404

    def test_student_opens_approved_job(self, client, approved_job, student):
        res = client.get(f"/api/jobs/{approved_job['_id']}", headers=student["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["title"] == approved_job["title"]


class TestDeleteJob:

    def test_owner_soft_deletes(self, client, db, create_job, recruiter, tnp):
        job = create_job()
        res = client.delete(f"/api/jobs/{job['_id']}", headers=recruiter["headers"])
        assert res.status_code == 200

        stored = db.jobs.find_one({"_id": ObjectId(job["_id"])})
        assert stored is not None
        assert stored["is_active"] is False

        # hidden from every role afterwards
        assert client.get("/api/jobs", headers=tnp["headers"]).json()["pagination"]["total"] == 0
        assert client.get(f"/api/jobs/{job['_id']}", headers=tnp["headers"]).status_code == 404

    def test_tnp_can_delete(self, client, create_job, tnp):
        job = create_job()
        assert client.delete(f"/api/jobs/{job['_id']}", headers=tnp["headers"]).status_code == 200

    def test_cannot_delete_job_with_applications(self, client, approved_job, verified_student, recruiter, apply):
        assert apply(verified_student, approved_job["_id"]).status_code == 201
        res = client.delete(f"/api/jobs/{approved_job['_id']}", headers=recruiter["headers"])
        assert res.status_code == 400

    def test_student_cannot_delete(self, client, create_job, student):
        job = create_job()
        assert client.delete(f"/api/jobs/{job['_id']}", headers=student["headers"]).status_code == 403

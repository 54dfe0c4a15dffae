"""
Tests for profiles, uploads and TnP student management.
"""

import os

from bson import ObjectId

from app.core.config import get_settings


def on_disk(path: str) -> str:
    return os.path.join(get_settings().upload_dir, path.replace("/uploads/", "", 1))


class TestProfile:

    def test_get_me_populates_college(self, client, student, college):
        res = client.get("/api/users/me", headers=student["headers"])
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["details"]["college"] == {"_id": college, "name": "Test Institute of Technology"}
        assert "password_hash" not in data

    def test_update_top_level_and_details(self, client, db, student):
        res = client.put(
            "/api/users/me",
            json={
                "full_name": "Jane Doe",
                "details": {"cgpa": 8.7, "tenth_percentage": 92.5, "area_of_interest": ["Data Science"]},
            },
            headers=student["headers"],
        )
        assert res.status_code == 200
        data = res.json()["data"]
        assert data["full_name"] == "Jane Doe"
        assert data["details"]["cgpa"] == 8.7
        assert data["details"]["tenth_marks"]["percentage"] == 92.5
        assert data["details"]["area_of_interest"] == ["Data Science"]
        # untouched fields survive
        assert data["details"]["course_name"] == "B.Tech CSE"
        assert db.activity_logs.find_one({"action": "PROFILE_UPDATE"}) is not None

    def test_student_cannot_self_verify(self, client, db, student):
        res = client.put("/api/users/me", json={"details": {"is_verified": True}}, headers=student["headers"])
        assert res.status_code == 400
        assert res.json()["error"]["details"][0]["field"] == "details.is_verified"
        stored = db.users.find_one({"_id": ObjectId(student["id"])})
        assert stored["details"]["is_verified"] is False

    def test_student_cannot_change_college(self, client, student, other_college):
        res = client.put("/api/users/me", json={"details": {"college": other_college}}, headers=student["headers"])
        assert res.status_code == 400

    def test_recruiter_updates_company_details(self, client, recruiter):
        res = client.put("/api/users/me", json={"details": {"company_website": "https://acme.example.com"}},
                         headers=recruiter["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["details"]["company_website"] == "https://acme.example.com"

    def test_recruiter_cannot_send_student_fields(self, client, recruiter):
        res = client.put("/api/users/me", json={"details": {"cgpa": 9}}, headers=recruiter["headers"])
        assert res.status_code == 400

    def test_empty_update(self, client, student):
        assert client.put("/api/users/me", json={}, headers=student["headers"]).status_code == 400


class TestUploads:

    def test_avatar_upload(self, client, student):
        png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
        res = client.post("/api/users/me/avatar", files={"avatar": ("me.png", png, "image/png")},
                          headers=student["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["profile_avatar"].startswith("/uploads/avatars/")

    def test_avatar_rejects_pdf(self, client, student, pdf_bytes):
        res = client.post("/api/users/me/avatar", files={"avatar": ("me.pdf", pdf_bytes, "application/pdf")},
                          headers=student["headers"])
        assert res.status_code == 400

    def test_marksheet_upload(self, client, student, pdf_bytes):
        res = client.post(
            "/api/users/me/marksheet",
            data={"kind": "twelfth"},
            files={"marksheet": ("12th.pdf", pdf_bytes, "application/pdf")},
            headers=student["headers"],
        )
        assert res.status_code == 200
        marks = res.json()["data"]["details"]["twelfth_marks"]
        assert marks["marksheet"].startswith("/uploads/marksheets/")

    def test_marksheet_is_student_only(self, client, recruiter, pdf_bytes):
        res = client.post(
            "/api/users/me/marksheet",
            data={"kind": "tenth"},
            files={"marksheet": ("10th.pdf", pdf_bytes, "application/pdf")},
            headers=recruiter["headers"],
        )
        assert res.status_code == 403

    def test_new_avatar_replaces_old_file(self, client, db, student):
        png = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32
        paths = []
        for name in ("first.png", "second.png"):
            res = client.post("/api/users/me/avatar", files={"avatar": (name, png, "image/png")},
                              headers=student["headers"])
            assert res.status_code == 200
            paths.append(res.json()["data"]["profile_avatar"])

        assert paths[0] != paths[1]
        assert not os.path.exists(on_disk(paths[0]))
        assert os.path.exists(on_disk(paths[1]))
        assert db.activity_logs.count_documents({"action": "AVATAR_UPLOAD"}) == 2

    def test_new_marksheet_replaces_old_file(self, client, db, student, pdf_bytes):
        paths = []
        for _ in range(2):
            res = client.post(
                "/api/users/me/marksheet",
                data={"kind": "last_semester"},
                files={"marksheet": ("sem.pdf", pdf_bytes, "application/pdf")},
                headers=student["headers"],
            )
            assert res.status_code == 200
            paths.append(res.json()["data"]["details"]["last_semester_marksheet"])

        assert not os.path.exists(on_disk(paths[0]))
        assert os.path.exists(on_disk(paths[1]))
        log = db.activity_logs.find_one({"action": "MARKSHEET_UPLOAD"})
        assert log["details"]["kind"] == "last_semester"


class TestStudentManagement:

    def test_list_students_of_own_college(self, client, register, other_college, tnp):
        mine = register("Student")
        register("Student", college_id=other_college)

        res = client.get("/api/users/students", headers=tnp["headers"])
        assert res.status_code == 200
        body = res.json()
        assert [s["_id"] for s in body["data"]] == [mine["id"]]
        assert body["pagination"]["total"] == 1

    def test_list_filters(self, client, db, register, tnp):
        a = register("Student", full_name="Alice Kumar")
        register("Student", full_name="Bob Singh", details={"course_name": "MCA"})
        db.users.update_one({"_id": ObjectId(a["id"])}, {"$set": {"details.is_verified": True}})

        assert client.get("/api/users/students?search=alice",
                          headers=tnp["headers"]).json()["pagination"]["total"] == 1
        assert client.get("/api/users/students?course=MCA",
                          headers=tnp["headers"]).json()["data"][0]["full_name"] == "Bob Singh"
        assert client.get("/api/users/students?verified=true",
                          headers=tnp["headers"]).json()["data"][0]["_id"] == a["id"]
        assert client.get("/api/users/students?placement_status=Placed",
                          headers=tnp["headers"]).json()["pagination"]["total"] == 0

    def test_students_cannot_list(self, client, student):
        assert client.get("/api/users/students", headers=student["headers"]).status_code == 403

    def test_verify_and_unverify(self, client, db, student, tnp):
        res = client.put(f"/api/users/students/{student['id']}/verify", json={"is_verified": True},
                         headers=tnp["headers"])
        assert res.status_code == 200
        assert res.json()["data"]["details"]["is_verified"] is True

        note = db.notifications.find_one({"recipient": ObjectId(student["id"])})
        assert note["type"] == "System"

        res = client.put(f"/api/users/students/{student['id']}/verify",
                         json={"is_verified": False, "reason": "Documents mismatch"},
                         headers=tnp["headers"])
        assert res.json()["data"]["details"]["is_verified"] is False
        assert db.activity_logs.find_one({"action": "STUDENT_UNVERIFY"})["details"]["reason"] == "Documents mismatch"

    def test_cannot_verify_other_college(self, client, register, other_college, tnp):
        outsider = register("Student", college_id=other_college)
        res = client.put(f"/api/users/students/{outsider['id']}/verify", json={"is_verified": True},
                         headers=tnp["headers"])
        assert res.status_code == 403

    def test_verify_unknown_student(self, client, tnp):
        res = client.put(f"/api/users/students/{ObjectId()}/verify", json={"is_verified": True},
                         headers=tnp["headers"])
        assert res.status_code == 404

    def test_deactivate_student(self, client, db, student, tnp):
        res = client.delete(f"/api/users/students/{student['id']}", headers=tnp["headers"])
        assert res.status_code == 200
        assert db.users.find_one({"_id": ObjectId(student["id"])})["is_active"] is False
        # the old token stops working
        assert client.get("/api/users/me", headers=student["headers"]).status_code == 403

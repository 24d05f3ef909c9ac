"""Tests for reading and recording marks."""

import logging

import pytest

from school_admin.models.people import Student
from school_admin.services import records

STUDENT = Student(
    id=5,
    id_number="eSBA020",
    first_name="Kwame",
    last_name="Owusu",
    class_name="BS7",
    academic_year="2024/2025",
)


@pytest.fixture
def fake_records(monkeypatch):
    calls = {}

    async def find_student(db, student_ref):
        calls["find_student"] = student_ref
        return STUDENT if str(student_ref) in ("5", "eSBA020") else None

    async def load_marks(db, class_name=None, student_id=None, term=None, subjects=None):
        calls["load_marks"] = {
            "class_name": class_name,
            "student_id": student_id,
            "term": term,
            "subjects": None if subjects is None else set(subjects),
        }
        rows = [
            {"id": 1, "student_id": 5, "subject": "Mathematics", "term": "First Term", "total": 55},
            {"id": 2, "student_id": 6, "subject": "Mathematics", "term": "First Term", "total": 81},
        ]
        return [row for row in rows if subjects is None or row["subject"] in subjects]

    async def save_mark(db, student, subject, term, scores, remark, class_name=None, academic_year=None):
        calls["save_mark"] = {
            "subject": subject,
            "term": term,
            "total": scores.total,
            "remark": remark,
            "class_name": class_name,
        }
        mark = {
            "id": 99,
            "student_id": student.id,
            "subject": subject,
            "term": term,
            "class_name": class_name,
            "total": round(scores.total, 2),
            "class_score": round(scores.class_score, 2),
            "exam_score": round(scores.exam_score, 2),
            "remark": remark,
        }
        return mark, False

    monkeypatch.setattr(records, "find_student", find_student)
    monkeypatch.setattr(records, "load_marks", load_marks)
    monkeypatch.setattr(records, "save_mark", save_mark)
    return calls


class TestGetMarks:
    def test_requires_class_or_student(self, client, auth_headers, fake_records):
        response = client.get("/api/marks", headers=auth_headers("admin"))

        assert response.status_code == 400

    def test_requires_authentication(self, client, fake_records):
        assert client.get("/api/marks", params={"className": "BS7"}).status_code == 401

    def test_class_marks_are_ranked(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS7"], subjects=["Mathematics"])

        response = client.get(
            "/api/marks",
            params={"className": "BS7", "subject": "Mathematics", "term": "First Term"},
            headers=headers,
        )

        assert response.status_code == 200
        data = response.json()["data"]
        assert [(m["studentId"], m["rank"], m["position"]) for m in data] == [(6, 1, "1st"), (5, 2, "2nd")]
        assert fake_records["load_marks"]["subjects"] == {"Mathematics"}
        assert fake_records["load_marks"]["term"] == "First Term"

    def test_subject_teacher_denied_other_subject(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS7"], subjects=["Mathematics"])

        response = client.get("/api/marks", params={"className": "BS7", "subject": "French"}, headers=headers)

        assert response.status_code == 403
        assert "load_marks" not in fake_records

    def test_form_master_reads_any_subject_in_own_class(self, client, auth_headers, fake_records):
        headers = auth_headers("form_master", classes=["BS7"], subjects=["French"])

        response = client.get("/api/marks", params={"className": "BS7", "subject": "Mathematics"}, headers=headers)

        assert response.status_code == 200

    def test_class_listing_narrowed_to_taught_subjects(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS7"], subjects=["Science"])

        response = client.get("/api/marks", params={"className": "BS7"}, headers=headers)

        assert response.status_code == 200
        assert response.json()["data"] == []
        assert fake_records["load_marks"]["subjects"] == {"Science"}

    def test_student_marks_by_id_number(self, client, auth_headers, fake_records):
        response = client.get("/api/marks", params={"studentId": "eSBA020"}, headers=auth_headers("admin"))

        assert response.status_code == 200
        assert fake_records["load_marks"]["student_id"] == 5
        assert all(m["rank"] is None for m in response.json()["data"])

    def test_unknown_student(self, client, auth_headers, fake_records):
        response = client.get("/api/marks", params={"studentId": "eSBA999"}, headers=auth_headers("admin"))

        assert response.status_code == 404

    def test_student_in_other_class_denied(self, client, auth_headers, fake_records):
        headers = auth_headers("class_teacher", classes=["BS8"])

        response = client.get("/api/marks", params={"studentId": "5"}, headers=headers)

        assert response.status_code == 403


class TestSaveMarks:
    payload = {
        "studentId": "eSBA020",
        "subject": "Mathematics",
        "term": "First Term",
        "test1": 15,
        "test2": 15,
        "test3": 12,
        "test4": 12,
        "exam": 80,
    }

    def test_subject_teacher_records_own_subject(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS7"], subjects=["Mathematics"])

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 200
        body = response.json()
        assert body["message"] == "Marks added successfully"
        assert body["data"]["classScore"] == 45.0
        assert body["data"]["examScore"] == 40.0
        assert body["data"]["total"] == 85.0
        assert body["data"]["remark"] == "EXCELLENT"
        assert fake_records["save_mark"]["class_name"] == "BS7"

    def test_put_is_an_alias(self, client, auth_headers, fake_records):
        response = client.put("/api/marks", json=self.payload, headers=auth_headers("admin"))

        assert response.status_code == 200

    def test_head_teacher_cannot_record_marks(self, client, auth_headers, fake_records):
        headers = auth_headers("head_teacher", classes=["BS7"], subjects=["Mathematics"])

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 403
        assert "save_mark" not in fake_records

    def test_form_master_cannot_record_other_subjects(self, client, auth_headers, fake_records):
        headers = auth_headers("form_master", classes=["BS7"], subjects=["English Language"])

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 403

    def test_class_teacher_records_any_subject_in_own_class(self, client, auth_headers, fake_records):
        headers = auth_headers("class_teacher", classes=["BS7"], subjects=["English Language"])

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 200

    def test_unknown_student(self, client, auth_headers, fake_records):
        response = client.post(
            "/api/marks",
            json={**self.payload, "studentId": "eSBA404"},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 404

    @pytest.mark.parametrize("field,value", [("test1", 16), ("exam", 101), ("test2", -1)])
    def test_out_of_range_scores_rejected(self, client, auth_headers, fake_records, field, value):
        response = client.post(
            "/api/marks",
            json={**self.payload, field: value},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 422
        assert "save_mark" not in fake_records

    def test_blank_subject_rejected(self, client, auth_headers, fake_records):
        response = client.post("/api/marks", json={**self.payload, "subject": "   "}, headers=auth_headers("admin"))

        assert response.status_code == 422

    def test_write_access_checked_against_students_own_class(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS8"], subjects=["Mathematics"])

        response = client.post("/api/marks", json={**self.payload, "className": "BS8"}, headers=headers)

        assert response.status_code == 403
        assert "BS7" in response.json()["detail"]
        assert "save_mark" not in fake_records

    def test_class_name_must_match_student(self, client, auth_headers, fake_records):
        response = client.post(
            "/api/marks",
            json={**self.payload, "className": "BS8"},
            headers=auth_headers("admin"),
        )

        assert response.status_code == 400
        assert "save_mark" not in fake_records

    def test_matching_class_name_is_accepted(self, client, auth_headers, fake_records):
        headers = auth_headers("subject_teacher", classes=["BS7"], subjects=["Mathematics"])

        response = client.post("/api/marks", json={**self.payload, "className": "BS7"}, headers=headers)

        assert response.status_code == 200
        assert fake_records["save_mark"]["class_name"] == "BS7"


class TestRequestCorrelation:
    payload = TestSaveMarks.payload

    def test_response_carries_request_id(self, client, auth_headers, fake_records):
        response = client.get("/api/marks", params={"className": "BS7"}, headers=auth_headers("admin"))

        assert response.status_code == 200
        assert response.headers["X-Request-ID"]

    def test_caller_request_id_is_reused(self, client, auth_headers, fake_records):
        headers = {**auth_headers("admin"), "X-Request-ID": "trace-42"}

        response = client.get("/api/marks", params={"className": "BS7"}, headers=headers)

        assert response.headers["X-Request-ID"] == "trace-42"

    def test_access_denial_logged_with_request_id(self, client, auth_headers, fake_records, caplog):
        caplog.set_level(logging.WARNING, logger="school_admin.middleware.authentication")
        headers = auth_headers("subject_teacher", classes=["BS8"], subjects=["Mathematics"], user_id=7)

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 403
        request_id = response.headers["X-Request-ID"]
        denials = [r.getMessage() for r in caplog.records if "Access denied" in r.getMessage()]
        assert len(denials) == 1
        assert "user 7" in denials[0]
        assert f"[request_id: {request_id}]" in denials[0]

    def test_saved_marks_logged_with_request_id(self, client, auth_headers, fake_records, caplog):
        caplog.set_level(logging.INFO, logger="school_admin.api.marks")
        headers = {**auth_headers("admin"), "X-Request-ID": "trace-99"}

        response = client.post("/api/marks", json=self.payload, headers=headers)

        assert response.status_code == 200
        saves = [r.getMessage() for r in caplog.records if r.name == "school_admin.api.marks"]
        assert any("eSBA020" in m and "[request_id: trace-99]" in m for m in saves)

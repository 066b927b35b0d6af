"""
Tests for the teacher scheduler router.
"""

from io import BytesIO

import pytest
from pypdf import PdfWriter

from lesson_pacing.models import Weekday

PAYLOAD = {
    "class_id": 10,
    "section_id": 1,
    "subject_id": 5,
    "start_date": "2025-06-02",
    "units": [
        {
            "title": "Numbers",
            "chapters": [{"title": "Fractions", "topics": [{"title": "Halves"}, {"title": "Thirds"}, {"title": "Quarters"}]}],
        }
    ],
}
SCOPE = {"class_id": 10, "section_id": 1, "subject_id": 5}


@pytest.fixture
def timetable(school, add_timetable_entry):
    add_timetable_entry(school, Weekday.MONDAY, "Period 1")
    return school


class TestAuthentication:
    def test_missing_token(self, client):
        response = client.post("/api/v1/teacher/scheduler/preview", json=PAYLOAD)

        assert response.status_code == 401
        assert response.json()["detail"] == "Missing Authorization header"

    def test_bad_scheme(self, client):
        response = client.post(
            "/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers={"Authorization": "Token abc"}
        )

        assert response.status_code == 401

    def test_garbage_token(self, client):
        response = client.post(
            "/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers={"Authorization": "Bearer not-a-jwt"}
        )

        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid token"

    def test_unknown_role(self, client, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers=auth_headers(role="parent"))

        assert response.status_code == 401

    def test_school_admin_can_preview(self, client, timetable, auth_headers):
        response = client.post(
            "/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers=auth_headers(role="school_admin")
        )

        assert response.status_code == 200


class TestPreview:
    def test_returns_schedule_and_timelines(self, client, timetable, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["mode"] == "spaced"
        assert body["scheduled_count"] == 5
        assert body["remaining_tasks"] == 0
        assert body["first_date"] == "2025-06-02"
        assert body["last_date"] == "2025-06-30"
        assert body["schedule"][3] == {
            "lesson_date": "2025-06-23",
            "day_of_week": "MONDAY",
            "period_label": "Period 1",
            "unit_title": "Numbers",
            "chapter_title": "Fractions",
            "topic_title": "Revision: Fractions",
            "kind": "REVISION",
        }
        (unit,) = body["unit_timelines"]
        assert unit["entry_count"] == 5
        assert [c["chapter_title"] for c in unit["chapters"]] == ["Fractions", "Review"]

    def test_no_timetable_is_still_informative(self, client, school, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers=auth_headers())

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is False
        assert body["scheduled_count"] == 0
        assert body["remaining_tasks"] == 3

    def test_validates_payload(self, client, timetable, auth_headers):
        payload = {**PAYLOAD, "units": [{"title": "", "chapters": []}]}

        response = client.post("/api/v1/teacher/scheduler/preview", json=payload, headers=auth_headers())

        assert response.status_code == 422


class TestCommitAndLoad:
    def test_commit_then_load(self, client, timetable, auth_headers):
        headers = auth_headers()

        commit = client.post("/api/v1/teacher/scheduler/commit", json=PAYLOAD, headers=headers)
        loaded = client.post("/api/v1/teacher/scheduler/load-existing", json=SCOPE, headers=headers)
        preview = client.post("/api/v1/teacher/scheduler/preview", json=PAYLOAD, headers=headers)

        assert commit.status_code == 200
        assert commit.json() == {"count": 5}
        assert loaded.status_code == 200
        assert loaded.json()["schedule"] == preview.json()["schedule"]
        assert loaded.json()["unit_timelines"] == preview.json()["unit_timelines"]
        assert loaded.json()["mode"] == "committed"

    def test_commit_without_slots(self, client, school, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/commit", json=PAYLOAD, headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["detail"] == "No valid slots found to schedule tasks."

    def test_commit_by_unknown_teacher(self, client, timetable, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/commit", json=PAYLOAD, headers=auth_headers(user_id=404))

        assert response.status_code == 404

    def test_load_existing_when_empty(self, client, timetable, auth_headers):
        response = client.post("/api/v1/teacher/scheduler/load-existing", json=SCOPE, headers=auth_headers())

        assert response.status_code == 200
        assert response.json() is None

    def test_check_existing(self, client, timetable, auth_headers):
        headers = auth_headers()
        before = client.post("/api/v1/teacher/scheduler/check-existing", json=SCOPE, headers=headers)
        client.post("/api/v1/teacher/scheduler/commit", json=PAYLOAD, headers=headers)
        after = client.post("/api/v1/teacher/scheduler/check-existing", json=SCOPE, headers=headers)

        assert before.json() == {"exists": False, "count": 0, "first_date": None, "last_date": None}
        assert after.json() == {"exists": True, "count": 5, "first_date": "2025-06-02", "last_date": "2025-06-30"}


class TestExtractText:
    def test_plain_text_is_cleaned(self, client, school, auth_headers):
        content = b"  Unit 1: Numbers \n\n   Fractions\n\t\nDecimals  \n"

        response = client.post(
            "/api/v1/teacher/scheduler/extract-text",
            files={"file": ("syllabus.txt", content, "text/plain")},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json() == {"text": "Unit 1: Numbers\nFractions\nDecimals"}

    def test_pdf_is_read(self, client, school, auth_headers):
        writer = PdfWriter()
        writer.add_blank_page(width=612, height=792)
        buffer = BytesIO()
        writer.write(buffer)

        response = client.post(
            "/api/v1/teacher/scheduler/extract-text",
            files={"file": ("syllabus.pdf", buffer.getvalue(), "application/pdf")},
            headers=auth_headers(),
        )

        assert response.status_code == 200
        assert response.json() == {"text": ""}

    def test_images_are_rejected(self, client, school, auth_headers):
        response = client.post(
            "/api/v1/teacher/scheduler/extract-text",
            files={"file": ("scan.png", b"\x89PNG\r\n", "image/png")},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert response.json()["detail"].startswith("Image syllabus files cannot be read")

    def test_other_binaries_are_rejected(self, client, school, auth_headers):
        response = client.post(
            "/api/v1/teacher/scheduler/extract-text",
            files={"file": ("syllabus.docx", b"PK\x03\x04", "application/octet-stream")},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert "Unsupported file type" in response.json()["detail"]

    def test_text_that_is_not_utf8_is_rejected(self, client, school, auth_headers):
        response = client.post(
            "/api/v1/teacher/scheduler/extract-text",
            files={"file": ("syllabus.txt", "Unité 1\nFractions".encode("latin-1"), "text/plain")},
            headers=auth_headers(),
        )

        assert response.status_code == 400
        assert "not valid UTF-8" in response.json()["detail"]

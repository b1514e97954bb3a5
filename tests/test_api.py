import json

from sqlalchemy import text

from database.db import get_db
from dependencies.reports import get_report_generator
from services.exceptions import ConfigurationError, ServiceError


def _seed(client):
    subject = client.post(
        "/v1/subjects/",
        json={"subject_code": "WEBDEV", "subject_name": "Web Development", "instructor": "Prof. Santos"},
    ).json()["data"]
    ana = client.post(
        "/v1/students/",
        json={"student_number": "2023-0001", "first_name": "Ana", "last_name": "Reyes", "course": "BSIT", "year_level": 2},
    ).json()["data"]
    ben = client.post(
        "/v1/students/",
        json={"student_number": "2023-0002", "first_name": "Ben", "last_name": "Cruz", "course": "BSCS", "year_level": 1},
    ).json()["data"]
    return subject, ana, ben


def _grade(client, student, subject, **scores):
    return client.put("/v1/grades/", json={"student_id": student["id"], "subject_id": subject["id"], **scores})


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"
    assert "X-Latency-Ms" in res.headers


def test_subject_crud(client):
    res = client.post("/v1/subjects/", json={"subject_code": "IT101", "subject_name": "Introduction to IT"})
    assert res.status_code == 201
    subject_id = res.json()["data"]["id"]

    res = client.put(
        f"/v1/subjects/{subject_id}",
        json={"subject_code": "IT101", "subject_name": "Intro to IT", "instructor": "Prof. Lim"},
    )
    assert res.json()["data"]["instructor"] == "Prof. Lim"

    client.post("/v1/subjects/", json={"subject_code": "DBSYS", "subject_name": "Database Systems"})
    codes = [s["subject_code"] for s in client.get("/v1/subjects/").json()["data"]]
    assert codes == ["DBSYS", "IT101"]

    assert client.delete(f"/v1/subjects/{subject_id}").json()["success"] is True
    res = client.get(f"/v1/subjects/{subject_id}")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


def test_duplicate_subject_code_conflicts(client):
    client.post("/v1/subjects/", json={"subject_code": "WEBDEV", "subject_name": "Web Development"})
    res = client.post("/v1/subjects/", json={"subject_code": "WEBDEV", "subject_name": "Web Dev 2"})
    assert res.status_code == 409
    assert res.json()["success"] is False


def test_student_crud(client):
    res = client.post(
        "/v1/students/",
        json={"student_number": "2023-0009", "first_name": "Dana", "last_name": "Lopez"},
    )
    assert res.status_code == 201
    student_id = res.json()["data"]["id"]

    res = client.put(
        f"/v1/students/{student_id}",
        json={"student_number": "2023-0009", "first_name": "Dana", "last_name": "Lopez", "course": "BSIS", "year_level": 3},
    )
    assert res.json()["data"]["year_level"] == 3
    assert client.get(f"/v1/students/{student_id}").json()["data"]["course"] == "BSIS"

    assert client.delete(f"/v1/students/{student_id}").status_code == 200
    assert client.get(f"/v1/students/{student_id}").status_code == 404


def test_grade_scores_are_validated_against_scale(client):
    subject, ana, _ = _seed(client)
    assert _grade(client, ana, subject, prelim=7.0).status_code == 422
    assert _grade(client, ana, subject, prelim=0.5).status_code == 422
    assert _grade(client, ana, subject, prelim=1.0).status_code == 200


def test_grade_for_unknown_student_is_404(client):
    subject, _, _ = _seed(client)
    res = client.put("/v1/grades/", json={"student_id": 999, "subject_id": subject["id"], "prelim": 1.0})
    assert res.status_code == 404


def test_grade_upsert_and_sheet(client):
    subject, ana, ben = _seed(client)
    first = _grade(client, ana, subject, prelim=1.0, midterm=1.25)
    assert first.json()["message"] == "Grades saved"
    second = _grade(client, ana, subject, prelim=1.0, midterm=1.25, semifinal=1.5, final=1.0)
    assert second.json()["message"] == "Grades updated"
    assert second.json()["data"]["id"] == first.json()["data"]["id"]
    _grade(client, ben, subject)

    data = client.get(f"/v1/grades/subject/{subject['id']}").json()["data"]
    rows = {r["name"]: r for r in data["students"]}

    assert rows["Ana Reyes"]["average"] == 1.19
    assert rows["Ana Reyes"]["status"] == "PASSED"
    assert rows["Ben Cruz"]["average"] is None
    assert rows["Ben Cruz"]["status"] == "UNGRADED"
    assert data["statistics"] == {"classAverage": 1.19, "highestScore": 1.19, "lowestScore": 1.19, "passRate": 100.0}


def test_concurrent_first_upsert_conflicts(client, session_factory):
    from main import app
    subject, ana, _ = _seed(client)

    def db_with_competing_writer():
        # the other request's row lands after this one found no existing grades
        db = session_factory()
        commit = db.commit

        def commit_after_competing_insert():
            db.execute(
                text("INSERT INTO grades (student_id, subject_id, prelim) VALUES (:student, :subject, 2.0)"),
                {"student": ana["id"], "subject": subject["id"]},
            )
            commit()

        db.commit = commit_after_competing_insert
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = db_with_competing_writer
    res = _grade(client, ana, subject, prelim=1.0)
    assert res.status_code == 409
    assert res.json()["success"] is False
    assert res.json()["error"]["code"] == "DUPLICATE"


def test_deleting_student_removes_grades(client):
    subject, ana, _ = _seed(client)
    grade_id = _grade(client, ana, subject, prelim=2.0).json()["data"]["id"]
    client.delete(f"/v1/students/{ana['id']}")
    assert client.get(f"/v1/grades/{grade_id}").status_code == 404


def test_report_from_model(client, fake_llm):
    subject, ana, ben = _seed(client)
    _grade(client, ana, subject, prelim=1.0, midterm=1.25, semifinal=1.5, final=1.0)
    _grade(client, ben, subject)
    fake_llm.response = "```json\n" + json.dumps({
        "analysis": "Ana Reyes leads the class.",
        "passedStudents": ["Ana Reyes"],
        "failedStudents": [],
        "classStatistics": {"classAverage": 1.19, "highestScore": 1.19, "lowestScore": 1.19, "passRate": 100},
        "recommendations": ["Encode Ben Cruz's grades."],
    }) + "\n```"

    res = client.get(f"/v1/reports/subjects/{subject['id']}")
    assert res.status_code == 200
    report = res.json()["data"]
    assert report["source"] == "MODEL"
    assert report["subject"] == {"code": "WEBDEV", "name": "Web Development", "instructor": "Prof. Santos"}
    assert report["analysis"] == "Ana Reyes leads the class."
    assert report["classStatistics"]["passRate"] == 100.0

    prompt = fake_llm.prompts[0]
    assert "Instructor: Prof. Santos" in prompt
    # students are listed by last name
    assert prompt.index("Ben Cruz (2023-0002)") < prompt.index("Ana Reyes (2023-0001)")


def test_report_falls_back_when_model_fails(client, fake_llm):
    subject, ana, _ = _seed(client)
    _grade(client, ana, subject, prelim=3.5, midterm=3.0)
    fake_llm.error = ServiceError("503 Service Unavailable")

    report = client.get(f"/v1/reports/subjects/{subject['id']}").json()["data"]
    assert report["source"] == "FALLBACK"
    assert report["failedStudents"] == ["Ana Reyes"]
    assert report["classStatistics"] == {"classAverage": 3.25, "highestScore": 3.25, "lowestScore": 3.25, "passRate": 0.0}


def test_report_without_grades(client):
    subject, _, _ = _seed(client)
    report = client.get(f"/v1/reports/subjects/{subject['id']}").json()["data"]
    assert report["analysis"] == "No grades available for this subject."
    assert report["source"] == "FALLBACK"
    assert report["classStatistics"] is None


def test_report_for_unknown_subject_is_404(client):
    res = client.get("/v1/reports/subjects/12345")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "NOT_FOUND"


def test_missing_credentials_surface_as_configuration_error(client):
    from main import app

    def broken():
        raise ConfigurationError("GEMINI_API_KEY is not set (environment or .env)")

    subject, _, _ = _seed(client)
    app.dependency_overrides[get_report_generator] = broken
    res = client.get(f"/v1/reports/subjects/{subject['id']}")
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "CONFIGURATION_ERROR"


def test_report_pdf(client, monkeypatch):
    from routers import reports

    monkeypatch.setattr(reports.pdf_service, "_html_to_pdf", lambda html: b"%PDF-1.7 fake")
    subject, ana, _ = _seed(client)
    _grade(client, ana, subject, prelim=1.0)

    res = client.get(f"/v1/reports/subjects/{subject['id']}/pdf")
    assert res.status_code == 200
    assert res.headers["content-type"] == "application/pdf"
    assert "WEBDEV_performance_report.pdf" in res.headers["content-disposition"]
    assert res.content == b"%PDF-1.7 fake"

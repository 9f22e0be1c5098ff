import httpx
from fastapi.testclient import TestClient

from tests.conftest import chat_completion, install_rewrite_transport


def _active_year_id(client: TestClient) -> str:
    response = client.get("/school-years/active")
    assert response.status_code == 200, response.text
    return response.json()["id"]


def _setup_report(client: TestClient) -> dict:
    year_id = _active_year_id(client)
    grade = client.post("/grades", json={"name": "Grade 6", "colorIndex": 3}).json()
    template_response = client.post(
        "/templates",
        json={
            "gradeId": grade["id"],
            "schoolYearId": year_id,
            "name": "Semester report",
            "subjects": [
                {"name": "Math", "assessmentPoints": [{"name": "Counting", "maxStars": 4}]},
            ],
        },
    )
    assert template_response.status_code == 200, template_response.text
    template = template_response.json()
    student = client.post(
        "/students",
        json={"firstName": "Emma", "lastName": "Jansen", "gradeId": grade["id"], "schoolYearId": year_id},
    ).json()
    report_response = client.post(
        "/reports",
        json={"studentId": student["id"], "assessmentTemplateId": template["id"], "schoolYearId": year_id},
    )
    assert report_response.status_code == 200, report_response.text
    return {
        "year_id": year_id,
        "grade": grade,
        "template": template,
        "student": student,
        "report": report_response.json(),
    }


def test_health_reports_persistence_state(app_client: TestClient):
    response = app_client.get("/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert isinstance(payload["version"], str)
    assert payload["persistence_degraded"] is False


def test_system_info(app_client: TestClient):
    response = app_client.get("/system/info")
    assert response.status_code == 200
    payload = response.json()
    assert isinstance(payload["app_name"], str)
    assert payload["snapshot_key"] == "tisa-assessment-storage"
    assert payload["rewrite_gateway_configured"] is True


def test_first_run_defaults_are_served(app_client: TestClient):
    grades = app_client.get("/grades").json()
    assert [grade["name"] for grade in grades] == ["Grade 0-1", "Grade 2-3", "Grade 4-5"]

    teachers = app_client.get(f"/grades/{grades[0]['id']}/teachers").json()
    assert set(teachers) == {"core", "professional"}
    assert teachers["professional"]

    settings = app_client.get("/settings").json()
    assert settings["schoolName"] == "TISA School"

    dashboard = app_client.get("/dashboard").json()
    assert dashboard == {"grades": 3, "students": 0, "assessments": 1, "reports": 0}


def test_school_year_activation(app_client: TestClient):
    first_id = _active_year_id(app_client)
    created = app_client.post("/school-years", json={"name": "2026-2027", "startYear": 2026, "endYear": 2027})
    assert created.status_code == 200, created.text
    second_id = created.json()["id"]

    response = app_client.post(f"/school-years/{second_id}/activate")
    assert response.status_code == 200
    assert response.json() == {"ok": True}

    years = app_client.get("/school-years").json()
    assert [year["id"] for year in years if year["isActive"]] == [second_id]
    assert _active_year_id(app_client) == second_id
    assert first_id != second_id

    assert app_client.post("/school-years/missing/activate").status_code == 404


def test_school_year_validation(app_client: TestClient):
    response = app_client.post("/school-years", json={"name": "Bad", "startYear": 2027, "endYear": 2026})
    assert response.status_code == 422

    response = app_client.post("/school-years", json={"name": "  ", "startYear": 2026, "endYear": 2027})
    assert response.status_code == 422


def test_missing_ids_are_silent_for_mutations(app_client: TestClient):
    assert app_client.patch("/grades/missing", json={"name": "X"}).json() == {"ok": True}
    assert app_client.delete("/students/missing").json() == {"ok": True}
    assert app_client.patch("/reports/missing", json={"status": "completed"}).json() == {"ok": True}
    assert app_client.get("/grades/missing").status_code == 404
    assert app_client.get("/reports/missing").status_code == 404


def test_report_starts_full_and_renders(app_client: TestClient):
    data = _setup_report(app_client)
    report = data["report"]

    assert [entry["stars"] for entry in report["entries"]] == [4]
    assert report["status"] == "draft"
    assert report["term"] == "Term 1 & 2"

    entry = dict(report["entries"][0], stars=0, teacherNotes="Counts to 20")
    patch = app_client.patch(
        f"/reports/{report['id']}",
        json={
            "entries": [entry],
            "subjectComments": [
                {"subjectId": entry["subjectId"], "teacherComment": "Great progress"},
                {"subjectId": "blank"},
            ],
            "status": "completed",
        },
    )
    assert patch.status_code == 200, patch.text

    stored = app_client.get(f"/reports/{report['id']}").json()
    assert stored["status"] == "completed"
    assert [comment["subjectId"] for comment in stored["subjectComments"]] == [entry["subjectId"]]
    assert stored["updatedAt"] != report["updatedAt"]

    view = app_client.get(f"/reports/{report['id']}/view").json()
    assert view["student"]["id"] == data["student"]["id"]
    row = view["subjects"][0]["rows"][0]
    assert row["stars"] == 4
    assert row["notes"] == "Counts to 20"
    assert view["settings"]["schoolName"] == "TISA School"


def test_exam_results_are_grouped_by_term(app_client: TestClient):
    report_id = _setup_report(app_client)["report"]["id"]

    for term, title in (("Term 2", "Reading"), ("Term 1", "Unit test"), ("Term 2", "Spelling")):
        response = app_client.post(
            f"/reports/{report_id}/exam-results",
            json={"term": term, "title": title, "subject": "English", "grade": 2},
        )
        assert response.status_code == 200, response.text
    reading_id = app_client.get(f"/reports/{report_id}").json()["examResults"][0]["id"]

    app_client.patch(f"/reports/{report_id}/exam-results/{reading_id}", json={"grade": 3})
    view = app_client.get(f"/reports/{report_id}/view").json()
    assert list(view["examResults"]) == ["Term 1", "Term 2"]
    assert [item["title"] for item in view["examResults"]["Term 2"]] == ["Reading", "Spelling"]
    assert view["examResults"]["Term 2"][0]["grade"] == 3

    app_client.delete(f"/reports/{report_id}/exam-results/{reading_id}")
    results = app_client.get(f"/reports/{report_id}").json()["examResults"]
    assert [item["title"] for item in results] == ["Unit test", "Spelling"]

    invalid = app_client.post(
        f"/reports/{report_id}/exam-results",
        json={"term": "Term 1", "title": "Too high", "subject": "Math", "grade": 4},
    )
    assert invalid.status_code == 422


def test_signatures(app_client: TestClient):
    report_id = _setup_report(app_client)["report"]["id"]

    response = app_client.post(
        f"/reports/{report_id}/signatures",
        json={"role": "classroomTeacher", "name": "  Ms Carin  "},
    )

    assert response.status_code == 200, response.text
    signature = response.json()["signatures"]["classroomTeacher"]
    assert signature["name"] == "Ms Carin"
    assert signature["signedAt"]
    assert app_client.post(f"/reports/{report_id}/signatures", json={"role": "janitor", "name": "x"}).status_code == 422


def test_shared_report_view_and_reflections(app_client: TestClient):
    report = _setup_report(app_client)["report"]

    share = app_client.post(f"/reports/{report['id']}/share")
    assert share.status_code == 200, share.text
    token = share.json()["shareToken"]
    assert app_client.post(f"/reports/{report['id']}/share").json()["shareToken"] == token

    shared = app_client.get(f"/shared/{token}")
    assert shared.status_code == 200
    assert shared.json()["report"]["id"] == report["id"]

    response = app_client.patch(
        f"/shared/{token}/reflections",
        json={"author": "parent", "text": "We are proud of Emma."},
    )
    assert response.status_code == 200

    stored = app_client.get(f"/reports/{report['id']}").json()
    assert stored["reflections"]["parentReflection"] == "We are proud of Emma."
    assert stored["reflections"]["parentSignedAt"]
    assert stored["reflections"]["studentReflection"] is None
    # reflections are the only thing a token holder can write
    assert stored["entries"] == report["entries"]

    assert app_client.get("/shared/not-a-real-token").status_code == 404
    assert app_client.patch("/shared/nope/reflections", json={"author": "student", "text": "x"}).status_code == 404


def test_template_duplication_to_new_year(app_client: TestClient):
    data = _setup_report(app_client)
    template = data["template"]
    year = app_client.post("/school-years", json={"name": "2026-2027", "startYear": 2026, "endYear": 2027}).json()

    response = app_client.post(f"/templates/{template['id']}/duplicate", json={"schoolYearId": year["id"]})
    assert response.status_code == 200, response.text
    copy = response.json()
    assert copy["id"] != template["id"]
    assert copy["schoolYearId"] == year["id"]
    assert copy["subjects"][0]["id"] != template["subjects"][0]["id"]
    assert copy["subjects"][0]["assessmentPoints"][0]["name"] == "Counting"

    same_year = app_client.post(f"/templates/{template['id']}/duplicate", json={"schoolYearId": data["year_id"]})
    assert same_year.status_code == 400

    summaries = app_client.get("/templates").json()
    assert {item["template"]["id"] for item in summaries} >= {template["id"]}
    assert next(item for item in summaries if item["template"]["id"] == template["id"])["totalPoints"] == 1


def test_student_templates_and_search(app_client: TestClient):
    data = _setup_report(app_client)
    student_id = data["student"]["id"]

    templates = app_client.get(f"/students/{student_id}/templates").json()
    assert [template["id"] for template in templates] == [data["template"]["id"]]

    found = app_client.get("/students", params={"search": "jans"}).json()
    assert [student["id"] for student in found] == [student_id]
    assert app_client.get("/students", params={"gradeId": "other"}).json() == []


def test_document_upload_and_size_cap(app_client: TestClient):
    student_id = _setup_report(app_client)["student"]["id"]

    uploaded = app_client.post(
        f"/students/{student_id}/documents",
        data={"label": "passport"},
        files={"document": ("passport.png", b"\x89PNG\r\n", "image/png")},
    )
    assert uploaded.status_code == 200, uploaded.text
    general = uploaded.json()["general"]
    assert [doc["label"] for doc in general] == ["Passport / ID"]
    assert general[0]["fileData"].startswith("data:image/png;base64,")

    replaced = app_client.post(
        f"/students/{student_id}/documents",
        data={"label": "passport"},
        files={"document": ("passport-2.png", b"\x89PNG\r\n2", "image/png")},
    ).json()
    assert [doc["fileName"] for doc in replaced["general"]] == ["passport-2.png"]

    too_large = app_client.post(
        f"/students/{student_id}/documents",
        data={"label": "medical"},
        files={"document": ("scan.pdf", b"x" * (200 * 1024 + 1), "application/pdf")},
    )
    assert too_large.status_code == 413
    assert "200KB" in too_large.json()["detail"]

    empty = app_client.post(
        f"/students/{student_id}/documents",
        data={"label": "other"},
        files={"document": ("empty.txt", b"", "text/plain")},
    )
    assert empty.status_code == 400

    documents = app_client.get(f"/students/{student_id}/documents").json()
    assert len(documents["general"]) == 1
    doc_id = documents["general"][0]["id"]
    assert app_client.delete(f"/students/{student_id}/documents/{doc_id}").json() == {"ok": True}
    assert app_client.get(f"/students/{student_id}/documents").json()["general"] == []


def test_ai_rewrite_endpoint(app_client: TestClient):
    calls = install_rewrite_transport(app_client, lambda request: httpx.Response(200, json=chat_completion("Polished.")))

    response = app_client.post("/ai-rewrite", json={"text": "good boy", "studentName": "Liam"})

    assert response.status_code == 200, response.text
    assert response.json() == {"rewrittenText": "Polished."}
    assert response.headers["access-control-allow-origin"] == "*"
    assert len(calls) == 1


def test_ai_rewrite_errors_keep_json_contract(app_client: TestClient):
    calls = install_rewrite_transport(app_client, lambda request: httpx.Response(402, json={}))

    empty = app_client.post("/ai-rewrite", json={"text": ""})
    assert empty.status_code == 400
    assert empty.json() == {"error": "Text is required"}
    assert calls == []

    bad_provider = app_client.post("/ai-rewrite", json={"text": "hi", "provider": "other", "customApiKey": "k"})
    assert bad_provider.status_code == 400

    billing = app_client.post("/ai-rewrite", json={"text": "hi"})
    assert billing.status_code == 402
    assert "Payment required" in billing.json()["error"]

    not_json = app_client.post("/ai-rewrite", content=b"{", headers={"Content-Type": "application/json"})
    assert not_json.status_code == 400


def test_ai_rewrite_preflight(app_client: TestClient):
    response = app_client.options("/ai-rewrite")

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "content-type" in response.headers["access-control-allow-headers"]


def test_staged_rewrite_is_written_only_on_accept(app_client: TestClient):
    report = _setup_report(app_client)["report"]
    entry = report["entries"][0]
    app_client.patch(
        f"/reports/{report['id']}",
        json={"entries": [dict(entry, teacherNotes="counts well")]},
    )
    install_rewrite_transport(app_client, lambda request: httpx.Response(200, json=chat_completion("Emma counts well.")))
    target = {"kind": "entry", "subjectId": entry["subjectId"], "assessmentPointId": entry["assessmentPointId"]}

    staged = app_client.post(f"/reports/{report['id']}/rewrites", json={"target": target})
    assert staged.status_code == 200, staged.text
    assert staged.json()["rewrittenText"] == "Emma counts well."
    assert app_client.get(f"/reports/{report['id']}").json()["entries"][0]["aiRewrittenText"] is None

    accepted = app_client.post(f"/reports/{report['id']}/rewrites/accept", json={"target": target})
    assert accepted.status_code == 200, accepted.text
    assert accepted.json()["entries"][0]["aiRewrittenText"] == "Emma counts well."

    again = app_client.post(f"/reports/{report['id']}/rewrites/accept", json={"target": target})
    assert again.status_code == 404


def test_rate_limited_rewrite_leaves_report_untouched(app_client: TestClient):
    report = _setup_report(app_client)["report"]
    install_rewrite_transport(app_client, lambda request: httpx.Response(429, json={}))
    target = {"kind": "generalComment"}

    response = app_client.post(f"/reports/{report['id']}/rewrites", json={"target": target, "text": "Nice year"})

    assert response.status_code == 429
    assert response.json()["retriable"] is True
    assert app_client.get(f"/reports/{report['id']}").json() == report


def test_browser_preflight_for_ai_rewrite_has_no_body(app_client: TestClient):
    response = app_client.options(
        "/ai-rewrite",
        headers={
            "Origin": "https://reports.example.org",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type, authorization",
        },
    )

    assert response.status_code == 200
    assert response.content == b""
    assert response.headers["access-control-allow-origin"] == "*"
    assert "content-type" in response.headers["access-control-allow-headers"]
    assert "POST" in response.headers["access-control-allow-methods"]


def test_browser_preflight_elsewhere_is_left_to_cors(app_client: TestClient):
    response = app_client.options(
        "/reports",
        headers={"Origin": "https://reports.example.org", "Access-Control-Request-Method": "POST"},
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_null_patch_is_rejected_before_the_store(app_client: TestClient):
    report = _setup_report(app_client)["report"]

    for payload in ({"status": None}, {"entries": None}, {"term": None}):
        response = app_client.patch(f"/reports/{report['id']}", json=payload)
        assert response.status_code == 422, payload

    template_id = app_client.get("/templates").json()[0]["template"]["id"]
    assert app_client.patch(f"/templates/{template_id}", json={"subjects": None}).status_code == 422
    assert app_client.get(f"/reports/{report['id']}").json() == report


def test_one_sided_year_patch_is_rejected(app_client: TestClient):
    year_id = _active_year_id(app_client)

    response = app_client.patch(f"/school-years/{year_id}", json={"endYear": 2020})

    assert response.status_code == 422
    assert "endYear" in response.json()["detail"][0]["msg"]
    years = app_client.get("/school-years").json()
    assert [(year["startYear"], year["endYear"]) for year in years] == [(2025, 2026)]
    assert app_client.patch(f"/school-years/{year_id}", json={"startYear": None}).status_code == 422

import base64

from ai_client import AIServiceError
from app import DOCX_MIMETYPE


def test_index_renders(client):
    resp = client.get("/")
    assert resp.status_code == 200
    assert b"Daily Lesson Plan" in resp.data
    assert resp.headers["X-Frame-Options"] == "SAMEORIGIN"


def test_options(client):
    data = client.get("/api/options").get_json()
    assert data["doc_types"]["exam"] == "50-Item Periodical Exam"
    assert data["defaults"]["las"]["num_days"] == 1


def test_status_uses_requested_provider(client, monkeypatch):
    seen = {}

    def fake_status(provider=None, api_key=""):
        seen["provider"] = provider
        return {"status": "success", "message": "ok"}

    monkeypatch.setattr("app.check_api_status", fake_status)
    resp = client.get("/api/status?ai_provider=openai")
    assert resp.get_json()["status"] == "success"
    assert seen["provider"] == "openai"


def test_status_uses_posted_provider_and_key(client, monkeypatch):
    seen = {}

    def fake_status(provider=None, api_key=""):
        seen.update(provider=provider, api_key=api_key)
        return {"status": "success", "message": "ok"}

    monkeypatch.setattr("app.check_api_status", fake_status)
    resp = client.post("/api/status", json={"ai_provider": "gemini", "api_key": "page-key"})
    assert resp.get_json()["status"] == "success"
    assert seen == {"provider": "gemini", "api_key": "page-key"}


def test_unknown_api_route_is_json(client):
    resp = client.get("/api/nothing-here")
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "Not found"}


def test_generate_unknown_type(client):
    resp = client.post("/api/generate/memo", json={"form": {}})
    assert resp.status_code == 404
    assert resp.get_json()["error"] == "Unknown planner type: memo"


def test_generate_without_body(client):
    resp = client.post("/api/generate/dlp", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_generate_validation_error(client, dlp_form):
    dlp_form["learning_competency"] = ""
    resp = client.post("/api/generate/dlp", json={"form": dlp_form})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please fill in all required DLP fields."


def test_generate_rejects_non_object_form(client):
    resp = client.post("/api/generate/dlp", json={"form": ["x"]})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "The form data must be a JSON object."


def test_generate_ignores_non_object_settings(client, fake_ai, dll_form, dll_content):
    fake_ai(dll_content)
    resp = client.post("/api/generate/dll", json={"form": dll_form, "settings": ["bad"]})
    assert resp.status_code == 200
    assert "Competency monday" in resp.get_json()["html"]


def test_generate_dlp(client, fake_ai, dlp_form, dlp_content, settings):
    calls = fake_ai(dlp_content)
    resp = client.post("/api/generate/dlp", json={
        "form": dlp_form, "settings": settings, "ai_provider": "openai", "api_key": "k"})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["content"]["topic"] == "Theme in The Necklace"
    assert data["form"]["teacher_position"] == "Proficient"
    assert "DAILY LESSON PLAN IN" in data["html"]
    assert calls[0]["provider"] == "openai"


def test_generate_exam_builds_the_table(client, fake_ai, exam_form):
    fake_ai({"title": "Periodical Test", "questions": [
        {"question_text": f"Q{n}", "options": ["a", "b", "c", "d"], "answer": "A"} for n in range(50)]})
    resp = client.post("/api/generate/exam", json={"form": exam_form})
    assert resp.status_code == 200
    tos = resp.get_json()["content"]["table_of_specifications"]
    assert sum(row["num_items"] for row in tos) == 50


def test_generate_ai_failure(client, fake_ai, quiz_form):
    fake_ai(AIServiceError("API key not valid"))
    resp = client.post("/api/generate/quiz", json={"form": quiz_form})
    assert resp.status_code == 502
    assert resp.get_json()["error"] == "AI Error: The API key configured on the server is invalid."


def test_generate_rubric(client, fake_ai, quiz_content):
    calls = fake_ai([{"criteria": "Creativity", "points": 5}, {"criteria": "Accuracy", "points": 5}])
    resp = client.post("/api/generate-rubric", json={
        "quiz": quiz_content, "activity_index": 1, "total_points": 20})
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["rubric"] == [{"criteria": "Creativity", "points": 10},
                              {"criteria": "Accuracy", "points": 10}]
    assert data["content"]["activities"][1]["rubric"] == data["rubric"]
    assert "rubric" not in data["content"]["activities"][0]
    assert "20 pts" in data["html"]
    assert "Poster" in calls[0]["prompt"]


def test_generate_rubric_bad_input(client, quiz_content):
    resp = client.post("/api/generate-rubric", json={"quiz": quiz_content, "activity_index": 0,
                                                     "total_points": "lots"})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Please enter a valid number of points."

    resp = client.post("/api/generate-rubric", json={"quiz": quiz_content, "activity_index": 5,
                                                     "total_points": 10})
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "No activity at position 5."

    resp = client.post("/api/generate-rubric", json={"quiz": {}, "total_points": 10})
    assert resp.status_code == 400


def test_preview(client, las_form, las_content, settings):
    resp = client.post("/api/preview/las", json={"form": las_form, "content": las_content,
                                                 "settings": settings})
    assert resp.status_code == 200
    assert "S.Y. 2025-2026" in resp.get_json()["html"]


def test_preview_incomplete_content(client, dlp_form):
    resp = client.post("/api/preview/dlp", json={"form": dlp_form, "content": {"topic": "x"}})
    assert resp.status_code == 400
    assert "incomplete" in resp.get_json()["error"]


def test_download_docx(client, quiz_form, quiz_content):
    resp = client.post("/api/download-docx/quiz", json={"form": quiz_form, "content": quiz_content})
    assert resp.status_code == 200
    assert resp.mimetype == DOCX_MIMETYPE
    assert "Photosynthesis_Quiz_Quiz.docx" in resp.headers["Content-Disposition"]
    assert resp.data[:2] == b"PK"


def test_download_with_truncated_logo(client, dlp_form, dlp_content, settings):
    settings["school_logo"] = ("data:image/png;base64," +
                               base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 10).decode())
    resp = client.post("/api/download-docx/dlp", json={"form": dlp_form, "content": dlp_content,
                                                       "settings": settings})
    assert resp.status_code == 200
    assert resp.data[:2] == b"PK"


def test_download_and_preview_ignore_bad_settings(client, quiz_form, quiz_content):
    resp = client.post("/api/download-docx/quiz", json={"form": ["x"], "content": quiz_content,
                                                        "settings": "nope"})
    assert resp.status_code == 200
    resp = client.post("/api/preview/quiz", json={"form": quiz_form, "content": quiz_content,
                                                  "settings": [1, 2]})
    assert resp.status_code == 200


def test_download_requires_content(client):
    resp = client.post("/api/download-docx/dll", json={"form": {}})
    assert resp.status_code == 400
    resp = client.post("/api/download-docx/memo", json={"content": {}})
    assert resp.status_code == 404

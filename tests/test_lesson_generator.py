from ai_client import AIServiceError
from lesson_generator import (
    build_dll_prompt, build_dlp_prompt, build_las_prompt, generate_dll, generate_dlp, generate_las,
)
from schemas import DLL_SCHEMA, DLP_SCHEMA, LAS_SCHEMA


def test_dlp_prompt_carries_the_lesson_details(dlp_form):
    prompt = build_dlp_prompt(dlp_form)
    assert "DepEd Order No. 42, s. 2016" in prompt
    assert "Identify the theme of a short story" in prompt
    assert 'review of the previous lesson ("Elements of a short story")' in prompt
    assert "exactly 5 multiple-choice questions" in prompt
    assert "Proficient Teacher" in prompt
    assert "'(LOTS)'" in prompt and "'(HOTS)'" in prompt


def test_generate_dlp(fake_ai, dlp_form, dlp_content):
    calls = fake_ai(dlp_content)
    content, error = generate_dlp(dlp_form, ai_provider="gemini")
    assert error is None
    assert content["topic"] == "Theme in The Necklace"
    assert calls[0]["schema"] is DLP_SCHEMA
    assert calls[0]["provider"] == "gemini"


def test_generate_dlp_fixes_the_evaluation(fake_ai, dlp_form, dlp_content):
    dlp_content["evaluation_questions"].append(
        {"question": "Extra?", "options": ["A"], "answer": "A"})
    dlp_content["evaluation_questions"][0]["options"] = ["One", "", "Two"]
    dlp_content["evaluation_questions"][1]["options"] = ["1", "2", "3", "4", "5"]
    fake_ai(dlp_content)

    content, _ = generate_dlp(dlp_form)
    questions = content["evaluation_questions"]
    assert len(questions) == 5
    assert questions[0]["options"] == ["One", "Two", "", ""]
    assert questions[1]["options"] == ["1", "2", "3", "4"]


def test_generate_dlp_without_procedures(fake_ai, dlp_form, dlp_content):
    dlp_content["procedures"] = []
    fake_ai(dlp_content)
    content, error = generate_dlp(dlp_form)
    assert content is None
    assert error == "AI Error: The Daily Lesson Plan has no procedures."


def test_generate_dlp_service_error(fake_ai, dlp_form):
    fake_ai(AIServiceError("429 quota exceeded"))
    content, error = generate_dlp(dlp_form)
    assert content is None
    assert "quota exceeded" in error


def test_dll_prompt_suggests_missing_topic(dll_form):
    dll_form["weekly_topic"] = ""
    prompt = build_dll_prompt(dll_form)
    assert "(Suggest a relevant topic for this grade level and subject)" in prompt
    assert prompt.count("(Generate an appropriate standard)") == 2
    assert "Grade 8 Science" in prompt


def test_generate_dll(fake_ai, dll_form, dll_content):
    calls = fake_ai(dll_content)
    content, error = generate_dll(dll_form)
    assert error is None
    assert content["learning_competencies"]["wednesday"] == "Competency wednesday"
    assert calls[0]["schema"] is DLL_SCHEMA


def test_generate_dll_missing_field(fake_ai, dll_form, dll_content):
    del dll_content["procedures"]
    fake_ai(dll_content)
    content, error = generate_dll(dll_form)
    assert content is None
    assert "procedures" in error


def test_las_prompt(las_form):
    prompt = build_las_prompt(las_form)
    assert "in Filipino" in prompt
    assert "2 sheets, one per teaching day" in prompt
    assert '"Situation || Term"' in prompt
    assert 'exactly 2 item(s) in "days"' in prompt


def test_generate_las(fake_ai, las_form, las_content):
    calls = fake_ai(las_content)
    content, error = generate_las(las_form)
    assert error is None
    assert [d["activity_title"] for d in content["days"]] == ["Araw ng Tagpuan", "Ikalawang Araw"]
    assert calls[0]["schema"] is LAS_SCHEMA


def test_generate_las_wraps_a_single_sheet(fake_ai, las_form, las_content):
    fake_ai(las_content["days"][0])
    content, error = generate_las(las_form)
    assert error is None
    assert len(content["days"]) == 1


def test_generate_las_keeps_requested_days(fake_ai, las_form, las_content):
    las_form["num_days"] = 1
    fake_ai(las_content)
    content, _ = generate_las(las_form)
    assert len(content["days"]) == 1


def test_generate_las_without_days(fake_ai, las_form):
    fake_ai({"days": []})
    content, error = generate_las(las_form)
    assert content is None
    assert error == "AI Error: The Learning Activity Sheet has no days."

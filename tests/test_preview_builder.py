import pytest

from assessment_generator import build_table_of_specifications
from preview_builder import (
    build_preview, dlp_preview_html, esc, markdown_to_html, quiz_preview_html,
    reflection_rows, schedule_sections,
)


def test_esc_handles_none_and_markup():
    assert esc(None) == ""
    assert esc('<b>"x"</b>') == "&lt;b&gt;&quot;x&quot;&lt;/b&gt;"


def test_markdown_to_html():
    assert markdown_to_html("**Recall** the *elements*") == "<strong>Recall</strong> the <em>elements</em>"
    assert markdown_to_html("- Laptop\n- Projector") == "<ul><li>Laptop</li><li>Projector</li></ul>"
    assert markdown_to_html("1. Read\n2. Discuss") == "<ol><li>Read</li><li>Discuss</li></ol>"
    assert markdown_to_html("line one\nline two") == "line one<br>line two"
    assert markdown_to_html("<script>alert(1)</script>") == "&lt;script&gt;alert(1)&lt;/script&gt;"
    assert markdown_to_html(None) == ""


def test_schedule_sections():
    assert schedule_sections("G9 - Rizal\nG9 - Bonifacio\n\n") == ["G9 - Rizal", "G9 - Bonifacio"]
    assert schedule_sections("") == []


def test_reflection_rows_repeat_per_section(dlp_form):
    dlp_form["class_schedule"] = "G9 - Rizal\nG9 - Bonifacio"
    rows = reflection_rows(dlp_form)
    assert [label[0] for label, _ in rows] == list("ABCDEFG")
    assert rows[0][1] == [
        "___ out of ___ learners earned 80% and above - G9 - Rizal",
        "___ out of ___ learners earned 80% and above - G9 - Bonifacio",
    ]
    assert all(line.startswith("☐") for line in rows[4][1])


def test_reflection_rows_without_schedule_in_filipino(dlp_form):
    dlp_form["class_schedule"] = ""
    dlp_form["language"] = "Filipino"
    rows = reflection_rows(dlp_form)
    assert rows[0][0].startswith("A. Bilang ng mag-aaral")
    assert rows[0][1] == ["___ out of ___ learners earned 80% and above"]
    assert rows[2][1][0] == "☐ Oo ☐ Hindi"


def test_dlp_preview(dlp_form, dlp_content, settings):
    html = dlp_preview_html(dlp_form, dlp_content, settings)
    assert "DAILY LESSON PLAN IN" in html
    assert "RIZAL NATIONAL HIGH SCHOOL" in html
    assert "<strong>Recall</strong>" in html
    assert "1.1.2 Apply knowledge of content" in html
    assert 'src="data:image/png;base64,' in html
    assert "Answer Key (For Evaluating Learning)" in html
    assert "JUAN DELA CRUZ" in html


def test_dlp_preview_in_filipino(dlp_form, dlp_content):
    dlp_form["language"] = "Filipino"
    html = dlp_preview_html(dlp_form, dlp_content)
    assert "I. LAYUNIN" in html
    assert "Susi sa Pagwawasto" in html


def test_dlp_preview_escapes_ai_text(dlp_form, dlp_content):
    dlp_content["topic"] = "<img src=x onerror=alert(1)>"
    html = dlp_preview_html(dlp_form, dlp_content)
    assert "<img src=x" not in html
    assert "&lt;img src=x onerror=alert(1)&gt;" in html


def test_dll_preview(dll_form, dll_content):
    html = build_preview("dll", dll_form, dll_content)
    assert "Competency friday" in html
    assert "3. Textbook pages" in html
    assert "A. Reviewing previous lesson" in html


def test_las_preview(las_form, las_content, settings):
    html = build_preview("las", las_form, las_content, settings)
    assert "Dynamic Learning Program" in html
    assert "S.Y. 2025-2026" in html
    assert "Day 2 of 2: Ikalawang Araw" in html
    assert "Column A (Situation)" in html
    assert "<td " in html and "Sa palengke</td>" in html
    assert "Nilalaman" in html


def test_quiz_numbering_is_continuous(quiz_form, quiz_content):
    html = quiz_preview_html(quiz_form, quiz_content)
    assert '<ol start="1">' in html
    assert '<ol start="3">' in html
    assert "I. Multiple Choice" in html and "II. Identification" in html
    assert '<li value="3">Chlorophyll</li>' in html
    assert '<li value="4">Glucose</li>' in html


def test_quiz_preview_shows_rubric(quiz_form, quiz_content):
    quiz_content["activities"][0]["rubric"] = [{"criteria": "Accuracy", "points": 6},
                                               {"criteria": "Neatness", "points": 4}]
    html = quiz_preview_html(quiz_form, quiz_content)
    assert "Accuracy" in html
    assert "10 pts" in html


def test_exam_preview(exam_form):
    tos = build_table_of_specifications(exam_form["objectives"])
    content = {
        "title": "First Periodical Test",
        "subject": "Science",
        "grade_level": "10",
        "quarter": "1",
        "table_of_specifications": tos,
        "questions": [{"question_text": "Which plate?", "cognitive_level": "Remembering",
                       "options": ["A1", "B1", "C1", "D1"], "answer": "A"}],
    }
    html = build_preview("exam", exam_form, content)
    assert "TOTAL" in html
    assert "<th " in html and ">Rem</th>" in html
    assert "31-50" in html
    assert "100%" in html


def test_unknown_preview_type():
    with pytest.raises(KeyError):
        build_preview("memo", {}, {})

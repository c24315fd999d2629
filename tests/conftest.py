import copy

import pytest

# 1x1 PNG
PNG_DATA_URL = ("data:image/png;base64,"
                "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg==")

DLP_FORM = {
    "teacher": "Maria Santos",
    "school_name": "Rizal National High School",
    "subject": "English",
    "teaching_dates": "June 10, 2025",
    "class_schedule": "G9 - Rizal 7:30-8:30\nG9 - Bonifacio 9:00-10:00",
    "grade_level": "9",
    "quarter": "1ST QUARTER",
    "learning_competency": "Analyze literature as a means of valuing other people",
    "lesson_objective": "Identify the theme of a short story",
    "previous_lesson": "Elements of a short story",
    "teacher_position": "Proficient",
    "prepared_by_designation": "Teacher I",
    "language": "English",
    "dlp_format": "Standard DepEd",
    "prepared_by_name": "MARIA SANTOS",
    "checked_by_name": "JUAN DELA CRUZ",
    "checked_by_designation": "Learning Area Coordinator",
    "approved_by_name": "ANA REYES",
    "approved_by_designation": "School Principal II",
}

DLP_CONTENT = {
    "content_standard": "The learner demonstrates understanding of Anglo-American literature.",
    "performance_standard": "The learner stages a one-act play.",
    "topic": "Theme in The Necklace",
    "learning_references": "English 9 Learner's Material, pp. 12-20",
    "learning_materials": "- Laptop\n- Projector",
    "procedures": [
        {"title": "Review", "content": "**Recall** the elements of a short story. (LOTS)",
         "ppst": "1.1.2 Apply knowledge of content"},
        {"title": "Analysis", "content": "1. Read the story\n2. Discuss the theme (HOTS)",
         "ppst": "1.4.2 Use a range of teaching strategies"},
    ],
    "evaluation_questions": [
        {"question": f"Question {n}?", "options": ["Alpha", "Beta", "Gamma", "Delta"], "answer": "B"}
        for n in range(1, 6)
    ],
    "remarks_content": "Lesson delivered as planned.",
}

DLL_FORM = {
    "subject": "Science",
    "grade_level": "8",
    "weekly_topic": "Waves",
    "content_standard": "",
    "performance_standard": "",
    "teaching_dates": "June 9-13, 2025",
    "quarter": "3",
    "prepared_by_designation": "Teacher",
    "language": "English",
    "dll_format": "Standard",
    "prepared_by_name": "MARIA SANTOS",
    "checked_by_name": "",
    "checked_by_designation": "Learning Area Coordinator",
    "approved_by_name": "",
    "approved_by_designation": "School Principal II",
}


def _days(prefix):
    return {d: f"{prefix} {d}" for d in ("monday", "tuesday", "wednesday", "thursday", "friday")}


DLL_CONTENT = {
    "content_standard": "Waves carry energy.",
    "performance_standard": "Learners design a wave model.",
    "learning_competencies": _days("Competency"),
    "content": "Waves and their characteristics",
    "learning_resources": {k: _days(k) for k in (
        "teacher_guide_pages", "learner_materials_pages", "textbook_pages",
        "additional_materials", "other_resources")},
    "procedures": [dict(procedure="A. Reviewing previous lesson", **_days("Review"))],
    "remarks": "None",
    "reflection": [dict(procedure="A. No. of learners who earned 80%", **_days("___"))],
}

LAS_FORM = {
    "subject": "Filipino",
    "grade_level": "7",
    "learning_competency": "Natutukoy ang mga elemento ng kuwento",
    "lesson_objective": "Matukoy ang tagpuan",
    "activity_type": "Skills: Exercise / Drill",
    "language": "Filipino",
    "num_days": 2,
}


def _las_day(title):
    return {
        "activity_title": title,
        "learning_target": "Natutukoy ang tagpuan",
        "references": "Filipino 7 LM",
        "concept_notes": [{"title": "Tagpuan", "content": "Ang **tagpuan** ay lugar."}],
        "activities": [
            {"title": "Pagtapat-tapatin", "instructions": "Itapat ang hanay A sa B.\nSa palengke || Tagpuan",
             "questions": [], "rubric": []},
            {"title": "Sagutin", "instructions": "Sagutin ang tanong.",
             "questions": [
                 {"question_text": "Ano ang tagpuan?", "type": "Multiple Choice",
                  "options": ["Lugar", "Tauhan", "Banghay", "Tema"], "answer": "A"},
                 {"question_text": "Ipaliwanag.", "type": "Essay", "options": [], "answer": ""},
             ],
             "rubric": [{"criteria": "Nilalaman", "points": 5}]},
        ],
        "reflection": "Ano ang natutunan mo?",
    }


LAS_CONTENT = {"days": [_las_day("Araw ng Tagpuan"), _las_day("Ikalawang Araw")]}

QUIZ_FORM = {
    "quiz_topic": "Photosynthesis",
    "num_questions": 2,
    "quiz_types": ["Multiple Choice", "Identification"],
    "subject": "Science",
    "grade_level": "7",
}

QUIZ_CONTENT = {
    "quiz_title": "Photosynthesis Quiz",
    "table_of_specifications": [
        {"objective": "Describe photosynthesis", "cognitive_level": "Understanding", "item_numbers": "1-4"},
    ],
    "questions_by_type": {
        "Multiple Choice": {
            "instructions": "Choose the best answer.",
            "questions": [
                {"question_text": "What gas do plants absorb?", "options": ["O2", "CO2", "N2", "H2"],
                 "correct_answer": "B"},
                {"question_text": "Where does photosynthesis happen?",
                 "options": ["Root", "Stem", "Chloroplast", "Seed"], "correct_answer": "C"},
            ],
        },
        "Identification": {
            "instructions": "Write the correct term.",
            "questions": [
                {"question_text": "Green pigment in leaves.", "options": [], "correct_answer": "Chlorophyll"},
                {"question_text": "Sugar made by plants.", "options": [], "correct_answer": "Glucose"},
            ],
        },
    },
    "activities": [
        {"activity_name": "Leaf Model", "activity_instructions": "Build a leaf model."},
        {"activity_name": "Poster", "activity_instructions": "Make a poster."},
    ],
}

EXAM_FORM = {
    "subject": "Science",
    "grade_level": "10",
    "quarter": "1",
    "language": "English",
    "objectives": [
        {"text": "Describe plate boundaries", "days": 3},
        {"text": "Explain earthquakes", "days": 2},
    ],
}


@pytest.fixture
def dlp_form():
    return copy.deepcopy(DLP_FORM)


@pytest.fixture
def dlp_content():
    return copy.deepcopy(DLP_CONTENT)


@pytest.fixture
def dll_form():
    return copy.deepcopy(DLL_FORM)


@pytest.fixture
def dll_content():
    return copy.deepcopy(DLL_CONTENT)


@pytest.fixture
def las_form():
    return copy.deepcopy(LAS_FORM)


@pytest.fixture
def las_content():
    return copy.deepcopy(LAS_CONTENT)


@pytest.fixture
def quiz_form():
    return copy.deepcopy(QUIZ_FORM)


@pytest.fixture
def quiz_content():
    return copy.deepcopy(QUIZ_CONTENT)


@pytest.fixture
def exam_form():
    return copy.deepcopy(EXAM_FORM)


@pytest.fixture
def settings():
    return {
        "school_name": "Rizal National High School",
        "teacher_name": "Maria Santos",
        "school_year": "2025-2026",
        "school_logo": PNG_DATA_URL,
        "second_logo": "",
    }


@pytest.fixture
def fake_ai(monkeypatch):
    """Replace the AI call in the generator modules; returns the list of recorded calls."""
    calls = []
    replies = {}

    def fake_generate_json(prompt, schema=None, system_instruction="", provider=None,
                           api_key="", fast=False):
        calls.append({"prompt": prompt, "schema": schema, "provider": provider, "fast": fast})
        reply = replies["value"]
        if isinstance(reply, Exception):
            raise reply
        return copy.deepcopy(reply)

    monkeypatch.setattr("lesson_generator.generate_json", fake_generate_json)
    monkeypatch.setattr("assessment_generator.generate_json", fake_generate_json)

    def reply_with(value):
        replies["value"] = value
        return calls

    return reply_with


@pytest.fixture
def client():
    from app import app
    app.config["TESTING"] = True
    with app.test_client() as c:
        yield c

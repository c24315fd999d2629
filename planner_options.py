"""
Choices, defaults and form validation for the five planner panels.
"""

from schemas import QUIZ_TYPES

DOC_TYPES = ("dlp", "dll", "las", "quiz", "exam")

DOC_LABELS = {
    "dlp": "Daily Lesson Plan",
    "dll": "Weekly Plan (Daily Lesson Log)",
    "las": "Learning Activity Sheet",
    "quiz": "Quiz",
    "exam": "50-Item Periodical Exam",
}

GRADE_LEVELS = ["Kindergarten", "1", "2", "3", "4", "5", "6", "7", "8", "9", "10", "11", "12"]

SUBJECT_AREAS = {
    "Elementary (K-6)": [
        "Kindergarten (Domains)", "Mother Tongue", "Filipino", "English", "Mathematics",
        "Science", "Araling Panlipunan (AP)", "Edukasyon sa Pagpapakatao (EsP)", "Music",
        "Arts", "Physical Education (PE)", "Health",
        "Edukasyong Pantahanan at Pangkabuhayan (EPP)",
        "Technology and Livelihood Education (TLE)",
    ],
    "Junior High School (Grades 7-10)": [
        "Filipino", "English", "Mathematics", "Science", "Araling Panlipunan (AP)",
        "Edukasyon sa Pagpapakatao (EsP)", "Technology and Livelihood Education (TLE)",
        "Music", "Arts", "Physical Education (PE)", "Health",
    ],
    "Senior High School - Core (Grades 11-12)": [
        "21st Century Literature from the Philippines and the World",
        "Contemporary Philippine Arts from the Regions", "Earth and Life Science",
        "General Mathematics", "Introduction to the Philosophy of the Human Person",
        "Komunikasyon at Pananaliksik sa Wika at Kulturang Pilipino",
        "Media and Information Literacy", "Oral Communication in Context",
        "Pagbasa at Pagsusuri ng Iba't Ibang Teksto Tungo sa Pananaliksik",
        "Personal Development", "Physical Education and Health", "Physical Science",
        "Reading and Writing Skills", "Statistics and Probability",
        "Understanding Culture, Society and Politics",
    ],
    "Senior High School - Applied (Grades 11-12)": [
        "Empowerment Technologies", "English for Academic and Professional Purposes",
        "Entrepreneurship", "Filipino sa Piling Larang", "Practical Research 1",
        "Practical Research 2",
    ],
}

ACTIVITY_TYPES = [
    "Concept Notes", "Skills: Exercise / Drill", "Performance Task", "Illustration / Drawing",
    "Formal Theme", "Informal Theme", "Guided Practice", "Independent Practice",
    "Group Activity", "Problem Solving", "Creative Output", "Inquiry-Based Learning",
    "Experiment / Investigation", "Others",
]

LANGUAGES = ["English", "Filipino"]
TEACHER_POSITIONS = ["Beginning", "Proficient", "Highly Proficient", "Distinguished"]
DLP_FORMATS = ["Standard DepEd", "4As (Activity, Analysis, Abstraction, Application)",
               "5Es (Engage, Explore, Explain, Elaborate, Evaluate)"]
DLL_FORMATS = ["Standard", "4As (Activity, Analysis, Abstraction, Application)",
               "5Es (Engage, Explore, Explain, Elaborate, Evaluate)"]
DLP_QUARTERS = ["1ST QUARTER", "2ND QUARTER", "3RD QUARTER", "4TH QUARTER"]
QUARTERS = ["1", "2", "3", "4"]

MIN_QUIZ_QUESTIONS = 1
MAX_QUIZ_QUESTIONS = 20
MAX_LAS_DAYS = 5
EXAM_TOTAL_ITEMS = 50


def _signatories(settings):
    return {
        "prepared_by_name": (settings.get("teacher_name") or "").upper(),
        "checked_by_name": (settings.get("checked_by") or "").upper(),
        "checked_by_designation": settings.get("checker_designation") or "Learning Area Coordinator",
        "approved_by_name": (settings.get("principal_name") or "").upper(),
        "approved_by_designation": settings.get("principal_designation") or "School Principal II",
    }


def default_form(doc_type, settings=None):
    """Starting values for a planner panel, pre-filled from school settings."""
    settings = settings or {}
    if doc_type == "dlp":
        form = {
            "teacher": settings.get("teacher_name", ""),
            "school_name": settings.get("school_name", ""),
            "subject": "English",
            "teaching_dates": "",
            "class_schedule": "",
            "grade_level": "9",
            "quarter": "1ST QUARTER",
            "learning_competency": "",
            "lesson_objective": "",
            "previous_lesson": "",
            "teacher_position": "Beginning",
            "prepared_by_designation": "Secondary School Teacher I, Grade 9\nENGLISH Teacher",
            "language": "English",
            "dlp_format": "Standard DepEd",
        }
        form.update(_signatories(settings))
        return form
    if doc_type == "dll":
        form = {
            "subject": "English",
            "grade_level": "10",
            "weekly_topic": "",
            "content_standard": "",
            "performance_standard": "",
            "teaching_dates": "",
            "quarter": "3",
            "prepared_by_designation": "Teacher",
            "language": "English",
            "dll_format": "Standard",
        }
        form.update(_signatories(settings))
        return form
    if doc_type == "las":
        return {
            "subject": "Filipino",
            "grade_level": "7",
            "learning_competency": "",
            "lesson_objective": "",
            "activity_type": "Guided Practice",
            "language": "Filipino",
            "num_days": 1,
        }
    if doc_type == "quiz":
        return {
            "quiz_topic": "",
            "num_questions": 10,
            "quiz_types": ["Multiple Choice"],
            "subject": "English",
            "grade_level": "9",
        }
    if doc_type == "exam":
        return {
            "subject": "Science",
            "grade_level": "10",
            "quarter": "1",
            "language": "English",
            "objectives": [{"text": "", "days": ""}],
        }
    raise KeyError(doc_type)


def all_options(settings=None):
    """Everything the planner page needs to draw its forms."""
    return {
        "doc_types": DOC_LABELS,
        "grade_levels": GRADE_LEVELS,
        "subject_areas": SUBJECT_AREAS,
        "activity_types": ACTIVITY_TYPES,
        "languages": LANGUAGES,
        "teacher_positions": TEACHER_POSITIONS,
        "dlp_formats": DLP_FORMATS,
        "dll_formats": DLL_FORMATS,
        "dlp_quarters": DLP_QUARTERS,
        "quarters": QUARTERS,
        "quiz_types": QUIZ_TYPES,
        "defaults": {t: default_form(t, settings) for t in DOC_TYPES},
    }


def _text(form, key):
    value = form.get(key)
    return str(value).strip() if value is not None else ""


def _positive_int(value):
    try:
        n = int(str(value).strip())
    except (TypeError, ValueError):
        return None
    return n if n > 0 else None


def validate_form(doc_type, form):
    """
    Merge ``form`` over the panel defaults and check required fields.
    Returns (clean_form, error_message | None).
    """
    if form is not None and not isinstance(form, dict):
        return {}, "The form data must be a JSON object."
    if doc_type not in DOC_TYPES:
        return dict(form or {}), f"Unknown planner type: {doc_type}"

    clean = default_form(doc_type)
    clean.update({k: v for k, v in (form or {}).items() if v is not None})
    if clean.get("language") not in LANGUAGES:
        clean["language"] = "English"

    if doc_type == "dlp":
        required = ["teacher", "school_name", "subject", "teaching_dates", "class_schedule",
                    "grade_level", "learning_competency", "lesson_objective", "previous_lesson"]
        if any(not _text(clean, f) for f in required):
            return clean, "Please fill in all required DLP fields."
        if clean.get("teacher_position") not in TEACHER_POSITIONS:
            clean["teacher_position"] = "Beginning"
        if not clean.get("prepared_by_name"):
            clean["prepared_by_name"] = _text(clean, "teacher").upper()
        return clean, None

    if doc_type == "dll":
        if not _text(clean, "subject") or not _text(clean, "grade_level"):
            return clean, "Please provide a Subject and Grade Level."
        return clean, None

    if doc_type == "las":
        if not all(_text(clean, f) for f in ("subject", "learning_competency", "lesson_objective")):
            return clean, "Please fill in the Subject, Learning Competency, and Lesson Objective."
        days = _positive_int(clean.get("num_days")) or 1
        clean["num_days"] = min(days, MAX_LAS_DAYS)
        return clean, None

    if doc_type == "quiz":
        types = clean.get("quiz_types") or []
        if isinstance(types, str):
            types = [types]
        clean["quiz_types"] = [t for t in QUIZ_TYPES if t in types]
        if not _text(clean, "quiz_topic") or not clean["quiz_types"]:
            return clean, "Please provide a topic and select at least one quiz format."
        n = _positive_int(clean.get("num_questions")) or MIN_QUIZ_QUESTIONS
        clean["num_questions"] = max(MIN_QUIZ_QUESTIONS, min(n, MAX_QUIZ_QUESTIONS))
        return clean, None

    if doc_type == "exam":
        objectives = []
        for obj in clean.get("objectives") or []:
            if not isinstance(obj, dict):
                continue
            text = _text(obj, "text")
            days = _positive_int(obj.get("days"))
            if text and days:
                objectives.append({"text": text, "days": days})
        clean["objectives"] = objectives
        if not objectives:
            return clean, ("Please provide at least one valid learning objective "
                           "with the number of days taught.")
        if not _text(clean, "subject"):
            return clean, "Please provide a Subject."
        return clean, None

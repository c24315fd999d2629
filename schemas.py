"""
JSON shapes the AI is asked to return, one per planner.

The dicts use Gemini's schema dialect (upper-case type names) so they can be
passed straight to Gemini as ``response_schema`` and pasted into the prompt
for the other providers. ``normalize`` re-validates whatever comes back.
"""

import logging

from ai_client import AIResponseError

logger = logging.getLogger(__name__)


def _str(description=None):
    s = {"type": "STRING"}
    if description:
        s["description"] = description
    return s


def _arr(items, description=None):
    s = {"type": "ARRAY", "items": items}
    if description:
        s["description"] = description
    return s


def _obj(properties, required=None):
    s = {"type": "OBJECT", "properties": properties}
    if required:
        s["required"] = list(required)
    return s


WEEKDAYS = ["monday", "tuesday", "wednesday", "thursday", "friday"]

RUBRIC_ITEM = _obj({"criteria": _str(), "points": {"type": "NUMBER"}},
                   ["criteria", "points"])
RUBRIC_SCHEMA = _arr(RUBRIC_ITEM)

# ── DLP ──────────────────────────────────────────────────────

DLP_PROCEDURE = _obj({
    "title": _str(),
    "content": _str("Detailed teacher and student activities using markdown for formatting. "
                    "MUST explicitly label main activities as '(LOTS)' or '(HOTS)'."),
    "ppst": _str("Relevant PPST indicator for the procedure."),
}, ["title", "content", "ppst"])

DLP_QUESTION = _obj({
    "question": _str(),
    "options": _arr(_str(), "An array of exactly 4 string options."),
    "answer": _str(),
}, ["question", "options", "answer"])

DLP_SCHEMA = _obj({
    "content_standard": _str(),
    "performance_standard": _str(),
    "topic": _str(),
    "learning_references": _str(),
    "learning_materials": _str(),
    "procedures": _arr(DLP_PROCEDURE),
    "evaluation_questions": _arr(DLP_QUESTION, "An array of exactly 5 multiple-choice questions."),
    "remarks_content": _str(),
}, ["content_standard", "performance_standard", "topic", "learning_references",
    "learning_materials", "procedures", "evaluation_questions", "remarks_content"])

# ── DLL ──────────────────────────────────────────────────────

DAY_ENTRY = _obj({day: _str() for day in WEEKDAYS}, WEEKDAYS)
DLL_PROCEDURE = _obj(dict({"procedure": _str()}, **{day: _str() for day in WEEKDAYS}),
                     ["procedure"] + WEEKDAYS)

DLL_RESOURCE_KEYS = ["teacher_guide_pages", "learner_materials_pages", "textbook_pages",
                     "additional_materials", "other_resources"]

DLL_SCHEMA = _obj({
    "content_standard": _str(),
    "performance_standard": _str(),
    "learning_competencies": DAY_ENTRY,
    "content": _str(),
    "learning_resources": _obj({k: DAY_ENTRY for k in DLL_RESOURCE_KEYS}, DLL_RESOURCE_KEYS),
    "procedures": _arr(DLL_PROCEDURE),
    "remarks": _str(),
    "reflection": _arr(DLL_PROCEDURE),
}, ["content_standard", "performance_standard", "learning_competencies", "content",
    "learning_resources", "procedures", "remarks", "reflection"])

# ── LAS ──────────────────────────────────────────────────────

LAS_QUESTION_TYPES = ["Identification", "Essay", "Problem-solving", "Multiple Choice"]

LAS_QUESTION = _obj({
    "question_text": _str(),
    "type": {"type": "STRING", "enum": LAS_QUESTION_TYPES},
    "options": _arr(_str()),
    "answer": _str(),
}, ["question_text", "type"])

LAS_ACTIVITY = _obj({
    "title": _str(),
    "instructions": _str(),
    "questions": _arr(LAS_QUESTION),
    "rubric": _arr(RUBRIC_ITEM),
}, ["title", "instructions"])

LAS_DAY = _obj({
    "activity_title": _str(),
    "learning_target": _str(),
    "references": _str(),
    "concept_notes": _arr(_obj({"title": _str(), "content": _str()}, ["title", "content"])),
    "activities": _arr(LAS_ACTIVITY),
    "reflection": _str("A short reflection prompt for the learner."),
}, ["activity_title", "learning_target", "references", "concept_notes", "activities"])

LAS_SCHEMA = _obj({"days": _arr(LAS_DAY)}, ["days"])

# ── Quiz ─────────────────────────────────────────────────────

QUIZ_TYPES = ["Multiple Choice", "True or False", "Identification"]

QUIZ_QUESTION = _obj({
    "question_text": _str(),
    "options": _arr(_str()),
    "correct_answer": _str(),
}, ["question_text", "correct_answer"])

QUIZ_SECTION = _obj({"instructions": _str(), "questions": _arr(QUIZ_QUESTION)},
                    ["instructions", "questions"])

QUIZ_SCHEMA = _obj({
    "quiz_title": _str(),
    "table_of_specifications": _arr(_obj({
        "objective": _str(),
        "cognitive_level": _str(),
        "item_numbers": _str(),
    }, ["objective", "cognitive_level", "item_numbers"])),
    "questions_by_type": _obj({t: QUIZ_SECTION for t in QUIZ_TYPES}),
    "activities": _arr(_obj({
        "activity_name": _str(),
        "activity_instructions": _str(),
    }, ["activity_name", "activity_instructions"])),
}, ["quiz_title", "questions_by_type", "activities"])

# ── Exam ─────────────────────────────────────────────────────

EXAM_QUESTION = _obj({
    "question_text": _str(),
    "cognitive_level": _str(),
    "options": _arr(_str(), "An array of exactly 4 string options."),
    "answer": _str("The letter of the correct option (A, B, C or D)."),
}, ["question_text", "options", "answer"])

EXAM_SCHEMA = _obj({
    "title": _str(),
    "questions": _arr(EXAM_QUESTION),
}, ["title", "questions"])


# ── Re-validation ────────────────────────────────────────────

_EMPTY = {"STRING": "", "ARRAY": [], "OBJECT": {}, "NUMBER": 0}


def _coerce(value, schema, path):
    kind = schema.get("type")

    if kind == "OBJECT":
        if not isinstance(value, dict):
            raise AIResponseError(f"Expected an object at '{path}'.")
        out = dict(value)
        for key, sub in schema.get("properties", {}).items():
            if out.get(key) is None:
                out[key] = _coerce(_EMPTY[sub.get("type")], sub, f"{path}.{key}")
            else:
                out[key] = _coerce(out[key], sub, f"{path}.{key}")
        return out

    if kind == "ARRAY":
        if isinstance(value, dict):
            value = [value]
        elif not isinstance(value, list):
            value = [value] if value not in ("", None) else []
        return [_coerce(v, schema["items"], f"{path}[{i}]") for i, v in enumerate(value)
                if v is not None]

    if kind == "NUMBER":
        try:
            return float(value) if "." in str(value) else int(value)
        except (TypeError, ValueError):
            raise AIResponseError(f"Expected a number at '{path}', got {value!r}.")

    if value is None:
        return ""
    if isinstance(value, (list, dict)):
        return "\n".join(str(v) for v in value) if isinstance(value, list) else str(value)
    return str(value)


def normalize(data, schema, label="content"):
    """
    Re-validate an AI reply against ``schema``.

    Missing *required* top-level fields are an error; everything else that is
    missing gets an empty default so the renderers never see ``None``.
    """
    if schema.get("type") == "OBJECT":
        if not isinstance(data, dict):
            raise AIResponseError(f"The {label} must be a JSON object.")
        missing = [k for k in schema.get("required", []) if k not in data or data[k] is None]
        if missing:
            raise AIResponseError(
                f"The {label} is missing required field(s): {', '.join(missing)}.")
    return _coerce(data, schema, label)

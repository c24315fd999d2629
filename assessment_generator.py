"""
Assessment generator: quizzes with activity rubrics, and the 50-item
periodical exam built on a Table of Specifications (TOS).

The TOS arithmetic is done locally so the item counts always add up; the AI
only writes the questions.
"""

import copy
import logging
import re

from ai_client import (
    AIResponseError, AIServiceError, EFFICIENT_SYSTEM_INSTRUCTION,
    friendly_error_message, generate_json,
)
from schemas import EXAM_SCHEMA, QUIZ_SCHEMA, QUIZ_TYPES, RUBRIC_SCHEMA, normalize

logger = logging.getLogger(__name__)

OPTION_LETTERS = "ABCD"
# "B", "b.", "C) Root"
_LETTER_RE = re.compile(r'^([A-Da-d])(?:[.)].*)?$', re.DOTALL)

# Bloom's revised taxonomy, lower to higher order, with the share of items each gets
BLOOM_LEVELS = [
    ("remembering", "Remembering", 20),
    ("understanding", "Understanding", 20),
    ("applying", "Applying", 25),
    ("analyzing", "Analyzing", 15),
    ("evaluating", "Evaluating", 10),
    ("creating", "Creating", 10),
]


def _apportion(total, weights):
    """Split ``total`` into whole numbers proportional to ``weights`` (largest remainder)."""
    weight_sum = sum(weights)
    if total <= 0 or not weights:
        return [0] * len(weights)
    if weight_sum <= 0:
        weights = [1] * len(weights)
        weight_sum = len(weights)
    exact = [total * w / weight_sum for w in weights]
    counts = [int(x) for x in exact]
    order = sorted(range(len(weights)), key=lambda i: (-(exact[i] - counts[i]), i))
    for i in order[:total - sum(counts)]:
        counts[i] += 1
    return counts


def _pad_options(options, size=4):
    options = [o for o in options if str(o).strip()][:size]
    while len(options) < size:
        options.append("")
    return options


## ============================================================
## QUIZ
## ============================================================

def build_quiz_prompt(form):
    types = ", ".join(form.get("quiz_types") or [])
    n = form.get("num_questions", 10)
    return f"""Generate a comprehensive quiz for a Grade {form.get("grade_level", "")} {form.get("subject", "")} class on the topic: "{form.get("quiz_topic", "")}".

The quiz must include:
1. A suitable title for the quiz.
2. A simple Table of Specifications (TOS) linking objectives to item numbers.
3. The following quiz types: {types}.
4. Exactly {n} questions for EACH specified quiz type.
5. Clear instructions for each section.
6. For Multiple Choice questions, provide 4 options.
7. For all question types, provide the correct answer.
8. Two creative, performance-based activities related to the topic. Do not generate rubrics for them yet.

Return the result as a single JSON object."""


def generate_quiz(form, api_key=None, ai_provider=None):
    """Generate a quiz. Returns (content, error)."""
    selected = [t for t in QUIZ_TYPES if t in (form.get("quiz_types") or [])]
    n = int(form.get("num_questions", 10))
    try:
        data = generate_json(
            build_quiz_prompt(form),
            schema=QUIZ_SCHEMA,
            system_instruction=EFFICIENT_SYSTEM_INSTRUCTION,
            provider=ai_provider,
            api_key=api_key,
        )
        content = normalize(data, QUIZ_SCHEMA, "quiz")
    except (AIServiceError, AIResponseError) as e:
        logger.error("Quiz generation failed: %s", e)
        return None, friendly_error_message(e)

    sections = {}
    for qtype in selected:
        section = content["questions_by_type"].get(qtype)
        if not section or not section["questions"]:
            continue
        questions = section["questions"][:n]
        if qtype == "Multiple Choice":
            for q in questions:
                q["options"] = _pad_options(q["options"])
        sections[qtype] = {"instructions": section["instructions"], "questions": questions}
    if not sections:
        return None, "AI Error: The quiz came back without any questions for the selected formats."

    content["questions_by_type"] = sections
    return content, None


def build_rubric_prompt(activity_name, activity_instructions, total_points):
    return f"""Create a simple scoring rubric for the following activity. The total score must add up to exactly {total_points} points.

Activity Name: {activity_name}
Instructions: {activity_instructions}

Return as a JSON array where each item has "criteria" and "points"."""


def rebalance_rubric(rubric, total_points):
    """Scale rubric points to whole numbers that sum to exactly ``total_points``."""
    points = [max(float(r["points"]), 0) for r in rubric]
    if sum(points) == total_points and all(p == int(p) for p in points):
        return [dict(r, points=int(p)) for r, p in zip(rubric, points)]
    logger.info("Rebalancing rubric from %s to %d points", sum(points), total_points)
    scaled = _apportion(total_points, points)
    return [dict(r, points=p) for r, p in zip(rubric, scaled)]


def generate_rubric(activity_name, activity_instructions, total_points,
                    api_key=None, ai_provider=None):
    """Generate a rubric whose points sum to ``total_points``. Returns (rubric, error)."""
    try:
        total_points = int(total_points)
    except (TypeError, ValueError):
        total_points = 0
    if total_points <= 0:
        return None, "Please enter a valid number of points."

    try:
        data = generate_json(
            build_rubric_prompt(activity_name, activity_instructions, total_points),
            schema=RUBRIC_SCHEMA,
            system_instruction=EFFICIENT_SYSTEM_INSTRUCTION,
            provider=ai_provider,
            api_key=api_key,
            fast=True,
        )
        if isinstance(data, dict) and "rubric" in data:
            data = data["rubric"]
        rubric = [r for r in normalize(data, RUBRIC_SCHEMA, "rubric") if r["criteria"].strip()]
        if not rubric:
            raise AIResponseError("The rubric has no criteria.")
    except (AIServiceError, AIResponseError) as e:
        logger.error("Rubric generation failed: %s", e)
        return None, friendly_error_message(e)

    return rebalance_rubric(rubric, total_points), None


def attach_rubric(quiz, index, rubric):
    """Return a copy of ``quiz`` with ``rubric`` set on activity ``index``."""
    activities = quiz.get("activities") or []
    if not isinstance(index, int) or not 0 <= index < len(activities):
        raise ValueError(f"No activity at position {index}.")
    updated = copy.deepcopy(quiz)
    updated["activities"][index]["rubric"] = rubric
    return updated


## ============================================================
## PERIODICAL EXAM (TOS-driven)
## ============================================================

def _placement(first, count):
    if count <= 0:
        return ""
    if count == 1:
        return str(first)
    return f"{first}-{first + count - 1}"


def build_table_of_specifications(objectives, total_items=50):
    """
    Build TOS rows for ``objectives`` (dicts with ``text`` and ``days``).

    Items go to objectives in proportion to days taught, then each
    objective's items are split across the six cognitive levels. Both
    splits use the largest-remainder method, so every total is exact.
    """
    days = [int(o["days"]) for o in objectives]
    total_days = sum(days)
    item_counts = _apportion(total_items, days)
    level_weights = [w for _, _, w in BLOOM_LEVELS]

    rows = []
    next_item = 1
    for obj, d, count in zip(objectives, days, item_counts):
        row = {
            "objective": obj["text"],
            "days_taught": d,
            "percentage": round(d * 100.0 / total_days, 2) if total_days else 0,
            "num_items": count,
        }
        for (key, _, _), n in zip(BLOOM_LEVELS, _apportion(count, level_weights)):
            row[key] = n
        row["item_placement"] = _placement(next_item, count)
        next_item += count
        rows.append(row)
    return rows


def tos_totals(tos):
    """Column totals for the TOS footer row."""
    totals = {"days_taught": 0, "percentage": 0, "num_items": 0}
    totals.update({key: 0 for key, _, _ in BLOOM_LEVELS})
    for row in tos:
        for key in totals:
            totals[key] += row.get(key, 0)
    totals["percentage"] = round(totals["percentage"])
    return totals


def item_blueprint(tos):
    """One (item number, objective, cognitive level) triple per exam item, in order."""
    items = []
    number = 1
    for row in tos:
        for key, label, _ in BLOOM_LEVELS:
            for _ in range(row.get(key, 0)):
                items.append((number, row["objective"], label))
                number += 1
    return items


def build_exam_prompt(form, tos):
    blueprint = "\n".join(f"{n}. [{level}] {objective}"
                          for n, objective, level in item_blueprint(tos))
    total = sum(row["num_items"] for row in tos)
    return f"""Write a {total}-item periodical examination for Grade {form.get("grade_level", "")} {form.get("subject", "")}, Quarter {form.get("quarter", "")}, in {form.get("language", "English")}.

Follow this Table of Specifications exactly. Each line is one item: its number, the cognitive level it must target, and the learning objective it assesses.

{blueprint}

Rules:
1. Write exactly {total} multiple-choice questions, in the item order above.
2. Each question has exactly four (4) options and one correct answer.
3. The "answer" is the letter of the correct option (A, B, C or D).
4. Copy the cognitive level of each item into "cognitive_level".
5. Give the exam a suitable title.

Return the result as a single JSON object."""


def _answer_letter(answer, options):
    """Letter of the option ``answer`` names. Option text wins over a letter prefix."""
    answer = str(answer).strip()
    for letter, option in zip(OPTION_LETTERS, options):
        if option and option.strip().lower() == answer.lower():
            return letter
    match = _LETTER_RE.match(answer)
    if match:
        return match.group(1).upper()
    return answer


def _pad_with_answer(options, answer):
    """Pad ``options`` to four and return (options, answer letter) still naming the same option."""
    letter = _answer_letter(answer, options)
    position = OPTION_LETTERS.find(letter) if len(letter) == 1 else -1
    chosen = options[position] if 0 <= position < len(options) else ""
    padded = _pad_options(options)
    if str(chosen).strip():
        return padded, _answer_letter(chosen, padded)
    return padded, letter


def generate_exam(form, api_key=None, ai_provider=None, total_items=50):
    """Build the TOS and have the AI write one question per item. Returns (content, error)."""
    tos = build_table_of_specifications(form["objectives"], total_items)
    blueprint = item_blueprint(tos)
    try:
        data = generate_json(
            build_exam_prompt(form, tos),
            schema=EXAM_SCHEMA,
            system_instruction=EFFICIENT_SYSTEM_INSTRUCTION,
            provider=ai_provider,
            api_key=api_key,
        )
        exam = normalize(data, EXAM_SCHEMA, "exam")
        questions = exam["questions"]
        if len(questions) < len(blueprint):
            raise AIResponseError(
                f"The exam has only {len(questions)} of {len(blueprint)} questions. Please try again.")
    except (AIServiceError, AIResponseError) as e:
        logger.error("Exam generation failed: %s", e)
        return None, friendly_error_message(e)

    if len(questions) > len(blueprint):
        logger.warning("Exam had %d questions; keeping %d", len(questions), len(blueprint))
    questions = questions[:len(blueprint)]
    for q, (_, _, level) in zip(questions, blueprint):
        q["options"], q["answer"] = _pad_with_answer(q["options"], q["answer"])
        q["cognitive_level"] = level

    return {
        "title": exam["title"] or f"Periodical Examination in {form.get('subject', '')}",
        "subject": form.get("subject", ""),
        "grade_level": form.get("grade_level", ""),
        "quarter": form.get("quarter", ""),
        "table_of_specifications": tos,
        "questions": questions,
    }, None

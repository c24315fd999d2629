"""
AI Lesson Planner Engine
Builds prompts for DepEd Daily Lesson Plans, weekly Daily Lesson Logs and
Learning Activity Sheets, sends them to the AI provider and re-validates the
JSON that comes back.
"""

import logging

from ai_client import (
    AIResponseError, AIServiceError, EFFICIENT_SYSTEM_INSTRUCTION,
    friendly_error_message, generate_json,
)
from schemas import DLL_SCHEMA, DLP_SCHEMA, LAS_SCHEMA, normalize

logger = logging.getLogger(__name__)

DLP_EVALUATION_ITEMS = 5
DLP_OPTIONS_PER_QUESTION = 4


## ============================================================
## DAILY LESSON PLAN (DLP)
## ============================================================

def build_dlp_prompt(form):
    """Build the AI prompt for a DepEd Order No. 42, s. 2016 Daily Lesson Plan."""
    dlp_format = form.get("dlp_format", "Standard DepEd")
    position = form.get("teacher_position", "Beginning")

    return f"""
You are an expert instructional designer for the Philippine Department of Education. Your task is to generate a complete Daily Lesson Plan (DLP) strictly following DepEd Order No. 42, s. 2016.

**User Inputs:**
- Grade Level: {form.get("grade_level", "")}
- Subject: {form.get("subject", "")}
- Quarter: {form.get("quarter", "")}
- Learning Competency: {form.get("learning_competency", "")}
- Lesson Objective: {form.get("lesson_objective", "")}
- Previous Lesson Topic: {form.get("previous_lesson", "")}
- Language: {form.get("language", "English")}
- DLP Format: {dlp_format}
- Teacher Position: {position} Teacher

**Strict Generation Requirements:**

1.  **Alignment:** ALL generated content (standards, topic, activities, evaluation) MUST be directly and strongly anchored to the provided **Learning Competency** and **Lesson Objective**.
2.  **Standards & Topic:** Generate relevant Content and Performance Standards and a specific Topic based on the competency.
3.  **Procedures/Activities:**
    *   Structure the procedures according to the specified format ({dlp_format}). Begin with a review of the previous lesson ("{form.get("previous_lesson", "")}").
    *   For each procedure step, provide detailed teacher and student activities in the `content` field. Use Markdown for formatting (e.g., bolding, lists).
    *   **Crucially, you MUST explicitly label the main cognitive activities as either '(LOTS)' for Lower-Order Thinking Skills or '(HOTS)' for Higher-Order Thinking Skills.** Ensure a logical progression from LOTS to HOTS.
    *   All activities must be designed to help learners achieve the stated **Lesson Objective**.
4.  **Evaluation:**
    *   Create **exactly {DLP_EVALUATION_ITEMS} multiple-choice questions**.
    *   Each question must have **exactly four (4) options**.
    *   Provide the correct letter or full text answer for each question.
    *   The evaluation MUST directly and accurately assess the achievement of the **Lesson Objective**.
5.  **PPST Indicators:** For each procedure, assign relevant PPST indicators appropriate for a **{position} Teacher**.
6.  **Language:** Write all content in {form.get("language", "English")}.
7.  **Output Format:** Generate the output *directly* as a single JSON object. Do not include any extra text, conversation, or markdown formatting like ```json around the final JSON output.
"""


def _fix_dlp_evaluation(content):
    questions = content["evaluation_questions"]
    if len(questions) > DLP_EVALUATION_ITEMS:
        logger.warning("DLP evaluation had %d questions; keeping the first %d",
                       len(questions), DLP_EVALUATION_ITEMS)
        questions = questions[:DLP_EVALUATION_ITEMS]
    for q in questions:
        options = [o for o in q["options"] if o.strip()][:DLP_OPTIONS_PER_QUESTION]
        while len(options) < DLP_OPTIONS_PER_QUESTION:
            options.append("")
        q["options"] = options
    content["evaluation_questions"] = questions
    return content


def generate_dlp(form, api_key=None, ai_provider=None):
    """Generate DLP content. Returns (content, error)."""
    try:
        data = generate_json(
            build_dlp_prompt(form),
            schema=DLP_SCHEMA,
            system_instruction="You are an expert DepEd instructional designer generating a structured DLP in JSON format.",
            provider=ai_provider,
            api_key=api_key,
        )
        content = normalize(data, DLP_SCHEMA, "Daily Lesson Plan")
        if not content["procedures"]:
            raise AIResponseError("The Daily Lesson Plan has no procedures.")
        return _fix_dlp_evaluation(content), None
    except (AIServiceError, AIResponseError) as e:
        logger.error("DLP generation failed: %s", e)
        return None, friendly_error_message(e)


## ============================================================
## DAILY LESSON LOG (weekly plan)
## ============================================================

def build_dll_prompt(form):
    """Build the AI prompt for a one-week Daily Lesson Log."""
    topic = form.get("weekly_topic") or "(Suggest a relevant topic for this grade level and subject)"
    content_std = form.get("content_standard") or "(Generate an appropriate standard)"
    perf_std = form.get("performance_standard") or "(Generate an appropriate standard)"

    return f"""Generate a complete Daily Lesson Log (DLL) for a Grade {form.get("grade_level", "")} {form.get("subject", "")} class for one week.
- Topic for the week: {topic}
- Content Standard: {content_std}
- Performance Standard: {perf_std}
- Quarter: {form.get("quarter", "")}
- Language: {form.get("language", "English")}
- DLL Format: {form.get("dll_format", "Standard")}

Instructions:
1.  Create daily learning competencies/objectives for Monday to Friday.
2.  Fill in all sections (Content, Learning Resources, Procedures, Remarks, Reflection) with detailed, relevant, and coherent content for each day of the week.
3.  The procedures must be well-structured and developmentally appropriate, following the {form.get("dll_format", "Standard")} format.
4.  Return the output as a single JSON object."""


def generate_dll(form, api_key=None, ai_provider=None):
    """Generate weekly DLL content. Returns (content, error)."""
    try:
        data = generate_json(
            build_dll_prompt(form),
            schema=DLL_SCHEMA,
            system_instruction="You are an expert DepEd teacher creating a detailed weekly lesson log in JSON format.",
            provider=ai_provider,
            api_key=api_key,
        )
        return normalize(data, DLL_SCHEMA, "Daily Lesson Log"), None
    except (AIServiceError, AIResponseError) as e:
        logger.error("DLL generation failed: %s", e)
        return None, friendly_error_message(e)


## ============================================================
## LEARNING ACTIVITY SHEET (LAS)
## ============================================================

def build_las_prompt(form):
    """Build the AI prompt for a DLP-style Learning Activity Sheet."""
    num_days = int(form.get("num_days", 1) or 1)
    language = form.get("language", "English")
    day_line = ("one sheet" if num_days == 1
                else f"{num_days} sheets, one per teaching day, that build on each other")

    return f"""Create a comprehensive, DLP-style Learning Activity Sheet (LAS) in {language}.

Details:
- Subject: Grade {form.get("grade_level", "")} {form.get("subject", "")}
- Learning Competency: {form.get("learning_competency", "")}
- Learning Objective: {form.get("lesson_objective", "")}
- Activity Focus: {form.get("activity_type", "")}
- Number of days: {num_days} ({day_line})

Instructions (for each day in the "days" array):
1.  Create a main 'Activity Title' for the LAS.
2.  Formulate a clear 'Learning Target' based on the objective.
3.  Provide plausible 'References'.
4.  Write comprehensive 'Concept Notes' with clear explanations and examples about the topic.
5.  Design at least two distinct 'Activities' that align with the activity focus. Include questions (with answers for checkable types) and a scoring rubric for performance-based tasks.
6.  For matching activities, write each pair on its own line of the instructions as "Situation || Term".
7.  End with a short 'Reflection' prompt for the learner.
8.  Return as a single JSON object with exactly {num_days} item(s) in "days"."""


def generate_las(form, api_key=None, ai_provider=None):
    """Generate LAS content. Returns (content, error)."""
    num_days = int(form.get("num_days", 1) or 1)
    try:
        data = generate_json(
            build_las_prompt(form),
            schema=LAS_SCHEMA,
            system_instruction=EFFICIENT_SYSTEM_INSTRUCTION,
            provider=ai_provider,
            api_key=api_key,
        )
        # Some replies skip the wrapper and return a single sheet
        if isinstance(data, dict) and "days" not in data and "activity_title" in data:
            data = {"days": [data]}
        content = normalize(data, LAS_SCHEMA, "Learning Activity Sheet")
        if not content["days"]:
            raise AIResponseError("The Learning Activity Sheet has no days.")
        if len(content["days"]) > num_days:
            content["days"] = content["days"][:num_days]
        return content, None
    except (AIServiceError, AIResponseError) as e:
        logger.error("LAS generation failed: %s", e)
        return None, friendly_error_message(e)

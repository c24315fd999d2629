"""
DepEd Lesson Planners - Web Application
AI-assisted Daily Lesson Plans, weekly Daily Lesson Logs, Learning Activity
Sheets, quizzes and periodical exams, with HTML preview and Word export.
"""

import logging
import os

from dotenv import load_dotenv
from flask import Flask, render_template, request, jsonify, send_file

load_dotenv()

logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

from ai_client import DEFAULT_PROVIDER, check_api_status
from assessment_generator import attach_rubric, generate_exam, generate_quiz, generate_rubric
from docx_builder import build_docx
from lesson_generator import generate_dlp, generate_dll, generate_las
from planner_options import DOC_LABELS, DOC_TYPES, EXAM_TOTAL_ITEMS, all_options, validate_form
from preview_builder import build_preview

logger = logging.getLogger(__name__)

DOCX_MIMETYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"

GENERATORS = {
    "dlp": generate_dlp,
    "dll": generate_dll,
    "las": generate_las,
    "quiz": generate_quiz,
    "exam": lambda form, api_key=None, ai_provider=None: generate_exam(
        form, api_key=api_key, ai_provider=ai_provider, total_items=EXAM_TOTAL_ITEMS),
}

app = Flask(__name__)
app.secret_key = os.environ.get("FLASK_SECRET_KEY", os.urandom(24))

# Behind Nginx the X-Forwarded-* headers carry the real scheme/host
from werkzeug.middleware.proxy_fix import ProxyFix
app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)


# ── Security Headers ────────────────────────────────────────

@app.after_request
def add_security_headers(response):
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "SAMEORIGIN"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    response.headers["Cache-Control"] = "private, no-store, no-cache, must-revalidate"
    return response


# ── Error handlers: always return JSON for /api/* routes ────
@app.errorhandler(404)
def err_404(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "Not found"}), 404
    return str(e), 404

@app.errorhandler(405)
def err_405(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "Method not allowed"}), 405
    return str(e), 405

@app.errorhandler(500)
def err_500(e):
    if request.path.startswith("/api/"):
        return jsonify({"error": "Internal server error"}), 500
    return str(e), 500


# ── Helpers ─────────────────────────────────────────────────

def _request_data():
    data = request.get_json(silent=True)
    return data if isinstance(data, dict) else None


def _as_dict(value):
    return value if isinstance(value, dict) else {}


def _known_type(doc_type):
    return doc_type in DOC_TYPES


# ── Pages ───────────────────────────────────────────────────

@app.route("/")
def planners():
    return render_template("planners.html", doc_labels=DOC_LABELS,
                           default_provider=DEFAULT_PROVIDER)


# ── API ─────────────────────────────────────────────────────

@app.route("/api/options")
def api_options():
    """Dropdown choices and default forms for every planner."""
    return jsonify(all_options())


@app.route("/api/status", methods=["GET", "POST"])
def api_status():
    """Round-trip check; the page posts its provider and key choice."""
    data = _request_data() or {}
    provider = data.get("ai_provider") or request.args.get("ai_provider") or None
    return jsonify(check_api_status(provider=provider, api_key=data.get("api_key") or ""))


@app.route("/api/generate/<doc_type>", methods=["POST"])
def api_generate(doc_type):
    """Generate one planner document and its HTML preview."""
    if not _known_type(doc_type):
        return jsonify({"error": f"Unknown planner type: {doc_type}"}), 404
    data = _request_data()
    if not data:
        return jsonify({"error": "No data provided"}), 400

    form, error = validate_form(doc_type, data.get("form") or {})
    if error:
        return jsonify({"error": error}), 400
    settings = _as_dict(data.get("settings"))

    logger.info("Generating %s (%s)", doc_type, form.get("subject") or form.get("quiz_topic", ""))
    content, error = GENERATORS[doc_type](
        form, api_key=data.get("api_key", ""), ai_provider=data.get("ai_provider") or None)
    if error:
        return jsonify({"error": error}), 502

    return jsonify({
        "content": content,
        "form": form,
        "html": build_preview(doc_type, form, content, settings),
    })


@app.route("/api/generate-rubric", methods=["POST"])
def api_generate_rubric():
    """Generate a rubric for one quiz activity and attach it to the quiz."""
    data = _request_data()
    if not data:
        return jsonify({"error": "No data provided"}), 400

    quiz = data.get("quiz")
    if not isinstance(quiz, dict) or not quiz.get("activities"):
        return jsonify({"error": "A generated quiz with activities is required"}), 400
    try:
        index = int(data.get("activity_index", -1))
        total_points = int(data.get("total_points", 0))
    except (TypeError, ValueError):
        return jsonify({"error": "Please enter a valid number of points."}), 400
    if total_points <= 0:
        return jsonify({"error": "Please enter a valid number of points."}), 400
    if not 0 <= index < len(quiz["activities"]):
        return jsonify({"error": f"No activity at position {index}."}), 400

    activity = quiz["activities"][index]
    rubric, error = generate_rubric(
        activity.get("activity_name", ""), activity.get("activity_instructions", ""),
        total_points, api_key=data.get("api_key", ""), ai_provider=data.get("ai_provider") or None)
    if error:
        return jsonify({"error": error}), 502

    updated = attach_rubric(quiz, index, rubric)
    return jsonify({
        "content": updated,
        "rubric": rubric,
        "html": build_preview("quiz", _as_dict(data.get("form")), updated, _as_dict(data.get("settings"))),
    })


@app.route("/api/preview/<doc_type>", methods=["POST"])
def api_preview(doc_type):
    """Re-render the preview, e.g. after school settings change."""
    if not _known_type(doc_type):
        return jsonify({"error": f"Unknown planner type: {doc_type}"}), 404
    data = _request_data()
    if not data or not isinstance(data.get("content"), dict):
        return jsonify({"error": "Generated content is required"}), 400
    try:
        html = build_preview(doc_type, _as_dict(data.get("form")), data["content"],
                             _as_dict(data.get("settings")))
    except (KeyError, TypeError) as e:
        logger.warning("Preview failed for %s: %s", doc_type, e)
        return jsonify({"error": "The generated content is incomplete. Please generate it again."}), 400
    return jsonify({"html": html})


@app.route("/api/download-docx/<doc_type>", methods=["POST"])
def api_download_docx(doc_type):
    """Download the generated document as a Word file."""
    if not _known_type(doc_type):
        return jsonify({"error": f"Unknown planner type: {doc_type}"}), 404
    data = _request_data()
    if not data or not isinstance(data.get("content"), dict):
        return jsonify({"error": "Generated content is required"}), 400
    try:
        buf, filename = build_docx(doc_type, _as_dict(data.get("form")), data["content"],
                                   _as_dict(data.get("settings")))
    except (KeyError, TypeError) as e:
        logger.warning("Word export failed for %s: %s", doc_type, e)
        return jsonify({"error": "The generated content is incomplete. Please generate it again."}), 400

    return send_file(buf, mimetype=DOCX_MIMETYPE, as_attachment=True, download_name=filename)


if __name__ == "__main__":
    app.run(debug=False, host="0.0.0.0", port=int(os.environ.get("PORT", "8080")))

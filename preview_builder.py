"""
preview_builder.py
HTML previews for the planner page. Every value coming from the form or the
AI is escaped before it is placed in the markup.
"""

import html as html_lib
import re

from assessment_generator import BLOOM_LEVELS, tos_totals
from schemas import DLL_RESOURCE_KEYS, WEEKDAYS

TABLE = 'style="width:100%;border-collapse:collapse;"'
CELL = 'style="padding:6px;border:1px solid #ccc;vertical-align:top;text-align:left;"'
HEAD = 'style="padding:6px;border:1px solid #ccc;vertical-align:top;text-align:left;font-weight:bold;width:25%;"'
PPST = 'style="padding:6px;border:1px solid #ccc;vertical-align:top;font-style:italic;font-size:0.9em;width:30%;"'
SECTION = 'style="font-weight:bold;background:#eee;padding:4px;margin:14px 0 6px;"'
PAGE_BREAK = '<div style="page-break-before:always;"></div>'


def _cell(extra=""):
    return f'style="padding:6px;border:1px solid #ccc;vertical-align:top;text-align:left;{extra}"'


def esc(value):
    return html_lib.escape(str(value if value is not None else ""))


def markdown_to_html(text):
    """Convert the small markdown subset the AI uses in cells to HTML."""
    if not text:
        return ""
    h = html_lib.escape(str(text))

    h = re.sub(r'\*\*(.+?)\*\*', r'<strong>\1</strong>', h)
    h = re.sub(r'\*(?!\s)(.+?)\*', r'<em>\1</em>', h)

    h = re.sub(r'^\s*[-*•] (.+)$', r'<li>\1</li>', h, flags=re.MULTILINE)
    h = re.sub(r'^\s*\d+[.)]\s+(.+)$', r'<li class="num">\1</li>', h, flags=re.MULTILINE)
    h = re.sub(r'((?:<li class="num">.*?</li>\n?)+)', r'<ol>\1</ol>', h)
    h = re.sub(r'((?:<li>.*?</li>\n?)+)', r'<ul>\1</ul>', h)
    h = h.replace('<li class="num">', '<li>')

    h = re.sub(r'\n(?=<[ou]l>)|(?<=</[ou]l>)\n', '', h)
    h = h.replace('</li>\n', '</li>').replace('\n', '<br>')
    return h


def _multiline(text):
    return "<br>".join(esc(line) for line in str(text or "").split("\n"))


# ── Shared DLP labels ────────────────────────────────────────

def dlp_labels(language):
    fil = language == "Filipino"
    return {
        "school": "Paaralan" if fil else "School",
        "teacher": "Guro" if fil else "Teacher",
        "learning_area": "Asignatura" if fil else "Learning Area",
        "teaching_dates": "Petsa ng Pagtuturo" if fil else "Teaching Dates",
        "class_schedule": "ISKEDYUL NG KLASE" if fil else "CLASS SCHEDULE",
        "title": "DETALYADONG BANGHAY-ARALIN SA" if fil else "DAILY LESSON PLAN IN",
        "objectives": "I. LAYUNIN" if fil else "I. OBJECTIVES",
        "content_standard": "Pamantayang Pangnilalaman:" if fil else "Content Standard:",
        "performance_standard": "Pamantayan sa Pagganap:" if fil else "Performance Standard:",
        "learning_competency": "Kasanayan sa Pagkatuto:" if fil else "Learning Competency:",
        "at_the_end": ("Sa pagtatapos ng aralin, ang mga mag-aaral ay inaasahang:" if fil
                       else "At the end of the lesson, the learners should be able to:"),
        "content": "II. NILALAMAN" if fil else "II. CONTENT",
        "topic": "Paksa:" if fil else "Topic:",
        "resources": "III. KAGAMITANG PANTURO" if fil else "III. LEARNING RESOURCES",
        "references": "Sanggunian:" if fil else "References:",
        "materials": "Kagamitan:" if fil else "Materials:",
        "procedure": "IV. PAMAMARAAN" if fil else "IV. PROCEDURE",
        "procedure_col": "Pamamaraan" if fil else "Procedure",
        "activity_col": "Gawain ng Guro/Mag-aaral" if fil else "Teacher/Student Activity",
        "ppst_col": "Mga Kaugnay na PPST Indicator" if fil else "Aligned PPST Indicators",
        "evaluation": "Pagtataya" if fil else "Evaluating Learning",
        "remarks": "V. MGA TALA" if fil else "V. REMARKS",
        "reflection": "VI. PAGNINILAY" if fil else "VI. REFLECTION",
        "answer_key": "Susi sa Pagwawasto" if fil else "Answer Key (For Evaluating Learning)",
        "prepared_by": "Inihanda ni:" if fil else "Prepared by:",
        "checked_by": "Sinuri ni:" if fil else "Checked by:",
        "approved_by": "Pinagtibay ni:" if fil else "Approved by:",
    }


def schedule_sections(class_schedule):
    """Section names from the class schedule, one per line (e.g. 'G9 - Rizal')."""
    sections = []
    for line in str(class_schedule or "").split("\n"):
        match = re.search(r'([Gg]?\d+\s*-\s*[\w\s]+|[\w\s]+)', line)
        name = match.group(0).strip().replace(",", "") if match else line.strip()
        if name:
            sections.append(name)
    return sections


def reflection_rows(form):
    """(label, [lines]) for reflection rows A-G; checkbox lines start with ☐."""
    fil = form.get("language") == "Filipino"
    sections = schedule_sections(form.get("class_schedule"))

    def per_section(text):
        if not sections:
            return [text]
        return [f"{text} - {sec}" for sec in sections]

    return [
        ("A. Bilang ng mag-aaral na nakakuha ng 80% sa pagtataya" if fil
         else "A. No. of learners who earned 80% in the evaluation",
         per_section("___ out of ___ learners earned 80% and above")),
        ("B. Bilang ng mag-aaral na nangangailangan ng remediation na nakakuha ng mababa sa 80%" if fil
         else "B. No. of learners who require additional activities for remediation who score below 80%",
         per_section("___ out of ___ learners require additional activities")),
        ("C. Nakatulong ba ang remedial? Bilang ng mag-aaral na nakaunawa sa aralin." if fil
         else "C. Did the remedial lessons work? No. of learners who have caught up with the lessons.",
         ["☐ Oo ☐ Hindi" if fil else "☐ YES ☐ NO",
          "☐ ___ " + ("na mag-aaral ang nakaunawa sa aralin" if fil
                      else "learners caught up with the lesson")]),
        ("D. Bilang ng mga mag-aaral na magpapatuloy sa remediation." if fil
         else "D. No. of learners who continue to require remediation",
         ["☐ ___ " + ("na mag-aaral ang magpapatuloy sa remediation" if fil
                      else "learners continue to require remediation")]),
        ("E. Alin sa mga istratehiyang pagtuturo nakatulong ng lubos? Paano ito nakatulong?" if fil
         else "E. Which of my teaching strategies work well? Why did this work?",
         ["☐ " + s for s in ("experiment", "collaborative learning", "differentiated instruction",
                             "lecture", "think-pair-share", "role play", "discovery", "board work")]),
        ("F. Anong suliranin ang aking naranasan na solusyunan sa tulong ang aking punungguro at superbisor?" if fil
         else "F. What difficulties did I encounter which my principal or supervisor can help me solve?",
         ["☐ " + s for s in ("bullying among students", "student's behavior/attitude",
                             "unavailable technology/equipment (AVR/LCD)", "internet lab")]),
        ("G. Anong kagamitang panturo ang aking nadibuho na nais kong ibahagi sa mga kapwa ko guro." if fil
         else "G. What innovation or localized materials did I use / discover which I wish to share with other teachers.",
         ["☐ " + s for s in ("localized videos", "colorful worksheets", "local jingle composition")]),
    ]


def dll_labels(language):
    fil = language == "Filipino"
    return {
        "days": (["Lunes", "Martes", "Miyerkules", "Huwebes", "Biyernes"] if fil
                 else ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]),
        "objectives": "I. LAYUNIN" if fil else "I. OBJECTIVES",
        "content_standard": "A. Pamantayang Pangnilalaman" if fil else "A. Content Standard",
        "performance_standard": "B. Pamantayan sa Pagganap" if fil else "B. Performance Standard",
        "learning_competencies": "C. Mga Kasanayan sa Pagkatuto" if fil else "C. Learning Competencies",
        "content": "II. NILALAMAN" if fil else "II. CONTENT",
        "resources": "III. KAGAMITANG PANTURO" if fil else "III. LEARNING RESOURCES",
        "procedures": "IV. PAMAMARAAN" if fil else "IV. PROCEDURES",
        "remarks": "V. MGA TALA" if fil else "V. REMARKS",
        "reflection": "VI. PAGNINILAY" if fil else "VI. REFLECTION",
        "resource_rows": {
            "teacher_guide_pages": "1. Teacher's Guide pages",
            "learner_materials_pages": "2. Learner's Materials pages",
            "textbook_pages": "3. Textbook pages",
            "additional_materials": "4. Additional Materials from Learning Resource (LR) portal",
            "other_resources": "B. Other Learning Resources",
        },
    }


def _signatory_block(form, labels):
    cells = [
        (labels["prepared_by"], form.get("prepared_by_name") or str(form.get("teacher", "")).upper(),
         form.get("prepared_by_designation", "")),
        (labels["checked_by"], form.get("checked_by_name", ""), form.get("checked_by_designation", "")),
        (labels["approved_by"], form.get("approved_by_name", ""), form.get("approved_by_designation", "")),
    ]
    tds = "".join(
        f'<td style="padding:6px;width:33%;vertical-align:top;">{esc(label)}<br><br>'
        f'<strong>{esc(name)}</strong><br>{_multiline(designation)}</td>'
        for label, name, designation in cells
    )
    return f'<table style="width:100%;border-collapse:collapse;margin-top:18px;"><tr>{tds}</tr></table>'


def _logo(data_url):
    if not data_url or not str(data_url).startswith("data:image/"):
        return ""
    return f'<img src="{esc(data_url)}" alt="logo" style="width:60px;height:60px;">'


## ============================================================
## DLP
## ============================================================

def dlp_preview_html(form, content, settings=None):
    settings = settings or {}
    t = dlp_labels(form.get("language"))
    subject = str(form.get("subject", "")).upper()

    parts = [f"""
<div class="doc dlp" style="font-family:'Times New Roman',serif;font-size:14px;">
<table {TABLE}>
  <tr><td {_cell("width:15%;text-align:center;")} rowspan="5">{_logo(settings.get("school_logo"))}</td>
      <td {CELL}><strong>{t["school"]}:</strong> {esc(str(form.get("school_name", "")).upper())}</td>
      <td {_cell("text-align:center;")} rowspan="2"><strong>{t["title"]}<br>{esc(subject)} {esc(form.get("grade_level", ""))}</strong></td></tr>
  <tr><td {CELL}><strong>{esc(form.get("quarter", ""))}</strong></td></tr>
  <tr><td {CELL}><strong>{t["teacher"]}:</strong> {esc(form.get("teacher", ""))}</td>
      <td {CELL} rowspan="3"><strong>{t["class_schedule"]}</strong><br>{_multiline(form.get("class_schedule"))}</td></tr>
  <tr><td {CELL}><strong>{t["learning_area"]}:</strong> {esc(subject)}</td></tr>
  <tr><td {CELL}><strong>{t["teaching_dates"]}:</strong> {esc(form.get("teaching_dates", ""))}</td></tr>
</table>
<h3 {SECTION}>{t["objectives"]}</h3>
<table {TABLE}>
  <tr><td {HEAD}>{t["content_standard"]}</td><td {CELL}>{esc(content["content_standard"])}</td></tr>
  <tr><td {HEAD}>{t["performance_standard"]}</td><td {CELL}>{esc(content["performance_standard"])}</td></tr>
  <tr><td {HEAD}>{t["learning_competency"]}</td><td {CELL}>{esc(form.get("learning_competency", ""))}</td></tr>
  <tr><td {CELL} colspan="2">{t["at_the_end"]}<ul><li>{esc(form.get("lesson_objective", ""))}</li></ul></td></tr>
</table>
<h3 {SECTION}>{t["content"]}</h3>
<table {TABLE}><tr><td {HEAD}>{t["topic"]}</td><td {CELL}>{esc(content["topic"])}</td></tr></table>
<h3 {SECTION}>{t["resources"]}</h3>
<table {TABLE}>
  <tr><td {HEAD}>{t["references"]}</td><td {CELL}>{markdown_to_html(content["learning_references"])}</td></tr>
  <tr><td {HEAD}>{t["materials"]}</td><td {CELL}>{markdown_to_html(content["learning_materials"])}</td></tr>
</table>
<h3 {SECTION}>{t["procedure"]}</h3>
<table {TABLE}>
  <tr><th {HEAD}>{t["procedure_col"]}</th><th {CELL}>{t["activity_col"]}</th><th {PPST}>{t["ppst_col"]}</th></tr>"""]

    for proc in content["procedures"]:
        parts.append(
            f'<tr><td {HEAD}>{esc(proc["title"])}</td><td {CELL}>{markdown_to_html(proc["content"])}</td>'
            f'<td {PPST}>{esc(proc["ppst"])}</td></tr>')
    parts.append("</table>")

    parts.append(f'<h4 style="margin-top:10px;">{t["evaluation"]}</h4><ol>')
    for q in content["evaluation_questions"]:
        opts = "".join(f"<li>{esc(o)}</li>" for o in q["options"])
        parts.append(f'<li>{esc(q["question"])}<ol type="A">{opts}</ol></li>')
    parts.append("</ol>")

    parts.append(f'<h3 {SECTION}>{t["remarks"]}</h3>'
                 f'<div style="border:1px solid #ccc;padding:8px;min-height:60px;">'
                 f'{markdown_to_html(content["remarks_content"])}</div>')
    parts.append(f'<h3 {SECTION}>{t["reflection"]}</h3><table {TABLE}>')
    for label, lines in reflection_rows(form):
        body = "".join(f"<p style=\"margin:2px 0;\">{esc(line)}</p>" for line in lines)
        parts.append(f'<tr><td {_cell("font-weight:bold;width:40%;")}>{esc(label)}</td><td {CELL}>{body}</td></tr>')
    parts.append("</table>")
    parts.append(_signatory_block(form, t))

    parts.append(f'{PAGE_BREAK}<h3>{t["answer_key"]}</h3><ol>')
    parts.extend(f"<li>{esc(q['answer'])}</li>" for q in content["evaluation_questions"])
    parts.append("</ol></div>")
    return "\n".join(parts)


## ============================================================
## DLL
## ============================================================

def _day_row(label, day_map, bold=False):
    cells = "".join(f"<td {CELL}>{markdown_to_html(day_map.get(day, ''))}</td>" for day in WEEKDAYS)
    weight = "font-weight:bold;" if bold else "font-weight:600;"
    return f'<tr><td {_cell(weight + "width:16%;")}>{esc(label)}</td>{cells}</tr>'


def _span_row(label, text=""):
    value = f"<td {CELL} colspan=\"5\">{markdown_to_html(text)}</td>" if text is not None else ""
    colspan = "" if text is not None else ' colspan="6"'
    return f'<tr style="background:#f3f3f3;"><td {_cell("font-weight:bold;")}{colspan}>{esc(label)}</td>{value}</tr>'


def dll_preview_html(form, content, settings=None):
    t = dll_labels(form.get("language"))
    head = "".join(f"<th {CELL}>{esc(d)}</th>" for d in t["days"])
    rows = [
        _span_row(t["objectives"], None),
        _span_row(t["content_standard"], content["content_standard"]),
        _span_row(t["performance_standard"], content["performance_standard"]),
        _day_row(t["learning_competencies"], content["learning_competencies"], bold=True),
        _span_row(t["content"], content["content"]),
        _span_row(t["resources"], None),
    ]
    for key in DLL_RESOURCE_KEYS:
        rows.append(_day_row(t["resource_rows"][key], content["learning_resources"].get(key, {})))
    rows.append(_span_row(t["procedures"], None))
    rows.extend(_day_row(p["procedure"], p) for p in content["procedures"])
    rows.append(_span_row(t["remarks"], content["remarks"]))
    rows.append(_span_row(t["reflection"], None))
    rows.extend(_day_row(r["procedure"], r) for r in content["reflection"])

    return f"""
<div class="doc dll" style="font-size:13px;">
<p><strong>Grade {esc(form.get("grade_level", ""))} {esc(form.get("subject", ""))}</strong>
 &middot; Quarter {esc(form.get("quarter", ""))} &middot; {esc(form.get("teaching_dates", ""))}</p>
<table {TABLE}>
<tr><th {CELL}></th>{head}</tr>
{"".join(rows)}
</table>
{_signatory_block(form, dlp_labels(form.get("language")))}
</div>"""


## ============================================================
## LAS
## ============================================================

def _las_question_html(q):
    if q["type"] == "Multiple Choice" and q["options"]:
        opts = "".join(f"<li>{esc(o)}</li>" for o in q["options"])
        return f'<li>{esc(q["question_text"])}<ol type="A">{opts}</ol></li>'
    lines = 3 if q["type"] in ("Essay", "Problem-solving") else 1
    blanks = "<br>".join("_" * 60 for _ in range(lines))
    return f'<li>{esc(q["question_text"])}<br>{blanks}</li>'


def _matching_table(instructions):
    pairs = [line.split("||", 1) for line in instructions.split("\n") if "||" in line]
    intro = [line for line in instructions.split("\n") if "||" not in line and line.strip()]
    rows = "".join(f"<tr><td {CELL}>{esc(a.strip())}</td><td {CELL}>{esc(b.strip())}</td></tr>"
                   for a, b in pairs)
    return (markdown_to_html("\n".join(intro)) +
            f'<table {TABLE}><tr><th {CELL}>Column A (Situation)</th><th {CELL}>Column B (Term)</th></tr>{rows}</table>')


def las_preview_html(form, content, settings=None):
    settings = settings or {}
    parts = ['<div class="doc las" style="font-family:\'Century Gothic\',sans-serif;font-size:13px;">']
    total = len(content["days"])
    for i, day in enumerate(content["days"]):
        if i:
            parts.append(PAGE_BREAK)
        heading = f"Day {i + 1} of {total}: " if total > 1 else ""
        parts.append(f"""
<div style="text-align:center;">{_logo(settings.get("school_logo"))} {_logo(settings.get("second_logo"))}
<h3 style="margin:4px 0;">Dynamic Learning Program</h3>
<p>{esc(settings.get("school_name", ""))} &middot; S.Y. {esc(settings.get("school_year", ""))}</p></div>
<h2 style="text-align:center;">{esc(heading)}{esc(day["activity_title"])}</h2>
<p>Name: ____________________ Grade &amp; Section: __________ Date: __________ Score: ______</p>
<p><strong>Activity Type:</strong> {esc(form.get("activity_type", ""))}</p>
<table {TABLE}>
  <tr><td {HEAD}>Subject</td><td {CELL}>Grade {esc(form.get("grade_level", ""))} {esc(form.get("subject", ""))}</td></tr>
  <tr><td {HEAD}>Learning Competency</td><td {CELL}>{esc(form.get("learning_competency", ""))}</td></tr>
  <tr><td {HEAD}>Learning Target</td><td {CELL}>{esc(day["learning_target"])}</td></tr>
  <tr><td {HEAD}>References</td><td {CELL}>{markdown_to_html(day["references"])}</td></tr>
</table>
<h3 {SECTION}>Concept Notes</h3>""")
        for note in day["concept_notes"]:
            parts.append(f'<h4>{esc(note["title"])}</h4><div>{markdown_to_html(note["content"])}</div>')
        for n, act in enumerate(day["activities"], 1):
            parts.append(f'<h3 {SECTION}>Activity {n}: {esc(act["title"])}</h3>')
            if "||" in act["instructions"]:
                parts.append(_matching_table(act["instructions"]))
            else:
                parts.append(f'<div>{markdown_to_html(act["instructions"])}</div>')
            if act["questions"]:
                parts.append("<ol>" + "".join(_las_question_html(q) for q in act["questions"]) + "</ol>")
            if act["rubric"]:
                parts.append(_rubric_table(act["rubric"]))
        if day["reflection"]:
            lines = "<br>".join("_" * 80 for _ in range(3))
            parts.append(f'<h3 {SECTION}>Reflection</h3><p>{esc(day["reflection"])}</p><p>{lines}</p>')
    parts.append("</div>")
    return "\n".join(parts)


## ============================================================
## Quiz
## ============================================================

def _rubric_table(rubric):
    rows = "".join(f'<tr><td {CELL}>{esc(r["criteria"])}</td>'
                   f'<td {_cell("text-align:right;font-weight:bold;")}>{esc(r["points"])} pts</td></tr>'
                   for r in rubric)
    total = sum(r["points"] for r in rubric)
    return (f'<table {TABLE}><tr><th {CELL}>Criteria</th><th {CELL}>Points</th></tr>{rows}'
            f'<tr><td {_cell("font-weight:bold;")}>Total</td>'
            f'<td {_cell("text-align:right;font-weight:bold;")}>{esc(total)} pts</td></tr></table>')


def quiz_preview_html(form, content, settings=None):
    parts = [f'<div class="doc quiz"><h2 style="text-align:center;">{esc(content["quiz_title"])}</h2>',
             "<p>Name: ____________________ Grade &amp; Section: __________ Score: ______</p>"]

    if content["table_of_specifications"]:
        rows = "".join(f'<tr><td {CELL}>{esc(r["objective"])}</td><td {CELL}>{esc(r["cognitive_level"])}</td>'
                       f'<td {CELL}>{esc(r["item_numbers"])}</td></tr>'
                       for r in content["table_of_specifications"])
        parts.append(f'<h3 {SECTION}>Table of Specifications</h3><table {TABLE}>'
                     f'<tr><th {CELL}>Objective</th><th {CELL}>Cognitive Level</th><th {CELL}>Item Numbers</th></tr>'
                     f'{rows}</table>')

    number = 1
    key = []
    for roman, (qtype, section) in zip(("I", "II", "III", "IV"), content["questions_by_type"].items()):
        parts.append(f'<h3 {SECTION}>{roman}. {esc(qtype)}</h3><p><em>{esc(section["instructions"])}</em></p>'
                     f'<ol start="{number}">')
        for q in section["questions"]:
            if qtype == "Multiple Choice":
                opts = "".join(f"<li>{esc(o)}</li>" for o in q["options"])
                parts.append(f'<li>{esc(q["question_text"])}<ol type="A">{opts}</ol></li>')
            else:
                parts.append(f'<li>{esc(q["question_text"])} Answer: ____</li>')
            key.append((number, q["correct_answer"]))
            number += 1
        parts.append("</ol>")

    for i, act in enumerate(content["activities"], 1):
        parts.append(f'<h3 {SECTION}>Activity {i}: {esc(act["activity_name"])}</h3>'
                     f'<div>{markdown_to_html(act["activity_instructions"])}</div>')
        if act.get("rubric"):
            parts.append(_rubric_table(act["rubric"]))

    parts.append(f"{PAGE_BREAK}<h3>Answer Key</h3><ol>")
    parts.extend(f'<li value="{n}">{esc(ans)}</li>' for n, ans in key)
    parts.append("</ol></div>")
    return "\n".join(parts)


## ============================================================
## Exam
## ============================================================

def exam_preview_html(form, content, settings=None):
    tos = content["table_of_specifications"]
    level_heads = "".join(f"<th {CELL}>{label[:3]}</th>" for _, label, _ in BLOOM_LEVELS)
    rows = []
    for r in tos:
        levels = "".join(f"<td {CELL}>{esc(r[key])}</td>" for key, _, _ in BLOOM_LEVELS)
        rows.append(f'<tr><td {CELL}>{esc(r["objective"])}</td><td {CELL}>{esc(r["days_taught"])}</td>'
                    f'<td {CELL}>{esc(r["percentage"])}%</td><td {CELL}>{esc(r["num_items"])}</td>'
                    f'{levels}<td {CELL}>{esc(r["item_placement"])}</td></tr>')
    totals = tos_totals(tos)
    total_levels = "".join(f"<td {CELL}>{totals[key]}</td>" for key, _, _ in BLOOM_LEVELS)
    rows.append(f'<tr style="font-weight:bold;"><td {CELL}>TOTAL</td><td {CELL}>{totals["days_taught"]}</td>'
                f'<td {CELL}>{totals["percentage"]}%</td><td {CELL}>{totals["num_items"]}</td>'
                f'{total_levels}<td {CELL}></td></tr>')

    parts = [f"""
<div class="doc exam">
<h2 style="text-align:center;">{esc(content["title"])}</h2>
<p style="text-align:center;">Grade {esc(content["grade_level"])} {esc(content["subject"])} &middot; Quarter {esc(content["quarter"])}</p>
<h3 {SECTION}>Table of Specifications</h3>
<table {TABLE}>
<tr><th {CELL}>Objective</th><th {CELL}>Days</th><th {CELL}>%</th><th {CELL}>Items</th>{level_heads}<th {CELL}>Placement</th></tr>
{"".join(rows)}
</table>
<h3 {SECTION}>Test Questions</h3><ol>"""]
    for q in content["questions"]:
        opts = "".join(f"<li>{esc(o)}</li>" for o in q["options"])
        parts.append(f'<li>{esc(q["question_text"])}<ol type="A">{opts}</ol></li>')
    parts.append(f"</ol>{PAGE_BREAK}<h3>Answer Key</h3><ol>")
    parts.extend(f"<li>{esc(q['answer'])}</li>" for q in content["questions"])
    parts.append("</ol></div>")
    return "\n".join(parts)


PREVIEWS = {
    "dlp": dlp_preview_html,
    "dll": dll_preview_html,
    "las": las_preview_html,
    "quiz": quiz_preview_html,
    "exam": exam_preview_html,
}


def build_preview(doc_type, form, content, settings=None):
    """HTML preview for ``content``; raises KeyError for an unknown doc type."""
    return PREVIEWS[doc_type](form or {}, content, settings or {})

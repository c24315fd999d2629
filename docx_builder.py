"""
docx_builder.py
Word (.docx) export for the five planners.
Each builder takes the validated form, the AI content and the school settings
and returns (BytesIO, filename).
"""

import base64
import binascii
import logging
import re
from io import BytesIO

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_CELL_VERTICAL_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.image.exceptions import (
    InvalidImageStreamError, UnexpectedEndOfFileError, UnrecognizedImageError,
)
from docx.oxml import OxmlElement, parse_xml
from docx.oxml.ns import nsdecls, qn
from docx.shared import Inches, Mm, Pt

from assessment_generator import BLOOM_LEVELS, OPTION_LETTERS, tos_totals
from preview_builder import dlp_labels, dll_labels, reflection_rows
from schemas import DLL_RESOURCE_KEYS, WEEKDAYS

logger = logging.getLogger(__name__)

# Section header shading on the DLP, keyed by grade level
GRADE_COLORS = {
    "7": "90EE90",
    "8": "FFFFE0",
    "9": "F08080",
    "10": "ADD8E6",
}
DEFAULT_SHADE = "D9D9D9"
HEADER_SHADE = "F2F2F2"

LONG_BOND_W = Inches(8.5)
LONG_BOND_H = Inches(13)
MARGIN = Inches(0.5)

LAS_ACTIVITY_GRID = [
    ["Concept Notes", "Performance Task", "Formal Theme", "Others: ________"],
    ["Skills: Exercise / Drill", "Illustration", "Informal Theme", ""],
]

_DATA_URL_RE = re.compile(r'^data:image/(png|jpe?g|gif|bmp);base64,(.+)$', re.DOTALL)
_INLINE_RE = re.compile(r'(\*\*.+?\*\*|\*[^*\s][^*]*?\*)')
_BULLET_RE = re.compile(r'^[-*•]\s+(.*)$')
_NUMBERED_RE = re.compile(r'^(\d+)[.)]\s+(.*)$')


# ── Helpers ───────────────────────────────────────────────────

def _new_document(font_name, font_size, width=None, height=None, landscape=False):
    doc = Document()
    section = doc.sections[0]
    if landscape:
        section.orientation = WD_ORIENT.LANDSCAPE
    if width is not None:
        section.page_width = width
        section.page_height = height
    section.top_margin = section.bottom_margin = MARGIN
    section.left_margin = section.right_margin = MARGIN

    style = doc.styles["Normal"]
    style.font.name = font_name
    style.font.size = Pt(font_size)
    style.element.rPr.rFonts.set(qn("w:eastAsia"), font_name)
    return doc


def _shade(cell, color_hex):
    shading_elm = parse_xml(r'<w:shd {} w:fill="{}"/>'.format(nsdecls("w"), color_hex))
    cell._tc.get_or_add_tcPr().append(shading_elm)


def _hide_borders(table):
    tbl_pr = table._tbl.tblPr
    borders = OxmlElement("w:tblBorders")
    for edge in ("top", "left", "bottom", "right", "insideH", "insideV"):
        el = OxmlElement(f"w:{edge}")
        el.set(qn("w:val"), "nil")
        borders.append(el)
    tbl_pr.append(borders)


def _set_widths(table, widths):
    table.autofit = False
    for row in table.rows:
        for cell, width in zip(row.cells, widths):
            cell.width = width


def _grid(container, cols, style="Table Grid"):
    table = container.add_table(rows=0, cols=cols)
    if style:
        table.style = style
    return table


def _paragraph(container):
    """New paragraph, reusing the empty one a fresh table cell starts with."""
    paras = container.paragraphs
    if len(paras) == 1 and not paras[0].text and not paras[0].runs:
        return paras[0]
    return container.add_paragraph()


def _add_runs(paragraph, text, bold=False, italic=False, size=None):
    """Add ``text`` to ``paragraph`` honouring **bold** and *italic* markers."""
    for piece in _INLINE_RE.split(str(text)):
        if not piece:
            continue
        if piece.startswith("**") and piece.endswith("**") and len(piece) > 4:
            run = paragraph.add_run(piece[2:-2])
            run.bold = True
        elif piece.startswith("*") and piece.endswith("*") and len(piece) > 2:
            run = paragraph.add_run(piece[1:-1])
            run.italic = True
            run.bold = bold or None
        else:
            run = paragraph.add_run(piece)
            run.bold = bold or None
            run.italic = italic or None
        if size:
            run.font.size = Pt(size)
    return paragraph


def _add_markdown(container, text, size=None):
    """One paragraph per line; bullets and numbered lines are indented."""
    for line in str(text or "").split("\n"):
        stripped = line.strip()
        if not stripped:
            continue
        p = _paragraph(container)
        bullet = _BULLET_RE.match(stripped)
        numbered = _NUMBERED_RE.match(stripped)
        if bullet:
            p.paragraph_format.left_indent = Inches(0.25)
            _add_runs(p, "• " + bullet.group(1), size=size)
        elif numbered:
            p.paragraph_format.left_indent = Inches(0.25)
            _add_runs(p, f"{numbered.group(1)}. {numbered.group(2)}", size=size)
        else:
            _add_runs(p, stripped, size=size)


def _cell_text(cell, text, bold=False, italic=False, align=None, size=None):
    p = _paragraph(cell)
    for i, line in enumerate(str(text or "").split("\n")):
        if i:
            p.add_run().add_break()
        _add_runs(p, line, bold=bold, italic=italic, size=size)
    if align is not None:
        p.alignment = align
    return cell


def _labelled(cell, label, value, size=None):
    p = _paragraph(cell)
    run = p.add_run(label)
    run.bold = True
    if size:
        run.font.size = Pt(size)
    _add_runs(p, value, size=size)
    return cell


def _image_stream(data_url):
    """Decode a png/jpg/gif/bmp data URL; anything else is skipped."""
    if not data_url:
        return None
    match = _DATA_URL_RE.match(str(data_url).strip())
    if not match:
        logger.warning("Skipping unsupported image format: %s", str(data_url)[:30])
        return None
    try:
        return BytesIO(base64.b64decode(re.sub(r"\s+", "", match.group(2)), validate=True))
    except (binascii.Error, ValueError):
        logger.warning("Skipping image with invalid base64 data")
        return None


def _add_image(paragraph, data_url, width):
    stream = _image_stream(data_url)
    if stream is None:
        return False
    try:
        paragraph.add_run().add_picture(stream, width=width)
        return True
    except (UnrecognizedImageError, InvalidImageStreamError, UnexpectedEndOfFileError,
            ValueError, IndexError) as e:
        logger.warning("Skipping corrupt image: %s", e)
        return False


def _safe_name(text, fallback="Document"):
    name = re.sub(r'[\\/:*?"<>|]', "", str(text or "").strip())
    return re.sub(r"\s+", "_", name) or fallback


def _save(doc, filename):
    buf = BytesIO()
    doc.save(buf)
    buf.seek(0)
    return buf, filename


def _signatories(doc, form, t):
    table = _grid(doc, 3, style=None)
    row = table.add_row().cells
    entries = [
        (t["prepared_by"], form.get("prepared_by_name") or str(form.get("teacher", "")).upper(),
         form.get("prepared_by_designation", "")),
        (t["checked_by"], form.get("checked_by_name", ""), form.get("checked_by_designation", "")),
        (t["approved_by"], form.get("approved_by_name", ""), form.get("approved_by_designation", "")),
    ]
    for cell, (label, name, designation) in zip(row, entries):
        _cell_text(cell, label)
        cell.add_paragraph()
        _add_runs(cell.add_paragraph(), name, bold=True)
        for line in str(designation or "").split("\n"):
            cell.add_paragraph(line)
    return table


def _rubric_table(container, rubric):
    table = _grid(container, 2)
    head = table.add_row().cells
    _cell_text(head[0], "Criteria", bold=True)
    _cell_text(head[1], "Points", bold=True)
    for item in rubric:
        cells = table.add_row().cells
        _cell_text(cells[0], item.get("criteria", ""))
        _cell_text(cells[1], str(item.get("points", "")), align=WD_ALIGN_PARAGRAPH.CENTER)
    total = table.add_row().cells
    _cell_text(total[0], "Total", bold=True)
    _cell_text(total[1], str(sum(r.get("points", 0) for r in rubric)), bold=True,
               align=WD_ALIGN_PARAGRAPH.CENTER)
    return table


## ============================================================
## DLP
## ============================================================

def build_dlp_docx(form, content, settings):
    t = dlp_labels(form.get("language"))
    color = GRADE_COLORS.get(str(form.get("grade_level", "")).strip(), DEFAULT_SHADE)
    subject = str(form.get("subject", "")).upper()
    doc = _new_document("Times New Roman", 11, Mm(210), Mm(297))

    # Header: logo | school block | title + class schedule
    header = _grid(doc, 3)
    for _ in range(5):
        header.add_row()
    _set_widths(header, [Inches(1.1), Inches(3.9), Inches(2.5)])
    logo = header.cell(0, 0).merge(header.cell(4, 0))
    logo.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    logo_p = _paragraph(logo)
    logo_p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _add_image(logo_p, settings.get("school_logo"), Inches(0.8))

    _labelled(header.cell(0, 1), f"{t['school']}: ", str(form.get("school_name", "")).upper())
    _cell_text(header.cell(1, 1), form.get("quarter", ""), bold=True)
    _labelled(header.cell(2, 1), f"{t['teacher']}: ", form.get("teacher", ""))
    _labelled(header.cell(3, 1), f"{t['learning_area']}: ", subject)
    _labelled(header.cell(4, 1), f"{t['teaching_dates']}: ", form.get("teaching_dates", ""))

    title = header.cell(0, 2).merge(header.cell(1, 2))
    title.vertical_alignment = WD_CELL_VERTICAL_ALIGNMENT.CENTER
    _cell_text(title, f"{t['title']}\n{subject} {form.get('grade_level', '')}", bold=True,
               align=WD_ALIGN_PARAGRAPH.CENTER)
    schedule = header.cell(2, 2).merge(header.cell(4, 2))
    _cell_text(schedule, t["class_schedule"], bold=True)
    for line in str(form.get("class_schedule", "")).split("\n"):
        schedule.add_paragraph(line)

    doc.add_paragraph()

    main = _grid(doc, 2)

    def section_row(text):
        row = main.add_row()
        cell = row.cells[0].merge(row.cells[1])
        _cell_text(cell, text, bold=True)
        _shade(cell, color)
        return cell

    def field_row(label, value, markdown=False):
        cells = main.add_row().cells
        _cell_text(cells[0], label, bold=True)
        if markdown:
            _add_markdown(cells[1], value)
        else:
            _cell_text(cells[1], value)

    def wide_row():
        row = main.add_row()
        return row.cells[0].merge(row.cells[1])

    section_row(t["objectives"])
    field_row(t["content_standard"], content["content_standard"])
    field_row(t["performance_standard"], content["performance_standard"])
    field_row(t["learning_competency"], form.get("learning_competency", ""))
    objectives = wide_row()
    _cell_text(objectives, t["at_the_end"])
    _add_runs(objectives.add_paragraph(), "• " + str(form.get("lesson_objective", "")))

    section_row(t["content"])
    field_row(t["topic"], content["topic"])

    section_row(t["resources"])
    field_row(t["references"], content["learning_references"], markdown=True)
    field_row(t["materials"], content["learning_materials"], markdown=True)

    section_row(t["procedure"])
    holder = wide_row()
    procedures = _grid(holder, 3)
    head = procedures.add_row().cells
    for cell, text in zip(head, (t["procedure_col"], t["activity_col"], t["ppst_col"])):
        _cell_text(cell, text, bold=True)
        _shade(cell, color)
    for proc in content["procedures"]:
        cells = procedures.add_row().cells
        _cell_text(cells[0], proc["title"], bold=True)
        _add_markdown(cells[1], proc["content"])
        _cell_text(cells[2], proc["ppst"], italic=True, size=9)
    _set_widths(procedures, [Inches(1.75), Inches(3.15), Inches(2.1)])

    evaluation = wide_row()
    _cell_text(evaluation, t["evaluation"], bold=True)
    for n, q in enumerate(content["evaluation_questions"], 1):
        _add_runs(evaluation.add_paragraph(), f"{n}. {q['question']}")
        for letter, option in zip(OPTION_LETTERS, q["options"]):
            p = evaluation.add_paragraph(f"{letter}. {option}")
            p.paragraph_format.left_indent = Inches(0.4)

    section_row(t["remarks"])
    _add_markdown(wide_row(), content["remarks_content"] or " ")

    section_row(t["reflection"])
    for label, lines in reflection_rows(form):
        cells = main.add_row().cells
        _cell_text(cells[0], label, bold=True)
        for line in lines:
            _paragraph(cells[1]).add_run(line)
    _set_widths(main, [Inches(1.9), Inches(5.6)])

    doc.add_paragraph()
    _signatories(doc, form, t)

    doc.add_page_break()
    doc.add_heading(t["answer_key"], level=2)
    for n, q in enumerate(content["evaluation_questions"], 1):
        doc.add_paragraph(f"{n}. {q['answer']}")

    return _save(doc, f"DLP_{_safe_name(form.get('subject'))}.docx")


## ============================================================
## DLL
## ============================================================

def build_dll_docx(form, content, settings):
    t = dll_labels(form.get("language"))
    doc = _new_document("Arial", 9, LONG_BOND_H, LONG_BOND_W, landscape=True)

    p = doc.add_paragraph()
    p.alignment = WD_ALIGN_PARAGRAPH.CENTER
    run = p.add_run("DAILY LESSON LOG")
    run.bold = True
    run.font.size = Pt(14)

    header = _grid(doc, 4, style=None)
    top = header.add_row().cells
    _labelled(top[0], "School: ", settings.get("school_name", ""))
    _labelled(top[1], "Grade Level: ", form.get("grade_level", ""))
    _labelled(top[2], "Teacher: ", settings.get("teacher_name") or form.get("prepared_by_name", ""))
    _labelled(top[3], "Learning Area: ", form.get("subject", ""))
    bottom = header.add_row().cells
    _labelled(bottom[0], "Teaching Dates & Time: ", form.get("teaching_dates", ""))
    _labelled(bottom[1], "Quarter: ", form.get("quarter", ""))
    _hide_borders(header)

    doc.add_paragraph()

    main = _grid(doc, 6)
    days = main.add_row().cells
    for cell, day in zip(days[1:], t["days"]):
        _cell_text(cell, day, bold=True, align=WD_ALIGN_PARAGRAPH.CENTER)
        _shade(cell, HEADER_SHADE)

    def section_row(text):
        row = main.add_row()
        cell = row.cells[0].merge(row.cells[5])
        _cell_text(cell, text, bold=True)
        _shade(cell, HEADER_SHADE)

    def span_row(label, text):
        row = main.add_row()
        _cell_text(row.cells[0], label, bold=True)
        _add_markdown(row.cells[1].merge(row.cells[5]), text)

    def day_row(label, day_map, bold=False):
        cells = main.add_row().cells
        _cell_text(cells[0], label, bold=bold)
        for cell, day in zip(cells[1:], WEEKDAYS):
            _add_markdown(cell, day_map.get(day, ""))

    section_row(t["objectives"])
    span_row(t["content_standard"], content["content_standard"])
    span_row(t["performance_standard"], content["performance_standard"])
    day_row(t["learning_competencies"], content["learning_competencies"], bold=True)
    span_row(t["content"], content["content"])

    section_row(t["resources"])
    for key in DLL_RESOURCE_KEYS:
        day_row(t["resource_rows"][key], content["learning_resources"].get(key, {}))

    section_row(t["procedures"])
    for proc in content["procedures"]:
        day_row(proc["procedure"], proc, bold=True)

    span_row(t["remarks"], content["remarks"])

    section_row(t["reflection"])
    for item in content["reflection"]:
        day_row(item["procedure"], item)

    _set_widths(main, [Inches(2.0)] + [Inches(2.0)] * 5)

    doc.add_paragraph()
    _signatories(doc, form, dlp_labels(form.get("language")))

    return _save(doc, f"DLL_{_safe_name(form.get('subject'))}.docx")


## ============================================================
## LAS
## ============================================================

def _activity_checkbox(label, activity_type):
    if not label:
        return ""
    checked = label.lower().split(":")[0] in str(activity_type or "").lower()
    return f"{'☑' if checked else '☐'} {label}"


def _las_header(doc, settings):
    table = _grid(doc, 3, style=None)
    cells = table.add_row().cells
    _set_widths(table, [Inches(1.5), Inches(3.5), Inches(2.5)])

    left = _paragraph(cells[0])
    left.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _add_image(left, settings.get("school_logo"), Inches(0.9))

    _cell_text(cells[1], "Dynamic Learning Program", bold=True, size=14,
               align=WD_ALIGN_PARAGRAPH.CENTER)
    if settings.get("school_name"):
        p = cells[1].add_paragraph(str(settings["school_name"]).upper())
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER

    right = _paragraph(cells[2])
    right.alignment = WD_ALIGN_PARAGRAPH.CENTER
    _add_image(right, settings.get("second_logo"), Inches(0.7))
    box = _grid(cells[2], 1)
    _cell_text(box.add_row().cells[0], f"S.Y. {settings.get('school_year', '')}", bold=True,
               align=WD_ALIGN_PARAGRAPH.CENTER)
    _cell_text(box.add_row().cells[0], "Q1 - LAS - _________", bold=True)
    _hide_borders(table)


def _las_activity(doc, activity):
    p = doc.add_paragraph()
    p.paragraph_format.space_before = Pt(12)
    p.add_run(str(activity["title"]).upper()).bold = True

    instructions = activity["instructions"]
    if "||" in instructions:
        lines = instructions.split("\n")
        directions = " ".join(l.strip() for l in lines if "||" not in l and l.strip())
        if directions:
            d = doc.add_paragraph()
            d.add_run("Directions: ").bold = True
            _add_runs(d, directions)
        table = _grid(doc, 2)
        head = table.add_row().cells
        _cell_text(head[0], "Column A (Situation)", bold=True)
        _cell_text(head[1], "Column B (Term)", bold=True)
        for line in lines:
            if "||" not in line:
                continue
            left, right = line.split("||", 1)
            cells = table.add_row().cells
            _add_markdown(cells[0], left.strip() or " ")
            _add_markdown(cells[1], right.strip() or " ")
        doc.add_paragraph()
    else:
        _add_markdown(doc, instructions)

    for n, q in enumerate(activity["questions"], 1):
        qp = doc.add_paragraph()
        qp.paragraph_format.space_before = Pt(3)
        qp.add_run(f"{n}. ").bold = True
        _add_runs(qp, q["question_text"])
        if q["options"]:
            for letter, option in zip(OPTION_LETTERS, q["options"]):
                op = doc.add_paragraph(f"{letter}. {option}")
                op.paragraph_format.left_indent = Inches(0.5)
        else:
            lp = doc.add_paragraph("_" * 40)
            lp.paragraph_format.left_indent = Inches(0.5)

    if activity["rubric"]:
        _rubric_table(doc, activity["rubric"])


def build_las_docx(form, content, settings):
    doc = _new_document("Century Gothic", 12, LONG_BOND_W, LONG_BOND_H)
    total = len(content["days"])

    for index, day in enumerate(content["days"]):
        if index:
            doc.add_page_break()
        _las_header(doc, settings)

        title = doc.add_paragraph()
        title.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = title.add_run("LEARNING ACTIVITY SHEET")
        run.bold = True
        run.font.size = Pt(14)
        if total > 1:
            title.add_run(f"\nDay {index + 1}").bold = True

        info = _grid(doc, 2)
        row = info.add_row().cells
        _cell_text(row[0], "Name: _______________________________________")
        _cell_text(row[1], "Score: ________")
        row = info.add_row().cells
        _cell_text(row[0], f"Grade & Section: {form.get('grade_level', '')} - _______________")
        _cell_text(row[1], "Date: ________")
        _set_widths(info, [Inches(5.25), Inches(2.25)])

        kinds = _grid(doc, 4)
        first = kinds.add_row()
        _cell_text(first.cells[0].merge(first.cells[3]),
                   "Type of Activity: (Check or choose from below.)", bold=True)
        for labels in LAS_ACTIVITY_GRID:
            cells = kinds.add_row().cells
            for cell, label in zip(cells, labels):
                _cell_text(cell, _activity_checkbox(label, form.get("activity_type")))

        details = _grid(doc, 1)
        _labelled(details.add_row().cells[0], "Activity Title: ", day["activity_title"])
        _labelled(details.add_row().cells[0], "Learning Target: ", day["learning_target"])
        _labelled(details.add_row().cells[0], "References: ",
                  "(Author, Title, Pages) " + day["references"])

        doc.add_paragraph()

        for note in day["concept_notes"]:
            p = doc.add_paragraph()
            p.add_run(str(note["title"]).upper()).bold = True
            _add_markdown(doc, note["content"])

        for activity in day["activities"]:
            _las_activity(doc, activity)

        p = doc.add_paragraph()
        p.paragraph_format.space_before = Pt(12)
        p.add_run("REFLECTION").bold = True
        if day["reflection"]:
            doc.add_paragraph(day["reflection"])
        for _ in range(2):
            line = doc.add_paragraph("_" * 75)
            line.paragraph_format.space_before = Pt(10)

    return _save(doc, f"LAS_{_safe_name(form.get('subject'))}.docx")


## ============================================================
## Quiz
## ============================================================

def build_quiz_docx(form, content, settings):
    doc = _new_document("Calibri", 11)
    title = doc.add_heading(content["quiz_title"], level=0)
    title.alignment = WD_ALIGN_PARAGRAPH.CENTER
    for line in ("Name: __________________________",
                 "Grade & Section: __________________________",
                 "Score: _________"):
        doc.add_paragraph(line)

    if content["table_of_specifications"]:
        doc.add_heading("Table of Specifications", level=2)
        tos = _grid(doc, 3)
        head = tos.add_row().cells
        for cell, text in zip(head, ("Objective", "Cognitive Level", "Item Numbers")):
            _cell_text(cell, text, bold=True)
            _shade(cell, HEADER_SHADE)
        for item in content["table_of_specifications"]:
            cells = tos.add_row().cells
            _cell_text(cells[0], item["objective"])
            _cell_text(cells[1], item["cognitive_level"])
            _cell_text(cells[2], item["item_numbers"])

    answers = []
    number = 1
    for qtype, section in content["questions_by_type"].items():
        doc.add_heading(qtype, level=1)
        _add_runs(doc.add_paragraph(), section["instructions"], italic=True)
        section_answers = []
        for q in section["questions"]:
            _add_runs(doc.add_paragraph(), f"{number}. {q['question_text']}")
            if q.get("options"):
                for letter, option in zip(OPTION_LETTERS, q["options"]):
                    p = doc.add_paragraph(f"{letter}. {option}")
                    p.paragraph_format.left_indent = Inches(0.75)
            else:
                p = doc.add_paragraph("Answer: ____________________")
                p.paragraph_format.left_indent = Inches(0.75)
            section_answers.append(f"{number}. {q['correct_answer']}")
            number += 1
        answers.append((qtype, section_answers))

    if content["activities"]:
        doc.add_heading("Activities", level=1)
        for activity in content["activities"]:
            doc.add_heading(activity["activity_name"], level=2)
            _add_markdown(doc, activity["activity_instructions"])
            if activity.get("rubric"):
                _rubric_table(doc, activity["rubric"])

    doc.add_page_break()
    key = doc.add_heading("Answer Key", level=0)
    key.alignment = WD_ALIGN_PARAGRAPH.CENTER
    for qtype, lines in answers:
        doc.add_heading(qtype, level=1)
        for line in lines:
            doc.add_paragraph(line)

    return _save(doc, f"{_safe_name(content['quiz_title'], 'Quiz')}_Quiz.docx")


## ============================================================
## Exam
## ============================================================

def build_exam_docx(form, content, settings):
    doc = _new_document("Times New Roman", 11, LONG_BOND_W, LONG_BOND_H)

    for text, size in ((settings.get("school_name", ""), 12),
                       (content["title"], 14),
                       (f"Grade {content['grade_level']} {content['subject']} - Quarter {content['quarter']}", 11)):
        if not text:
            continue
        p = doc.add_paragraph()
        p.alignment = WD_ALIGN_PARAGRAPH.CENTER
        run = p.add_run(str(text))
        run.bold = True
        run.font.size = Pt(size)

    doc.add_heading("Table of Specifications", level=2)
    levels = [label for _, label, _ in BLOOM_LEVELS]
    tos = _grid(doc, 5 + len(levels))
    top = tos.add_row().cells
    sub = tos.add_row().cells
    fixed = ["Learning Objective", "No. of Days", "%", "No. of Items"]
    for i, text in enumerate(fixed):
        cell = top[i].merge(sub[i])
        _cell_text(cell, text, bold=True, size=9, align=WD_ALIGN_PARAGRAPH.CENTER)
        _shade(cell, HEADER_SHADE)
    level_head = top[4].merge(top[3 + len(levels)])
    _cell_text(level_head, "Cognitive Level", bold=True, size=9, align=WD_ALIGN_PARAGRAPH.CENTER)
    _shade(level_head, HEADER_SHADE)
    for cell, label in zip(sub[4:4 + len(levels)], levels):
        _cell_text(cell, label, bold=True, size=8, align=WD_ALIGN_PARAGRAPH.CENTER)
        _shade(cell, HEADER_SHADE)
    placement = top[-1].merge(sub[-1])
    _cell_text(placement, "Item Placement", bold=True, size=9, align=WD_ALIGN_PARAGRAPH.CENTER)
    _shade(placement, HEADER_SHADE)

    for row in content["table_of_specifications"]:
        cells = tos.add_row().cells
        values = [row["days_taught"], f"{row['percentage']}%", row["num_items"]]
        values += [row[key] for key, _, _ in BLOOM_LEVELS] + [row["item_placement"]]
        _cell_text(cells[0], row["objective"], size=9)
        for cell, value in zip(cells[1:], values):
            _cell_text(cell, str(value), size=9, align=WD_ALIGN_PARAGRAPH.CENTER)

    totals = tos_totals(content["table_of_specifications"])
    cells = tos.add_row().cells
    _cell_text(cells[0], "TOTAL", bold=True, size=9)
    values = [totals["days_taught"], f"{totals['percentage']}%", totals["num_items"]]
    values += [totals[key] for key, _, _ in BLOOM_LEVELS] + [""]
    for cell, value in zip(cells[1:], values):
        _cell_text(cell, str(value), bold=True, size=9, align=WD_ALIGN_PARAGRAPH.CENTER)
    _set_widths(tos, [Inches(2.2)] + [Inches(0.5)] * 3 + [Inches(0.55)] * len(levels) + [Inches(0.7)])

    doc.add_paragraph()
    doc.add_paragraph("Directions: Read each question carefully. Choose the letter of the correct answer.")
    for n, q in enumerate(content["questions"], 1):
        _add_runs(doc.add_paragraph(), f"{n}. {q['question_text']}")
        for letter, option in zip(OPTION_LETTERS, q["options"]):
            p = doc.add_paragraph(f"{letter}. {option}")
            p.paragraph_format.left_indent = Inches(0.5)

    doc.add_page_break()
    doc.add_heading("Answer Key", level=1)
    for n, q in enumerate(content["questions"], 1):
        doc.add_paragraph(f"{n}. {q['answer']}")

    quarter = _safe_name(str(content.get("quarter") or form.get("quarter", "")), "")
    return _save(doc, f"Exam_{_safe_name(content.get('subject') or form.get('subject'))}_Q{quarter}.docx")


BUILDERS = {
    "dlp": build_dlp_docx,
    "dll": build_dll_docx,
    "las": build_las_docx,
    "quiz": build_quiz_docx,
    "exam": build_exam_docx,
}


def build_docx(doc_type, form, content, settings=None):
    """
    Serialize ``content`` to a Word document.
    Returns (BytesIO, filename); raises KeyError for an unknown doc type.
    """
    builder = BUILDERS[doc_type]
    logger.info("Building %s document", doc_type)
    return builder(form or {}, content, settings or {})

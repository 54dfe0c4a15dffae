"""
PDF rendering for the resume builder (ReportLab canvas).

Plain layout: a name header, contact line, then one block per non-empty
section. Long lines are wrapped and pages break automatically.
"""

import logging
from io import BytesIO
from typing import List, Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

log = logging.getLogger(__name__)

LEFT = 20 * mm
RIGHT = 20 * mm
TOP = 20 * mm
BOTTOM = 20 * mm
BODY_FONT = "Helvetica"
BOLD_FONT = "Helvetica-Bold"


def _fmt_date(value) -> str:
    if not value:
        return ""
    if hasattr(value, "strftime"):
        return value.strftime("%b %Y")
    return str(value)[:10]


def _period(start, end, ongoing: bool) -> str:
    start_s = _fmt_date(start)
    end_s = "Present" if ongoing else _fmt_date(end)
    if start_s and end_s:
        return f"{start_s} - {end_s}"
    return start_s or end_s


class _Writer:
    """Tiny cursor over a canvas that wraps text and adds pages."""

    def __init__(self, c: canvas.Canvas):
        self.c = c
        self.width, self.height = A4
        self.y = self.height - TOP

    def _ensure(self, needed: float):
        if self.y - needed < BOTTOM:
            self.c.showPage()
            self.y = self.height - TOP

    def text(self, txt: str, font: str = BODY_FONT, size: int = 10, indent: float = 0, gap: float = 5 * mm):
        if not txt:
            return
        max_width = self.width - LEFT - RIGHT - indent
        for line in simpleSplit(txt, font, size, max_width):
            self._ensure(gap)
            self.c.setFont(font, size)
            self.c.drawString(LEFT + indent, self.y, line)
            self.y -= gap

    def heading(self, txt: str):
        self._ensure(14 * mm)
        self.y -= 3 * mm
        self.text(txt.upper(), BOLD_FONT, 12, gap=6 * mm)
        self.c.line(LEFT, self.y + 4 * mm, self.width - RIGHT, self.y + 4 * mm)
        self.y -= 1 * mm

    def bullets(self, items: List[str], indent: float = 4 * mm):
        for item in items:
            if item:
                self.text(f"- {item}", indent=indent)


def render_resume_pdf(resume: dict, title: Optional[str] = None) -> bytes:
    """Render a stored resume document to PDF bytes."""
    buf = BytesIO()
    c = canvas.Canvas(buf, pagesize=A4)
    personal = resume.get("personal_details") or {}
    c.setTitle(title or f"{personal.get('name', 'Resume')} - Resume")
    w = _Writer(c)

    w.text(personal.get("name", ""), BOLD_FONT, 18, gap=8 * mm)
    contact = [personal.get(k) for k in ("email", "phone", "linkedin", "github", "portfolio")]
    w.text(" | ".join(v for v in contact if v), size=9)

    education = resume.get("education") or []
    if education:
        w.heading("Education")
        for edu in education:
            w.text(f"{edu.get('degree', '')} in {edu.get('field', '')}", BOLD_FONT)
            score = f"CGPA {edu['cgpa']}" if edu.get("cgpa") is not None else (
                f"{edu['percentage']}%" if edu.get("percentage") is not None else "")
            w.text(", ".join(s for s in (edu.get("institution", ""), str(edu.get("year_of_completion", "")), score) if s))
            w.bullets(edu.get("achievements") or [])

    skills = resume.get("skills") or {}
    if any(skills.get(k) for k in ("technical", "soft", "languages")):
        w.heading("Skills")
        technical = [
            f"{s['name']} ({s['proficiency']})" if s.get("proficiency") else s["name"]
            for s in skills.get("technical") or []
        ]
        if technical:
            w.text("Technical: " + ", ".join(technical))
        if skills.get("soft"):
            w.text("Soft: " + ", ".join(skills["soft"]))
        languages = [l["name"] for l in skills.get("languages") or []]
        if languages:
            w.text("Languages: " + ", ".join(languages))

    experience = resume.get("experience") or []
    if experience:
        w.heading("Experience")
        for exp in experience:
            w.text(f"{exp.get('role', '')} - {exp.get('company', '')}", BOLD_FONT)
            w.text(_period(exp.get("start_date"), exp.get("end_date"), exp.get("is_current_job")), size=9)
            w.text(exp.get("description") or "")
            w.bullets(exp.get("achievements") or [])

    projects = resume.get("projects") or []
    if projects:
        w.heading("Projects")
        for project in projects:
            w.text(project.get("title", ""), BOLD_FONT)
            if project.get("tech_used"):
                w.text("Tech: " + ", ".join(project["tech_used"]), size=9)
            w.text(project.get("description") or "")

    certifications = resume.get("certifications") or []
    if certifications:
        w.heading("Certifications")
        w.bullets([f"{cert['name']} - {cert['issuing_organization']}" for cert in certifications], indent=0)

    achievements = resume.get("achievements") or []
    if achievements:
        w.heading("Achievements")
        w.bullets([
            f"{a['title']}: {a['description']}" if a.get("description") else a["title"]
            for a in achievements
        ], indent=0)

    c.showPage()
    c.save()
    log.info("Rendered resume PDF (%d bytes)", buf.tell())
    return buf.getvalue()

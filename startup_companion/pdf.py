"""Render generated markdown-ish guides into paginated PDF bytes."""

from __future__ import annotations

import io
from datetime import date

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.utils import simpleSplit
from reportlab.pdfgen import canvas

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN
BOTTOM_LIMIT = MARGIN + 30
FOOTER_TEXT = "Generated by StartUP Companion - Your Business Launch Partner"

BODY_COLOR = colors.HexColor("#1F2937")
SUBHEADING_COLOR = colors.HexColor("#374151")
MUTED_COLOR = colors.HexColor("#6B7280")
FAINT_COLOR = colors.HexColor("#9CA3AF")
RULE_COLOR = colors.HexColor("#E5E7EB")


def format_generated_date(day: date) -> str:
    """Return ``October 18, 2026`` style dates."""

    return f"{day.strftime('%B')} {day.day}, {day.year}"


class _PageWriter:
    """Track the cursor and start new pages when content runs past the bottom."""

    def __init__(self, pdf: canvas.Canvas) -> None:
        self.pdf = pdf
        self.y = PAGE_HEIGHT - MARGIN
        self.pages = 1

    def gap(self, amount: float) -> None:
        self.y -= amount

    def ensure_room(self, height: float) -> None:
        if self.y - height < BOTTOM_LIMIT:
            self.new_page()

    def new_page(self) -> None:
        _draw_footer(self.pdf)
        self.pdf.showPage()
        self.pages += 1
        self.y = PAGE_HEIGHT - MARGIN

    def write(
        self,
        text: str,
        *,
        font: str = "Helvetica",
        size: float = 11,
        color=BODY_COLOR,
        indent: float = 0,
        centered: bool = False,
        bullet: bool = False,
    ) -> None:
        # Base-14 fonts have no rupee glyph.
        text = text.replace("₹", "Rs. ")
        leading = size * 1.35
        width = CONTENT_WIDTH - indent
        lines = simpleSplit(text, font, size, width) or [""]
        for index, line in enumerate(lines):
            self.ensure_room(leading)
            self.y -= leading
            self.pdf.setFont(font, size)
            self.pdf.setFillColor(color)
            if centered:
                self.pdf.drawCentredString(PAGE_WIDTH / 2, self.y, line)
                continue
            if bullet and index == 0:
                self.pdf.circle(MARGIN + indent - 8, self.y + size * 0.3, 2, stroke=0, fill=1)
            self.pdf.drawString(MARGIN + indent, self.y, line)


def _draw_footer(pdf: canvas.Canvas) -> None:
    pdf.setFont("Helvetica", 8)
    pdf.setFillColor(FAINT_COLOR)
    pdf.drawCentredString(PAGE_WIDTH / 2, MARGIN - 20, FOOTER_TEXT)


def render_pdf(
    content: str,
    *,
    title: str,
    business_name: str,
    color: str = "#3B82F6",
    generated_on: date | None = None,
) -> bytes:
    """Lay ``content`` out line by line and return the PDF bytes.

    ``#``, ``##`` and ``###`` prefixes become headings, ``-``/``*`` lines
    become bullets, a line wrapped entirely in ``**`` is bold, and stray bold
    markers are stripped from body text.
    """

    if not content or not content.strip():
        raise ValueError("Cannot generate PDF: content is empty")

    primary = colors.HexColor(color)
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(title)
    pdf.setAuthor("StartUP Companion")
    writer = _PageWriter(pdf)

    writer.write(title, font="Helvetica-Bold", size=24, color=primary, centered=True)
    writer.gap(6)
    writer.write(f"Generated for: {business_name}", size=14, color=MUTED_COLOR, centered=True)
    writer.gap(4)
    generated = format_generated_date(generated_on or date.today())
    writer.write(f"Date: {generated}", size=10, color=FAINT_COLOR, centered=True)
    writer.gap(16)
    pdf.setStrokeColor(RULE_COLOR)
    pdf.setLineWidth(1)
    pdf.line(MARGIN, writer.y, PAGE_WIDTH - MARGIN, writer.y)
    writer.gap(12)

    for raw_line in content.split("\n"):
        line = raw_line.strip()
        if line.startswith("# "):
            writer.gap(10)
            writer.write(line[2:].replace("**", ""), font="Helvetica-Bold", size=18, color=primary)
            writer.gap(6)
        elif line.startswith("## "):
            writer.gap(8)
            writer.write(line[3:].replace("**", ""), font="Helvetica-Bold", size=14, color=primary)
            writer.gap(4)
        elif line.startswith("### "):
            writer.gap(5)
            writer.write(line[4:].replace("**", ""), font="Helvetica-Bold", size=12, color=SUBHEADING_COLOR)
            writer.gap(2)
        elif line.startswith("- ") or line.startswith("* "):
            writer.write(line[2:].replace("**", ""), indent=20, bullet=True)
        elif line.startswith("**") and line.endswith("**") and len(line) > 4:
            writer.gap(2)
            writer.write(line.replace("**", ""), font="Helvetica-Bold", color=SUBHEADING_COLOR)
        elif line:
            writer.write(line.replace("**", ""))
        else:
            writer.gap(4)

    _draw_footer(pdf)
    pdf.save()
    return buffer.getvalue()

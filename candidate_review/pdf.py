from __future__ import annotations  # Styled PDF rendering for candidate reports

import json
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional, Tuple

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from invitations import parse_timestamp

from .report import CandidateReport, ReportSection

DEJAVU_SANS = Path("/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf")  # System font
DEJAVU_SANS_BOLD = Path("/usr/share/fonts/truetype/dejavu/DejaVuSans-Bold.ttf")  # System font

ACCENT = (45, 115, 245)  # Palette accent
TEXT = (34, 34, 34)  # Primary text color
MUTED = (100, 100, 100)  # Secondary text color
RULE = (230, 230, 230)  # Divider color
SOFT_ACCENT_BG = (243, 248, 255)  # Highlight background


def _format_datetime(value: Optional[datetime]) -> str:  # Format timestamp for display
    if not value:
        return "-"
    return value.strftime("%d %b %Y, %I:%M %p").lstrip("0").replace(" 0", " ")


def _effective_width(pdf: FPDF) -> float:
    return float(pdf.w) - float(pdf.l_margin) - float(pdf.r_margin)


def _score_value(value: Optional[float]) -> str:  # Ratings are on a 1..5 scale
    if value is None:
        return "N/A"
    return f"{float(value):.1f}/5"


def _answer_text(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, str):
        return value.strip() or "-"
    return json.dumps(value, indent=2, sort_keys=True)


class CandidatePDF(FPDF):  # PDF with banner header and paged footer
    def __init__(self, *args, accent: Tuple[int, int, int] = ACCENT, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self.accent = accent
        self.header_title = "Candidate Report"
        self.font_regular = "Helvetica"
        self.font_bold = "Helvetica"
        self.supports_unicode = False

    def use_unicode_fonts(self) -> bool:  # Register DejaVu when the system ships it
        if not (DEJAVU_SANS.exists() and DEJAVU_SANS_BOLD.exists()):
            return False
        self.add_font("DejaVu", "", str(DEJAVU_SANS))
        self.add_font("DejaVu", "B", str(DEJAVU_SANS_BOLD))
        self.font_regular = "DejaVu"
        self.font_bold = "DejaVu"
        self.supports_unicode = True
        return True

    def prepare_text(self, text: Any) -> str:  # Core fonts only cover latin-1
        value = "" if text is None else str(text)
        if self.supports_unicode:
            return value
        return value.replace("•", "-").encode("latin-1", "replace").decode("latin-1")

    def header(self) -> None:
        usable = _effective_width(self)
        if self.page_no() == 1:
            self.set_fill_color(*self.accent)
            self.rect(0, 0, self.w, 20, style="F")
            self.set_text_color(255, 255, 255)
            self.set_xy(self.l_margin, 6)
            self.set_font(self.font_bold, "B", 16)
            self.cell(usable, 8, self.prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            self.set_text_color(*TEXT)
            self.ln(8)
        else:
            self.set_text_color(80, 80, 80)
            self.set_xy(self.l_margin, 8)
            self.set_font(self.font_bold, "B", 12)
            self.cell(usable, 6, self.prepare_text(self.header_title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            mark = self.get_y()
            self.set_draw_color(*self.accent)
            self.set_line_width(0.4)
            self.line(self.l_margin, mark + 1, self.w - self.r_margin, mark + 1)
            self.set_text_color(*TEXT)
            self.ln(4)

    def footer(self) -> None:
        self.set_y(-12)
        self.set_draw_color(*RULE)
        self.set_line_width(0.2)
        self.line(self.l_margin, self.get_y(), self.w - self.r_margin, self.get_y())
        self.set_text_color(120, 120, 120)
        self.set_font(self.font_regular, "", 9)
        self.cell(0, 10, f"Page {self.page_no()}/{{nb}}", align="R")


def _section_title(pdf: CandidatePDF, title: str) -> None:
    pdf.set_text_color(*TEXT)
    pdf.set_x(pdf.l_margin)
    pdf.set_font(pdf.font_bold, "B", 13)
    pdf.cell(0, 9, pdf.prepare_text(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.set_draw_color(*RULE)
    pdf.set_line_width(0.2)
    y = pdf.get_y()
    pdf.line(pdf.l_margin, y, pdf.l_margin + _effective_width(pdf), y)
    pdf.ln(2)


def _meta_block(pdf: CandidatePDF, rows: List[Tuple[str, str]]) -> None:  # Two-column label/value grid
    col = _effective_width(pdf) / 2.0
    line = 6
    for idx in range(0, len(rows), 2):
        left = rows[idx]
        right = rows[idx + 1] if idx + 1 < len(rows) else ("", "")
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.cell(col, line, pdf.prepare_text(left[0]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[0]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        pdf.set_text_color(*TEXT)
        pdf.set_font(pdf.font_bold, "B", 11)
        pdf.cell(col, line, pdf.prepare_text(left[1]), new_x=XPos.RIGHT, new_y=YPos.TOP)
        pdf.cell(col, line, pdf.prepare_text(right[1]), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
    pdf.ln(2)


def _render_score_table(pdf: CandidatePDF, sections: List[ReportSection]) -> None:
    widths = [_effective_width(pdf) * 0.55, _effective_width(pdf) * 0.2, _effective_width(pdf) * 0.25]
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*ACCENT)
    pdf.set_text_color(255, 255, 255)
    pdf.set_font(pdf.font_bold, "B", 10)
    for width, title in zip(widths, ("Section", "Rating", "Answers")):
        pdf.cell(width, 8, title, fill=True)
    pdf.ln(8)
    pdf.set_text_color(*TEXT)
    pdf.set_font(pdf.font_regular, "", 10)
    for idx, section in enumerate(sections):
        fill = idx % 2 == 0
        if fill:
            pdf.set_fill_color(247, 250, 255)
        pdf.set_x(pdf.l_margin)
        label = section.section.replace("-", " ").title()
        pdf.cell(widths[0], 7, pdf.prepare_text(label), fill=fill)
        pdf.cell(widths[1], 7, _score_value(section.score), fill=fill)
        pdf.cell(widths[2], 7, str(len(section.answers)), fill=fill)
        pdf.ln(7)
    pdf.ln(2)


def _render_overall(pdf: CandidatePDF, overall: Optional[float]) -> None:
    pdf.set_x(pdf.l_margin)
    pdf.set_fill_color(*SOFT_ACCENT_BG)
    top = pdf.get_y()
    pdf.rect(pdf.l_margin, top, _effective_width(pdf), 16, style="F")
    pdf.set_xy(pdf.l_margin + 6, top + 4)
    pdf.set_text_color(*MUTED)
    pdf.set_font(pdf.font_regular, "", 10)
    pdf.cell(_effective_width(pdf) / 2, 8, "Overall Score")
    pdf.set_text_color(*ACCENT)
    pdf.set_font(pdf.font_bold, "B", 14)
    pdf.cell(_effective_width(pdf) / 2 - 12, 8, _score_value(overall), align="R")
    pdf.set_y(top + 20)
    pdf.set_text_color(*TEXT)


def _render_answers(pdf: CandidatePDF, section: ReportSection) -> None:
    width = _effective_width(pdf)
    if not section.answers:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*MUTED)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width, 6, "No answers recorded for this section.")
        pdf.set_text_color(*TEXT)
        pdf.ln(2)
        return
    for answer in section.answers:
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(*ACCENT)
        pdf.set_font(pdf.font_bold, "B", 10)
        pdf.multi_cell(width, 5.5, pdf.prepare_text(answer.question_key))
        pdf.set_x(pdf.l_margin)
        pdf.set_text_color(60, 60, 60)
        pdf.set_font(pdf.font_regular, "", 10)
        pdf.multi_cell(width, 5.5, pdf.prepare_text(_answer_text(answer.value)))
        pdf.ln(2)
    pdf.set_text_color(*TEXT)


def generate_candidate_report_pdf(report: CandidateReport) -> bytes:  # Build PDF payload for a candidate
    pdf = CandidatePDF()
    pdf.alias_nb_pages()
    pdf.use_unicode_fonts()
    pdf.header_title = f"{report.name} - Interview Report"
    pdf.set_margins(15, 26, 15)
    pdf.set_auto_page_break(auto=True, margin=15)
    pdf.add_page()

    _section_title(pdf, "Candidate")
    _meta_block(
        pdf,
        [
            ("Name", report.name),
            ("Email", report.email),
            ("Phone", report.phone or "-"),
            ("LinkedIn", report.linkedin_url or "-"),
            ("Status", report.submission_status),
            ("Date", _format_datetime(parse_timestamp(report.date_submitted))),
        ],
    )

    _section_title(pdf, "Scores")
    _render_overall(pdf, report.overall_score)
    _render_score_table(pdf, report.sections)

    for section in report.sections:
        _section_title(pdf, section.section.replace("-", " ").title())
        _render_answers(pdf, section)

    return bytes(pdf.output())


__all__ = ["CandidatePDF", "generate_candidate_report_pdf"]

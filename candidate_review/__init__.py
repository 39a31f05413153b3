from __future__ import annotations  # Admin review package exports

from .notes import NoteRecord, NoteRequest, NoteStore, overall_score, section_scores
from .pdf import generate_candidate_report_pdf
from .report import (
    EXPORTABLE_STATUSES,
    CandidateReport,
    ExportNotAllowed,
    ReportAnswer,
    ReportSection,
    build_candidate_report,
    export_filename,
    export_payload,
)

__all__ = [
    "CandidateReport",
    "EXPORTABLE_STATUSES",
    "ExportNotAllowed",
    "NoteRecord",
    "NoteRequest",
    "NoteStore",
    "ReportAnswer",
    "ReportSection",
    "build_candidate_report",
    "export_filename",
    "export_payload",
    "generate_candidate_report_pdf",
    "overall_score",
    "section_scores",
]

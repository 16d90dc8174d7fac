"""
Downloadable renderings of medical records.

A single record is exported as a PDF report (reportlab platypus) and
the whole record set as CSV.  Risk wording in the PDF comes from
:func:`records.services.analysis.risk_flags` so the report and the
analysis view always agree.
"""
from __future__ import annotations

import csv
import io
import re
from typing import Iterable
from xml.sax.saxutils import escape

from django.utils import timezone
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import LETTER
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from records.services.analysis import (
    CHOLESTEROL_LIMIT,
    DIASTOLIC_LIMIT,
    HIGH_CHOLESTEROL,
    HIGH_DIASTOLIC,
    HIGH_SYSTOLIC,
    SYSTOLIC_LIMIT,
    risk_flags,
)

CSV_HEADER = ['ID', 'Patient Name', 'Age', 'Blood Pressure', 'Cholesterol', 'Date', 'Notes']

PRIMARY = colors.HexColor('#1976d2')
DANGER = colors.HexColor('#dc004e')
OK = colors.HexColor('#4caf50')
MUTED = colors.HexColor('#666666')

RISK_TEXT = {
    HIGH_CHOLESTEROL: f'High Cholesterol (&gt;{CHOLESTEROL_LIMIT} mg/dL)',
    HIGH_SYSTOLIC: f'High Systolic Blood Pressure (&gt;{SYSTOLIC_LIMIT})',
    HIGH_DIASTOLIC: f'High Diastolic Blood Pressure (&gt;{DIASTOLIC_LIMIT})',
}


def _blank(value) -> str:
    return '' if value is None else str(value)


def pdf_filename(record) -> str:
    name = re.sub(r'\s+', '_', record.patient_name)
    return f'medical_record_{name}_{record.id}.pdf'


def _styles() -> dict:
    base = getSampleStyleSheet()
    return {
        'title': ParagraphStyle('title', parent=base['Title'], fontSize=24, leading=28, textColor=PRIMARY),
        'heading': ParagraphStyle('heading', parent=base['Heading2'], fontSize=16, spaceBefore=12),
        'body': ParagraphStyle('body', parent=base['BodyText'], fontSize=12, leading=16),
        'notes': ParagraphStyle('notes', parent=base['BodyText'], fontSize=12, leading=16, alignment=TA_JUSTIFY),
        'danger': ParagraphStyle('danger', parent=base['BodyText'], fontSize=12, leading=16, textColor=DANGER),
        'ok': ParagraphStyle('ok', parent=base['BodyText'], fontSize=12, leading=16, textColor=OK),
        'footer': ParagraphStyle('footer', parent=base['BodyText'], fontSize=10, textColor=MUTED, alignment=TA_CENTER),
    }


def render_record_pdf(record, generated_at=None) -> bytes:
    """Build the one-page report for ``record`` and return the PDF bytes."""
    generated_at = generated_at or timezone.localtime()
    st = _styles()
    story = [
        Paragraph('Medical Record Report', st['title']),
        HRFlowable(width='100%', thickness=2, color=PRIMARY, spaceAfter=12),
        Paragraph('<u>Patient Information</u>', st['heading']),
        Paragraph(f'Patient Name: {escape(record.patient_name)}', st['body']),
        Paragraph(f'Age: {record.age} years', st['body']),
        Paragraph(f'Date of Record: {record.date.isoformat() if record.date else "N/A"}', st['body']),
        Paragraph('<u>Vital Signs &amp; Measurements</u>', st['heading']),
        Paragraph(f'Blood Pressure: {escape(record.blood_pressure or "Not recorded")}', st['body']),
        Paragraph(
            'Cholesterol Level: '
            + (f'{record.cholesterol} mg/dL' if record.cholesterol is not None else 'Not recorded'),
            st['body'],
        ),
        Paragraph('<u>Risk Assessment</u>', st['heading']),
    ]
    flags = risk_flags(record)
    if flags:
        story.extend(Paragraph(f'\u2022 {RISK_TEXT[f]}', st['danger']) for f in flags)
    else:
        story.append(Paragraph('No high-risk indicators detected', st['ok']))
    if record.notes:
        story.append(Paragraph('<u>Clinical Notes</u>', st['heading']))
        story.append(Paragraph(escape(record.notes).replace('\n', '<br/>'), st['notes']))
    story.append(Spacer(1, 24))
    story.append(Paragraph(f'Generated on {generated_at:%Y-%m-%d %H:%M:%S}', st['footer']))

    buf = io.BytesIO()
    doc = SimpleDocTemplate(
        buf,
        pagesize=LETTER,
        leftMargin=50, rightMargin=50, topMargin=50, bottomMargin=50,
        title=f'Medical record {record.id}',
    )
    doc.build(story)
    return buf.getvalue()


def render_records_csv(records: Iterable) -> str:
    out = io.StringIO()
    writer = csv.writer(out, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for r in records:
        writer.writerow([
            r.id,
            r.patient_name,
            r.age,
            _blank(r.blood_pressure),
            _blank(r.cholesterol),
            r.date.isoformat() if r.date else '',
            _blank(r.notes),
        ])
    return out.getvalue()

"""
Dashboard statistics and risk flagging over a snapshot of records.

Everything here is pure: functions take any iterable of objects exposing
the :class:`~records.models.MedicalRecord` attributes and never touch the
database.  Malformed measurements are not errors; a blood pressure that
cannot be read simply raises no flag.

Note the two blood-pressure rules differ on purpose.  The dashboard's
``high_bp_count`` only looks at systolic pressure, while the analysis
risk list flags a record on systolic *or* diastolic pressure.
"""
from __future__ import annotations

import datetime
import re
from dataclasses import dataclass, field
from typing import Iterable, Optional

CHOLESTEROL_LIMIT = 200
SYSTOLIC_LIMIT = 140
DIASTOLIC_LIMIT = 90

HIGH_CHOLESTEROL = "High Cholesterol"
HIGH_SYSTOLIC = "High Systolic BP"
HIGH_DIASTOLIC = "High Diastolic BP"

_LEADING_INT = re.compile(r'\s*([+-]?\d+)')


@dataclass
class DashboardStats:
    total_records: int = 0
    avg_age: Optional[float] = None
    avg_cholesterol: Optional[float] = None
    high_cholesterol_count: int = 0
    high_bp_count: int = 0


@dataclass
class AnalysisStats:
    avg_age: Optional[float] = None
    avg_chol: Optional[float] = None
    min_chol: Optional[int] = None
    max_chol: Optional[int] = None
    total_count: int = 0


@dataclass
class RiskEntry:
    id: int
    patient_name: str
    cholesterol: Optional[int]
    blood_pressure: Optional[str]
    date: Optional[datetime.date]
    flags: list[str] = field(default_factory=list)


@dataclass
class Analysis:
    stats: AnalysisStats
    risks: list[RiskEntry] = field(default_factory=list)


def _parse_int(text: str) -> Optional[int]:
    # Leading integer, like a lenient SQL CAST: "150 mmHg" -> 150, "abc" -> None
    m = _LEADING_INT.match(text)
    return int(m.group(1)) if m else None


def parse_blood_pressure(value: Optional[str]) -> tuple[Optional[int], Optional[int]]:
    """Split ``"<systolic>/<diastolic>"`` into two optional integers.

    Systolic comes from the text before the first ``/`` and diastolic
    from the text after the last one, so ``"150/x/95"`` reads as 150/95.
    A bare ``"150"`` is a systolic reading with no diastolic part.
    A side that cannot be parsed is ``None``; nothing here raises.
    """
    if not isinstance(value, str):
        return None, None
    head, sep, _ = value.partition('/')
    if not sep:
        return _parse_int(head), None
    _, _, tail = value.rpartition('/')
    return _parse_int(head), _parse_int(tail)


def _mean(values: list) -> Optional[float]:
    return sum(values) / len(values) if values else None


def _exceeds(value: Optional[int], limit: int) -> bool:
    return value is not None and value > limit


def _cholesterol_values(records) -> list[int]:
    return [r.cholesterol for r in records if r.cholesterol is not None]


def risk_flags(record) -> list[str]:
    """Risk labels for one record, in fixed order."""
    systolic, diastolic = parse_blood_pressure(record.blood_pressure)
    flags = []
    if _exceeds(record.cholesterol, CHOLESTEROL_LIMIT):
        flags.append(HIGH_CHOLESTEROL)
    if _exceeds(systolic, SYSTOLIC_LIMIT):
        flags.append(HIGH_SYSTOLIC)
    if _exceeds(diastolic, DIASTOLIC_LIMIT):
        flags.append(HIGH_DIASTOLIC)
    return flags


def newest_first(records: Iterable) -> list:
    """Order by date descending, undated last, ties by id descending."""
    return sorted(
        records,
        key=lambda r: (r.date is not None, r.date or datetime.date.min, r.id or 0),
        reverse=True,
    )


def compute_stats(records: Iterable) -> DashboardStats:
    records = list(records)
    chol = _cholesterol_values(records)
    return DashboardStats(
        total_records=len(records),
        avg_age=_mean([r.age for r in records]),
        avg_cholesterol=_mean(chol),
        high_cholesterol_count=sum(1 for c in chol if c > CHOLESTEROL_LIMIT),
        high_bp_count=sum(
            1 for r in records if _exceeds(parse_blood_pressure(r.blood_pressure)[0], SYSTOLIC_LIMIT)
        ),
    )


def compute_analysis(records: Iterable) -> Analysis:
    records = list(records)
    chol = _cholesterol_values(records)
    stats = AnalysisStats(
        avg_age=_mean([r.age for r in records]),
        avg_chol=_mean(chol),
        min_chol=min(chol) if chol else None,
        max_chol=max(chol) if chol else None,
        total_count=len(records),
    )
    risks = []
    for r in newest_first(records):
        flags = risk_flags(r)
        if flags:
            risks.append(RiskEntry(
                id=r.id,
                patient_name=r.patient_name,
                cholesterol=r.cholesterol,
                blood_pressure=r.blood_pressure,
                date=r.date,
                flags=flags,
            ))
    return Analysis(stats=stats, risks=risks)

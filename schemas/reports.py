"""
schemas/reports.py

Value types of the grade aggregation / AI report pipeline.
- GradeRecord, StudentSummary, ClassStatistics: aggregation input/output
- SubjectMeta, Report: report request/response
- ModelReportPayload: the JSON shape the language model is asked to return

All of them are frozen; they live for a single report request.

Wire note: in ``classStatistics`` the key ``highestScore`` holds the numerically
LOWEST average (best performer) and ``lowestScore`` the numerically HIGHEST
average (worst performer), because lower grades are better on the college scale.
Existing report consumers depend on these names, so they are kept as-is.
"""

import math
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from utils.numbers import round_half_up

TERMS = ("prelim", "midterm", "semifinal", "final")


class GradeStatus(str, Enum):
    PASSED = "PASSED"
    FAILED = "FAILED"
    UNGRADED = "UNGRADED"


class ReportSource(str, Enum):
    MODEL = "MODEL"          # narrative written by the language model
    FALLBACK = "FALLBACK"    # deterministic local narrative


# =========================================================
# Aggregation
# =========================================================

class GradeRecord(BaseModel):
    """One student's four term scores for one subject, joined to student info"""
    model_config = ConfigDict(frozen=True)

    student_id: Union[int, str]
    display_name: str = ""
    student_number: Optional[str] = None
    course: Optional[str] = None
    year_level: Optional[int] = None

    prelim: Optional[float] = None
    midterm: Optional[float] = None
    semifinal: Optional[float] = None
    final: Optional[float] = None

    @field_validator(*TERMS, mode="before")
    @classmethod
    def _zero_is_absent(cls, v):
        # legacy rows store 0 (or "0", "0.0") for "not yet recorded"
        if isinstance(v, str):
            if not v.strip():
                return None
            try:
                if float(v) == 0:
                    return None
            except ValueError:
                return v
        elif v == 0:
            return None
        return v

    def scores(self) -> List[Optional[float]]:
        return [getattr(self, term) for term in TERMS]

    def present_scores(self) -> List[float]:
        return [s for s in self.scores() if s is not None]


class StudentSummary(BaseModel):
    model_config = ConfigDict(frozen=True)

    record: GradeRecord
    average: Optional[float] = None      # full precision, None when ungraded
    status: GradeStatus

    @property
    def student_id(self):
        return self.record.student_id

    @property
    def display_name(self) -> str:
        return self.record.display_name

    @property
    def rounded_average(self) -> Optional[float]:
        return round_half_up(self.average, 2)


class ClassStatistics(BaseModel):
    """Class-level statistics; field aliases are the report wire names"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    class_average: Optional[float] = Field(default=None, alias="classAverage")
    best_average: Optional[float] = Field(default=None, alias="highestScore")
    worst_average: Optional[float] = Field(default=None, alias="lowestScore")
    pass_rate: float = Field(default=0.0, alias="passRate")


# =========================================================
# Report
# =========================================================

class SubjectMeta(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    instructor: Optional[str] = None


class Report(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    subject: SubjectMeta
    analysis: str
    passed_students: List[str] = Field(default_factory=list, alias="passedStudents")
    failed_students: List[str] = Field(default_factory=list, alias="failedStudents")
    class_statistics: Optional[ClassStatistics] = Field(default=None, alias="classStatistics")
    recommendations: List[str] = Field(default_factory=list)
    source: ReportSource


# =========================================================
# Language model response
# =========================================================

class ModelClassStatistics(BaseModel):
    """Statistics as returned by the model; every field may be missing or unparsable"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    class_average: Optional[float] = Field(default=None, alias="classAverage")
    best_average: Optional[float] = Field(default=None, alias="highestScore")
    worst_average: Optional[float] = Field(default=None, alias="lowestScore")
    pass_rate: Optional[float] = Field(default=None, alias="passRate")

    @field_validator("*", mode="before")
    @classmethod
    def _coerce_number(cls, v):
        # "1.85", "85%", "85.0 %" -> float; anything else unusable -> None
        if isinstance(v, bool):
            return None
        if isinstance(v, str):
            try:
                v = float(v.strip().rstrip("%").strip())
            except ValueError:
                return None
        if isinstance(v, (int, float)):
            try:
                v = float(v)
            except OverflowError:
                return None
            if not math.isfinite(v):
                return None
        return v

    @field_validator("pass_rate")
    @classmethod
    def _pass_rate_is_percentage(cls, v):
        if v is not None and not 0.0 <= v <= 100.0:
            return None
        return v


class ModelReportPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    analysis: str
    passed_students: Optional[List[str]] = Field(default=None, alias="passedStudents")
    failed_students: Optional[List[str]] = Field(default=None, alias="failedStudents")
    class_statistics: Optional[ModelClassStatistics] = Field(default=None, alias="classStatistics")
    recommendations: Optional[List[str]] = None

    @field_validator("analysis")
    @classmethod
    def _analysis_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("analysis must not be empty")
        return v

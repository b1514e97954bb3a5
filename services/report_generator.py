"""
services/report_generator.py

Subject performance report:
    records -> aggregate -> prompt -> Gemini (one attempt) -> parse/validate
and a deterministic fallback whenever the model call fails or its answer is
unusable. ``generate_report`` always returns a Report.
"""

import json
import logging
import re
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict, ValidationError

from config.settings import Settings, settings as default_settings
from schemas.reports import (
    ClassStatistics,
    GradeRecord,
    GradeStatus,
    ModelReportPayload,
    Report,
    ReportSource,
    StudentSummary,
    SubjectMeta,
)
from services.aggregator import summarize
from services.exceptions import MalformedResponseError, ServiceError
from services.llm.base import LLMClient
from utils.numbers import format_score, round_half_up

logger = logging.getLogger(__name__)

NO_DATA_ANALYSIS = "No grades available for this subject."

FALLBACK_RECOMMENDATIONS = [
    "Offer remedial classes for students near the failing mark.",
    "Highlight best-performing students to encourage motivation.",
    "Review teaching strategies for topics with low performance.",
    "Encourage consistent study habits and attendance.",
]

_CODE_FENCE = re.compile(r"```(?:json)?", re.IGNORECASE)


class ReportConfig(BaseModel):
    """Grading scale used for status, prompt wording and the fallback narrative"""
    model_config = ConfigDict(frozen=True)

    passing_threshold: float = 3.0
    scale_best: float = 1.0
    scale_worst: float = 5.0
    grading_system_label: str = "College Grading System"

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "ReportConfig":
        s = settings or default_settings
        return cls(
            passing_threshold=s.PASSING_THRESHOLD,
            scale_best=s.GRADE_SCALE_BEST,
            scale_worst=s.GRADE_SCALE_WORST,
            grading_system_label=s.GRADING_SYSTEM_LABEL,
        )


# ==========================================================
# [Prompt]
# ==========================================================
def format_performance_data(
    subject: SubjectMeta, summaries: Sequence[StudentSummary], config: ReportConfig
) -> str:
    """Tabular student data block sent to the model."""
    threshold = format_score(config.passing_threshold)
    lines = [
        f"Subject: {subject.code} - {subject.name}",
        f"Instructor: {subject.instructor or 'N/A'}",
        f"Total Students: {len(summaries)}",
        "",
        "Student Performance Data:",
    ]
    for i, s in enumerate(summaries, start=1):
        r = s.record
        lines.append(f"{i}. {r.display_name} ({r.student_number or 'N/A'})")
        lines.append(f"   Course: {r.course or 'N/A'}, Year: {r.year_level if r.year_level is not None else 'N/A'}")
        lines.append(
            f"   Prelim: {format_score(r.prelim)}, Midterm: {format_score(r.midterm)}, "
            f"Semifinal: {format_score(r.semifinal)}, Final: {format_score(r.final)}"
        )
        lines.append(f"   Average: {format_score(s.average)} - {s.status.value}")
    lines.append("")
    lines.append(f"Passing Grade: ≤ {threshold} ({config.grading_system_label})")
    lines.append(
        f"{format_score(config.scale_best)} = Excellent | {threshold} = Passing | "
        f"{format_score(config.scale_worst)} = Failed"
    )
    return "\n".join(lines)


def build_prompt(
    subject: SubjectMeta, summaries: Sequence[StudentSummary], config: ReportConfig
) -> str:
    best = format_score(config.scale_best)
    worst = format_score(config.scale_worst)
    threshold = format_score(config.passing_threshold)
    data = format_performance_data(subject, summaries, config)
    return f"""You are an educational data analyst. Analyze the following student grade data using the grading scale ({best}–{worst}) where {best} = highest and {threshold} = passing.

{data}

Please respond ONLY in valid JSON using this structure:
{{
  "analysis": "Detailed summary of performance, strengths, weaknesses, and trends.",
  "passedStudents": ["Names of students who passed (average ≤ {threshold})"],
  "failedStudents": ["Names of students who failed (average > {threshold})"],
  "classStatistics": {{
    "classAverage": "Overall class average ({best}–{worst} scale)",
    "highestScore": "Lowest numeric average (best student)",
    "lowestScore": "Highest numeric average (lowest performer)",
    "passRate": "Percentage of students who passed"
  }},
  "recommendations": ["3–5 concrete recommendations for the instructor"]
}}
Students with status UNGRADED have no recorded grades; leave them out of both lists.
Return ONLY valid JSON — no markdown, explanations, or extra text."""


# ==========================================================
# [Response parsing]
# ==========================================================
def parse_model_response(text: Optional[str]) -> ModelReportPayload:
    """Strip ``` fences and validate the JSON answer; MalformedResponseError otherwise."""
    cleaned = _CODE_FENCE.sub("", text or "").strip()
    if not cleaned:
        raise MalformedResponseError("empty response")

    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, over-long integer literals, too deeply nested arrays
        raise MalformedResponseError(f"response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise MalformedResponseError(f"expected a JSON object, got {type(data).__name__}")

    try:
        return ModelReportPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(f"response does not match the report schema: {e}") from e


def rounded_statistics(stats: ClassStatistics) -> ClassStatistics:
    return ClassStatistics(
        class_average=round_half_up(stats.class_average, 2),
        best_average=round_half_up(stats.best_average, 2),
        worst_average=round_half_up(stats.worst_average, 2),
        pass_rate=round_half_up(stats.pass_rate, 1),
    )


def _names(summaries: Sequence[StudentSummary], status: GradeStatus) -> List[str]:
    return [s.display_name for s in summaries if s.status is status]


# ==========================================================
# [Generator]
# ==========================================================
class ReportGenerator:
    def __init__(self, llm: LLMClient, config: Optional[ReportConfig] = None):
        self.llm = llm
        self.config = config or ReportConfig()

    def generate_report(self, subject: SubjectMeta, records: Sequence[GradeRecord]) -> Report:
        if not records:
            return Report(subject=subject, analysis=NO_DATA_ANALYSIS, source=ReportSource.FALLBACK)

        summaries, stats = summarize(records, self.config.passing_threshold)
        prompt = build_prompt(subject, summaries, self.config)

        try:
            payload = parse_model_response(self.llm.generate(prompt))
        except ServiceError as e:
            logger.warning(f"[{subject.code}] report generation failed, using fallback: {e}")
            return self._fallback(subject, summaries, stats)
        except MalformedResponseError as e:
            logger.warning(f"[{subject.code}] unusable model response, using fallback: {e}")
            return self._fallback(subject, summaries, stats)

        return self._from_model(subject, summaries, stats, payload)

    def _from_model(
        self,
        subject: SubjectMeta,
        summaries: Sequence[StudentSummary],
        stats: ClassStatistics,
        payload: ModelReportPayload,
    ) -> Report:
        # keys the model left out (or filled with off-scale values) come from the local computation
        local = rounded_statistics(stats)
        theirs = payload.class_statistics
        if theirs is None:
            merged = local
        else:
            low = min(self.config.scale_best, self.config.scale_worst)
            high = max(self.config.scale_best, self.config.scale_worst)

            def pick(value, fallback):
                return value if value is not None and low <= value <= high else fallback

            merged = ClassStatistics(
                class_average=pick(theirs.class_average, local.class_average),
                best_average=pick(theirs.best_average, local.best_average),
                worst_average=pick(theirs.worst_average, local.worst_average),
                pass_rate=theirs.pass_rate if theirs.pass_rate is not None else local.pass_rate,
            )

        return Report(
            subject=subject,
            analysis=payload.analysis,
            passed_students=(
                payload.passed_students
                if payload.passed_students is not None
                else _names(summaries, GradeStatus.PASSED)
            ),
            failed_students=(
                payload.failed_students
                if payload.failed_students is not None
                else _names(summaries, GradeStatus.FAILED)
            ),
            class_statistics=merged,
            recommendations=(
                payload.recommendations
                if payload.recommendations is not None
                else list(FALLBACK_RECOMMENDATIONS)
            ),
            source=ReportSource.MODEL,
        )

    def _fallback(
        self, subject: SubjectMeta, summaries: Sequence[StudentSummary], stats: ClassStatistics
    ) -> Report:
        passed = _names(summaries, GradeStatus.PASSED)
        failed = _names(summaries, GradeStatus.FAILED)
        ungraded = len(summaries) - len(passed) - len(failed)
        display = rounded_statistics(stats)

        analysis = f"For {subject.code}, {len(summaries)} students were analyzed."
        if display.class_average is None:
            analysis += " No grades have been recorded yet, so no class average is available."
        else:
            analysis += (
                f" The class average is {display.class_average:.2f}."
                f" {len(passed)} passed ({display.pass_rate:.1f}%), while {len(failed)}"
                f" did not meet the passing requirement ({format_score(self.config.passing_threshold)})."
            )
            if ungraded:
                analysis += f" {ungraded} student(s) have no recorded grades yet."

        return Report(
            subject=subject,
            analysis=analysis,
            passed_students=passed,
            failed_students=failed,
            class_statistics=display,
            recommendations=list(FALLBACK_RECOMMENDATIONS),
            source=ReportSource.FALLBACK,
        )

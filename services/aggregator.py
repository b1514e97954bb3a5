"""
services/aggregator.py

Per-student averages / pass-fail status and class statistics.
Pure functions, no I/O.

- Absent term scores are skipped, never counted as 0.
- Averages keep full precision here; rounding happens where values are displayed.
- PASSED iff average <= passing_threshold (the scale direction is configuration).
"""

from typing import List, Sequence, Tuple

from schemas.reports import ClassStatistics, GradeRecord, GradeStatus, StudentSummary


def _mean(values: Sequence[float]) -> float:
    # fixed left-to-right summation for reproducible results
    total = 0.0
    for v in values:
        total += v
    return total / len(values)


def summarize_student(record: GradeRecord, passing_threshold: float) -> StudentSummary:
    present = record.present_scores()
    if not present:
        return StudentSummary(record=record, average=None, status=GradeStatus.UNGRADED)

    average = _mean(present)
    status = GradeStatus.PASSED if average <= passing_threshold else GradeStatus.FAILED
    return StudentSummary(record=record, average=average, status=status)


def class_statistics(summaries: Sequence[StudentSummary]) -> ClassStatistics:
    graded = [s for s in summaries if s.average is not None]
    if not graded:
        return ClassStatistics()

    averages = [s.average for s in graded]
    passed = sum(1 for s in graded if s.status is GradeStatus.PASSED)
    return ClassStatistics(
        class_average=_mean(averages),
        best_average=min(averages),      # lower is better
        worst_average=max(averages),
        pass_rate=passed / len(graded) * 100,
    )


def summarize(
    records: Sequence[GradeRecord], passing_threshold: float
) -> Tuple[List[StudentSummary], ClassStatistics]:
    """Summaries in input order plus statistics over the graded students."""
    summaries = [summarize_student(r, passing_threshold) for r in records]
    return summaries, class_statistics(summaries)

from pydantic import BaseModel, field_validator
from typing import Optional

from config.settings import settings
from schemas.reports import TERMS


def _scale_bounds():
    return (
        min(settings.GRADE_SCALE_BEST, settings.GRADE_SCALE_WORST),
        max(settings.GRADE_SCALE_BEST, settings.GRADE_SCALE_WORST),
    )


# ✅ input: term grades of one student in one subject (None = not yet recorded)
class GradeUpsert(BaseModel):
    student_id: int
    subject_id: int
    prelim: Optional[float] = None
    midterm: Optional[float] = None
    semifinal: Optional[float] = None
    final: Optional[float] = None

    @field_validator(*TERMS)
    @classmethod
    def _on_scale(cls, v):
        if v is None:
            return v
        low, high = _scale_bounds()
        if not low <= v <= high:
            raise ValueError(f"score must be between {low} and {high}")
        return v


# ✅ output
class Grade(BaseModel):
    id: int
    student_id: int
    subject_id: int
    prelim: Optional[float] = None
    midterm: Optional[float] = None
    semifinal: Optional[float] = None
    final: Optional[float] = None

    class Config:
        from_attributes = True

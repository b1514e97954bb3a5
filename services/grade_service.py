"""
services/grade_service.py

Data-store side of the report pipeline: loads subject metadata and the
subject's grade rows (joined to student info) as report value types.
"""

from typing import List, Tuple

from sqlalchemy.orm import Session, joinedload

from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from schemas.reports import GradeRecord, SubjectMeta
from services.exceptions import NotFoundError


def get_subject_or_404(db: Session, subject_id: int) -> SubjectModel:
    subject = db.query(SubjectModel).filter(SubjectModel.id == subject_id).first()
    if subject is None:
        raise NotFoundError(f"Subject {subject_id} not found")
    return subject


def to_subject_meta(subject: SubjectModel) -> SubjectMeta:
    return SubjectMeta(code=subject.subject_code, name=subject.subject_name, instructor=subject.instructor)


def to_grade_record(grade: GradeModel) -> GradeRecord:
    student = grade.student
    return GradeRecord(
        student_id=student.id,
        display_name=student.full_name,
        student_number=student.student_number,
        course=student.course,
        year_level=student.year_level,
        prelim=grade.prelim,
        midterm=grade.midterm,
        semifinal=grade.semifinal,
        final=grade.final,
    )


def load_grade_records(db: Session, subject_id: int) -> List[GradeRecord]:
    grades = (
        db.query(GradeModel)
        .join(StudentModel, StudentModel.id == GradeModel.student_id)
        .options(joinedload(GradeModel.student))
        .filter(GradeModel.subject_id == subject_id)
        .order_by(StudentModel.last_name, StudentModel.first_name, StudentModel.id)
        .all()
    )
    return [to_grade_record(g) for g in grades]


def load_report_input(db: Session, subject_id: int) -> Tuple[SubjectMeta, List[GradeRecord]]:
    """SubjectMeta + grade records for one subject; NotFoundError for an unknown id."""
    subject = get_subject_or_404(db, subject_id)
    return to_subject_meta(subject), load_grade_records(db, subject_id)

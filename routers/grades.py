from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import settings
from database.db import get_db
from models.grades import Grade as GradeModel
from models.students import Student as StudentModel
from schemas.grades import Grade as GradeSchema, GradeUpsert
from schemas.reports import TERMS
from services.aggregator import summarize
from services.grade_service import get_subject_or_404, load_grade_records, to_subject_meta
from services.exceptions import NotFoundError
from services.report_generator import rounded_statistics

router = APIRouter(prefix="/grades", tags=["grades"])


def _get_grade(db: Session, grade_id: int) -> GradeModel:
    grade = db.query(GradeModel).filter(GradeModel.id == grade_id).first()
    if grade is None:
        raise NotFoundError(f"Grade {grade_id} not found")
    return grade


# ✅ [UPSERT] one student's term grades for one subject
@router.put("/")
def upsert_grade(payload: GradeUpsert, db: Session = Depends(get_db)):
    if db.query(StudentModel).filter(StudentModel.id == payload.student_id).first() is None:
        raise NotFoundError(f"Student {payload.student_id} not found")
    get_subject_or_404(db, payload.subject_id)

    grade = (
        db.query(GradeModel)
        .filter(GradeModel.student_id == payload.student_id, GradeModel.subject_id == payload.subject_id)
        .first()
    )
    created = grade is None
    if created:
        grade = GradeModel(student_id=payload.student_id, subject_id=payload.subject_id)
        db.add(grade)
    for term in TERMS:
        setattr(grade, term, getattr(payload, term))

    try:
        db.commit()
    except IntegrityError:
        # another request created the same (student, subject) row first
        db.rollback()
        return JSONResponse(
            status_code=409,
            content={
                "success": False,
                "error": {"code": "DUPLICATE", "message": "Grades for this student and subject were saved concurrently, retry"},
            },
        )
    db.refresh(grade)
    return {
        "success": True,
        "data": GradeSchema.model_validate(grade).model_dump(),
        "message": "Grades saved" if created else "Grades updated",
    }


# ✅ [SHEET] grade sheet of a subject with averages and class statistics
@router.get("/subject/{subject_id}")
def read_subject_grades(subject_id: int, db: Session = Depends(get_db)):
    subject = get_subject_or_404(db, subject_id)
    summaries, stats = summarize(load_grade_records(db, subject_id), settings.PASSING_THRESHOLD)

    rows = []
    for s in summaries:
        r = s.record
        rows.append({
            "student_id": r.student_id,
            "student_number": r.student_number,
            "name": r.display_name,
            **{term: getattr(r, term) for term in TERMS},
            "average": s.rounded_average,
            "status": s.status.value,
        })

    return {
        "success": True,
        "data": {
            "subject": to_subject_meta(subject).model_dump(),
            "passing_threshold": settings.PASSING_THRESHOLD,
            "students": rows,
            "statistics": rounded_statistics(stats).model_dump(by_alias=True),
        },
    }


# ✅ [READ] one grade row
@router.get("/{grade_id}")
def read_grade(grade_id: int, db: Session = Depends(get_db)):
    return {"success": True, "data": GradeSchema.model_validate(_get_grade(db, grade_id)).model_dump()}


# ✅ [DELETE]
@router.delete("/{grade_id}")
def delete_grade(grade_id: int, db: Session = Depends(get_db)):
    grade = _get_grade(db, grade_id)
    db.delete(grade)
    db.commit()
    return {"success": True, "message": f"Grade {grade_id} deleted"}

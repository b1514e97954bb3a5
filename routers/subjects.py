from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import get_db
from models.subjects import Subject as SubjectModel
from schemas.subjects import Subject as SubjectSchema, SubjectCreate
from services.grade_service import get_subject_or_404

router = APIRouter(prefix="/subjects", tags=["subjects"])


def _duplicate(subject_code: str) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "success": False,
            "error": {"code": "DUPLICATE", "message": f"Subject code {subject_code} already exists"},
        },
    )


# ✅ [CREATE]
@router.post("/", status_code=201)
def create_subject(subject: SubjectCreate, db: Session = Depends(get_db)):
    db_subject = SubjectModel(**subject.model_dump())
    db.add(db_subject)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return _duplicate(subject.subject_code)
    db.refresh(db_subject)
    return {
        "success": True,
        "data": SubjectSchema.model_validate(db_subject).model_dump(),
        "message": "Subject added successfully",
    }


# ✅ [READ] all subjects, ordered by code
@router.get("/")
def read_subjects(db: Session = Depends(get_db)):
    records = db.query(SubjectModel).order_by(SubjectModel.subject_code).all()
    return {
        "success": True,
        "data": [SubjectSchema.model_validate(r).model_dump() for r in records],
        "message": "Subject list loaded",
    }


# ✅ [READ] one subject
@router.get("/{subject_id}")
def read_subject(subject_id: int, db: Session = Depends(get_db)):
    subject = get_subject_or_404(db, subject_id)
    return {"success": True, "data": SubjectSchema.model_validate(subject).model_dump()}


# ✅ [UPDATE]
@router.put("/{subject_id}")
def update_subject(subject_id: int, updated: SubjectCreate, db: Session = Depends(get_db)):
    subject = get_subject_or_404(db, subject_id)
    for key, value in updated.model_dump().items():
        setattr(subject, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return _duplicate(updated.subject_code)
    db.refresh(subject)
    return {
        "success": True,
        "data": SubjectSchema.model_validate(subject).model_dump(),
        "message": "Subject updated successfully",
    }


# ✅ [DELETE]
@router.delete("/{subject_id}")
def delete_subject(subject_id: int, db: Session = Depends(get_db)):
    subject = get_subject_or_404(db, subject_id)
    db.delete(subject)
    db.commit()
    return {"success": True, "message": f"Subject {subject_id} deleted"}

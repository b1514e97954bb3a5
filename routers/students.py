from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database.db import get_db
from models.students import Student as StudentModel
from schemas.students import Student as StudentSchema, StudentCreate
from services.exceptions import NotFoundError

router = APIRouter(prefix="/students", tags=["students"])


def _get_student(db: Session, student_id: int) -> StudentModel:
    student = db.query(StudentModel).filter(StudentModel.id == student_id).first()
    if student is None:
        raise NotFoundError(f"Student {student_id} not found")
    return student


def _duplicate(student_number: str) -> JSONResponse:
    return JSONResponse(
        status_code=409,
        content={
            "success": False,
            "error": {"code": "DUPLICATE", "message": f"Student number {student_number} already exists"},
        },
    )


# ✅ [CREATE]
@router.post("/", status_code=201)
def create_student(student: StudentCreate, db: Session = Depends(get_db)):
    db_student = StudentModel(**student.model_dump())
    db.add(db_student)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return _duplicate(student.student_number)
    db.refresh(db_student)
    return {
        "success": True,
        "data": StudentSchema.model_validate(db_student).model_dump(),
        "message": "Student added successfully",
    }


# ✅ [READ] all students
@router.get("/")
def read_students(db: Session = Depends(get_db)):
    records = db.query(StudentModel).order_by(StudentModel.last_name, StudentModel.first_name).all()
    return {
        "success": True,
        "data": [StudentSchema.model_validate(r).model_dump() for r in records],
        "message": "Student list loaded",
    }


# ✅ [READ] one student
@router.get("/{student_id}")
def read_student(student_id: int, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    return {"success": True, "data": StudentSchema.model_validate(student).model_dump()}


# ✅ [UPDATE]
@router.put("/{student_id}")
def update_student(student_id: int, updated: StudentCreate, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    for key, value in updated.model_dump().items():
        setattr(student, key, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        return _duplicate(updated.student_number)
    db.refresh(student)
    return {
        "success": True,
        "data": StudentSchema.model_validate(student).model_dump(),
        "message": "Student updated successfully",
    }


# ✅ [DELETE] (grades are removed with the student)
@router.delete("/{student_id}")
def delete_student(student_id: int, db: Session = Depends(get_db)):
    student = _get_student(db, student_id)
    db.delete(student)
    db.commit()
    return {"success": True, "message": f"Student {student_id} deleted"}

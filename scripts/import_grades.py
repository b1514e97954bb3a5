"""
CSV -> grades table.

Columns: student_number, subject_code, prelim, midterm, semifinal, final
Blank cells and 0 mean "not yet recorded". Existing (student, subject) rows are updated.

    python -m scripts.import_grades data/grades.csv
"""

import csv
import logging
import sys
from typing import Optional

from sqlalchemy.orm import Session

from database.db import SessionLocal, init_db
from models.grades import Grade as GradeModel  # ✅ models
from models.students import Student as StudentModel
from models.subjects import Subject as SubjectModel
from schemas.reports import TERMS

logger = logging.getLogger(__name__)

CSV_PATH = "data/grades.csv"  # ✅ default file path


def _score(cell: Optional[str]) -> Optional[float]:
    cell = (cell or "").strip()
    if not cell:
        return None
    value = float(cell)
    return value if value != 0 else None


def import_grades(db: Session, csv_path: str = CSV_PATH) -> int:
    """Returns the number of imported rows; rows with unknown students/subjects are skipped."""
    students = {s.student_number: s.id for s in db.query(StudentModel).all()}
    subjects = {s.subject_code: s.id for s in db.query(SubjectModel).all()}

    imported = 0
    with open(csv_path, newline="", encoding="utf-8-sig") as csvfile:
        reader = csv.DictReader(csvfile)
        for line_no, row in enumerate(reader, start=2):
            student_id = students.get((row.get("student_number") or "").strip())
            subject_id = subjects.get((row.get("subject_code") or "").strip())
            if student_id is None or subject_id is None:
                logger.warning(f"line {line_no}: unknown student/subject, skipped ({row})")
                continue

            grade = (
                db.query(GradeModel)
                .filter(GradeModel.student_id == student_id, GradeModel.subject_id == subject_id)
                .first()
            )
            if grade is None:
                grade = GradeModel(student_id=student_id, subject_id=subject_id)
                db.add(grade)
            for term in TERMS:
                setattr(grade, term, _score(row.get(term)))
            imported += 1

    db.commit()
    return imported


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    init_db()
    db: Session = SessionLocal()
    try:
        count = import_grades(db, sys.argv[1] if len(sys.argv) > 1 else CSV_PATH)
    finally:
        db.close()
    print(f"✅ grades CSV -> DB: {count} rows imported")

from pydantic import BaseModel, Field
from typing import Optional

# ✅ input (POST/PUT)
class StudentCreate(BaseModel):
    student_number: str = Field(..., min_length=1, max_length=30)   # e.g. 2023-00123
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    course: Optional[str] = None                                    # e.g. BSIT
    year_level: Optional[int] = Field(default=None, ge=1, le=6)

# ✅ output (GET, detail)
class Student(StudentCreate):
    id: int

    class Config:
        from_attributes = True

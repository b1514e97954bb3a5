from pydantic import BaseModel, Field
from typing import Optional

# ✅ input (POST/PUT)
class SubjectCreate(BaseModel):
    subject_code: str = Field(..., min_length=1, max_length=30)     # e.g. WEBDEV
    subject_name: str = Field(..., min_length=1, max_length=150)    # e.g. Web Development
    instructor: Optional[str] = None

# ✅ output (GET, POST responses)
class Subject(SubjectCreate):
    id: int

    class Config:
        from_attributes = True

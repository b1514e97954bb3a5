from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base

class Student(Base):
    __tablename__ = "students"  # student master records

    id = Column(Integer, primary_key=True, index=True)                       # student ID (Primary Key)
    student_number = Column(String(30), unique=True, nullable=False)        # school-issued number (e.g. 2023-00123)
    first_name = Column(String(100), nullable=False)
    last_name = Column(String(100), nullable=False)
    course = Column(String(100))                                            # e.g. BSIT
    year_level = Column(Integer)                                            # 1-4

    grades = relationship("Grade", back_populates="student", cascade="all, delete-orphan")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"

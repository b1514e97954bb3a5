from sqlalchemy import Column, Integer, Float, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from database.db import Base

class Grade(Base):
    __tablename__ = "grades"  # term grades of one student in one subject
    __table_args__ = (UniqueConstraint("student_id", "subject_id", name="uq_grades_student_subject"),)

    id = Column(Integer, primary_key=True, index=True)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False)

    # NULL = not yet recorded
    prelim = Column(Float)
    midterm = Column(Float)
    semifinal = Column(Float)
    final = Column(Float)

    student = relationship("Student", back_populates="grades")
    subject = relationship("Subject", back_populates="grades")

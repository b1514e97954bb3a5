from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from database.db import Base

class Subject(Base):
    __tablename__ = "subjects"  # subject catalogue

    id = Column(Integer, primary_key=True, index=True)                    # subject ID (Primary Key)
    subject_code = Column(String(30), unique=True, nullable=False)       # e.g. WEBDEV
    subject_name = Column(String(150), nullable=False)                   # e.g. Web Development
    instructor = Column(String(150))

    grades = relationship("Grade", back_populates="subject", cascade="all, delete-orphan")

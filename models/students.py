from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base, utc_now


class Student(Base):
    __tablename__ = "students"  # class roster

    id = Column(Integer, primary_key=True, index=True)                        # student id (PK)
    name = Column(String(100), nullable=False)                                # student name
    nis = Column(String(50), unique=True, nullable=True)                      # school-assigned number, unique when present
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)  # class (FK)
    created_at = Column(DateTime, default=utc_now, nullable=False)    # registration time

    # ✅ deleting a student removes its grades
    grades = relationship(
        "Grade",
        back_populates="student",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

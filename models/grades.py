from sqlalchemy import (
    Column, Integer, Float, String, DateTime, ForeignKey, UniqueConstraint, CheckConstraint,
)
from sqlalchemy.orm import relationship
from database.db import Base, utc_now

GRADE_TYPE_TASK = "task"
GRADE_TYPE_FINAL = "final"


class Grade(Base):
    __tablename__ = "grades"  # per-task and final grades
    __table_args__ = (
        # task_key is task_id or 0, NULLs never collide in a unique index
        UniqueConstraint(
            "student_id", "subject_id", "task_key", "grade_type", "semester", "academic_year",
            name="uq_grade_slot",
        ),
        CheckConstraint("grade_value >= 0 AND grade_value <= 100", name="ck_grade_value_range"),
        CheckConstraint("semester IN (1, 2)", name="ck_grade_semester"),
        CheckConstraint("grade_type IN ('task', 'final')", name="ck_grade_type"),
    )

    id = Column(Integer, primary_key=True, index=True)                                      # grade id (PK)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="CASCADE"), nullable=False, index=True)
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=True, index=True)
    task_key = Column(Integer, nullable=False, default=0)                                   # task_id or 0 (final)
    grade_value = Column(Float, nullable=False)                                             # 0..100
    grade_type = Column(String(10), nullable=False)                                         # task | final
    semester = Column(Integer, nullable=False)                                              # 1 | 2
    academic_year = Column(String(20), nullable=False)                                      # e.g. 2024/2025
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, nullable=False)

    student = relationship("Student", back_populates="grades")
    subject = relationship("Subject")
    task = relationship("Task", back_populates="grades")

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base, utc_now


class Task(Base):
    __tablename__ = "tasks"  # gradable assignments

    id = Column(Integer, primary_key=True, index=True)                                  # task id (PK)
    name = Column(String(150), nullable=False)                                          # task name
    subject_id = Column(Integer, ForeignKey("subjects.id", ondelete="CASCADE"), nullable=False, index=True)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)    # class (FK)
    description = Column(Text)                                                          # optional description
    due_date = Column(Date)                                                             # optional due date
    created_at = Column(DateTime, default=utc_now, nullable=False)

    subject = relationship("Subject")

    # ✅ deleting a task removes the grades given for it
    grades = relationship(
        "Grade",
        back_populates="task",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

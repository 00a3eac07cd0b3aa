from sqlalchemy import Column, Integer, String, Boolean, ForeignKey, UniqueConstraint
from database.db import Base


class Subject(Base):
    __tablename__ = "subjects"  # subjects, scoped per class
    __table_args__ = (UniqueConstraint("class_id", "name", name="uq_subject_class_name"),)

    id = Column(Integer, primary_key=True, index=True)                        # subject id (PK)
    name = Column(String(100), nullable=False)                                # subject name (e.g. Matematika)
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)  # class (FK)
    is_custom = Column(Boolean, default=False, nullable=False)                # renamed Seni variant

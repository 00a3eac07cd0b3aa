from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.db import Base, utc_now


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(Integer, primary_key=True, index=True)               # teacher id (PK)
    username = Column(String(100), unique=True, nullable=False)      # login name
    password_hash = Column(String(255), nullable=False)              # bcrypt hash, never the plaintext
    name = Column(String(100), nullable=False)                       # display name
    class_id = Column(Integer, ForeignKey("classes.id"), nullable=False, index=True)  # class taught (FK)
    created_at = Column(DateTime, default=utc_now, nullable=False)

    # ✅ the class this teacher is scoped to (N:1, several teachers may share it)
    class_ = relationship("Class", foreign_keys=[class_id])

from sqlalchemy import Column, Integer, String
from database.db import Base

class Class(Base):
    __tablename__ = "classes"  # fixed grade levels (Kelas 1..6)

    id = Column(Integer, primary_key=True, index=True)      # class id (1..6, seeded, never auto-generated)
    name = Column(String(50), nullable=False)               # class name (e.g. Kelas 1)
    description = Column(String(200))                       # description (e.g. Kelas 1 SD)

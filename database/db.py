import logging
from datetime import datetime, timezone

from sqlalchemy import create_engine, event              # SQLAlchemy engine factory
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session

from config.settings import settings                      # ✅ environment settings

logger = logging.getLogger(__name__)


def build_engine(url: str, **kwargs) -> Engine:
    # SQLite connections are shared across FastAPI worker threads
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    engine = create_engine(url, **kwargs)
    if url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


# ✅ engine built from the DB URL in the settings
engine = build_engine(settings.DATABASE_URL)

# ✅ session factory used by every request
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# ✅ Base class all models inherit from (declarative)
Base = declarative_base()


def utc_now() -> datetime:
    """Timestamp default for created_at / updated_at columns."""
    return datetime.now(timezone.utc)


# ==========================================================
# [Common] DB session per request
# ==========================================================
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


# ==========================================================
# [Bootstrap] schema + fixed reference data
# ==========================================================
FIXED_CLASSES = [
    (n, f"Kelas {n}", f"Kelas {n} SD") for n in range(1, 7)
]

DEFAULT_SUBJECTS = [
    "Pendidikan Agama",
    "Bahasa Indonesia",
    "Matematika",
    "IPA",
    "IPS",
    "Pendidikan Jasmani",
    "Seni",
    "Bahasa Inggris",
]


def init_db(bind: Engine = None, session: Session = None) -> None:
    """
    Create every table and seed the six fixed classes plus the default
    subjects of each class. Safe to run repeatedly.
    """
    # models must be imported so their tables are registered on Base.metadata
    from models.classes import Class
    from models.subjects import Subject
    import models.teachers, models.students, models.tasks, models.grades  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    db = session or sessionmaker(autocommit=False, autoflush=False, bind=bind)()
    try:
        existing = {c.id for c in db.query(Class.id).all()}
        for class_id, name, description in FIXED_CLASSES:
            if class_id not in existing:
                db.add(Class(id=class_id, name=name, description=description))
        db.flush()

        for class_id, _, _ in FIXED_CLASSES:
            names = {
                row.name
                for row in db.query(Subject.name).filter(Subject.class_id == class_id).all()
            }
            # a renamed Seni counts as the Seni subject of that class
            has_seni = "Seni" in names or any(n.startswith("Seni ") for n in names)
            for subject_name in DEFAULT_SUBJECTS:
                if subject_name in names or (subject_name == "Seni" and has_seni):
                    continue
                db.add(Subject(name=subject_name, class_id=class_id, is_custom=False))
        db.commit()
        logger.info("Database initialised (%d classes)", len(FIXED_CLASSES))
    finally:
        if session is None:
            db.close()

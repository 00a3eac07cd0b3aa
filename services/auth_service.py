"""
services/auth_service.py

Teacher registration, login and account maintenance.
- Passwords are hashed with passlib's bcrypt (cost factor = settings.BCRYPT_ROUNDS)
- Tokens are HS256 JWTs (PyJWT) carrying {sub, username, class_id}
- Unknown usernames and wrong passwords fail with the same AuthError
"""

import logging
from datetime import datetime, timedelta, timezone

import jwt
from passlib.context import CryptContext
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config.settings import settings
from models.classes import Class as ClassModel
from models.teachers import Teacher as TeacherModel
from schemas.auth import CurrentTeacher, LoginResponse, TeacherSummary
from services.errors import AuthError, ConflictError, ValidationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)

INVALID_CREDENTIALS = "Invalid credentials"


# ==========================================================
# [Password / token helpers]
# ==========================================================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def create_access_token(teacher: TeacherModel) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": str(teacher.id),
        "username": teacher.username,
        "class_id": teacher.class_id,
        "iat": now,
        "exp": now + timedelta(minutes=settings.JWT_EXPIRES_MINUTES),
    }
    return jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def decode_access_token(token: str) -> CurrentTeacher:
    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise AuthError("Token expired")
    except jwt.InvalidTokenError:
        raise AuthError("Invalid token")

    try:
        return CurrentTeacher(
            id=int(payload["sub"]),
            username=payload["username"],
            class_id=int(payload["class_id"]),
        )
    except (KeyError, TypeError, ValueError):
        raise AuthError("Invalid token")


# ==========================================================
# [Register / login]
# ==========================================================

def register(db: Session, username: str, password: str, name: str, class_id: int) -> int:
    username = (username or "").strip()
    name = (name or "").strip()
    if not username or not password or not name or not class_id:
        raise ValidationError("All fields are required")

    if db.get(ClassModel, class_id) is None:
        raise ValidationError("Invalid class")

    if db.query(TeacherModel.id).filter(TeacherModel.username == username).first():
        raise ConflictError("Username already exists")

    # several teachers may share one class; no class assignment check here
    teacher = TeacherModel(
        username=username,
        password_hash=hash_password(password),
        name=name,
        class_id=class_id,
    )
    db.add(teacher)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError("Username already exists")
    db.refresh(teacher)
    logger.info("Teacher registered: id=%s class_id=%s", teacher.id, teacher.class_id)
    return teacher.id


def login(db: Session, username: str, password: str) -> LoginResponse:
    if not username or not password:
        raise ValidationError("Username and password are required")

    teacher = db.query(TeacherModel).filter(TeacherModel.username == username).first()
    if teacher is None:
        # spend the same hashing time as a real check
        pwd_context.dummy_verify()
        raise AuthError(INVALID_CREDENTIALS)

    if not verify_password(password, teacher.password_hash):
        raise AuthError(INVALID_CREDENTIALS)

    logger.info("Teacher logged in: id=%s", teacher.id)
    return LoginResponse(
        token=create_access_token(teacher),
        user=TeacherSummary.model_validate(teacher),
    )


# ==========================================================
# [Account maintenance]
# ==========================================================

def get_teacher(db: Session, current: CurrentTeacher) -> TeacherModel:
    teacher = db.get(TeacherModel, current.id)
    if teacher is None:
        raise AuthError("Account no longer exists")
    return teacher


def update_profile(db: Session, current: CurrentTeacher, name: str) -> TeacherModel:
    name = (name or "").strip()
    if not name:
        raise ValidationError("Name is required")
    teacher = get_teacher(db, current)
    teacher.name = name
    db.commit()
    db.refresh(teacher)
    logger.info("Teacher profile updated: id=%s", teacher.id)
    return teacher


def delete_account(db: Session, current: CurrentTeacher, password: str) -> None:
    if not password:
        raise ValidationError("Password is required")
    teacher = get_teacher(db, current)
    if not verify_password(password, teacher.password_hash):
        raise AuthError("Incorrect password")
    # roster, subjects and grades belong to the class, not to the teacher
    db.delete(teacher)
    db.commit()
    logger.info("Teacher account deleted: id=%s", current.id)

from typing import Optional, Annotated
from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database.db import get_db
from models.teachers import Teacher as TeacherModel
from schemas.auth import CurrentTeacher
from services.auth_service import decode_access_token
from services.errors import AuthError

AuthHeader = Annotated[Optional[str], Header(alias="Authorization")]


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_teacher(
    authorization: AuthHeader = None,
    db: Session = Depends(get_db),
) -> CurrentTeacher:
    """
    Resolve the teacher from the "Bearer <token>" header.
    The class_id used for every scoping decision comes from the token claims,
    never from the request body or query string.
    """
    if not authorization:
        raise _unauthorized("Access token required")

    # "Bearer <token>" parsing
    try:
        scheme, token = authorization.split(" ", 1)
    except ValueError:
        raise _unauthorized("Invalid Authorization header format")

    if scheme.lower() != "bearer" or not token.strip():
        raise _unauthorized("Invalid auth scheme")

    try:
        current = decode_access_token(token.strip())
    except AuthError as exc:
        raise _unauthorized(exc.message)

    # a deleted account keeps no access even with an unexpired token
    if db.get(TeacherModel, current.id) is None:
        raise _unauthorized("Invalid token")

    return current


CurrentTeacherDep = Annotated[CurrentTeacher, Depends(get_current_teacher)]

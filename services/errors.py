"""
services/errors.py

Domain errors raised by the service layer.
middlewares/error_handler.py turns each of them into the shared ErrorResponse
envelope using the status_code / code carried by the class.
"""


class AppError(Exception):
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(AppError):
    """Missing/malformed field or out-of-range value."""
    status_code = 400
    code = "VALIDATION_ERROR"


class AuthError(AppError):
    """Bad credentials or unusable bearer token."""
    status_code = 401
    code = "AUTH_ERROR"


class NotFoundError(AppError):
    """Entity missing OR owned by another class; both read the same to the caller."""
    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, entity: str):
        super().__init__(f"{entity.capitalize()} not found or access denied")
        self.entity = entity


class ConflictError(AppError):
    """Duplicate value on a unique field (username, NIS)."""
    status_code = 400
    code = "CONFLICT"


class PersistenceError(AppError):
    status_code = 500
    code = "PERSISTENCE_ERROR"

    def __init__(self, message: str = "Database error"):
        super().__init__(message)

"""
Error taxonomy shared by services and routes.

Services raise these; the handlers registered in `connecto.main` turn them
into `{"detail": ...}` JSON bodies with the matching status code.
"""


class AppError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailed(AppError):
    status_code = 400


class Unauthorized(AppError):
    status_code = 401


class Forbidden(AppError):
    status_code = 403


class NotFound(AppError):
    status_code = 404


class ConfigurationError(AppError):
    status_code = 500


class InvalidTransition(ValidationFailed):
    """A verification action that is not allowed from the user's current status."""

    def __init__(self, current, action, message: str = None):
        self.current = current
        self.action = action
        super().__init__(message or f"Cannot {action.value.replace('_', ' ')} a user whose status is {current.value}")

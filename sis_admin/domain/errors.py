class AppError(Exception):
    """Error esperado que se devuelve al cliente como {"error": message}."""

    status_code = 500

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class ValidationError(AppError):
    status_code = 400


class AuthenticationError(AppError):
    status_code = 401


class NotFoundError(AppError):
    status_code = 404


class InternalError(AppError):
    status_code = 500

    def __init__(self, message: str = "Error interno del servidor"):
        super().__init__(message)

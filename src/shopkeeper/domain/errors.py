class AppError(Exception):
    """Base app error."""


class ValidationError(AppError):
    pass


class NotFoundError(AppError):
    pass


class InsufficientStockError(AppError):
    pass


class AuthorizationError(AppError):
    pass


class AuthenticationError(AppError):
    pass


class BackendUnavailableError(AppError):
    pass


class ApiError(AppError):
    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message

"""
Domain exceptions for the application.

Services raise these instead of fastapi.HTTPException to avoid coupling
the engine to the web framework. A global exception handler in main.py
translates them into HTTP responses.
"""

from typing import Optional


class AppError(Exception):
    """Base application error with an HTTP-equivalent status code."""

    def __init__(self, message: str, status_code: int = 400):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class InvalidConfigurationError(AppError):
    """Rejected configuration update or snapshot (400)."""

    def __init__(self, message: str):
        super().__init__(message, status_code=400)


class NotFoundError(AppError):
    """Resource not found (404)."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, status_code=404)


class ExchangeError(AppError):
    """Exchange failure carrying the provider error code and message."""

    def __init__(self, message: str, code: Optional[int] = None, status_code: int = 502):
        self.code = code
        super().__init__(message, status_code=status_code)


class ExchangeRejectedError(ExchangeError):
    """Order or request rejected by the exchange (400)."""

    def __init__(self, message: str, code: Optional[int] = None):
        super().__init__(message, code=code, status_code=400)


class ExchangeUnavailableError(ExchangeError):
    """Exchange API unavailable: transport failure, timeout or 5xx (503)."""

    def __init__(self, message: str = "Exchange service unavailable", code: Optional[int] = None):
        super().__init__(message, code=code, status_code=503)

"""
Custom exceptions for loyalty portal business logic.

Each exception carries a machine-readable code and maps onto an HTTP status
in the app-level error handler.
"""


class PortalError(Exception):
    """Base exception for all loyalty portal errors."""

    status_code = 400

    def __init__(self, message: str, code: str = "PORTAL_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class NotFoundError(PortalError):
    """Resource not found."""

    status_code = 404

    def __init__(self, resource: str, identifier=None):
        message = f"{resource} not found"
        if identifier:
            message = f"{resource} with ID {identifier} not found"
        super().__init__(message, f"{resource.upper()}_NOT_FOUND")


class BookingNotFoundError(NotFoundError):
    """Booking not found, or not owned by the requesting client."""

    def __init__(self, identifier=None):
        super().__init__("Booking", identifier)


class ValidationError(PortalError):
    """Invalid input data."""

    def __init__(self, message: str, field: str = None):
        self.field = field
        code = f"INVALID_{field.upper()}" if field else "VALIDATION_ERROR"
        super().__init__(message, code)


class ConflictError(PortalError):
    """Request clashes with existing data."""

    status_code = 409

    def __init__(self, message: str, code: str = "CONFLICT"):
        super().__init__(message, code)


class InsufficientPointsError(PortalError):
    """Not enough usable points for the requested redemption."""

    status_code = 422

    def __init__(self, current: int, required: int):
        self.current = current
        self.required = required
        message = f"Insufficient points. Current: {current}, Required: {required}"
        super().__init__(message, "INSUFFICIENT_POINTS")


class ConfigurationError(PortalError):
    """Application or loyalty settings misconfiguration."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message, "CONFIGURATION_ERROR")


class CurrencyConversionError(PortalError):
    """Exchange rate lookup failed."""

    status_code = 502

    def __init__(self, message: str, original_error: Exception = None):
        self.original_error = original_error
        super().__init__(message, "CURRENCY_CONVERSION_ERROR")

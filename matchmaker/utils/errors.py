"""Custom exception types for consistent error handling."""


class StoreUnavailableError(Exception):
    """Raised when the profile or swipe store fails or is unavailable."""


class InvalidInputError(Exception):
    """Raised when request input validation fails."""

    code = "validation_error"


class MissingOriginError(InvalidInputError):
    """Raised when recommendations are requested without any usable location."""

    code = "missing_origin"


class NotFoundError(Exception):
    """Raised when a referenced profile does not exist."""

    code = "not_found"

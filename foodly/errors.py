"""Error kinds raised by the service layer and mapped to HTTP statuses in main."""


class FoodlyError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(FoodlyError, ValueError):
    """A required field was missing or empty. Raised before any storage access."""

    status_code = 400


class StorageError(FoodlyError):
    """The database rejected or failed an operation."""

    status_code = 500


class StorageTimeoutError(StorageError):
    """The database stayed locked for longer than the configured timeout."""

    status_code = 503

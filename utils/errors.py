class AppError(Exception):
    """Base exception for application errors."""
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

class ValidationError(AppError):
    """Raised when caller input is missing a required field."""
    status_code = 400

class NotFoundError(AppError):
    """Raised when the referenced entry id does not exist."""
    status_code = 404

class PersistenceError(AppError):
    """Raised when the journal document could not be written back."""
    status_code = 500

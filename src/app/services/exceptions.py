# app/services/exceptions.py

class ServiceException(Exception):
    """Base exception for all service layer errors."""
    def __init__(self, message: str):
        self.message = message
        super().__init__(self.message)

class InvalidRequestError(ServiceException):
    """Raised when a request is malformed (e.g. missing userId or keys) before any external call."""
    pass

class UnsupportedServiceError(ServiceException):
    """Raised when a single-key test names a service outside the supported set."""
    pass

class AuthenticationError(ServiceException):
    """Raised when the caller cannot be identified or acts on behalf of another user."""
    pass

class UserNotFound(ServiceException):
    """Raised when a user profile (credit account) is not found in the database."""
    pass

class NotFoundError(ServiceException):
    """Raised when a requested record does not exist."""
    pass

class InsufficientCreditsError(ServiceException):
    """Raised when a free-plan balance cannot cover a billable operation."""
    pass

class InvalidAmountError(ServiceException):
    """Raised when a debit amount is not a positive integer."""
    pass

class NoSupportedPlatforms(ServiceException):
    """Raised when none of the requested publish targets is a supported platform."""
    pass

class ConfigurationError(ServiceException):
    """Raised if a required system configuration (e.g., the upload service key) is missing."""
    pass

class CredentialProbeError(ServiceException):
    """Raised by the single-key test endpoint when the probe reports the key as unusable."""
    def __init__(self, message: str, suggestion: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.suggestion = suggestion
        self.status_code = status_code

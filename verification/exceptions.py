"""Verification exceptions."""


class VerificationException(Exception):
    """Base verification exception with HTTP status."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class TooManyRequestsError(VerificationException):
    """Resend ceiling reached for the current rate-limit window."""

    def __init__(self, message: str = "Too many requests."):
        super().__init__(message, status_code=429)


class DuplicateEmailError(VerificationException):
    """An account already exists for the email."""

    def __init__(self, message: str = "duplicated email"):
        super().__init__(message, status_code=409)


class InvalidEmailError(VerificationException):
    """No account exists for the email."""

    def __init__(self, message: str = "email not exist"):
        super().__init__(message, status_code=404)


class CryptoError(VerificationException):
    """Encryption or decryption of a verification code failed.

    The message stays generic; the underlying cause is chained and reported
    to the error tracker, never returned to clients.
    """

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status_code=500)


class EmailDeliveryError(VerificationException):
    """The email provider refused or failed to deliver a message."""

    def __init__(self, message: str = "Failed to send verification email"):
        super().__init__(message, status_code=500)

"""
Exception hierarchy for the Bento API client.

Every failure raised by this package is a BentoError subclass. Each
subclass has a fixed ``kind`` so callers can branch on the kind instead
of matching message strings.
"""

from typing import Optional


class BentoError(Exception):
    """Base exception for Bento client errors"""
    kind = "Bento"

    def __init__(self, message: str = ""):
        self.message = message
        super().__init__(message)

    @property
    def transient(self) -> bool:
        """Whether retrying the same request may succeed."""
        return False


class InvalidConfigError(BentoError):
    """Raised when credentials or settings are missing or malformed"""
    kind = "InvalidConfig"


class InvalidEmailError(BentoError):
    """Raised when an email address fails the structural check"""
    kind = "InvalidEmail"

    def __init__(self, email: str):
        self.email = email
        super().__init__(f"Invalid email address: {email!r}")


class InvalidIpAddressError(BentoError):
    """Raised when a value is not an IPv4 or IPv6 literal"""
    kind = "InvalidIpAddress"

    def __init__(self, ip: str):
        self.ip = ip
        super().__init__(f"Invalid IP address: {ip!r}")


class InvalidRequestError(BentoError):
    """Raised for bad request parameters or a 4xx answer from the API"""
    kind = "InvalidRequest"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class UnexpectedResponseError(BentoError):
    """Raised when the API answers with something we cannot use.

    Covers bodies that do not match the expected shape, partial batch
    failures and 5xx answers. Only the latter are transient.
    """
    kind = "UnexpectedResponse"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)

    @property
    def transient(self) -> bool:
        return self.status_code is not None and self.status_code >= 500


class InvalidNameError(BentoError):
    kind = "InvalidName"


class InvalidSegmentIdError(BentoError):
    kind = "InvalidSegmentId"


class InvalidContentError(BentoError):
    kind = "InvalidContent"


class InvalidTagsError(BentoError):
    kind = "InvalidTags"


class InvalidBatchSizeError(BentoError):
    kind = "InvalidBatchSize"


class HttpClientError(BentoError):
    """Raised when the HTTP transport fails (timeout, connection, ...).

    The original ``requests`` exception is kept as ``__cause__``.
    """
    kind = "HttpClient"

    def __init__(self, message: str, is_transient: bool = False):
        self._transient = is_transient
        super().__init__(message)

    @property
    def transient(self) -> bool:
        return self._transient


class RateLimitError(BentoError):
    """Raised when API rate limit is exceeded"""
    kind = "RateLimit"

    def __init__(self, retry_after: Optional[int] = None):
        self.retry_after = retry_after
        if retry_after is None:
            super().__init__("Rate limit exceeded")
        else:
            super().__init__(f"Rate limit exceeded. Retry after {retry_after}s")

    @property
    def transient(self) -> bool:
        return True


class AuthenticationFailedError(BentoError):
    """Raised when the API rejects the credentials (401/403)"""
    kind = "AuthenticationFailed"

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


ERROR_KINDS = (
    InvalidConfigError,
    InvalidEmailError,
    InvalidIpAddressError,
    InvalidRequestError,
    UnexpectedResponseError,
    InvalidNameError,
    InvalidSegmentIdError,
    InvalidContentError,
    InvalidTagsError,
    InvalidBatchSizeError,
    HttpClientError,
    RateLimitError,
    AuthenticationFailedError,
)

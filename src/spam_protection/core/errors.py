# =============================================================================
# Error Taxonomy
# =============================================================================
# Every failure the library can produce, rooted at SpamProtectionError so
# callers can catch everything with one clause or handle each kind on its own:
#
#   - InvalidArgument / UnsupportedSubjectType: programmer error, raised
#     before any network access.
#   - MissingApiKeyError: report submission without a configured key.
#   - TransportError: network, DNS, timeout or non-2xx HTTP status.
#   - ParseError: the response body is not the JSON we expect.
#   - RemoteRejected: the service answered with success = 0.
#   - SubmissionFailed: the report endpoint did not confirm the submission.
# =============================================================================


class SpamProtectionError(Exception):
    """Base class for all spam-protection errors."""
    pass


class InvalidArgument(SpamProtectionError, ValueError):
    """Raised when a caller passes a value that can never form a query."""
    pass


class UnsupportedSubjectType(InvalidArgument):
    """Raised when the subject type is not one of ip, email or username."""
    pass


class MissingApiKeyError(SpamProtectionError):
    """Raised when a spam report is attempted without an API key."""
    pass


class TransportError(SpamProtectionError):
    """Raised when the HTTP round trip fails or returns a non-2xx status."""
    pass


class ParseError(SpamProtectionError):
    """Raised when a response body cannot be decoded into a record."""
    pass


class RemoteRejected(SpamProtectionError):
    """
    Raised when the service reports success = 0.

    Attributes:
        message: The error text returned by the service (may be empty).
    """

    def __init__(self, message: str | None = None) -> None:
        self.message = message or ""
        if self.message:
            super().__init__(f"Service rejected the request: {self.message}")
        else:
            super().__init__("Service rejected the request")


class SubmissionFailed(SpamProtectionError):
    """Raised when a spam report was not confirmed by the service."""
    pass

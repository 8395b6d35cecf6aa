# =============================================================================
# Subject Types and Validation
# =============================================================================
# A "subject" is the thing being checked: an IP address, an email address or
# a username. The service only knows these three, so the set is fixed.
#
# Validation happens before any network access. We only normalize and check
# the subject TYPE here; the value's syntax is the service's business (it is
# the authority on what a valid username looks like).
# =============================================================================

from enum import Enum

from spam_protection.core.errors import InvalidArgument, UnsupportedSubjectType


class SubjectType(Enum):
    """
    The kinds of subject the reputation service can look up.

    The value of each member is the lowercase name used on the wire, both as
    the query parameter and as the key of the record in the JSON response.
    """
    IP = "ip"
    EMAIL = "email"
    USERNAME = "username"

    def __str__(self) -> str:
        return self.value


def validate_subject_type(subject_type: "str | SubjectType") -> SubjectType:
    """
    Normalize a subject type token into a SubjectType.

    Args:
        subject_type: A SubjectType, or a string such as " IP " or "email".

    Returns:
        The matching SubjectType.

    Raises:
        UnsupportedSubjectType: If the token is not ip, email or username.

    Example:
        >>> validate_subject_type("  Email ")
        <SubjectType.EMAIL: 'email'>
    """
    if isinstance(subject_type, SubjectType):
        return subject_type

    if not isinstance(subject_type, str):
        raise UnsupportedSubjectType(
            f"Type of {subject_type!r} is not supported by the API"
        )

    token = subject_type.strip().casefold()
    try:
        return SubjectType(token)
    except ValueError:
        raise UnsupportedSubjectType(
            f"Type of {token!r} is not supported by the API"
        ) from None


def validate(subject_type: "str | SubjectType", value: str | None) -> SubjectType:
    """
    Validate a lookup before it is sent.

    An empty value is allowed through (the service decides what it means),
    but a missing value can never produce a meaningful query.

    Raises:
        UnsupportedSubjectType: If the subject type is unknown.
        InvalidArgument: If value is None or not a string.
    """
    validated = validate_subject_type(subject_type)

    if value is None:
        raise InvalidArgument(f"A value is required to look up {validated}")
    if not isinstance(value, str):
        raise InvalidArgument(
            f"Expected a string value for {validated}, got {type(value).__name__}"
        )

    return validated

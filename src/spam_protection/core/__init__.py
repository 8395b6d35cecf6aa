# =============================================================================
# Spam Protection Core Module
# =============================================================================
# Domain models and errors. Pure Python, no external dependencies, so these
# can be imported anywhere without pulling in the HTTP or config layers.
#
#   - SubjectType: ip, email or username
#   - LookupRequest / ReputationRecord / IPReputation: one lookup's data
#   - ClassificationPolicy: thresholds that decide the verdict
#   - ReportSubmission: a spam report
#   - The error taxonomy (SpamProtectionError and subclasses)
# =============================================================================

from spam_protection.core.errors import (
    InvalidArgument,
    MissingApiKeyError,
    ParseError,
    RemoteRejected,
    SpamProtectionError,
    SubmissionFailed,
    TransportError,
    UnsupportedSubjectType,
)
from spam_protection.core.records import (
    THRESHOLD_HIGH,
    THRESHOLD_LOW,
    THRESHOLD_MEDIUM,
    THRESHOLD_STRICT,
    TOR_ALLOW,
    TOR_DISALLOW,
    ClassificationPolicy,
    IPReputation,
    LookupRequest,
    ReportSubmission,
    ReputationRecord,
)
from spam_protection.core.subject import SubjectType, validate, validate_subject_type

__all__ = [
    # Subjects
    "SubjectType",
    "validate",
    "validate_subject_type",
    # Records
    "LookupRequest",
    "ReputationRecord",
    "IPReputation",
    "ClassificationPolicy",
    "ReportSubmission",
    # Presets
    "THRESHOLD_STRICT",
    "THRESHOLD_HIGH",
    "THRESHOLD_MEDIUM",
    "THRESHOLD_LOW",
    "TOR_ALLOW",
    "TOR_DISALLOW",
    # Errors
    "SpamProtectionError",
    "InvalidArgument",
    "UnsupportedSubjectType",
    "MissingApiKeyError",
    "TransportError",
    "ParseError",
    "RemoteRejected",
    "SubmissionFailed",
]

# =============================================================================
# spam-protection: StopForumSpam Lookups for Forms, Forums and Comments
# =============================================================================
#
# Checks whether an IP address, email address or username is associated
# with spam by asking the StopForumSpam reputation service, and submits new
# spam reports to it.
#
# Features:
#   - ip / email / username checks with a configurable report threshold
#   - Optional confidence-score threshold
#   - Tor exit node policy
#   - Spam report submission (API key kept in the system keyring)
#   - XDG Base Directory compliant config
#
# =============================================================================

__version__ = "0.1.0"
__author__ = "Helge Sverre"
__app_name__ = "spam-protection"

from spam_protection.client import ClientOptions, SpamProtection
from spam_protection.core import (
    THRESHOLD_HIGH,
    THRESHOLD_LOW,
    THRESHOLD_MEDIUM,
    THRESHOLD_STRICT,
    TOR_ALLOW,
    TOR_DISALLOW,
    ClassificationPolicy,
    InvalidArgument,
    MissingApiKeyError,
    ParseError,
    RemoteRejected,
    ReputationRecord,
    SpamProtectionError,
    SubjectType,
    SubmissionFailed,
    TransportError,
    UnsupportedSubjectType,
)

__all__ = [
    "__version__",
    "__app_name__",
    # Client
    "SpamProtection",
    "ClientOptions",
    # Types
    "SubjectType",
    "ClassificationPolicy",
    "ReputationRecord",
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

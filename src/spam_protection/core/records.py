# =============================================================================
# Lookup, Reputation and Policy Models
# =============================================================================
# Plain frozen dataclasses describing one lookup from request to verdict:
#
#   LookupRequest  ->  (network)  ->  ReputationRecord  --ClassificationPolicy-->  bool
#
# None of these are persisted. A ReputationRecord is decoded once per lookup
# and only ever read by the classification step.
# =============================================================================

from dataclasses import dataclass

from spam_protection.core.errors import InvalidArgument
from spam_protection.core.subject import SubjectType


# =============================================================================
# Presets
# =============================================================================

# Frequency thresholds: how many reports a subject needs before we call it spam
THRESHOLD_STRICT = 1
THRESHOLD_HIGH = 3
THRESHOLD_MEDIUM = 5
THRESHOLD_LOW = 10

# Tor exit node policy
TOR_ALLOW = True
TOR_DISALLOW = False


@dataclass(frozen=True)
class LookupRequest:
    """
    A single reputation lookup.

    Attributes:
        subject_type: What kind of subject is being checked.
        value: The IP address, email address or username.
        allow_tor_nodes: If False, Tor exit nodes are flagged as spam.
    """
    subject_type: SubjectType
    value: str
    allow_tor_nodes: bool = TOR_DISALLOW


@dataclass(frozen=True)
class ReputationRecord:
    """
    The service's answer for one subject.

    Attributes:
        subject_type: Which subject type this record was decoded for.
        success: Whether the service processed the query.
        appears: Whether the subject is in the service's database at all.
        frequency: Number of spam reports on file for the subject.
        confidence: The service's own spam certainty score (0-100), or None
                    when the service did not send one.
        last_seen: Timestamp of the most recent report, as sent by the service.
        error: Error text sent alongside success = 0.
    """
    subject_type: SubjectType
    success: bool
    appears: bool = False
    frequency: int = 0
    confidence: float | None = None
    last_seen: str | None = None
    error: str | None = None


@dataclass(frozen=True)
class IPReputation(ReputationRecord):
    """
    Reputation record for an IP address.

    IP lookups carry a few extra fields the other subject types don't.

    Attributes:
        country: Two-letter country code of the address, if known.
        asn: Autonomous system number of the address, if known.
        tor_exit: Whether the address is a known Tor exit node.
    """
    country: str | None = None
    asn: int | None = None
    tor_exit: bool = False


@dataclass(frozen=True)
class ClassificationPolicy:
    """
    Thresholds that turn a ReputationRecord into a verdict.

    Attributes:
        frequency_threshold: Minimum report count for a spam verdict (>= 1).
        confidence_threshold: Optional minimum confidence score (0-100). When
                              set, a record must clear both thresholds.
    """
    frequency_threshold: int = THRESHOLD_STRICT
    confidence_threshold: float | None = None

    def __post_init__(self) -> None:
        # bool is an int subclass, but True is not a threshold
        if (
            isinstance(self.frequency_threshold, bool)
            or not isinstance(self.frequency_threshold, int)
        ):
            raise InvalidArgument(
                f"Frequency threshold must be an integer, got {self.frequency_threshold!r}"
            )
        if self.frequency_threshold < 1:
            raise InvalidArgument(
                f"Frequency threshold must be at least 1, got {self.frequency_threshold}"
            )

        if self.confidence_threshold is not None:
            if isinstance(self.confidence_threshold, bool) or not isinstance(
                self.confidence_threshold, (int, float)
            ):
                raise InvalidArgument(
                    f"Confidence threshold must be a number, got {self.confidence_threshold!r}"
                )
            if not 0 <= self.confidence_threshold <= 100:
                raise InvalidArgument(
                    f"Confidence threshold must be between 0 and 100, got {self.confidence_threshold}"
                )


@dataclass(frozen=True)
class ReportSubmission:
    """
    A spam report to send to the service.

    Attributes:
        username: Username of the spammer.
        ip: IP address of the spammer.
        evidence: Evidence of spam, usually the full original message
                  including headers. May span many lines.
        email: Email address of the spammer.
        api_key: The reporter's API key.
    """
    username: str
    ip: str
    evidence: str
    email: str
    api_key: str

    def __repr__(self) -> str:
        # Keep the key out of logs and tracebacks
        return (
            f"ReportSubmission(username={self.username!r}, ip={self.ip!r}, "
            f"email={self.email!r}, evidence=<{len(self.evidence)} chars>)"
        )

# =============================================================================
# Spam Protection Client
# =============================================================================
# The public entry point: checks IP addresses, email addresses and usernames
# against StopForumSpam, and submits spam reports.
#
# Every check is one synchronous pipeline:
#
#   validate -> build URL -> transport.send -> parse_response -> classify
#
# Errors from any stage propagate unchanged. There is no caching and no retry.
#
# Configuration lives in a frozen ClientOptions value. The setters replace
# that value rather than mutating it, and every call reads it once at the
# start, so a change only affects calls made after it.
# =============================================================================

import logging
from dataclasses import dataclass, field, replace
from typing import Any

from spam_protection.api.query import (
    DEFAULT_API_URL,
    DEFAULT_REPORT_URL,
    build_request_url,
    build_submission_url,
    mask_api_key,
)
from spam_protection.api.response import classify, is_report_accepted, parse_response
from spam_protection.api.transport import HttpTransport, Transport
from spam_protection.core import (
    ClassificationPolicy,
    InvalidArgument,
    LookupRequest,
    ReportSubmission,
    ReputationRecord,
    SubjectType,
    SubmissionFailed,
    TOR_DISALLOW,
    TransportError,
    validate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ClientOptions:
    """
    Complete configuration for a SpamProtection client.

    Attributes:
        base_url: Lookup endpoint.
        report_url: Report submission endpoint.
        policy: Thresholds used to classify lookups.
        allow_tor_nodes: If False, Tor exit nodes are flagged as spam.
        api_key: StopForumSpam API key. Only needed for reports.
        timeout: Per-request timeout in seconds (None = transport default).
    """
    base_url: str = DEFAULT_API_URL
    report_url: str = DEFAULT_REPORT_URL
    policy: ClassificationPolicy = field(default_factory=ClassificationPolicy)
    allow_tor_nodes: bool = TOR_DISALLOW
    api_key: str | None = None
    timeout: float | None = None

    def __repr__(self) -> str:
        key = "***" if self.api_key else None
        return (
            f"ClientOptions(base_url={self.base_url!r}, policy={self.policy!r}, "
            f"allow_tor_nodes={self.allow_tor_nodes}, api_key={key!r}, "
            f"timeout={self.timeout})"
        )


class SpamProtection:
    """
    Client for spam checks and reports against StopForumSpam.

    Usage:
        >>> spam = SpamProtection(THRESHOLD_STRICT, TOR_DISALLOW)
        >>> spam.check_ip("8.8.8.8")
        False
        >>> spam.check("email", "spammer@example.com")
        True

    Attributes:
        transport: Transport used for HTTP requests.
    """

    def __init__(
        self,
        frequency_threshold: int | None = None,
        allow_tor_nodes: bool | None = None,
        api_key: str | None = None,
        *,
        confidence_threshold: float | None = None,
        options: ClientOptions | None = None,
        transport: Transport | None = None,
    ) -> None:
        """
        Initialize the client.

        Positional arguments override the matching fields of options.

        Args:
            frequency_threshold: Minimum report count for a spam verdict.
            allow_tor_nodes: Whether Tor exit nodes are exempt from flagging.
            api_key: StopForumSpam API key (needed for submit_report only).
            confidence_threshold: Optional minimum confidence score (0-100).
            options: Base configuration. Uses ClientOptions() if None.
            transport: Transport to use. An HttpTransport is created (and
                       owned by this client) if None.

        Raises:
            InvalidArgument: If a threshold is out of range.
        """
        options = options or ClientOptions()

        policy = options.policy
        if frequency_threshold is not None or confidence_threshold is not None:
            policy = ClassificationPolicy(
                frequency_threshold=(
                    frequency_threshold
                    if frequency_threshold is not None
                    else policy.frequency_threshold
                ),
                confidence_threshold=(
                    confidence_threshold
                    if confidence_threshold is not None
                    else policy.confidence_threshold
                ),
            )

        changes: dict[str, Any] = {"policy": policy}
        if allow_tor_nodes is not None:
            changes["allow_tor_nodes"] = bool(allow_tor_nodes)
        if api_key is not None:
            changes["api_key"] = api_key

        self._options = replace(options, **changes)

        self._owns_transport = transport is None
        self.transport: Transport = transport or HttpTransport(timeout=self._options.timeout)

    # -------------------------------------------------------------------------
    # Configuration
    # -------------------------------------------------------------------------

    @property
    def options(self) -> ClientOptions:
        """The current configuration snapshot."""
        return self._options

    @options.setter
    def options(self, options: ClientOptions) -> None:
        self._options = options

    @property
    def allow_tor_nodes(self) -> bool:
        """Whether Tor exit nodes are exempt from spam flagging."""
        return self._options.allow_tor_nodes

    @allow_tor_nodes.setter
    def allow_tor_nodes(self, allow: bool) -> None:
        self._options = replace(self._options, allow_tor_nodes=bool(allow))

    @property
    def api_key(self) -> str | None:
        """The StopForumSpam API key, or None."""
        return self._options.api_key

    @api_key.setter
    def api_key(self, api_key: str | None) -> None:
        self._options = replace(self._options, api_key=api_key)

    @property
    def frequency_threshold(self) -> int:
        """Minimum report count for a spam verdict."""
        return self._options.policy.frequency_threshold

    @frequency_threshold.setter
    def frequency_threshold(self, threshold: int) -> None:
        try:
            threshold = int(threshold)
        except (TypeError, ValueError) as e:
            raise InvalidArgument(
                f"Frequency threshold must be an integer, got {threshold!r}"
            ) from e
        policy = replace(self._options.policy, frequency_threshold=threshold)
        self._options = replace(self._options, policy=policy)

    @property
    def confidence_threshold(self) -> float | None:
        """Minimum confidence score for a spam verdict, or None if unused."""
        return self._options.policy.confidence_threshold

    @confidence_threshold.setter
    def confidence_threshold(self, threshold: float | None) -> None:
        policy = replace(self._options.policy, confidence_threshold=threshold)
        self._options = replace(self._options, policy=policy)

    def with_options(self, **changes: Any) -> "SpamProtection":
        """
        Return a new client with some options changed.

        Accepts any ClientOptions field, plus frequency_threshold and
        confidence_threshold, which are applied to the policy. The new client
        shares this client's transport but does not own it.

        Example:
            >>> lenient = spam.with_options(allow_tor_nodes=True)
            >>> strict = spam.with_options(frequency_threshold=THRESHOLD_HIGH)

        Raises:
            TypeError: If a name is not an option.
            InvalidArgument: If a threshold is out of range.
        """
        policy_changes = {
            name: changes.pop(name)
            for name in ("frequency_threshold", "confidence_threshold")
            if name in changes
        }
        if policy_changes:
            changes["policy"] = replace(
                changes.get("policy", self._options.policy), **policy_changes
            )

        return SpamProtection(
            options=replace(self._options, **changes),
            transport=self.transport,
        )

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------

    def lookup(self, subject_type: "str | SubjectType", value: str) -> ReputationRecord:
        """
        Query the service and return the decoded record without classifying.

        Raises:
            UnsupportedSubjectType: If subject_type is unknown.
            InvalidArgument: If value is None.
            TransportError: If the HTTP request fails.
            ParseError: If the response can't be decoded.
        """
        options = self._options
        return self._lookup(options, subject_type, value)

    def _lookup(
        self,
        options: ClientOptions,
        subject_type: "str | SubjectType",
        value: str,
    ) -> ReputationRecord:
        validated = validate(subject_type, value)
        request = LookupRequest(
            subject_type=validated,
            value=value,
            allow_tor_nodes=options.allow_tor_nodes,
        )
        url = build_request_url(options.base_url, request)

        logger.debug(f"Looking up {validated}: {url}")
        raw = self.transport.send(url, timeout=options.timeout)

        return parse_response(raw, validated)

    def check(self, subject_type: "str | SubjectType", value: str) -> bool:
        """
        Check whether a subject is associated with spam.

        Args:
            subject_type: "ip", "email", "username" or a SubjectType.
            value: The subject to check.

        Returns:
            True if the subject should be treated as spam.

        Raises:
            UnsupportedSubjectType: If subject_type is unknown.
            InvalidArgument: If value is None.
            TransportError: If the HTTP request fails.
            ParseError: If the response can't be decoded.
            RemoteRejected: If the service reported an error.
        """
        options = self._options
        record = self._lookup(options, subject_type, value)
        verdict = classify(record, options.policy)

        logger.info(
            f"{record.subject_type} {value!r}: "
            f"{'spam' if verdict else 'clean'} "
            f"(appears={record.appears}, frequency={record.frequency}, "
            f"confidence={record.confidence})"
        )
        return verdict

    def check_ip(self, ip: str) -> bool:
        """
        Check whether an IP address is associated with spam.

        Args:
            ip: The IP address to look up.

        Returns:
            True if the IP address should be treated as spam.
        """
        return self.check(SubjectType.IP, ip)

    def check_email(self, email: str) -> bool:
        """
        Check whether an email address is associated with spam.

        Args:
            email: The email address to look up.

        Returns:
            True if the email address should be treated as spam.
        """
        return self.check(SubjectType.EMAIL, email)

    def check_username(self, username: str) -> bool:
        """
        Check whether a username is associated with spam.

        Args:
            username: The username to look up.

        Returns:
            True if the username should be treated as spam.
        """
        return self.check(SubjectType.USERNAME, username)

    # -------------------------------------------------------------------------
    # Reports
    # -------------------------------------------------------------------------

    def submit_report(
        self,
        username: str,
        ip: str,
        evidence: str,
        email: str,
    ) -> bool:
        """
        Submit a spam report to StopForumSpam.

        Args:
            username: Username of the spammer.
            ip: IP address of the spammer.
            evidence: Evidence of spam, usually a copy of the original
                      message with all its headers.
            email: Email address of the spammer.

        Returns:
            True once the service confirms the report.

        Raises:
            MissingApiKeyError: If no API key is configured. Nothing is sent.
            SubmissionFailed: If the request fails or the service doesn't
                              confirm the submission.
        """
        options = self._options
        submission = ReportSubmission(
            username=username,
            ip=ip,
            evidence=evidence,
            email=email,
            api_key=options.api_key,
        )
        url = build_submission_url(options.report_url, submission)

        logger.debug(f"Submitting report: {mask_api_key(url, options.api_key)}")

        try:
            raw = self.transport.send(url, timeout=options.timeout)
        except TransportError as e:
            raise SubmissionFailed(f"Submission failed: {e}") from e

        if not is_report_accepted(raw):
            raise SubmissionFailed("Submission failed: the service did not confirm the report")

        logger.info(f"Spam report submitted for {username!r} / {ip!r} / {email!r}")
        return True

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Release the transport if this client created it."""
        if self._owns_transport and hasattr(self.transport, "close"):
            self.transport.close()

    def __enter__(self) -> "SpamProtection":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"SpamProtection({self._options!r})"

# =============================================================================
# Query Builder
# =============================================================================
# Builds the URLs for the StopForumSpam lookup and report endpoints.
#
# Lookup:
#   {base}?{ip|email|username}={value}[&notorexit]&f=json
#
# Report:
#   {report_base}?username=..&ip_addr=..&evidence=..&email=..&api_key=..
#
# The URLs are assembled by hand rather than with urlencode() because the
# service expects "notorexit" as a bare flag with no "=". Values are encoded
# with quote_plus() so that "&", "=", spaces and newlines (evidence is often
# a full set of mail headers) survive the round trip.
# =============================================================================

from urllib.parse import quote_plus

from spam_protection.core.errors import MissingApiKeyError
from spam_protection.core.records import LookupRequest, ReportSubmission
from spam_protection.core.subject import SubjectType

DEFAULT_API_URL = "http://api.stopforumspam.org/api"
DEFAULT_REPORT_URL = "http://www.stopforumspam.com/add.php"

# Presence of this flag tells the service to treat Tor exit nodes as spam.
# The name reads backwards: we send it when Tor is NOT allowed.
NO_TOR_EXIT_FLAG = "notorexit"


def _encode(value: str | None) -> str:
    """Form-encode a free-form value. None is sent as an empty string."""
    return quote_plus("" if value is None else str(value))


def build_lookup_url(
    base: str,
    subject_type: SubjectType,
    value: str,
    allow_tor_nodes: bool,
) -> str:
    """
    Build the URL for a reputation lookup.

    Args:
        base: Lookup endpoint, e.g. DEFAULT_API_URL.
        subject_type: Validated subject type.
        value: The subject to look up (encoded here, pass it raw).
        allow_tor_nodes: If False, "&notorexit" is added so Tor exit nodes
                         are flagged.

    Returns:
        The full lookup URL.

    Example:
        >>> build_lookup_url("http://x/api", SubjectType.EMAIL, "a@b.com", False)
        'http://x/api?email=a%40b.com&notorexit&f=json'
    """
    url = f"{base}?{subject_type.value}={_encode(value)}"

    if not allow_tor_nodes:
        url += f"&{NO_TOR_EXIT_FLAG}"

    return url + "&f=json"


def build_request_url(base: str, request: LookupRequest) -> str:
    """Build the lookup URL for a LookupRequest."""
    return build_lookup_url(
        base,
        request.subject_type,
        request.value,
        request.allow_tor_nodes,
    )


def build_report_url(
    base: str,
    username: str | None,
    ip: str | None,
    evidence: str | None,
    email: str | None,
    api_key: str | None,
) -> str:
    """
    Build the URL for submitting a spam report.

    Args:
        base: Report endpoint, e.g. DEFAULT_REPORT_URL.
        username: Username of the spammer.
        ip: IP address of the spammer.
        evidence: Evidence text, may contain anything including newlines.
        email: Email address of the spammer.
        api_key: The reporter's API key.

    Returns:
        The full report URL.

    Raises:
        MissingApiKeyError: If api_key is empty. Nothing is built in that case.
    """
    if not api_key:
        raise MissingApiKeyError("To submit a spam report you need an API key")

    return (
        f"{base}"
        f"?username={_encode(username)}"
        f"&ip_addr={_encode(ip)}"
        f"&evidence={_encode(evidence)}"
        f"&email={_encode(email)}"
        f"&api_key={_encode(api_key)}"
    )


def build_submission_url(base: str, submission: ReportSubmission) -> str:
    """Build the report URL for a ReportSubmission."""
    return build_report_url(
        base,
        submission.username,
        submission.ip,
        submission.evidence,
        submission.email,
        submission.api_key,
    )


def mask_api_key(url: str, api_key: str | None) -> str:
    """Return url with the encoded API key replaced, for logging."""
    if not api_key:
        return url
    return url.replace(f"api_key={_encode(api_key)}", "api_key=***")

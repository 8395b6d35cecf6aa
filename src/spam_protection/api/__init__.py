# =============================================================================
# API Module
# =============================================================================
# Everything that touches the StopForumSpam wire format:
#   - Building lookup and report URLs
#   - Sending them over HTTP (httpx)
#   - Decoding lookup responses and applying the classification policy
# =============================================================================

from spam_protection.api.query import (
    DEFAULT_API_URL,
    DEFAULT_REPORT_URL,
    build_lookup_url,
    build_report_url,
)
from spam_protection.api.response import (
    REPORT_SUCCESS_MARKER,
    classify,
    is_report_accepted,
    parse_response,
)
from spam_protection.api.transport import HttpTransport, Transport

__all__ = [
    # Query
    "DEFAULT_API_URL",
    "DEFAULT_REPORT_URL",
    "build_lookup_url",
    "build_report_url",
    # Transport
    "Transport",
    "HttpTransport",
    # Response
    "REPORT_SUCCESS_MARKER",
    "parse_response",
    "classify",
    "is_report_accepted",
]

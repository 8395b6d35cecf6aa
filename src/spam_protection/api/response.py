# =============================================================================
# Response Interpreter and Classification Policy
# =============================================================================
# Turns the service's JSON answer into a ReputationRecord, then decides
# whether that record means "spam".
#
# Wire format (lookup):
#   {"success": 1, "ip": {"appears": 1, "frequency": 5, "confidence": 87.3, ...}}
#   {"success": 0, "error": "invalid ip"}
#
# Decision order (first match wins):
#   1. success = 0                                    -> RemoteRejected
#   2. appears = 0                                    -> not spam
#   3. frequency < frequency_threshold                -> not spam
#   4. no confidence threshold configured             -> spam
#   5. confidence missing or < confidence_threshold   -> not spam
#   6. otherwise                                      -> spam
#
# Each subject type has its own decoder, so the IP record can carry the
# IP-only fields without the others having to know about them.
# =============================================================================

import json
from typing import Any, Callable

from spam_protection.core.errors import ParseError, RemoteRejected
from spam_protection.core.records import (
    ClassificationPolicy,
    IPReputation,
    ReputationRecord,
)
from spam_protection.core.subject import SubjectType, validate_subject_type

# The report endpoint answers in plain text; this is how it says "ok"
REPORT_SUCCESS_MARKER = "data submitted successfully"


# =============================================================================
# Field Decoding
# =============================================================================

def _flag(data: dict[str, Any], key: str, *, required: bool = False) -> bool:
    """Read a 0/1 (or true/false) flag."""
    if key not in data:
        if required:
            raise ParseError(f"Missing field {key!r}")
        return False

    value = data[key]
    if isinstance(value, bool):
        return value
    if isinstance(value, int) and value in (0, 1):
        return bool(value)
    if isinstance(value, str) and value.strip() in ("0", "1"):
        return value.strip() == "1"
    raise ParseError(f"Field {key!r} is not a flag: {value!r}")


def _count(data: dict[str, Any], key: str) -> int:
    """Read a required non-negative integer."""
    if key not in data:
        raise ParseError(f"Missing field {key!r}")

    value = data[key]
    if isinstance(value, bool):
        raise ParseError(f"Field {key!r} is not an integer: {value!r}")
    if isinstance(value, str) and value.strip().isdigit():
        value = int(value)
    if not isinstance(value, int) or value < 0:
        raise ParseError(f"Field {key!r} is not a non-negative integer: {value!r}")
    return value


def _score(data: dict[str, Any], key: str) -> float | None:
    """Read an optional number. Missing means None, not zero."""
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, bool):
        raise ParseError(f"Field {key!r} is not a number: {value!r}")
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Field {key!r} is not a number: {value!r}") from e


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    return None if value is None else str(value)


def _optional_int(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ParseError(f"Field {key!r} is not an integer: {value!r}") from e


# =============================================================================
# Per-Subject Decoders
# =============================================================================

def _decode_common(subject_type: SubjectType, data: dict[str, Any]) -> dict[str, Any]:
    """Fields every subject type shares."""
    return {
        "subject_type": subject_type,
        "success": True,
        "appears": _flag(data, "appears", required=True),
        "frequency": _count(data, "frequency"),
        "confidence": _score(data, "confidence"),
        "last_seen": _optional_str(data, "lastseen"),
    }


def _decode_ip(data: dict[str, Any]) -> ReputationRecord:
    return IPReputation(
        **_decode_common(SubjectType.IP, data),
        country=_optional_str(data, "country"),
        asn=_optional_int(data, "asn"),
        tor_exit=_flag(data, "torexit"),
    )


def _decode_email(data: dict[str, Any]) -> ReputationRecord:
    return ReputationRecord(**_decode_common(SubjectType.EMAIL, data))


def _decode_username(data: dict[str, Any]) -> ReputationRecord:
    return ReputationRecord(**_decode_common(SubjectType.USERNAME, data))


_DECODERS: dict[SubjectType, Callable[[dict[str, Any]], ReputationRecord]] = {
    SubjectType.IP: _decode_ip,
    SubjectType.EMAIL: _decode_email,
    SubjectType.USERNAME: _decode_username,
}


# =============================================================================
# Public API
# =============================================================================

def parse_response(raw: bytes | str, subject_type: "str | SubjectType") -> ReputationRecord:
    """
    Decode a lookup response body.

    Args:
        raw: Response body as returned by the transport.
        subject_type: The subject type that was looked up.

    Returns:
        The decoded record. A record with success=False is returned (not
        raised) so that classify() can report the service's error message.

    Raises:
        ParseError: If the body is not JSON, is not an object, or lacks the
                    fields expected for the subject type.
    """
    subject_type = validate_subject_type(subject_type)

    if isinstance(raw, bytes):
        try:
            raw = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ParseError(f"Response is not valid UTF-8: {e}") from e

    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ParseError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ParseError(f"Expected a JSON object, got {type(data).__name__}")

    success = _flag(data, "success", required=True)
    if not success:
        return ReputationRecord(
            subject_type=subject_type,
            success=False,
            error=_optional_str(data, "error"),
        )

    subject_data = data.get(subject_type.value)
    if not isinstance(subject_data, dict):
        raise ParseError(f"Response has no {subject_type.value!r} record")

    return _DECODERS[subject_type](subject_data)


def classify(record: ReputationRecord, policy: ClassificationPolicy) -> bool:
    """
    Decide whether a record means spam.

    Args:
        record: Decoded service answer.
        policy: Thresholds to apply.

    Returns:
        True if the subject should be treated as spam.

    Raises:
        RemoteRejected: If the service reported success = 0.
    """
    if not record.success:
        raise RemoteRejected(record.error)

    if not record.appears:
        return False

    if record.frequency < policy.frequency_threshold:
        return False

    if policy.confidence_threshold is None:
        return True

    # A threshold is set, so a record without a score can't clear it
    if record.confidence is None:
        return False

    return record.confidence >= policy.confidence_threshold


def is_report_accepted(raw: bytes | str) -> bool:
    """Returns True if a report response body confirms the submission."""
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    return REPORT_SUCCESS_MARKER in raw

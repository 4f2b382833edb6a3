"""
Error classification and the JSON error body shared by every route.

Error bodies look like {"status": "<lowercased HTTP phrase>", "detail": "..."}
with detail omitted when there is nothing safe to say.
"""

import logging
import re
from http import HTTPStatus
from typing import Any, Dict, Iterable, List, Optional

import sentry_sdk
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

INVALID_JSON_DETAIL = "invalid json payload"
UNKNOWN_ERROR_DETAIL = "unknown error"

# JSON keys whose error-facing name is not simply the capitalised key
FIELD_NAMES = {
    "smtpHost": "SMTPHost",
    "smtpPort": "SMTPPort",
    "smtpUser": "SMTPUser",
    "smtpPass": "SMTPPass",
    "sportID": "SportID",
}

_SQLITE_UNIQUE = re.compile(r"UNIQUE constraint failed: (\w+)\.(\w+)")
_POSTGRES_CONSTRAINT = re.compile(r'constraint "([^"]+)"')


def status_phrase(status_code: int) -> str:
    """Lowercased reason phrase, e.g. 401 -> "unauthorized"."""
    try:
        return HTTPStatus(status_code).phrase.lower()
    except ValueError:
        return "error"


def is_default_detail(status_code: int, detail: Any) -> bool:
    """True when detail is just the phrase Starlette fills in for a bare HTTPException."""
    try:
        return detail == HTTPStatus(status_code).phrase
    except ValueError:
        return False


def error_body(status_code: int, detail: Optional[str] = None) -> Dict[str, str]:
    body = {"status": status_phrase(status_code)}
    if detail:
        body["detail"] = detail
    return body


def send_status(status_code: int, detail: Optional[str] = None, headers=None) -> JSONResponse:
    """JSON response in the shared error body shape."""
    return JSONResponse(
        status_code=status_code, content=error_body(status_code, detail), headers=headers
    )


def field_name(loc: Iterable[Any]) -> str:
    """Error-facing name of the field an error location points at (firstName -> FirstName)."""
    names = [part for part in loc if isinstance(part, str) and part != "body"]
    if not names:
        return ""
    key = names[-1]
    return FIELD_NAMES.get(key, key[:1].upper() + key[1:])


def is_payload_error(errors: List[Dict[str, Any]]) -> bool:
    """True when the request body as a whole was unreadable (bad JSON, not an object, absent)."""
    for error in errors:
        if error.get("type") == "json_invalid":
            return True
        if tuple(error.get("loc", ())) == ("body",):
            return True
    return False


def validation_errors(errors: List[Dict[str, Any]]) -> str:
    """
    Summarise structural validation failures.

    e164 and email failures are reported on their own as soon as they are
    seen; required/missing fields are collected and listed together in
    declaration order.
    """
    missing_fields = []
    for error in errors:
        tag = error.get("type")
        if tag in ("missing", "required"):
            missing_fields.append(field_name(error.get("loc", ())))
        elif tag == "e164":
            return "phone must use the E.164 international standard"
        elif tag == "email":
            return "invalid email"
    if missing_fields:
        return f"missing required field(s): [{' '.join(missing_fields)}]"
    if errors:
        first = errors[0]
        return f"validation error: {field_name(first.get('loc', ()))} failed on the '{first.get('type')}' tag"
    return "validation error"


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return code
    return None


def is_unique_violation(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return (
        _sqlstate(exc) == "23505"
        or "UNIQUE constraint failed" in message
        or "duplicate key value violates unique constraint" in message
    )


def violated_constraint(exc: IntegrityError) -> Optional[str]:
    """Constraint (PostgreSQL) or table.column (SQLite) named by an integrity error."""
    orig = exc.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        name = getattr(candidate, "constraint_name", None)
        if name:
            return name
    message = str(orig)
    match = _SQLITE_UNIQUE.search(message)
    if match:
        return f"{match.group(1)}.{match.group(2)}"
    match = _POSTGRES_CONSTRAINT.search(message)
    if match:
        return match.group(1)
    return None


def unique_violation_key(exc: IntegrityError) -> str:
    """
    Key named by a unique violation.

    PostgreSQL names unique constraints <table>_<column>_key, so the key is
    the second underscore-separated segment (accounts_email_key -> email).
    SQLite reports the column directly.
    """
    constraint = violated_constraint(exc) or ""
    if "." in constraint:
        return constraint.split(".", 1)[1]
    parts = constraint.split("_")
    if len(parts) > 1:
        return parts[1]
    return constraint or "value"


def _condition_name(exc: IntegrityError) -> str:
    cause = getattr(exc.orig, "__cause__", None)
    class_name = type(cause).__name__ if cause is not None else ""
    if class_name.endswith("Error") and class_name not in ("IntegrityError", "Error"):
        class_name = class_name[: -len("Error")]
        return re.sub(r"(?<!^)(?=[A-Z])", "_", class_name).lower()
    return "integrity_constraint_violation"


def integrity_errors(exc: IntegrityError) -> str:
    if is_unique_violation(exc):
        return f"{unique_violation_key(exc)} already in use"
    return _condition_name(exc)


def handle_error(exc: Exception) -> str:
    """
    Classify an error into a detail string that is safe to return to clients.

    Validation and unique-violation errors are described precisely; anything
    else is logged and reported to Sentry, and the client only sees
    "unknown error".
    """
    if isinstance(exc, (RequestValidationError, ValidationError)):
        return validation_errors(list(exc.errors()))
    if isinstance(exc, IntegrityError):
        return integrity_errors(exc)
    logger.error(f"Unclassified error: {type(exc).__name__}: {exc}", exc_info=exc)
    sentry_sdk.capture_exception(exc)
    return UNKNOWN_ERROR_DETAIL

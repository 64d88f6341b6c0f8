"""
Failure classification for companion dispatches.

The stable internal contract is the three-kind taxonomy in
runtime.models.session_models.ErrorKind:

    auth     credential missing, placeholder, invalid or revoked
    quota    rate or usage limit exceeded
    general  everything else (network, 5xx, uninitialised dispatcher, ...)

Everything that knows about the *shape* of upstream errors lives in
`describe_external_failure`. When the client library changes how it reports
failures, only that function should need to change.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from core.persona.models import PersonaConfig
from exceptions.exceptions import MissingCredentialException
from runtime.models.session_models import ErrorKind


logger = logging.getLogger(__name__)


AUTH_STATUS_CODES = frozenset({401, 403})
QUOTA_STATUS_CODES = frozenset({429})

AUTH_MARKERS = (
    "permission_denied",
    "permission denied",
    "api key not valid",
    "api_key_invalid",
    "invalid api key",
    "incorrect api key",
    "invalid_api_key",
    "unauthenticated",
    "unauthorized",
)

QUOTA_MARKERS = (
    "resource_exhausted",
    "resource exhausted",
    "insufficient_quota",
    "quota",
    "rate limit",
    "rate_limit",
    "too many requests",
)


@dataclass(frozen=True)
class ExternalFailure:
    """Normalized view of whatever the client library raised."""

    status_code: Optional[int]
    text: str


@dataclass(frozen=True)
class ClassifiedFailure:
    error_kind: ErrorKind
    display_text: str


# ---------------------------------------------------------------------------
# Adapter: upstream error shape -> ExternalFailure
# ---------------------------------------------------------------------------


def _as_status_code(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return None


def describe_external_failure(exc: BaseException) -> ExternalFailure:
    """
    Best-effort extraction of a status code and a searchable text blob.

    Looks at `status_code` (openai APIStatusError), `status` / `code`
    (other HTTP-style clients, including string codes such as
    "RESOURCE_EXHAUSTED"), the error `body` and finally `str(exc)`.
    """
    status_code = None
    for attr in ("status_code", "status", "code"):
        status_code = _as_status_code(getattr(exc, attr, None))
        if status_code is not None:
            break

    parts = [str(exc)]
    for attr in ("status", "code", "type"):
        value = getattr(exc, attr, None)
        if isinstance(value, str):
            parts.append(value)

    body = getattr(exc, "body", None)
    if isinstance(body, dict):
        error = body.get("error", body)
        if isinstance(error, dict):
            for key in ("status", "code", "type", "message"):
                value = error.get(key)
                if value is not None:
                    parts.append(str(value))
                    if status_code is None:
                        status_code = _as_status_code(value)

    return ExternalFailure(status_code=status_code, text=" ".join(parts).lower())


# ---------------------------------------------------------------------------
# Public function
# ---------------------------------------------------------------------------


def classify_error_kind(exc: BaseException) -> ErrorKind:
    if isinstance(exc, MissingCredentialException):
        return ErrorKind.AUTH

    failure = describe_external_failure(exc)

    if failure.status_code in AUTH_STATUS_CODES:
        return ErrorKind.AUTH
    if failure.status_code in QUOTA_STATUS_CODES:
        return ErrorKind.QUOTA
    if any(marker in failure.text for marker in AUTH_MARKERS):
        return ErrorKind.AUTH
    if any(marker in failure.text for marker in QUOTA_MARKERS):
        return ErrorKind.QUOTA
    return ErrorKind.GENERAL


def classify_failure(exc: BaseException, persona: Optional[PersonaConfig] = None) -> ClassifiedFailure:
    """Map a dispatch failure to an error kind and a persona-styled line."""
    persona = persona or PersonaConfig()
    kind = classify_error_kind(exc)
    texts = {
        ErrorKind.AUTH: persona.auth_failure_text,
        ErrorKind.QUOTA: persona.quota_failure_text,
        ErrorKind.GENERAL: persona.general_failure_text,
    }
    logger.debug("[CLASSIFY] %s -> %s", type(exc).__name__, kind.value)
    return ClassifiedFailure(error_kind=kind, display_text=texts[kind])

"""Error taxonomy for the AI invocation layer and ingestion."""

from __future__ import annotations

import enum
import re

import httpx

QUOTA_MARKERS = ("quota", "resource_exhausted", "resource exhausted", "rate limit")
INVALID_KEY_MARKERS = (
    "api key not valid",
    "api_key_invalid",
    "invalid api key",
    "invalid key",
)
TRANSIENT_MARKERS = ("xhr", "unavailable")
TRANSIENT_STATUS_PATTERN = re.compile(r"\b50[03]\b")


class ErrorKind(enum.Enum):
    QUOTA = "quota"
    INVALID_CREDENTIAL = "invalid_credential"
    TRANSIENT = "transient_backend_fault"
    OTHER = "other"


class PortoCVError(Exception):
    """Base class for errors surfaced to the user."""

    message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.message)


class NoKeyAvailable(PortoCVError):
    message = "No API key configured. Set API_KEY or enter a key."


class AllKeysExhausted(PortoCVError):
    message = "All API keys have hit their quota. Try again later or add more keys."


class InvalidCredential(PortoCVError):
    message = "The API key was rejected. Check the key and try again."


class GenerationFailed(PortoCVError):
    """The backend answered, but not with a usable payload."""

    def __init__(self, use_case: str, detail: str = ""):
        self.use_case = use_case
        self.detail = detail
        text = f"Generation failed during {use_case}."
        if detail:
            text += f" {detail}"
        super().__init__(text)


class IngestionFailed(PortoCVError):
    message = "Could not read the uploaded file. Please select another file."


def _status_of(exc: BaseException) -> int | None:
    for attr in ("code", "status_code", "status"):
        value = getattr(exc, attr, None)
        if isinstance(value, int):
            return value
    response = getattr(exc, "response", None)
    value = getattr(response, "status_code", None)
    return value if isinstance(value, int) else None


def classify_error(exc: BaseException) -> ErrorKind:
    """Map a backend exception to an ErrorKind.

    Status codes win over message markers. A 400 is always treated as an
    invalid credential, even if its message also mentions quota.
    """
    status = _status_of(exc)
    if status == 429:
        return ErrorKind.QUOTA
    if status == 400:
        return ErrorKind.INVALID_CREDENTIAL
    if status in (500, 503):
        return ErrorKind.TRANSIENT

    text = str(exc).lower()
    if any(m in text for m in INVALID_KEY_MARKERS):
        return ErrorKind.INVALID_CREDENTIAL
    if any(m in text for m in QUOTA_MARKERS):
        return ErrorKind.QUOTA
    if isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError)):
        return ErrorKind.TRANSIENT
    if status is None and (
        TRANSIENT_STATUS_PATTERN.search(text) or any(m in text for m in TRANSIENT_MARKERS)
    ):
        return ErrorKind.TRANSIENT
    return ErrorKind.OTHER

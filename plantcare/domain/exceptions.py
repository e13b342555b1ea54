"""Centralized exception hierarchy for the plant care core.

All domain and service exceptions inherit from :class:`PlantCareError` so that
callers can catch a single base class when they need a broad safety net, yet
still match on specific subclasses where narrower handling is appropriate.

Each class carries an ``http_status`` and a machine-readable ``code`` so the
presentation layer can tell "try again" (429/503) from "this feature is
unavailable" (502) from "your input is invalid" (400/413).

Hierarchy
---------
::

    PlantCareError (base — maps to 500)
    ├── ValidationError          (400 — bad input from caller)
    │   ├── ImageFormatError     (400 — image payload unusable)
    │   └── SizeLimitExceeded    (413 — image too large)
    ├── NotFoundError            (404 — entity does not exist)
    ├── ConfigurationError       (500 — missing / invalid config)
    └── ServiceError             (500 — business-logic failure)
        └── AdvisoryError        (502 — inference service failure)
            ├── ServiceUnavailable   (503)
            ├── NoResponse           (502)
            ├── EmptyContent         (502)
            ├── MalformedJson        (502)
            ├── MalformedResult      (502)
            ├── RateLimited          (429 — retried internally)
            └── RateLimitExhausted   (429)
"""

from __future__ import annotations


class PlantCareError(Exception):
    """Base exception for all plant care errors.

    Parameters
    ----------
    message:
        Human-readable description (logged server-side).
    detail:
        Optional machine-readable context dict attached to the error for
        structured logging.
    """

    http_status: int = 500
    code: str = "internal_error"

    def __init__(self, message: str = "", *, detail: dict | None = None) -> None:
        super().__init__(message)
        self.detail = detail or {}

    def to_dict(self) -> dict:
        return {"error": self.code, "message": str(self), "detail": self.detail}


# ── Client errors (4xx) ──────────────────────────────────────────────


class ValidationError(PlantCareError):
    """Caller supplied invalid or incomplete input (HTTP 400)."""

    http_status: int = 400
    code: str = "validation_error"


class ImageFormatError(ValidationError):
    """Image payload could not be turned into a usable image reference."""

    code: str = "image_format"


class SizeLimitExceeded(ValidationError):
    """Image payload is larger than the configured limit (HTTP 413)."""

    http_status: int = 413
    code: str = "size_limit_exceeded"

    def __init__(self, size_mb: float, limit_mb: float) -> None:
        super().__init__(
            f"Image size ({size_mb:.2f}MB) exceeds the {limit_mb:g}MB limit",
            detail={"size_mb": round(size_mb, 2), "limit_mb": limit_mb},
        )
        self.size_mb = size_mb
        self.limit_mb = limit_mb


class NotFoundError(PlantCareError):
    """Requested entity does not exist (HTTP 404)."""

    http_status: int = 404
    code: str = "not_found"


# ── Server errors (5xx) ──────────────────────────────────────────────


class ConfigurationError(PlantCareError):
    """Missing or invalid application configuration (HTTP 500)."""

    http_status: int = 500
    code: str = "configuration"


class ServiceError(PlantCareError):
    """Business-logic failure in a service method (HTTP 500)."""

    http_status: int = 500
    code: str = "service_error"


class AdvisoryError(ServiceError):
    """The inference service did not produce a usable result (HTTP 502)."""

    http_status: int = 502
    code: str = "advisory"


class ServiceUnavailable(AdvisoryError):
    """Inference endpoint unreachable, timed out or failing (HTTP 503)."""

    http_status: int = 503
    code: str = "service_unavailable"


class NoResponse(AdvisoryError):
    """The inference call returned no choices."""

    code: str = "no_response"


class EmptyContent(AdvisoryError):
    """The inference call returned a choice with empty content."""

    code: str = "empty_content"


class MalformedJson(AdvisoryError):
    """The returned content is not a JSON object."""

    code: str = "malformed_json"


class MalformedResult(AdvisoryError):
    """A structured result is missing required fields."""

    code: str = "malformed_result"

    def __init__(self, task: str, missing_fields: list[str]) -> None:
        super().__init__(
            f"Incomplete {task} result: missing or invalid {', '.join(missing_fields)}",
            detail={"task": task, "missing_fields": list(missing_fields)},
        )
        self.task = task
        self.missing_fields = list(missing_fields)


class RateLimited(AdvisoryError):
    """The inference service signalled rate limiting on a single attempt."""

    http_status: int = 429
    code: str = "rate_limited"

    def __init__(self, message: str = "", *, retry_after_s: float | None = None) -> None:
        super().__init__(message or "Rate limited by inference service", detail={"retry_after_s": retry_after_s})
        self.retry_after_s = retry_after_s


class RateLimitExhausted(AdvisoryError):
    """Rate limiting persisted through every retry attempt."""

    http_status: int = 429
    code: str = "rate_limit_exhausted"

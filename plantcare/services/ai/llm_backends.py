"""
Inference Backend Abstraction Layer
===================================
Backends for the vision/text inference service behind the plant care
advisor.

Supported backends
------------------
* **OpenAIBackend**: GPT-4o / GPT-4o-mini through the ``openai`` SDK,
  with image inputs sent as data URIs.

The backend performs exactly one call per :meth:`InferenceBackend.complete`.
SDK-level retries are disabled; retrying and model degradation belong to the
advisory orchestrator. SDK exceptions are translated into the
:mod:`plantcare.domain.exceptions` hierarchy so callers never see vendor
exception types.

Quick-start
-----------
::

    from plantcare.services.ai.llm_backends import InferenceRequest, OpenAIBackend

    backend = OpenAIBackend(api_key="sk-...")
    reply = backend.complete(
        InferenceRequest(
            system_prompt="You are a plant care expert.",
            user_text="My monstera leaves are yellowing.",
            model="gpt-4o",
            max_tokens=1000,
        )
    )
"""

from __future__ import annotations

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any

import openai

from plantcare.constants import AdvisoryDefaults
from plantcare.domain.exceptions import (
    AdvisoryError,
    ConfigurationError,
    ImageFormatError,
    NoResponse,
    RateLimited,
    ServiceUnavailable,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------


@dataclass
class InferenceRequest:
    """One call to the inference service."""

    system_prompt: str
    user_text: str
    model: str
    max_tokens: int
    image_urls: list[str] = field(default_factory=list)  # data URIs
    temperature: float = AdvisoryDefaults.TEMPERATURE
    json_mode: bool = True


@dataclass
class LLMResponse:
    """Standardised wrapper around every backend response."""

    text: str
    model: str
    usage: dict[str, int] = field(default_factory=dict)  # prompt_tokens, completion_tokens, total_tokens
    latency_ms: float = 0.0
    raw: Any = None  # backend-specific raw response object


# ---------------------------------------------------------------------------
# Abstract backend
# ---------------------------------------------------------------------------


class InferenceBackend(ABC):
    """
    Abstract base for every inference backend.

    Subclasses must implement :meth:`complete` and :attr:`name`.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Short identifier for this backend (e.g. ``"openai"``)."""

    @abstractmethod
    def complete(self, request: InferenceRequest) -> LLMResponse:
        """
        Run one completion.

        Raises
        ------
        RateLimited
            The service asked us to slow down. ``retry_after_s`` carries
            the server hint when one was sent.
        ImageFormatError
            The service rejected an image input.
        ServiceUnavailable
            Connection failure, timeout or a 5xx response.
        NoResponse
            The service answered without any choices.
        AdvisoryError
            Any other service-side failure.
        """

    # -- helpers available to all backends ----------------------------------

    def _timed(self, fn, *args, **kwargs):
        """Call *fn* and return ``(result, elapsed_ms)``."""
        t0 = time.perf_counter()
        result = fn(*args, **kwargs)
        return result, (time.perf_counter() - t0) * 1000


# ---------------------------------------------------------------------------
# OpenAI backend
# ---------------------------------------------------------------------------


def _retry_after_seconds(headers: Any) -> float | None:
    """Read the server back-off hint from ``retry-after-ms`` / ``retry-after``."""
    if not headers:
        return None

    retry_ms = headers.get("retry-after-ms")
    if retry_ms:
        try:
            return max(float(retry_ms) / 1000.0, 0.0)
        except ValueError:
            pass

    retry_after = headers.get("retry-after")
    if not retry_after:
        return None
    try:
        return max(float(retry_after), 0.0)
    except ValueError:
        pass
    try:
        retry_at = parsedate_to_datetime(retry_after)
    except (TypeError, ValueError):
        return None
    if retry_at.tzinfo is None:
        retry_at = retry_at.replace(tzinfo=timezone.utc)
    return max((retry_at - datetime.now(timezone.utc)).total_seconds(), 0.0)


def _mentions_image(exc: openai.APIStatusError) -> bool:
    message = str(getattr(exc, "message", "") or exc).lower()
    return "image" in message


class OpenAIBackend(InferenceBackend):
    """
    Backend for OpenAI's Chat Completions API.

    Parameters
    ----------
    api_key:
        OpenAI API key. An empty key raises :class:`ConfigurationError`.
    base_url:
        Optional custom endpoint (e.g. Azure OpenAI or compatible proxy).
    timeout:
        Request timeout in seconds.
    client:
        Pre-built client, mainly for tests. When given, ``api_key`` is only
        checked for presence.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: int = 60,
        client: Any = None,
    ):
        if not api_key:
            raise ConfigurationError("OpenAI backend requires an API key (OPENAI_API_KEY)")

        if client is None:
            kwargs: dict[str, Any] = {
                "api_key": api_key,
                "timeout": timeout,
                "max_retries": 0,
            }
            if base_url:
                kwargs["base_url"] = base_url
            client = openai.OpenAI(**kwargs)
            logger.info("OpenAI backend initialised (timeout=%ss)", timeout)

        self._client = client

    @property
    def name(self) -> str:
        return "openai"

    def complete(self, request: InferenceRequest) -> LLMResponse:
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": self._build_messages(request),
            "max_tokens": request.max_tokens,
            "temperature": request.temperature,
        }
        if request.json_mode:
            kwargs["response_format"] = {"type": "json_object"}

        try:
            response, latency = self._timed(self._client.chat.completions.create, **kwargs)
        except openai.RateLimitError as exc:
            retry_after = _retry_after_seconds(getattr(exc.response, "headers", None))
            raise RateLimited(str(exc), retry_after_s=retry_after) from exc
        except openai.BadRequestError as exc:
            if request.image_urls and _mentions_image(exc):
                raise ImageFormatError(f"Inference service rejected image input: {exc}") from exc
            raise AdvisoryError(f"Inference request rejected: {exc}", detail={"status": exc.status_code}) from exc
        except openai.InternalServerError as exc:
            raise ServiceUnavailable(
                f"Inference service error: {exc}", detail={"status": exc.status_code}
            ) from exc
        except openai.APIConnectionError as exc:
            # Includes APITimeoutError
            raise ServiceUnavailable(f"Inference service unreachable: {exc}") from exc
        except openai.APIStatusError as exc:
            raise AdvisoryError(f"Inference call failed: {exc}", detail={"status": exc.status_code}) from exc
        except openai.APIError as exc:
            raise AdvisoryError(f"Inference call failed: {exc}") from exc

        if not response.choices:
            raise NoResponse(f"No choices returned by model {request.model}")

        usage = {}
        if response.usage:
            usage = {
                "prompt_tokens": response.usage.prompt_tokens,
                "completion_tokens": response.usage.completion_tokens,
                "total_tokens": response.usage.total_tokens,
            }

        logger.debug(
            "OpenAI completion model=%s images=%d latency=%.0fms usage=%s",
            request.model,
            len(request.image_urls),
            latency,
            usage,
        )

        return LLMResponse(
            text=response.choices[0].message.content or "",
            model=response.model or request.model,
            usage=usage,
            latency_ms=latency,
            raw=response,
        )

    @staticmethod
    def _build_messages(request: InferenceRequest) -> list[dict[str, Any]]:
        if request.image_urls:
            user_content: Any = [{"type": "text", "text": request.user_text}]
            user_content.extend({"type": "image_url", "image_url": {"url": url}} for url in request.image_urls)
        else:
            user_content = request.user_text

        return [
            {"role": "system", "content": request.system_prompt},
            {"role": "user", "content": user_content},
        ]


# ---------------------------------------------------------------------------
# Factory
# ---------------------------------------------------------------------------


def create_backend(
    provider: str = "openai",
    *,
    api_key: str = "",
    base_url: str | None = None,
    timeout: int = 60,
) -> InferenceBackend:
    """
    Factory: create the backend for a provider name.

    Raises
    ------
    ConfigurationError
        Unknown provider or missing credentials.
    """
    provider = provider.strip().lower()

    if provider == "openai":
        return OpenAIBackend(api_key=api_key, base_url=base_url, timeout=timeout)

    raise ConfigurationError(f"Unknown inference provider '{provider}'", detail={"provider": provider})

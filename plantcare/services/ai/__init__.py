"""
AI Services
===========
Advisory services backed by the vision/text inference service.

Services:
- OpenAIBackend: one Chat Completions call per request, errors mapped to
  the plant care exception hierarchy
- AdvisoryRequestOrchestrator: prompt, images, call, parse, validate, retry
- ResponseValidator: table-driven result validation and defaulting
- IdentityVerificationPipeline: does a care-log photo show the logged plant
- LightLevelAnalyzer: light estimate from a photo

All public symbols are importable via ``from plantcare.services.ai import X``.
Imports are **lazy**: each submodule is loaded only when one of its symbols
is first accessed, so importing the package does not pull in the ``openai``
SDK.
"""

from __future__ import annotations

import importlib
from typing import Any

# ── Symbol → submodule mapping ──────────────────────────────────────
_LAZY_IMPORTS: dict[str, str] = {
    # advisory_orchestrator
    "AdvisoryRequestOrchestrator": "plantcare.services.ai.advisory_orchestrator",
    "AdvisoryResult": "plantcare.services.ai.advisory_orchestrator",
    "parse_json_payload": "plantcare.services.ai.advisory_orchestrator",
    # identity_verification
    "IdentityVerificationPipeline": "plantcare.services.ai.identity_verification",
    # light_analyzer
    "LightLevelAnalyzer": "plantcare.services.ai.light_analyzer",
    # llm_backends
    "InferenceBackend": "plantcare.services.ai.llm_backends",
    "InferenceRequest": "plantcare.services.ai.llm_backends",
    "LLMResponse": "plantcare.services.ai.llm_backends",
    "OpenAIBackend": "plantcare.services.ai.llm_backends",
    "create_backend": "plantcare.services.ai.llm_backends",
    # response_validator
    "FieldSpec": "plantcare.services.ai.response_validator",
    "ResponseValidator": "plantcare.services.ai.response_validator",
    "TASK_SCHEMAS": "plantcare.services.ai.response_validator",
    # retry_policy
    "RetryPolicy": "plantcare.services.ai.retry_policy",
    "run_with_retries": "plantcare.services.ai.retry_policy",
}

__all__ = list(_LAZY_IMPORTS.keys())


def __getattr__(name: str) -> Any:
    """Import the submodule that defines ``name`` on first access."""
    module_path = _LAZY_IMPORTS.get(name)
    if module_path is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    module = importlib.import_module(module_path)
    value = getattr(module, name)
    # Cache on the module so subsequent accesses skip __getattr__
    globals()[name] = value
    return value

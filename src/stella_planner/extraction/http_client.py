"""HTTP client for the extraction backend, built on httpx.

The backend accepts a JSON body with the rendered prompt and answers either
with the effect JSON directly or with a completion envelope
({"text": "..."} / {"output": "..."}) wrapping it.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from types import TracebackType

import httpx

from stella_planner.extraction.service import (
    ExtractionError,
    ExtractionRequest,
    build_prompt,
)
from stella_planner.models.effect import EffectDescriptor
from stella_planner.parser.effect_parser import EffectParseError, parse_effects_payload


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ExtractionSettings:
    """Where and how to reach the extraction backend."""

    endpoint: str
    api_key: str | None = None
    model: str = "effect-extractor"
    timeout_seconds: float = 30.0

    @classmethod
    def from_env(cls, environ: dict[str, str] | None = None) -> "ExtractionSettings":
        """Read STELLA_EXTRACTION_* variables. The URL is required."""
        env = os.environ if environ is None else environ
        endpoint = env.get("STELLA_EXTRACTION_URL", "").strip()
        if not endpoint:
            raise ExtractionError("STELLA_EXTRACTION_URL is not set")
        timeout_raw = env.get("STELLA_EXTRACTION_TIMEOUT", "30")
        try:
            timeout = float(timeout_raw)
        except ValueError as exc:
            raise ExtractionError(f"STELLA_EXTRACTION_TIMEOUT is not a number: {timeout_raw!r}") from exc
        return cls(
            endpoint=endpoint,
            api_key=env.get("STELLA_EXTRACTION_API_KEY") or None,
            model=env.get("STELLA_EXTRACTION_MODEL", "effect-extractor"),
            timeout_seconds=timeout,
        )


def _completion_text(response: httpx.Response) -> str:
    """Unwrap a completion envelope if there is one."""
    text = response.text
    try:
        body = json.loads(text)
    except json.JSONDecodeError:
        return text
    if isinstance(body, dict):
        for key in ("text", "output"):
            if isinstance(body.get(key), str):
                return body[key]
    return text


class HttpExtractionService:
    """ExtractionService that posts prompts to an HTTP inference backend.

    Pass an existing AsyncClient to share a connection pool (or to inject a
    MockTransport in tests); otherwise one is created and owned here.
    """

    def __init__(
        self,
        settings: ExtractionSettings,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._settings = settings
        self._owns_client = client is None
        headers = {"Authorization": f"Bearer {settings.api_key}"} if settings.api_key else {}
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(settings.timeout_seconds),
            headers=headers,
        )

    async def __aenter__(self) -> "HttpExtractionService":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def extract(self, request: ExtractionRequest) -> list[EffectDescriptor]:
        label = request.label or "effect"
        body: dict[str, object] = {
            "model": self._settings.model,
            "prompt": build_prompt(request),
        }
        if request.subject_context is not None:
            body["subject"] = {
                "name": request.subject_context.name,
                "element": request.subject_context.element_tag,
            }

        logger.info("Extraction request: %s", label)
        try:
            response = await self._client.post(self._settings.endpoint, json=body)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise ExtractionError(
                f"extraction backend returned {exc.response.status_code} for {label!r}"
            ) from exc
        except httpx.HTTPError as exc:
            raise ExtractionError(f"extraction request failed for {label!r}: {exc}") from exc

        try:
            effects = parse_effects_payload(_completion_text(response), default_name=label)
        except EffectParseError as exc:
            raise ExtractionError(f"unreadable extraction response for {label!r}: {exc}") from exc

        logger.info("Extraction response: %s -> %d effect(s)", label, len(effects))
        return effects

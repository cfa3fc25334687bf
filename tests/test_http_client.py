"""Tests for HttpExtractionService against an in-process httpx transport."""

import asyncio
import json

import httpx
import pytest

from stella_planner.extraction.http_client import ExtractionSettings, HttpExtractionService
from stella_planner.extraction.service import ExtractionError, ExtractionRequest, SubjectContext
from stella_planner.models.constants import EffectKind


ENDPOINT = "http://extractor.test/v1/extract"

EFFECTS_BODY = {
    "effects": [
        {"type": "atk_increase", "value": 15, "unit": "%", "duration": -1},
        {"type": "crit_rate", "value": 10, "unit": "%", "duration": 8},
    ]
}


def _request():
    return ExtractionRequest(
        description_text="ATK +{Param1}%",
        ordered_parameters=("15",),
        subject_context=SubjectContext("Chitose", "Aqua"),
        label="Fury",
    )


def _extract(handler, settings=None):
    settings = settings or ExtractionSettings(endpoint=ENDPOINT)

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
            service = HttpExtractionService(settings, client=client)
            return await service.extract(_request())

    return asyncio.run(run())


def test_extract_posts_prompt_and_parses_effects():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=EFFECTS_BODY)

    effects = _extract(handler)
    assert [e.kind for e in effects] == [EffectKind.ATK_INCREASE, EffectKind.CRIT_RATE]
    assert all(e.name == "Fury" for e in effects)
    assert seen["url"] == ENDPOINT
    assert seen["body"]["model"] == "effect-extractor"
    assert seen["body"]["subject"] == {"name": "Chitose", "element": "Aqua"}
    assert "ATK +15%" in seen["body"]["prompt"]


def test_completion_envelope_is_unwrapped():
    fenced = "```json\n" + json.dumps(EFFECTS_BODY) + "\n```"

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"text": fenced})

    assert len(_extract(handler)) == 2


def test_server_error_becomes_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, text="boom")

    with pytest.raises(ExtractionError, match="500"):
        _extract(handler)


def test_transport_error_becomes_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(ExtractionError, match="request failed"):
        _extract(handler)


def test_unreadable_body_becomes_extraction_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, text="I could not find any effects.")

    with pytest.raises(ExtractionError, match="unreadable"):
        _extract(handler)


# --- Settings ---


def test_settings_from_env():
    settings = ExtractionSettings.from_env({
        "STELLA_EXTRACTION_URL": ENDPOINT,
        "STELLA_EXTRACTION_API_KEY": "secret",
        "STELLA_EXTRACTION_TIMEOUT": "5",
    })
    assert settings.endpoint == ENDPOINT
    assert settings.api_key == "secret"
    assert settings.model == "effect-extractor"
    assert settings.timeout_seconds == 5.0


def test_settings_from_env_requires_url():
    with pytest.raises(ExtractionError):
        ExtractionSettings.from_env({})


def test_settings_from_env_rejects_bad_timeout():
    with pytest.raises(ExtractionError):
        ExtractionSettings.from_env({"STELLA_EXTRACTION_URL": ENDPOINT, "STELLA_EXTRACTION_TIMEOUT": "soon"})


def test_owned_client_sends_bearer_token():
    service = HttpExtractionService(ExtractionSettings(endpoint=ENDPOINT, api_key="secret"))
    try:
        assert service._client.headers["Authorization"] == "Bearer secret"
    finally:
        asyncio.run(service.aclose())

"""Tests for the generator-backed theme provider."""

import asyncio
import json

import pytest

from conftest import FakeClient

from runforge.ai.theme_provider import (
    GENERIC_FAILURE_MESSAGE,
    ThemeGenerationError,
    ThemeProvider,
)
from runforge.theme import THEME_RESPONSE_SCHEMA


def generate(provider: ThemeProvider, prompt: str):
    return asyncio.run(provider.generate_theme(prompt))


def test_generates_theme(desert_json):
    client = FakeClient(response=desert_json)
    provider = ThemeProvider(client, log_failures=False)

    theme = generate(provider, "  sandy desert  ")

    assert theme.world_name == "Dune Dash"
    assert len(client.prompts) == 1
    assert '"sandy desert"' in client.prompts[0]


def test_schema_sent_to_client(desert_json):
    seen = {}

    class RecordingClient:
        async def generate_json(self, prompt, response_schema, category="json_generation"):
            seen["schema"] = response_schema
            seen["category"] = category
            return desert_json

    generate(ThemeProvider(RecordingClient(), log_failures=False), "desert")

    assert seen["schema"] is THEME_RESPONSE_SCHEMA
    assert seen["category"] == "theme_generation"


@pytest.mark.parametrize("prompt", ["", "   \n\t"])
def test_empty_prompt_rejected_without_request(prompt):
    client = FakeClient(response="{}")
    with pytest.raises(ThemeGenerationError):
        generate(ThemeProvider(client, log_failures=False), prompt)
    assert client.prompts == []


def test_transport_failure():
    client = FakeClient(error=ConnectionError("network down"))
    with pytest.raises(ThemeGenerationError) as exc_info:
        generate(ThemeProvider(client, log_failures=False), "desert")

    assert str(exc_info.value) == GENERIC_FAILURE_MESSAGE
    assert "network down" in exc_info.value.reason


def test_empty_response():
    with pytest.raises(ThemeGenerationError):
        generate(ThemeProvider(FakeClient(response=None), log_failures=False), "desert")


def test_unparsable_response():
    with pytest.raises(ThemeGenerationError):
        generate(ThemeProvider(FakeClient(response="{oops"), log_failures=False), "desert")


def test_schema_violation(desert_payload):
    desert_payload["obstacles"] = []
    client = FakeClient(response=json.dumps(desert_payload))
    with pytest.raises(ThemeGenerationError):
        generate(ThemeProvider(client, log_failures=False), "desert")


def test_failures_are_logged(tmp_path, monkeypatch):
    from runforge.ai import theme_provider

    recorded = []

    class RecordingLogger:
        def log_failure(self, prompt, reason, response=None):
            recorded.append((prompt, reason, response))
            return "id"

    monkeypatch.setattr(theme_provider, "get_ai_logger", lambda: RecordingLogger())

    with pytest.raises(ThemeGenerationError):
        generate(ThemeProvider(FakeClient(response="{oops")), "desert")

    assert len(recorded) == 1
    assert recorded[0][0] == "desert"
    assert recorded[0][2] == "{oops"


def test_infinite_points_become_generation_failure(desert_json):
    client = FakeClient(response=desert_json.replace('"points": 10', '"points": 1e999'))
    with pytest.raises(ThemeGenerationError) as exc_info:
        generate(ThemeProvider(client, log_failures=False), "desert")
    assert str(exc_info.value) == GENERIC_FAILURE_MESSAGE


def test_unexpected_parse_error_becomes_generation_failure(desert_json, monkeypatch):
    from runforge.ai import theme_provider

    def exploding_parse(payload):
        raise OverflowError("cannot convert float infinity to integer")

    monkeypatch.setattr(theme_provider, "parse_theme", exploding_parse)

    with pytest.raises(ThemeGenerationError) as exc_info:
        generate(ThemeProvider(FakeClient(response=desert_json), log_failures=False), "desert")
    assert "infinity" in exc_info.value.reason

"""Tests for the HTTP assessment provider and structured output parsing."""

import json

import httpx
import pytest

from greenpass.agents.assessment_provider import (
    AssessmentRequest,
    CircularitySuggestion,
    HttpAssessmentProvider,
    circularity_prompt,
    materiality_prompt,
    parse_structured_output,
)
from greenpass.models.materiality import MaterialityScores

GATEWAY = "https://assess.test/v1/structured"


def _provider(handler, api_key: str = "") -> HttpAssessmentProvider:
    client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return HttpAssessmentProvider(base_url=GATEWAY, api_key=api_key, client=client)


def _request() -> AssessmentRequest:
    return AssessmentRequest(
        prompt=materiality_prompt(esrs_standard="ESRS E1", topic_name="Climate"),
        output_schema=MaterialityScores,
    )


# ===================================================================
# parse_structured_output
# ===================================================================


class TestParseStructuredOutput:
    def test_plain_json(self) -> None:
        raw = '{"impact_materiality_score": 7, "financial_materiality_score": 3}'
        scores = parse_structured_output(raw=raw, schema=MaterialityScores)
        assert scores.impact_materiality_score == 7

    def test_fenced_json(self) -> None:
        raw = 'Here you go:\n```json\n{"impact_materiality_score": 2, ' \
              '"financial_materiality_score": 9}\n```'
        scores = parse_structured_output(raw=raw, schema=MaterialityScores)
        assert scores.financial_materiality_score == 9

    def test_invalid_json(self) -> None:
        with pytest.raises(ValueError, match="Invalid JSON"):
            parse_structured_output(raw="not json", schema=MaterialityScores)

    def test_out_of_range_rejected(self) -> None:
        raw = '{"impact_materiality_score": 12, "financial_materiality_score": 3}'
        with pytest.raises(ValueError, match="Schema validation failed"):
            parse_structured_output(raw=raw, schema=MaterialityScores)


# ===================================================================
# HttpAssessmentProvider
# ===================================================================


class TestHttpAssessmentProvider:
    @pytest.mark.anyio
    async def test_sends_prompt_and_schema(self) -> None:
        seen: dict = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("authorization")
            return httpx.Response(200, json={
                "impact_materiality_score": 6, "financial_materiality_score": 4,
                "rationale": "Emissions-intensive supply chain",
            })

        result = await _provider(handler, api_key="k-123").suggest(_request())
        assert isinstance(result, MaterialityScores)
        assert result.rationale == "Emissions-intensive supply chain"
        assert "ESRS E1" in seen["body"]["prompt"]
        assert "impact_materiality_score" in seen["body"]["response_json_schema"]["properties"]
        assert seen["auth"] == "Bearer k-123"

    @pytest.mark.anyio
    async def test_content_envelope(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            text = '```json\n{"repairability_index": 6, "expected_lifetime_years": 8}\n```'
            return httpx.Response(200, json={"content": text})

        result = await _provider(handler).suggest(AssessmentRequest(
            prompt=circularity_prompt([{"name": "Steel", "percentage": 100}]),
            output_schema=CircularitySuggestion,
        ))
        assert result.repairability_index == 6
        assert result.expected_lifetime_years == 8

    @pytest.mark.anyio
    async def test_no_auth_header_without_key(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            assert "authorization" not in request.headers
            return httpx.Response(200, json={
                "impact_materiality_score": 1, "financial_materiality_score": 1,
            })

        await _provider(handler).suggest(_request())

    @pytest.mark.anyio
    async def test_http_error_raises(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, json={"error": "boom"})

        with pytest.raises(httpx.HTTPStatusError):
            await _provider(handler).suggest(_request())

    @pytest.mark.anyio
    async def test_out_of_range_reply_rejected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={
                "impact_materiality_score": 15, "financial_materiality_score": 4,
            })

        with pytest.raises(ValueError):
            await _provider(handler).suggest(_request())


class TestPrompts:
    def test_materiality_prompt_defaults_context(self) -> None:
        prompt = materiality_prompt(esrs_standard="ESRS S1", topic_name="Own workforce")
        assert "Own workforce" in prompt
        assert "not provided" in prompt

    def test_circularity_prompt_embeds_materials(self) -> None:
        prompt = circularity_prompt([{"name": "Aluminium", "percentage": 70}])
        assert '"Aluminium"' in prompt

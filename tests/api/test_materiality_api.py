"""Tests for the double materiality API."""

import httpx
import pytest
from httpx import AsyncClient
from pydantic import BaseModel

from greenpass.agents.assessment_provider import AssessmentProvider
from greenpass.api.dependencies import get_assessment_provider
from greenpass.api.main import app
from greenpass.config.settings import Settings, get_settings
from greenpass.models.materiality import MaterialityScores


def _use_provider(provider: AssessmentProvider) -> None:
    app.dependency_overrides[get_assessment_provider] = lambda: provider


class StaticProvider(AssessmentProvider):
    def __init__(self, impact: float, financial: float) -> None:
        self.impact = impact
        self.financial = financial
        self.prompts: list[str] = []

    async def suggest(self, request) -> BaseModel:
        self.prompts.append(request.prompt)
        return MaterialityScores(
            impact_materiality_score=self.impact,
            financial_materiality_score=self.financial,
            rationale="Suggested",
        )


class FailingProvider(AssessmentProvider):
    def __init__(self, exc: Exception) -> None:
        self.exc = exc

    async def suggest(self, request) -> BaseModel:
        raise self.exc


class TestCreateTopic:
    @pytest.mark.anyio
    async def test_material_by_impact(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post(
            "/v1/materiality/topics",
            json={
                "esrs_standard": "ESRS E1",
                "topic_name": "Climate change",
                "impact_materiality_score": 4,
                "financial_materiality_score": 5,
            },
            headers=auth_headers,
        )
        assert response.status_code == 201
        assert response.json()["is_material"] is True

    @pytest.mark.anyio
    async def test_not_material(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post(
            "/v1/materiality/topics",
            json={
                "esrs_standard": "ESRS G1",
                "topic_name": "Business conduct",
                "impact_materiality_score": 4,
                "financial_materiality_score": 4,
            },
            headers=auth_headers,
        )
        assert response.json()["is_material"] is False

    @pytest.mark.anyio
    async def test_score_out_of_range_is_422(self, client: AsyncClient, auth_headers) -> None:
        response = await client.post(
            "/v1/materiality/topics",
            json={
                "esrs_standard": "ESRS E1",
                "topic_name": "Climate change",
                "impact_materiality_score": 11,
                "financial_materiality_score": 2,
            },
            headers=auth_headers,
        )
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_requires_auth(self, client: AsyncClient) -> None:
        response = await client.get("/v1/materiality/topics")
        assert response.status_code == 401


class TestAssessTopic:
    @pytest.mark.anyio
    async def test_provider_scores_classified_locally(
        self, client: AsyncClient, auth_headers,
    ) -> None:
        provider = StaticProvider(impact=7.5, financial=2)
        _use_provider(provider)
        response = await client.post(
            "/v1/materiality/topics/assess",
            json={"esrs_standard": "ESRS S1", "topic_name": "Own workforce",
                  "context": "Textile manufacturer"},
            headers=auth_headers,
        )
        assert response.status_code == 201
        body = response.json()
        assert body["is_material"] is True
        assert body["impact_materiality_score"] == 7.5
        assert "Textile manufacturer" in provider.prompts[0]

    @pytest.mark.anyio
    @pytest.mark.parametrize(
        "exc",
        [ValueError("Schema validation failed"),
         httpx.ConnectError("gateway unreachable")],
    )
    async def test_provider_failure_is_502(
        self, client: AsyncClient, auth_headers, exc: Exception,
    ) -> None:
        _use_provider(FailingProvider(exc))
        response = await client.post(
            "/v1/materiality/topics/assess",
            json={"esrs_standard": "ESRS E1", "topic_name": "Climate change"},
            headers=auth_headers,
        )
        assert response.status_code == 502

        listed = await client.get("/v1/materiality/topics", headers=auth_headers)
        assert listed.json() == []

    @pytest.mark.anyio
    async def test_unconfigured_provider_is_503(self, client: AsyncClient, auth_headers) -> None:
        app.dependency_overrides[get_settings] = lambda: Settings(ASSESSMENT_API_URL="")
        response = await client.post(
            "/v1/materiality/topics/assess",
            json={"esrs_standard": "ESRS E1", "topic_name": "Climate change"},
            headers=auth_headers,
        )
        assert response.status_code == 503


class TestSummary:
    @pytest.mark.anyio
    async def test_pillar_summary(self, client: AsyncClient, auth_headers) -> None:
        topics = [
            ("ESRS E1", 8, 6),
            ("ESRS E5", 2, 3),
            ("ESRS S2", 6, 1),
        ]
        for code, impact, financial in topics:
            await client.post(
                "/v1/materiality/topics",
                json={"esrs_standard": code, "topic_name": code,
                      "impact_materiality_score": impact,
                      "financial_materiality_score": financial},
                headers=auth_headers,
            )

        body = (await client.get("/v1/materiality/summary", headers=auth_headers)).json()
        assert body["total_topics"] == 3
        assert body["material_topics"] == 2
        pillars = {p["pillar"]: p for p in body["pillars"]}
        assert pillars["Environmental"]["total"] == 2
        assert pillars["Environmental"]["avg_impact"] == 5.0
        assert pillars["Governance"]["total"] == 0

"""Assessment provider - narrow interface to a generative scoring service.

The provider turns a prompt plus a JSON schema into a structured reply
(materiality scores, repairability and lifetime estimates, ...). Its
output is a suggestion only: callers re-validate it with the schema and
the deterministic scorers before anything is stored.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TypeVar

import httpx
from pydantic import BaseModel, Field

T = TypeVar("T", bound=BaseModel)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / structured outputs
# ---------------------------------------------------------------------------


@dataclass
class AssessmentRequest:
    """Prompt plus the schema the reply must satisfy."""

    prompt: str
    output_schema: type[BaseModel]


class CircularitySuggestion(BaseModel):
    """Suggested durability inputs for the circularity index."""

    repairability_index: float = Field(ge=0.0, le=10.0)
    expected_lifetime_years: float = Field(gt=0.0, le=100.0)
    disassembly_score: float | None = Field(default=None, ge=0.0, le=10.0)
    recommendations: str | None = None


# ---------------------------------------------------------------------------
# JSON extraction helpers
# ---------------------------------------------------------------------------

_JSON_BLOCK_RE = re.compile(r"```(?:json)?\s*\n?(.*?)\n?```", re.DOTALL)


def _extract_json(raw: str) -> str:
    """Extract JSON from raw model output, stripping markdown fences."""
    match = _JSON_BLOCK_RE.search(raw)
    if match:
        return match.group(1).strip()
    return raw.strip()


def parse_structured_output(*, raw: str, schema: type[T]) -> T:
    """Parse raw output into a validated Pydantic model.

    Raises ValueError if JSON is invalid or fails schema validation.
    """
    cleaned = _extract_json(raw)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON from assessment provider: {exc}") from exc
    try:
        return schema.model_validate(data)
    except Exception as exc:
        raise ValueError(f"Schema validation failed: {exc}") from exc


# ---------------------------------------------------------------------------
# Providers
# ---------------------------------------------------------------------------


class AssessmentProvider(ABC):
    """Source of structured suggestions. Never trusted as ground truth."""

    @abstractmethod
    async def suggest(self, request: AssessmentRequest) -> BaseModel:
        ...


class HttpAssessmentProvider(AssessmentProvider):
    """Calls an HTTP gateway that accepts ``{prompt, response_json_schema}``.

    The gateway may answer with the JSON object directly, or with
    ``{"content": "<raw text>"}`` which is then parsed (fences allowed).
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str = "",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._base_url = base_url
        self._api_key = api_key
        self._timeout = timeout
        self._client = client

    async def suggest(self, request: AssessmentRequest) -> BaseModel:
        body = {
            "prompt": request.prompt,
            "response_json_schema": request.output_schema.model_json_schema(),
        }
        headers = {"Authorization": f"Bearer {self._api_key}"} if self._api_key else {}

        if self._client is not None:
            response = await self._client.post(self._base_url, json=body, headers=headers)
        else:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(self._base_url, json=body, headers=headers)
        response.raise_for_status()

        data = response.json()
        if isinstance(data, dict) and isinstance(data.get("content"), str):
            raw = data["content"]
        else:
            raw = json.dumps(data)
        parsed = parse_structured_output(raw=raw, schema=request.output_schema)
        logger.info("Assessment provider returned %s", request.output_schema.__name__)
        return parsed


# ---------------------------------------------------------------------------
# Prompt builders
# ---------------------------------------------------------------------------


def materiality_prompt(*, esrs_standard: str, topic_name: str, context: str = "") -> str:
    return (
        "Perform an EFRAG double materiality assessment.\n"
        f"ESRS standard: {esrs_standard}\n"
        f"Topic: {topic_name}\n"
        f"Company context: {context or 'not provided'}\n\n"
        "Score impact materiality (severity, scale, likelihood of impacts on people "
        "and environment) and financial materiality (risks and opportunities for the "
        "undertaking), each from 0 to 10, and give a short rationale."
    )


def circularity_prompt(materials: list[dict]) -> str:
    return (
        "Assess circularity and repairability for a product with these materials:\n"
        f"{json.dumps(materials)}\n\n"
        "Provide scores (0-10) for repairability index and design for disassembly, "
        "and an expected lifetime in years. Consider material compatibility, joining "
        "methods and ease of separation."
    )

"""Gemini product analysis: model routing, retry on quota errors, result validation."""

import asyncio
import json
import logging
from functools import lru_cache

from google import genai
from google.genai import types
from pydantic import ValidationError

from chemanalyzer.config import get_settings
from chemanalyzer.exceptions import (
    ConfigurationError,
    EmptyResponseError,
    MalformedResponseError,
    QuotaExceededError,
    TransportError,
)
from chemanalyzer.models.analysis import AnalysisResponse, AnalysisResult, ImageQuery, TextQuery
from chemanalyzer.prompts import ANALYSIS_SCHEMA, SYSTEM_INSTRUCTION, build_prompt
from chemanalyzer.services.recommendation import kzpm_recommendation

logger = logging.getLogger(__name__)

TEXT_MODEL = "gemini-3-flash-preview"
IMAGE_MODEL = "gemini-3.1-pro-preview"

MAX_ATTEMPTS = 3
BASE_DELAY = 2.0  # seconds, doubled after every quota retry

_QUOTA_MARKERS = ("429", "RESOURCE_EXHAUSTED")
_BAD_KEY_MARKERS = ("API key", "API_KEY_INVALID")


def select_model(query: TextQuery | ImageQuery) -> str:
    return IMAGE_MODEL if isinstance(query, ImageQuery) else TEXT_MODEL


def build_contents(query: TextQuery | ImageQuery) -> list:
    """Image part (if any) first, prompt text last."""
    prompt = build_prompt(query)
    if isinstance(query, ImageQuery):
        return [
            types.Part.from_bytes(data=query.decoded(), mime_type=query.mime_type),
            prompt,
        ]
    return [prompt]


def build_config(use_search: bool) -> types.GenerateContentConfig:
    return types.GenerateContentConfig(
        system_instruction=SYSTEM_INSTRUCTION,
        response_mime_type="application/json",
        response_schema=ANALYSIS_SCHEMA,
        tools=[types.Tool(google_search=types.GoogleSearch())] if use_search else None,
    )


def is_quota_error(exc: Exception) -> bool:
    if getattr(exc, "code", None) == 429 or getattr(exc, "status", None) == "RESOURCE_EXHAUSTED":
        return True
    message = str(exc)
    return any(marker in message for marker in _QUOTA_MARKERS)


def _is_bad_key_error(exc: Exception) -> bool:
    message = str(exc)
    return any(marker in message for marker in _BAD_KEY_MARKERS)


def _strip_code_fence(text: str) -> str:
    if not text.startswith("```"):
        return text
    # Drop the opening fence line, then a closing fence wherever it sits
    _, _, body = text.partition("\n")
    body = body.rstrip()
    if body.endswith("```"):
        body = body[:-3]
    return body


def parse_result(text: str | None) -> AnalysisResult:
    """Validate the model's JSON payload into an AnalysisResult.

    An absent or blank payload is an EmptyResponseError (typically a blocked
    response); anything that is not a twelve-string-field object is a
    MalformedResponseError. Fields are never defaulted.
    """
    if not text or not text.strip():
        raise EmptyResponseError(
            "The model returned an empty response. The request was probably "
            "blocked by safety filters."
        )
    payload = _strip_code_fence(text.strip())
    try:
        data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise MalformedResponseError(f"Model response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponseError(
            f"Model response must be a JSON object, got {type(data).__name__}"
        )
    try:
        return AnalysisResult.model_validate(data)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise MalformedResponseError(
            f"Model response does not match the analysis schema: {', '.join(missing)}"
        ) from e


class AnalysisClient:
    """Sends one product query to Gemini and returns the validated analysis.

    Holds read-only configuration and one lazily built SDK client, so one
    instance can serve concurrent calls. Call aclose() on shutdown.
    """

    def __init__(
        self,
        api_key: str,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        base_delay: float = BASE_DELAY,
        sleep=asyncio.sleep,
    ):
        self.api_key = api_key
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self._client: genai.Client | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def analyze(self, query: TextQuery | ImageQuery) -> AnalysisResult:
        if not self.api_key:
            raise ConfigurationError(
                "Gemini API key not configured. Get one at "
                "https://aistudio.google.com/apikey and set GEMINI_API_KEY "
                "(or VITE_GEMINI_API_KEY) in .env"
            )

        model = select_model(query)
        contents = build_contents(query)
        response = await self._generate_with_retry(self._get_client(), model, contents)
        return parse_result(response.text)

    def _get_client(self) -> genai.Client:
        # One SDK client, and so one connection pool, per AnalysisClient
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aio.aclose()
            self._client = None

    async def _generate_with_retry(self, client: genai.Client, model: str, contents: list):
        delay = self.base_delay
        attempt = 1
        while True:
            # Search grounding has a tighter quota, so only the first attempt uses it
            config = build_config(use_search=attempt == 1)
            try:
                return await client.aio.models.generate_content(
                    model=model,
                    contents=contents,
                    config=config,
                )
            except Exception as e:
                if is_quota_error(e):
                    if attempt < self.max_attempts:
                        logger.warning(
                            "Gemini quota exceeded on attempt %d/%d, retrying in %.1fs",
                            attempt, self.max_attempts, delay,
                        )
                        await self._sleep(delay)
                        delay *= 2
                        attempt += 1
                        continue
                    logger.error("Gemini quota still exceeded after %d attempts", attempt)
                    raise QuotaExceededError(
                        f"Gemini quota exceeded after {attempt} attempts. Try again later."
                    ) from e
                if _is_bad_key_error(e):
                    logger.error("Gemini rejected the API key: %s", e)
                    raise ConfigurationError(
                        "Gemini rejected the API key. Check that GEMINI_API_KEY is set correctly."
                    ) from e
                logger.error("Gemini request to %s failed: %s", model, e)
                raise TransportError(f"Gemini request failed: {e}") from e


@lru_cache
def get_analysis_client() -> AnalysisClient:
    return AnalysisClient(get_settings().gemini_api_key)


async def analyze(query: TextQuery | ImageQuery) -> AnalysisResult:
    """Analyze a product with the process-wide client."""
    return await get_analysis_client().analyze(query)


async def analyze_product(query: TextQuery | ImageQuery) -> AnalysisResponse:
    """Analyze a product and attach the model used and the KZPM recommendation."""
    result = await analyze(query)
    return AnalysisResponse(
        result=result,
        model=select_model(query),
        recommendation=kzpm_recommendation(result.medium_polarity),
    )

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

from google import genai

from ..config import settings
from ..models.analysis import AnalysisResult, InputMode
from .normalizer import normalize_response
from .request_builder import build_request

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to analyze content. Please try again."


class AnalysisFailed(Exception):
    def __init__(self, message: str = GENERIC_FAILURE_MESSAGE) -> None:
        super().__init__(message)


class AnalysisClient:
    """Sends one piece of user content to Gemini and returns the normalized verdict.

    The API key is handed in at construction. It is not checked up front: a
    missing or rejected key surfaces as AnalysisFailed on the first call.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-3-flash-preview",
        *,
        strict_parsing: bool = False,
        client: Optional[Any] = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.strict_parsing = strict_parsing
        self._client = client

    def _genai_client(self) -> Any:
        if self._client is None:
            self._client = genai.Client(api_key=self.api_key)
        return self._client

    async def analyze(self, input: str, mode: InputMode) -> AnalysisResult:
        try:
            request = build_request(input, mode)
            response = await self._genai_client().aio.models.generate_content(
                model=self.model,
                contents=request.contents,
                config=request.config,
            )
            result = normalize_response(
                response.text,
                response.candidates,
                strict=self.strict_parsing,
            )
        except Exception as exc:
            logger.error("Gemini analysis failed (mode=%s): %s", mode.value, exc, exc_info=True)
            raise AnalysisFailed() from exc

        logger.info(
            "Gemini analysis done (mode=%s): risk=%s, red_flags=%d, sources=%d",
            mode.value,
            result.risk_score.value,
            len(result.red_flags),
            len(result.sources or []),
        )
        return result


@lru_cache
def get_analysis_client() -> AnalysisClient:
    return AnalysisClient(
        api_key=settings.gemini_api_key,
        model=settings.gemini_model,
        strict_parsing=settings.strict_response_parsing,
    )

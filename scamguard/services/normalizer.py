from __future__ import annotations

import json
import logging
from typing import Any, Iterable

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..models.analysis import AnalysisResult, GroundingSource, RiskScore

logger = logging.getLogger(__name__)

FALLBACK_SOURCE_TITLE = "Search Result"
REQUIRED_FIELDS = ("risk_score", "scam_type", "red_flags", "advice")


class ResponseParseError(Exception):
    pass


class _ModelVerdict(BaseModel):
    risk_score: Any = None
    scam_type: str = ""
    red_flags: list[str] = Field(default_factory=list)
    advice: str = ""

    @field_validator("scam_type", "advice", mode="before")
    @classmethod
    def _null_text(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("red_flags", mode="before")
    @classmethod
    def _null_flags(cls, value: Any) -> Any:
        return [] if value is None else value


# ---------------------------------------------------------------------------
# Model text
# ---------------------------------------------------------------------------

def parse_model_text(text: str | None, *, strict: bool = False) -> dict[str, Any]:
    """Parse the model's JSON answer.

    Lenient mode returns an empty dict for anything that is not a JSON object,
    strict mode raises ResponseParseError instead.
    """
    try:
        parsed = json.loads(text or "{}")
    except json.JSONDecodeError as exc:
        if strict:
            raise ResponseParseError(f"model returned non-JSON text: {exc}") from exc
        logger.warning("Model returned non-JSON text; treating it as an empty verdict.")
        return {}

    if not isinstance(parsed, dict):
        if strict:
            raise ResponseParseError(f"model returned JSON {type(parsed).__name__}, expected object")
        logger.warning("Model returned JSON %s; treating it as an empty verdict.", type(parsed).__name__)
        return {}
    return parsed


# ---------------------------------------------------------------------------
# Grounding sources
# ---------------------------------------------------------------------------

def _field(obj: Any, name: str) -> Any:
    if obj is None:
        return None
    if isinstance(obj, dict):
        return obj.get(name)
    return getattr(obj, name, None)


def extract_sources(candidates: Iterable[Any] | None) -> list[GroundingSource]:
    candidates = list(candidates or [])
    if not candidates:
        return []

    metadata = _field(candidates[0], "grounding_metadata")
    chunks = _field(metadata, "grounding_chunks") or []

    sources: list[GroundingSource] = []
    for chunk in chunks:
        web = _field(chunk, "web")
        if not web:
            continue
        uri = _field(web, "uri")
        if not uri:
            continue
        sources.append(GroundingSource(title=_field(web, "title") or FALLBACK_SOURCE_TITLE, uri=uri))
    return sources


def dedupe_sources(sources: Iterable[GroundingSource]) -> list[GroundingSource]:
    # Keyed by uri: first occurrence fixes the position, the last one wins the slot.
    by_uri = {source.uri: source for source in sources}
    return list(by_uri.values())


# ---------------------------------------------------------------------------
# Risk score
# ---------------------------------------------------------------------------

def normalize_risk_score(value: Any) -> RiskScore:
    if isinstance(value, RiskScore):
        return value
    if not isinstance(value, str):
        return RiskScore.LOW

    try:
        return RiskScore(value)
    except ValueError:
        pass

    lower = value.lower()
    if "high" in lower:
        return RiskScore.HIGH
    if "medium" in lower:
        return RiskScore.MEDIUM
    return RiskScore.LOW


# ---------------------------------------------------------------------------
# Public interface
# ---------------------------------------------------------------------------

def normalize_response(
    text: str | None,
    candidates: Iterable[Any] | None = None,
    *,
    strict: bool = False,
) -> AnalysisResult:
    payload = parse_model_text(text, strict=strict)

    if strict:
        missing = [name for name in REQUIRED_FIELDS if payload.get(name) is None]
        if missing:
            raise ResponseParseError(f"model response is missing fields: {', '.join(missing)}")

    try:
        verdict = _ModelVerdict.model_validate(payload)
    except ValidationError as exc:
        raise ResponseParseError(f"model response failed validation: {exc}") from exc

    sources = dedupe_sources(extract_sources(candidates))

    return AnalysisResult(
        risk_score=normalize_risk_score(verdict.risk_score),
        scam_type=verdict.scam_type,
        red_flags=verdict.red_flags,
        advice=verdict.advice,
        sources=sources or None,
    )

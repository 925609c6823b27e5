"""
Pytest fixtures for ScamGuard tests. The Gemini client is replaced by a fake
analyzer through FastAPI dependency overrides, so no network call is made.
"""

from __future__ import annotations

import asyncio

import pytest

from scamguard.models.analysis import AnalysisResult, GroundingSource, InputMode, RiskScore
from scamguard.services.session_store import store


class FakeAnalyzer:
    """Records every analyze() call; returns a fixed result or raises a fixed error."""

    def __init__(self, result: AnalysisResult | None = None, error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, InputMode]] = []
        self.gate: asyncio.Event | None = None

    async def analyze(self, input: str, mode: InputMode) -> AnalysisResult:
        self.calls.append((input, mode))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.result


def legit_result() -> AnalysisResult:
    return AnalysisResult(
        risk_score=RiskScore.LOW,
        scam_type="Legitimate",
        red_flags=[],
        advice="This message looks safe.",
    )


def phishing_result() -> AnalysisResult:
    return AnalysisResult(
        risk_score=RiskScore.HIGH,
        scam_type="Phishing",
        red_flags=["Mismatched sender domain", "Urgent request to verify account"],
        advice="Do not click the link. Contact your bank directly.",
        sources=[GroundingSource(title="Bank fraud alerts", uri="https://bank.example/fraud")],
    )


@pytest.fixture(autouse=True)
def _fresh_sessions():
    store.clear()
    yield
    store.clear()


@pytest.fixture
def analyzer() -> FakeAnalyzer:
    return FakeAnalyzer(result=legit_result())


@pytest.fixture
def client(analyzer):
    """FastAPI TestClient wired to the fake analyzer."""
    from fastapi.testclient import TestClient

    from scamguard.main import app
    from scamguard.services.analysis_client import get_analysis_client

    app.dependency_overrides[get_analysis_client] = lambda: analyzer
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()

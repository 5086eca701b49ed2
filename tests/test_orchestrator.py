"""
Tests for the analysis orchestrator: remote first, rule-based fallback.
"""

import json
import random

import pytest

from safetalk.analyzer import RuleBasedAnalyzer
from safetalk.config import Settings
from safetalk.llm import CircuitOpenError, LLMProvider
from safetalk.orchestrator import (
    FALLBACK_EMERGENCY_RECOMMENDATION,
    FALLBACK_SAFETY_WARNING,
    STATUS_REMOTE,
    STATUS_SIMULATION,
    AnalysisOrchestrator,
    build_orchestrator,
)
from safetalk.remote import RemoteAnalyzer


REMOTE_PAYLOAD = {
    "severityLevel": "medium",
    "overallTone": "tense",
    "detectedPatterns": [{"type": "generalization", "severity": "medium"}],
    "isAbusiveContent": False,
    "transformed": "Gostaria que combinássemos melhor os horários.",
    "warnings": [],
    "suggestions": [],
}


class MockLLM(LLMProvider):
    """Mock LLM that returns a pre-configured reply."""

    def __init__(self, reply: str = "", available: bool = True):
        self._reply = reply
        self._available = available
        self.calls = []

    @property
    def available(self) -> bool:
        return self._available

    async def generate(self, prompt, system_instruction=None, temperature=0.7):
        self.calls.append(prompt)
        return self._reply


class FailingLLM(LLMProvider):
    """Mock LLM whose call always raises."""

    def __init__(self, error: Exception):
        self._error = error

    async def generate(self, prompt, system_instruction=None, temperature=0.7):
        raise self._error


class BrokenRemote(RemoteAnalyzer):
    """Remote analyzer with a bug outside the documented failure kinds."""

    @property
    def available(self) -> bool:
        return True

    async def analyze(self, text):
        raise KeyError("unexpected")


def make_orchestrator(llm=None, remote=None) -> AnalysisOrchestrator:
    if remote is None and llm is not None:
        remote = RemoteAnalyzer(llm)
    return AnalysisOrchestrator(
        rule_based=RuleBasedAnalyzer(rng=random.Random(0)),
        remote=remote,
    )


# ============================================================
# REMOTE PATH
# ============================================================

class TestRemotePath:

    @pytest.mark.asyncio
    async def test_remote_result_returned(self):
        llm = MockLLM(json.dumps(REMOTE_PAYLOAD))
        orchestrator = make_orchestrator(llm)
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "remote"
        assert result.transformed_text == REMOTE_PAYLOAD["transformed"]
        assert len(llm.calls) == 1

    def test_status_message_remote(self):
        orchestrator = make_orchestrator(MockLLM("{}"))
        assert orchestrator.remote_available is True
        assert orchestrator.status_message == STATUS_REMOTE


# ============================================================
# FALLBACK
# ============================================================

class TestFallback:

    @pytest.mark.asyncio
    async def test_no_remote_uses_rule_based(self):
        orchestrator = make_orchestrator()
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"
        assert result.has_pattern("generalization")
        assert orchestrator.status_message == STATUS_SIMULATION

    @pytest.mark.asyncio
    async def test_unconfigured_provider_not_called(self):
        llm = MockLLM(json.dumps(REMOTE_PAYLOAD), available=False)
        orchestrator = make_orchestrator(llm)
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"
        assert llm.calls == []

    @pytest.mark.asyncio
    async def test_call_error_falls_back(self):
        orchestrator = make_orchestrator(FailingLLM(ConnectionError("network down")))
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"

    @pytest.mark.asyncio
    async def test_open_circuit_falls_back(self):
        orchestrator = make_orchestrator(FailingLLM(CircuitOpenError("open")))
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"

    @pytest.mark.asyncio
    async def test_unparseable_reply_falls_back(self):
        orchestrator = make_orchestrator(MockLLM("Não sei responder."))
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"

    @pytest.mark.asyncio
    async def test_missing_fields_fall_back(self):
        orchestrator = make_orchestrator(MockLLM('{"severityLevel": "low"}'))
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"

    @pytest.mark.asyncio
    async def test_unexpected_error_falls_back(self):
        orchestrator = make_orchestrator(remote=BrokenRemote())
        result = await orchestrator.analyze("Você nunca chega no horário")
        assert result.source == "simulation"

    @pytest.mark.asyncio
    async def test_critical_fallback_escalates(self):
        orchestrator = make_orchestrator()
        result = await orchestrator.analyze("Você é um idiota")
        assert result.severity_level == "critical"
        assert result.safety_warning == FALLBACK_SAFETY_WARNING
        assert result.emergency_recommendation == FALLBACK_EMERGENCY_RECOMMENDATION

    @pytest.mark.asyncio
    async def test_non_critical_fallback_has_no_escalation(self):
        orchestrator = make_orchestrator()
        result = await orchestrator.analyze("A culpa é sua.")
        assert result.severity_level == "high"
        assert result.safety_warning is None
        assert result.emergency_recommendation is None


# ============================================================
# WIRING
# ============================================================

class TestBuildOrchestrator:

    def test_provider_disabled(self):
        orchestrator = build_orchestrator(Settings(LLM_PROVIDER="none"))
        assert orchestrator.remote_available is False

    def test_missing_key_disables_remote(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        orchestrator = build_orchestrator(Settings(LLM_PROVIDER="gemini", GEMINI_API_KEY=""))
        assert orchestrator.remote_available is False

    def test_key_enables_remote(self):
        orchestrator = build_orchestrator(
            Settings(LLM_PROVIDER="gemini", GEMINI_API_KEY="test-key")
        )
        assert orchestrator.remote_available is True

    def test_unknown_provider_rejected(self):
        with pytest.raises(ValueError):
            build_orchestrator(Settings(LLM_PROVIDER="bogus"))

"""
Tests for structured logging, the provider factory and the circuit breaker.
"""

import json
import logging
import sys
import time

import pytest

from safetalk.llm import CircuitOpenError
from safetalk.llm.factory import get_provider
from safetalk.llm.gemini import CircuitBreaker, GeminiProvider
from safetalk.logging import JSONFormatter, get_logger, setup_logging


# ============================================================
# LOGGING
# ============================================================

class TestStructuredLogging:

    def _record(self, msg="Analysis complete", **extra):
        record = logging.LogRecord(
            name="safetalk.orchestrator", level=logging.INFO, pathname=__file__,
            lineno=1, msg=msg, args=(), exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_json_output(self):
        line = JSONFormatter().format(self._record(severity="high", source="remote"))
        entry = json.loads(line)
        assert entry["level"] == "INFO"
        assert entry["logger"] == "safetalk.orchestrator"
        assert entry["message"] == "Analysis complete"
        assert entry["severity"] == "high"
        assert entry["source"] == "remote"
        assert "timestamp" in entry

    def test_unset_extras_omitted(self):
        entry = json.loads(JSONFormatter().format(self._record()))
        assert "severity" not in entry
        assert "duration_ms" not in entry

    def test_non_ascii_preserved(self):
        line = JSONFormatter().format(self._record(msg="Análise concluída"))
        assert "Análise concluída" in line

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = self._record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]

    def test_get_logger_namespace(self):
        assert get_logger("api").name == "safetalk.api"

    def test_setup_replaces_handler(self):
        setup_logging(level="debug", fmt="json")
        root = setup_logging(level="warning", fmt="text")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_setup_json_format(self):
        root = setup_logging(level="info", fmt="json")
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("google_genai").level == logging.WARNING


# ============================================================
# PROVIDERS
# ============================================================

class TestProviderFactory:

    @pytest.mark.parametrize("name", ["", "none"])
    def test_disabled(self, name):
        assert get_provider(name) is None

    def test_gemini(self):
        provider = get_provider("gemini", api_key="test-key", model="gemini-test")
        assert isinstance(provider, GeminiProvider)
        assert provider.model == "gemini-test"
        assert provider.available is True

    def test_unknown(self):
        with pytest.raises(ValueError):
            get_provider("bogus")

    def test_missing_key_unavailable(self, monkeypatch):
        monkeypatch.delenv("GEMINI_API_KEY", raising=False)
        assert GeminiProvider(api_key="").available is False


class TestCircuitBreaker:

    def test_opens_after_threshold(self):
        cb = CircuitBreaker(failure_threshold=3, recovery_timeout=60)
        for _ in range(2):
            cb.record_failure()
        assert cb.state == "closed"
        cb.record_failure()
        assert cb.is_open

    def test_success_resets(self):
        cb = CircuitBreaker(failure_threshold=2, recovery_timeout=60)
        cb.record_failure()
        cb.record_success()
        cb.record_failure()
        assert cb.state == "closed"

    def test_half_open_after_timeout(self):
        cb = CircuitBreaker(failure_threshold=1, recovery_timeout=0.05)
        cb.record_failure()
        assert cb.is_open
        time.sleep(0.1)
        assert cb.state == "half-open"

    def test_open_circuit_makes_provider_unavailable(self):
        provider = GeminiProvider(api_key="test-key")
        for _ in range(provider.circuit_breaker.failure_threshold):
            provider.circuit_breaker.record_failure()
        assert provider.available is False

    @pytest.mark.asyncio
    async def test_open_circuit_fast_fails(self):
        provider = GeminiProvider(api_key="test-key")
        for _ in range(provider.circuit_breaker.failure_threshold):
            provider.circuit_breaker.record_failure()
        with pytest.raises(CircuitOpenError):
            await provider.generate("mensagem")

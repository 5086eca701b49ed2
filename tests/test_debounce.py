"""
Tests for the debounce controller.

Intervals are shortened to a few milliseconds; each test runs on its
own event loop.
"""

import asyncio
import random

import pytest

from safetalk.analyzer import RuleBasedAnalyzer
from safetalk.config import settings
from safetalk.debounce import DebounceController, identity_result
from safetalk.rules import PROCESSING_ERROR_WARNING

INTERVAL = 0.01

_rule_based = RuleBasedAnalyzer(rng=random.Random(0))


class RecordingAnalyzer:
    """Async analyze() that records every text it is asked about."""

    def __init__(self, delays=None):
        self.calls = []
        self._delays = delays or {}

    async def __call__(self, text):
        self.calls.append(text)
        delay = self._delays.get(text)
        if delay:
            await asyncio.sleep(delay)
        return _rule_based.analyze(text)


# ============================================================
# SCHEDULING
# ============================================================

class TestScheduling:

    def test_defaults_from_settings(self):
        controller = DebounceController(RecordingAnalyzer())
        assert controller.interval == settings.DEBOUNCE_SECONDS
        assert controller.min_length == settings.MIN_ANALYSIS_LENGTH

    @pytest.mark.asyncio
    async def test_single_edit_runs_once(self):
        analyze = RecordingAnalyzer()
        controller = DebounceController(analyze, interval=INTERVAL)
        seq = controller.edit("Você nunca chega no horário")
        assert seq == 1
        assert controller.pending is True

        result = await controller.wait()
        assert result is not None
        assert result.has_pattern("generalization")
        assert controller.result_text == "Você nunca chega no horário"
        assert controller.executions == 1
        assert controller.pending is False

    @pytest.mark.asyncio
    async def test_rapid_edits_collapse_into_one_analysis(self):
        analyze = RecordingAnalyzer()
        controller = DebounceController(analyze, interval=INTERVAL)
        for text in ("Você", "Você nu", "Você nunca", "Você nunca chega"):
            controller.edit(text)

        await controller.wait()
        assert analyze.calls == ["Você nunca chega"]
        assert controller.executions == 1

    @pytest.mark.asyncio
    async def test_sequence_increases_per_edit(self):
        controller = DebounceController(RecordingAnalyzer(), interval=INTERVAL)
        first = controller.edit("primeira mensagem")
        second = controller.edit("segunda mensagem")
        assert second == first + 1
        assert controller.sequence == second
        await controller.aclose()


# ============================================================
# LENGTH THRESHOLD
# ============================================================

class TestThreshold:

    @pytest.mark.asyncio
    async def test_short_text_not_scheduled(self):
        analyze = RecordingAnalyzer()
        controller = DebounceController(analyze, interval=INTERVAL)
        assert controller.edit("oi") is None
        assert controller.pending is False

        await asyncio.sleep(INTERVAL * 5)
        assert analyze.calls == []
        assert controller.executions == 0
        assert controller.result is None

    @pytest.mark.asyncio
    async def test_whitespace_does_not_count(self):
        controller = DebounceController(RecordingAnalyzer(), interval=INTERVAL)
        assert controller.edit("   oi   ") is None

    @pytest.mark.asyncio
    async def test_short_text_clears_result(self):
        received = []
        controller = DebounceController(
            RecordingAnalyzer(), on_result=received.append, interval=INTERVAL,
        )
        controller.edit("Olá, tudo bem?")
        await controller.wait()
        assert controller.result is not None

        controller.edit("o")
        assert controller.result is None
        assert controller.result_text is None
        assert received[-1] is None

    @pytest.mark.asyncio
    async def test_short_text_cancels_pending(self):
        analyze = RecordingAnalyzer()
        controller = DebounceController(analyze, interval=INTERVAL)
        controller.edit("Olá, tudo bem?")
        controller.edit("Ol")

        await asyncio.sleep(INTERVAL * 5)
        assert analyze.calls == []


# ============================================================
# STALE RESULTS
# ============================================================

class TestStaleResults:

    @pytest.mark.asyncio
    async def test_in_flight_analysis_superseded(self):
        received = []
        analyze = RecordingAnalyzer(delays={"primeira mensagem": 0.2})
        controller = DebounceController(
            analyze, on_result=received.append, interval=INTERVAL,
        )

        controller.edit("primeira mensagem")
        await asyncio.sleep(INTERVAL * 5)
        assert analyze.calls == ["primeira mensagem"]

        controller.edit("segunda mensagem")
        await controller.wait()

        assert controller.result_text == "segunda mensagem"
        assert len(received) == 1
        assert controller.executions == 2

    @pytest.mark.asyncio
    async def test_clear_discards_in_flight(self):
        analyze = RecordingAnalyzer(delays={"mensagem lenta": 0.05})
        controller = DebounceController(analyze, interval=INTERVAL)

        controller.edit("mensagem lenta")
        await asyncio.sleep(INTERVAL * 3)
        controller.clear()
        await asyncio.sleep(0.1)

        assert controller.result is None
        assert controller.pending is False

    @pytest.mark.asyncio
    async def test_aclose_cancels_pending(self):
        analyze = RecordingAnalyzer()
        controller = DebounceController(analyze, interval=INTERVAL)
        controller.edit("mensagem qualquer")
        await controller.aclose()

        assert controller.pending is False
        assert analyze.calls == []


# ============================================================
# FAILURES
# ============================================================

class TestFailures:

    @pytest.mark.asyncio
    async def test_analysis_error_yields_identity_result(self):
        async def analyze(text):
            raise RuntimeError("boom")

        controller = DebounceController(analyze, interval=INTERVAL)
        controller.edit("Você nunca chega no horário")
        result = await controller.wait()

        assert result.transformed_text == "Você nunca chega no horário"
        assert result.needs_transformation is False
        assert result.source == "error"
        assert [(w.level, w.message) for w in result.warnings] == [
            ("medium", PROCESSING_ERROR_WARNING),
        ]

    def test_identity_result(self):
        result = identity_result("texto original")
        assert result.transformed_text == "texto original"
        assert result.detected_patterns == []
        assert result.severity_level == "low"

"""
Debounce Controller — Sequence-Numbered Re-Analysis While Typing

Runs on a single asyncio event loop. Every edit cancels the pending
analysis and schedules a new one after a quiet interval. Each schedule
gets a monotonically increasing sequence number; only a completion whose
sequence matches the latest issued one is applied. Anything older
(the user kept typing, or the draft was sent/cleared) is discarded,
even if its remote call could not be interrupted.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from safetalk.config import settings
from safetalk.models import AnalysisResult, AnalysisWarning, EmotionProfile
from safetalk.rules import PROCESSING_ERROR_WARNING

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = settings.DEBOUNCE_SECONDS
DEFAULT_MIN_LENGTH = settings.MIN_ANALYSIS_LENGTH

Analyze = Callable[[str], Awaitable[AnalysisResult]]
ResultCallback = Callable[[Optional[AnalysisResult]], None]


def identity_result(text: str) -> AnalysisResult:
    """Worst-case result: the message passes through unchanged with a retry warning."""
    return AnalysisResult(
        severity_level="low",
        overall_tone="calm",
        detected_patterns=[],
        emotions=EmotionProfile(),
        needs_transformation=False,
        is_abusive_content=False,
        transformed_text=text,
        warnings=[AnalysisWarning("medium", PROCESSING_ERROR_WARNING)],
        suggestions=[],
        source="error",
    )


class DebounceController:
    """At most one outstanding scheduled analysis; latest issuance wins."""

    def __init__(
        self,
        analyze: Analyze,
        on_result: Optional[ResultCallback] = None,
        interval: float = DEFAULT_INTERVAL,
        min_length: int = DEFAULT_MIN_LENGTH,
    ):
        self._analyze = analyze
        self._on_result = on_result
        self.interval = interval
        self.min_length = min_length

        self._sequence = 0
        self._pending: Optional[asyncio.Task] = None
        self._result: Optional[AnalysisResult] = None
        self._result_text: Optional[str] = None
        self.executions = 0

    @property
    def sequence(self) -> int:
        """Sequence number of the latest issued request."""
        return self._sequence

    @property
    def pending(self) -> bool:
        return self._pending is not None and not self._pending.done()

    @property
    def result(self) -> Optional[AnalysisResult]:
        return self._result

    @property
    def result_text(self) -> Optional[str]:
        """The text the current result was computed for."""
        return self._result_text

    def edit(self, text: str) -> Optional[int]:
        """
        Register an edit. Returns the sequence number of the scheduled
        analysis, or None when the text is too short to analyze.
        """
        if len(text.strip()) < self.min_length:
            self.clear()
            return None

        self._cancel_pending()
        self._sequence += 1
        seq = self._sequence
        self._pending = asyncio.get_running_loop().create_task(self._run(seq, text))
        return seq

    def clear(self) -> None:
        """Cancel pending work, invalidate anything in flight and drop the result."""
        self._cancel_pending()
        self._sequence += 1
        self._set_result(None, None)

    async def wait(self) -> Optional[AnalysisResult]:
        """Wait for the pending analysis (if any) and return the current result."""
        task = self._pending
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                if not task.cancelled():
                    raise
        return self._result

    async def aclose(self) -> None:
        self._cancel_pending()
        task = self._pending
        if task is not None:
            try:
                await task
            except asyncio.CancelledError:
                pass

    def _cancel_pending(self) -> None:
        if self._pending is not None and not self._pending.done():
            self._pending.cancel()

    async def _run(self, seq: int, text: str) -> None:
        await asyncio.sleep(self.interval)
        if seq != self._sequence:
            return

        self.executions += 1
        try:
            result = await self._analyze(text)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(
                "Analysis failed; passing message through unchanged",
                extra={"error": str(e), "error_type": type(e).__name__, "sequence": seq},
                exc_info=True,
            )
            result = identity_result(text)

        if seq != self._sequence:
            logger.debug("Discarding stale analysis", extra={"sequence": seq})
            return

        self._set_result(result, text)

    def _set_result(self, result: Optional[AnalysisResult], text: Optional[str]) -> None:
        self._result = result
        self._result_text = text
        if self._on_result is not None:
            self._on_result(result)

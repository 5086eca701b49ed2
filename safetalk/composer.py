"""
Composer — Draft-to-Send Consumer Contract

Feeds keystrokes to the debounce controller, exposes the current
analysis, and on send delivers the neutralized text while keeping the
original draft and its analysis for the sender's own review.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from safetalk.debounce import DEFAULT_INTERVAL, DEFAULT_MIN_LENGTH, DebounceController
from safetalk.diff import compute_diff_spans
from safetalk.models import AnalysisResult
from safetalk.orchestrator import AnalysisOrchestrator


@dataclass(frozen=True)
class SentMessage:
    """A delivered message plus what the sender originally wrote."""
    original: str
    delivered: str
    analysis: AnalysisResult
    diff_spans: list[dict] = field(default_factory=list)
    sent_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class Composer:
    """One sender's message composer."""

    def __init__(
        self,
        orchestrator: AnalysisOrchestrator,
        interval: float = DEFAULT_INTERVAL,
        min_length: int = DEFAULT_MIN_LENGTH,
    ):
        self._orchestrator = orchestrator
        self._draft = ""
        self._debounce = DebounceController(
            orchestrator.analyze, interval=interval, min_length=min_length,
        )
        self.sent: list[SentMessage] = []

    @property
    def draft(self) -> str:
        return self._draft

    @property
    def analysis(self) -> Optional[AnalysisResult]:
        return self._debounce.result

    @property
    def debounce(self) -> DebounceController:
        return self._debounce

    def update(self, text: str) -> Optional[int]:
        """Replace the draft; schedules re-analysis when long enough."""
        self._draft = text
        return self._debounce.edit(text)

    async def send(self) -> Optional[SentMessage]:
        """
        Deliver the current draft. Blank drafts are not sent.

        The current analysis is reused only when it was computed for this
        exact draft; otherwise the draft is analyzed now.
        """
        draft = self._draft
        if not draft.strip():
            return None

        analysis = self._debounce.result
        if analysis is None or self._debounce.result_text != draft:
            analysis = await self._orchestrator.analyze(draft)

        message = SentMessage(
            original=draft,
            delivered=analysis.transformed_text,
            analysis=analysis,
            diff_spans=compute_diff_spans(draft, analysis.transformed_text),
        )
        self.sent.append(message)

        # A draft typed while the send was being analyzed is kept
        if self._draft == draft:
            self._draft = ""
            self._debounce.clear()
        return message

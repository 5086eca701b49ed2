"""
Rule-Based Analyzer — Deterministic Message Analysis

Always available, zero API cost. Evaluates a drafted message against
the fixed rule tables and produces a complete AnalysisResult:

  1. Pattern scan (one entry per matching rule, emotion accumulation)
  2. Shouting and emphasis detection
  3. Tone from the aggregated emotion score
  4. Neutralized rewrite
  5. Suggestions and warnings

The only non-deterministic steps are cosmetic phrase choices
(greeting, child-focus suggestion, reminder). They draw from an
injectable random.Random so callers can pin the output.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from safetalk.models import (
    AnalysisResult,
    AnalysisWarning,
    DetectedPattern,
    EmotionProfile,
    Suggestion,
    is_severe,
    max_severity,
    severity_rank,
)
from safetalk.neutralizer import neutralize
from safetalk.rules import (
    CHILD_FOCUS_ICON,
    CHILD_FOCUS_PHRASES,
    DETECTION_RULES,
    EMOTION_WEIGHTS,
    EMPHASIS_PENALTY,
    EMPHASIS_RUN,
    LOGISTICS_SUGGESTION,
    LOGISTICS_VOCABULARY,
    MANIPULATION_WARNING,
    MANIPULATION_WARNING_THRESHOLD,
    MEDIATION_SUGGESTION,
    SCHEDULING_SUGGESTION,
    SCHEDULING_VOCABULARY,
    SEVERITY_WARNINGS,
    SHOUTING_PENALTY,
    SHOUTING_RATIO,
    THREAT_WARNING,
    TONE_THRESHOLDS,
    PatternRule,
)

logger = logging.getLogger(__name__)

_EVIDENCE_LIMIT = 120


def uppercase_ratio(text: str) -> float:
    """Fraction of letters that are uppercase; 0.0 when there are no letters."""
    letters = [ch for ch in text if ch.isalpha()]
    if not letters:
        return 0.0
    upper = sum(1 for ch in letters if ch.isupper())
    return upper / len(letters)


def calculate_tone(emotions: EmotionProfile) -> str:
    """Map the total emotion score to a tone."""
    total = emotions.total()
    for bound, tone in TONE_THRESHOLDS:
        if total <= bound:
            return tone
    return "very_hostile"


class RuleBasedAnalyzer:
    """
    Pattern-table-driven analyzer. Holds no per-message state.

    analyze() never raises: every edge case (empty text, no letters,
    pathological repetition) is handled by explicit guards.
    """

    source = "rule-based"

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        rules: Optional[list[PatternRule]] = None,
    ):
        self._rng = rng or random.Random()
        self._rules = rules if rules is not None else DETECTION_RULES

    def analyze(self, text: str) -> AnalysisResult:
        emotions = EmotionProfile()
        patterns: list[DetectedPattern] = []
        severity = "low"

        # --- Phase 1: pattern scan ---
        for rule in self._rules:
            match = rule.pattern.search(text)
            if match is None:
                continue
            patterns.append(DetectedPattern(
                type=rule.category,
                severity=rule.severity,
                evidence=match.group(0)[:_EVIDENCE_LIMIT],
            ))
            weight = EMOTION_WEIGHTS.get(rule.category)
            if weight:
                emotions.add(*weight)
            severity = max_severity(severity, rule.severity)

        # --- Phase 2: shouting and emphasis ---
        shouting = uppercase_ratio(text) > SHOUTING_RATIO
        if shouting:
            emotions.add(*SHOUTING_PENALTY)
            patterns.append(DetectedPattern(type="shouting", severity="medium"))
            severity = max_severity(severity, "medium")

        if EMPHASIS_RUN.search(text):
            emotions.add(*EMPHASIS_PENALTY)
            patterns.append(DetectedPattern(type="emphasis", severity="low"))

        # --- Phase 3: classification ---
        tone = calculate_tone(emotions)
        needs_transformation = bool(patterns) or severity != "low"

        transformed = neutralize(
            text,
            needs_transformation=needs_transformation,
            shouting=shouting,
            severity=severity,
            rng=self._rng,
        )

        logger.debug(
            "Rule-based analysis: severity=%s tone=%s patterns=%d",
            severity, tone, len(patterns),
        )

        return AnalysisResult(
            severity_level=severity,
            overall_tone=tone,
            detected_patterns=patterns,
            emotions=emotions,
            needs_transformation=needs_transformation,
            is_abusive_content=False,
            transformed_text=transformed,
            warnings=self._build_warnings(severity, patterns, emotions),
            suggestions=self._build_suggestions(text, severity),
            source=self.source,
        )

    def _build_suggestions(self, text: str, severity: str) -> list[Suggestion]:
        """Scheduling, logistics, mediation, then child-focus (always last)."""
        suggestions = []
        if SCHEDULING_VOCABULARY.search(text):
            suggestions.append(Suggestion(*SCHEDULING_SUGGESTION))
        if LOGISTICS_VOCABULARY.search(text):
            suggestions.append(Suggestion(*LOGISTICS_SUGGESTION))
        if is_severe(severity):
            suggestions.append(Suggestion(*MEDIATION_SUGGESTION))
        suggestions.append(Suggestion(
            type="child_focus",
            text=self._rng.choice(CHILD_FOCUS_PHRASES),
            icon=CHILD_FOCUS_ICON,
        ))
        return suggestions

    def _build_warnings(
        self,
        severity: str,
        patterns: list[DetectedPattern],
        emotions: EmotionProfile,
    ) -> list[AnalysisWarning]:
        warnings = []
        if severity_rank(severity) > 0:
            warnings.append(AnalysisWarning(severity, SEVERITY_WARNINGS[severity]))
        if any(p.type == "threat" for p in patterns):
            warnings.append(AnalysisWarning("critical", THREAT_WARNING))
        if emotions.manipulation > MANIPULATION_WARNING_THRESHOLD:
            warnings.append(AnalysisWarning("high", MANIPULATION_WARNING))
        return warnings


# ============================================================
# SINGLETON — shared, stateless apart from its random source
# ============================================================

rule_based_analyzer = RuleBasedAnalyzer()

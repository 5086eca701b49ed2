"""
Analysis Data Model

Severity tiers, tones, and the immutable AnalysisResult produced by
every analyzer. Results serialize to the camelCase wire shape the
composer UI and the remote classifier both speak.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Optional


# ============================================================
# TAXONOMY
# ============================================================

SEVERITY_ORDER: tuple[str, ...] = ("low", "medium", "high", "critical")

_SEVERITY_RANK = {name: rank for rank, name in enumerate(SEVERITY_ORDER)}

TONES: tuple[str, ...] = (
    "calm",
    "slightly_tense",
    "tense",
    "hostile",
    "very_hostile",
    "abusive",
)

# Presentation hints carried over from the composer UI
TONE_EMOJI = {
    "calm": "😊",
    "slightly_tense": "😐",
    "tense": "😟",
    "hostile": "😠",
    "very_hostile": "🤬",
    "abusive": "🚨",
}

SEVERITY_COLOR = {
    "low": "#10B981",
    "medium": "#F59E0B",
    "high": "#EF4444",
    "critical": "#991B1B",
}


def severity_rank(severity: str) -> int:
    """Position of a severity tier; unknown tiers rank as low."""
    return _SEVERITY_RANK.get(severity, 0)


def max_severity(*severities: str) -> str:
    """Highest tier among the given severities ("low" when none)."""
    best = "low"
    for s in severities:
        if severity_rank(s) > severity_rank(best):
            best = s
    return best


def is_severe(severity: str) -> bool:
    return severity_rank(severity) >= _SEVERITY_RANK["high"]


# ============================================================
# RESULT STRUCTURES
# ============================================================

@dataclass
class EmotionProfile:
    """Accumulated emotion scores for a single message."""
    anger: int = 0
    frustration: int = 0
    sarcasm: int = 0
    manipulation: int = 0
    dismissiveness: int = 0

    def add(self, dimension: str, amount: int) -> None:
        setattr(self, dimension, getattr(self, dimension) + amount)

    def total(self) -> int:
        return (
            self.anger
            + self.frustration
            + self.sarcasm
            + self.manipulation
            + self.dismissiveness
        )

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True)
class DetectedPattern:
    """A pattern category found in the message."""
    type: str
    severity: str
    evidence: Optional[str] = None


@dataclass(frozen=True)
class AnalysisWarning:
    level: str
    message: str


@dataclass(frozen=True)
class Suggestion:
    type: str
    text: str
    icon: str


@dataclass(frozen=True)
class AnalysisResult:
    """
    Outcome of analyzing one drafted message.

    Fully derived from a single input text. Never mutated once built;
    the orchestrator derives annotated copies with dataclasses.replace().
    """
    severity_level: str
    overall_tone: str
    detected_patterns: list[DetectedPattern]
    emotions: EmotionProfile
    needs_transformation: bool
    is_abusive_content: bool
    transformed_text: str
    warnings: list[AnalysisWarning] = field(default_factory=list)
    suggestions: list[Suggestion] = field(default_factory=list)
    safety_warning: Optional[str] = None
    emergency_recommendation: Optional[str] = None
    source: str = "rule-based"

    def has_pattern(self, pattern_type: str) -> bool:
        return any(p.type == pattern_type for p in self.detected_patterns)

    def to_dict(self) -> dict:
        """Wire representation (camelCase keys)."""
        return {
            "severityLevel": self.severity_level,
            "overallTone": self.overall_tone,
            "detectedPatterns": [
                {"type": p.type, "severity": p.severity, "evidence": p.evidence}
                for p in self.detected_patterns
            ],
            "emotions": self.emotions.as_dict(),
            "needsTransformation": self.needs_transformation,
            "isAbusiveContent": self.is_abusive_content,
            "transformed": self.transformed_text,
            "warnings": [
                {"level": w.level, "message": w.message} for w in self.warnings
            ],
            "suggestions": [
                {"type": s.type, "text": s.text, "icon": s.icon}
                for s in self.suggestions
            ],
            "safetyWarning": self.safety_warning,
            "emergencyRecommendation": self.emergency_recommendation,
            "source": self.source,
        }

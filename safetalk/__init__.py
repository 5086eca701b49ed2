"""
SafeTalk — Message Analysis & Transformation Engine

Intercepts a drafted message between parties in conflict (separated
co-parents, for example), classifies its emotional and abusive content,
and produces a neutralized rewrite plus warnings, suggestions and
safety escalations before the message is sent.

Public API:
  - RuleBasedAnalyzer:    Deterministic pattern-table analysis (always available)
  - RemoteAnalyzer:       LLM-powered analysis via the remote classifier
  - AnalysisOrchestrator: Remote first, rule-based fallback; never fails
  - DebounceController:   Sequence-numbered re-analysis while typing
  - Composer:             Draft → send consumer contract

Usage:
    from safetalk import build_orchestrator
    orchestrator = build_orchestrator()
    result = await orchestrator.analyze("Você nunca chega no horário!!")
"""

__version__ = "1.0.0"

from safetalk.models import (
    AnalysisResult,
    AnalysisWarning,
    DetectedPattern,
    EmotionProfile,
    Suggestion,
    SEVERITY_ORDER,
    TONES,
)
from safetalk.rules import RULES_VERSION, DETECTION_RULES, PatternRule
from safetalk.analyzer import RuleBasedAnalyzer, rule_based_analyzer
from safetalk.remote import (
    RemoteAnalyzer,
    RemoteAnalysisError,
    RemoteUnavailable,
    RemoteCallError,
    ResponseParseError,
)
from safetalk.orchestrator import AnalysisOrchestrator, build_orchestrator
from safetalk.debounce import DebounceController
from safetalk.composer import Composer, SentMessage
from safetalk.llm import LLMProvider
from safetalk.llm.factory import get_provider

__all__ = [
    "AnalysisResult",
    "AnalysisWarning",
    "DetectedPattern",
    "EmotionProfile",
    "Suggestion",
    "SEVERITY_ORDER",
    "TONES",
    "RULES_VERSION",
    "DETECTION_RULES",
    "PatternRule",
    "RuleBasedAnalyzer",
    "rule_based_analyzer",
    "RemoteAnalyzer",
    "RemoteAnalysisError",
    "RemoteUnavailable",
    "RemoteCallError",
    "ResponseParseError",
    "AnalysisOrchestrator",
    "build_orchestrator",
    "DebounceController",
    "Composer",
    "SentMessage",
    "LLMProvider",
    "get_provider",
]

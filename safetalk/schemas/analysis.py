"""
API Schemas — Request and Response Models

Pydantic models for the SafeTalk API.
"""

from __future__ import annotations

from typing import Optional
from pydantic import BaseModel, Field

from safetalk.config import settings


# ============================================================
# ANALYZE
# ============================================================

class AnalyzeRequest(BaseModel):
    """POST /analyze request body."""
    text: str = Field(..., min_length=1, max_length=settings.MAX_MESSAGE_LENGTH,
                      description="The drafted message to analyze.")

    model_config = {"json_schema_extra": {"examples": [
        {"text": "VOCÊ NUNCA ESTÁ DISPONÍVEL! Sempre a mesma desculpa!"},
    ]}}


class PatternResponse(BaseModel):
    type: str
    severity: str
    evidence: Optional[str] = None


class WarningResponse(BaseModel):
    level: str
    message: str


class SuggestionResponse(BaseModel):
    type: str
    text: str
    icon: str


class EmotionsResponse(BaseModel):
    anger: int = 0
    frustration: int = 0
    sarcasm: int = 0
    manipulation: int = 0
    dismissiveness: int = 0


class AnalysisResponse(BaseModel):
    """POST /analyze response body."""
    severityLevel: str
    overallTone: str
    detectedPatterns: list[PatternResponse]
    emotions: EmotionsResponse
    needsTransformation: bool
    isAbusiveContent: bool
    transformed: str
    warnings: list[WarningResponse]
    suggestions: list[SuggestionResponse]
    safetyWarning: Optional[str] = None
    emergencyRecommendation: Optional[str] = None
    source: str
    toneEmoji: str
    severityColor: str


# ============================================================
# SEND
# ============================================================

class SendRequest(BaseModel):
    """POST /send request body."""
    text: str = Field(..., max_length=settings.MAX_MESSAGE_LENGTH)


class SendResponse(BaseModel):
    """POST /send response body."""
    original: str
    delivered: str
    analysis: AnalysisResponse
    diff_spans: list[dict]


# ============================================================
# PATTERNS / HEALTH
# ============================================================

class RuleResponse(BaseModel):
    id: str
    category: str
    severity: str
    description: str


class PatternsResponse(BaseModel):
    rules_version: str
    total_rules: int
    rules: list[RuleResponse]


class HealthResponse(BaseModel):
    status: str
    version: str
    rules_version: str
    llm_provider: str
    remote_available: bool
    status_message: str

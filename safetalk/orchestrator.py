"""
Orchestrator — Remote First, Rule-Based Always

Tries the remote classifier when it is configured. Any remote failure
(unavailable, call error, unparseable reply) falls through to the
rule-based analyzer, which cannot fail. The orchestrator's own
analyze() therefore never raises.

Fallback results are marked source="simulation" and, at the critical
tier, carry fixed safety escalation texts.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import Optional

from safetalk.analyzer import RuleBasedAnalyzer, rule_based_analyzer
from safetalk.config import Settings, settings as default_settings
from safetalk.llm.factory import get_provider
from safetalk.models import AnalysisResult
from safetalk.remote import (
    RemoteAnalyzer,
    RemoteCallError,
    RemoteUnavailable,
    ResponseParseError,
)

logger = logging.getLogger(__name__)

FALLBACK_SOURCE = "simulation"

FALLBACK_SAFETY_WARNING = (
    "AVISO: Em situações de violência doméstica, busque sempre apoio "
    "profissional (advogado, terapeuta, autoridades)."
)
FALLBACK_EMERGENCY_RECOMMENDATION = (
    "Se você está em risco, ligue 180 (Central de Atendimento à Mulher) "
    "ou 190 (Polícia)."
)

STATUS_REMOTE = "IA ativa (Google Gemini) - análise especializada em violência doméstica"
STATUS_SIMULATION = "Modo simulação - configure GEMINI_API_KEY para usar a IA"


class AnalysisOrchestrator:
    """Composes the remote and rule-based analyzers behind one total analyze()."""

    def __init__(
        self,
        rule_based: Optional[RuleBasedAnalyzer] = None,
        remote: Optional[RemoteAnalyzer] = None,
    ):
        self._rule_based = rule_based or rule_based_analyzer
        self._remote = remote

    @property
    def remote_available(self) -> bool:
        return self._remote is not None and self._remote.available

    @property
    def status_message(self) -> str:
        return STATUS_REMOTE if self.remote_available else STATUS_SIMULATION

    async def analyze(self, text: str) -> AnalysisResult:
        start = time.monotonic()

        if self.remote_available:
            try:
                result = await self._remote.analyze(text)
                self._log_result(result, start)
                return result
            except RemoteUnavailable as e:
                logger.debug("Remote classifier unavailable: %s", e)
            except (RemoteCallError, ResponseParseError) as e:
                logger.warning(
                    "Remote analysis failed, falling back to rule-based",
                    extra={"error": str(e), "error_type": type(e).__name__},
                )
            except Exception as e:
                logger.error(
                    "Unexpected remote analysis error, falling back to rule-based",
                    extra={"error": str(e), "error_type": type(e).__name__},
                    exc_info=True,
                )

        result = self._fallback(text)
        self._log_result(result, start)
        return result

    def _fallback(self, text: str) -> AnalysisResult:
        result = self._rule_based.analyze(text)
        critical = result.severity_level == "critical"
        return dataclasses.replace(
            result,
            source=FALLBACK_SOURCE,
            safety_warning=FALLBACK_SAFETY_WARNING if critical else None,
            emergency_recommendation=FALLBACK_EMERGENCY_RECOMMENDATION if critical else None,
        )

    @staticmethod
    def _log_result(result: AnalysisResult, start: float) -> None:
        logger.info(
            "Analysis complete",
            extra={
                "severity": result.severity_level,
                "tone": result.overall_tone,
                "source": result.source,
                "patterns_count": len(result.detected_patterns),
                "duration_ms": round((time.monotonic() - start) * 1000, 1),
            },
        )


def build_orchestrator(config: Optional[Settings] = None) -> AnalysisOrchestrator:
    """Wire the orchestrator from settings. A missing credential disables the remote path."""
    config = config or default_settings
    llm = get_provider(
        config.LLM_PROVIDER,
        api_key=config.GEMINI_API_KEY,
        model=config.GEMINI_MODEL,
    )
    remote = RemoteAnalyzer(llm) if llm is not None else None
    return AnalysisOrchestrator(remote=remote)

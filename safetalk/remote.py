"""
Remote Analyzer — LLM-Powered Message Analysis

Delegates analysis to the remote classifier (Gemini by default) with a
specialized instruction set covering abuse patterns, severity tiers and
the required JSON response schema.

Failure taxonomy (all subclasses of RemoteAnalysisError):
  - RemoteUnavailable:  no provider / no credential / circuit open
  - RemoteCallError:    the provider call itself failed
  - ResponseParseError: the reply held no valid JSON payload, or the
                        payload is missing required fields

The remote call is attempted at most once per analysis. Fallback policy
belongs to the orchestrator.
"""

from __future__ import annotations

import json
import logging
from typing import Optional

from safetalk.llm import CircuitOpenError, LLMProvider
from safetalk.models import (
    SEVERITY_ORDER,
    TONES,
    AnalysisResult,
    AnalysisWarning,
    DetectedPattern,
    EmotionProfile,
    Suggestion,
)

logger = logging.getLogger(__name__)


# ============================================================
# ERRORS
# ============================================================

class RemoteAnalysisError(Exception):
    """Base class for remote analysis failures."""


class RemoteUnavailable(RemoteAnalysisError):
    """The remote classifier is not configured or is temporarily disabled."""


class RemoteCallError(RemoteAnalysisError):
    """The remote classifier call failed (network, quota, service error)."""


class ResponseParseError(RemoteAnalysisError):
    """The remote reply did not contain a well-formed analysis payload."""


# ============================================================
# PROMPT
# ============================================================

SYSTEM_PROMPT = """Você é um assistente especializado em mediar a comunicação escrita entre pessoas em conflito severo, incluindo contextos de VIOLÊNCIA DOMÉSTICA e separações conflituosas (por exemplo, pais separados que precisam combinar a rotina dos filhos).

## Seu papel
1. Proteger possíveis vítimas de abuso emocional, manipulação e gaslighting
2. Detectar e alertar sobre padrões de comportamento abusivo
3. Reescrever mensagens hostis como mensagens seguras, neutras e completas
4. Manter o foco na segurança e no bem-estar de todos, especialmente das crianças

## Padrões a detectar
- Manipulação emocional e gaslighting ("você está louca", "isso nunca aconteceu")
- Ameaças veladas ou diretas
- Culpabilização da outra pessoa
- Controle financeiro ou de decisões
- Isolamento social
- Minimização de violência passada
- Chantagem emocional usando as crianças
- Intimidação
- Sarcasmo cruel e humilhação
- Insultos e generalizações ("você nunca", "você sempre")

## Níveis de severidade
- critical: ameaças, violência, gaslighting severo → alerta urgente
- high: manipulação, controle, intimidação → aviso forte
- medium: linguagem hostil, acusações → sugestão de reformulação
- low: tom levemente negativo → orientação gentil

## Tom geral
calm | slightly_tense | tense | hostile | very_hostile | abusive

## Regras de reescrita
1. Sempre remover ameaças e linguagem abusiva
2. Não deixar a manipulação passar
3. Converter acusações em observações neutras
4. Incluir foco no bem-estar das crianças quando fizer sentido
5. Se o conteúdo for perigoso, a mensagem reescrita deve ser genérica e segura
6. Para nível critical, recomendar mediação profissional ou autoridades

## Formato da resposta (JSON estrito)
{
  "severityLevel": "critical|high|medium|low",
  "overallTone": "calm|slightly_tense|tense|hostile|very_hostile|abusive",
  "detectedPatterns": [
    {"type": "gaslighting|threat|manipulation|control|blame|insult|...", "severity": "critical|high|medium|low", "evidence": "trecho exato"}
  ],
  "isAbusiveContent": true,
  "safetyWarning": "aviso de segurança, somente se houver risco",
  "transformed": "mensagem reescrita, completa e neutra",
  "warnings": [{"level": "critical|high|medium", "message": "aviso"}],
  "suggestions": [{"type": "safety|child_focus|practical|alternative", "text": "sugestão", "icon": "emoji"}],
  "emergencyRecommendation": "somente em nível critical: orientar a buscar autoridades ou apoio especializado"
}

## Exemplos
Mensagem: "Você NUNCA avisa quando muda o horário!!"
Resposta: {"severityLevel": "medium", "overallTone": "tense", "detectedPatterns": [{"type": "generalization", "severity": "medium", "evidence": "Você NUNCA avisa"}, {"type": "shouting", "severity": "medium", "evidence": "NUNCA"}], "isAbusiveContent": false, "transformed": "Olá, gostaria que me avisasse com antecedência quando o horário mudar, por favor.", "warnings": [{"level": "medium", "message": "Generalizações podem ser mal interpretadas."}], "suggestions": [{"type": "alternative", "text": "Que tal combinarmos um aviso prévio de 24 horas?", "icon": "📅"}]}

Mensagem: "Se você não deixar eu ver as crianças quando EU quiser, você vai se arrepender"
Resposta: {"severityLevel": "critical", "overallTone": "abusive", "detectedPatterns": [{"type": "threat", "severity": "critical", "evidence": "você vai se arrepender"}, {"type": "control", "severity": "high", "evidence": "quando EU quiser"}], "isAbusiveContent": true, "safetyWarning": "ALERTA DE SEGURANÇA: ameaça detectada.", "transformed": "Gostaria de conversar sobre um cronograma regular de visitas que funcione para todos, priorizando o bem-estar das crianças.", "warnings": [{"level": "critical", "message": "Ameaça detectada. Documente esta comunicação."}], "suggestions": [{"type": "safety", "text": "Busque orientação jurídica e considere medida protetiva se sentir-se em risco.", "icon": "⚖️"}], "emergencyRecommendation": "Em caso de risco imediato, ligue 190 (Polícia) ou 180 (Central de Atendimento à Mulher)."}

Responda APENAS com o JSON, sem texto antes ou depois."""


ANALYSIS_PROMPT = """{system_prompt}

## Mensagem a analisar
"{text}"

Analise esta mensagem no contexto de comunicação entre pessoas com histórico de conflito severo ou violência doméstica. Retorne APENAS o JSON com a análise completa."""


REQUIRED_FIELDS = ("severityLevel", "overallTone", "transformed")

_DEFAULT_SUGGESTION_ICON = "💡"


# ============================================================
# PAYLOAD EXTRACTION
# ============================================================

def extract_json_payload(reply: str) -> dict:
    """
    Return the analysis object embedded in a free-form reply.

    Tolerates prose and markdown fences around the payload. The first
    object carrying every required field wins; when none does, the first
    decodable object is returned so validation can name what is missing.
    """
    decoder = json.JSONDecoder()
    first = None
    start = reply.find("{")
    while start != -1:
        try:
            payload, _ = decoder.raw_decode(reply, start)
        except json.JSONDecodeError:
            payload = None
        if isinstance(payload, dict):
            if all(f in payload for f in REQUIRED_FIELDS):
                return payload
            if first is None:
                first = payload
        start = reply.find("{", start + 1)

    if first is not None:
        return first
    raise ResponseParseError(
        f"No JSON object found in remote reply: {reply[:300]!r}"
    )


def _optional_text(value) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value.strip()
    return None


def _normalize_severity(value, default: str = "medium") -> str:
    if isinstance(value, str) and value.lower() in SEVERITY_ORDER:
        return value.lower()
    return default


def _parse_patterns(raw) -> list[DetectedPattern]:
    if not isinstance(raw, list):
        return []
    patterns = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        pattern_type = _optional_text(item.get("type"))
        if not pattern_type:
            continue
        patterns.append(DetectedPattern(
            type=pattern_type,
            severity=_normalize_severity(item.get("severity")),
            evidence=_optional_text(item.get("evidence")),
        ))
    return patterns


def _parse_warnings(raw) -> list[AnalysisWarning]:
    if not isinstance(raw, list):
        return []
    warnings = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        message = _optional_text(item.get("message"))
        if message:
            warnings.append(AnalysisWarning(
                level=_normalize_severity(item.get("level")),
                message=message,
            ))
    return warnings


def _parse_suggestions(raw) -> list[Suggestion]:
    if not isinstance(raw, list):
        return []
    suggestions = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        text = _optional_text(item.get("text"))
        if text:
            suggestions.append(Suggestion(
                type=_optional_text(item.get("type")) or "alternative",
                text=text,
                icon=_optional_text(item.get("icon")) or _DEFAULT_SUGGESTION_ICON,
            ))
    return suggestions


def build_remote_result(payload: dict) -> AnalysisResult:
    """Validate a remote payload and map it onto an AnalysisResult."""
    missing = [f for f in REQUIRED_FIELDS if f not in payload]
    if missing:
        raise ResponseParseError(f"Remote payload missing fields: {', '.join(missing)}")

    severity = payload["severityLevel"]
    if not isinstance(severity, str) or severity.lower() not in SEVERITY_ORDER:
        raise ResponseParseError(f"Invalid severityLevel: {severity!r}")
    severity = severity.lower()

    tone = payload["overallTone"]
    if not isinstance(tone, str) or tone.lower() not in TONES:
        raise ResponseParseError(f"Invalid overallTone: {tone!r}")
    tone = tone.lower()

    transformed = _optional_text(payload["transformed"])
    if transformed is None:
        raise ResponseParseError("Remote payload has an empty 'transformed' message")

    patterns = _parse_patterns(payload.get("detectedPatterns"))
    is_abusive = payload.get("isAbusiveContent") is True

    # Escalation texts are only honored at the critical tier
    safety_warning = None
    emergency = None
    if severity == "critical":
        safety_warning = _optional_text(payload.get("safetyWarning"))
        emergency = _optional_text(payload.get("emergencyRecommendation"))

    return AnalysisResult(
        severity_level=severity,
        overall_tone=tone,
        detected_patterns=patterns,
        emotions=EmotionProfile(),
        needs_transformation=is_abusive or bool(patterns),
        is_abusive_content=is_abusive,
        transformed_text=transformed,
        warnings=_parse_warnings(payload.get("warnings")),
        suggestions=_parse_suggestions(payload.get("suggestions")),
        safety_warning=safety_warning,
        emergency_recommendation=emergency,
        source="remote",
    )


# ============================================================
# ANALYZER
# ============================================================

class RemoteAnalyzer:
    """Analyzer backed by the remote classifier."""

    source = "remote"

    def __init__(self, llm: Optional[LLMProvider] = None, temperature: float = 0.2):
        self._llm = llm
        self._temperature = temperature

    @property
    def available(self) -> bool:
        return self._llm is not None and self._llm.available

    def build_prompt(self, text: str) -> str:
        return ANALYSIS_PROMPT.format(system_prompt=SYSTEM_PROMPT, text=text)

    async def analyze(self, text: str) -> AnalysisResult:
        if not self.available:
            raise RemoteUnavailable("Remote classifier is not configured")

        try:
            reply = await self._llm.generate(
                self.build_prompt(text), temperature=self._temperature,
            )
        except CircuitOpenError as e:
            raise RemoteUnavailable(str(e)) from e
        except Exception as e:
            raise RemoteCallError(f"{type(e).__name__}: {e}") from e

        if not isinstance(reply, str) or not reply.strip():
            raise ResponseParseError("Remote classifier returned an empty reply")

        result = build_remote_result(extract_json_payload(reply))
        logger.debug(
            "Remote analysis: severity=%s tone=%s patterns=%d",
            result.severity_level, result.overall_tone, len(result.detected_patterns),
        )
        return result

"""
Rule Tables — Fixed Domain Knowledge

The deterministic analyzer is driven entirely by the tables in this
module:
  1. DETECTION_RULES: what counts as an aggressive pattern, its tier
     and its category
  2. EMOTION_WEIGHTS: how each category feeds the emotion profile
  3. REWRITE_RULES: ordered neutralization rewrites
  4. Phrase sets for greetings, reminders, suggestions and warnings

Tables are built once at import and read-only afterwards. Adding a
category means adding rows here, not touching the engine.

Rule vocabulary targets Brazilian Portuguese.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

RULES_VERSION = "1.0.0"

_FLAGS = re.IGNORECASE


# ============================================================
# DATA STRUCTURES
# ============================================================

@dataclass(frozen=True)
class PatternRule:
    """A detection rule: one regex, one severity tier, one category."""
    id: str
    pattern: re.Pattern
    severity: str
    category: str
    description: str


@dataclass(frozen=True)
class RewriteRule:
    """A neutralization rewrite applied with re.sub()."""
    id: str
    pattern: re.Pattern
    replacement: str
    category: str


def _rule(id: str, regex: str, severity: str, category: str, description: str) -> PatternRule:
    return PatternRule(id, re.compile(regex, _FLAGS), severity, category, description)


def _rewrite(id: str, regex: str, replacement: str, category: str) -> RewriteRule:
    return RewriteRule(id, re.compile(regex, _FLAGS), replacement, category)


# Shared vocabulary
_YOU = r"(?:você|vc)"
_INSULTS = (
    r"(?:idiota|imbecil|burr[oa]|estúpid[oa]|incompetente|ridícul[oa]|otári[oa]|"
    r"babaca|inútil|patétic[oa]|desgraçad[oa]|vagabund[oa]|lixo)"
)
_BLAME = (
    r"\b(?:a\s+culpa\s+é\s+(?:toda\s+)?(?:sua|tua)|(?:é\s+)?tudo\s+culpa\s+(?:sua|tua)|"
    r"por\s+(?:sua|tua)\s+causa|graças\s+a\s+" + _YOU + r"|"
    + _YOU + r"\s+(?:é|foi)\s+(?:o|a)\s+culpad[oa])\b"
)
_CHILDREN = r"(?:as\s+crianças|os\s+filhos|nossos?\s+filhos?|nossas?\s+filhas?)"


# ============================================================
# DETECTION RULES
# ============================================================

DETECTION_RULES: list[PatternRule] = [
    _rule(
        "INSULT",
        r"\b" + _INSULTS + r"\b",
        "critical", "insult",
        "Name-calling or degrading vocabulary aimed at the other parent.",
    ),
    _rule(
        "THREAT_CONDITIONAL",
        r"\bse\s+" + _YOU + r"\s+não\b[^.!?]*?\b(?:eu\s+)?(?:vou|vai\s+se\s+arrepender)\b",
        "critical", "threat",
        "Conditional threat: 'if you don't ..., I will ...'.",
    ),
    _rule(
        "THREAT_DIRECT",
        r"\b(?:" + _YOU + r"\s+vai\s+(?:se\s+arrepender|ver\s+só|me\s+pagar)|"
        r"vou\s+(?:te\s+)?(?:processar|destruir|acabar\s+com\s+" + _YOU + r")|"
        r"vou\s+tirar\s+(?:as\s+crianças|os\s+filhos|a\s+guarda))\b",
        "critical", "threat",
        "Direct threat of retaliation, legal action or losing the children.",
    ),
    _rule(
        "GASLIGHTING",
        r"\b(?:" + _YOU + r"\s+(?:está|tá|é)\s+lou[ck][oa]|isso\s+nunca\s+aconteceu|"
        + _YOU + r"\s+(?:está\s+)?(?:invent(?:a|ando)|imagina)\s+coisas)\b",
        "critical", "gaslighting",
        "Denies the other person's perception of reality.",
    ),
    _rule(
        "MANIPULATION_GUILT",
        r"\b(?:se\s+" + _YOU + r"\s+(?:realmente\s+)?(?:me\s+)?(?:amasse|gostasse|se\s+importasse)|"
        r"depois\s+de\s+tudo\s+(?:o\s+)?que\s+(?:eu\s+)?fiz|" + _YOU + r"\s+me\s+deve)\b",
        "high", "manipulation",
        "Guilt used as leverage.",
    ),
    _rule(
        "MANIPULATION_CHILDREN",
        r"\b" + _CHILDREN + r"\s+(?:vão|vai)\s+(?:saber|descobrir|te\s+odiar|odiar\s+" + _YOU + r")\b",
        "high", "manipulation",
        "The children used as leverage against the other parent.",
    ),
    _rule(
        "CONTROL",
        r"\b(?:quando\s+eu\s+quiser|do\s+meu\s+jeito|eu\s+(?:é\s+que\s+)?decido|"
        + _YOU + r"\s+não\s+tem\s+(?:direito|escolha))\b",
        "high", "control",
        "Unilateral control over shared decisions.",
    ),
    _rule(
        "BLAME",
        _BLAME,
        "high", "blame",
        "Assigns fault instead of seeking a solution.",
    ),
    _rule(
        "ACCUSATION",
        r"\b(?:" + _YOU + r"\s+(?:fez|faz)\s+(?:isso\s+)?de\s+propósito|"
        + _YOU + r"\s+só\s+pensa\s+em\s+(?:" + _YOU + r"|si)|"
        + _YOU + r"\s+não\s+se\s+importa|" + _YOU + r"\s+mentiu|"
        + _YOU + r"\s+é\s+(?:um|uma)\s+mentiros[oa])\b",
        "high", "accusation",
        "Attributes bad intent or character.",
    ),
    _rule(
        "GENERALIZATION_NEVER",
        r"\bnunca\b",
        "medium", "generalization",
        "Absolute 'never' generalization.",
    ),
    _rule(
        "GENERALIZATION_ALWAYS",
        r"\bsempre\b",
        "medium", "generalization",
        "Absolute 'always' generalization.",
    ),
    _rule(
        "SARCASM",
        r"\b(?:parabéns|que\s+surpresa|grande\s+novidade|claro,\s*claro|"
        r"nossa,\s*que\s+(?:ótimo|maravilha)|muito\s+obrigad[oa]\s+por\s+nada|que\s+maravilha)\b",
        "medium", "sarcasm",
        "Sarcastic markers.",
    ),
    _rule(
        "ULTIMATUM",
        r"\b(?:última\s+(?:vez|chance)|não\s+vou\s+repetir|pegar\s+ou\s+largar|"
        r"ou\s+" + _YOU + r"\s+\w+[^.!?]*?\bou\s+(?:eu|então))\b",
        "high", "ultimatum",
        "Ultimatum or final-warning framing.",
    ),
    _rule(
        "DISMISSIVE",
        r"\b(?:tanto\s+faz|não\s+me\s+(?:importa|interessa)|não\s+interessa|problema\s+seu|"
        r"(?:que\s+)?se\s+dane|dane-se|e\s+daí)\b",
        "medium", "dismissive",
        "Dismisses the other person's concern.",
    ),
]


# ============================================================
# EMOTION MAPPING
# ============================================================

# category -> (emotion dimension, increment)
EMOTION_WEIGHTS: dict[str, tuple[str, int]] = {
    "insult": ("anger", 3),
    "threat": ("anger", 3),
    "accusation": ("frustration", 2),
    "blame": ("frustration", 2),
    "sarcasm": ("sarcasm", 2),
    "manipulation": ("manipulation", 3),
    "dismissive": ("dismissiveness", 2),
}

SHOUTING_RATIO = 0.5
SHOUTING_PENALTY = ("anger", 2)
EMPHASIS_PENALTY = ("frustration", 1)

EMPHASIS_RUN = re.compile(r"[!?]{2,}")

# (upper bound inclusive, tone); totals above the last bound are very_hostile
TONE_THRESHOLDS: tuple[tuple[int, str], ...] = (
    (0, "calm"),
    (2, "slightly_tense"),
    (5, "tense"),
    (8, "hostile"),
)


# ============================================================
# REWRITE RULES (applied in order)
# ============================================================

REWRITE_RULES: list[RewriteRule] = [
    # Insults are deleted together with their "você é um" scaffolding
    _rewrite(
        "STRIP_INSULT",
        r"\b(?:" + _YOU + r"\s+é\s+)?(?:(?:um|uma|seu|sua|que)\s+)?" + _INSULTS + r"\b[,!]*",
        "", "insult",
    ),
    _rewrite(
        "GASLIGHTING_CRAZY",
        r"\b" + _YOU + r"\s+(?:está|tá|é)\s+lou[ck][oa]\b",
        "acho que vemos isso de formas diferentes", "gaslighting",
    ),
    _rewrite(
        "GASLIGHTING_DENIAL",
        r"\bisso\s+nunca\s+aconteceu\b",
        "eu me lembro disso de outra forma", "gaslighting",
    ),
    _rewrite(
        "GASLIGHTING_INVENTING",
        r"\b" + _YOU + r"\s+(?:está\s+)?(?:invent(?:a|ando)|imagina)\s+coisas\b",
        "podemos ter percepções diferentes", "gaslighting",
    ),
    # Either/or ultimatums keep the request and drop the "ou eu ..." consequence
    _rewrite(
        "ULTIMATUM_EITHER_OR",
        r"\bou\s+" + _YOU + r"\s+(\w+[^.!?]*?)\s*,?\s*\bou\s+(?:eu|então)\b[^.!?]*",
        r"gostaria de combinar: você \1", "ultimatum",
    ),
    # Filler and a comma may sit between the condition and the "vou"
    _rewrite(
        "THREAT_CONDITIONAL",
        r"\bse\s+" + _YOU + r"\s+não\s+([^,.!?]+?)\s*(?:,[^.!?]*?)?"
        r"\b(?:(?:eu\s+)?vou|(?:" + _YOU + r"\s+)?vai\s+se\s+arrepender)\b[^.!?]*",
        r"vamos considerar juntos a possibilidade de \1", "threat",
    ),
    _rewrite(
        "THREAT_DIRECT",
        r"\b(?:(?:e\s+)?" + _YOU + r"\s+vai\s+(?:se\s+arrepender|ver\s+só|me\s+pagar)|"
        r"(?:eu\s+)?vou\s+(?:te\s+)?(?:processar|destruir|acabar\s+com\s+" + _YOU + r")|"
        r"(?:eu\s+)?vou\s+tirar\s+(?:as\s+crianças|os\s+filhos|a\s+guarda)(?:\s+de\s+" + _YOU + r")?)\b[,!]*",
        "", "threat",
    ),
    _rewrite(
        "NEVER_VERB",
        r"\b" + _YOU + r"\s+nunca\s+(\w+)",
        r"às vezes você não \1", "generalization",
    ),
    _rewrite(
        "ALWAYS_VERB",
        r"\b" + _YOU + r"\s+sempre\s+(\w+)",
        r"frequentemente você \1", "generalization",
    ),
    _rewrite("NEVER", r"\bnunca\b", "raramente", "generalization"),
    _rewrite("ALWAYS", r"\bsempre\b", "muitas vezes", "generalization"),
    _rewrite("BLAME", _BLAME, "vamos buscar uma solução juntos", "blame"),
    _rewrite(
        "ACCUSATION_ON_PURPOSE",
        r"\b" + _YOU + r"\s+(?:fez|faz)\s+(?:isso\s+)?de\s+propósito\b",
        "talvez tenha sido um mal-entendido", "accusation",
    ),
    _rewrite(
        "ACCUSATION_SELFISH",
        r"\b" + _YOU + r"\s+só\s+pensa\s+em\s+(?:" + _YOU + r"|si)\b",
        "sinto que minhas necessidades não estão sendo consideradas", "accusation",
    ),
    _rewrite(
        "ACCUSATION_DOESNT_CARE",
        r"\b" + _YOU + r"\s+não\s+se\s+importa\b",
        "sinto que isso não está sendo priorizado", "accusation",
    ),
    _rewrite(
        "ACCUSATION_LIAR",
        r"\b" + _YOU + r"\s+(?:mentiu|é\s+(?:um|uma)\s+mentiros[oa])\b",
        "tenho uma informação diferente", "accusation",
    ),
    _rewrite(
        "SARCASM_THANKS",
        r"\bmuito\s+obrigad[oa]\s+por\s+nada\b[,!.]*",
        "", "sarcasm",
    ),
    _rewrite(
        "SARCASM",
        r"\b(?:parabéns|que\s+surpresa|grande\s+novidade|claro,\s*claro|"
        r"nossa,\s*que\s+(?:ótimo|maravilha)|que\s+maravilha)\b[,!.]*",
        "percebi que", "sarcasm",
    ),
    _rewrite("ULTIMATUM_LAST_TIME", r"\bpela\s+última\s+vez\b", "novamente", "ultimatum"),
    _rewrite(
        "ULTIMATUM_THIS_IS_IT",
        r"\b(?:esta\s+)?é\s+a\s+última\s+(?:vez|chance)\b",
        "mais uma vez", "ultimatum",
    ),
    _rewrite("ULTIMATUM_LAST", r"\búltima\s+(?:vez|chance)\b", "mais uma oportunidade", "ultimatum"),
    _rewrite("ULTIMATUM_REPEAT", r"\bnão\s+vou\s+repetir\b", "reforço meu pedido", "ultimatum"),
    _rewrite(
        "ULTIMATUM_TAKE_IT",
        r"\b(?:é\s+)?pegar\s+ou\s+largar\b",
        "podemos conversar sobre isso", "ultimatum",
    ),
    _rewrite("DISMISSIVE_WHATEVER", r"\btanto\s+faz\b", "estou aberto a opções", "dismissive"),
    _rewrite("DISMISSIVE_YOUR_PROBLEM", r"\bproblema\s+seu\b", "podemos ver isso juntos", "dismissive"),
    _rewrite(
        "DISMISSIVE_DONT_CARE",
        r"\bnão\s+me\s+(?:importa|interessa)\b",
        "prefiro focar no que podemos resolver", "dismissive",
    ),
    _rewrite(
        "DISMISSIVE_DAMN",
        r"\b(?:(?:que\s+)?se\s+dane|dane-se|e\s+daí)\b[,!?.]*",
        "", "dismissive",
    ),
    _rewrite("CONTROL_WHEN_I_WANT", r"\bquando\s+eu\s+quiser\b", "em horários que combinarmos", "control"),
    _rewrite("CONTROL_MY_WAY", r"\bdo\s+meu\s+jeito\b", "de um jeito que funcione para todos", "control"),
    _rewrite("CONTROL_I_DECIDE", r"\beu\s+(?:é\s+que\s+)?decido\b", "podemos decidir juntos", "control"),
    _rewrite(
        "CONTROL_NO_RIGHT",
        r"\b" + _YOU + r"\s+não\s+tem\s+(?:direito|escolha)\b",
        "gostaria de conversar sobre isso", "control",
    ),
    _rewrite(
        "MANIPULATION_GUILT",
        r"\b(?:se\s+" + _YOU + r"\s+(?:realmente\s+)?(?:me\s+)?(?:amasse|gostasse|se\s+importasse)|"
        r"depois\s+de\s+tudo\s+(?:o\s+)?que\s+(?:eu\s+)?fiz|" + _YOU + r"\s+me\s+deve)\b[,!]*",
        "", "manipulation",
    ),
    _rewrite(
        "MANIPULATION_CHILDREN",
        r"\b" + _CHILDREN + r"\s+(?:vão|vai)\s+(?:saber|descobrir|te\s+odiar|odiar\s+" + _YOU + r")\b",
        "", "manipulation",
    ),
]

# Used when nothing readable survives the rewrites
NEUTRAL_FALLBACK_MESSAGE = "Gostaria de conversar sobre isso com calma."


# ============================================================
# POLITENESS
# ============================================================

POLITE_REQUEST = re.compile(r"\b(?:poderia|pode|consegue|dá\s+para)\b", _FLAGS)
POLITENESS_MARKER = re.compile(r"\bpor\s+favor\b", _FLAGS)
GREETING_PREFIX = re.compile(r"^(?:olá|oi|bom\s+dia|boa\s+tarde|boa\s+noite)\b", _FLAGS)
SHORT_MESSAGE_LENGTH = 50

GREETINGS: tuple[str, ...] = ("Olá,", "Oi,", "Bom dia,")

CHILD_WELFARE_REMINDERS: tuple[str, ...] = (
    "Lembrando que o bem-estar das crianças é nossa prioridade.",
    "Vamos manter o foco no que é melhor para as crianças.",
    "Acredito que podemos resolver isso pensando nas crianças.",
)


# ============================================================
# SUGGESTIONS
# ============================================================

SCHEDULING_VOCABULARY = re.compile(r"\b(?:quando|horários?|dias?|horas?)\b", _FLAGS)
LOGISTICS_VOCABULARY = re.compile(
    r"\b(?:buscar|busca|busco|levar|leva|levo|pegar|pega|pego|deixar|deixa|deixo)\b",
    _FLAGS,
)

SCHEDULING_SUGGESTION = ("alternative", "Que tal sugerirmos 2-3 opções de horário para facilitar?", "📅")
LOGISTICS_SUGGESTION = ("practical", "Podemos criar um calendário compartilhado para organizar isso?", "🗓️")
MEDIATION_SUGGESTION = ("mediation", "Talvez seja útil focar em encontrar uma solução prática.", "🤝")
CHILD_FOCUS_ICON = "👶"

CHILD_FOCUS_PHRASES: tuple[str, ...] = (
    "Lembre-se: o bem-estar das crianças vem em primeiro lugar.",
    "Como podemos tornar isso mais fácil para as crianças?",
    "Nosso foco deve ser facilitar a rotina das crianças.",
    "Podemos encontrar uma solução que beneficie a criança?",
    "As crianças se sentem seguras quando os pais conversam com respeito.",
)


# ============================================================
# WARNINGS
# ============================================================

SEVERITY_WARNINGS: dict[str, str] = {
    "critical": "Esta mensagem contém linguagem muito agressiva. Recomendamos reformular completamente.",
    "high": "Esta mensagem pode gerar conflito. Sugerimos revisar antes de enviar.",
    "medium": "Algumas partes da mensagem podem ser mal interpretadas.",
}
THREAT_WARNING = "Ameaças não ajudam na comunicação construtiva."
MANIPULATION_WARNING = "Evite linguagem manipulativa. Seja direto e honesto."
MANIPULATION_WARNING_THRESHOLD = 2

PROCESSING_ERROR_WARNING = "Erro ao processar mensagem. Tente novamente."


def describe_rules() -> list[dict]:
    """Detection table as plain dicts (served by GET /patterns)."""
    return [
        {
            "id": r.id,
            "category": r.category,
            "severity": r.severity,
            "description": r.description,
        }
        for r in DETECTION_RULES
    ]

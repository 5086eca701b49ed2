"""
Neutralizer — Rule-Driven Message Rewriting

Turns a drafted message into a safer equivalent:
  1. Ordered rewrites from rules.REWRITE_RULES (strip insults, hedge
     generalizations, reframe blame/threats/ultimatums)
  2. Shouting and emphasis are calmed down
  3. Cleanup normalizes spacing, capitalization and terminal punctuation
  4. Politeness adds "por favor" and a greeting to short messages
  5. Severe messages get a child-welfare reminder on a new line

The output is always a complete message, never a diff.
"""

from __future__ import annotations

import random
import re

from safetalk.models import is_severe
from safetalk.rules import (
    CHILD_WELFARE_REMINDERS,
    EMPHASIS_RUN,
    GREETING_PREFIX,
    GREETINGS,
    NEUTRAL_FALLBACK_MESSAGE,
    POLITE_REQUEST,
    POLITENESS_MARKER,
    REWRITE_RULES,
    SHORT_MESSAGE_LENGTH,
)

_WHITESPACE = re.compile(r"\s+")
_LEADING_PUNCTUATION = re.compile(r"^[\s,;:.!?]+")
_SPACE_BEFORE_PUNCTUATION = re.compile(r"\s+([.,;:!?])")
_SEPARATOR_BEFORE_TERMINAL = re.compile(r"[,;:]+([.!?])")
_TERMINAL = re.compile(r"[.!?]$")


def apply_rewrites(message: str) -> str:
    """Run every rewrite rule, in table order."""
    for rule in REWRITE_RULES:
        message = rule.pattern.sub(rule.replacement, message)
    return message


def calm_shouting(message: str) -> str:
    """
    Lowercase the body, then capitalize only the first character.

    The first character is the only one left uppercase, so shouting that
    is a single letter followed by digits or symbols comes back unchanged.
    """
    message = message.lower()
    return message[:1].upper() + message[1:]


def collapse_emphasis(message: str) -> str:
    """Replace runs of !/? with a single period."""
    return EMPHASIS_RUN.sub(".", message)


def cleanup_message(message: str) -> str:
    """
    Normalize spacing and punctuation. Idempotent.

    Collapses whitespace, drops punctuation left dangling at the start
    (after a stripped insult, for example), removes spaces before
    punctuation, capitalizes the first letter and guarantees terminal
    punctuation.
    """
    message = _WHITESPACE.sub(" ", message).strip()
    message = _LEADING_PUNCTUATION.sub("", message)
    message = _SPACE_BEFORE_PUNCTUATION.sub(r"\1", message)
    message = _SEPARATOR_BEFORE_TERMINAL.sub(r"\1", message)
    if not message:
        return message

    message = message[0].upper() + message[1:]

    if not _TERMINAL.search(message):
        message = message.rstrip(",;: ") + "."
    return message


def apply_politeness(message: str, rng: random.Random) -> str:
    """Soften requests and greet on short messages."""
    if not message.strip():
        return message

    if (
        "?" in message
        and POLITE_REQUEST.search(message)
        and not POLITENESS_MARKER.search(message)
    ):
        message = message.replace("?", ", por favor?", 1)

    if len(message) < SHORT_MESSAGE_LENGTH and not GREETING_PREFIX.match(message):
        message = f"{rng.choice(GREETINGS)} {message}"

    return message


def append_reminder(message: str, rng: random.Random) -> str:
    return f"{message}\n{rng.choice(CHILD_WELFARE_REMINDERS)}"


def has_readable_content(message: str) -> bool:
    return any(ch.isalpha() for ch in message)


def neutralize(
    message: str,
    *,
    needs_transformation: bool,
    shouting: bool,
    severity: str,
    rng: random.Random,
) -> str:
    """
    Produce the safer rewrite of a message.

    When no transformation is needed only the politeness pass runs.
    """
    if not needs_transformation:
        return apply_politeness(message, rng)

    rewritten = apply_rewrites(message)
    if shouting:
        rewritten = calm_shouting(rewritten)
    rewritten = collapse_emphasis(rewritten)

    if not has_readable_content(rewritten):
        rewritten = NEUTRAL_FALLBACK_MESSAGE

    rewritten = cleanup_message(rewritten)
    rewritten = apply_politeness(rewritten, rng)

    if is_severe(severity):
        rewritten = append_reminder(rewritten, rng)

    return rewritten

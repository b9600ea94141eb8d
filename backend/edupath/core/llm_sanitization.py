"""Prompt-injection hygiene for onboarding free text.

Course names, bachelor degrees, target universities and live-search queries
are typed by the user and embedded in university search prompts. Before
that they are normalized (NFKC), stripped of invisible characters, have
role markers and instruction overrides neutralized, and are capped in
length.
"""

import re
import unicodedata

MAX_PROMPT_FIELD_LENGTH = 200
"""Longest user-supplied field embedded in a search prompt."""

# Zero-width and bidi control characters that can split keywords
_ZERO_WIDTH_PATTERN = re.compile(r"[\u200b-\u200f\u202a-\u202e\u2060-\u2064\ufeff]")

# C0 controls except tab, newline and carriage return, plus DEL
_CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")

_WHITESPACE_RUN = re.compile(r"\s+")

_TAG = "[TAG]"
_FILTERED = "[FILTERED]"

_INJECTION_RULES: tuple[tuple[re.Pattern[str], str], ...] = (
    (re.compile(r"^\s*SYSTEM\s*:", re.IGNORECASE | re.MULTILINE), _FILTERED + ":"),
    (re.compile(r"<\s*/?\s*(system|user|assistant)\s*>", re.IGNORECASE), _TAG),
    (re.compile(r"<\|(system|user|assistant|im_start|im_end)\|>", re.IGNORECASE), _TAG),
    (re.compile(r"ignore\s+(all\s+)?previous\s+instructions?", re.IGNORECASE), _FILTERED),
    (re.compile(r"disregard\s+(all\s+)?(prior|previous)", re.IGNORECASE), _FILTERED),
    (re.compile(r"new\s+instructions?\s*:", re.IGNORECASE), _FILTERED + ":"),
    (re.compile(r"\[/?INST\]", re.IGNORECASE), _FILTERED),
)


def _strip_invisible(text: str) -> str:
    text = unicodedata.normalize("NFKC", text)
    text = _ZERO_WIDTH_PATTERN.sub("", text)
    return _CONTROL_CHAR_PATTERN.sub("", text)


def neutralize_injections(text: str) -> str:
    """Replace role markers and instruction overrides with placeholders."""
    for pattern, replacement in _INJECTION_RULES:
        text = pattern.sub(replacement, text)
    return text


def sanitize_llm_input(text: str) -> str:
    """Make one user-typed field safe to embed in a search prompt.

    Whitespace runs (including newlines) collapse to one space once the
    line-anchored rules have run, so a field always stays on one prompt line.

    Args:
        text: Raw field value.

    Returns:
        Sanitized text, at most MAX_PROMPT_FIELD_LENGTH characters.
    """
    if not text:
        return text
    cleaned = neutralize_injections(_strip_invisible(text))
    cleaned = _WHITESPACE_RUN.sub(" ", cleaned).strip()
    return cleaned[:MAX_PROMPT_FIELD_LENGTH].rstrip()

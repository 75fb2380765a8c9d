"""
Text helpers shared by the client pipeline and the backend.

- count_words(): the one word counter (whitespace runs after normalization)
- split_subject(): peel an optional leading "Subject:" line off a reply
- clean_ai_response(): strip markdown decoration from model output
- adjust_to_word_count(): truncate or pad a text to an exact length
"""

from __future__ import annotations
import random
import re
from typing import Optional, Sequence, Tuple

_WS = re.compile(r"\s+")

# Leading "Subject: ..." line; the subject never counts toward a target.
_SUBJECT = re.compile(r"^\s*subject:[ \t]*(?P<subject>[^\n]*?)[ \t]*(?:\r?\n\s*|\Z)", re.I)

_MARKDOWN_RULES: Tuple[Tuple[re.Pattern, str], ...] = (
    (re.compile(r"\*\*(.*?)\*\*"), r"\1"),
    (re.compile(r"\*(.*?)\*"), r"\1"),
    (re.compile(r"`(.*?)`"), r"\1"),
    (re.compile(r"_{2,}"), ""),
    (re.compile(r"#{1,6}\s"), ""),
    (re.compile(r"\[(.*?)\]\(.*?\)"), r"\1"),
)

CORRECTION_FILLERS: Tuple[str, ...] = (
    "additionally", "furthermore", "moreover", "consequently",
    "specifically", "particularly", "certainly", "definitely",
)


def normalize_whitespace(text: str) -> str:
    return _WS.sub(" ", text or "").strip()


def words_of(text: str) -> list[str]:
    return normalize_whitespace(text).split()


def count_words(text: str) -> int:
    """Number of maximal non-whitespace runs. "state-of-the-art", "don't", "AI" and "2024" are one word each."""
    return len(words_of(text))


def split_subject(text: str) -> Tuple[Optional[str], str]:
    """
    Returns (subject, body). subject is None when the text has no leading
    "Subject:" line; an empty subject line still counts as a subject line.
    """
    text = text or ""
    m = _SUBJECT.match(text)
    if not m:
        return None, text
    return m.group("subject"), text[m.end():]


def join_subject(subject: Optional[str], body: str) -> str:
    if subject is None:
        return body
    return f"Subject: {subject}\n\n{body}"


def body_word_count(text: str) -> int:
    _, body = split_subject(text)
    return count_words(body)


def clean_ai_response(text: str) -> str:
    # Run the rules to a fixed point so cleaning twice changes nothing.
    out = text or ""
    while True:
        prev = out
        for rx, repl in _MARKDOWN_RULES:
            out = rx.sub(repl, out)
        out = out.strip()
        if out == prev:
            return out


def adjust_to_word_count(
    text: str,
    target: int,
    *,
    rng: Optional[random.Random] = None,
    fillers: Sequence[str] = CORRECTION_FILLERS,
) -> str:
    """Truncate to the first `target` words or pad with fillers. Whitespace collapses when a change is needed."""
    words = words_of(text)
    if len(words) == target:
        return text
    if len(words) > target:
        return " ".join(words[:target])
    rng = rng or random.Random()
    missing = target - len(words)
    return " ".join(words + [rng.choice(fillers) for _ in range(missing)])

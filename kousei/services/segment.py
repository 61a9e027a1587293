"""Sentence splitting and dialogue masking shared by every rule.

Both helpers keep offsets into the original string intact so rules can
report positions without any re-mapping.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import List

from kousei.core.config import DIALOGUE_PLACEHOLDER

SENTENCE_DELIMITERS = frozenset("。！？!?\n")

# opening bracket -> closing bracket; each family keeps its own depth
DIALOGUE_BRACKETS = {"「": "」", "『": "』"}
_CLOSERS = {close: open_ for open_, close in DIALOGUE_BRACKETS.items()}


@dataclass(frozen=True)
class SentenceSpan:
    text: str
    from_: int
    to: int


def split_sentences(text: str) -> List[SentenceSpan]:
    """Split on 。！？!? and newlines. Delimiters are excluded from spans;
    whitespace-only spans are dropped."""
    spans: List[SentenceSpan] = []
    start = 0
    for i, ch in enumerate(text):
        if ch in SENTENCE_DELIMITERS:
            chunk = text[start:i]
            if chunk.strip():
                spans.append(SentenceSpan(chunk, start, i))
            start = i + 1
    if start < len(text):
        chunk = text[start:]
        if chunk.strip():
            spans.append(SentenceSpan(chunk, start, len(text)))
    return spans


def mask_dialogue(text: str, placeholder: str = DIALOGUE_PLACEHOLDER) -> str:
    """Replace quoted speech (brackets included) with ``placeholder``.

    The result always has the same length as ``text``. Stray closing
    brackets are masked too but never drive a depth below zero.
    """
    depth = {open_: 0 for open_ in DIALOGUE_BRACKETS}
    out: List[str] = []
    for ch in text:
        if ch in DIALOGUE_BRACKETS:
            depth[ch] += 1
            out.append(placeholder)
        elif ch in _CLOSERS:
            opener = _CLOSERS[ch]
            if depth[opener] > 0:
                depth[opener] -= 1
            out.append(placeholder)
        elif any(depth.values()):
            out.append(placeholder)
        else:
            out.append(ch)
    return "".join(out)


def is_in_dialogue(pos: int, text: str) -> bool:
    """True when offset ``pos`` falls inside 「…」 or 『…』 (brackets count)."""
    if pos < 0 or pos >= len(text):
        return False
    depth = {open_: 0 for open_ in DIALOGUE_BRACKETS}
    for ch in text[:pos]:
        if ch in DIALOGUE_BRACKETS:
            depth[ch] += 1
        elif ch in _CLOSERS and depth[_CLOSERS[ch]] > 0:
            depth[_CLOSERS[ch]] -= 1
    return any(depth.values()) or text[pos] in DIALOGUE_BRACKETS


def tokens_in_span(tokens, from_: int, to: int):
    return [t for t in tokens if t.start >= from_ and t.end <= to]

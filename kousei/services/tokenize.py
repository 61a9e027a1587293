"""Morphological tokenizer adapter over spaCy's Japanese pipeline (SudachiPy)."""
from __future__ import annotations
import logging
from typing import List, Optional, Protocol, Sequence

import spacy

from kousei.core.config import TOKEN_CACHE_SIZE
from kousei.core.errors import TokenizerError
from kousei.models.token import Token
from kousei.services.cache import LRUCache

log = logging.getLogger("tokenize")


class Tokenizer(Protocol):
    def tokenize(self, text: str) -> Sequence[Token]:
        ...


def _detail(parts: List[str], i: int) -> Optional[str]:
    return parts[i] if len(parts) > i and parts[i] not in ("", "*") else None


def to_token(t) -> Token:
    """Map a spaCy token onto our Token.

    tag_ is the Sudachi POS joined with "-" (名詞-普通名詞-一般); Inflection is
    "conjugation type;conjugation form"; Reading is katakana.
    """
    pos = t.tag_.split("-")
    inflection = ";".join(t.morph.get("Inflection")).split(";")
    reading = t.morph.get("Reading")
    return Token(
        surface=t.text,
        pos=pos[0] if pos and pos[0] else "その他",
        pos_detail_1=_detail(pos, 1),
        pos_detail_2=_detail(pos, 2),
        pos_detail_3=_detail(pos, 3),
        conjugation_type=_detail(inflection, 0),
        conjugation_form=_detail(inflection, 1),
        basic_form=t.lemma_ or t.text,
        reading=reading[0] if reading else None,
        start=t.idx,
        end=t.idx + len(t.text),
    )


class SpacyTokenizer:
    """Loads the pipeline on first use; results are cached per paragraph text."""

    def __init__(self, nlp=None, cache_size: int = TOKEN_CACHE_SIZE):
        self._nlp = nlp
        self._cache: LRUCache[str, List[Token]] = LRUCache(cache_size)

    def nlp(self):
        if self._nlp is None:
            try:
                self._nlp = spacy.blank("ja")
            except Exception as e:
                raise TokenizerError(f"Japanese tokenizer unavailable: {e}") from e
            log.info("loaded spaCy Japanese pipeline")
        return self._nlp

    def tokenize(self, text: str) -> List[Token]:
        cached = self._cache.get(text)
        if cached is not None:
            return cached
        nlp = self.nlp()
        try:
            tokens = [to_token(t) for t in nlp(text) if not t.is_space]
        except Exception as e:
            raise TokenizerError(f"tokenization failed: {e}") from e
        self._cache.put(text, tokens)
        return tokens

"""Issue and verdict caches, the paragraph store, and invalidation by reason."""
from __future__ import annotations
import logging
from collections import OrderedDict
from dataclasses import dataclass
from typing import Dict, Generic, Hashable, Iterable, List, Optional, Sequence, Tuple, TypeVar

from kousei.core.config import ISSUE_CACHE_SIZE, VERDICT_CACHE_SIZE
from kousei.models.config import ChangeReason
from kousei.models.issue import LintIssue, Verdict

log = logging.getLogger("session")

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


def hash_string(s: str) -> str:
    """32-bit ``h = h*31 + unit`` hash over UTF-16 code units, as unsigned hex.

    Not cryptographic; keys only need to be unique within one editing session.
    Matches the editor's own hash so keys can be shared with it.
    """
    data = s.encode("utf-16-le", "surrogatepass")
    h = 0
    for i in range(0, len(data), 2):
        h = (h * 31 + (data[i] | data[i + 1] << 8)) & 0xFFFFFFFF
    return format(h, "x")


class LRUCache(Generic[K, V]):
    def __init__(self, maxsize: int):
        self.maxsize = maxsize
        self._data: "OrderedDict[K, V]" = OrderedDict()

    def get(self, key: K) -> Optional[V]:
        if key not in self._data:
            return None
        self._data.move_to_end(key)
        return self._data[key]

    def put(self, key: K, value: V) -> None:
        self._data[key] = value
        self._data.move_to_end(key)
        while len(self._data) > self.maxsize:
            self._data.popitem(last=False)

    def pop(self, key: K) -> None:
        self._data.pop(key, None)

    def clear(self) -> None:
        self._data.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)


class IssueCache(LRUCache[str, Tuple[LintIssue, ...]]):
    """Per-paragraph results of pattern and token rules, keyed by paragraph text.

    Keying by text rather than index keeps entries valid when paragraphs are
    inserted or removed above them; the cached issues carry the old index and
    are re-stamped on reuse.
    """

    def __init__(self, maxsize: int = ISSUE_CACHE_SIZE):
        super().__init__(maxsize)


def issue_key(issue: LintIssue, paragraph_text: str) -> str:
    """``rule_id:from:to:hash(paragraph_text)``."""
    return f"{issue.rule_id}:{issue.from_}:{issue.to}:{hash_string(paragraph_text)}"


class VerdictCache(LRUCache[str, Verdict]):
    """Validation verdicts by issue key. Only definite verdicts are stored."""

    def __init__(self, maxsize: int = VERDICT_CACHE_SIZE):
        super().__init__(maxsize)

    def get(self, key: str) -> Optional[Verdict]:
        verdict = super().get(key)
        # anything unexpected is a miss
        return verdict if isinstance(verdict, Verdict) and verdict is not Verdict.UNVALIDATED else None

    def put(self, key: str, verdict: Verdict) -> None:
        if verdict is not Verdict.UNVALIDATED:
            super().put(key, verdict)


@dataclass(frozen=True)
class StoredParagraph:
    index: int
    text: str
    hash: str


class ParagraphStore:
    """Paragraphs by stable index; a hash is recomputed only when its text changes."""

    def __init__(self, paragraphs: Iterable[str] = ()):
        self._items: List[StoredParagraph] = []
        self.replace_all(paragraphs)

    def replace_all(self, paragraphs: Iterable[str]) -> List[int]:
        """Load a full document; returns the indices whose text changed."""
        texts = list(paragraphs)
        changed = []
        items = []
        for i, text in enumerate(texts):
            old = self._items[i] if i < len(self._items) else None
            if old is not None and old.text == text:
                items.append(old)
            else:
                items.append(StoredParagraph(i, text, hash_string(text)))
                changed.append(i)
        self._items = items
        return changed

    def edit(self, index: int, text: str) -> bool:
        old = self._items[index]
        if old.text == text:
            return False
        self._items[index] = StoredParagraph(index, text, hash_string(text))
        return True

    def __getitem__(self, index: int) -> StoredParagraph:
        return self._items[index]

    def __iter__(self):
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    @property
    def texts(self) -> Sequence[str]:
        return [p.text for p in self._items]


# reason -> (drop issue cache, drop verdict cache); text-edit drops per paragraph
INVALIDATION: Dict[ChangeReason, Tuple[bool, bool]] = {
    ChangeReason.TEXT_EDIT: (False, False),
    ChangeReason.RULE_CONFIG_CHANGE: (True, False),
    ChangeReason.MODE_CHANGE: (True, True),
    ChangeReason.MANUAL_REFRESH: (True, True),
    ChangeReason.GUIDELINE_CHANGE: (True, True),
    ChangeReason.MODEL_CHANGE: (False, True),
    ChangeReason.IGNORED_CORRECTION: (False, False),
}


def invalidate(
    reason: ChangeReason,
    issues: IssueCache,
    verdicts: VerdictCache,
    edited_texts: Sequence[str] = (),
) -> None:
    drop_issues, drop_verdicts = INVALIDATION[reason]
    if reason is ChangeReason.TEXT_EDIT:
        for text in edited_texts:
            issues.pop(text)
    if drop_issues:
        issues.clear()
    if drop_verdicts:
        verdicts.clear()
    log.debug("invalidate reason=%s issues=%s verdicts=%s", reason.value, drop_issues, drop_verdicts)

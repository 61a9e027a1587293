from __future__ import annotations
import re
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from kousei.models.config import RuleConfig
from kousei.models.issue import LintFix, LintIssue, LintReference, Severity
from kousei.services.segment import mask_dialogue

# standards cited by the shipped rules
REF_ERA_LAW = LintReference(standard="元号法", section="昭和54年法律第43号")
REF_GAIRAI = LintReference(standard="外来語の表記", section="内閣告示第2号 (1991)")
REF_JTF_CHOUON = LintReference(standard="JTF日本語標準スタイルガイド", section="2.2.2 カタカナの長音")
REF_JTF_WAVE = LintReference(standard="JTF日本語標準スタイルガイド", section="2.1.3 記号")
REF_JTF_STYLE = LintReference(standard="日本語スタイルガイド", section="文の長さと接続")
REF_KEIGO = LintReference(standard="文化庁「敬語の指針」", section="2007")
REF_KOYO_BUN = LintReference(standard="文化庁「公用文作成の考え方」", section="2022")
REF_OKURIGANA = LintReference(standard="送り仮名の付け方", section="内閣告示第2号 (1973)")
REF_JIS_X_4051 = LintReference(standard="JIS X 4051:2004", section="括弧類")


def issue(
    rule_id: str,
    config: RuleConfig,
    text: str,
    start: int,
    end: int,
    message: str,
    message_ja: str,
    *,
    reference: Optional[LintReference] = None,
    replacement: Optional[str] = None,
    paragraph_index: int = 0,
    severity: Optional[Severity] = None,
) -> LintIssue:
    """Build an issue over ``text[start:end]`` with the configured severity."""
    flagged = text[start:end]
    fix = None
    if replacement is not None:
        fix = LintFix(
            label=f"Replace with '{replacement}'",
            label_ja=f"「{replacement}」に修正",
            replacement=replacement,
        )
    return LintIssue(
        rule_id=rule_id,
        severity=severity or config.severity,
        message=message,
        message_ja=message_ja,
        from_=start,
        to=end,
        paragraph_index=paragraph_index,
        original_text=flagged,
        reference=reference,
        fix=fix,
    )


def scan_text(text: str, config: RuleConfig) -> str:
    """Text the rule should match against: dialogue masked when configured."""
    return mask_dialogue(text) if config.skip_dialogue else text


def compile_alternation(words: Iterable[str]) -> "re.Pattern[str]":
    """Regex matching any of ``words``, longest first so prefixes never win."""
    ordered = sorted(set(words), key=lambda w: (-len(w), w))
    return re.compile("|".join(re.escape(w) for w in ordered))


def dictionary_matches(
    text: str, table: Dict[str, str], pattern: "re.Pattern[str]"
) -> List[Tuple[int, int, str, str]]:
    """(start, end, found, replacement) for every non-overlapping dictionary hit."""
    return [(m.start(), m.end(), m.group(0), table[m.group(0)]) for m in pattern.finditer(text)]


def majority(counts: Dict[str, int], order: Sequence[str]) -> str:
    """Most frequent key; ties go to whichever comes first in ``order``."""
    return max(order, key=lambda k: (counts.get(k, 0), -order.index(k)))

"""Document and token-document rules: consistency across every paragraph."""
from __future__ import annotations
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence, Tuple

from kousei.models.config import RuleConfig
from kousei.models.issue import LintIssue
from kousei.models.token import Token
from kousei.services.registry import DocumentRule, Paragraph, TokenDocumentRule, TokenizedParagraph
from kousei.services.rules import data
from kousei.services.rules.common import (
    REF_GAIRAI,
    REF_JTF_WAVE,
    REF_KOYO_BUN,
    REF_OKURIGANA,
    compile_alternation,
    issue,
    majority,
    scan_text,
)
from kousei.services.segment import is_in_dialogue, split_sentences, tokens_in_span

# (paragraph index, from, to, surface)
Occurrence = Tuple[int, int, int, str]

# ---------------------------------------------------------------------------
# notation-consistency
# ---------------------------------------------------------------------------

_CATEGORY_REFERENCES = {
    "okurigana": REF_OKURIGANA,
    "kanji-kana": REF_KOYO_BUN,
    "katakana-chouon": REF_GAIRAI,
}
# one alternation per group, longest variant first so サーバ never matches inside サーバー
_GROUP_PATTERNS = [
    (group_id, category, variants, compile_alternation(variants))
    for group_id, category, variants in data.NOTATION_VARIANTS
]


def _minority_issues(
    rule_id: str,
    config: RuleConfig,
    texts: Dict[int, str],
    occurrences: List[Occurrence],
    order: Sequence[str],
    message: str,
    message_ja: str,
    reference,
) -> List[LintIssue]:
    counts = Counter(surface for _, _, _, surface in occurrences)
    if len(counts) < 2:
        return []
    winner = majority(counts, list(order))
    return [
        issue(
            rule_id, config, texts[index], start, end,
            message.format(found=surface, winner=winner),
            message_ja.format(found=surface, winner=winner),
            reference=reference,
            replacement=winner,
            paragraph_index=index,
        )
        for index, start, end, surface in occurrences
        if surface != winner
    ]


def check_notation_consistency(paragraphs: Sequence[Paragraph], config: RuleConfig) -> List[LintIssue]:
    texts = {p.index: p.text for p in paragraphs}
    scanned = [(p.index, scan_text(p.text, config)) for p in paragraphs]
    issues = []
    for _, category, variants, pattern in _GROUP_PATTERNS:
        found = [
            (index, m.start(), m.end(), m.group(0))
            for index, text in scanned
            for m in pattern.finditer(text)
        ]
        label = data.VARIANT_CATEGORY_LABELS[category]
        reference = _CATEGORY_REFERENCES[category]
        issues.extend(_minority_issues(
            "notation-consistency", config, texts, found, variants,
            "Inconsistent notation: '{found}' vs '{winner}' (" + category + ")",
            reference.standard + "に基づき、" + label + "「{found}」と「{winner}」の表記が混在しています。「{winner}」への統一を推奨します",
            reference,
        ))
    return issues


# ---------------------------------------------------------------------------
# wave-dash-unification
# ---------------------------------------------------------------------------

WAVE_DASH = "\u301c"
FULLWIDTH_TILDE = "\uff5e"
_DASH_NAMES = {WAVE_DASH: "波ダッシュ（U+301C）", FULLWIDTH_TILDE: "全角チルダ（U+FF5E）"}


def check_wave_dash(paragraphs: Sequence[Paragraph], config: RuleConfig) -> List[LintIssue]:
    waves = sum(p.text.count(WAVE_DASH) for p in paragraphs)
    tildes = sum(p.text.count(FULLWIDTH_TILDE) for p in paragraphs)
    if not waves or not tildes:
        return []
    minority_char, winner = (WAVE_DASH, FULLWIDTH_TILDE) if waves <= tildes else (FULLWIDTH_TILDE, WAVE_DASH)
    name = _DASH_NAMES[winner]
    issues = []
    for p in paragraphs:
        for i, ch in enumerate(p.text):
            if ch != minority_char:
                continue
            issues.append(issue(
                "wave-dash-unification", config, p.text, i, i + 1,
                f"Mixed wave dash usage: convert to '{winner}' ({name}) for consistency",
                f"JTF 2.1.3に基づき、文書内で波ダッシュの種類が混在しています。{name}に統一してください",
                reference=REF_JTF_WAVE,
                replacement=winner,
                paragraph_index=p.index,
            ))
    return issues


# ---------------------------------------------------------------------------
# desu-masu-consistency
# ---------------------------------------------------------------------------

MAJORITY_THRESHOLD = 0.6
_TRAILING_POS = frozenset({"記号", "補助記号", "空白", "助詞"})
_STOP_POS = frozenset({"動詞", "形容詞", "名詞", "代名詞", "助動詞"})
_POLITE = ("です", "ます")


def _polite_follows(tokens: List[Token], i: int, skip_pos) -> bool:
    for t in tokens[i + 1:]:
        if t.pos in skip_pos:
            continue
        return t.pos == "助動詞" and t.basic_form in _POLITE
    return False


def classify_style(tokens: List[Token]) -> Optional[Tuple[str, int, int]]:
    """("polite" | "plain", from, to) from the sentence ending, or None."""
    for i in range(len(tokens) - 1, -1, -1):
        t = tokens[i]
        if t.pos in _TRAILING_POS:
            continue
        if t.pos == "助動詞" and t.basic_form in _POLITE:
            return "polite", t.start, t.end
        if t.pos == "助動詞" and t.basic_form == "だ" and not _polite_follows(tokens, i, {"記号", "補助記号"}):
            return "plain", t.start, t.end
        if t.basic_form == "ある" and i > 0:
            prev = tokens[i - 1]
            if prev.pos == "助動詞" and prev.basic_form == "だ" and prev.surface == "で":
                return "plain", prev.start, t.end
        if (
            t.pos in ("動詞", "形容詞")
            and t.conjugation_form
            and ("終止形" in t.conjugation_form or "連体形" in t.conjugation_form)
            and not _polite_follows(tokens, i, _TRAILING_POS)
        ):
            return "plain", t.start, t.end
        if t.pos in _STOP_POS:
            break
    return None


def check_desu_masu(paragraphs: Sequence[TokenizedParagraph], config: RuleConfig) -> List[LintIssue]:
    classified = []
    for p in paragraphs:
        for s in split_sentences(p.text):
            if config.skip_dialogue and is_in_dialogue(s.from_, p.text):
                continue
            style = classify_style(list(tokens_in_span(p.tokens, s.from_, s.to)))
            if style is not None:
                classified.append((p, *style))
    if len(classified) < 2:
        return []

    polite = sum(1 for _, style, _, _ in classified if style == "polite")
    plain = len(classified) - polite
    if polite / len(classified) >= MAJORITY_THRESHOLD:
        dominant = "polite"
    elif plain / len(classified) >= MAJORITY_THRESHOLD:
        dominant = "plain"
    else:
        return []

    issues = []
    for p, style, start, end in classified:
        if style == dominant:
            continue
        if style == "polite":
            message = ("This sentence uses polite style (です・ます体), "
                       "but the document predominantly uses plain style (だ・である体)")
            message_ja = ("文化庁「公用文作成の考え方」に基づき、この文は敬体（です・ます体）ですが、"
                          "文書全体では常体（だ・である体）が使われています")
        else:
            message = ("This sentence uses plain style (だ・である体), "
                       "but the document predominantly uses polite style (です・ます体)")
            message_ja = ("文化庁「公用文作成の考え方」に基づき、この文は常体（だ・である体）ですが、"
                          "文書全体では敬体（です・ます体）が使われています")
        issues.append(issue(
            "desu-masu-consistency", config, p.text, start, end, message, message_ja,
            reference=REF_KOYO_BUN, paragraph_index=p.index,
        ))
    return issues


# ---------------------------------------------------------------------------
# adverb-form-consistency
# ---------------------------------------------------------------------------

_ADVERB_GROUPS: Dict[str, str] = {
    surface: reading for reading, variants in data.ADVERB_VARIANTS.items() for surface in variants
}


def check_adverb_form(paragraphs: Sequence[TokenizedParagraph], config: RuleConfig) -> List[LintIssue]:
    texts = {p.index: p.text for p in paragraphs}
    by_group: Dict[str, List[Occurrence]] = defaultdict(list)
    for p in paragraphs:
        for t in p.tokens:
            if t.pos != "副詞" or t.surface not in _ADVERB_GROUPS:
                continue
            if config.skip_dialogue and is_in_dialogue(t.start, p.text):
                continue
            by_group[_ADVERB_GROUPS[t.surface]].append((p.index, t.start, t.end, t.surface))

    issues = []
    for reading in sorted(by_group):
        issues.extend(_minority_issues(
            "adverb-form-consistency", config, texts, by_group[reading], data.ADVERB_VARIANTS[reading],
            "Inconsistent adverb form: '{found}' used here, but '{winner}' is more common in this document",
            "文化庁「公用文作成の考え方」に基づき、「{found}」と「{winner}」が混在しています。多数派の「{winner}」への統一を検討してください",
            REF_KOYO_BUN,
        ))
    return issues


RULES = [
    DocumentRule(
        id="notation-consistency",
        name="Notation consistency",
        name_ja="表記ゆれの検出",
        description_ja="文書内の表記ゆれ（送り仮名・漢字とかな・カタカナ長音）を検出します",
        default_config=RuleConfig(severity="warning"),
        check=check_notation_consistency,
    ),
    DocumentRule(
        id="wave-dash-unification",
        name="Wave dash unification",
        name_ja="波ダッシュの統一",
        description_ja="波ダッシュ（〜）と全角チルダ（～）の混在を検出します",
        default_config=RuleConfig(severity="error", skip_llm_validation=True),
        check=check_wave_dash,
        guidelines=frozenset({"jtf-style-3", "jtca-style-3"}),
    ),
    TokenDocumentRule(
        id="desu-masu-consistency",
        name="Desu/masu consistency",
        name_ja="敬体・常体の混在検出",
        description_ja="です・ます体と、だ・である体の混在を検出します",
        default_config=RuleConfig(severity="warning", skip_dialogue=True),
        check=check_desu_masu,
    ),
    TokenDocumentRule(
        id="adverb-form-consistency",
        name="Adverb form consistency",
        name_ja="副詞の漢字・ひらがな統一",
        description_ja="副詞の漢字表記とひらがな表記の混在を検出します",
        default_config=RuleConfig(severity="info"),
        check=check_adverb_form,
    ),
]

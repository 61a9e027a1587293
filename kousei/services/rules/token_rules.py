"""Token rules: paragraph text plus its morphological tokens.

POS names follow the UniDic/Sudachi tag set; the IPAdic spellings that differ
(記号, 動詞-接尾) are accepted as well.
"""
from __future__ import annotations
import re
from typing import Callable, List, Sequence, Tuple

from kousei.models.config import RuleConfig
from kousei.models.issue import LintIssue
from kousei.models.token import Token
from kousei.services.registry import TokenRule
from kousei.services.rules import data
from kousei.services.rules.common import REF_JTF_CHOUON, REF_JTF_STYLE, compile_alternation, issue
from kousei.services.segment import SentenceSpan, is_in_dialogue, split_sentences, tokens_in_span

SYMBOL_POS = frozenset({"記号", "補助記号", "空白"})
NOUN_POS = frozenset({"名詞", "代名詞"})


def content_tokens(tokens: Sequence[Token]) -> List[Token]:
    return [t for t in tokens if t.pos not in SYMBOL_POS and t.surface.strip()]


def consecutive_runs(
    text: str,
    tokens: Sequence[Token],
    config: RuleConfig,
    matches: Callable[[List[Token]], bool],
) -> List[Tuple[SentenceSpan, SentenceSpan, int]]:
    """Runs of consecutive sentences satisfying ``matches`` at or over the threshold.

    Returns (first sentence, last sentence, run length). Dialogue sentences
    break a run when ``skip_dialogue`` is set.
    """
    threshold = config.option("threshold", 3)
    runs = []
    run: List[SentenceSpan] = []

    def flush():
        if len(run) >= threshold:
            runs.append((run[0], run[-1], len(run)))
        run.clear()

    for sentence in split_sentences(text):
        if config.skip_dialogue and is_in_dialogue(sentence.from_, text):
            flush()
            continue
        if matches(content_tokens(tokens_in_span(tokens, sentence.from_, sentence.to))):
            run.append(sentence)
        else:
            flush()
    flush()
    return runs


def starts_with_conjunction(sentence: List[Token]) -> bool:
    return bool(sentence) and sentence[0].pos == "接続詞"


def has_passive(sentence: List[Token]) -> bool:
    for t in sentence:
        base = t.basic_form or t.surface
        if base in ("れる", "られる") and (
            t.pos == "助動詞" or (t.pos == "動詞" and t.pos_detail_1 in ("接尾", "非自立"))
        ):
            return True
        if base in ("される", "させられる"):
            return True
    return False


def ends_with_noun(sentence: List[Token]) -> bool:
    return bool(sentence) and sentence[-1].pos in NOUN_POS


def check_conjunction_overuse(text: str, tokens: Sequence[Token], config: RuleConfig) -> List[LintIssue]:
    return [
        issue(
            "conjunction-overuse", config, text, first.from_, last.to,
            f"{n} consecutive sentences start with conjunctions",
            f"日本語スタイルガイドに基づき、{n}文連続で接続詞から始まっています",
            reference=REF_JTF_STYLE,
        )
        for first, last, n in consecutive_runs(text, tokens, config, starts_with_conjunction)
    ]


def check_passive_overuse(text: str, tokens: Sequence[Token], config: RuleConfig) -> List[LintIssue]:
    return [
        issue(
            "passive-overuse", config, text, first.from_, last.to,
            f"{n} consecutive sentences use passive voice",
            f"日本語スタイルガイドに基づき、{n}文連続で受動態が使われています",
            reference=REF_JTF_STYLE,
        )
        for first, last, n in consecutive_runs(text, tokens, config, has_passive)
    ]


def check_taigen_dome(text: str, tokens: Sequence[Token], config: RuleConfig) -> List[LintIssue]:
    return [
        issue(
            "taigen-dome-overuse", config, text, first.from_, last.to,
            f"{n} consecutive sentences end with nouns (taigen-dome)",
            f"日本語スタイルガイドに基づき、{n}文連続で体言止めが使われています",
            reference=REF_JTF_STYLE,
        )
        for first, last, n in consecutive_runs(text, tokens, config, ends_with_noun)
    ]


KATAKANA_WORD = re.compile(r"^[゠-ヿ]+$")
_VOWEL_REPEAT = compile_alternation(data.KATAKANA_VOWEL_REPEATS)


def check_katakana_chouon(text: str, tokens: Sequence[Token], config: RuleConfig) -> List[LintIssue]:
    issues = []
    for t in tokens:
        if not KATAKANA_WORD.match(t.surface):
            continue
        if config.skip_dialogue and is_in_dialogue(t.start, text):
            continue
        for m in _VOWEL_REPEAT.finditer(t.surface):
            replacement = data.KATAKANA_VOWEL_REPEATS[m.group(0)]
            issues.append(issue(
                "katakana-chouon", config, text, t.start + m.start(), t.start + m.end(),
                f"Use long vowel mark (ー) instead of repeated vowel: {m.group(0)} -> {replacement}",
                f"JTF 2.2.2に基づき、母音の繰り返し「{m.group(0)}」は長音記号「{replacement}」で表記してください",
                reference=REF_JTF_CHOUON,
                replacement=replacement,
            ))
    return issues


RULES = [
    TokenRule(
        id="conjunction-overuse",
        name="Conjunction overuse",
        name_ja="接続詞の連続使用",
        description_ja="接続詞で始まる文が連続している箇所を検出します",
        default_config=RuleConfig(severity="info", skip_dialogue=True, options={"threshold": 3}),
        check=check_conjunction_overuse,
    ),
    TokenRule(
        id="passive-overuse",
        name="Passive overuse",
        name_ja="受動態の多用検出",
        description_ja="受動態が連続して使われている箇所を検出します",
        default_config=RuleConfig(severity="info", skip_dialogue=True, options={"threshold": 3}),
        check=check_passive_overuse,
    ),
    TokenRule(
        id="taigen-dome-overuse",
        name="Taigen-dome overuse",
        name_ja="体言止めの多用検出",
        description_ja="体言止めの文が連続している箇所を検出します",
        default_config=RuleConfig(severity="info", skip_dialogue=True, options={"threshold": 4}),
        check=check_taigen_dome,
    ),
    TokenRule(
        id="katakana-chouon",
        name="Use long vowel mark in katakana",
        name_ja="カタカナ語の長音省略禁止",
        description_ja="長音記号「ー」の代わりに母音を繰り返しているカタカナ語を検出します",
        default_config=RuleConfig(severity="warning", skip_dialogue=True),
        check=check_katakana_chouon,
        guidelines=frozenset({"jtf-style-3", "gairai-1991"}),
    ),
]

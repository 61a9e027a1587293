"""Pattern rules: regex and dictionary scans over one paragraph's raw text."""
from __future__ import annotations
import re
from typing import List

from kousei.core.config import DIALOGUE_PLACEHOLDER
from kousei.models.config import RuleConfig
from kousei.models.issue import LintFix, LintIssue
from kousei.services.registry import PatternRule
from kousei.services.rules import data
from kousei.services.rules.common import (
    REF_ERA_LAW,
    REF_JIS_X_4051,
    REF_JTF_CHOUON,
    REF_JTF_STYLE,
    REF_KEIGO,
    REF_KOYO_BUN,
    compile_alternation,
    issue,
    scan_text,
)
from kousei.services.segment import split_sentences

# ---------------------------------------------------------------------------
# era-year-validator
# ---------------------------------------------------------------------------

ERA_YEAR = re.compile(r"(令和|平成|昭和|大正|明治)(元|\d+)年([（(])(\d{4})年([）)])")


def check_era_year(text: str, config: RuleConfig) -> List[LintIssue]:
    issues = []
    for m in ERA_YEAR.finditer(scan_text(text, config)):
        era, era_year, open_, stated, close = m.groups()
        year = 1 if era_year == "元" else int(era_year)
        expected = data.ERA_OFFSETS[era] + year
        if int(stated) == expected:
            continue
        replacement = f"{era}{era_year}年{open_}{expected}年{close}"
        issues.append(issue(
            "era-year-validator", config, text, m.start(), m.end(),
            f"Era year mismatch: {era} {year} is {expected}, not {int(stated)}.",
            f"元号法 (1979)に基づき、{era}{era_year}年は西暦{expected}年です（{int(stated)}年は誤りです）",
            reference=REF_ERA_LAW,
            replacement=replacement,
        ))
    return issues


# ---------------------------------------------------------------------------
# long-vowel-mark-confusion
# ---------------------------------------------------------------------------

# ー must follow kana or another ー; anything else is usually a mistyped 一 or dash
STRAY_CHOUON = re.compile(r"(?<![ぁ-ゖァ-ヺー])ー")
# kanji 一 sandwiched between katakana is almost always a mistyped ー
KANJI_ONE_IN_KATAKANA = re.compile(r"(?<=[ァ-ヺ])一(?=[ァ-ヺ])")
KANJI = re.compile(r"[一-龯々]")


def check_long_vowel_confusion(text: str, config: RuleConfig) -> List[LintIssue]:
    scanned = scan_text(text, config)
    issues = []
    for m in STRAY_CHOUON.finditer(scanned):
        following = scanned[m.end():m.end() + 1]
        replacement = "一" if following and KANJI.match(following) else None
        issues.append(issue(
            "long-vowel-mark-confusion", config, text, m.start(), m.end(),
            "Long vowel mark (ー) does not follow kana",
            "長音記号「ー」が仮名の後にありません。漢数字「一」やダッシュの誤入力の可能性があります",
            reference=REF_JTF_CHOUON,
            replacement=replacement,
        ))
    for m in KANJI_ONE_IN_KATAKANA.finditer(scanned):
        issues.append(issue(
            "long-vowel-mark-confusion", config, text, m.start(), m.end(),
            "Kanji 一 inside a katakana word; did you mean the long vowel mark (ー)?",
            "カタカナ語の中に漢数字「一」があります。長音記号「ー」の誤入力の可能性があります",
            reference=REF_JTF_CHOUON,
            replacement="ー",
        ))
    return issues


# ---------------------------------------------------------------------------
# long-vowel-kana
# ---------------------------------------------------------------------------

_LONG_VOWEL_KANA = compile_alternation(data.LONG_VOWEL_KANA)
_KATAKANA = re.compile(r"[ァ-ン]")


def check_long_vowel_kana(text: str, config: RuleConfig) -> List[LintIssue]:
    scanned = scan_text(text, config)
    issues = []
    for m in _LONG_VOWEL_KANA.finditer(scanned):
        wrong = m.group(0)
        # エラア inside a longer katakana word is a different word
        if wrong == "エラア" and _KATAKANA.match(scanned[m.end():m.end() + 1]):
            continue
        correct = data.LONG_VOWEL_KANA[wrong]
        issues.append(issue(
            "long-vowel-kana", config, text, m.start(), m.end(),
            f"Use long vowel mark: '{wrong}' -> '{correct}'",
            f"JTF・現代仮名遣いに基づき、「{wrong}」は長音記号を使って「{correct}」と表記してください",
            reference=REF_JTF_CHOUON,
            replacement=correct,
        ))
    return issues


# ---------------------------------------------------------------------------
# sentence-length / comma-frequency / particle-no-repetition
# ---------------------------------------------------------------------------

def _effective_length(s: str) -> int:
    return len(s) - s.count(DIALOGUE_PLACEHOLDER)


def check_sentence_length(text: str, config: RuleConfig) -> List[LintIssue]:
    max_length = config.option("maxLength", 100)
    scanned = scan_text(text, config)
    issues = []
    for s in split_sentences(text):
        length = _effective_length(scanned[s.from_:s.to])
        if length > max_length:
            issues.append(issue(
                "sentence-length", config, text, s.from_, s.to,
                f"Sentence is {length} characters long (threshold: {max_length})",
                f"日本語スタイルガイドに基づき、一文が{length}文字あります（推奨上限: {max_length}文字）",
                reference=REF_JTF_STYLE,
            ))
    return issues


def check_comma_frequency(text: str, config: RuleConfig) -> List[LintIssue]:
    max_ratio = config.option("maxCommaRatio", 0.125)
    min_length = config.option("minLengthForComma", 50)
    scanned = scan_text(text, config)
    issues = []
    for s in split_sentences(text):
        chunk = scanned[s.from_:s.to]
        commas = chunk.count("、")
        length = _effective_length(chunk)
        if length >= 8 and commas and commas / length > max_ratio:
            ratio = commas / length
            issues.append(issue(
                "comma-frequency", config, text, s.from_, s.to,
                f"Sentence has {commas} commas in {length} characters (ratio: {ratio:.2f})",
                f"一文に読点が{commas}個あります（{length}文字中、比率: {ratio:.2f}）",
                reference=REF_KOYO_BUN,
            ))
        elif commas == 0 and length > min_length:
            issues.append(issue(
                "comma-frequency", config, text, s.from_, s.to,
                f"Long sentence ({length} characters) has no commas",
                f"{length}文字の文に読点がありません",
                reference=REF_KOYO_BUN,
            ))
    return issues


_NO_EXCEPTIONS = compile_alternation(data.NO_EXCEPTIONS)


def count_particle_no(sentence: str) -> int:
    """Count の that can be the particle, ignoring この/その/もの and friends."""
    return _NO_EXCEPTIONS.sub(lambda m: DIALOGUE_PLACEHOLDER * len(m.group(0)), sentence).count("の")


def check_particle_no(text: str, config: RuleConfig) -> List[LintIssue]:
    threshold = config.option("threshold", 4)
    scanned = scan_text(text, config)
    issues = []
    for s in split_sentences(text):
        count = count_particle_no(scanned[s.from_:s.to])
        if count >= threshold:
            issues.append(issue(
                "particle-no-repetition", config, text, s.from_, s.to,
                f"Excessive particle の usage: {count} occurrences in one sentence "
                f"(recommended: fewer than {threshold})",
                f"日本語スタイルガイドに基づき、1文中に助詞「の」が{count}回使用されています（推奨: {threshold}回未満）",
                reference=REF_JTF_STYLE,
            ))
    return issues


# ---------------------------------------------------------------------------
# conjugation-errors
# ---------------------------------------------------------------------------

# wrong -> (right, kind); ら抜き pairs are generated from stem x suffix
CONJUGATION_TABLE = {
    **{
        stem + suffix: (stem + "ら" + suffix, "ra-nuki")
        for stem in data.RA_NUKI_STEMS
        for suffix in data.RA_NUKI_SUFFIXES
    },
    **{wrong: (right, "sa-ire") for wrong, right in data.SA_IRE.items()},
    **{wrong: (right, "i-nuki") for wrong, right in data.I_NUKI.items()},
}
_CONJUGATION = compile_alternation(CONJUGATION_TABLE)
_CONJUGATION_LABELS = {"ra-nuki": "ら抜き言葉", "sa-ire": "さ入れ言葉", "i-nuki": "い抜き言葉"}


def check_conjugation(text: str, config: RuleConfig) -> List[LintIssue]:
    issues = []
    for m in _CONJUGATION.finditer(scan_text(text, config)):
        wrong = m.group(0)
        right, kind = CONJUGATION_TABLE[wrong]
        label = _CONJUGATION_LABELS[kind]
        issues.append(issue(
            "conjugation-errors", config, text, m.start(), m.end(),
            f"'{wrong}' is {kind} ({label}). Standard form: '{right}'",
            f"文化庁「敬語の指針」に基づき、「{wrong}」は{label}です。「{right}」が標準的です",
            reference=REF_KEIGO,
            replacement=right,
            # い抜き is routine in casual prose
            severity="info" if kind == "i-nuki" else None,
        ))
    return issues


# ---------------------------------------------------------------------------
# redundant-expression / verbose-expression
# ---------------------------------------------------------------------------

_REDUNDANT = compile_alternation(data.REDUNDANT)
_VERBOSE = compile_alternation(data.VERBOSE)


def check_redundant(text: str, config: RuleConfig) -> List[LintIssue]:
    issues = []
    for m in _REDUNDANT.finditer(scan_text(text, config)):
        found = m.group(0)
        concise, why = data.REDUNDANT[found]
        issues.append(issue(
            "redundant-expression", config, text, m.start(), m.end(),
            f"Redundant expression '{found}' can be replaced with '{concise}'",
            f"日本語スタイルガイドに基づき、「{found}」は二重表現です。{why}。「{concise}」への書き換えを推奨します",
            reference=REF_JTF_STYLE,
            replacement=concise,
        ))
    return issues


def check_verbose(text: str, config: RuleConfig) -> List[LintIssue]:
    issues = []
    for m in _VERBOSE.finditer(scan_text(text, config)):
        found = m.group(0)
        concise, why = data.VERBOSE[found]
        issues.append(issue(
            "verbose-expression", config, text, m.start(), m.end(),
            f"Verbose expression '{found}' can be simplified to '{concise}'",
            f"日本語スタイルガイドに基づき、「{found}」は冗長表現です。{why}",
            reference=REF_JTF_STYLE,
            replacement=concise,
        ))
    return issues


# ---------------------------------------------------------------------------
# dialogue-punctuation
# ---------------------------------------------------------------------------

_EMPTY_BRACKETS = re.compile(r"「」|『』")


def check_dialogue_punctuation(text: str, config: RuleConfig) -> List[LintIssue]:
    issues = []

    # 「」 nested inside 「」 should be 『』
    depth = 0
    inner_starts: List[int] = []
    for i, ch in enumerate(text):
        if ch == "「":
            if depth >= 1:
                inner_starts.append(i)
            depth += 1
        elif ch == "」" and depth > 0:
            depth -= 1
            if depth >= 1 and inner_starts:
                start = inner_starts.pop()
                nested = issue(
                    "dialogue-punctuation", config, text, start, i + 1,
                    "Nested dialogue should use double brackets 『』",
                    "JIS X 4051:2004に基づき、カギ括弧内の引用には二重カギ括弧『』を使用してください",
                    reference=REF_JIS_X_4051,
                )
                issues.append(nested.model_copy(update={"fix": LintFix(
                    label="Replace with double brackets",
                    label_ja="二重カギ括弧に変換",
                    replacement="『" + text[start + 1:i] + "』",
                )}))

    for m in _EMPTY_BRACKETS.finditer(text):
        issues.append(issue(
            "dialogue-punctuation", config, text, m.start(), m.end(),
            "Empty brackets detected",
            "JIS X 4051:2004に基づき、空のカギ括弧が検出されました",
            reference=REF_JIS_X_4051,
        ))

    for open_, close in (("「", "」"), ("『", "』")):
        opened, closed = text.count(open_), text.count(close)
        if opened != closed:
            issues.append(issue(
                "dialogue-punctuation", config, text, 0, len(text),
                f"Unmatched {open_}{close} brackets: {opened} open, {closed} close",
                f"JIS X 4051:2004に基づき、カギ括弧{open_}{close}の数が一致しません（開き{opened}個、閉じ{closed}個）",
                reference=REF_JIS_X_4051,
            ))
    return issues


RULES = [
    PatternRule(
        id="era-year-validator",
        name="Era/western year consistency",
        name_ja="元号・西暦の整合性",
        description_ja="元号と併記された西暦の食い違いを検出します",
        default_config=RuleConfig(severity="warning", skip_llm_validation=True),
        check=check_era_year,
    ),
    PatternRule(
        id="long-vowel-mark-confusion",
        name="Long vowel mark confusion",
        name_ja="長音記号と漢数字の混同",
        description_ja="長音記号「ー」と漢数字「一」の取り違えを検出します",
        default_config=RuleConfig(severity="warning", skip_dialogue=True),
        check=check_long_vowel_confusion,
    ),
    PatternRule(
        id="long-vowel-kana",
        name="Use long vowel mark (ー) in katakana loanwords",
        name_ja="長音の仮名表記",
        description_ja="カタカナ語で長音記号「ー」の代わりに母音を繰り返している場合を検出します",
        default_config=RuleConfig(severity="error", skip_dialogue=True, skip_llm_validation=True),
        check=check_long_vowel_kana,
    ),
    PatternRule(
        id="sentence-length",
        name="Sentence length",
        name_ja="長文の検出",
        description_ja="設定した文字数を超える文を検出します",
        default_config=RuleConfig(
            severity="info", skip_dialogue=True, skip_llm_validation=True, options={"maxLength": 100}
        ),
        check=check_sentence_length,
    ),
    PatternRule(
        id="particle-no-repetition",
        name="Excessive particle の usage",
        name_ja="助詞「の」の連続使用",
        description_ja="1文中の「の」の多用を検出します",
        default_config=RuleConfig(severity="info", skip_dialogue=True, options={"threshold": 4}),
        check=check_particle_no,
    ),
    PatternRule(
        id="conjugation-errors",
        name="Conjugation error detection",
        name_ja="活用の誤り検出",
        description_ja="ら抜き・さ入れ・い抜き言葉を検出します",
        default_config=RuleConfig(severity="warning", skip_dialogue=True),
        check=check_conjugation,
    ),
    PatternRule(
        id="redundant-expression",
        name="Redundant expression detection",
        name_ja="二重表現の検出",
        description_ja="意味が重複している冗長な表現を検出します",
        default_config=RuleConfig(severity="warning", skip_llm_validation=True),
        check=check_redundant,
    ),
    PatternRule(
        id="verbose-expression",
        name="Verbose expression simplification",
        name_ja="冗長表現の簡略化",
        description_ja="冗長な表現を検出し、簡潔な言い換えを提案します",
        default_config=RuleConfig(severity="info"),
        check=check_verbose,
    ),
    PatternRule(
        id="dialogue-punctuation",
        name="Dialogue bracket usage",
        name_ja="会話文の括弧",
        description_ja="入れ子のカギ括弧、空のカギ括弧、閉じ忘れを検出します",
        default_config=RuleConfig(severity="warning", skip_llm_validation=True),
        check=check_dialogue_punctuation,
        guidelines=frozenset({"jis-x-4051", "novel-manuscript"}),
    ),
    PatternRule(
        id="comma-frequency",
        name="Comma frequency",
        name_ja="読点の頻度チェック",
        description_ja="読点が多すぎる、または少なすぎる文を検出します",
        default_config=RuleConfig(
            severity="info", options={"maxCommaRatio": 0.125, "minLengthForComma": 50}
        ),
        check=check_comma_frequency,
    ),
]

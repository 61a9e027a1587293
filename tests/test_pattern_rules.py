import pytest

from kousei.models.config import RuleConfig
from kousei.services.rules import pattern_rules as pr

DEFAULTS = {r.id: r.default_config for r in pr.RULES}


def cfg(rule_id: str, **update) -> RuleConfig:
    base = DEFAULTS[rule_id]
    if "options" in update:
        update["options"] = {**base.options, **update["options"]}
    return base.model_copy(update=update)


# ---------------------------------------------------------------------------
# era-year-validator
# ---------------------------------------------------------------------------

def test_era_year_mismatch_keeps_fullwidth_parens():
    text = "令和5年（2022年）に施行。"
    issues = pr.check_era_year(text, cfg("era-year-validator"))
    assert len(issues) == 1
    issue = issues[0]
    assert "2023" in issue.fix.replacement
    assert issue.fix.replacement == "令和5年（2023年）"
    assert "(" not in issue.fix.replacement
    assert text[issue.from_:issue.to] == "令和5年（2022年）"
    assert issue.severity == "warning"


def test_era_year_halfwidth_parens():
    issues = pr.check_era_year("昭和50年(1976年)", cfg("era-year-validator"))
    assert issues[0].fix.replacement == "昭和50年(1975年)"


@pytest.mark.parametrize("text", ["平成元年（1989年）", "昭和64年(1989年)", "令和6年（2024年）", "令和5年"])
def test_era_year_consistent_or_absent(text):
    assert pr.check_era_year(text, cfg("era-year-validator")) == []


# ---------------------------------------------------------------------------
# long-vowel-mark-confusion
# ---------------------------------------------------------------------------

def test_long_vowel_in_dialogue_is_masked():
    assert pr.check_long_vowel_confusion("「ー」", cfg("long-vowel-mark-confusion")) == []


def test_long_vowel_outside_dialogue_is_flagged():
    issues = pr.check_long_vowel_confusion("「ー」", cfg("long-vowel-mark-confusion", skip_dialogue=False))
    assert len(issues) == 1
    assert (issues[0].from_, issues[0].to) == (1, 2)
    assert issues[0].fix is None


def test_stray_long_vowel_before_kanji_suggests_kanji_one():
    issues = pr.check_long_vowel_confusion("ー番目の席", cfg("long-vowel-mark-confusion"))
    assert len(issues) == 1
    assert issues[0].fix.replacement == "一"


def test_kanji_one_inside_katakana():
    issues = pr.check_long_vowel_confusion("データのア一ト", cfg("long-vowel-mark-confusion"))
    assert len(issues) == 1
    assert issues[0].original_text == "一"
    assert issues[0].fix.replacement == "ー"


def test_normal_long_vowels_are_fine():
    assert pr.check_long_vowel_confusion("コーヒーとケーキ、らーめん", cfg("long-vowel-mark-confusion")) == []


# ---------------------------------------------------------------------------
# long-vowel-kana
# ---------------------------------------------------------------------------

def test_long_vowel_kana():
    issues = pr.check_long_vowel_kana("エラアが出た", cfg("long-vowel-kana"))
    assert len(issues) == 1
    assert issues[0].fix.replacement == "エラー"
    assert issues[0].severity == "error"


def test_long_vowel_kana_inside_longer_word_skipped():
    assert pr.check_long_vowel_kana("エラアトの話", cfg("long-vowel-kana")) == []


# ---------------------------------------------------------------------------
# sentence-length / comma-frequency / particle-no-repetition
# ---------------------------------------------------------------------------

def test_sentence_length_over_threshold():
    text = "あ" * 12 + "。短い。"
    issues = pr.check_sentence_length(text, cfg("sentence-length", options={"maxLength": 10}))
    assert len(issues) == 1
    assert (issues[0].from_, issues[0].to) == (0, 12)
    assert "12" in issues[0].message


def test_sentence_length_ignores_dialogue():
    text = "「" + "あ" * 12 + "」と言った。"
    assert pr.check_sentence_length(text, cfg("sentence-length", options={"maxLength": 10})) == []


def test_comma_frequency_too_many():
    issues = pr.check_comma_frequency("あい、うえ、おか、きく。", cfg("comma-frequency"))
    assert len(issues) == 1
    assert issues[0].to == 11


def test_comma_frequency_short_sentence_exempt():
    assert pr.check_comma_frequency("あ、い、う、え", cfg("comma-frequency")) == []


def test_comma_frequency_long_sentence_without_commas():
    assert len(pr.check_comma_frequency("あ" * 51, cfg("comma-frequency"))) == 1
    assert pr.check_comma_frequency("あ" * 50, cfg("comma-frequency")) == []


def test_particle_no_repetition():
    issues = pr.check_particle_no("私の兄の友達の車の色が好き。", cfg("particle-no-repetition"))
    assert len(issues) == 1
    assert "4回" in issues[0].message_ja


def test_count_particle_no_skips_demonstratives():
    assert pr.count_particle_no("この本のその話") == 1


# ---------------------------------------------------------------------------
# conjugation-errors
# ---------------------------------------------------------------------------

def test_ra_nuki():
    issues = pr.check_conjugation("朝早く起きれない。", cfg("conjugation-errors"))
    assert len(issues) == 1
    assert issues[0].original_text == "起きれない"
    assert issues[0].fix.replacement == "起きられない"
    assert issues[0].severity == "warning"


def test_sa_ire():
    issues = pr.check_conjugation("少し休まさせる", cfg("conjugation-errors"))
    assert issues[0].fix.replacement == "休ませる"


def test_i_nuki_is_info():
    issues = pr.check_conjugation("本を持ってる", cfg("conjugation-errors"))
    assert issues[0].fix.replacement == "持っている"
    assert issues[0].severity == "info"


def test_conjugation_in_dialogue_skipped():
    assert pr.check_conjugation("「もう見れない」", cfg("conjugation-errors")) == []


# ---------------------------------------------------------------------------
# redundant-expression / verbose-expression
# ---------------------------------------------------------------------------

def test_redundant_expression():
    issues = pr.check_redundant("朝から頭痛が痛い。", cfg("redundant-expression"))
    assert len(issues) == 1
    assert issues[0].fix.replacement == "頭が痛い"
    assert (issues[0].from_, issues[0].to) == (3, 8)


def test_verbose_expression_longest_match_wins():
    issues = pr.check_verbose("泳げないわけではない", cfg("verbose-expression"))
    assert [i.original_text for i in issues] == ["ないわけではない"]
    assert issues[0].fix.replacement == "ある"

    issues = pr.check_verbose("泳ぐことができないわけではない", cfg("verbose-expression"))
    assert [i.original_text for i in issues] == ["できないわけではない"]
    assert issues[0].fix.replacement == "できる"


def test_verbose_expression_in_order():
    issues = pr.check_verbose("会議においての話。参加することができる", cfg("verbose-expression"))
    assert [i.fix.replacement for i in issues] == ["で", "できる"]
    assert pr.check_verbose("泳ぐことができる", cfg("verbose-expression")) == []


# ---------------------------------------------------------------------------
# dialogue-punctuation
# ---------------------------------------------------------------------------

def test_nested_brackets_suggest_double():
    text = "「彼は「行く」と言った」"
    issues = pr.check_dialogue_punctuation(text, cfg("dialogue-punctuation"))
    assert len(issues) == 1
    assert (issues[0].from_, issues[0].to) == (3, 7)
    assert issues[0].fix.replacement == "『行く』"


def test_empty_brackets():
    issues = pr.check_dialogue_punctuation("「」", cfg("dialogue-punctuation"))
    assert len(issues) == 1
    assert (issues[0].from_, issues[0].to) == (0, 2)


def test_unmatched_brackets():
    issues = pr.check_dialogue_punctuation("「あ", cfg("dialogue-punctuation"))
    assert len(issues) == 1
    assert (issues[0].from_, issues[0].to) == (0, 2)
    assert "開き1個" in issues[0].message_ja


def test_every_pattern_rule_tolerates_empty_text():
    for rule in pr.RULES:
        assert rule.check("", rule.default_config) == []

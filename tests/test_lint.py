import pytest

from kousei.models.config import CorrectionConfig, IgnoredCorrection, RuleConfig
from kousei.models.issue import LintIssue
from kousei.services.cache import IssueCache, hash_string
from kousei.services.lint import Linter, apply_fix, filter_ignored, filter_min_severity, sort_key
from kousei.services.registry import PatternRule, RuleRegistry

DOC = [
    "令和5年（2022年）に施行。",
    "サーバーとサーバの違い",
    "頭痛が痛いので、朝から休まさせる。",
    "",
    "サーバーを使う。",
]


def _pattern(rule_id, check):
    return PatternRule(
        id=rule_id, name=rule_id, name_ja=rule_id, description_ja="",
        default_config=RuleConfig(), check=check,
    )


def _flag_first_char(text, config):
    if not text:
        return []
    return [LintIssue(rule_id="first-char", severity="warning", message="m", message_ja="m",
                      from_=0, to=1, original_text=text[0])]


def test_scenario_conjunction_run_through_linter(fake_tokenizer, scenario_text, scenario_tokens):
    linter = Linter(tokenizer=fake_tokenizer({scenario_text: scenario_tokens}))
    report = linter.lint([scenario_text])
    assert [i.rule_id for i in report.issues] == ["conjunction-overuse"]
    assert (report.issues[0].from_, report.issues[0].to) == (0, 20)
    assert report.diagnostics == []


def test_mode_can_disable_rules(fake_tokenizer, scenario_text, scenario_tokens):
    linter = Linter(tokenizer=fake_tokenizer({scenario_text: scenario_tokens}))
    assert linter.lint([scenario_text], CorrectionConfig(mode="sns")).issues == []


def test_lint_is_deterministic(fake_tokenizer):
    linter = Linter(tokenizer=fake_tokenizer())
    first = linter.lint(DOC)
    second = linter.lint(DOC)
    assert first.issues == second.issues
    assert first.issues


def test_offsets_are_valid_and_sorted(fake_tokenizer):
    report = Linter(tokenizer=fake_tokenizer()).lint(DOC)
    for issue in report.issues:
        text = DOC[issue.paragraph_index]
        assert 0 <= issue.from_ <= issue.to <= len(text)
        assert issue.original_text == text[issue.from_:issue.to]
    assert report.issues == sorted(report.issues, key=sort_key)
    rule_ids = {i.rule_id for i in report.issues}
    assert {"era-year-validator", "notation-consistency", "redundant-expression", "conjugation-errors"} <= rule_ids


def test_disabled_config_returns_nothing(fake_tokenizer):
    report = Linter(tokenizer=fake_tokenizer()).lint(DOC, CorrectionConfig(enabled=False))
    assert report.issues == []
    assert report.diagnostics == []


def test_faulty_rule_is_isolated():
    def boom(text, config):
        raise RuntimeError("bad regex")

    linter = Linter(registry=RuleRegistry([_pattern("boom", boom), _pattern("first-char", _flag_first_char)]))
    report = linter.lint(["あいう"])
    assert [i.rule_id for i in report.issues] == ["first-char"]
    assert [(d.kind, d.rule_id, d.paragraph_index) for d in report.diagnostics] == [("rule-fault", "boom", 0)]


def test_out_of_range_issue_dropped():
    def too_far(text, config):
        return [LintIssue(rule_id="far", severity="info", message="m", message_ja="m", from_=0, to=len(text) + 5)]

    report = Linter(registry=RuleRegistry([_pattern("far", too_far)])).lint(["短い"])
    assert report.issues == []
    assert report.diagnostics[0].kind == "invalid-range"


def test_tokenizer_failure_skips_token_rules(fake_tokenizer, scenario_text, scenario_tokens):
    tokenizer = fake_tokenizer({scenario_text: scenario_tokens}, fail=True)
    report = Linter(tokenizer=tokenizer).lint([scenario_text, "令和5年（2022年）に施行。"])
    assert [i.rule_id for i in report.issues] == ["era-year-validator"]
    kinds = [(d.kind, d.paragraph_index) for d in report.diagnostics]
    assert kinds == [("tokenizer-unavailable", 0), ("tokenizer-unavailable", 1)]
    # one attempt per paragraph per pass
    assert len(tokenizer.calls) == 2


def test_unexpected_tokenizer_error_is_not_fatal():
    class BrokenTokenizer:
        def tokenize(self, text):
            raise RuntimeError("mecab dictionary missing")

    report = Linter(tokenizer=BrokenTokenizer()).lint(["令和5年（2022年）に施行。"])
    assert [i.rule_id for i in report.issues] == ["era-year-validator"]
    assert [d.kind for d in report.diagnostics] == ["tokenizer-unavailable"]
    assert "mecab dictionary missing" in report.diagnostics[0].detail


def test_no_tokenizer_configured(scenario_text):
    report = Linter().lint([scenario_text])
    assert report.issues == []
    assert report.diagnostics[0].kind == "tokenizer-unavailable"


def test_guideline_gating(fake_tokenizer, make_tokens):
    text = "カレエを食べた"
    tokens = make_tokens(text, [("カレエ", "名詞"), ("を", "助詞"), ("食べ", "動詞"), ("た", "助動詞")])
    linter = Linter(tokenizer=fake_tokenizer({text: tokens}))

    assert linter.lint([text]).issues == []

    report = linter.lint([text], CorrectionConfig(guidelines={"jtf-style-3"}))
    assert [i.rule_id for i in report.issues] == ["katakana-chouon"]


def test_issue_cache_reuses_and_restamps():
    calls = []

    def counting(text, config):
        calls.append(text)
        return _flag_first_char(text, config)

    cache = IssueCache()
    linter = Linter(registry=RuleRegistry([_pattern("first-char", counting)]), issue_cache=cache)
    linter.lint(["あい", "かき"])
    report = linter.lint(["かき"])
    assert calls == ["あい", "かき"]
    assert report.issues[0].paragraph_index == 0
    assert report.issues[0].original_text == "か"


def test_degraded_results_are_not_cached():
    def boom(text, config):
        raise RuntimeError("flaky")

    cache = IssueCache()
    Linter(registry=RuleRegistry([_pattern("boom", boom)]), issue_cache=cache).lint(["あい"])
    assert len(cache) == 0


# ---------------------------------------------------------------------------
# filters and fixes
# ---------------------------------------------------------------------------

def _issue(rule_id="redundant-expression", index=0, text="頭痛が痛い", severity="warning"):
    return LintIssue(rule_id=rule_id, severity=severity, message="m", message_ja="m",
                     from_=0, to=len(text), paragraph_index=index, original_text=text)


def test_filter_ignored_global():
    issues = [_issue(index=0), _issue(index=1)]
    ignored = [IgnoredCorrection(rule_id="redundant-expression", text="頭痛が痛い")]
    assert filter_ignored(issues, ignored, ["頭痛が痛い", "頭痛が痛い"]) == []


def test_filter_ignored_in_context_only():
    paragraphs = ["頭痛が痛い", "頭痛が痛い。"]
    issues = [_issue(index=0), _issue(index=1)]
    ignored = [IgnoredCorrection(rule_id="redundant-expression", text="頭痛が痛い", context=hash_string(paragraphs[1]))]
    kept = filter_ignored(issues, ignored, paragraphs)
    assert [i.paragraph_index for i in kept] == [0]


def test_filter_ignored_other_rule_untouched():
    ignored = [IgnoredCorrection(rule_id="verbose-expression", text="頭痛が痛い")]
    assert len(filter_ignored([_issue()], ignored, ["頭痛が痛い"])) == 1


def test_filter_min_severity():
    issues = [_issue(severity="info"), _issue(severity="warning"), _issue(severity="error")]
    assert [i.severity for i in filter_min_severity(issues, "warning")] == ["warning", "error"]


def test_apply_fix(fake_tokenizer):
    text = "令和5年（2022年）に施行。"
    issue = Linter(tokenizer=fake_tokenizer()).lint([text]).issues[0]
    assert apply_fix(text, issue) == "令和5年（2023年）に施行。"


def test_apply_fix_rejects_stale_text(fake_tokenizer):
    text = "令和5年（2022年）に施行。"
    issue = Linter(tokenizer=fake_tokenizer()).lint([text]).issues[0]
    with pytest.raises(ValueError):
        apply_fix("平成5年（2022年）に施行。", issue)


def test_apply_fix_without_fix():
    with pytest.raises(ValueError):
        apply_fix("頭痛が痛い", _issue())

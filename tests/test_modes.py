import pytest

from kousei.models.config import (
    ChangeReason,
    CorrectionConfig,
    IgnoredCorrection,
    LlmSettings,
    RuleConfig,
    RuleOverride,
)
from kousei.services.modes import GUIDELINES, MODES, classify_change, resolve_rule_configs, with_mode
from kousei.services.registry import default_registry


@pytest.fixture(scope="module")
def registry():
    return default_registry()


def test_catalogs_are_complete():
    assert set(MODES) == {"novel", "official", "blog", "academic", "sns"}
    assert len(GUIDELINES) == 11
    for mode in MODES.values():
        assert set(mode.default_guidelines) <= set(GUIDELINES)
        assert mode.llm_prompt_style_ja


def test_every_rule_resolves(registry):
    configs = resolve_rule_configs(CorrectionConfig(), registry)
    assert set(configs) == {r.id for r in registry}


def test_mode_override_applies(registry):
    novel = resolve_rule_configs(CorrectionConfig(mode="novel"), registry)
    official = resolve_rule_configs(CorrectionConfig(mode="official"), registry)
    assert novel["desu-masu-consistency"].enabled is False
    assert official["desu-masu-consistency"].enabled is True
    assert official["taigen-dome-overuse"].enabled is False


def test_mode_override_keeps_unset_fields(registry):
    academic = resolve_rule_configs(CorrectionConfig(mode="academic"), registry)
    cfg = academic["taigen-dome-overuse"]
    assert cfg.severity == "warning"
    assert cfg.options == {"threshold": 4}
    assert cfg.skip_dialogue is True


def test_guideline_gating(registry):
    default = resolve_rule_configs(CorrectionConfig(), registry)
    assert default["dialogue-punctuation"].enabled is True
    assert default["katakana-chouon"].enabled is False
    assert default["wave-dash-unification"].enabled is False

    jtf = resolve_rule_configs(CorrectionConfig(guidelines={"jtf-style-3"}), registry)
    assert jtf["katakana-chouon"].enabled is True
    assert jtf["wave-dash-unification"].enabled is True
    assert jtf["dialogue-punctuation"].enabled is False


def test_user_override_wins(registry):
    config = CorrectionConfig(
        mode="sns",
        rule_overrides={
            "sentence-length": RuleOverride(enabled=True, options={"maxLength": 40}),
            "katakana-chouon": RuleOverride(enabled=True),
        },
    )
    configs = resolve_rule_configs(config, registry)
    assert configs["sentence-length"].enabled is True
    assert configs["sentence-length"].option("maxLength", 100) == 40
    assert configs["katakana-chouon"].enabled is True


def test_rule_override_merges_options():
    base = RuleConfig(options={"maxCommaRatio": 0.125, "minLengthForComma": 50})
    merged = RuleOverride(options={"minLengthForComma": 80}).apply(base)
    assert merged.options == {"maxCommaRatio": 0.125, "minLengthForComma": 80}
    assert merged.severity == base.severity


def test_with_mode_takes_default_guidelines():
    config = with_mode(CorrectionConfig(), "official")
    assert config.mode == "official"
    assert config.guidelines == set(MODES["official"].default_guidelines)


@pytest.mark.parametrize("update,expected", [
    ({}, None),
    ({"mode": "blog"}, ChangeReason.MODE_CHANGE),
    ({"guidelines": {"jtf-style-3"}}, ChangeReason.GUIDELINE_CHANGE),
    ({"rule_overrides": {"sentence-length": RuleOverride(enabled=False)}}, ChangeReason.RULE_CONFIG_CHANGE),
    ({"enabled": False}, ChangeReason.RULE_CONFIG_CHANGE),
    ({"llm": LlmSettings(model_id="other")}, ChangeReason.MODEL_CHANGE),
    ({"llm": LlmSettings(cooldown_ms=5_000)}, None),
    ({"llm": LlmSettings(validation_enabled=False)}, None),
    ({"ignored_corrections": [IgnoredCorrection(rule_id="r", text="t")]}, ChangeReason.IGNORED_CORRECTION),
    ({"mode": "blog", "llm": LlmSettings(model_id="other")}, ChangeReason.MODE_CHANGE),
    (
        {"rule_overrides": {"sentence-length": RuleOverride(enabled=False)}, "llm": LlmSettings(model_id="x")},
        ChangeReason.MANUAL_REFRESH,
    ),
])
def test_classify_change(update, expected):
    old = CorrectionConfig()
    new = old.model_copy(update=update)
    assert classify_change(old, new) is expected

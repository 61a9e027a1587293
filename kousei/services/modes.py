"""Correction modes, the guideline catalog, and effective rule configuration."""
from __future__ import annotations
from typing import Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict

from kousei.models.config import ChangeReason, CorrectionConfig, GuidelineId, ModeId, RuleConfig, RuleOverride
from kousei.services.registry import RuleRegistry


class CorrectionMode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: ModeId
    name_ja: str
    tone_ja: str
    description_ja: str
    default_guidelines: List[GuidelineId]
    rule_overrides: Dict[str, RuleOverride]
    llm_prompt_style_ja: str


class Guideline(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: GuidelineId
    name_ja: str
    publisher_ja: str
    year: Optional[int]
    license: Literal["Public", "Paid", "CC BY 4.0"]
    description_ja: str


MODES: Dict[str, CorrectionMode] = {
    "novel": CorrectionMode(
        id="novel",
        name_ja="小説",
        tone_ja="感性・具象・張力",
        description_ja="小説・フィクション向けの校正モード。文体の個性を尊重します。",
        default_guidelines=["novel-manuscript", "joyo-kanji-2010", "jis-x-4051"],
        rule_overrides={"desu-masu-consistency": RuleOverride(enabled=False)},
        llm_prompt_style_ja="小説の文体として自然な表現かどうかを判断してください。文学的な表現や倒置法は許容します。",
    ),
    "official": CorrectionMode(
        id="official",
        name_ja="公用文",
        tone_ja="厳粛・対等・標準化",
        description_ja="官公庁・公的機関の文書向けモード。内閣告示の各種基準に準拠します。",
        default_guidelines=["koyo-bun-2022", "joyo-kanji-2010", "okurigana-1973", "gairai-1991"],
        rule_overrides={"taigen-dome-overuse": RuleOverride(enabled=False)},
        llm_prompt_style_ja="公用文として適切な表現かどうかを判断してください。擬声語・個人的感情・倒置文は不適切とします。",
    ),
    "blog": CorrectionMode(
        id="blog",
        name_ja="ブログ",
        tone_ja="親切・共有感・半正式",
        description_ja="ウェブ記事・ブログ向けモード。読みやすさを重視します。",
        default_guidelines=["jtf-style-3", "joyo-kanji-2010"],
        rule_overrides={"sentence-length": RuleOverride(enabled=True)},
        llm_prompt_style_ja=(
            "ウェブ記事として読みやすく親しみやすい表現かどうかを判断してください。"
            "過度な堅苦しさや難解な語彙は避けてください。"
        ),
    ),
    "academic": CorrectionMode(
        id="academic",
        name_ja="学術",
        tone_ja="冷静・客観・構造化",
        description_ja="論文・学術文書向けモード。客観性と構造的な記述を重視します。",
        default_guidelines=["joyo-kanji-2010", "okurigana-1973", "jis-x-4051"],
        rule_overrides={"taigen-dome-overuse": RuleOverride(enabled=True, severity="warning")},
        llm_prompt_style_ja=(
            "学術論文として適切な客観的表現かどうかを判断してください。"
            "「私は」などの主観表現や修辞的隠喩は不適切とします。"
        ),
    ),
    "sns": CorrectionMode(
        id="sns",
        name_ja="SNS",
        tone_ja="簡潔・インパクト",
        description_ja="SNS・短文投稿向けモード。最も寛容な設定です。",
        default_guidelines=["joyo-kanji-2010"],
        rule_overrides={
            "sentence-length": RuleOverride(enabled=False),
            "taigen-dome-overuse": RuleOverride(enabled=False),
            "conjunction-overuse": RuleOverride(enabled=False),
        },
        llm_prompt_style_ja="SNSの短文として自然かどうかを判断してください。",
    ),
}


def _guideline(id, name_ja, publisher_ja, year, license, description_ja) -> Guideline:
    return Guideline(
        id=id, name_ja=name_ja, publisher_ja=publisher_ja, year=year, license=license, description_ja=description_ja
    )


GUIDELINES: Dict[str, Guideline] = {g.id: g for g in [
    _guideline("joyo-kanji-2010", "常用漢字表", "内閣告示", 2010, "Public", "日常的な文書に用いる漢字の標準表"),
    _guideline("okurigana-1973", "送り仮名の付け方", "内閣告示", 1973, "Public", "送り仮名の付け方に関する内閣告示"),
    _guideline("gairai-1991", "外来語の表記", "内閣告示", 1991, "Public", "外来語・外国語の日本語表記基準"),
    _guideline("gendai-kanazukai-1986", "現代仮名遣い", "内閣告示", 1986, "Public", "現代語の仮名遣いに関する基準"),
    _guideline("koyo-bun-2022", "公用文作成の考え方", "文化審議会", 2022, "Public", "官公庁の公文書作成に関する指針"),
    _guideline("jis-x-4051", "JIS X 4051 日本語組版", "JSA", 2004, "Paid", "日本語文書の組版に関するJIS規格"),
    _guideline("kisha-handbook-14", "記者ハンドブック 第14版", "共同通信社", 2022, "Paid", "新聞・報道向けの表記統一基準"),
    _guideline("jtf-style-3", "JTF日本語標準スタイルガイド", "日本翻訳連盟", 2019, "CC BY 4.0",
               "翻訳・ローカライズ向けの日本語スタイルガイド"),
    _guideline("jtca-style-3", "日本語スタイルガイド 第3版", "JTCA", 2016, "Paid", "テクニカルコミュニケーション向けスタイルガイド"),
    _guideline("editors-rulebook", "日本語表記ルールブック 第2版", "日本エディタースクール", 2012, "Paid",
               "編集・出版向けの日本語表記ルール集"),
    _guideline("novel-manuscript", "小説原稿作法", "慣習ベース", None, "Public", "小説・フィクション向けの慣用的な原稿作法"),
]}


def get_mode(mode_id: str) -> CorrectionMode:
    return MODES[mode_id]


def with_mode(config: CorrectionConfig, mode_id: ModeId) -> CorrectionConfig:
    """Switch modes, taking the new mode's default guidelines."""
    mode = MODES[mode_id]
    return config.model_copy(update={"mode": mode_id, "guidelines": set(mode.default_guidelines)})


def resolve_rule_configs(config: CorrectionConfig, registry: RuleRegistry) -> Dict[str, RuleConfig]:
    """Effective RuleConfig for every registered rule.

    Precedence, lowest first: rule default, mode override, guideline gating,
    user override. A rule tagged with guidelines is disabled unless one of
    them is active; an explicit user override can still turn it back on.
    """
    mode = MODES[config.mode]
    active: Set[str] = set(config.guidelines)
    resolved = {}
    for rule in registry:
        cfg = rule.default_config
        if rule.id in mode.rule_overrides:
            cfg = mode.rule_overrides[rule.id].apply(cfg)
        if rule.guidelines and not (rule.guidelines & active):
            cfg = cfg.model_copy(update={"enabled": False})
        if rule.id in config.rule_overrides:
            cfg = config.rule_overrides[rule.id].apply(cfg)
        resolved[rule.id] = cfg
    return resolved


def classify_change(old: CorrectionConfig, new: CorrectionConfig) -> Optional[ChangeReason]:
    """Single reason whose cache drops cover every difference between two configs.

    Returns None when nothing that affects a lint pass changed.
    """
    reasons = []
    if old.mode != new.mode:
        reasons.append(ChangeReason.MODE_CHANGE)
    if set(old.guidelines) != set(new.guidelines):
        reasons.append(ChangeReason.GUIDELINE_CHANGE)
    if old.rule_overrides != new.rule_overrides or old.enabled != new.enabled:
        reasons.append(ChangeReason.RULE_CONFIG_CHANGE)
    if old.llm.model_id != new.llm.model_id:
        reasons.append(ChangeReason.MODEL_CHANGE)
    if old.ignored_corrections != new.ignored_corrections:
        reasons.append(ChangeReason.IGNORED_CORRECTION)

    if not reasons:
        return None
    if len(reasons) == 1:
        return reasons[0]
    # reasons are listed strongest first; a rule change plus a model change
    # needs both caches dropped, which only the strongest reasons do
    if reasons[0] in (ChangeReason.MODE_CHANGE, ChangeReason.GUIDELINE_CHANGE):
        return reasons[0]
    if ChangeReason.RULE_CONFIG_CHANGE in reasons and ChangeReason.MODEL_CHANGE in reasons:
        return ChangeReason.MANUAL_REFRESH
    return reasons[0]

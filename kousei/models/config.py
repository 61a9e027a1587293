from __future__ import annotations
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Set

from pydantic import BaseModel, ConfigDict, Field

from kousei.models.issue import Severity

ModeId = Literal["novel", "official", "blog", "academic", "sns"]

GuidelineId = Literal[
    "joyo-kanji-2010",
    "okurigana-1973",
    "gairai-1991",
    "gendai-kanazukai-1986",
    "koyo-bun-2022",
    "jis-x-4051",
    "kisha-handbook-14",
    "jtf-style-3",
    "jtca-style-3",
    "editors-rulebook",
    "novel-manuscript",
]


class ChangeReason(str, Enum):
    """Why the configuration (or text) changed; decides which caches survive."""
    TEXT_EDIT = "text-edit"
    RULE_CONFIG_CHANGE = "rule-config-change"
    MODE_CHANGE = "mode-change"
    GUIDELINE_CHANGE = "guideline-change"
    MODEL_CHANGE = "model-change"
    IGNORED_CORRECTION = "ignored-correction"
    MANUAL_REFRESH = "manual-refresh"


class RuleConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    severity: Severity = "warning"
    skip_dialogue: bool = False  # mask 「」『』 before matching
    skip_llm_validation: bool = False  # never send this rule's issues for a second opinion
    options: Dict[str, Any] = Field(default_factory=dict)

    def option(self, name: str, default: Any) -> Any:
        value = self.options.get(name)
        return default if value is None else value


class RuleOverride(BaseModel):
    """Partial RuleConfig: only the fields that are set are applied."""
    model_config = ConfigDict(frozen=True)

    enabled: Optional[bool] = None
    severity: Optional[Severity] = None
    skip_dialogue: Optional[bool] = None
    skip_llm_validation: Optional[bool] = None
    options: Optional[Dict[str, Any]] = None

    def apply(self, base: RuleConfig) -> RuleConfig:
        update = self.model_dump(exclude_none=True, exclude={"options"})
        if self.options:
            update["options"] = {**base.options, **self.options}
        return base.model_copy(update=update)


class LlmSettings(BaseModel):
    model_config = ConfigDict(frozen=True, protected_namespaces=())

    model_id: str = ""
    cooldown_ms: int = Field(default=60_000, ge=0)
    validation_enabled: bool = True


class IgnoredCorrection(BaseModel):
    model_config = ConfigDict(frozen=True)

    rule_id: str
    text: str
    context: Optional[str] = None  # paragraph hash; None ignores everywhere
    added_at: int = 0


class CorrectionConfig(BaseModel):
    """Single source of truth for what runs during a lint pass."""
    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    mode: ModeId = "novel"
    guidelines: Set[GuidelineId] = Field(
        default_factory=lambda: {"joyo-kanji-2010", "novel-manuscript"}
    )
    rule_overrides: Dict[str, RuleOverride] = Field(default_factory=dict)
    llm: LlmSettings = Field(default_factory=LlmSettings)
    ignored_corrections: List[IgnoredCorrection] = Field(default_factory=list)


DEFAULT_CORRECTION_CONFIG = CorrectionConfig()

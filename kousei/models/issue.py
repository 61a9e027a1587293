from __future__ import annotations
from enum import Enum
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

Severity = Literal["error", "warning", "info"]


class LintReference(BaseModel):
    model_config = ConfigDict(frozen=True)

    standard: str
    section: Optional[str] = None
    url: Optional[str] = None


class LintFix(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    label_ja: str
    replacement: str


class LintIssue(BaseModel):
    """One finding of one rule over one paragraph.

    ``from_``/``to`` are a half-open range into the paragraph text the issue
    was found in (``paragraph_index``), never into the joined document.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    rule_id: str
    severity: Severity
    message: str
    message_ja: str
    from_: int = Field(alias="from", ge=0)
    to: int = Field(ge=0)
    paragraph_index: int = 0
    original_text: Optional[str] = None
    reference: Optional[LintReference] = None
    fix: Optional[LintFix] = None

    @model_validator(mode="after")
    def _check_range(self) -> "LintIssue":
        if self.to < self.from_:
            raise ValueError(f"issue range is inverted: [{self.from_}, {self.to})")
        return self


class ValidatableIssue(BaseModel):
    """An issue together with the full paragraph text it was found in."""
    model_config = ConfigDict(frozen=True)

    issue: LintIssue
    paragraph_text: str


class Verdict(str, Enum):
    CONFIRMED = "confirmed"
    DISMISSED = "dismissed"
    UNVALIDATED = "unvalidated"  # validation skipped or failed, issue is kept

    @property
    def keeps_issue(self) -> bool:
        return self is not Verdict.DISMISSED


class Diagnostic(BaseModel):
    """Soft failure recorded during a lint pass; never shown as a lint issue."""
    kind: Literal["rule-fault", "tokenizer-unavailable", "invalid-range"]
    rule_id: Optional[str] = None
    paragraph_index: Optional[int] = None
    detail: str = ""


class LintReport(BaseModel):
    issues: list[LintIssue]
    diagnostics: list[Diagnostic] = Field(default_factory=list)

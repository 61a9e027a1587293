from pydantic import BaseModel, ConfigDict, Field
from typing import Dict, List, Optional

from kousei.models.config import CorrectionConfig, ModeId
from kousei.models.issue import Diagnostic, LintIssue, Severity, ValidatableIssue, Verdict


class LintRequest(BaseModel):
    paragraphs: List[str]
    config: CorrectionConfig = Field(default_factory=CorrectionConfig)
    validate_issues: bool = False  # run the LLM second opinion before returning
    min_severity: Optional[Severity] = None


class LintResponse(BaseModel):
    issues: List[LintIssue]
    diagnostics: List[Diagnostic] = Field(default_factory=list)
    validated: bool = False


class ValidateRequest(BaseModel):
    model_config = ConfigDict(protected_namespaces=())

    items: List[ValidatableIssue]
    mode: ModeId = "novel"
    model_id: str = ""


class ValidateResponse(BaseModel):
    verdicts: Dict[str, Verdict]
    kept: List[LintIssue]


class RuleInfo(BaseModel):
    id: str
    kind: str
    name: str
    name_ja: str
    description_ja: str
    guidelines: List[str]
    default_config: dict

from fastapi import APIRouter, Request

from kousei.models.issue import ValidatableIssue
from kousei.models.report import LintRequest, LintResponse, ValidateRequest, ValidateResponse
from kousei.services.lint import filter_ignored, filter_min_severity
from kousei.services.modes import MODES, resolve_rule_configs
from kousei.services.validate import apply_verdicts, select_for_validation

router = APIRouter(tags=["lint"])


@router.post("/lint")
async def lint(body: LintRequest, request: Request):
    linter = request.app.state.linter
    validators = request.app.state.validators

    report = linter.lint(body.paragraphs, body.config)
    issues = filter_ignored(report.issues, body.config.ignored_corrections, body.paragraphs)
    if body.min_severity is not None:
        issues = filter_min_severity(issues, body.min_severity)

    validated = False
    if body.validate_issues and body.config.llm.validation_enabled and validators is not None and issues:
        validator = validators.get(body.config.mode, body.config.llm.model_id)
        items = [ValidatableIssue(issue=i, paragraph_text=body.paragraphs[i.paragraph_index]) for i in issues]
        to_check = select_for_validation(items, resolve_rule_configs(body.config, linter.registry))
        verdicts = await validator.validate(to_check, style_hint=MODES[body.config.mode].llm_prompt_style_ja)
        issues = apply_verdicts(items, verdicts)
        validated = True

    return LintResponse(issues=issues, diagnostics=report.diagnostics, validated=validated).model_dump(by_alias=True)


@router.post("/validate")
async def validate(body: ValidateRequest, request: Request):
    validators = request.app.state.validators
    if validators is None:
        verdicts = {}
    else:
        validator = validators.get(body.mode, body.model_id)
        verdicts = await validator.validate(body.items, style_hint=MODES[body.mode].llm_prompt_style_ja)
    kept = apply_verdicts(body.items, verdicts)
    return ValidateResponse(verdicts=verdicts, kept=kept).model_dump(by_alias=True, mode="json")

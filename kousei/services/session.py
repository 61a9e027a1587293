"""One editing session: paragraphs, caches, linter and validator wired together."""
from __future__ import annotations
import asyncio
import logging
from typing import List, Optional, Sequence

from kousei.core.config import VALIDATION_CONCURRENCY
from kousei.models.config import DEFAULT_CORRECTION_CONFIG, ChangeReason, CorrectionConfig
from kousei.models.issue import LintIssue, LintReport, ValidatableIssue
from kousei.services.cache import IssueCache, ParagraphStore, VerdictCache, invalidate
from kousei.services.lint import Linter, filter_ignored
from kousei.services.llm import InferenceClient, LlmController, OpenAIInferenceClient
from kousei.services.modes import MODES, classify_change, resolve_rule_configs
from kousei.services.registry import RuleRegistry
from kousei.services.tokenize import Tokenizer
from kousei.services.validate import LintIssueValidator, apply_verdicts, select_for_validation

log = logging.getLogger("session")


class LintSession:
    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        tokenizer: Optional[Tokenizer] = None,
        client: Optional[InferenceClient] = None,
        config: CorrectionConfig = DEFAULT_CORRECTION_CONFIG,
        concurrency_limit: int = VALIDATION_CONCURRENCY,
    ):
        self.store = ParagraphStore()
        self.issue_cache = IssueCache()
        self.verdict_cache = VerdictCache()
        self.linter = Linter(registry, tokenizer, self.issue_cache)
        self.validator = (
            LintIssueValidator(client, self.verdict_cache, concurrency_limit) if client is not None else None
        )
        self.controller = (
            LlmController(client, config.llm.model_id, config.llm.cooldown_ms) if client is not None else None
        )
        self.config = config
        self._use_model(config.llm.model_id)

    # -- text ---------------------------------------------------------------

    def set_text(self, paragraphs: Sequence[str]) -> List[int]:
        """Load the whole document; only paragraphs whose text changed are re-linted."""
        old = list(self.store.texts)
        changed = self.store.replace_all(paragraphs)
        # text-keyed entries stay valid while the text is still somewhere in the document
        current = set(self.store.texts)
        stale = [text for text in set(old) if text not in current]
        invalidate(ChangeReason.TEXT_EDIT, self.issue_cache, self.verdict_cache, stale)
        return changed

    def edit_paragraph(self, index: int, text: str) -> bool:
        old = self.store[index].text
        if not self.store.edit(index, text):
            return False
        invalidate(ChangeReason.TEXT_EDIT, self.issue_cache, self.verdict_cache, [old])
        return True

    # -- configuration --------------------------------------------------------

    def update_config(self, config: CorrectionConfig, reason: Optional[ChangeReason] = None) -> Optional[ChangeReason]:
        """Swap configuration and drop exactly the caches the change invalidates."""
        reason = reason or classify_change(self.config, config)
        model_changed = self.config.llm.model_id != config.llm.model_id
        self.config = config
        if self.controller is not None:
            self.controller.cooldown_ms = config.llm.cooldown_ms
        if model_changed:
            self._use_model(config.llm.model_id)
        if reason is None:
            return None
        invalidate(reason, self.issue_cache, self.verdict_cache)
        log.info("config updated reason=%s", reason.value)
        return reason

    def refresh(self) -> None:
        invalidate(ChangeReason.MANUAL_REFRESH, self.issue_cache, self.verdict_cache)

    def _use_model(self, model_id: str) -> None:
        if self.controller is not None:
            self.controller.model_id = model_id
        if model_id and self.validator is not None and isinstance(self.validator.client, OpenAIInferenceClient):
            self.validator.client.model = model_id

    # -- passes ---------------------------------------------------------------

    def lint(self) -> LintReport:
        texts = self.store.texts
        report = self.linter.lint(texts, self.config)
        issues = filter_ignored(report.issues, self.config.ignored_corrections, texts)
        return LintReport(issues=issues, diagnostics=report.diagnostics)

    async def lint_and_validate(self, cancel: Optional[asyncio.Event] = None) -> List[LintIssue]:
        report = self.lint()
        if self.validator is None or not self.config.llm.validation_enabled or not report.issues:
            return report.issues
        texts = self.store.texts
        items = [ValidatableIssue(issue=i, paragraph_text=texts[i.paragraph_index]) for i in report.issues]
        to_check = select_for_validation(items, resolve_rule_configs(self.config, self.linter.registry))
        style_hint = MODES[self.config.mode].llm_prompt_style_ja
        verdicts = await self.controller.request_validation(
            lambda: self.validator.validate(to_check, cancel=cancel, style_hint=style_hint)
        )
        return apply_verdicts(items, verdicts)

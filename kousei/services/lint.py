"""Document linting orchestrator.

Runs every enabled rule at its granularity and returns one deterministically
ordered issue list. A faulty rule or an unavailable tokenizer degrades the
pass (recorded as diagnostics) but never aborts it.
"""
from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from kousei.core.config import SEVERITY_RANK
from kousei.models.config import DEFAULT_CORRECTION_CONFIG, CorrectionConfig, IgnoredCorrection, RuleConfig
from kousei.models.issue import Diagnostic, LintIssue, LintReport, Severity
from kousei.models.token import Token
from kousei.services.cache import IssueCache, hash_string
from kousei.services.modes import resolve_rule_configs
from kousei.services.registry import (
    Paragraph,
    RuleKind,
    RuleRegistry,
    TokenizedParagraph,
    default_registry,
    run_document,
    run_pattern,
    run_token,
    run_token_document,
)
from kousei.services.tokenize import Tokenizer

log = logging.getLogger("lint")


def sort_key(issue: LintIssue) -> Tuple[int, int, int, str]:
    return (issue.paragraph_index, issue.from_, issue.to, issue.rule_id)


class Linter:
    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        tokenizer: Optional[Tokenizer] = None,
        issue_cache: Optional[IssueCache] = None,
    ):
        self.registry = registry or default_registry()
        self.tokenizer = tokenizer
        self.issue_cache = issue_cache

    def lint(self, paragraphs: Sequence[str], config: CorrectionConfig = DEFAULT_CORRECTION_CONFIG) -> LintReport:
        if not config.enabled:
            return LintReport(issues=[])

        configs = resolve_rule_configs(config, self.registry)
        enabled = [r for r in self.registry if configs[r.id].enabled]
        per_paragraph = [r for r in enabled if r.kind in (RuleKind.PATTERN, RuleKind.TOKEN)]
        documentwide = [r for r in enabled if r.kind in (RuleKind.DOCUMENT, RuleKind.TOKEN_DOCUMENT)]

        diagnostics: List[Diagnostic] = []
        tokens: Dict[int, Optional[Sequence[Token]]] = {}

        def tokens_for(index: int) -> Optional[Sequence[Token]]:
            # at most one tokenizer call per paragraph per pass
            if index not in tokens:
                tokens[index] = self._tokenize(index, paragraphs[index], diagnostics)
            return tokens[index]

        issues: List[LintIssue] = []
        for index, text in enumerate(paragraphs):
            issues.extend(self._lint_paragraph(index, text, per_paragraph, configs, tokens_for, diagnostics))

        texts = dict(enumerate(paragraphs))
        plain = [Paragraph(i, t) for i, t in texts.items()]
        for rule in documentwide:
            cfg = configs[rule.id]
            if rule.kind is RuleKind.DOCUMENT:
                found = self._guard(rule.id, None, diagnostics, run_document, rule, plain, cfg)
            else:
                tokenized = [
                    TokenizedParagraph(p.index, p.text, toks)
                    for p in plain
                    if (toks := tokens_for(p.index)) is not None
                ]
                found = self._guard(rule.id, None, diagnostics, run_token_document, rule, tokenized, cfg)
            issues.extend(self._in_range(found, texts, diagnostics))

        issues.sort(key=sort_key)
        log.info(
            "lint paragraphs=%d rules=%d issues=%d diagnostics=%d",
            len(paragraphs), len(enabled), len(issues), len(diagnostics),
        )
        return LintReport(issues=issues, diagnostics=diagnostics)

    def _lint_paragraph(self, index, text, rules, configs, tokens_for, diagnostics) -> List[LintIssue]:
        if self.issue_cache is not None:
            cached = self.issue_cache.get(text)
            if cached is not None:
                return [i if i.paragraph_index == index else i.model_copy(update={"paragraph_index": index})
                        for i in cached]

        faults_before = len(diagnostics)
        found: List[LintIssue] = []
        for rule in rules:
            cfg = configs[rule.id]
            if rule.kind is RuleKind.PATTERN:
                found.extend(self._guard(rule.id, index, diagnostics, run_pattern, rule, Paragraph(index, text), cfg))
                continue
            toks = tokens_for(index)
            if toks is None:
                continue
            found.extend(self._guard(
                rule.id, index, diagnostics, run_token, rule, TokenizedParagraph(index, text, toks), cfg
            ))
        found = self._in_range(found, {index: text}, diagnostics)

        # a degraded result must not outlive this pass
        if self.issue_cache is not None and len(diagnostics) == faults_before:
            self.issue_cache.put(text, tuple(found))
        return found

    def _tokenize(self, index: int, text: str, diagnostics: List[Diagnostic]) -> Optional[Sequence[Token]]:
        if not text:
            return []
        if self.tokenizer is None:
            diagnostics.append(Diagnostic(kind="tokenizer-unavailable", paragraph_index=index,
                                          detail="no tokenizer configured"))
            return None
        try:
            return self.tokenizer.tokenize(text)
        except Exception as e:
            log.warning("tokenizer unavailable for paragraph %d: %r", index, e)
            diagnostics.append(Diagnostic(kind="tokenizer-unavailable", paragraph_index=index, detail=repr(e)))
            return None

    @staticmethod
    def _guard(rule_id, index, diagnostics, run, rule, arg, cfg: RuleConfig) -> List[LintIssue]:
        try:
            return run(rule, arg, cfg)
        except Exception as e:
            log.warning("rule %s failed (paragraph=%s): %r", rule_id, index, e)
            diagnostics.append(Diagnostic(kind="rule-fault", rule_id=rule_id, paragraph_index=index, detail=repr(e)))
            return []

    @staticmethod
    def _in_range(issues: Iterable[LintIssue], texts: Dict[int, str], diagnostics) -> List[LintIssue]:
        kept = []
        for issue in issues:
            i = issue.paragraph_index
            if i in texts and issue.to <= len(texts[i]):
                kept.append(issue)
                continue
            log.warning("dropping out-of-range issue from %s: paragraph=%d [%d, %d)",
                        issue.rule_id, i, issue.from_, issue.to)
            diagnostics.append(Diagnostic(
                kind="invalid-range", rule_id=issue.rule_id, paragraph_index=i,
                detail=f"[{issue.from_}, {issue.to})",
            ))
        return kept


def filter_ignored(
    issues: Sequence[LintIssue], ignored: Sequence[IgnoredCorrection], paragraphs: Sequence[str]
) -> List[LintIssue]:
    """Drop issues the author has dismissed.

    A global ignore matches rule id plus flagged text anywhere; a context
    ignore also requires the paragraph's hash to match.
    """
    if not ignored:
        return list(issues)
    hashes: Dict[int, str] = {}

    def paragraph_hash(i: int) -> str:
        if i not in hashes:
            hashes[i] = hash_string(paragraphs[i]) if 0 <= i < len(paragraphs) else ""
        return hashes[i]

    def is_ignored(issue: LintIssue) -> bool:
        for ig in ignored:
            if ig.rule_id != issue.rule_id or ig.text != issue.original_text:
                continue
            if ig.context is None or ig.context == paragraph_hash(issue.paragraph_index):
                return True
        return False

    return [i for i in issues if not is_ignored(i)]


def filter_min_severity(issues: Sequence[LintIssue], min_severity: Severity) -> List[LintIssue]:
    floor = SEVERITY_RANK[min_severity]
    return [i for i in issues if SEVERITY_RANK[i.severity] >= floor]


def apply_fix(text: str, issue: LintIssue) -> str:
    """Apply ``issue.fix`` to the paragraph it was found in.

    Raises ValueError when the issue has no fix or the text under the span no
    longer matches what was flagged.
    """
    if issue.fix is None:
        raise ValueError(f"issue from {issue.rule_id} has no fix")
    if issue.to > len(text):
        raise ValueError("issue range is past the end of the text")
    if issue.original_text is not None and text[issue.from_:issue.to] != issue.original_text:
        raise ValueError("text changed since the issue was reported")
    return text[:issue.from_] + issue.fix.replacement + text[issue.to:]

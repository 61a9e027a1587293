"""Second-opinion validation of lint issues by a language model.

Every failure path is fail-open: an issue that could not be judged is kept
(``Verdict.UNVALIDATED``), never dropped.
"""
from __future__ import annotations
import asyncio
import json
import logging
import re
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from kousei.core.config import (
    VALIDATION_CONCURRENCY,
    VALIDATION_CONTEXT_CHARS,
    VALIDATION_MAX_TOKENS,
    VALIDATOR_POOL_SIZE,
)
from kousei.core.errors import InferenceCancelled
from kousei.models.config import RuleConfig
from kousei.models.issue import LintIssue, ValidatableIssue, Verdict
from kousei.services.cache import LRUCache, VerdictCache, issue_key
from kousei.services.llm import InferenceClient

log = logging.getLogger("validate")

# first flat {...} block, to be resilient to any prefacing text
_JSON_BLOCK = re.compile(r"\{[^{}]*\}", re.DOTALL)


def build_prompt(item: ValidatableIssue, style_hint: str = "", context_chars: int = VALIDATION_CONTEXT_CHARS) -> str:
    issue, text = item.issue, item.paragraph_text
    before = text[max(0, issue.from_ - context_chars):issue.from_]
    flagged = text[issue.from_:issue.to]
    after = text[issue.to:issue.to + context_chars]
    lines = [
        "あなたは日本語校正の専門家です。次の指摘が妥当かどうかを判断してください。",
    ]
    if style_hint:
        lines.append(style_hint)
    lines += [
        "",
        "## 文脈（<<>>が指摘箇所）",
        f"{before}<<{flagged}>>{after}",
        "",
        "## 指摘",
        f"対象: 「{flagged}」",
        f"ルールID: {issue.rule_id}",
        f"内容: {issue.message_ja}",
        "",
        '指摘が正しければ {"valid": true}、誤検出であれば {"valid": false} とだけJSONで答えてください。',
    ]
    return "\n".join(lines)


def parse_verdict(text: str) -> Verdict:
    """CONFIRMED/DISMISSED from a ``{"valid": bool}`` payload; anything else is UNVALIDATED."""
    if not isinstance(text, str):
        return Verdict.UNVALIDATED
    candidates = [text.strip()]
    m = _JSON_BLOCK.search(text)
    if m:
        candidates.append(m.group(0))
    for candidate in candidates:
        try:
            data = json.loads(candidate)
        except (ValueError, RecursionError):
            continue
        if isinstance(data, dict) and isinstance(data.get("valid"), bool):
            return Verdict.CONFIRMED if data["valid"] else Verdict.DISMISSED
    return Verdict.UNVALIDATED


def select_for_validation(
    items: Sequence[ValidatableIssue], configs: Mapping[str, RuleConfig]
) -> List[ValidatableIssue]:
    """Items whose rule allows a second opinion."""
    return [
        it for it in items
        if not (it.issue.rule_id in configs and configs[it.issue.rule_id].skip_llm_validation)
    ]


def apply_verdicts(items: Sequence[ValidatableIssue], verdicts: Mapping[str, Verdict]) -> List[LintIssue]:
    """Drop issues judged false positives; everything else is kept."""
    return [
        it.issue for it in items
        if verdicts.get(issue_key(it.issue, it.paragraph_text), Verdict.UNVALIDATED).keeps_issue
    ]


class LintIssueValidator:
    def __init__(
        self,
        client: InferenceClient,
        cache: Optional[VerdictCache] = None,
        concurrency_limit: int = VALIDATION_CONCURRENCY,
        context_chars: int = VALIDATION_CONTEXT_CHARS,
        max_tokens: int = VALIDATION_MAX_TOKENS,
    ):
        if concurrency_limit < 1:
            raise ValueError("concurrency_limit must be at least 1")
        self.client = client
        self.cache = cache if cache is not None else VerdictCache()
        self.concurrency_limit = concurrency_limit
        self.context_chars = context_chars
        self.max_tokens = max_tokens

    async def validate(
        self,
        items: Sequence[ValidatableIssue],
        *,
        cancel: Optional[asyncio.Event] = None,
        style_hint: str = "",
    ) -> Dict[str, Verdict]:
        """Verdict per issue key. Arrival order is not preserved; every key gets one."""
        verdicts: Dict[str, Verdict] = {}
        pending: Dict[str, ValidatableIssue] = {}
        for item in items:
            key = issue_key(item.issue, item.paragraph_text)
            if key in verdicts or key in pending:
                continue
            cached = self.cache.get(key)
            if cached is not None:
                verdicts[key] = cached
            else:
                pending[key] = item

        if not pending:
            return verdicts
        for key in pending:
            verdicts[key] = Verdict.UNVALIDATED
        if cancel is not None and cancel.is_set():
            return verdicts
        if not await self._ready():
            log.info("LLM validation skipped: inference unavailable (%d issues kept)", len(pending))
            return verdicts

        sem = asyncio.Semaphore(self.concurrency_limit)

        async def run(key: str, item: ValidatableIssue):
            verdicts[key] = await self._validate_one(sem, item, key, cancel, style_hint)

        await asyncio.gather(*(run(k, it) for k, it in pending.items()))
        log.info(
            "LLM validation: %d sent, %d dismissed, %d unvalidated",
            len(pending),
            sum(1 for k in pending if verdicts[k] is Verdict.DISMISSED),
            sum(1 for k in pending if verdicts[k] is Verdict.UNVALIDATED),
        )
        return verdicts

    async def _ready(self) -> bool:
        try:
            return self.client.is_available() and await self.client.is_model_loaded()
        except Exception as e:
            log.warning("LLM availability probe failed: %s", e)
            return False

    async def _validate_one(self, sem, item, key, cancel, style_hint) -> Verdict:
        async with sem:
            # nothing new is admitted once cancellation is requested
            if cancel is not None and cancel.is_set():
                return Verdict.UNVALIDATED
            prompt = build_prompt(item, style_hint, self.context_chars)
            log.debug("validate %s prompt=%r", key, prompt)
            try:
                result = await self.client.infer(prompt, max_tokens=self.max_tokens, cancel=cancel)
                log.debug("validate %s response=%.200r", key, result.text)
                verdict = parse_verdict(result.text)
            except InferenceCancelled:
                return Verdict.UNVALIDATED
            except Exception as e:
                log.warning("LLM validation failed for %s: %s", key, e)
                return Verdict.UNVALIDATED
        if verdict is Verdict.UNVALIDATED:
            log.warning("unparsable LLM verdict for %s: %.80r", key, result.text)
        self.cache.put(key, verdict)
        return verdict


class ValidatorPool:
    """Validators for a host serving many configurations at once.

    Verdicts depend on the mode's style hint and on the model, so each
    (mode, model_id) pair gets its own validator and verdict cache. Clients
    are shared per model.
    """

    def __init__(
        self,
        client_factory: Callable[[str], InferenceClient],
        concurrency_limit: int = VALIDATION_CONCURRENCY,
        maxsize: int = VALIDATOR_POOL_SIZE,
    ):
        self.client_factory = client_factory
        self.concurrency_limit = concurrency_limit
        self._clients: LRUCache[str, InferenceClient] = LRUCache(maxsize)
        self._validators: LRUCache[Tuple[str, str], LintIssueValidator] = LRUCache(maxsize)

    def get(self, mode: str, model_id: str = "") -> LintIssueValidator:
        validator = self._validators.get((mode, model_id))
        if validator is None:
            client = self._clients.get(model_id)
            if client is None:
                client = self.client_factory(model_id)
                self._clients.put(model_id, client)
            validator = LintIssueValidator(client, concurrency_limit=self.concurrency_limit)
            self._validators.put((mode, model_id), validator)
            log.debug("new validator mode=%s model=%s", mode, model_id or "<default>")
        return validator

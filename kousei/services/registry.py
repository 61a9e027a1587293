"""Rule model and registry.

A rule is one of four frozen dataclasses, one per input shape. The shape is
a closed set: the orchestrator dispatches on it and nothing else.
"""
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Dict, FrozenSet, Iterable, Iterator, List, Sequence, Union

from kousei.models.config import RuleConfig
from kousei.models.issue import LintIssue
from kousei.models.token import Token


class RuleKind(str, Enum):
    PATTERN = "pattern"
    TOKEN = "token"
    DOCUMENT = "document"
    TOKEN_DOCUMENT = "token-document"


@dataclass(frozen=True)
class Paragraph:
    index: int
    text: str


@dataclass(frozen=True)
class TokenizedParagraph:
    index: int
    text: str
    tokens: Sequence[Token]


@dataclass(frozen=True)
class _RuleBase:
    id: str
    name: str
    name_ja: str
    description_ja: str
    default_config: RuleConfig
    check: Callable[..., List[LintIssue]]
    # a rule with guidelines only runs when one of them is active
    guidelines: FrozenSet[str] = frozenset()


@dataclass(frozen=True)
class PatternRule(_RuleBase):
    """check(text, config) over one paragraph's raw text."""
    kind: ClassVar[RuleKind] = RuleKind.PATTERN


@dataclass(frozen=True)
class TokenRule(_RuleBase):
    """check(text, tokens, config) over one paragraph and its tokens."""
    kind: ClassVar[RuleKind] = RuleKind.TOKEN


@dataclass(frozen=True)
class DocumentRule(_RuleBase):
    """check(paragraphs, config) over every paragraph at once."""
    kind: ClassVar[RuleKind] = RuleKind.DOCUMENT


@dataclass(frozen=True)
class TokenDocumentRule(_RuleBase):
    """check(tokenized_paragraphs, config) over every paragraph with tokens."""
    kind: ClassVar[RuleKind] = RuleKind.TOKEN_DOCUMENT


Rule = Union[PatternRule, TokenRule, DocumentRule, TokenDocumentRule]

PER_PARAGRAPH_KINDS = frozenset({RuleKind.PATTERN, RuleKind.TOKEN})
TOKEN_KINDS = frozenset({RuleKind.TOKEN, RuleKind.TOKEN_DOCUMENT})


# one dispatcher per kind; each stamps the paragraph index on per-paragraph issues

def run_pattern(rule: PatternRule, paragraph: Paragraph, config: RuleConfig) -> List[LintIssue]:
    issues = rule.check(paragraph.text, config)
    return [_at(i, paragraph.index) for i in issues]


def run_token(rule: TokenRule, paragraph: TokenizedParagraph, config: RuleConfig) -> List[LintIssue]:
    issues = rule.check(paragraph.text, paragraph.tokens, config)
    return [_at(i, paragraph.index) for i in issues]


def run_document(rule: DocumentRule, paragraphs: Sequence[Paragraph], config: RuleConfig) -> List[LintIssue]:
    return list(rule.check(paragraphs, config))


def run_token_document(
    rule: TokenDocumentRule, paragraphs: Sequence[TokenizedParagraph], config: RuleConfig
) -> List[LintIssue]:
    return list(rule.check(paragraphs, config))


def _at(issue: LintIssue, index: int) -> LintIssue:
    if issue.paragraph_index == index:
        return issue
    return issue.model_copy(update={"paragraph_index": index})


class RuleRegistry:
    """Flat, ordered collection of rules with unique ids."""

    def __init__(self, rules: Iterable[Rule] = ()):
        self._rules: Dict[str, Rule] = {}
        for rule in rules:
            self.register(rule)

    def register(self, rule: Rule) -> None:
        if rule.id in self._rules:
            raise ValueError(f"duplicate rule id: {rule.id}")
        self._rules[rule.id] = rule

    def get(self, rule_id: str) -> Rule:
        return self._rules[rule_id]

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __len__(self) -> int:
        return len(self._rules)

    def of_kind(self, *kinds: RuleKind) -> List[Rule]:
        return [r for r in self._rules.values() if r.kind in kinds]

    def default_configs(self) -> Dict[str, RuleConfig]:
        return {r.id: r.default_config for r in self._rules.values()}


def default_registry() -> RuleRegistry:
    """Registry with every shipped rule, in display order."""
    from kousei.services.rules import document_rules, pattern_rules, token_rules

    return RuleRegistry([*pattern_rules.RULES, *token_rules.RULES, *document_rules.RULES])

# tests/conftest.py
from __future__ import annotations
import asyncio
from typing import Callable, Dict, List, Optional, Sequence, Union

import pytest
from fastapi.testclient import TestClient

from kousei.core.errors import TokenizerError
from kousei.main import app
from kousei.models.issue import LintIssue, ValidatableIssue
from kousei.models.token import Token
from kousei.services.lint import Linter
from kousei.services.llm import InferenceResult
from kousei.services.validate import ValidatorPool


# --------------------------------------------------------------------
# Tokens: build Sudachi-style tokens by locating each surface in order
# --------------------------------------------------------------------
def build_tokens(text: str, pieces: Sequence[tuple]) -> List[Token]:
    """pieces: (surface, pos) or (surface, pos, {extra Token fields})."""
    tokens = []
    cursor = 0
    for piece in pieces:
        surface, pos = piece[0], piece[1]
        extra = piece[2] if len(piece) > 2 else {}
        start = text.index(surface, cursor)
        tokens.append(Token(surface=surface, pos=pos, start=start, end=start + len(surface), **extra))
        cursor = start + len(surface)
    return tokens


class FakeTokenizer:
    """Returns canned tokens per paragraph text; unknown text has no tokens."""

    def __init__(self, table: Optional[Dict[str, List[Token]]] = None, fail: bool = False):
        self.table = table or {}
        self.fail = fail
        self.calls: List[str] = []

    def tokenize(self, text: str) -> List[Token]:
        self.calls.append(text)
        if self.fail:
            raise TokenizerError("dictionary missing")
        return self.table.get(text, [])


@pytest.fixture
def make_tokens() -> Callable[[str, Sequence[tuple]], List[Token]]:
    return build_tokens


@pytest.fixture
def fake_tokenizer() -> type:
    return FakeTokenizer


@pytest.fixture
def scenario_text() -> str:
    return "しかし彼は来た。だから帰った。そして寝た。"


@pytest.fixture
def scenario_tokens(scenario_text) -> List[Token]:
    return build_tokens(scenario_text, [
        ("しかし", "接続詞"), ("彼", "代名詞"), ("は", "助詞"), ("来", "動詞"),
        ("た", "助動詞", {"basic_form": "た"}), ("。", "補助記号"),
        ("だから", "接続詞"), ("帰っ", "動詞"), ("た", "助動詞", {"basic_form": "た"}), ("。", "補助記号"),
        ("そして", "接続詞"), ("寝", "動詞"), ("た", "助動詞", {"basic_form": "た"}), ("。", "補助記号"),
    ])


# --------------------------------------------------------------------
# Inference: scripted client that records how many calls overlap
# --------------------------------------------------------------------
class FakeInferenceClient:
    def __init__(
        self,
        reply: Union[str, Callable[[str], str]] = '{"valid": true}',
        delay: float = 0.0,
        available: bool = True,
        loaded: bool = True,
        error: Optional[Exception] = None,
    ):
        self.reply = reply
        self.delay = delay
        self.available = available
        self.loaded = loaded
        self.error = error
        self.prompts: List[str] = []
        self.loads: List[str] = []
        self.unloads = 0
        self.load_error: Optional[Exception] = None
        self.in_flight = 0
        self.max_in_flight = 0

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def is_available(self) -> bool:
        return self.available

    async def is_model_loaded(self) -> bool:
        return self.loaded

    async def load_model(self, model_id: str) -> None:
        self.loads.append(model_id)
        if self.load_error is not None:
            raise self.load_error

    async def unload_model(self) -> None:
        self.unloads += 1

    async def infer(self, prompt: str, *, max_tokens: int, cancel: Optional[asyncio.Event] = None) -> InferenceResult:
        self.prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            if self.error is not None:
                raise self.error
            text = self.reply(prompt) if callable(self.reply) else self.reply
            return InferenceResult(text=text)
        finally:
            self.in_flight -= 1


@pytest.fixture
def fake_llm() -> type:
    return FakeInferenceClient


def _make_item(rule_id: str = "verbose-expression", start: int = 0, end: int = 2, text: str = "においての話") -> ValidatableIssue:
    issue = LintIssue(
        rule_id=rule_id,
        severity="info",
        message="m",
        message_ja="m",
        from_=start,
        to=end,
        original_text=text[start:end],
    )
    return ValidatableIssue(issue=issue, paragraph_text=text)


@pytest.fixture
def make_item() -> Callable[..., ValidatableIssue]:
    return _make_item


@pytest.fixture
def items() -> Callable[[int], List[ValidatableIssue]]:
    """n validatable issues with distinct keys over one paragraph."""
    def _items(n: int) -> List[ValidatableIssue]:
        text = "あ" * (n + 1)
        return [_make_item("verbose-expression", i, i + 1, text) for i in range(n)]
    return _items


# --------------------------------------------------------------------
# FastAPI test client with capabilities swapped for fakes
# --------------------------------------------------------------------
@pytest.fixture
def llm_client() -> FakeInferenceClient:
    return FakeInferenceClient()


@pytest.fixture
def client(monkeypatch, scenario_text, scenario_tokens, llm_client) -> TestClient:
    tokenizer = FakeTokenizer({scenario_text: scenario_tokens})
    monkeypatch.setattr(app.state, "linter", Linter(tokenizer=tokenizer))
    # every model id is served by the same fake; the pool still keys by it
    monkeypatch.setattr(app.state, "validators", ValidatorPool(lambda model_id: llm_client))
    return TestClient(app)

# kousei/services/llm.py
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, List, Optional, Protocol, TypeVar

from openai import AsyncOpenAI

from kousei.core import config
from kousei.core.errors import InferenceCancelled, InferenceError

log = logging.getLogger("llm")

T = TypeVar("T")


@dataclass(frozen=True)
class InferenceResult:
    text: str
    token_count: Optional[int] = None


class InferenceClient(Protocol):
    def is_available(self) -> bool:
        ...

    async def is_model_loaded(self) -> bool:
        ...

    async def infer(
        self, prompt: str, *, max_tokens: int, cancel: Optional[asyncio.Event] = None
    ) -> InferenceResult:
        ...

    async def load_model(self, model_id: str) -> None:
        ...

    async def unload_model(self) -> None:
        ...


class OpenAIInferenceClient:
    """Chat Completions against any OpenAI-compatible endpoint.

    Local servers (llama.cpp, LM Studio, Ollama) speak the same protocol, so
    ``base_url`` is all that changes between them and a hosted model.
    """

    def __init__(
        self,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        client: Optional[AsyncOpenAI] = None,
    ):
        self.model = config.LLM_MODEL if model is None else model
        self._client = client or AsyncOpenAI(
            base_url=base_url or config.LLM_BASE_URL,
            api_key=api_key or config.LLM_API_KEY,
            timeout=timeout or config.LLM_TIMEOUT,
            max_retries=0,  # failures are fail-open, never retried
        )

    def is_available(self) -> bool:
        return bool(self.model)

    async def is_model_loaded(self) -> bool:
        try:
            page = await self._client.models.list()
        except Exception as e:
            log.warning("LLM model probe failed: %s", e)
            return False
        return any(m.id == self.model for m in page.data)

    async def load_model(self, model_id: str) -> None:
        # the server owns model residency; loading only retargets requests
        if model_id:
            self.model = model_id

    async def unload_model(self) -> None:
        return None

    async def _chat(self, prompt: str, max_tokens: int) -> InferenceResult:
        log.info("LLM chat call model=%s, prompt_chars=%d", self.model, len(prompt))
        resp = await self._client.chat.completions.create(
            model=self.model,
            messages=[{"role": "user", "content": prompt}],
            max_tokens=max_tokens,
            temperature=0,
        )
        text = (resp.choices[0].message.content or "") if resp.choices else ""
        usage = getattr(resp, "usage", None)
        return InferenceResult(text=text, token_count=usage.completion_tokens if usage else None)

    async def infer(
        self, prompt: str, *, max_tokens: int, cancel: Optional[asyncio.Event] = None
    ) -> InferenceResult:
        if cancel is None:
            return await self._run(prompt, max_tokens)
        if cancel.is_set():
            raise InferenceCancelled("cancelled before start")

        call = asyncio.ensure_future(self._run(prompt, max_tokens))
        stop = asyncio.ensure_future(cancel.wait())
        try:
            await asyncio.wait({call, stop}, return_when=asyncio.FIRST_COMPLETED)
        except asyncio.CancelledError:
            call.cancel()
            raise
        finally:
            stop.cancel()
        if not call.done():
            call.cancel()
            raise InferenceCancelled("cancelled in flight")
        return call.result()

    async def _run(self, prompt: str, max_tokens: int) -> InferenceResult:
        try:
            return await self._chat(prompt, max_tokens)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise InferenceError(f"LLM call failed: {e}") from e


# ---------------------------------------------------------------------------
# Model lifecycle: load on demand, unload after an idle cooldown
# ---------------------------------------------------------------------------

class LlmState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    ACTIVE = "active"
    COOLING = "cooling"
    UNLOADING = "unloading"


class LlmController:
    """Keeps a model resident only while validation work is running.

    IDLE -> LOADING -> READY -> ACTIVE -> COOLING -> UNLOADING -> IDLE

    Loading and unloading are serialized under one lock, so concurrent
    requests load the model once. When the last task finishes a cooldown
    timer starts; a new request cancels it, otherwise the model is unloaded.
    A failed load is logged and the task still runs; the validator's own
    availability probe keeps every issue in that case.
    """

    def __init__(self, client: InferenceClient, model_id: str = "", cooldown_ms: int = config.LLM_COOLDOWN_MS):
        self.client = client
        self.model_id = model_id
        self.cooldown_ms = cooldown_ms
        self.state = LlmState.IDLE
        self._lock = asyncio.Lock()
        self._active = 0
        self._loaded_model: Optional[str] = None
        self._timer: Optional[asyncio.TimerHandle] = None
        self._cooldowns = 0
        self._expiry: Optional[asyncio.Future] = None
        self._listeners: List[Callable[[LlmState], None]] = []

    def on_state_change(self, callback: Callable[[LlmState], None]) -> Callable[[], None]:
        """Subscribe to transitions; returns the unsubscribe function."""
        self._listeners.append(callback)
        return lambda: self._listeners.remove(callback)

    async def request_validation(self, task: Callable[[], Awaitable[T]]) -> T:
        self._cancel_cooldown()
        self._active += 1
        try:
            async with self._lock:
                if self._loaded_model is not None and self._loaded_model != self.model_id:
                    await self._unload()
                if self._loaded_model is None:
                    await self._load()
            self._set_state(LlmState.ACTIVE)
            return await task()
        finally:
            self._active -= 1
            if self._active == 0:
                self._start_cooldown()

    async def unload(self) -> None:
        """Unload now. No-op when idle or while a task is running."""
        self._cancel_cooldown()
        async with self._lock:
            if self.state is not LlmState.IDLE and self._active == 0:
                await self._unload()

    async def _load(self) -> None:
        self._set_state(LlmState.LOADING)
        try:
            await self.client.load_model(self.model_id)
        except Exception as e:
            log.warning("LLM model load failed (%s): %s", self.model_id, e)
            self._loaded_model = None
            self._set_state(LlmState.IDLE)
            return
        self._loaded_model = self.model_id
        self._set_state(LlmState.READY)

    async def _unload(self) -> None:
        self._set_state(LlmState.UNLOADING)
        try:
            await self.client.unload_model()
        except Exception as e:
            log.warning("LLM model unload failed (%s): %s", self._loaded_model, e)
        self._loaded_model = None
        self._set_state(LlmState.IDLE)

    def _start_cooldown(self) -> None:
        if self._loaded_model is None:
            self._set_state(LlmState.IDLE)
            return
        self._set_state(LlmState.COOLING)
        self._cooldowns += 1
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.cooldown_ms / 1000, self._on_cooldown, self._cooldowns)

    def _on_cooldown(self, cooldown: int) -> None:
        self._timer = None
        self._expiry = asyncio.ensure_future(self._expire(cooldown))

    async def _expire(self, cooldown: int) -> None:
        async with self._lock:
            # a later task may have started and finished while this waited for the lock
            if cooldown == self._cooldowns and self.state is LlmState.COOLING and self._active == 0:
                log.info("LLM idle for %d ms, unloading %s", self.cooldown_ms, self._loaded_model)
                await self._unload()

    def _cancel_cooldown(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _set_state(self, state: LlmState) -> None:
        self.state = state
        for callback in list(self._listeners):
            callback(state)

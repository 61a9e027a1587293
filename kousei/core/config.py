import os

MAX_BODY_BYTES = 5 * 1024 * 1024  # 5 MB soft cap on lint requests

# Linting
ISSUE_CACHE_SIZE = 200  # paragraphs kept in the per-paragraph issue cache
VERDICT_CACHE_SIZE = 2000
TOKEN_CACHE_SIZE = 200
DIALOGUE_PLACEHOLDER = "〇"

# LLM validation
VALIDATION_CONCURRENCY = 3
VALIDATION_CONTEXT_CHARS = 30  # characters of context before/after the flagged span
VALIDATION_MAX_TOKENS = 60
VALIDATOR_POOL_SIZE = 16  # (mode, model) pairs with their own verdict cache in the HTTP host

# Inference endpoint (any OpenAI-compatible server)
LLM_BASE_URL = os.getenv("KOUSEI_LLM_BASE_URL", "http://127.0.0.1:8080/v1")
LLM_API_KEY = os.getenv("KOUSEI_LLM_API_KEY") or os.getenv("OPENAI_API_KEY") or "no-key"  # local servers ignore it
LLM_MODEL = os.getenv("KOUSEI_LLM_MODEL", "")
LLM_TIMEOUT = float(os.getenv("KOUSEI_LLM_TIMEOUT", "30"))
LLM_COOLDOWN_MS = 60_000  # idle time before the model is unloaded

SEVERITY_RANK = {
    "error": 3,
    "warning": 2,
    "info": 1,
}

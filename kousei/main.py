from fastapi import FastAPI

from kousei.api.routes_lint import router as lint_router
from kousei.api.routes_rules import router as rules_router
from kousei.middleware.limits import BodySizeLimitMiddleware
from kousei.services.lint import Linter
from kousei.services.llm import OpenAIInferenceClient
from kousei.services.tokenize import SpacyTokenizer
from kousei.services.validate import ValidatorPool

app = FastAPI(title="kousei")

app.add_middleware(BodySizeLimitMiddleware)

# one set of capabilities for the process; tests swap these out
app.state.linter = Linter(tokenizer=SpacyTokenizer())
# an empty model id falls back to KOUSEI_LLM_MODEL
app.state.validators = ValidatorPool(lambda model_id: OpenAIInferenceClient(model=model_id or None))


@app.get("/health")
def health():
    return {"status": "ok"}


app.include_router(lint_router)
app.include_router(rules_router)

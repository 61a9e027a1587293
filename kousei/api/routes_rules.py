from fastapi import APIRouter, Request

from kousei.models.report import RuleInfo
from kousei.services.modes import GUIDELINES, MODES

router = APIRouter(tags=["rules"])


@router.get("/rules")
def rules(request: Request):
    return [
        RuleInfo(
            id=r.id,
            kind=r.kind.value,
            name=r.name,
            name_ja=r.name_ja,
            description_ja=r.description_ja,
            guidelines=sorted(r.guidelines),
            default_config=r.default_config.model_dump(),
        ).model_dump()
        for r in request.app.state.linter.registry
    ]


@router.get("/modes")
def modes():
    return [m.model_dump(exclude_none=True) for m in MODES.values()]


@router.get("/guidelines")
def guidelines():
    return [g.model_dump() for g in GUIDELINES.values()]

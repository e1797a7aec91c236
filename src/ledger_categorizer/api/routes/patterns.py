from typing import Annotated

from fastapi import APIRouter, Depends

from ledger_categorizer.api.dependencies import get_store
from ledger_categorizer.api.schemas import PatternCreate, PatternUpdate
from ledger_categorizer.errors import NotFoundError
from ledger_categorizer.models import Pattern
from ledger_categorizer.repositories.store import LedgerStore

router = APIRouter()


@router.get("/api/patterns", response_model=list[Pattern])
async def list_patterns(
    store: Annotated[LedgerStore, Depends(get_store)],
) -> list[Pattern]:
    return await store.list_patterns()


@router.post("/api/patterns", response_model=Pattern)
async def create_pattern(
    payload: PatternCreate,
    store: Annotated[LedgerStore, Depends(get_store)],
) -> Pattern:
    if await store.get_account(payload.account_id) is None:
        raise NotFoundError("Account", payload.account_id)
    return await store.add_pattern(**payload.model_dump())


@router.patch("/api/patterns/{pattern_id}", response_model=Pattern)
async def update_pattern(
    pattern_id: int,
    payload: PatternUpdate,
    store: Annotated[LedgerStore, Depends(get_store)],
) -> Pattern:
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key == "explanation"
    }
    account_id = changes.get("account_id")
    if account_id is not None and await store.get_account(account_id) is None:
        raise NotFoundError("Account", account_id)
    pattern = await store.update_pattern(pattern_id, **changes)
    if pattern is None:
        raise NotFoundError("Pattern", pattern_id)
    return pattern

from typing import Annotated, Any

from fastapi import APIRouter, Depends

from ledger_categorizer.api.dependencies import get_store
from ledger_categorizer.repositories.store import LedgerStore
from ledger_categorizer.services.stats import compute_stats

router = APIRouter()


@router.get("/api/stats")
async def get_stats(
    store: Annotated[LedgerStore, Depends(get_store)],
) -> dict[str, Any]:
    return compute_stats(await store.list_transactions())

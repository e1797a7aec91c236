from typing import Annotated

from fastapi import APIRouter, Depends, Request

from ledger_categorizer.api.dependencies import get_pipeline, get_store
from ledger_categorizer.api.schemas import TransactionCreate, TransactionUpdate, TransactionView
from ledger_categorizer.domain.imports import parse_bank_statement
from ledger_categorizer.errors import ValidationError
from ledger_categorizer.logger import get_logger
from ledger_categorizer.models import Transaction
from ledger_categorizer.repositories.store import LedgerStore
from ledger_categorizer.services.categorization import CategorizationPipeline

logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/transactions", response_model=list[TransactionView])
async def list_transactions(
    store: Annotated[LedgerStore, Depends(get_store)],
) -> list[TransactionView]:
    transactions = await store.list_transactions()
    views = []
    for transaction in transactions:
        account = None
        if transaction.account_id is not None:
            account = await store.get_account(transaction.account_id)
        views.append(TransactionView(**transaction.model_dump(), account=account))
    return views


@router.post("/api/transactions", response_model=list[Transaction])
async def create_transactions(
    payload: list[TransactionCreate],
    store: Annotated[LedgerStore, Depends(get_store)],
) -> list[Transaction]:
    return await store.add_transactions(item.model_dump() for item in payload)


@router.post("/api/transactions/upload", response_model=list[Transaction])
async def upload_transactions(
    request: Request,
    store: Annotated[LedgerStore, Depends(get_store)],
) -> list[Transaction]:
    body = await request.body()
    try:
        content = body.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ValidationError("Upload is not valid UTF-8") from exc
    rows = parse_bank_statement(content)
    created = await store.add_transactions(rows)
    logger.info("[IMPORT] Imported %d transaction(s).", len(created))
    return created


@router.patch("/api/transactions/{transaction_id}", response_model=Transaction)
async def update_transaction(
    transaction_id: int,
    payload: TransactionUpdate,
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
) -> Transaction:
    return await pipeline.assign(transaction_id, **payload.model_dump(exclude_unset=True))

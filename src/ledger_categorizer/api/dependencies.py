from fastapi import HTTPException, Request

from ledger_categorizer.repositories.store import LedgerStore
from ledger_categorizer.services.accounts import AccountService
from ledger_categorizer.services.categorization import CategorizationPipeline


def get_store(request: Request) -> LedgerStore:
    store = getattr(request.app.state, "store", None)
    if not store:
        raise HTTPException(status_code=500, detail="Store not initialized")
    return store


def get_pipeline(request: Request) -> CategorizationPipeline:
    pipeline = getattr(request.app.state, "pipeline", None)
    if not pipeline:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return pipeline


def get_account_service(request: Request) -> AccountService:
    service = getattr(request.app.state, "account_service", None)
    if not service:
        raise HTTPException(status_code=500, detail="Service not initialized")
    return service

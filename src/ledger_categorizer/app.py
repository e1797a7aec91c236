from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ledger_categorizer.api.routes import accounts, patterns, predictions, stats, transactions
from ledger_categorizer.classifiers.heuristic import rules_from_table
from ledger_categorizer.core import settings
from ledger_categorizer.errors import (
    ConflictError,
    LedgerError,
    NotFoundError,
    PredictionUnavailableError,
    ValidationError,
)
from ledger_categorizer.logger import get_logger, setup_logging
from ledger_categorizer.manager import PredictionEngine
from ledger_categorizer.repositories.store import LedgerStore
from ledger_categorizer.services.accounts import AccountService
from ledger_categorizer.services.categorization import CategorizationPipeline

logger = get_logger(__name__)

_ERROR_STATUS: tuple[tuple[type[LedgerError], int], ...] = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 400),
    (PredictionUnavailableError, 500),
)


async def _ledger_error_handler(request: Request, exc: Exception) -> JSONResponse:
    status_code = next((code for cls, code in _ERROR_STATUS if isinstance(exc, cls)), 500)
    if status_code >= 500:
        logger.error("[API] %s %s failed: %s", request.method, request.url.path, exc)
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


def build_services(app: FastAPI, store: LedgerStore) -> None:
    keyword_table = settings.get_keyword_table()
    engine = PredictionEngine.build(
        patterns=store,
        history=store,
        accounts=store,
        keyword_table=rules_from_table(keyword_table) if keyword_table else None,
        limit=settings.PREDICTION_LIMIT,
    )
    app.state.store = store
    app.state.engine = engine
    app.state.pipeline = CategorizationPipeline(engine, store, store, store)
    app.state.account_service = AccountService(store, store)


def create_app(store: LedgerStore | None = None) -> FastAPI:
    setup_logging()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        logger.info("Initializing services...")
        settings.log_environment()

        build_services(app, store if store is not None else LedgerStore(data_path=settings.STORE_PATH))

        logger.info("Services initialized.")
        yield
        logger.info("Service shutting down.")

    app = FastAPI(title="Ledger Categorizer", lifespan=lifespan)
    app.add_exception_handler(LedgerError, _ledger_error_handler)

    app.include_router(predictions.router)
    app.include_router(transactions.router)
    app.include_router(accounts.router)
    app.include_router(patterns.router)
    app.include_router(stats.router)

    return app

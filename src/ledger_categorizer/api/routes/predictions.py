from typing import Annotated

from fastapi import APIRouter, Depends, Query

from ledger_categorizer.api.dependencies import get_pipeline
from ledger_categorizer.models import Prediction
from ledger_categorizer.services.categorization import CategorizationPipeline

router = APIRouter()


@router.get("/api/predictions", response_model=list[Prediction])
async def get_predictions(
    pipeline: Annotated[CategorizationPipeline, Depends(get_pipeline)],
    transaction_id: Annotated[int, Query(alias="transactionId")],
) -> list[Prediction]:
    return await pipeline.predict_for_id(transaction_id)

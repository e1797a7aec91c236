from typing import Annotated, Any

from fastapi import APIRouter, Depends, Response

from ledger_categorizer.api.dependencies import get_account_service
from ledger_categorizer.api.schemas import AccountCreate, AccountUpdate
from ledger_categorizer.models import Account
from ledger_categorizer.services.accounts import AccountService

router = APIRouter()


@router.get("/api/accounts")
async def get_accounts(
    service: Annotated[AccountService, Depends(get_account_service)],
) -> list[dict[str, Any]]:
    return [node.to_payload() for node in await service.hierarchy()]


@router.post("/api/accounts", response_model=Account)
async def create_account(
    payload: AccountCreate,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> Account:
    return await service.create(**payload.model_dump())


@router.patch("/api/accounts/{account_id}", response_model=Account)
async def update_account(
    account_id: int,
    payload: AccountUpdate,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> Account:
    changes = {
        key: value
        for key, value in payload.model_dump(exclude_unset=True).items()
        if value is not None or key in {"parent_id", "description"}
    }
    return await service.update(account_id, **changes)


@router.delete("/api/accounts/{account_id}", status_code=204)
async def deactivate_account(
    account_id: int,
    service: Annotated[AccountService, Depends(get_account_service)],
) -> Response:
    await service.deactivate(account_id)
    return Response(status_code=204)

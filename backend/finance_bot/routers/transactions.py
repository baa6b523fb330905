from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..container import Container
from ..deps import get_container
from ..domain.entities import TransactionType
from ..schemas import TransactionOut

router = APIRouter(prefix="/users/{user_id}/transactions", tags=["transactions"])


@router.get("", response_model=list[TransactionOut])
def list_transactions(
    user_id: int,
    limit: int = Query(default=50, ge=1, le=500),
    category: str | None = Query(default=None),
    type_: TransactionType | None = Query(default=None, alias="type"),
    container: Container = Depends(get_container),
) -> list[TransactionOut]:
    if type_:
        transactions = container.transactions.find_by_user_id_and_type(user_id, type_, limit=limit)
    elif category:
        transactions = container.transactions.find_by_user_id_and_category(user_id, category, limit=limit)
    else:
        transactions = container.transactions.find_by_user_id(user_id, limit=limit)
    return [TransactionOut.model_validate(tx) for tx in transactions]


@router.get("/{transaction_id}", response_model=TransactionOut)
def get_transaction(
    user_id: int,
    transaction_id: int,
    container: Container = Depends(get_container),
) -> TransactionOut:
    transaction = container.transactions.find_by_id(transaction_id)
    if not transaction or transaction.user_id != user_id:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Transaction not found.")
    return TransactionOut.model_validate(transaction)

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from moneycoach.db.store import Store
from moneycoach.models.expense import ExpenseIn, ExpenseOut, ExpenseRecord
from moneycoach.routers.stats import SpendingSnapshot, snapshot_out
from moneycoach.services.aggregation import analyze_spending_context
from moneycoach.services.coach import CoachDesk
from moneycoach.services.ledger import log_expense

router = APIRouter(prefix="/expenses", tags=["expenses"])

# Dependencies -----------------------------------------------------


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_desk(request: Request) -> CoachDesk:
    return request.app.state.coach_desk


# Request / Response Models ----------------------------------------
class ExpenseCreateResponse(BaseModel):
    expense: ExpenseOut
    stats: SpendingSnapshot


# Helpers ----------------------------------------------------------


def _to_out(record: ExpenseRecord) -> ExpenseOut:
    return ExpenseOut(**record.model_dump())


# Routes -----------------------------------------------------------
@router.get("", response_model=List[ExpenseOut], summary="List expenses, newest first")
async def list_expenses(
    request: Request,
    limit: Optional[int] = Query(None, ge=1, description="Max records (default: history size)"),
    store: Store = Depends(get_store),
):
    limit = limit or request.app.state.settings.history_limit
    return [_to_out(r) for r in store.load().expenses[:limit]]


@router.post(
    "",
    response_model=ExpenseCreateResponse,
    status_code=201,
    summary="Log an expense and ask the coach about it",
)
async def create_expense(
    payload: ExpenseIn,
    background_tasks: BackgroundTasks,
    store: Store = Depends(get_store),
    desk: CoachDesk = Depends(get_desk),
):
    # 1. Setup must be complete before expenses are accepted
    if not store.load().is_configured:
        raise HTTPException(status_code=409, detail="profile not configured")

    # 2. Persist (prepend) and re-derive the snapshot from stored data
    now = datetime.now().astimezone()
    record, data = log_expense(store, payload, now)
    ctx = analyze_spending_context(data.expenses, record.category, now)

    # 3. Coach runs after the response is sent
    desk.prepare(record.id)
    background_tasks.add_task(desk.consult, record, data, now)

    return ExpenseCreateResponse(expense=_to_out(record), stats=snapshot_out(ctx))

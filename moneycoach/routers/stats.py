from __future__ import annotations

from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel

from moneycoach.db.store import Store
from moneycoach.models.constants import CATEGORIES
from moneycoach.services.aggregation import SpendingContext, analyze_spending_context
from moneycoach.services.money import round2, round_half_up

router = APIRouter(prefix="/stats", tags=["stats"])


def get_store(request: Request) -> Store:
    return request.app.state.store


class SpendingSnapshot(BaseModel):
    week_start: datetime
    category: str
    category_count: int
    category_total: float
    coffee_count: int
    week_total: float
    transaction_count: int
    monthly_projection: int


def snapshot_out(ctx: SpendingContext) -> SpendingSnapshot:
    return SpendingSnapshot(
        week_start=ctx.week_start,
        category=ctx.category,
        category_count=ctx.category_count,
        category_total=round2(ctx.category_total),
        coffee_count=ctx.coffee_count,
        week_total=round2(ctx.week_total),
        transaction_count=ctx.transaction_count,
        monthly_projection=round_half_up(ctx.monthly_projection),
    )


@router.get("", response_model=SpendingSnapshot, summary="Week-to-date snapshot")
async def get_stats(
    category: str = Query("coffee", description="Category to break out"),
    store: Store = Depends(get_store),
):
    if category not in CATEGORIES:
        raise HTTPException(status_code=400, detail="unsupported category")
    data = store.load()
    ctx = analyze_spending_context(data.expenses, category, datetime.now().astimezone())
    return snapshot_out(ctx)

from typing import Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel

from moneycoach.services.coach import CoachDesk

router = APIRouter(prefix="/coach", tags=["coach"])


def get_desk(request: Request) -> CoachDesk:
    return request.app.state.coach_desk


class CoachStateOut(BaseModel):
    status: str
    text: str
    expense_id: Optional[int] = None


@router.get("", response_model=CoachStateOut, summary="Latest coach reply")
async def get_coach_state(desk: CoachDesk = Depends(get_desk)):
    state = desk.state
    return CoachStateOut(status=state.status, text=state.text, expense_id=state.expense_id)


@router.delete("", response_model=CoachStateOut, summary="Cancel the pending reply")
async def cancel_coach(desk: CoachDesk = Depends(get_desk)):
    desk.cancel()
    state = desk.state
    return CoachStateOut(status=state.status, text=state.text, expense_id=state.expense_id)

from fastapi import APIRouter, Depends, Request, Response

from moneycoach.db.store import Store, StoredData
from moneycoach.models.profile import ProfileIn, ProfileOut
from moneycoach.services.coach import CoachDesk
from moneycoach.services.ledger import reset_all, save_profile

router = APIRouter(tags=["profile"])


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_desk(request: Request) -> CoachDesk:
    return request.app.state.coach_desk


def _profile_out(data: StoredData) -> ProfileOut:
    return ProfileOut(
        configured=data.is_configured,
        api_key_set=bool(data.api_key),
        # Only the prefix and last four characters are ever shown.
        api_key_hint=f"{data.api_key[:3]}...{data.api_key[-4:]}" if data.api_key else "",
        monthly_budget=data.monthly_budget,
    )


@router.get("/profile", response_model=ProfileOut, summary="Current setup state")
async def get_profile(store: Store = Depends(get_store)):
    return _profile_out(store.load())


@router.put(
    "/profile", response_model=ProfileOut, summary="Set API key and monthly budget"
)
async def put_profile(payload: ProfileIn, store: Store = Depends(get_store)):
    return _profile_out(save_profile(store, payload))


@router.delete("/data", status_code=204, summary="Erase profile and all expenses")
async def delete_all_data(
    store: Store = Depends(get_store), desk: CoachDesk = Depends(get_desk)
):
    desk.clear()
    reset_all(store)
    return Response(status_code=204)

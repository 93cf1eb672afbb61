from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Form, Request, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from moneycoach.db.store import Store, StoredData
from moneycoach.models.constants import CATEGORIES, CATEGORY_EMOJIS
from moneycoach.services.coach import STATUS_THINKING, CoachDesk
from moneycoach.services.ledger import log_expense, reset_all, save_profile
from moneycoach.services.validation import validate_expense_form, validate_profile_form
from moneycoach.services.view import EMPTY_HISTORY_MESSAGE, build_dashboard

router = APIRouter(tags=["ui"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))


def get_store(request: Request) -> Store:
    return request.app.state.store


def get_desk(request: Request) -> CoachDesk:
    return request.app.state.coach_desk


def _base_context(request: Request) -> Dict[str, Any]:
    settings = request.app.state.settings
    return {
        "app_name": settings.app_name,
        "version": settings.version,
    }


def _render_setup(
    request: Request,
    form: Optional[Dict[str, Any]] = None,
    alert: Optional[str] = None,
):
    context = _base_context(request)
    context.update({"form": form or {}, "alert": alert})
    return templates.TemplateResponse(request, "setup.html", context)


def _render_dashboard(
    request: Request,
    data: StoredData,
    desk: CoachDesk,
    form: Optional[Dict[str, Any]] = None,
    alert: Optional[str] = None,
    settings_form: Optional[Dict[str, Any]] = None,
    settings_open: bool = False,
):
    """Full repaint of the dashboard from freshly loaded data."""
    settings = request.app.state.settings
    view = build_dashboard(data, datetime.now().astimezone(), settings.history_limit)
    context = _base_context(request)
    context.update(
        {
            "view": view,
            "empty_message": EMPTY_HISTORY_MESSAGE,
            "categories": CATEGORIES,
            "category_emojis": CATEGORY_EMOJIS,
            "form": form or {},
            "alert": alert,
            "settings_form": settings_form
            or {"api_key": data.api_key, "monthly_budget": data.monthly_budget},
            "settings_open": settings_open,
            "coach": desk.state,
            "coach_thinking": desk.state.status == STATUS_THINKING,
            "poll_interval_ms": settings.coach_poll_interval_ms,
        }
    )
    return templates.TemplateResponse(request, "dashboard.html", context)


def _redirect_home() -> RedirectResponse:
    return RedirectResponse(url="/ui", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/", include_in_schema=False)
async def root():
    return _redirect_home()


@router.get("/ui", response_class=HTMLResponse)
async def ui_home(
    request: Request,
    store: Store = Depends(get_store),
    desk: CoachDesk = Depends(get_desk),
):
    data = store.load()
    if not data.is_configured:
        return _render_setup(request)
    return _render_dashboard(request, data, desk)


@router.post("/ui/setup", response_class=HTMLResponse)
async def ui_setup_submit(
    request: Request,
    api_key: str = Form(""),
    monthly_budget: str = Form(""),
    store: Store = Depends(get_store),
):
    profile, alert = validate_profile_form(api_key, monthly_budget, setup=True)
    if alert:
        return _render_setup(
            request,
            form={"api_key": api_key, "monthly_budget": monthly_budget},
            alert=alert,
        )
    save_profile(store, profile)
    return _redirect_home()


@router.post("/ui/expenses", response_class=HTMLResponse)
async def ui_log_expense(
    request: Request,
    background_tasks: BackgroundTasks,
    description: str = Form(""),
    amount: str = Form(""),
    category: str = Form("food"),
    store: Store = Depends(get_store),
    desk: CoachDesk = Depends(get_desk),
):
    data = store.load()
    if not data.is_configured:
        return _redirect_home()

    expense_in, alert = validate_expense_form(description, amount, category)
    if alert:
        form_state = {"description": description, "amount": amount, "category": category}
        return _render_dashboard(request, data, desk, form=form_state, alert=alert)

    now = datetime.now().astimezone()
    record, data = log_expense(store, expense_in, now)
    desk.prepare(record.id)
    background_tasks.add_task(desk.consult, record, data, now)
    # Form clears on success; the category picker keeps its selection.
    return _render_dashboard(request, store.load(), desk, form={"category": category})


@router.get("/ui/coach", response_class=HTMLResponse)
async def ui_coach_fragment(request: Request, desk: CoachDesk = Depends(get_desk)):
    state = desk.state
    return templates.TemplateResponse(
        request,
        "_coach.html",
        {"coach": state, "coach_thinking": state.status == STATUS_THINKING},
    )


@router.post("/ui/settings", response_class=HTMLResponse)
async def ui_settings_submit(
    request: Request,
    api_key: str = Form(""),
    monthly_budget: str = Form(""),
    store: Store = Depends(get_store),
    desk: CoachDesk = Depends(get_desk),
):
    profile, alert = validate_profile_form(api_key, monthly_budget, setup=False)
    if alert:
        data = store.load()
        if not data.is_configured:
            return _render_setup(request, alert=alert)
        return _render_dashboard(
            request,
            data,
            desk,
            alert=alert,
            settings_form={"api_key": api_key, "monthly_budget": monthly_budget},
            settings_open=True,
        )
    save_profile(store, profile)
    return _redirect_home()


@router.post("/ui/reset", response_class=HTMLResponse)
async def ui_reset(
    request: Request,
    confirm: str = Form(""),
    store: Store = Depends(get_store),
    desk: CoachDesk = Depends(get_desk),
):
    if confirm != "yes":
        return _redirect_home()
    desk.clear()
    reset_all(store)
    # View restarts from scratch: setup flow
    return _redirect_home()

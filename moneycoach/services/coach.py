from __future__ import annotations

"""Coach client: one chat-completion request per logged expense.

The reply is shown verbatim. Any failure (transport error, non-2xx status,
unexpected body) is logged and replaced with a fixed fallback message, so
callers never see an exception. No retries.

``CoachDesk`` owns the single in-flight request. Starting a new consult
cancels the previous one; a cancelled or superseded request never overwrites
the reply of a newer one.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, Optional

import httpx

from moneycoach.core.config import Settings
from moneycoach.db.store import StoredData
from moneycoach.models.expense import ExpenseRecord
from moneycoach.services.aggregation import analyze_spending_context
from moneycoach.services.prompt import build_coach_prompt, build_messages

logger = logging.getLogger("moneycoach.coach")

FALLBACK_MESSAGE = (
    "❌ Oops! Couldn't reach your coach right now. "
    "Check your API key in settings or try again later."
)
THINKING_MESSAGE = "💭 Thinking..."

STATUS_IDLE = "idle"
STATUS_THINKING = "thinking"
STATUS_OK = "ok"
STATUS_FAILED = "failed"


class CoachError(Exception):
    pass


@dataclass(frozen=True)
class CoachReply:
    ok: bool
    text: str
    reason: Optional[str] = None

    @classmethod
    def success(cls, text: str) -> "CoachReply":
        return cls(ok=True, text=text)

    @classmethod
    def failure(cls, reason: str) -> "CoachReply":
        return cls(ok=False, text=FALLBACK_MESSAGE, reason=reason)


class CoachClient:
    def __init__(
        self,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._settings = settings
        self._transport = transport

    def _payload(self, prompt: str) -> Dict[str, Any]:
        return {
            "model": self._settings.coach_model,
            "messages": build_messages(prompt),
            "temperature": self._settings.coach_temperature,
            "max_tokens": self._settings.coach_max_tokens,
        }

    async def _complete(self, api_key: str, prompt: str) -> str:
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self._settings.coach_timeout_seconds,
        ) as client:
            resp = await client.post(
                str(self._settings.coach_api_url),
                headers={
                    "Content-Type": "application/json",
                    "Authorization": f"Bearer {api_key}",
                },
                json=self._payload(prompt),
            )
        if resp.is_error:
            raise CoachError(f"coach request failed: HTTP {resp.status_code}")
        try:
            result = resp.json()
            return result["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CoachError("coach response missing message content") from exc

    async def get_coach_response(
        self,
        expense: ExpenseRecord,
        data: StoredData,
        now: Optional[datetime] = None,
    ) -> CoachReply:
        try:
            context = analyze_spending_context(data.expenses, expense.category, now)
            prompt = build_coach_prompt(expense, context, data.monthly_budget)
            content = await self._complete(data.api_key, prompt)
        except (httpx.HTTPError, CoachError) as exc:
            logger.error("error getting coach response: %s", exc)
            return CoachReply.failure(str(exc))
        except Exception as exc:
            logger.exception("unexpected error getting coach response")
            return CoachReply.failure(str(exc) or type(exc).__name__)
        return CoachReply.success(content)


@dataclass(frozen=True)
class CoachState:
    status: str
    text: str = ""
    expense_id: Optional[int] = None


class CoachDesk:
    """Holds the latest coach reply and the single in-flight request."""

    def __init__(self, client: CoachClient):
        self._client = client
        self._task: Optional[asyncio.Task] = None
        self._state = CoachState(STATUS_IDLE)

    @property
    def state(self) -> CoachState:
        return self._state

    def prepare(self, expense_id: int) -> None:
        """Show the thinking state right away, before the request starts."""
        self.cancel()
        self._state = CoachState(STATUS_THINKING, THINKING_MESSAGE, expense_id)

    def cancel(self) -> bool:
        task, self._task = self._task, None
        if task is None or task.done():
            return False
        task.cancel()
        self._state = CoachState(STATUS_IDLE)
        logger.debug("cancelled in-flight coach request")
        return True

    def clear(self) -> None:
        self.cancel()
        self._state = CoachState(STATUS_IDLE)

    async def consult(
        self,
        expense: ExpenseRecord,
        data: StoredData,
        now: Optional[datetime] = None,
    ) -> Optional[CoachReply]:
        """Run one coach request; returns None when superseded or cancelled."""
        self.cancel()
        task = asyncio.ensure_future(
            self._client.get_coach_response(expense, data, now)
        )
        self._task = task
        self._state = CoachState(STATUS_THINKING, THINKING_MESSAGE, expense.id)
        try:
            reply = await task
        except asyncio.CancelledError:
            if task.cancelled() and self._task is not task:
                return None
            raise
        if self._task is not task:
            return None
        self._task = None
        self._state = CoachState(
            STATUS_OK if reply.ok else STATUS_FAILED, reply.text, expense.id
        )
        return reply


__all__ = [
    "CoachClient",
    "CoachDesk",
    "CoachError",
    "CoachReply",
    "CoachState",
    "FALLBACK_MESSAGE",
    "THINKING_MESSAGE",
]

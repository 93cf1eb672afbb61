import json
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from moneycoach.core.config import Settings
from moneycoach.db.store import MemoryStore
from moneycoach.models.expense import ExpenseRecord

IST = timezone(timedelta(hours=5, minutes=30))

# 2026-10-18 is a Sunday; 2026-10-21 a Wednesday.
SUNDAY = datetime(2026, 10, 18, 0, 0, tzinfo=IST)
WEDNESDAY_NOON = datetime(2026, 10, 21, 12, 0, tzinfo=IST)


def make_record(
    id: int,
    amount: float,
    category: str = "food",
    when: datetime = WEDNESDAY_NOON,
    description: str = "thing",
) -> ExpenseRecord:
    return ExpenseRecord(
        id=id,
        description=description,
        amount=amount,
        category=category,
        timestamp=when,
        date=f"{when.day}/{when.month}/{when.year}",
    )


def completion(content: str, status_code: int = 200) -> httpx.Response:
    return httpx.Response(
        status_code, json={"choices": [{"message": {"role": "assistant", "content": content}}]}
    )


@pytest.fixture
def settings(tmp_path):
    s = Settings(data_dir=tmp_path, db_path=tmp_path / "test.sqlite3", debug=False)
    s.init_post_load()
    return s


@pytest.fixture
def memory_store():
    return MemoryStore()


@pytest.fixture
def coach_requests():
    """Requests seen by the mocked coach endpoint, decoded."""
    return []


@pytest.fixture
def coach_transport(coach_requests):
    def handler(request: httpx.Request) -> httpx.Response:
        coach_requests.append(
            {
                "url": str(request.url),
                "headers": dict(request.headers),
                "body": json.loads(request.content),
            }
        )
        return completion("Nice one! That latte had your name on it.")

    return httpx.MockTransport(handler)

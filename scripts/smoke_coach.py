import json
import os
import sys
import tempfile

import httpx
from fastapi.testclient import TestClient

"""Smoke test for the expense -> coach flow.

Runs setup, logs two expenses against a mocked completion endpoint (one
success, one HTTP 401) and prints the stats and coach state after each.
Pass --live to hit the real endpoint with COACH_SMOKE_API_KEY instead.
"""


def _mock_transport() -> httpx.MockTransport:
    calls = {"n": 0}

    def handler(request: httpx.Request) -> httpx.Response:
        calls["n"] += 1
        if calls["n"] > 1:
            return httpx.Response(401, json={"error": {"message": "invalid key"}})
        prompt = json.loads(request.content)["messages"][1]["content"]
        return httpx.Response(
            200,
            json={"choices": [{"message": {"content": f"(mock) read {len(prompt)} chars"}}]},
        )

    return httpx.MockTransport(handler)


def run(live: bool = False):
    from moneycoach.core.config import Settings
    from moneycoach.main import create_app

    with tempfile.TemporaryDirectory() as d:
        settings = Settings(data_dir=d, db_path=os.path.join(d, "smoke.sqlite3"))
        settings.init_post_load()
        app = create_app(
            settings_override=settings,
            coach_transport=None if live else _mock_transport(),
        )
        client = TestClient(app)

        api_key = os.environ.get("COACH_SMOKE_API_KEY", "sk-smoke") if live else "sk-smoke"
        results = {
            "profile": client.put(
                "/profile", json={"api_key": api_key, "monthly_budget": 20000}
            ).json()
        }
        for label, payload in (
            ("latte", {"description": "Latte", "amount": 150, "category": "coffee"}),
            ("cab", {"description": "Cab home", "amount": 320, "category": "transport"}),
        ):
            created = client.post("/expenses", json=payload)
            results[label] = {
                "status": created.status_code,
                "stats": created.json().get("stats"),
                "coach": client.get("/coach").json(),
            }
        results["history"] = [e["description"] for e in client.get("/expenses").json()]
        print(json.dumps(results, indent=2, ensure_ascii=False))


if __name__ == "__main__":
    sys.path.append(os.getcwd())
    run(live="--live" in sys.argv)

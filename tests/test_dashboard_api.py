"""HTTP contract of GET /options (status mapping + payload shape)."""
from __future__ import annotations

import pytest

from dashboard.app import create_app

from conftest import FakeResponse, FakeSession, chain_handler, make_row

BASE = "https://api.test.local/v3/snapshot/options/AAPL"


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("MASSIVE_API_KEY", "test_key")
    monkeypatch.setenv("MASSIVE_BASE_URL", "https://api.test.local")
    monkeypatch.delenv("CALLSCOPE_EXTENDED", raising=False)
    monkeypatch.delenv("CALLSCOPE_MAX_PAGES", raising=False)
    monkeypatch.delenv("CALLSCOPE_MAX_EXPIRATIONS", raising=False)
    return monkeypatch


def _client(handler):
    session = FakeSession(handler)
    return create_app(session=session).test_client(), session


def test_missing_ticker_is_400(env):
    client, session = _client(chain_handler([]))
    resp = client.get("/options")
    assert resp.status_code == 400
    assert resp.get_json() == {"message": "Missing ticker parameter"}
    assert session.calls == []


def test_blank_ticker_is_400(env):
    client, _ = _client(chain_handler([]))
    resp = client.get("/options?ticker=%20%20")
    assert resp.status_code == 400
    assert resp.get_json()["message"] == "Ticker cannot be empty"


def test_missing_credential_is_500(env):
    env.setenv("MASSIVE_API_KEY", "")
    client, session = _client(chain_handler([]))
    resp = client.get("/options?ticker=AAPL")
    assert resp.status_code == 500
    assert "MASSIVE_API_KEY" in resp.get_json()["message"]
    assert session.calls == []


def test_upstream_503_is_502_without_partial_data(env):
    pages = [
        {"results": [make_row(strike=100, last_trade=1)], "next_url": f"{BASE}?cursor=2"},
        FakeResponse(503, body="Service Unavailable"),
    ]
    client, _ = _client(chain_handler(pages))
    resp = client.get("/options?ticker=aapl")
    assert resp.status_code == 502
    body = resp.get_json()
    assert body["statusCode"] == 503
    assert body["details"] == "Service Unavailable"
    assert "options" not in body


def test_success_payload(env):
    quote = FakeResponse(200, {"ticker": {"day": {"close": "102.50"}}})
    pages = [{"results": [make_row(strike=100, bid=5, ask=7), make_row(strike=100, contract_type="put", bid=1, ask=2)]}]
    client, session = _client(chain_handler(pages, quote=quote))
    resp = client.get("/options?ticker=%20aapl%20")
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["underlyingPrice"] == 102.5
    assert body["underlyingSpot"] == 102.5
    assert body["expirations"] == ["2030-01-18"]
    assert len(body["options"]) == 1
    opt = body["options"][0]
    assert (opt["premium"], opt["intrinsic"], opt["extrinsic"]) == (6.0, 2.5, 3.5)
    assert (opt["breakEven"], opt["target2x"], opt["target3x"]) == (106.0, 112.0, 118.0)
    assert all("/AAPL" in u for u in session.calls)


def test_api_prefix_route_and_page_ceiling(env):
    pages = [
        {"results": [make_row(strike=100 + i, last_trade=1)], "next_url": f"{BASE}?cursor={i + 2}"}
        for i in range(20)
    ]
    client, session = _client(chain_handler(pages))
    resp = client.get("/api/options?ticker=AAPL")
    assert resp.status_code == 200
    assert len(session.chain_calls()) == 15
    assert len(resp.get_json()["options"]) == 15


def test_health():
    client, _ = _client(chain_handler([]))
    assert client.get("/health").get_json() == {"status": "ok"}

"""Unit tests for the aggregator and change-webhook HTTP clients"""

import json
import httpx
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from loan_ledger.domain.exceptions import AggregatorError, AggregatorNotConfiguredError
from loan_ledger.infrastructure.clients.aggregator import AggregatorClient, parse_liabilities
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient, change_event


LIABILITIES_PAYLOAD = {
    "liabilities": {
        "credit": [
            {
                "name": "Platinum Card",
                "last_statement_balance": 1234.56,
                "aprs": [{"apr_percentage": 22.9}],
                "next_payment_due_date": "2024-07-10",
                "is_overdue": True,
            }
        ],
        "student": [
            {
                "loan_name": "Stafford",
                "outstanding_balance": 15000,
                "interest_rate_percentage": 4.5,
                "origination_date": "2016-08-20",
                "next_payment_due_date": None,
                "is_overdue": False,
            }
        ],
        "mortgage": [
            {
                "property_address": {"street": "1 Main St", "city": "Springfield", "region": "IL"},
                "current_balance": 250000,
                "interest_rate_percentage": 6.1,
                "origination_date": "2019-05-01",
                "next_payment_due_date": "2024-07-01",
                "is_overdue": None,
            }
        ],
    }
}


def _client(handler) -> AggregatorClient:
    return AggregatorClient(
        base_url="https://sandbox.test",
        client_id="cid",
        secret="shh",
        transport=httpx.MockTransport(handler),
    )


def test_parse_liabilities_maps_each_product():
    liabilities = parse_liabilities(LIABILITIES_PAYLOAD)

    assert [l.kind for l in liabilities] == ["credit", "student", "mortgage"]

    credit, student, mortgage = liabilities
    assert credit.name == "Platinum Card"
    assert credit.balance == Decimal("1234.56")
    assert credit.annual_rate_percent == Decimal("22.9")
    assert credit.next_payment_due_date == date(2024, 7, 10)
    assert credit.is_overdue is True

    assert student.origination_date == date(2016, 8, 20)
    assert student.next_payment_due_date is None

    assert mortgage.name == "1 Main St, Springfield, IL"
    assert mortgage.is_overdue is False


def test_parse_liabilities_handles_missing_sections():
    assert parse_liabilities({}) == []
    assert parse_liabilities({"liabilities": {"credit": None}}) == []


async def test_exchange_and_fetch_liabilities_send_credentials():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        seen.append((request.url.path, body))
        if request.url.path == "/item/public_token/exchange":
            return httpx.Response(200, json={"access_token": "access-123"})
        return httpx.Response(200, json=LIABILITIES_PAYLOAD)

    client = _client(handler)
    access_token = await client.exchange_public_token("public-abc")
    liabilities = await client.get_liabilities(access_token)

    assert access_token == "access-123"
    assert len(liabilities) == 3
    assert seen[0] == ("/item/public_token/exchange", {"client_id": "cid", "secret": "shh", "public_token": "public-abc"})
    assert seen[1][1]["access_token"] == "access-123"


async def test_create_link_token_requests_liabilities_product():
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["products"] == ["liabilities"]
        assert body["user"] == {"client_user_id": "lender_1"}
        return httpx.Response(200, json={"link_token": "link-xyz"})

    assert await _client(handler).create_link_token("lender_1") == "link-xyz"


async def test_http_error_raises_aggregator_error():
    client = _client(lambda request: httpx.Response(400, json={"error_code": "INVALID_PUBLIC_TOKEN"}))

    with pytest.raises(AggregatorError):
        await client.exchange_public_token("bad")


async def test_timeout_raises_aggregator_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(AggregatorError):
        await _client(handler).get_liabilities("access")


async def test_missing_field_raises_aggregator_error():
    with pytest.raises(AggregatorError):
        await _client(lambda request: httpx.Response(200, json={})).exchange_public_token("x")


async def test_missing_credentials_raise_not_configured():
    client = AggregatorClient(base_url="https://sandbox.test", client_id="", secret="")
    client.client_id = None

    with pytest.raises(AggregatorNotConfiguredError):
        await client.exchange_public_token("x")


def test_change_event_shape():
    event = change_event("DELETE", "loans", "lender_1", {"loan_id": "abc"})
    assert event == {"event": "DELETE", "table": "loans", "user_id": "lender_1", "record": {"loan_id": "abc"}}


async def test_webhook_skipped_without_url():
    client = ChangeWebhookClient(webhook_url=None)
    client.webhook_url = None

    assert await client.send_change_event({"event": "INSERT"}) is False


async def test_webhook_delivers_payload():
    received = []

    def handler(request: httpx.Request) -> httpx.Response:
        received.append(json.loads(request.content))
        return httpx.Response(204)

    client = ChangeWebhookClient(webhook_url="https://hooks.test/changes", transport=httpx.MockTransport(handler))

    assert await client.send_change_event({"event": "INSERT", "table": "loans"}) is True
    assert received == [{"event": "INSERT", "table": "loans"}]


@patch("loan_ledger.infrastructure.clients.webhook.asyncio.sleep", new_callable=AsyncMock)
async def test_webhook_retries_with_backoff_then_gives_up(mock_sleep: AsyncMock):
    attempts = []

    def handler(request: httpx.Request) -> httpx.Response:
        attempts.append(1)
        return httpx.Response(503)

    client = ChangeWebhookClient(webhook_url="https://hooks.test/changes", transport=httpx.MockTransport(handler))
    client.max_retries = 3
    client.backoff_base = 1.0

    assert await client.send_change_event({"event": "UPDATE"}) is False
    assert len(attempts) == 3
    assert [c.args[0] for c in mock_sleep.await_args_list] == [1.0, 2.0]


@patch("loan_ledger.infrastructure.clients.webhook.asyncio.sleep", new_callable=AsyncMock)
async def test_webhook_recovers_after_transient_failure(mock_sleep: AsyncMock):
    responses = iter([httpx.Response(500), httpx.Response(200)])
    client = ChangeWebhookClient(
        webhook_url="https://hooks.test/changes",
        transport=httpx.MockTransport(lambda request: next(responses)),
    )

    assert await client.send_change_event({"event": "UPDATE"}) is True
    assert mock_sleep.await_count == 1

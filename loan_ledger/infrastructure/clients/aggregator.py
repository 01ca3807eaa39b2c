"""Bank aggregation (Plaid) HTTP client for importing external liabilities"""

import httpx
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional
from loan_ledger.domain.models import Liability
from loan_ledger.domain.exceptions import AggregatorError, AggregatorNotConfiguredError
from loan_ledger.config import settings


def _decimal(value: Any) -> Optional[Decimal]:
    return None if value is None else Decimal(str(value))


def _date(value: Optional[str]) -> Optional[date]:
    return date.fromisoformat(value) if value else None


def _address(value: Any) -> Optional[str]:
    # Plaid sends a structured address; older payloads carried a plain string
    if isinstance(value, dict):
        parts = [value.get("street"), value.get("city"), value.get("region")]
        return ", ".join(p for p in parts if p) or None
    return value


def parse_liabilities(payload: Dict[str, Any]) -> List[Liability]:
    """
    Convert a /liabilities/get response into domain liabilities.

    Order: credit cards, then student loans, then mortgages.
    """
    liabilities = payload.get("liabilities") or {}
    parsed: List[Liability] = []

    for credit in liabilities.get("credit") or []:
        aprs = credit.get("aprs") or []
        parsed.append(
            Liability(
                kind="credit",
                name=credit.get("name"),
                balance=_decimal(credit.get("last_statement_balance")),
                annual_rate_percent=_decimal(aprs[0].get("apr_percentage")) if aprs else None,
                origination_date=None,
                next_payment_due_date=_date(credit.get("next_payment_due_date")),
                is_overdue=bool(credit.get("is_overdue")),
            )
        )

    for student in liabilities.get("student") or []:
        parsed.append(
            Liability(
                kind="student",
                name=student.get("loan_name"),
                balance=_decimal(student.get("outstanding_balance")),
                annual_rate_percent=_decimal(student.get("interest_rate_percentage")),
                origination_date=_date(student.get("origination_date")),
                next_payment_due_date=_date(student.get("next_payment_due_date")),
                is_overdue=bool(student.get("is_overdue")),
            )
        )

    for mortgage in liabilities.get("mortgage") or []:
        parsed.append(
            Liability(
                kind="mortgage",
                name=_address(mortgage.get("property_address")),
                balance=_decimal(mortgage.get("current_balance")),
                annual_rate_percent=_decimal(mortgage.get("interest_rate_percentage")),
                origination_date=_date(mortgage.get("origination_date")),
                next_payment_due_date=_date(mortgage.get("next_payment_due_date")),
                is_overdue=bool(mortgage.get("is_overdue")),
            )
        )

    return parsed


class AggregatorClient:
    """Client for the external bank aggregation API"""

    def __init__(
        self,
        base_url: str | None = None,
        client_id: str | None = None,
        secret: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url or settings.plaid_base_url or f"https://{settings.plaid_env}.plaid.com"
        self.client_id = client_id or settings.plaid_client_id
        self.secret = secret or settings.plaid_secret
        self.timeout = timeout or settings.http_timeout_seconds
        self.transport = transport

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """
        POST with credentials in the body, as the aggregator expects.

        Raises:
            AggregatorNotConfiguredError: client id or secret missing
            AggregatorError: On timeout, HTTP errors, or invalid response
        """
        if not self.client_id or not self.secret:
            raise AggregatorNotConfiguredError("Bank aggregator credentials are not configured")

        async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
            try:
                response = await client.post(
                    f"{self.base_url}{path}",
                    json={"client_id": self.client_id, "secret": self.secret, **body},
                )
                response.raise_for_status()
                return response.json()

            except httpx.TimeoutException as e:
                raise AggregatorError(f"Aggregator timeout after {self.timeout}s on {path}") from e
            except httpx.HTTPStatusError as e:
                raise AggregatorError(f"Aggregator error on {path}: {e.response.status_code}") from e
            except httpx.RequestError as e:
                raise AggregatorError(f"Aggregator unreachable on {path}: {e}") from e
            except ValueError as e:
                raise AggregatorError(f"Invalid JSON from aggregator on {path}") from e

    async def create_link_token(self, user_id: str) -> str:
        """Create a short-lived token the browser uses to open the bank link flow"""
        data = await self._post(
            "/link/token/create",
            {
                "user": {"client_user_id": user_id},
                "client_name": settings.plaid_client_name,
                "products": ["liabilities"],
                "country_codes": ["US"],
                "language": "en",
            },
        )
        try:
            return data["link_token"]
        except KeyError as e:
            raise AggregatorError("Aggregator response missing link_token") from e

    async def exchange_public_token(self, public_token: str) -> str:
        """Trade the public token from the link flow for an access token"""
        data = await self._post("/item/public_token/exchange", {"public_token": public_token})
        try:
            return data["access_token"]
        except KeyError as e:
            raise AggregatorError("Aggregator response missing access_token") from e

    async def get_liabilities(self, access_token: str) -> List[Liability]:
        """Fetch credit, student-loan and mortgage liabilities for an item"""
        data = await self._post("/liabilities/get", {"access_token": access_token})
        try:
            return parse_liabilities(data)
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            raise AggregatorError(f"Invalid liability data from aggregator: {e}") from e

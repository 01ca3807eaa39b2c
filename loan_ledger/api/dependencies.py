"""Dependency injection for FastAPI endpoints"""

import uuid
from typing import Optional

from fastapi import Header, HTTPException, Request
from loan_ledger.infrastructure.clients.aggregator import AggregatorClient
from loan_ledger.infrastructure.clients.webhook import ChangeWebhookClient


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_current_user_id(x_user_id: Optional[str] = Header(default=None)) -> str:
    """
    Identity port: the stable user id established by the identity provider.

    Authentication happens upstream; every loan query is scoped to this id.
    """
    if not x_user_id or not x_user_id.strip():
        raise HTTPException(status_code=401, detail="Missing user identity")
    return x_user_id.strip()


def get_aggregator_client() -> AggregatorClient:
    """Provide bank aggregation client instance"""
    return AggregatorClient()


def get_webhook_client() -> ChangeWebhookClient:
    """Provide change-event webhook client instance"""
    return ChangeWebhookClient()


def parse_id(value: str, kind: str) -> uuid.UUID:
    """Parse a path identifier, 400 on malformed input"""
    try:
        return uuid.UUID(value)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Invalid {kind} ID format")

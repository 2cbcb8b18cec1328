"""Dependency injection for FastAPI endpoints"""

import uuid
from dataclasses import dataclass
from fastapi import Header, Request
from pos_gateway.infrastructure.clients.ledger import LedgerClient


@dataclass
class CheckoutIdentity:
    """Company and operator a request acts on behalf of"""

    company_id: uuid.UUID
    user_id: str


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_checkout_identity(
    x_company_id: uuid.UUID = Header(..., description="Company (tenant) identifier"),
    x_user_id: str = Header("anonymous", description="Operator identifier"),
) -> CheckoutIdentity:
    """Read the explicit company/user context from request headers"""
    return CheckoutIdentity(company_id=x_company_id, user_id=x_user_id)


def get_ledger_client() -> LedgerClient:
    """Provide Ledger webhook client instance"""
    return LedgerClient()

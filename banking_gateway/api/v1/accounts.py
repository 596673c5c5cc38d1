"""/v1/accounts - account creation, funding and transaction history"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Query

from banking_gateway.api.v1.errors import to_http_exception
from banking_gateway.api.v1.schemas import (
    AccountResponse,
    CreateAccountRequest,
    FundAccountRequest,
    FundAccountResponse,
    TransactionItem,
    TransactionListResponse,
)
from banking_gateway.api.dependencies import get_ledger_engine, get_request_context, require_identity
from banking_gateway.config import settings
from banking_gateway.domain.exceptions import DomainException
from banking_gateway.domain.models import FundingSource, Identity, RequestContext
from banking_gateway.infrastructure.observability.logging import log_funding
from banking_gateway.services.ledger_engine import LedgerEngine

router = APIRouter(prefix="/accounts")


@router.post("", response_model=AccountResponse, status_code=201)
def create_account(
    body: CreateAccountRequest,
    ledger: LedgerEngine = Depends(get_ledger_engine),
    identity: Identity = Depends(require_identity),
    ctx: RequestContext = Depends(get_request_context),
):
    """Open a checking or savings account (one of each per user)"""
    try:
        account = ledger.open_account(identity.user_id, body.account_type)
    except DomainException as e:
        logging.warning(f"Account creation rejected: {e}", extra={"request_id": ctx.request_id})
        raise to_http_exception(e)

    return AccountResponse.model_validate(account)


@router.get("", response_model=list[AccountResponse])
def list_accounts(
    ledger: LedgerEngine = Depends(get_ledger_engine),
    identity: Identity = Depends(require_identity),
):
    return [AccountResponse.model_validate(a) for a in ledger.list_accounts(identity.user_id)]


@router.post("/fund", response_model=FundAccountResponse)
def fund_account(
    body: FundAccountRequest,
    ledger: LedgerEngine = Depends(get_ledger_engine),
    identity: Identity = Depends(require_identity),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Deposit into one of the caller's accounts.

    Flow:
    1. Ownership and status checks (foreign accounts look absent)
    2. Ledger entry + balance increment in one DB transaction
    3. Return the entry and the balance read back from that transaction
    """
    start_time = time.time()
    source = FundingSource(
        type=body.funding_source.type,
        account_number=body.funding_source.account_number,
        routing_number=body.funding_source.routing_number,
    )

    try:
        result = ledger.fund(identity.user_id, body.account_id, body.amount_cents, source)

    except DomainException as e:
        logging.warning(f"Funding rejected: {e}", extra={"request_id": ctx.request_id})
        raise to_http_exception(e)

    except Exception as e:
        logging.error(f"Unexpected error: {e}", extra={"request_id": ctx.request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    duration_ms = (time.time() - start_time) * 1000
    log_funding(
        ctx.request_id,
        identity.user_id,
        body.account_id,
        body.amount_cents,
        result.new_balance_cents,
        duration_ms,
    )

    return FundAccountResponse(
        transaction=TransactionItem.model_validate(result.transaction),
        new_balance_cents=result.new_balance_cents,
    )


@router.get("/{account_id}/transactions", response_model=TransactionListResponse)
def get_transactions(
    account_id: int,
    limit: int | None = Query(None, gt=0, description="Page size"),
    offset: int = Query(0, ge=0, description="Entries to skip"),
    ledger: LedgerEngine = Depends(get_ledger_engine),
    identity: Identity = Depends(require_identity),
):
    """
    One page of history, most recent first.

    Callers page by advancing offset by the page size; no cursor is kept server-side.
    """
    page_size = limit or settings.default_page_size
    try:
        entries = ledger.list_transactions(identity.user_id, account_id, limit=page_size, offset=offset)
    except DomainException as e:
        raise to_http_exception(e)

    return TransactionListResponse(
        account_id=account_id,
        limit=page_size,
        offset=offset,
        transactions=[TransactionItem.model_validate(t) for t in entries],
    )

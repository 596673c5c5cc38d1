"""Ledger Transaction Engine - account creation and atomic balance mutation"""

import logging
from datetime import datetime
from typing import Callable, List, Optional
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from banking_gateway.config import settings
from banking_gateway.domain.account_numbers import generate_account_number
from banking_gateway.domain.exceptions import ConflictError, InternalError, InvalidInputError, NotFoundError
from banking_gateway.domain.models import (
    ACCOUNT_TYPES,
    FUNDING_SOURCE_TYPES,
    MAX_BALANCE_CENTS,
    AccountRecord,
    FundingResult,
    FundingSource,
    LedgerEntry,
)
from banking_gateway.infrastructure.database.models import Account
from banking_gateway.infrastructure.database.repositories import (
    AccountRepository,
    TransactionRepository,
    UserRepository,
    to_account_record,
    to_ledger_entry,
)
from banking_gateway.infrastructure.observability.metrics import accounts_opened_counter, record_funding
from banking_gateway.utils.date_utils import utcnow


class LedgerEngine:
    """All balance changes go through here; nothing else writes balance_cents"""

    def __init__(
        self,
        db: Session,
        max_account_number_attempts: int | None = None,
        number_generator: Callable[[], str] = generate_account_number,
        clock: Callable[[], datetime] = utcnow,
        max_funding_amount_cents: int | None = None,
    ):
        self.db = db
        self.max_account_number_attempts = max_account_number_attempts or settings.account_number_max_attempts
        self.max_funding_amount_cents = max_funding_amount_cents or settings.max_funding_amount_cents
        self.number_generator = number_generator
        self.clock = clock
        self.users = UserRepository(db)
        self.accounts = AccountRepository(db)
        self.transactions = TransactionRepository(db)

    def open_account(self, user_id: int, account_type: str) -> AccountRecord:
        """
        Open a zero-balance active account.

        Requirements:
        - At most one account per (user, type)
        - Account number checked against the store, bounded retries
        - A unique-constraint race on insert is retried like a collision

        Raises:
            NotFoundError: no such user
            ConflictError: user already holds an account of this type
            InternalError: no free account number within the retry budget
        """
        if account_type not in ACCOUNT_TYPES:
            raise InvalidInputError(f"Unknown account type: {account_type}")

        # An insert for a missing user must not be mistaken for a number collision
        if self.users.get_by_id(user_id) is None:
            raise NotFoundError("User not found")

        if self.accounts.get_by_user_and_type(user_id, account_type):
            raise ConflictError(f"You already have a {account_type} account")

        for attempt in range(1, self.max_account_number_attempts + 1):
            account_number = self.number_generator()
            if self.accounts.account_number_exists(account_number):
                continue

            try:
                account = self.accounts.create_account(user_id, account_number, account_type)
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                # Lost a race: either on the number or on (user, type)
                if self.accounts.get_by_user_and_type(user_id, account_type):
                    raise ConflictError(f"You already have a {account_type} account")
                logging.warning(f"Account number collision on insert (attempt {attempt})")
                continue

            accounts_opened_counter.labels(account_type=account_type).inc()
            return to_account_record(account)

        raise InternalError(
            f"Could not generate a unique account number after {self.max_account_number_attempts} attempts"
        )

    def list_accounts(self, user_id: int) -> List[AccountRecord]:
        return [to_account_record(a) for a in self.accounts.list_by_user(user_id)]

    def _owned_account(self, user_id: int, account_id: int, for_update: bool = False) -> Account:
        account = self.accounts.get_owned_account(account_id, user_id, for_update=for_update)
        if account is None:
            raise NotFoundError("Account not found")
        return account

    def fund(self, user_id: int, account_id: int, amount_cents: int, source: FundingSource) -> FundingResult:
        """
        Deposit money into an owned, active account.

        The ledger insert, the balance increment and the balance read-back
        run in one DB transaction: either both writes land or neither does.
        """
        if amount_cents is None or amount_cents <= 0:
            raise InvalidInputError("Amount must be greater than zero")
        if amount_cents > self.max_funding_amount_cents:
            raise InvalidInputError(f"Amount must not exceed {self.max_funding_amount_cents} cents")
        if source.type not in FUNDING_SOURCE_TYPES:
            raise InvalidInputError(f"Unknown funding source type: {source.type}")
        if source.type == "bank" and not source.routing_number:
            raise InvalidInputError("Routing number is required for bank transfers")

        try:
            account = self._owned_account(user_id, account_id, for_update=True)
            if account.status != "active":
                raise InvalidInputError("Account is not active")

            # Balance as loaded under the row lock; the store must never be asked to go past BIGINT
            if account.balance_cents + amount_cents > MAX_BALANCE_CENTS:
                raise InvalidInputError("Deposit would exceed the maximum account balance")

            now = self.clock()
            txn = self.transactions.create_transaction(
                account_id=account.id,
                type="deposit",
                amount_cents=amount_cents,
                description=f"Funding from {source.type}",
                status="completed",
                processed_at=now,
            )
            self.accounts.increment_balance(account.id, amount_cents)
            new_balance = self.accounts.read_balance(account.id)
            if new_balance is None:
                raise InternalError("Account vanished while funding")

            entry = to_ledger_entry(txn, account_type=account.account_type)
            self.db.commit()
        except Exception:
            self.db.rollback()
            raise

        record_funding(source.type, amount_cents)
        return FundingResult(transaction=entry, new_balance_cents=new_balance)

    def list_transactions(
        self,
        user_id: int,
        account_id: int,
        limit: Optional[int] = None,
        offset: int = 0,
    ) -> List[LedgerEntry]:
        """One page of an owned account's history, most recent first"""
        limit = settings.default_page_size if limit is None else limit
        if limit <= 0:
            raise InvalidInputError("limit must be positive")
        if offset < 0:
            raise InvalidInputError("offset must not be negative")

        account = self._owned_account(user_id, account_id)
        page = self.transactions.list_for_account(account.id, limit=limit, offset=offset)
        return [to_ledger_entry(txn, account_type=account.account_type) for txn in page]

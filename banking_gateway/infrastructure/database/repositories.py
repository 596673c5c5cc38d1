"""Data access layer for users, sessions, accounts and ledger entries"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.orm import Session
from banking_gateway.infrastructure.database.models import User, UserSession, Account, LedgerTransaction
from banking_gateway.domain.models import AccountRecord, LedgerEntry, SessionRecord, UserProfile


def to_account_record(account: Account) -> AccountRecord:
    return AccountRecord(
        id=account.id,
        user_id=account.user_id,
        account_number=account.account_number,
        account_type=account.account_type,
        status=account.status,
        balance_cents=account.balance_cents,
        created_at=account.created_at,
    )


def to_ledger_entry(txn: LedgerTransaction, account_type: Optional[str] = None) -> LedgerEntry:
    return LedgerEntry(
        id=txn.id,
        account_id=txn.account_id,
        type=txn.type,
        amount_cents=txn.amount_cents,
        description=txn.description,
        status=txn.status,
        created_at=txn.created_at,
        processed_at=txn.processed_at,
        account_type=account_type,
    )


def to_session_record(session: UserSession) -> SessionRecord:
    return SessionRecord(
        id=session.id,
        user_id=session.user_id,
        expires_at=session.expires_at,
        created_at=session.created_at,
    )


def to_user_profile(user: User) -> UserProfile:
    """Strip credential hashes before a user leaves the service"""
    return UserProfile(
        id=user.id,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
        phone_number=user.phone_number,
        date_of_birth=user.date_of_birth,
        address=user.address,
        city=user.city,
        state=user.state,
        zip_code=user.zip_code,
        created_at=user.created_at,
    )


class UserRepository:
    """Repository for account holders"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def create_user(self, **fields) -> User:
        """Persist a user; caller must pass hashed secrets"""
        db_user = User(**fields)
        self.db.add(db_user)
        self.db.flush()  # Get ID without committing
        return db_user


class SessionRepository:
    """Repository for login sessions"""

    def __init__(self, db: Session):
        self.db = db

    def create_session(self, user_id: int, token: str, expires_at: datetime, created_at: datetime) -> UserSession:
        db_session = UserSession(user_id=user_id, token=token, expires_at=expires_at, created_at=created_at)
        self.db.add(db_session)
        self.db.flush()
        return db_session

    def get_by_token(self, token: str) -> Optional[UserSession]:
        return self.db.query(UserSession).filter(UserSession.token == token).first()

    def get_active_by_user(self, user_id: int, now: datetime) -> List[UserSession]:
        return (
            self.db.query(UserSession)
            .filter(UserSession.user_id == user_id, UserSession.expires_at > now)
            .order_by(UserSession.created_at.desc(), UserSession.id.desc())
            .all()
        )

    def delete_by_token(self, token: str) -> int:
        return (
            self.db.query(UserSession)
            .filter(UserSession.token == token)
            .delete(synchronize_session=False)
        )

    def delete_for_user(self, user_id: int, keep_token: Optional[str] = None) -> int:
        """Delete a user's sessions in one statement, optionally sparing one token"""
        query = self.db.query(UserSession).filter(UserSession.user_id == user_id)
        if keep_token:
            query = query.filter(UserSession.token != keep_token)
        return query.delete(synchronize_session=False)

    def delete_expired(self, now: datetime, user_id: Optional[int] = None) -> int:
        """Delete sessions whose expiry is at or before now"""
        query = self.db.query(UserSession).filter(UserSession.expires_at <= now)
        if user_id is not None:
            query = query.filter(UserSession.user_id == user_id)
        return query.delete(synchronize_session=False)


class AccountRepository:
    """Repository for bank accounts"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_user_and_type(self, user_id: int, account_type: str) -> Optional[Account]:
        return (
            self.db.query(Account)
            .filter(Account.user_id == user_id, Account.account_type == account_type)
            .first()
        )

    def account_number_exists(self, account_number: str) -> bool:
        return (
            self.db.query(Account.id)
            .filter(Account.account_number == account_number)
            .first()
        ) is not None

    def get_owned_account(self, account_id: int, user_id: int, for_update: bool = False) -> Optional[Account]:
        """Ownership is part of the query so foreign accounts look absent"""
        query = self.db.query(Account).filter(Account.id == account_id, Account.user_id == user_id)
        if for_update:
            query = query.with_for_update().populate_existing()
        return query.first()

    def list_by_user(self, user_id: int) -> List[Account]:
        return self.db.query(Account).filter(Account.user_id == user_id).order_by(Account.id).all()

    def create_account(self, user_id: int, account_number: str, account_type: str) -> Account:
        db_account = Account(
            user_id=user_id,
            account_number=account_number,
            account_type=account_type,
            balance_cents=0,
            status="active",
        )
        self.db.add(db_account)
        self.db.flush()
        return db_account

    def increment_balance(self, account_id: int, amount_cents: int) -> None:
        """Relative update so concurrent increments never overwrite each other"""
        self.db.query(Account).filter(Account.id == account_id).update(
            {Account.balance_cents: Account.balance_cents + amount_cents},
            synchronize_session=False,
        )

    def read_balance(self, account_id: int) -> Optional[int]:
        row = self.db.query(Account.balance_cents).filter(Account.id == account_id).first()
        return row[0] if row else None


class TransactionRepository:
    """Repository for ledger entries"""

    def __init__(self, db: Session):
        self.db = db

    def create_transaction(
        self,
        account_id: int,
        type: str,
        amount_cents: int,
        description: str,
        status: str,
        processed_at: Optional[datetime] = None,
    ) -> LedgerTransaction:
        db_txn = LedgerTransaction(
            account_id=account_id,
            type=type,
            amount_cents=amount_cents,
            description=description,
            status=status,
            processed_at=processed_at,
        )
        self.db.add(db_txn)
        self.db.flush()
        return db_txn

    def list_for_account(self, account_id: int, limit: int, offset: int) -> List[LedgerTransaction]:
        """Most recent first"""
        return (
            self.db.query(LedgerTransaction)
            .filter(LedgerTransaction.account_id == account_id)
            .order_by(LedgerTransaction.created_at.desc(), LedgerTransaction.id.desc())
            .limit(limit)
            .offset(offset)
            .all()
        )

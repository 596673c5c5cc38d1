"""SQLAlchemy ORM models for users, sessions, accounts and ledger entries"""

from sqlalchemy import Column, String, BigInteger, DateTime, Integer, ForeignKey, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base, relationship

from banking_gateway.utils.date_utils import utcnow

Base = declarative_base()


class User(Base):
    """Account holder; password and SSN are stored only as bcrypt hashes"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    email = Column(String(320), nullable=False, unique=True, index=True)
    password_hash = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    phone_number = Column(String(20), nullable=False)  # E.164
    date_of_birth = Column(Text, nullable=False)
    ssn_hash = Column(Text, nullable=False)
    address = Column(Text, nullable=False)
    city = Column(Text, nullable=False)
    state = Column(String(2), nullable=False)
    zip_code = Column(String(10), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    sessions = relationship("UserSession", back_populates="user", cascade="all, delete-orphan")
    accounts = relationship("Account", back_populates="user")


class UserSession(Base):
    """Persisted login session; expires_at is authoritative for revocation"""

    __tablename__ = "sessions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token = Column(Text, nullable=False, unique=True)
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="sessions")


class Account(Base):
    """Bank account; balance only changes through the ledger engine"""

    __tablename__ = "accounts"
    __table_args__ = (UniqueConstraint("user_id", "account_type", name="uq_accounts_user_type"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    account_number = Column(String(10), nullable=False, unique=True)
    account_type = Column(Text, nullable=False)
    status = Column(Text, nullable=False, default="active")
    balance_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="accounts")
    transactions = relationship("LedgerTransaction", back_populates="account")


class LedgerTransaction(Base):
    """Append-only ledger entry"""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)
    type = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    description = Column(Text, nullable=False, default="")
    status = Column(Text, nullable=False, default="completed")
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, index=True)
    processed_at = Column(DateTime(timezone=True), nullable=True)

    account = relationship("Account", back_populates="transactions")

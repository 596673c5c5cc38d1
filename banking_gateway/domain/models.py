"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

ACCOUNT_TYPES = ("checking", "savings")
FUNDING_SOURCE_TYPES = ("card", "bank")

# Largest balance a BIGINT column holds
MAX_BALANCE_CENTS = 2**63 - 1


@dataclass
class Identity:
    """Authenticated caller resolved from a valid session"""

    user_id: int
    token: str
    expires_at: datetime


@dataclass
class RequestContext:
    """Per-request values passed explicitly to every operation"""

    identity: Optional[Identity] = None
    token: Optional[str] = None
    request_id: str = "unknown"


@dataclass
class IssuedSession:
    """Freshly signed session token and its persisted expiry"""

    token: str
    expires_at: datetime


@dataclass
class LogoutResult:
    """Outcome of a revocation; cookie clearing is reported separately from deletion"""

    success: bool
    reason: str  # logged_out | no_session_token | session_not_found | store_error
    sessions_deleted: int = 0
    cookie_cleared: bool = True


@dataclass
class SessionRecord:
    """Persisted session as exposed to callers (token elided)"""

    id: int
    user_id: int
    expires_at: datetime
    created_at: datetime


@dataclass
class FundingSource:
    """Where money for a funding operation comes from"""

    type: str  # "card" or "bank"
    account_number: str
    routing_number: Optional[str] = None


@dataclass
class AccountRecord:
    """Bank account snapshot"""

    id: int
    user_id: int
    account_number: str
    account_type: str  # "checking" or "savings"
    status: str  # "active" or "suspended"
    balance_cents: int
    created_at: datetime


@dataclass
class LedgerEntry:
    """Immutable ledger transaction, optionally enriched with its account type"""

    id: int
    account_id: int
    type: str  # "deposit" or "withdrawal"
    amount_cents: int
    description: str
    status: str  # "completed" or "pending"
    created_at: datetime
    processed_at: Optional[datetime] = None
    account_type: Optional[str] = None


@dataclass
class FundingResult:
    """Ledger entry written by a funding operation and the balance read back with it"""

    transaction: LedgerEntry
    new_balance_cents: int


@dataclass
class UserProfile:
    """Account holder without credential hashes"""

    id: int
    email: str
    first_name: str
    last_name: str
    phone_number: str
    date_of_birth: str
    address: str
    city: str
    state: str
    zip_code: str
    created_at: datetime

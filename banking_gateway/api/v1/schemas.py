"""Pydantic schemas for API request/response validation"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from datetime import datetime
from typing import List, Literal, Optional

from banking_gateway.config import settings


class SignupRequest(BaseModel):
    """Request body for POST /v1/auth/signup"""

    email: EmailStr
    password: str = Field(..., min_length=8)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    date_of_birth: str
    ssn: str = Field(..., pattern=r"^\d{9}$")
    address: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    state: str = Field(..., min_length=2, max_length=2)
    zip_code: str = Field(..., pattern=r"^\d{5}$")


class LoginRequest(BaseModel):
    """Request body for POST /v1/auth/login"""

    email: EmailStr
    password: str


class UserResponse(BaseModel):
    """Account holder without credential hashes"""

    model_config = ConfigDict(from_attributes=True)

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


class AuthResponse(BaseModel):
    """Response for signup and login"""

    user: UserResponse
    token: str
    expires_at: datetime


class LogoutResponse(BaseModel):
    """Structured logout outcome; user-facing wording is left to the client"""

    model_config = ConfigDict(from_attributes=True)

    success: bool
    reason: str
    sessions_deleted: int
    cookie_cleared: bool


class CleanupResponse(BaseModel):
    """Response for POST /v1/auth/sessions/cleanup"""

    success: bool
    sessions_deleted: int


class SessionItem(BaseModel):
    """Single active session"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    expires_at: datetime
    created_at: datetime


class SessionListResponse(BaseModel):
    user_id: int
    sessions: List[SessionItem]


class CreateAccountRequest(BaseModel):
    """Request body for POST /v1/accounts"""

    account_type: Literal["checking", "savings"]


class AccountResponse(BaseModel):
    """Bank account"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    account_number: str
    account_type: str
    status: str
    balance_cents: int
    created_at: datetime


class FundingSourceSchema(BaseModel):
    """Card or bank account money is pulled from"""

    type: Literal["card", "bank"]
    account_number: str
    routing_number: Optional[str] = None


class FundAccountRequest(BaseModel):
    """Request body for POST /v1/accounts/fund"""

    account_id: int
    amount_cents: int = Field(
        ..., gt=0, le=settings.max_funding_amount_cents, description="Amount to deposit in cents"
    )
    funding_source: FundingSourceSchema

    @model_validator(mode="after")
    def require_routing_number_for_bank(self):
        if self.funding_source.type == "bank" and not self.funding_source.routing_number:
            raise ValueError("Routing number is required for bank transfers")
        return self


class TransactionItem(BaseModel):
    """Single ledger entry enriched with its account type"""

    model_config = ConfigDict(from_attributes=True)

    id: int
    account_id: int
    type: str
    amount_cents: int
    description: str
    status: str
    created_at: datetime
    processed_at: Optional[datetime] = None
    account_type: Optional[str] = None


class FundAccountResponse(BaseModel):
    """Response for POST /v1/accounts/fund"""

    transaction: TransactionItem
    new_balance_cents: int


class TransactionListResponse(BaseModel):
    """Response for GET /v1/accounts/{account_id}/transactions"""

    account_id: int
    limit: int
    offset: int
    transactions: List[TransactionItem]

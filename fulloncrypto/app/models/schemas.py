from datetime import UTC, datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

def _as_utc(value: datetime) -> datetime:
    # Stored timestamps are UTC; SQLite hands them back without tzinfo.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value

UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

# Requests ---------------------------------------------------------------
# Fields are optional here; presence and format rules live in the services so
# that every rejection carries the same {"error": ...} message shape.

class CredentialsRequest(CamelModel):
    username: Optional[str] = None
    password: Optional[str] = None

class WalletRegistrationRequest(CamelModel):
    eth_address: Optional[str] = None
    signature: Optional[str] = None
    username: Optional[str] = None

class WalletLoginRequest(CamelModel):
    eth_address: Optional[str] = None
    signature: Optional[str] = None

class WalletUpdateRequest(CamelModel):
    eth_address: Optional[str] = None
    username: Optional[str] = None

class PaymentRequestCreate(CamelModel):
    upi_id: Optional[str] = None
    amount: Any = Field(default=None, description="Must be a JSON number greater than zero")
    payee_name: Optional[str] = None
    note: Optional[str] = None
    contract_request_id: Optional[str] = Field(
        default=None, description="Identifier of the originating smart-contract request"
    )
    wallet_address: Optional[str] = None
    dai_amount: Optional[float] = None
    eth_fee: Optional[float] = None

    @field_validator("contract_request_id", mode="before")
    @classmethod
    def _stringify_contract_id(cls, value: Any) -> Any:
        # On-chain ids usually arrive as JSON numbers; path lookups are strings.
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value

# Responses --------------------------------------------------------------

class UserResponse(CamelModel):
    id: UUID
    username: str
    email: str
    eth_address: Optional[str] = None
    created_at: UtcDatetime

class UserEnvelope(CamelModel):
    message: str
    user: UserResponse

class PaymentRequestSummary(CamelModel):
    id: UUID
    upi_id: str
    amount: float
    payee_name: str
    note: str
    requester_id: str
    status: str
    created_at: UtcDatetime

class PaymentRequestResponse(PaymentRequestSummary):
    contract_request_id: Optional[str] = None
    wallet_address: str
    dai_amount: float
    eth_fee: float

class PaymentRequestEnvelope(CamelModel):
    message: str
    payment_request: PaymentRequestResponse

class PaymentRequestListEnvelope(CamelModel):
    message: str
    payment_requests: list[PaymentRequestSummary]

class UpiLookupResponse(CamelModel):
    message: str
    contract_request_id: str
    upi_id: str
    payee_name: str
    note: str

from .db import PENDING
from .db import PaymentRequest as PaymentRequestModel
from .db import UpiIndexEntry as UpiIndexEntryModel
from .db import User as UserModel
from .schemas import (
    CredentialsRequest,
    PaymentRequestCreate,
    PaymentRequestEnvelope,
    PaymentRequestListEnvelope,
    PaymentRequestResponse,
    PaymentRequestSummary,
    UpiLookupResponse,
    UserEnvelope,
    UserResponse,
    WalletLoginRequest,
    WalletRegistrationRequest,
    WalletUpdateRequest,
)

__all__ = [
    "PENDING",
    "CredentialsRequest",
    "PaymentRequestCreate",
    "PaymentRequestEnvelope",
    "PaymentRequestListEnvelope",
    "PaymentRequestResponse",
    "PaymentRequestSummary",
    "UpiLookupResponse",
    "UserEnvelope",
    "UserResponse",
    "WalletLoginRequest",
    "WalletRegistrationRequest",
    "WalletUpdateRequest",
    "PaymentRequestModel",
    "UpiIndexEntryModel",
    "UserModel",
]

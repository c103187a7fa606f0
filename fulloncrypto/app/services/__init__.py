from .accounts import AccountService
from .payments import PaymentRequestService
from .repository import PaymentRequestRepository, UserRepository

__all__ = [
    "AccountService",
    "PaymentRequestRepository",
    "PaymentRequestService",
    "UserRepository",
]

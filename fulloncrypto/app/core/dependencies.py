from fastapi import Depends
from sqlmodel import Session

from ..services import (
    AccountService,
    PaymentRequestRepository,
    PaymentRequestService,
    UserRepository,
)
from .config import Settings, get_settings
from .db import get_session

def get_account_service(
    session: Session = Depends(get_session),
    settings: Settings = Depends(get_settings),
) -> AccountService:
    repository = UserRepository(session)
    return AccountService(
        session,
        repository,
        verify_signatures=settings.verify_wallet_signatures,
    )

def get_payment_request_service(
    session: Session = Depends(get_session),
) -> PaymentRequestService:
    repository = PaymentRequestRepository(session)
    return PaymentRequestService(session, repository)

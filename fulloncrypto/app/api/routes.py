import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..core.db import ping
from ..core.dependencies import get_account_service, get_payment_request_service
from ..models import (
    CredentialsRequest,
    PaymentRequestCreate,
    PaymentRequestEnvelope,
    PaymentRequestListEnvelope,
    UpiLookupResponse,
    UserEnvelope,
    WalletLoginRequest,
    WalletRegistrationRequest,
    WalletUpdateRequest,
)
from ..services import AccountService, PaymentRequestService

logger = logging.getLogger(__name__)

auth_router = APIRouter(prefix="/api", tags=["auth"])

@auth_router.post("/signup", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED)
def signup(
    payload: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    return UserEnvelope(message="User created successfully", user=service.signup(payload))

@auth_router.post("/login", response_model=UserEnvelope)
def login(
    payload: CredentialsRequest,
    service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    return UserEnvelope(message="Login successful", user=service.login(payload))

@auth_router.post(
    "/register-wallet", response_model=UserEnvelope, status_code=status.HTTP_201_CREATED
)
def register_wallet(
    payload: WalletRegistrationRequest,
    service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    user = service.register_wallet(payload)
    return UserEnvelope(message="Wallet registration successful", user=user)

@auth_router.post("/login-wallet", response_model=UserEnvelope)
def login_wallet(
    payload: WalletLoginRequest,
    service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    return UserEnvelope(message="Wallet login successful", user=service.login_wallet(payload))

@auth_router.post("/update-wallet", response_model=UserEnvelope)
def update_wallet(
    payload: WalletUpdateRequest,
    service: AccountService = Depends(get_account_service),
) -> UserEnvelope:
    user = service.update_wallet(payload)
    return UserEnvelope(message="Wallet address updated successfully", user=user)

payment_router = APIRouter(prefix="/api", tags=["payments"])

@payment_router.post(
    "/payment-request",
    response_model=PaymentRequestEnvelope,
    status_code=status.HTTP_201_CREATED,
)
def create_payment_request(
    payload: PaymentRequestCreate,
    service: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentRequestEnvelope:
    return PaymentRequestEnvelope(
        message="Payment request created successfully",
        payment_request=service.create_payment_request(payload),
    )

@payment_router.get("/payment-requests", response_model=PaymentRequestListEnvelope)
def list_payment_requests(
    service: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentRequestListEnvelope:
    return PaymentRequestListEnvelope(
        message="Payment requests retrieved successfully",
        payment_requests=service.list_pending(),
    )

@payment_router.get(
    "/payment-request/contract/{contract_request_id}",
    response_model=PaymentRequestEnvelope,
)
def get_payment_request_by_contract(
    contract_request_id: str,
    service: PaymentRequestService = Depends(get_payment_request_service),
) -> PaymentRequestEnvelope:
    return PaymentRequestEnvelope(
        message="Payment request retrieved successfully",
        payment_request=service.get_by_contract_id(contract_request_id),
    )

@payment_router.get("/upi-id/contract/{contract_request_id}", response_model=UpiLookupResponse)
def get_upi_id_by_contract(
    contract_request_id: str,
    service: PaymentRequestService = Depends(get_payment_request_service),
) -> UpiLookupResponse:
    entry = service.get_upi_index(contract_request_id)
    return UpiLookupResponse(
        message="UPI ID retrieved successfully",
        contract_request_id=entry.contract_request_id,
        upi_id=entry.upi_id,
        payee_name=entry.payee_name,
        note=entry.note,
    )

system_router = APIRouter(prefix="/api", tags=["system"])

@system_router.get("/health")
def read_health() -> JSONResponse:
    now = datetime.now(UTC).isoformat()
    try:
        ping()
    except Exception as exc:
        logger.exception("health.store_unreachable")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "status": "unhealthy",
                "message": "Database connection failed",
                "timestamp": now,
                "database": "disconnected",
                "error": type(exc).__name__,
            },
        )
    return JSONResponse(
        content={
            "status": "healthy",
            "message": "FullOnCrypto API Server is running",
            "timestamp": now,
            "database": "connected",
        }
    )

@system_router.get("/test")
def read_test() -> dict[str, str]:
    return {"message": "API is working!", "timestamp": datetime.now(UTC).isoformat()}

__all__ = ["auth_router", "payment_router", "system_router"]

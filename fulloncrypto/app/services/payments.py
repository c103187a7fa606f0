from __future__ import annotations

import logging
from typing import Optional

from sqlmodel import Session

from ..core.errors import NotFoundError, ValidationError
from ..models import (
    PENDING,
    PaymentRequestCreate,
    PaymentRequestModel,
    PaymentRequestResponse,
    PaymentRequestSummary,
    UpiIndexEntryModel,
)
from .repository import PaymentRequestRepository
from .transactions import store_operation
from .validators import is_positive_number


logger = logging.getLogger(__name__)

ANONYMOUS_REQUESTER = "anonymous"


class PaymentRequestService:
    def __init__(
        self,
        session: Session,
        repository: Optional[PaymentRequestRepository] = None,
    ) -> None:
        self.session = session
        self.repository = repository or PaymentRequestRepository(session)

    def _normalize_contract_id(self, contract_request_id: Optional[str]) -> Optional[str]:
        # Blank ids could never be looked up, so they are treated as absent.
        if not contract_request_id or not contract_request_id.strip():
            return None
        return contract_request_id

    def _require_contract_id(self, contract_request_id: str) -> str:
        if not contract_request_id or not contract_request_id.strip():
            raise ValidationError("Contract request ID is required")
        return contract_request_id

    def _index_payment_request(
        self, payment_request: PaymentRequestModel
    ) -> Optional[UpiIndexEntryModel]:
        """Keep ``upiIndex`` pointing at the newest request for a contract id.

        Must run after the payment request itself has been flushed. Entries are
        replaced wholesale, never merged.
        """
        if not payment_request.contract_request_id:
            return None
        entry = self.repository.upsert_upi_index(
            contract_request_id=payment_request.contract_request_id,
            upi_id=payment_request.upi_id,
            payee_name=payment_request.payee_name,
            note=payment_request.note,
        )
        logger.info(
            "upi_index.upserted",
            extra={
                "contract_request_id": entry.contract_request_id,
                "payment_request_id": str(payment_request.id),
            },
        )
        return entry

    def create_payment_request(self, payload: PaymentRequestCreate) -> PaymentRequestResponse:
        if not payload.upi_id or payload.amount is None:
            raise ValidationError("UPI ID and amount are required")
        if not is_positive_number(payload.amount):
            raise ValidationError("Amount must be a positive number")

        with store_operation(self.session, "payment_request.create"):
            payment_request = self.repository.add_payment_request(
                upi_id=payload.upi_id,
                amount=payload.amount,
                payee_name=payload.payee_name or "",
                note=payload.note or "",
                contract_request_id=self._normalize_contract_id(payload.contract_request_id),
                wallet_address=payload.wallet_address or "",
                dai_amount=payload.dai_amount or 0,
                eth_fee=payload.eth_fee or 0,
                requester_id=payload.wallet_address or ANONYMOUS_REQUESTER,
                status=PENDING,
            )
            # Same transaction: a failed index write also discards the request.
            self._index_payment_request(payment_request)
            self.session.commit()
            self.session.refresh(payment_request)

        logger.info(
            "payment_request.created",
            extra={
                "payment_request_id": str(payment_request.id),
                "amount": payment_request.amount,
                "contract_request_id": payment_request.contract_request_id,
            },
        )
        return PaymentRequestResponse.model_validate(payment_request)

    def list_pending(self) -> list[PaymentRequestSummary]:
        with store_operation(self.session, "payment_request.list"):
            requests = self.repository.list_pending()
        return [PaymentRequestSummary.model_validate(request) for request in requests]

    def get_by_contract_id(self, contract_request_id: str) -> PaymentRequestResponse:
        contract_request_id = self._require_contract_id(contract_request_id)
        with store_operation(self.session, "payment_request.get"):
            payment_request = self.repository.get_by_contract_id(contract_request_id)
        if payment_request is None:
            raise NotFoundError("Payment request not found for the given contract ID")
        return PaymentRequestResponse.model_validate(payment_request)

    def get_upi_index(self, contract_request_id: str) -> UpiIndexEntryModel:
        contract_request_id = self._require_contract_id(contract_request_id)
        with store_operation(self.session, "upi_index.get"):
            entry = self.repository.get_upi_index(contract_request_id)
        if entry is None:
            raise NotFoundError("UPI ID not found for the given contract ID")
        return entry

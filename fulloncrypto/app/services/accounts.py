from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from ..core.errors import AuthError, ConflictError, NotFoundError, ValidationError
from ..models import (
    CredentialsRequest,
    UserModel,
    UserResponse,
    WalletLoginRequest,
    WalletRegistrationRequest,
    WalletUpdateRequest,
)
from .repository import UserRepository
from .signatures import build_login_message, verify_signature
from .transactions import store_operation
from .validators import (
    MIN_PASSWORD_LENGTH,
    MIN_USERNAME_LENGTH,
    is_valid_eth_address,
    is_valid_password,
    is_valid_signature_format,
    is_valid_username,
    normalize_address,
)


logger = logging.getLogger(__name__)


class AccountService:
    """Username/password and wallet based account operations.

    Nothing is kept between calls; every login re-validates against the store.
    """

    def __init__(
        self,
        session: Session,
        repository: Optional[UserRepository] = None,
        *,
        verify_signatures: bool = False,
    ) -> None:
        self.session = session
        self.repository = repository or UserRepository(session)
        self.verify_signatures = verify_signatures

    # ------------------------------------------------------------------
    # Helper utilities
    # ------------------------------------------------------------------
    def _user_to_response(self, user: UserModel) -> UserResponse:
        return UserResponse.model_validate(user)

    def _require_eth_address(self, eth_address: str) -> str:
        if not is_valid_eth_address(eth_address):
            raise ValidationError("Invalid ETH address format")
        return normalize_address(eth_address)

    def _address_taken(self, eth_address: str, owner: UserModel) -> ConflictError:
        return ConflictError(
            f"This address {eth_address} is already registered to user: {owner.username}"
        )

    def _check_signature(self, eth_address: str, signature: str) -> None:
        if not is_valid_signature_format(signature):
            raise AuthError("Invalid signature format")
        if not self.verify_signatures:
            return
        message = build_login_message(eth_address)
        if not verify_signature(message, signature, eth_address):
            logger.info("wallet.signature_mismatch", extra={"eth_address": eth_address})
            raise AuthError("Signature does not match wallet address")

    def _insert_user(self, *, username: str, **fields) -> UserModel:
        try:
            return self.repository.add_user(username=username, **fields)
        except IntegrityError as exc:
            # Lost a race with a concurrent insert of the same username or address.
            if "eth_address" in str(exc.orig):
                raise ConflictError("This address is already registered") from exc
            raise ConflictError("Username already exists") from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def signup(self, payload: CredentialsRequest) -> UserResponse:
        if not payload.username or not payload.password:
            raise ValidationError("Username and password are required")
        if not is_valid_password(payload.password):
            raise ValidationError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
            )

        with store_operation(self.session, "signup"):
            if self.repository.get_by_username(payload.username) is not None:
                raise ConflictError("Username already exists")
            user = self._insert_user(username=payload.username, password=payload.password)
            self.session.commit()
            self.session.refresh(user)

        logger.info("user.created", extra={"user_id": str(user.id), "username": user.username})
        return self._user_to_response(user)

    def login(self, payload: CredentialsRequest) -> UserResponse:
        if not payload.username or not payload.password:
            raise ValidationError("Username and password are required")

        with store_operation(self.session, "login"):
            user = self.repository.get_by_username(payload.username)

        if user is None or user.password != payload.password:
            raise AuthError("Invalid username or password")
        logger.info("user.login", extra={"user_id": str(user.id)})
        return self._user_to_response(user)

    def register_wallet(self, payload: WalletRegistrationRequest) -> UserResponse:
        if not payload.eth_address or not payload.signature or not payload.username:
            raise ValidationError("ETH address, signature, and username are required")
        eth_address = self._require_eth_address(payload.eth_address)
        if not is_valid_username(payload.username):
            raise ValidationError(
                f"Username must be at least {MIN_USERNAME_LENGTH} characters long"
            )

        with store_operation(self.session, "register_wallet"):
            if self.repository.get_by_username(payload.username) is not None:
                raise ConflictError("Username already exists")
            owner = self.repository.get_by_address(eth_address)
            if owner is not None:
                raise self._address_taken(payload.eth_address, owner)

            self._check_signature(payload.eth_address, payload.signature)

            user = self._insert_user(username=payload.username, eth_address=eth_address)
            self.session.commit()
            self.session.refresh(user)

        logger.info(
            "wallet.registered",
            extra={"user_id": str(user.id), "eth_address": user.eth_address},
        )
        return self._user_to_response(user)

    def login_wallet(self, payload: WalletLoginRequest) -> UserResponse:
        if not payload.eth_address or not payload.signature:
            raise ValidationError("ETH address and signature are required")
        eth_address = self._require_eth_address(payload.eth_address)

        with store_operation(self.session, "login_wallet"):
            user = self.repository.get_by_address(eth_address)
        if user is None:
            raise NotFoundError("User not found. Please register first.")

        self._check_signature(payload.eth_address, payload.signature)

        logger.info("wallet.login", extra={"user_id": str(user.id)})
        return self._user_to_response(user)

    def update_wallet(self, payload: WalletUpdateRequest) -> UserResponse:
        if not payload.eth_address:
            raise ValidationError("ETH address is required")
        if not payload.username:
            raise ValidationError("Username is required")
        eth_address = self._require_eth_address(payload.eth_address)
        not_found = NotFoundError(f"User not found with username: {payload.username}")

        with store_operation(self.session, "update_wallet"):
            owner = self.repository.get_by_address(
                eth_address, exclude_username=payload.username
            )
            if owner is not None:
                raise self._address_taken(payload.eth_address, owner)
            if self.repository.get_by_username(payload.username) is None:
                raise not_found

            try:
                user = self.repository.set_address(payload.username, eth_address)
            except IntegrityError as exc:
                raise ConflictError("This address is already registered") from exc
            if user is None:
                raise not_found
            self.session.commit()
            self.session.refresh(user)

        logger.info(
            "wallet.updated",
            extra={"user_id": str(user.id), "eth_address": user.eth_address},
        )
        return self._user_to_response(user)

from __future__ import annotations

import logging

from eth_account import Account
from eth_account.messages import encode_defunct

from .validators import normalize_address

logger = logging.getLogger(__name__)

WELCOME_MESSAGE_TEMPLATE = (
    "Welcome to FullOnCrypto!\n\n"
    "Please sign this message to authenticate your wallet.\n\n"
    "Wallet: {address}"
)


def build_login_message(address: str) -> str:
    """Message the frontend asks the wallet to sign, verbatim."""
    return WELCOME_MESSAGE_TEMPLATE.format(address=address)


def recover_signer(message: str, signature: str) -> str:
    signable = encode_defunct(text=message)
    return Account.recover_message(signable, signature=signature)


def verify_signature(message: str, signature: str, expected_address: str) -> bool:
    """Check that ``signature`` over ``message`` was produced by ``expected_address``.

    Malformed signatures are reported as a mismatch rather than raised.
    """
    try:
        recovered = recover_signer(message, signature)
    except Exception as exc:
        logger.warning("signature.unrecoverable", extra={"reason": str(exc)})
        return False
    return normalize_address(recovered) == normalize_address(expected_address)

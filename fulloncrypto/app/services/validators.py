"""Pure predicates shared by the request handlers."""

from __future__ import annotations

import math
import re
from typing import Any

ETH_ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")
MIN_PASSWORD_LENGTH = 6
MIN_USERNAME_LENGTH = 3
SIGNATURE_LENGTH = 132


def is_valid_eth_address(address: Any) -> bool:
    return isinstance(address, str) and ETH_ADDRESS_PATTERN.fullmatch(address) is not None


def normalize_address(address: str) -> str:
    return address.lower()


def is_valid_password(password: str) -> bool:
    return len(password) >= MIN_PASSWORD_LENGTH


def is_valid_username(username: str) -> bool:
    return len(username) >= MIN_USERNAME_LENGTH


def is_positive_number(value: Any) -> bool:
    """True for real JSON numbers above zero; strings and booleans never pass.

    Integers too large to store as a float are rejected as well.
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        as_float = float(value)
    except OverflowError:
        return False
    return math.isfinite(as_float) and as_float > 0


def is_valid_signature_format(signature: str) -> bool:
    return signature.startswith("0x") and len(signature) == SIGNATURE_LENGTH

"""
Account Number Module

Mints checksum-validated account numbers. A number is a 4-digit product
prefix, an owner segment, a sequence segment and a trailing Luhn check
digit, so single-digit typos and adjacent transpositions are detectable.
"""

import re
from typing import Union

from .accounts import AccountType


TYPE_PREFIXES = {
    AccountType.CHECKING: "1001",
    AccountType.SAVINGS: "2001",
    AccountType.CREDIT: "4001",
    AccountType.LOAN: "8001",
}
UNKNOWN_PREFIX = "9001"

OWNER_SEGMENT_WIDTH = 3
SEQUENCE_SEGMENT_WIDTH = 4


def luhn_check_digit(digits: str) -> str:
    """
    Compute the Luhn check digit for a string of digits

    Every second digit counting from the right (starting with the rightmost)
    is doubled, 9 is subtracted from doubled values above 9, and the check
    digit brings the total up to a multiple of 10.
    """
    if not digits or not digits.isdigit():
        raise ValueError(f"Check digit requires a non-empty digit string, got {digits!r}")

    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 0:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit

    return str((10 - total % 10) % 10)


def owner_segment(owner_seed: str) -> str:
    """Digits of the owner seed, left-padded with zeros"""
    return re.sub(r'\D', '', str(owner_seed)).zfill(OWNER_SEGMENT_WIDTH)


def generate_account_number(
    account_type: Union[AccountType, str],
    owner_seed: str,
    sequence: int
) -> str:
    """
    Generate a deterministic account number

    Args:
        account_type: Product type, selects the 4-digit prefix
        owner_seed: Owner identifier; its digits form the owner segment
        sequence: 1-based position of the account for this owner

    Returns:
        Bare numeric string, e.g. "100100100012" + check digit
    """
    if sequence < 0:
        raise ValueError(f"Sequence must be non-negative, got {sequence}")

    try:
        prefix = TYPE_PREFIXES.get(AccountType(account_type), UNKNOWN_PREFIX)
    except ValueError:
        prefix = UNKNOWN_PREFIX

    body = f"{prefix}{owner_segment(owner_seed)}{str(sequence).zfill(SEQUENCE_SEGMENT_WIDTH)}"
    return body + luhn_check_digit(body)


def is_valid_account_number(number: str) -> bool:
    """Recompute the trailing check digit, ignoring display separators"""
    digits = re.sub(r'[\s-]', '', number or '')
    if len(digits) < 2 or not digits.isdigit():
        return False
    return luhn_check_digit(digits[:-1]) == digits[-1]


def format_account_number(number: str) -> str:
    """Dashed display form: PPPP-OOO-SSSS-C"""
    body, check = number[:-1], number[-1]
    return (f"{body[:4]}-{body[4:-SEQUENCE_SEGMENT_WIDTH]}-"
            f"{body[-SEQUENCE_SEGMENT_WIDTH:]}-{check}")

"""
Payment instrument validators.

Pure, synchronous checks run before a payment is persisted:
  1. VPA syntax (UPI)
  2. Card number length + Luhn checksum
  3. Card network detection by prefix (display only, never affects validity)
  4. Card expiry against the current month

None of these touch the database or the network.
"""

import re
from datetime import date
from typing import Optional, Union

from gateway.models.enums import CardNetwork

VPA_PATTERN = re.compile(r"^[a-zA-Z0-9._-]+@[a-zA-Z0-9]+$")
CARD_SEPARATORS = re.compile(r"[\s-]")

MIN_CARD_LENGTH = 13
MAX_CARD_LENGTH = 19

MASTERCARD_PREFIXES = {"51", "52", "53", "54", "55"}
AMEX_PREFIXES = {"34", "37"}
RUPAY_PREFIXES = {"60", "65"}
RUPAY_PREFIX_RANGE = range(81, 90)  # 81..89 inclusive


def validate_vpa(vpa: Optional[str]) -> bool:
    """Check a UPI virtual payment address of the form ``name@handle``."""
    if not vpa:
        return False
    return VPA_PATTERN.fullmatch(vpa) is not None


def clean_card_number(card_number: str) -> str:
    """Strip spaces and hyphens from a card number."""
    return CARD_SEPARATORS.sub("", card_number)


def luhn_checksum_ok(digits: str) -> bool:
    """
    Luhn mod-10 check over a string of digits.

    Starting from the rightmost digit (not doubled), every second digit is
    doubled; doubled values above 9 have 9 subtracted.
    """
    total = 0
    for position, char in enumerate(reversed(digits)):
        digit = int(char)
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def validate_card_number(card_number: Optional[str]) -> bool:
    """
    Validate a card number.

    Args:
        card_number: Digits, optionally grouped with spaces or hyphens.

    Returns:
        True if the cleaned number is 13-19 digits and passes Luhn.
    """
    if not card_number:
        return False

    cleaned = clean_card_number(card_number)
    # isascii() keeps non-ASCII digit characters (e.g. Arabic-Indic) out
    if not (cleaned.isascii() and cleaned.isdigit()):
        return False
    if not MIN_CARD_LENGTH <= len(cleaned) <= MAX_CARD_LENGTH:
        return False

    return luhn_checksum_ok(cleaned)


def detect_card_network(card_number: str) -> CardNetwork:
    """
    Infer the card network from the leading digits.

    Checked in order: visa (4), mastercard (51-55), amex (34, 37),
    rupay (60, 65, 81-89), otherwise unknown.
    """
    cleaned = clean_card_number(card_number)

    if cleaned.startswith("4"):
        return CardNetwork.VISA

    prefix = cleaned[:2]
    if prefix in MASTERCARD_PREFIXES:
        return CardNetwork.MASTERCARD
    if prefix in AMEX_PREFIXES:
        return CardNetwork.AMEX
    if prefix in RUPAY_PREFIXES:
        return CardNetwork.RUPAY
    if len(prefix) == 2 and prefix.isdigit() and int(prefix) in RUPAY_PREFIX_RANGE:
        return CardNetwork.RUPAY

    return CardNetwork.UNKNOWN


def validate_expiry(
    month: Union[str, int, None],
    year: Union[str, int, None],
    today: Optional[date] = None,
) -> bool:
    """
    Check that a card has not expired.

    Args:
        month: Expiry month, 1-12.
        year: Two-digit (interpreted as 20YY) or four-digit year.
        today: Reference date; defaults to the current date.

    Returns:
        True for the current month or any later month.
    """
    month_str = str(month).strip()
    year_str = str(year).strip()
    # int() alone would accept "+5", "1_2" and non-ASCII digits
    for part in (month_str, year_str):
        if not (part.isascii() and part.isdigit()):
            return False

    parsed_month = int(month_str)
    parsed_year = int(year_str)

    if parsed_month < 1 or parsed_month > 12:
        return False

    if len(year_str) == 2:
        parsed_year += 2000

    today = today or date.today()
    return (parsed_year, parsed_month) >= (today.year, today.month)

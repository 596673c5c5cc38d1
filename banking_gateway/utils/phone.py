"""Phone number validation and normalization"""

from typing import Optional

import phonenumbers

DEFAULT_REGION = "US"


def _parse(phone_number: str, region: str) -> Optional[phonenumbers.PhoneNumber]:
    if not phone_number or not isinstance(phone_number, str):
        return None
    try:
        parsed = phonenumbers.parse(phone_number.strip(), region)
    except phonenumbers.NumberParseException:
        return None
    return parsed if phonenumbers.is_valid_number(parsed) else None


def is_valid_phone_number(phone_number: str, region: str = DEFAULT_REGION) -> bool:
    """Accepts US 10-digit, +1 (123) 456-7890 style and international numbers"""
    return _parse(phone_number, region) is not None


def format_phone_number(phone_number: str, region: str = DEFAULT_REGION) -> Optional[str]:
    """
    Normalize to E.164 (e.g. +14155552671).

    Returns None instead of raising when the number cannot be parsed.
    """
    parsed = _parse(phone_number, region)
    if parsed is None:
        return None
    return phonenumbers.format_number(parsed, phonenumbers.PhoneNumberFormat.E164)


def get_phone_number_country(phone_number: str, region: str = DEFAULT_REGION) -> Optional[str]:
    parsed = _parse(phone_number, region)
    if parsed is None:
        return None
    return phonenumbers.region_code_for_number(parsed)

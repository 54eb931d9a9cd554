import re

COUNTRY_CODE = "+91"


def normalize_phone_number(phone: str) -> str:
    """Strip whitespace and collapse repeated country codes, e.g. '+91+91 98765 43210' -> '+919876543210'."""
    if not phone:
        return phone
    normalized = re.sub(r"\s+", "", phone.strip())
    if normalized.count(COUNTRY_CODE) > 1:
        normalized = COUNTRY_CODE + "".join(part for part in normalized.split(COUNTRY_CODE) if part)
    return normalized

"""
Human-readable application reference numbers.

Format: ``SIX-[TYPE]-[CATEGORY]-[ID]-[CHECKSUM]``, e.g. ``SIX-L-PER-00123-0D``.

TYPE codes: L = Loan, C = Credit Card, I = Insurance, A = App, X = unknown.
CATEGORY is up to three letters taken from the category slug, ``GEN`` when
none is usable. ID is the application number padded to five digits. The two
character CHECKSUM only catches typos; uniqueness comes from the embedded id.
"""

import re
from typing import Optional

PREFIX = "SIX"
GENERIC_CATEGORY = "GEN"
FALLBACK_TYPE_CODE = "X"
ID_WIDTH = 5

TYPE_CODES = {
    "LOAN": "L",
    "CREDIT_CARD": "C",
    "INSURANCE": "I",
    "APP": "A",
}

_SUFFIX_WORDS = re.compile(r"-loan|-card|-insurance", re.IGNORECASE)
_DIGITS36 = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ"
_REFERENCE_PATTERN = re.compile(r"^SIX-([A-Z])-([A-Z0-9]{2,3})-(\d{5,})-([0-9A-Z]{2})$")


def type_code_for(product_type) -> str:
    value = getattr(product_type, "value", product_type)
    return TYPE_CODES.get(str(value).upper() if value is not None else "", FALLBACK_TYPE_CODE)


def category_code_for(category_slug: Optional[str]) -> str:
    if not category_slug:
        return GENERIC_CATEGORY
    cleaned = _SUFFIX_WORDS.sub("", category_slug).replace("-", "").upper()
    if len(cleaned) < 2:
        return GENERIC_CATEGORY
    return cleaned[:3]


def checksum_for(body: str) -> str:
    total = sum(ord(ch) for ch in body) % 36
    return _DIGITS36[total].rjust(2, "0")


def generate_reference_number(application_id: int, product_type, category_slug: Optional[str] = None) -> str:
    type_code = type_code_for(product_type)
    category_code = category_code_for(category_slug)
    # ids above 99999 simply widen the field
    id_str = str(application_id).zfill(ID_WIDTH)
    checksum = checksum_for(f"{type_code}{category_code}{id_str}")
    return f"{PREFIX}-{type_code}-{category_code}-{id_str}-{checksum}"


def is_valid_reference_number(reference: str) -> bool:
    match = _REFERENCE_PATTERN.match((reference or "").strip().upper())
    if not match:
        return False
    type_code, category_code, id_str, checksum = match.groups()
    return checksum_for(f"{type_code}{category_code}{id_str}") == checksum


def application_number_from(reference: str) -> Optional[int]:
    match = _REFERENCE_PATTERN.match((reference or "").strip().upper())
    return int(match.group(3)) if match else None

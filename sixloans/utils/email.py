from typing import Optional

from pydantic.networks import validate_email


def normalize_email(value: Optional[str]) -> Optional[str]:
    """Normalize an address the way ``EmailStr`` stores it (domain lowercased); None if it is not an email."""
    if not value:
        return None
    try:
        _, email = validate_email(value.strip())
    except ValueError:
        return None
    return email

"""Input normalization and validation helpers."""

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from checkin.utils.errors import ValidationError

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    """Trim and lowercase an email address."""
    return email.strip().lower()


def validate_email(email: object) -> str:
    """Validate an email address and return its normalized form.

    Raises:
        ValidationError: If the value is not a syntactically valid email
    """
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Valid email is required")
    normalized = normalize_email(email)
    try:
        _email_adapter.validate_python(normalized)
    except PydanticValidationError:
        raise ValidationError("Valid email is required")
    return normalized


def validate_name(name: object, max_length: int) -> str:
    """Validate a display name and return it trimmed."""
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name is required and cannot be empty")
    name = name.strip()
    if len(name) > max_length:
        raise ValidationError(f"Name must be at most {max_length} characters long")
    return name

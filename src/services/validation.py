from typing import List

from pydantic import EmailStr, TypeAdapter
from pydantic import ValidationError as PydanticValidationError


class EmailValidator:
    """Syntax check for contact addresses, backed by pydantic's EmailStr."""

    def __init__(self):
        self._adapter = TypeAdapter(EmailStr)

    def validate(self, email: str) -> List[str]:
        """Return human-readable violations; an empty list means valid."""
        try:
            self._adapter.validate_python(email)
        except PydanticValidationError as e:
            return [err["msg"] for err in e.errors()]
        return []

    def normalize(self, email: str) -> str:
        return self._adapter.validate_python(email)

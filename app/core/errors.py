"""
Error types shared by the store, the storage adapters and the routes.

Not-found and invalid-credential outcomes are returned as values
(``None``/``False``/``LoginResult``) rather than raised.
"""
from typing import Dict

from pydantic import ValidationError
from pydantic.alias_generators import to_snake


class ValidationFailure(Exception):
    """
    Raised before any mutation when a record would break a field or reference rule.

    Attributes:
        errors: Mapping of field name to human readable message
    """

    def __init__(self, errors: Dict[str, str]):
        self.errors = dict(errors)
        super().__init__("; ".join(f"{key}: {msg}" for key, msg in self.errors.items()))

    @classmethod
    def from_pydantic(cls, exc: ValidationError) -> "ValidationFailure":
        errors = dict()
        for error in exc.errors():
            loc = error.get("loc") or ("root",)
            key = to_snake(str(loc[-1]))
            if key == "__root__":
                key = "root"
            errors[key] = error.get("msg", "invalid value")
        return cls(errors)


class AccessDenied(Exception):
    """Raised when the acting identity may not perform an action on a record."""

    def __init__(self, action: str, kind: str):
        self.action = action
        self.kind = kind
        super().__init__(f"Permission denied: {action} on {kind}")


class PersistenceUnavailable(Exception):
    """A blob store or local storage read/write failed."""

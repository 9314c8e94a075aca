from typing import Generic, Literal, Optional, TypeVar
from pydantic import BaseModel

T = TypeVar("T")

class Lookup(BaseModel, Generic[T]):
    """Outcome of an acquisition step: ``found`` with a value, or an expected ``not_found``.

    Failures are not represented here; they are raised.
    """
    status: Literal["found", "not_found"]
    value: Optional[T] = None
    reason: Optional[str] = None

    @classmethod
    def found(cls, value: T) -> "Lookup[T]":
        return cls(status="found", value=value)

    @classmethod
    def not_found(cls, reason: str) -> "Lookup[T]":
        return cls(status="not_found", reason=reason)

    @property
    def is_found(self) -> bool:
        return self.status == "found"

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    INVALID = "invalid"
    TRANSACTION_FAILURE = "transaction_failure"
    UNAUTHORIZED = "unauthorized"


@dataclass(frozen=True)
class WriteResult:
    """Outcome of a write: truthy on success, otherwise carries the failure kind."""

    ok: bool
    error: Optional[ErrorKind] = None
    detail: Optional[str] = None
    id: Optional[int] = None

    def __bool__(self) -> bool:
        return self.ok

    @classmethod
    def success(cls, id: Optional[int] = None) -> "WriteResult":
        return cls(ok=True, id=id)

    @classmethod
    def failure(cls, error: ErrorKind, detail: str) -> "WriteResult":
        return cls(ok=False, error=error, detail=detail)

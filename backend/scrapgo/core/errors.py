"""Failure kinds and the result wrapper returned by store, engine and identity calls.

Expected domain conditions (wrong status, wrong code, missing record) come back
as ``Result.failure(...)`` values. Exceptions are reserved for programmer errors.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

T = TypeVar("T")


class AuthError(str, Enum):
    INVALID_CODE = "invalid_code"


class EngineError(str, Enum):
    INVALID_TRANSITION = "invalid_transition"
    INVALID_INPUT = "invalid_input"
    CODE_MISMATCH = "code_mismatch"
    UNAUTHORIZED = "unauthorized"
    NOT_FOUND = "not_found"


@dataclass(frozen=True)
class Result(Generic[T]):
    value: Optional[T] = None
    error: Optional[Enum] = None
    detail: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: Any) -> "Result":
        return cls(value=value)

    @classmethod
    def failure(cls, error: Enum, detail: Optional[str] = None) -> "Result":
        return cls(error=error, detail=detail)

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

from .errors import ContractViolation


R = TypeVar("R")

ErrorCode = int


class Tag(Enum):
    UNSET = 0
    SUCCESS = 1
    ERROR = 2


@dataclass(frozen=True)
class Ok(Generic[R]):
    value: R

    def __bool__(self):
        return True


@dataclass(frozen=True)
class Failure:
    code: ErrorCode

    def __bool__(self):
        return False

    def __str__(self):
        return f"error code {self.code}"


Outcome = Ok[R] | Failure


class Result(Generic[R]):
    """Write-once cell holding either a success value or an error code.

    A fresh `Result` is unset. The computation owning it settles it exactly once;
    after that any number of readers may inspect it. Reading an unset cell, or
    reading the slot that does not match the tag, raises `ContractViolation`.
    """
    __slots__ = ("_outcome",)

    def __init__(self):
        self._outcome: Outcome[R] | None = None

    @property
    def tag(self) -> Tag:
        match self._outcome:
            case None:
                return Tag.UNSET
            case Ok():
                return Tag.SUCCESS
            case _:
                return Tag.ERROR

    @property
    def outcome(self) -> Outcome[R]:
        if self._outcome is None:
            raise ContractViolation("result read before it was settled")
        return self._outcome

    def settle(self, outcome: Outcome[R]):
        if self._outcome is not None:
            raise ContractViolation(
                f"result already settled ({self._outcome}), refusing {outcome}")
        if isinstance(outcome, Failure) and not isinstance(outcome.code, int):
            raise ContractViolation(f"error code must be an integer, got {outcome.code!r}")
        self._outcome = outcome

    def set_success(self, value: R):
        self.settle(Ok(value))

    def set_error(self, code: ErrorCode):
        self.settle(Failure(code))

    def is_success(self) -> bool:
        return bool(self.outcome)

    def value(self) -> R:
        match self.outcome:
            case Ok(value):
                return value
            case Failure(code):
                raise ContractViolation(f"value read from a failed result ({code})")
        raise AssertionError("unreachable")

    def error_code(self) -> ErrorCode:
        match self.outcome:
            case Failure(code):
                return code
        raise ContractViolation("error code read from a successful result")

    def __bool__(self):
        return self.is_success()

    def __repr__(self):
        if self._outcome is None:
            return "Result(<unset>)"
        return f"Result({self._outcome!r})"

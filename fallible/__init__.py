from .result import Result, Ok, Failure, Tag, ErrorCode
from .protocol import Handle, Forward, fallible, forward, pure, fail, gather, FAULT
from .errors import ContractViolation

__all__ = [
    "Result", "Ok", "Failure", "Tag", "ErrorCode",
    "Handle", "Forward", "fallible", "forward", "pure", "fail", "gather", "FAULT",
    "ContractViolation",
]

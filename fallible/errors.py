from dataclasses import dataclass
from typing import Any


class UserError(Exception):
    def __str__(self):
        return "Unknown user error."


@dataclass
class HelpfulUserError(UserError):
    msg: str

    def __str__(self):
        return self.msg


@dataclass
class InputError(UserError):
    expected: Any
    got: Any

    def __str__(self):
        return f"Expected {self.expected}, got: {self.got!r}"


@dataclass
class ContractViolation(Exception):
    """A fallible computation or result was used against its contract.

    These are programming errors, never mapped to an error code.
    """
    message: str

    def __post_init__(self):
        Exception.__init__(self, self.message)

    def __str__(self):
        return self.message

"""
Validation of the ``username`` query parameter.
"""
import re
from typing import Optional, Sequence

USERNAME_PATTERN = re.compile(r'^[A-Za-z0-9_-]{1,100}$')

MISSING_USERNAME_MESSAGE = '?username=yourname'
INVALID_USERNAME_MESSAGE = 'Invalid username'


class UsernameError(ValueError):
    """The request did not carry a usable username."""


class MissingUsername(UsernameError):
    def __init__(self, message: str = MISSING_USERNAME_MESSAGE):
        super().__init__(message)


class InvalidUsername(UsernameError):
    def __init__(self, message: str = INVALID_USERNAME_MESSAGE):
        super().__init__(message)


def is_valid_username(value: str) -> bool:
    """Check a username against the allowed character set and length."""
    return USERNAME_PATTERN.fullmatch(value) is not None


def validate_username(values: Optional[Sequence[str]]) -> str:
    """
    Return the username from the values a query string carried for it.

    Anything but exactly one non-blank string raises MissingUsername, a value
    outside ``[A-Za-z0-9_-]{1,100}`` raises InvalidUsername. The accepted
    value is returned unchanged.
    """
    if not values or len(values) != 1:
        raise MissingUsername()

    username = values[0]
    if not isinstance(username, str) or not username.strip():
        raise MissingUsername()

    if not is_valid_username(username):
        raise InvalidUsername()

    return username

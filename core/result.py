"""
Typed outcomes for data access and aggregation.

Every repository call returns either ``Ok(value)`` or ``Err(kind, message)``;
route handlers match on the variant and the ``ErrorKind`` tag to choose the
HTTP status instead of catching exceptions.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar, Union

T = TypeVar("T")


class ErrorKind(str, Enum):
    FETCH = "fetch"          # the database call itself failed
    DECODE = "decode"        # a row is missing a required field
    NOT_FOUND = "not_found"  # the requested siege (or its stats) does not exist


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err:
    kind: ErrorKind
    message: str


Result = Union[Ok[T], Err]

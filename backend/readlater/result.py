"""
Readlater Backend — Result Sum Type
=====================================

What:  Ok / Err wrappers for operations whose failure is an expected outcome
       rather than an exception: request-shape validation and GraphQL-style
       success/error unions.
How:   Callers branch with isinstance() (or a match statement):

    result = parse_save_following_request(body)
    if isinstance(result, Err):
        return PlainTextResponse(result.error, status_code=400)
    request = result.value
"""

from dataclasses import dataclass
from typing import Generic, TypeVar, Union

T = TypeVar("T")
E = TypeVar("E")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T


@dataclass(frozen=True)
class Err(Generic[E]):
    error: E


Result = Union[Ok[T], Err[E]]

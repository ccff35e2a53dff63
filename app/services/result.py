# /classroom-ai-backend/app/services/result.py

"""
One return convention for every service-level mutation.

A mutation never raises a `ClassroomFault` at its caller; it returns a `Result`
whose `error` says what kind of failure happened. The router decides what the
user sees for each kind (a blocking HTTP error for storage, a 404 for config).
AI faults never show up here because the chat service has already turned them
into persisted messages.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Generic, Optional, TypeVar
import logging

from .faults import (
    ClassroomFault,
    AuthFault,
    NoContentFault,
    ServiceFault,
    StorageFault,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class ErrorKind(str, Enum):
    CONFIG = "config"
    AUTH = "auth"
    SERVICE = "service"
    NO_CONTENT = "no_content"
    STORAGE = "storage"


def kind_of(fault: ClassroomFault) -> ErrorKind:
    # NoContentFault subclasses ServiceFault, so it is checked first.
    if isinstance(fault, NoContentFault):
        return ErrorKind.NO_CONTENT
    if isinstance(fault, ServiceFault):
        return ErrorKind.SERVICE
    if isinstance(fault, AuthFault):
        return ErrorKind.AUTH
    if isinstance(fault, StorageFault):
        return ErrorKind.STORAGE
    return ErrorKind.CONFIG


@dataclass
class Result(Generic[T]):
    ok: bool
    value: Optional[T] = None
    error: Optional[ErrorKind] = None
    message: str = ""

    @classmethod
    def success(cls, value: T = None) -> "Result[T]":
        return cls(ok=True, value=value)

    @classmethod
    def failure(cls, fault: ClassroomFault) -> "Result[T]":
        return cls(ok=False, error=kind_of(fault), message=str(fault))


def run_mutation(fn: Callable[..., T], *args, **kwargs) -> Result[T]:
    """Calls `fn` and packs its outcome (or its fault) into a Result."""
    try:
        return Result.success(fn(*args, **kwargs))
    except ClassroomFault as e:
        logger.warning("Mutation %s failed (%s): %s", getattr(fn, "__name__", fn), kind_of(e).value, e)
        return Result.failure(e)

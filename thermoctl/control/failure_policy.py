"""
Failure Policy

Typed results for remote operations and the table that decides what the
control loop does with each kind of failure.

Today every kind is logged and the rest of the cycle is skipped; the next
cycle retries from the first fetch. New actions (e.g., retry with backoff)
are added by extending FailureAction and editing FAILURE_POLICY.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Generic, TypeVar

from ..common.exceptions import ApiError, ParseError, ProtocolError, TransportError

T = TypeVar("T")


class FailureKind(str, Enum):
    """Failure taxonomy for remote calls"""
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    PARSE = "parse"


class FailureAction(str, Enum):
    """What the loop does after a failed operation"""
    SKIP_CYCLE = "skip_cycle"


@dataclass(frozen=True)
class FailureRule:
    action: FailureAction
    log_level: int = logging.ERROR


FAILURE_POLICY: dict[FailureKind, FailureRule] = {
    FailureKind.TRANSPORT: FailureRule(FailureAction.SKIP_CYCLE, logging.ERROR),
    FailureKind.PROTOCOL: FailureRule(FailureAction.SKIP_CYCLE, logging.ERROR),
    FailureKind.PARSE: FailureRule(FailureAction.SKIP_CYCLE, logging.ERROR),
}


def classify(error: ApiError) -> FailureKind:
    """Map an API error to its failure kind"""
    if isinstance(error, ProtocolError):
        return FailureKind.PROTOCOL
    if isinstance(error, ParseError):
        return FailureKind.PARSE
    if isinstance(error, TransportError):
        return FailureKind.TRANSPORT
    # Plain ApiError: no response was obtained
    return FailureKind.TRANSPORT


def rule_for(kind: FailureKind) -> FailureRule:
    return FAILURE_POLICY[kind]


@dataclass(frozen=True)
class OperationResult(Generic[T]):
    """Success value or typed failure of one remote operation"""
    operation: str
    value: T | None = None
    error: ApiError | None = None
    kind: FailureKind | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, operation: str, value: Any = None) -> "OperationResult":
        return cls(operation=operation, value=value)

    @classmethod
    def failure(cls, operation: str, error: ApiError) -> "OperationResult":
        return cls(operation=operation, error=error, kind=classify(error))


async def attempt(operation: str, awaitable: Awaitable[T]) -> OperationResult[T]:
    """
    Await a remote call and wrap the outcome.

    Only ApiError is captured; anything else is a programming error and
    propagates to the caller.
    """
    try:
        value = await awaitable
    except ApiError as e:
        return OperationResult.failure(operation, e)
    return OperationResult.success(operation, value)

# tests/test_failure_policy.py

import asyncio
import logging

import pytest

from thermoctl.common.exceptions import ApiError, ParseError, ProtocolError, TransportError
from thermoctl.control.failure_policy import (
    FAILURE_POLICY,
    FailureAction,
    FailureKind,
    OperationResult,
    attempt,
    classify,
    rule_for,
)


@pytest.mark.parametrize("error,kind", [
    (TransportError("refused"), FailureKind.TRANSPORT),
    (ProtocolError("500", status_code=500), FailureKind.PROTOCOL),
    (ParseError("not a number"), FailureKind.PARSE),
    (ApiError("unknown"), FailureKind.TRANSPORT),
])
def test_classify(error, kind):
    assert classify(error) == kind


def test_every_kind_has_a_rule():
    assert set(FAILURE_POLICY) == set(FailureKind)
    for rule in FAILURE_POLICY.values():
        assert rule.action == FailureAction.SKIP_CYCLE
        assert rule.log_level == logging.ERROR

    assert rule_for(FailureKind.PARSE) is FAILURE_POLICY[FailureKind.PARSE]


def test_attempt_wraps_success():
    async def ok():
        return 21.5

    result = asyncio.run(attempt("get_temperature", ok()))

    assert result.ok
    assert result.value == 21.5
    assert result.kind is None


def test_attempt_wraps_api_error():
    async def fails():
        raise ProtocolError("Failed to get system state: 404 Not Found", "get_system_state", 404)

    result = asyncio.run(attempt("get_system_state", fails()))

    assert not result.ok
    assert result.kind == FailureKind.PROTOCOL
    assert result.operation == "get_system_state"
    assert result.error.status_code == 404


def test_attempt_lets_programming_errors_propagate():
    async def broken():
        raise KeyError("bug")

    with pytest.raises(KeyError):
        asyncio.run(attempt("get_temperature", broken()))


def test_error_messages_carry_kind_prefix():
    assert TransportError("timeout").message == "Transport Error: timeout"
    assert OperationResult.failure("op", ParseError("bad")).error.message == "Parse Error: bad"

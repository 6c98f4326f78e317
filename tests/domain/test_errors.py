from __future__ import annotations

from anesthesia_reports.domain.errors import (
    ClaimError,
    FatalSessionError,
    NetworkError,
    WorkflowCancelledError,
    find_fatal_session_error,
)


def test_find_fatal_session_error_walks_causes() -> None:
    fatal = FatalSessionError(code="TOKEN_EXPIRED")
    network = NetworkError()
    network.__context__ = fatal
    outer = ClaimError("claim failed", candidate_id="p-1", stage="fetch")
    outer.__cause__ = network

    assert find_fatal_session_error(outer) is fatal
    assert find_fatal_session_error(NetworkError()) is None


def test_find_fatal_session_error_survives_cycles() -> None:
    first = NetworkError()
    second = NetworkError()
    first.__context__ = second
    second.__context__ = first

    assert find_fatal_session_error(first) is None


def test_recoverability() -> None:
    assert NetworkError().recoverable
    assert NetworkError().message == "Network error"
    assert not FatalSessionError().recoverable
    assert FatalSessionError().message == "Session expired"
    assert not WorkflowCancelledError("stop").recoverable

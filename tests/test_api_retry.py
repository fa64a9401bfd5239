from __future__ import annotations

import asyncio
import json
import logging

import pytest

from genai_fakes import FakeAPIError, RecordingSleep
from orchestration import api_retry
from orchestration.api_retry import (
    GENERIC_ERROR_MESSAGE,
    backoff_delay,
    call_with_retry,
    classify_error,
    extract_error_message,
)


class FlakyCall:
    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.attempts = 0

    async def __call__(self):
        self.attempts += 1
        outcome = self.outcomes.pop(0)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome


def test_extract_error_message_unwraps_nested_json():
    payload = json.dumps({"error": {"code": 400, "message": "API key not valid."}})
    assert extract_error_message(RuntimeError(payload)) == "API key not valid."


def test_extract_error_message_falls_back_to_raw_text():
    assert extract_error_message(RuntimeError("socket closed")) == "socket closed"
    assert extract_error_message(RuntimeError('{"detail": "nope"}')) == '{"detail": "nope"}'


def test_extract_error_message_generic_fallbacks():
    assert extract_error_message("not an exception") == GENERIC_ERROR_MESSAGE
    assert extract_error_message(RuntimeError()) == GENERIC_ERROR_MESSAGE


def test_extract_error_message_prefers_sdk_message_attribute():
    error = FakeAPIError(429, "Resource has been exhausted (e.g. check quota).")
    assert extract_error_message(error) == "Resource has been exhausted (e.g. check quota)."


@pytest.mark.parametrize(
    "message",
    [
        "503 Service Unavailable",
        "The model is overloaded. Please try again later.",
        "MODEL OVERLOADED",
        json.dumps({"error": {"message": "The model is Overloaded."}}),
    ],
)
def test_overload_messages_are_retryable(message):
    assert classify_error(RuntimeError(message)).retryable is True


@pytest.mark.parametrize(
    "message",
    ["Invalid argument: foo", "Quota exceeded", "Request blocked: SAFETY", "500 Internal error"],
)
def test_other_messages_are_not_retryable(message):
    assert classify_error(RuntimeError(message)).retryable is False


def test_structured_503_code_is_retryable():
    api_error = classify_error(FakeAPIError(503, "Service temporarily unavailable"))
    assert api_error.retryable is True
    assert api_error.status_code == 503
    assert classify_error(FakeAPIError(400, "Invalid argument: foo")).retryable is False


def test_backoff_delay_grows_exponentially_with_jitter(monkeypatch):
    monkeypatch.setattr(api_retry.random, "random", lambda: 0.5)
    assert [backoff_delay(attempt) for attempt in range(3)] == [1.5, 2.5, 4.5]


def test_success_returns_immediately():
    call = FlakyCall("ok")
    sleep = RecordingSleep()

    assert asyncio.run(call_with_retry(call, sleep=sleep)) == "ok"
    assert call.attempts == 1
    assert sleep.delays == []


def test_non_retryable_error_is_attempted_once():
    error = RuntimeError("Invalid argument: foo")
    call = FlakyCall(error, "never reached")
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError) as exc_info:
        asyncio.run(call_with_retry(call, max_retries=5, sleep=sleep))

    assert exc_info.value is error
    assert call.attempts == 1
    assert sleep.delays == []


def test_retryable_error_exhausts_attempts_with_increasing_delays():
    call = FlakyCall(*(RuntimeError("503 overloaded") for _ in range(3)))
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError, match="503 overloaded"):
        asyncio.run(call_with_retry(call, max_retries=3, sleep=sleep))

    assert call.attempts == 3
    assert len(sleep.delays) == 2
    for attempt, delay in enumerate(sleep.delays):
        assert 2 ** attempt <= delay < 2 ** attempt + 1


def test_retry_then_success():
    call = FlakyCall(RuntimeError("The model is overloaded."), "candy")
    sleep = RecordingSleep()

    assert asyncio.run(call_with_retry(call, sleep=sleep)) == "candy"
    assert call.attempts == 2
    assert len(sleep.delays) == 1


def test_single_attempt_budget_never_sleeps():
    call = FlakyCall(RuntimeError("503"))
    sleep = RecordingSleep()

    with pytest.raises(RuntimeError):
        asyncio.run(call_with_retry(call, max_retries=1, sleep=sleep))

    assert call.attempts == 1
    assert sleep.delays == []


def test_invalid_retry_budget_is_rejected():
    with pytest.raises(ValueError):
        asyncio.run(call_with_retry(FlakyCall("ok"), max_retries=0))


def test_each_retry_logs_a_warning(caplog):
    call = FlakyCall(RuntimeError("503"), RuntimeError("503"), "ok")
    logger = logging.getLogger("tests.retry")

    with caplog.at_level(logging.WARNING, logger="tests.retry"):
        asyncio.run(call_with_retry(call, logger=logger, sleep=RecordingSleep()))

    warnings = [record.getMessage() for record in caplog.records if record.name == "tests.retry"]
    assert len(warnings) == 2
    assert "(Attempt 1/3)" in warnings[0]
    assert "(Attempt 2/3)" in warnings[1]

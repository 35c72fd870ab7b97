import json

import pytest

from conftest import FakeResponse, FakeSession, page
from xformer_core.errors import DecodeError, FetchError, RateLimitError
from xformer_core.guidebook.fetcher import RequestCounter, collection_url, multi_fetch, retry_after_seconds

FIRST = "https://gb.test/api/sessions/?guide=42"
SECOND = "https://gb.test/api/sessions/?guide=42&page=2"
THIRD = "https://gb.test/api/sessions/?guide=42&page=3"


def test_collection_url(config):
    assert collection_url(config, "schedule-tracks") == "https://gb.test/api/schedule-tracks/?guide=42"


def test_follows_next_and_preserves_order(config):
    session = FakeSession({
        FIRST: [page([{"id": 1}, {"id": 2}], SECOND)],
        SECOND: [page([{"id": 3}], THIRD)],
        THIRD: [page([{"id": 4}])],
    })
    counter = RequestCounter()

    body = multi_fetch(session, config, "sessions", counter)

    assert json.loads(body) == [{"id": 1}, {"id": 2}, {"id": 3}, {"id": 4}]
    assert [url for url, _ in session.calls] == [FIRST, SECOND, THIRD]
    assert counter.successful == 3


def test_sends_jwt_authorization(config):
    session = FakeSession({FIRST: [page([])]})
    multi_fetch(session, config, "sessions", RequestCounter())
    assert session.calls[0][1] == {"Authorization": "JWT secret"}


def test_empty_collection(config):
    session = FakeSession({FIRST: [page([], None)]})
    assert json.loads(multi_fetch(session, config, "sessions", RequestCounter())) == []


def test_counter_spans_calls(config):
    counter = RequestCounter(successful=5)
    session = FakeSession({FIRST: [page([{"id": 1}])]})
    multi_fetch(session, config, "sessions", counter)
    assert counter.successful == 6


def test_rate_limit_retries_same_url(config):
    slept = []
    session = FakeSession({
        FIRST: [page([{"id": 1}], SECOND)],
        SECOND: [FakeResponse(429, headers={"Retry-After": "2"}, text="slow down"), page([{"id": 2}])],
    })
    counter = RequestCounter()

    body = multi_fetch(session, config, "sessions", counter, sleep=slept.append)

    assert json.loads(body) == [{"id": 1}, {"id": 2}]
    assert slept == [3]
    assert [url for url, _ in session.calls] == [FIRST, SECOND, SECOND]
    assert counter.successful == 2


@pytest.mark.parametrize("headers", [{}, {"Retry-After": "0"}, {"Retry-After": "soon"}])
def test_rate_limit_without_retry_after_fails(config, headers):
    session = FakeSession({FIRST: [FakeResponse(429, headers=headers, text="go away")]})
    counter = RequestCounter()

    with pytest.raises(RateLimitError) as excinfo:
        multi_fetch(session, config, "sessions", counter, sleep=lambda s: pytest.fail("should not sleep"))

    assert excinfo.value.status == 429
    assert excinfo.value.headers == headers
    assert counter.successful == 0


def test_other_status_fails_with_body(config):
    session = FakeSession({FIRST: [FakeResponse(500, text="boom")]})
    with pytest.raises(FetchError) as excinfo:
        multi_fetch(session, config, "sessions", RequestCounter())
    assert excinfo.value.status == 500
    assert excinfo.value.body == "boom"
    assert "boom" in str(excinfo.value)
    assert not isinstance(excinfo.value, RateLimitError)


def test_bad_envelope_keeps_payload(config):
    session = FakeSession({FIRST: [FakeResponse(200, text="<html>nope</html>")]})
    with pytest.raises(DecodeError) as excinfo:
        multi_fetch(session, config, "sessions", RequestCounter())
    assert excinfo.value.payload == b"<html>nope</html>"


def test_retry_after_seconds():
    assert retry_after_seconds({"Retry-After": " 7 "}) == 7
    assert retry_after_seconds({}) == 0
    assert retry_after_seconds({"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"}) == 0


def test_null_envelope_fields_are_zero_values(config):
    session = FakeSession({FIRST: [FakeResponse(payload={"count": None, "next": None, "previous": None,
                                                        "results": None})]})
    counter = RequestCounter()

    assert json.loads(multi_fetch(session, config, "sessions", counter)) == []
    assert counter.successful == 1

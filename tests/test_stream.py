"""Tests for the event stream collector and the deployment snapshot fetch."""

import asyncio
import json
import time

import httpx
import pytest

from sst_introspect.stream import (
    LineBuffer,
    collect_events,
    fetch_completed,
    parse_event_line,
)
from tests.utils import SERVER_URL, invoked, log_line, make_client, ndjson

STREAM_BODY = ndjson(
    invoked("r1"),
    {"type": "project.StackCommandEvent", "event": {"App": "héllo ✓"}},
    log_line("r1", "données → ok"),
) + b'{"type": "trailing", "event": {}}'


def parse_lines_directly(body: bytes) -> list[dict]:
    *complete, _ = body.decode("utf-8").split("\n")
    return [json.loads(line) for line in complete if line.strip()]


def events_from_chunks(chunks: list[bytes]) -> list[dict]:
    buffer = LineBuffer()
    events = []
    for chunk in chunks:
        for line in buffer.feed(chunk):
            event = parse_event_line(line)
            if event is not None:
                events.append(event.model_dump())
    return events


def test_line_buffer_every_single_split_point():
    expected = parse_lines_directly(STREAM_BODY)
    assert len(expected) == 3

    for i in range(len(STREAM_BODY) + 1):
        chunks = [STREAM_BODY[:i], STREAM_BODY[i:]]
        assert events_from_chunks(chunks) == expected, f"split at {i}"


def test_line_buffer_byte_at_a_time():
    chunks = [STREAM_BODY[i : i + 1] for i in range(len(STREAM_BODY))]

    assert events_from_chunks(chunks) == parse_lines_directly(STREAM_BODY)


def test_line_buffer_keeps_unterminated_fragment():
    buffer = LineBuffer()

    assert buffer.feed(b"one\ntw") == ["one"]
    assert buffer.pending == "tw"
    assert buffer.feed(b"o\n\nthree") == ["two", ""]
    assert buffer.pending == "three"


@pytest.mark.parametrize(
    "line",
    ["", "   ", "not json", "{", "[1, 2]", "42", '{"event": {}}', '{"type": 1}'],
)
def test_parse_event_line_rejects(line):
    assert parse_event_line(line) is None


def test_parse_event_line_defaults_payload():
    event = parse_event_line('{"type": "A", "event": null, "extra": true}')

    assert event is not None
    assert event.type == "A"
    assert event.event == {}


def test_collect_events_until_stream_closes():
    body = (
        ndjson({"type": "A", "event": {"n": 1}})
        + b"garbage line\n\n"
        + ndjson({"type": "B", "event": {"n": 2}})
        + b'{"type": "C", "event": {"n": 3}}'
    )

    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/stream"
        return httpx.Response(200, content=body)

    async def run():
        async with make_client(handler) as client:
            return await collect_events(SERVER_URL, time_budget=5, client=client)

    events = asyncio.run(run())

    assert [e.type for e in events] == ["A", "B"]
    assert [e.event["n"] for e in events] == [1, 2]


def test_collect_events_returns_partial_result_at_deadline():
    async def never_ending_stream():
        yield ndjson({"type": "A", "event": {}})
        yield b'{"type": "B", "ev'
        yield b'ent": {}}\n{"type": "C"'
        await asyncio.sleep(30)
        yield ndjson({"type": "D", "event": {}})

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=never_ending_stream())

    async def run():
        async with make_client(handler) as client:
            return await collect_events(SERVER_URL, time_budget=0.2, client=client)

    start = time.monotonic()
    events = asyncio.run(run())
    elapsed = time.monotonic() - start

    assert [e.type for e in events] == ["A", "B"]
    assert elapsed < 5


def test_collect_events_propagates_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async def run():
        async with make_client(handler) as client:
            return await collect_events(SERVER_URL, time_budget=1, client=client)

    with pytest.raises(httpx.ConnectError):
        asyncio.run(run())


def test_collect_events_propagates_error_status():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502)

    async def run():
        async with make_client(handler) as client:
            return await collect_events(SERVER_URL, time_budget=1, client=client)

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(run())


COMPLETED = {
    "App": "my-app",
    "Stage": "dev",
    "Finished": True,
    "Errors": [{"URN": "urn:pulumi:dev::my-app::aws:s3:Bucket::Bucket", "Message": "denied"}],
    "Outputs": {"url": "https://example.com"},
    "Hints": {"Web": "http://localhost:3000"},
    "Resources": [
        {"Type": "aws:s3/bucket:Bucket", "URN": "urn:1", "Outputs": {"bucket": "b"}},
    ],
}


def test_fetch_completed():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/api/completed"
        return httpx.Response(200, json=COMPLETED)

    async def run():
        async with make_client(handler) as client:
            return await fetch_completed(SERVER_URL, client=client)

    completed = asyncio.run(run())

    assert completed is not None
    assert completed.app == "my-app"
    assert completed.finished is True
    assert completed.errors[0].message == "denied"
    assert completed.resources[0].type == "aws:s3/bucket:Bucket"
    assert completed.hints == {"Web": "http://localhost:3000"}


def test_fetch_completed_tolerates_null_collections():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"App": "a", "Stage": "dev", "Finished": False, "Errors": None, "Resources": None, "Outputs": None, "Hints": None},
        )

    async def run():
        async with make_client(handler) as client:
            return await fetch_completed(SERVER_URL, client=client)

    completed = asyncio.run(run())

    assert completed.errors == []
    assert completed.resources == []
    assert completed.outputs == {}


def test_fetch_completed_not_ready():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404)

    async def run():
        async with make_client(handler) as client:
            return await fetch_completed(SERVER_URL, client=client)

    assert asyncio.run(run()) is None


def test_fetch_completed_propagates_connection_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    async def run():
        async with make_client(handler) as client:
            return await fetch_completed(SERVER_URL, client=client)

    with pytest.raises(httpx.ConnectError):
        asyncio.run(run())

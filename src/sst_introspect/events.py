"""
Folds over an already collected, ordered list of stream events.

Neither function mutates its input, so the grouping and the invocation
view can be computed from the same collection.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import ValidationError

from sst_introspect.constants import (
    FUNCTION_ERROR_EVENT,
    FUNCTION_INVOKED_EVENT,
    FUNCTION_LOG_EVENT,
    FUNCTION_RESPONSE_EVENT,
)
from sst_introspect.models import Event, FunctionInvocation, InvocationError, as_text

logger = logging.getLogger(__name__)


def group_events_by_type(events: Iterable[Event]) -> dict[str, list[Event]]:
    """Bucket events by type; keys in first-seen order, buckets in arrival order."""
    grouped: dict[str, list[Event]] = {}
    for event in events:
        grouped.setdefault(event.type, []).append(event)
    return grouped


class InvocationTracker:
    """
    Rebuilds function invocations from interleaved invoked/log/response/error events.

    Records are keyed by request id. A log, response or error for a request
    whose invoked event has not been seen yet is dropped, and is not replayed
    if the invoked event arrives later. A repeated invoked event for the same
    request id replaces the record, discarding its logs.
    """

    def __init__(self) -> None:
        self.invocations: dict[str, FunctionInvocation] = {}
        self._handlers = {
            FUNCTION_INVOKED_EVENT: self._on_invoked,
            FUNCTION_LOG_EVENT: self._on_log,
            FUNCTION_RESPONSE_EVENT: self._on_response,
            FUNCTION_ERROR_EVENT: self._on_error,
        }

    def handle(self, event: Event) -> None:
        handler = self._handlers.get(event.type)
        if handler is None:
            return
        request_id = event.event.get("RequestID")
        if request_id is None:
            logger.debug("Ignoring %s without RequestID", event.type)
            return
        try:
            handler(str(request_id), event.event)
        except ValidationError as e:
            logger.debug("Skipping malformed %s for %s: %s", event.type, request_id, e)

    def _on_invoked(self, request_id: str, payload: dict[str, Any]) -> None:
        if request_id in self.invocations:
            logger.debug("Request %s invoked again, replacing its record", request_id)
        self.invocations[request_id] = FunctionInvocation(
            function_id=payload.get("FunctionID"),
            request_id=request_id,
            worker_id=payload.get("WorkerID"),
            input=payload.get("Input"),
        )

    def _on_log(self, request_id: str, payload: dict[str, Any]) -> None:
        invocation = self.invocations.get(request_id)
        if invocation is not None:
            invocation.logs.append(as_text(payload.get("Line")) or "")

    def _on_response(self, request_id: str, payload: dict[str, Any]) -> None:
        invocation = self.invocations.get(request_id)
        if invocation is not None:
            invocation.output = payload.get("Output")

    def _on_error(self, request_id: str, payload: dict[str, Any]) -> None:
        invocation = self.invocations.get(request_id)
        if invocation is not None:
            invocation.error = InvocationError(
                type=payload.get("ErrorType"),
                message=payload.get("ErrorMessage"),
                trace=payload.get("Trace"),
            )


def extract_function_invocations(
    events: Iterable[Event],
) -> dict[str, FunctionInvocation]:
    tracker = InvocationTracker()
    for event in events:
        tracker.handle(event)
    return tracker.invocations

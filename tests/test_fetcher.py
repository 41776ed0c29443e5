"""Tests for the history client, the concurrent fetch and the full pipeline.

HTTP is stubbed with httpx.MockTransport; coroutines are driven with asyncio.run.
"""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest

from shift_compare.errors import HistoryFetchError
from shift_compare.fetcher import fetch_shift_histories
from shift_compare.models import ProductionMetric
from shift_compare.service import compare_shifts

from .factories import by_window, history_payload, series


def _run(coro):
    return asyncio.run(coro)


async def _compare(client, current, previous, **kwargs):
    async with client:
        return await compare_shifts(client, 7, current, previous, **kwargs)


async def _fetch(client, current, previous):
    async with client:
        return await fetch_shift_histories(client, 7, current, previous)


class TestRequests:
    def test_one_query_per_window(
        self, history_client_factory, recorded_requests, current_shift, previous_shift
    ):
        client = history_client_factory(by_window({}))
        _run(_fetch(client, current_shift, previous_shift))

        assert len(recorded_requests) == 2
        starts = sorted(r.url.params["start"] for r in recorded_requests)
        assert starts == [previous_shift.start, current_shift.start]

    def test_request_shape(
        self, history_client_factory, recorded_requests, current_shift, previous_shift
    ):
        client = history_client_factory(by_window({}))
        _run(_fetch(client, current_shift, previous_shift))

        request = recorded_requests[0]
        assert request.method == "GET"
        assert request.url.path == "/api/machines/7/productionhistory"
        assert request.headers["Authorization"] == "Bearer test-token"
        assert request.headers["Accept"] == "application/json"
        assert [request.url.params[f"modes[{i}]"] for i in range(3)] == [
            "goodparts",
            "rejectparts",
            "downtime",
        ]
        assert request.url.params["intervalBase"] == "hour"
        assert "filter" not in request.url.params

    def test_results_returned_in_window_order(
        self, history_client_factory, current_shift, previous_shift
    ):
        client = history_client_factory(
            by_window(
                {
                    current_shift.start: history_payload(
                        series("goodparts", ("2025-01-10T07:00:00Z", 1))
                    ),
                    previous_shift.start: history_payload(
                        series("downtime", ("2025-01-09T07:00:00Z", 2))
                    ),
                }
            )
        )
        current, previous = _run(_fetch(client, current_shift, previous_shift))
        assert [s.key for s in current] == ["goodparts"]
        assert [s.key for s in previous] == ["downtime"]

    def test_wire_fields_parsed(self, history_client_factory, current_shift, previous_shift):
        payload = [
            {
                "Key": "GoodParts",
                "Id": 3,
                "ShortName": "Good",
                "TimeBase": "hour",
                "IntervalStart": "2025-01-10T06:00:00Z",
                "IntervalEnd": "2025-01-10T18:00:00Z",
                "History": [
                    {"DateTime": "2025-01-10T07:00:00Z", "Value": 12, "GroupBy": "", "GroupId": 0}
                ],
            }
        ]
        client = history_client_factory(by_window({current_shift.start: payload}))
        current, _ = _run(_fetch(client, current_shift, previous_shift))

        assert current[0].key == "GoodParts"
        assert current[0].short_name == "Good"
        assert current[0].history[0].timestamp == "2025-01-10T07:00:00Z"
        assert current[0].history[0].value == 12


class TestFailures:
    """Any failed query fails the whole comparison; no partial result."""

    def _failing_previous(self, current_shift, response: httpx.Response):
        ok = history_payload(series("goodparts", ("2025-01-10T07:00:00Z", 1)))

        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.params["start"] == current_shift.start:
                return httpx.Response(200, content=json.dumps(ok))
            return response

        return handler

    def test_server_error_fails_comparison(
        self, history_client_factory, current_shift, previous_shift
    ):
        client = history_client_factory(
            self._failing_previous(current_shift, httpx.Response(500, text="boom"))
        )
        with pytest.raises(HistoryFetchError) as exc_info:
            _run(_compare(client, current_shift, previous_shift))
        assert exc_info.value.status_code == 500
        assert "HTTP 500" in str(exc_info.value)

    def test_api_message_used(self, history_client_factory, current_shift, previous_shift):
        client = history_client_factory(
            self._failing_previous(
                current_shift, httpx.Response(400, json={"Message": "Machine 7 not found"})
            )
        )
        with pytest.raises(HistoryFetchError, match="Machine 7 not found"):
            _run(_compare(client, current_shift, previous_shift))

    def test_unauthorized(self, history_client_factory, current_shift, previous_shift):
        client = history_client_factory(lambda request: httpx.Response(401))
        with pytest.raises(HistoryFetchError, match="Authentication failed") as exc_info:
            _run(_compare(client, current_shift, previous_shift))
        assert exc_info.value.status_code == 401

    def test_network_error(self, history_client_factory, current_shift, previous_shift):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = history_client_factory(handler)
        with pytest.raises(HistoryFetchError, match="connection refused"):
            _run(_compare(client, current_shift, previous_shift))

    def test_transport_error_kept_as_cause(
        self, history_client_factory, current_shift, previous_shift
    ):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        client = history_client_factory(handler)
        with pytest.raises(HistoryFetchError) as exc_info:
            _run(_fetch(client, current_shift, previous_shift))
        assert isinstance(exc_info.value.__cause__, httpx.ConnectError)

    def test_status_error_kept_as_cause(
        self, history_client_factory, current_shift, previous_shift
    ):
        client = history_client_factory(
            self._failing_previous(current_shift, httpx.Response(500, text="boom"))
        )
        with pytest.raises(HistoryFetchError) as exc_info:
            _run(_fetch(client, current_shift, previous_shift))
        assert isinstance(exc_info.value.__cause__, httpx.HTTPStatusError)
        assert exc_info.value.__cause__.response.status_code == 500

    def test_malformed_payload(self, history_client_factory, current_shift, previous_shift):
        client = history_client_factory(
            self._failing_previous(
                current_shift, httpx.Response(200, json=[{"Key": "goodparts", "History": "x"}])
            )
        )
        with pytest.raises(HistoryFetchError, match="Malformed"):
            _run(_compare(client, current_shift, previous_shift))

    def test_negative_value_rejected_as_malformed(
        self, history_client_factory, current_shift, previous_shift
    ):
        payload = [{"Key": "downtime", "History": [{"DateTime": "2025-01-10T07:00:00Z", "Value": -1}]}]
        client = history_client_factory(by_window({current_shift.start: payload}))
        with pytest.raises(HistoryFetchError):
            _run(_compare(client, current_shift, previous_shift))

    def test_unexpected_error_wrapped(self, current_shift, previous_shift):
        class BrokenClient:
            async def get_production_history(self, machine_id, params):
                if params["start"] == previous_shift.start:
                    raise RuntimeError("socket closed")
                return []

        with pytest.raises(HistoryFetchError, match="socket closed"):
            _run(fetch_shift_histories(BrokenClient(), 7, current_shift, previous_shift))

    def test_sibling_query_cancelled_on_failure(self, current_shift, previous_shift):
        cancelled = []

        class SlowAndFailingClient:
            async def get_production_history(self, machine_id, params):
                if params["start"] == current_shift.start:
                    try:
                        await asyncio.sleep(10)
                    except asyncio.CancelledError:
                        cancelled.append(params["start"])
                        raise
                    return []
                raise HistoryFetchError("previous shift failed")

        with pytest.raises(HistoryFetchError, match="previous shift failed"):
            _run(fetch_shift_histories(SlowAndFailingClient(), 7, current_shift, previous_shift))
        assert cancelled == [current_shift.start]


class TestPipeline:
    def test_end_to_end(self, history_client_factory, current_shift, previous_shift):
        client = history_client_factory(
            by_window(
                {
                    current_shift.start: history_payload(
                        series(
                            "GoodParts",
                            ("2025-01-10T07:00:00Z", 10),
                            ("2025-01-10T08:00:00Z", 20),
                        ),
                        series("RejectParts"),
                        series("Downtime"),
                    ),
                    previous_shift.start: history_payload(
                        series("rejectparts", ("2025-01-10T08:00:00Z", 5)),
                    ),
                }
            )
        )
        points = _run(_compare(client, current_shift, previous_shift))

        assert [(p.hour_index, p.hour_label) for p in points] == [(0, "07:00"), (1, "08:00")]
        assert points[0].current_good == 10
        assert points[1].current_good == 20
        assert points[1].previous_reject == 5

    def test_timezone_applied(self, history_client_factory, current_shift, previous_shift):
        client = history_client_factory(
            by_window(
                {
                    current_shift.start: history_payload(
                        series("goodparts", ("2025-01-10T07:15:00Z", 42))
                    )
                }
            )
        )
        points = _run(_compare(client, current_shift, previous_shift, tz="Asia/Kolkata"))
        assert points[0].hour_label == "12:00"

    def test_custom_metric_set(self, history_client_factory, recorded_requests, current_shift):
        client = history_client_factory(by_window({}))

        async def fetch():
            async with client:
                return await fetch_shift_histories(
                    client, 7, current_shift, current_shift, metrics=[ProductionMetric.DOWNTIME]
                )

        _run(fetch())
        assert all(r.url.params["modes[0]"] == "downtime" for r in recorded_requests)
        assert all("modes[1]" not in r.url.params for r in recorded_requests)

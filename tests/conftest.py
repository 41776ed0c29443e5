"""Pytest configuration and fixtures for the shift comparison tests."""

from __future__ import annotations

from collections.abc import Callable

import httpx
import pytest

from shift_compare.client import HistoryClient
from shift_compare.models import ShiftWindow

from .factories import CURRENT_SHIFT, PREVIOUS_SHIFT

Handler = Callable[[httpx.Request], httpx.Response]


@pytest.fixture
def current_shift() -> ShiftWindow:
    return CURRENT_SHIFT


@pytest.fixture
def previous_shift() -> ShiftWindow:
    return PREVIOUS_SHIFT


@pytest.fixture
def recorded_requests() -> list[httpx.Request]:
    return []


@pytest.fixture
def history_client_factory(
    recorded_requests: list[httpx.Request],
) -> Callable[[Handler], HistoryClient]:
    """Build a HistoryClient whose requests are answered by ``handler``.

    Every request is recorded in ``recorded_requests``.
    """

    def factory(handler: Handler) -> HistoryClient:
        def recording(request: httpx.Request) -> httpx.Response:
            recorded_requests.append(request)
            return handler(request)

        return HistoryClient(
            base_url="https://data.example.com",
            token="test-token",
            transport=httpx.MockTransport(recording),
        )

    return factory

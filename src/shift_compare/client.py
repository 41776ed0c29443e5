"""Production history client.

Thin async transport over the machine data API: one GET per history query,
bearer token injection, no retries and no caching. Every failure is raised as
HistoryFetchError so callers see a single failure type.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Self

import httpx
from pydantic import TypeAdapter, ValidationError

from shift_compare.errors import HistoryFetchError
from shift_compare.models import MetricSeriesResponse

if TYPE_CHECKING:
    from types import TracebackType

    from shift_compare.config import ShiftCompareConfig

logger = logging.getLogger("shift_compare.client")

_SERIES_ADAPTER = TypeAdapter(list[MetricSeriesResponse])


class HistoryClient:
    """Queries ``/api/machines/{id}/productionhistory`` on the data API."""

    def __init__(
        self,
        *,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"Accept": "application/json"}
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

    @classmethod
    def from_config(
        cls,
        config: ShiftCompareConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> HistoryClient:
        return cls(
            base_url=config.api_base_url,
            token=config.api_token,
            timeout=config.request_timeout_sec,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def get_production_history(
        self,
        machine_id: int,
        params: dict[str, str],
    ) -> list[MetricSeriesResponse]:
        """Fetch one history query; returns one response object per requested mode."""
        logger.info(
            "Fetching production history for machine %s (%s .. %s)",
            machine_id,
            params.get("start"),
            params.get("end"),
        )
        try:
            response = await self._client.get(
                f"/api/machines/{machine_id}/productionhistory",
                params=params,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.warning(
                "Production history HTTP %d for machine %s: %s",
                status,
                machine_id,
                exc.response.text[:200],
            )
            raise HistoryFetchError(_status_message(exc.response), status_code=status) from exc
        except httpx.HTTPError as exc:
            logger.warning("Production history request error for machine %s", machine_id)
            raise HistoryFetchError(f"Production history request failed: {exc}") from exc

        try:
            series = _SERIES_ADAPTER.validate_json(response.content)
        except ValidationError as exc:
            raise HistoryFetchError(
                f"Malformed production history payload ({exc.error_count()} error(s))"
            ) from exc

        logger.info("Production history response: %d modes returned", len(series))
        return series


def _status_message(response: httpx.Response) -> str:
    """Human-readable message for a non-success response, preferring the API's own."""
    if response.status_code == 401:
        return "Authentication failed: token missing, expired or invalid"
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("Message"):
        return str(body["Message"])
    return f"Production history request failed with HTTP {response.status_code}"

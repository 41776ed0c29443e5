"""Shift Comparison - hour-by-hour current vs previous production shift.

Quick Start:
    from shift_compare.client import HistoryClient
    from shift_compare.models import ShiftWindow
    from shift_compare.service import compare_shifts

    async with HistoryClient(base_url="https://data.example.com", token=token) as client:
        records = await compare_shifts(
            client,
            machine_id=42,
            current=ShiftWindow(start="2025-01-10T06:00:00Z", end="2025-01-10T18:00:00Z"),
            previous=ShiftWindow(start="2025-01-09T06:00:00Z", end="2025-01-09T18:00:00Z"),
            tz="Europe/Berlin",
        )
"""

__version__ = "0.1.0"

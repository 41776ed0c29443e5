"""Allow ``python -m shift_compare``."""

from shift_compare.cli import app

app()

"""Ingestion layer.

This package contains adapters that turn raw sensor readings and
power-state events into normalized pybattmon models.
"""

__all__: list[str] = []

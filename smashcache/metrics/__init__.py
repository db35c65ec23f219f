"""Metrics module - Hit/miss/object counters."""

from smashcache.metrics.counters import (
    CounterAggregator,
    CounterKeys,
    CounterSnapshot,
)

__all__ = [
    "CounterAggregator",
    "CounterKeys",
    "CounterSnapshot",
]

"""Prometheus instruments for lab account workflows."""

from __future__ import annotations

from prometheus_client import Counter

ACCOUNT_TRANSITIONS = Counter(
    "lab_account_transitions_total",
    "Completed lab account state transitions.",
    ["operation"],
)

"""Ordered, fail-fast test flows with process-wide log capture."""

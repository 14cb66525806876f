# src/calls/__init__.py — v1
"""Wrappers for calls to rate-limited external services."""

from candidaterank.calls.retry import (
    CallState,
    CooldownState,
    RateLimitedCaller,
    classify_error,
    is_rate_limited,
)

__all__ = [
    "CallState",
    "CooldownState",
    "RateLimitedCaller",
    "classify_error",
    "is_rate_limited",
]

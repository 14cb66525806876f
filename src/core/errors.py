# src/core/errors.py — v1
"""Exception hierarchy shared by the engine.

Only failures a caller can act on are raised. Upstream "no data" outcomes
(profile not found, malformed scrape) are logged and surface as None.
"""

from __future__ import annotations


class CandidateRankError(Exception):
    """Base class for all candidaterank errors."""


class EmbeddingError(CandidateRankError):
    """The embedding gateway failed to produce a vector for a text."""

    def __init__(self, text: str, cause: Exception | None = None) -> None:
        self.text = text
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Embedding failed for {text!r}{detail}")


class StoreError(CandidateRankError):
    """The relational store rejected or failed an operation."""


class RateLimitRetryExhausted(CandidateRankError):
    """A configured rate-limit retry cap was reached for one call."""

    def __init__(self, call_name: str, attempts: int, last_error: Exception) -> None:
        self.call_name = call_name
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(
            f"Call '{call_name}' still rate limited after {attempts} attempts: {last_error}"
        )

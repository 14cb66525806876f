# src/embeddings/base_embedder.py — v2
"""Abstract embedding gateway interface."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseEmbedder(ABC):
    """Unified interface for all embedding providers.

    Vectors have a fixed dimensionality per model. Provider errors are
    raised unchanged so the call wrapper can classify rate limiting.
    """

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Embed a single text."""

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch of texts. Providers with a batch endpoint override this."""
        return [await self.embed(text) for text in texts]

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Output vector dimensions."""

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier."""

    @property
    @abstractmethod
    def model_name(self) -> str:
        """Model identifier."""

# src/embeddings/openai_embedder.py — v2
"""OpenAI embedding adapter.

Uses the openai SDK (AsyncOpenAI). Default model: text-embedding-ada-002.
Requires: pip install openai.
"""

from __future__ import annotations

import logging

from candidaterank.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class OpenAIEmbedder(BaseEmbedder):
    """Embeddings via the OpenAI API."""

    def __init__(
        self,
        model: str = "text-embedding-ada-002",
        api_key: str | None = None,
        dimensions: int = 1536,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._dimensions = dimensions
        self.__client = None

    @property
    def _client(self):
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError(
                    "openai package required: pip install openai"
                ) from e
            self.__client = openai.AsyncOpenAI(api_key=self._api_key or None)
        return self.__client

    async def embed(self, text: str) -> list[float]:
        """Embed one text (float encoding)."""
        response = await self._client.embeddings.create(
            input=text, model=self._model, encoding_format="float"
        )
        return response.data[0].embedding

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Embed a batch in one request; results keep input order."""
        if not texts:
            return []
        response = await self._client.embeddings.create(
            input=texts, model=self._model, encoding_format="float"
        )
        ordered = sorted(response.data, key=lambda item: item.index)
        logger.debug("Embedded %d texts with %s", len(texts), self._model)
        return [item.embedding for item in ordered]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def model_name(self) -> str:
        return self._model

# src/embeddings/sentence_tf_embedder.py — v2
"""Sentence Transformers embedding adapter (local inference).

Requires: pip install sentence-transformers.
"""

from __future__ import annotations

import asyncio
import logging

from candidaterank.embeddings.base_embedder import BaseEmbedder

logger = logging.getLogger(__name__)


class SentenceTransformerEmbedder(BaseEmbedder):
    """Local embeddings via sentence-transformers.

    Encoding runs in a worker thread so the event loop keeps serving
    other requests while the model computes.
    """

    def __init__(
        self,
        model: str = "all-MiniLM-L6-v2",
        dimensions: int = 384,
    ) -> None:
        self._model_name = model
        self._dimensions = dimensions
        self.__model = None

    @property
    def _model(self):
        if self.__model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as e:
                raise ImportError(
                    "sentence-transformers package required: "
                    "pip install sentence-transformers"
                ) from e
            self.__model = SentenceTransformer(self._model_name)
            self._dimensions = self.__model.get_sentence_embedding_dimension()
        return self.__model

    async def embed(self, text: str) -> list[float]:
        vectors = await self.embed_many([text])
        return vectors[0]

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        if not texts:
            return []
        model = self._model
        embeddings = await asyncio.to_thread(
            model.encode, texts, show_progress_bar=False, normalize_embeddings=True
        )
        return [emb.tolist() for emb in embeddings]

    @property
    def dimensions(self) -> int:
        return self._dimensions

    @property
    def provider_name(self) -> str:
        return "sentence_transformers"

    @property
    def model_name(self) -> str:
        return self._model_name

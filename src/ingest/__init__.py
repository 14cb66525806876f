# src/ingest/__init__.py — v1
"""Profile ingestion, seed resolution and bounded network crawling."""

from candidaterank.ingest.base_source import (
    LocationClassifier,
    ProfileSource,
    SkillClassifier,
)
from candidaterank.ingest.ingestor import ProfileIngestor
from candidaterank.ingest.network_crawler import CrawlResult, NetworkCrawler
from candidaterank.ingest.seed_resolver import SeedResolver

__all__ = [
    "CrawlResult",
    "LocationClassifier",
    "NetworkCrawler",
    "ProfileIngestor",
    "ProfileSource",
    "SeedResolver",
    "SkillClassifier",
]
